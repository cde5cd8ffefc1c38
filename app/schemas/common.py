from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class ErrorResponse(BaseModel):
    """Body returned for every non-2xx response."""
    error: str
    message: str
    timestamp: datetime


class HealthResponse(BaseModel):
    """Health check result."""
    status: str
    timestamp: datetime
    database: str
    error: Optional[str] = None
    message: Optional[str] = None
