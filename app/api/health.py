import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from app.config import Settings, get_settings
from app.database import get_engine
from app.schemas.common import HealthResponse
from app.services.health_service import HealthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": HealthResponse}},
    summary="Health check",
    description="Check that the API can reach the database."
)
async def health_check(
    engine: Engine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    """
    Ping the database with a short deadline.

    Returns 200 when the round trip succeeds, 503 otherwise.
    """
    service = HealthService(engine)

    try:
        await service.check(settings.HEALTH_CHECK_TIMEOUT)
    except asyncio.TimeoutError:
        message = f"database ping timed out after {settings.HEALTH_CHECK_TIMEOUT}s"
    except Exception as e:
        message = str(e)
    else:
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc),
            database="connected"
        )

    logger.error(f"Health check failed: {message}")
    body = HealthResponse(
        status="unavailable",
        timestamp=datetime.now(timezone.utc),
        database="disconnected",
        error="Database unavailable",
        message=message
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(mode="json")
    )
