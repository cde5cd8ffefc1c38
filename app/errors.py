import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def error_body(error: str, message: str) -> dict:
    """Build the JSON body shared by every error response."""
    return {
        "error": error,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Render HTTPException as an error body.

    ``detail`` may be a plain string or a dict with ``error`` and
    ``message`` keys.
    """
    if isinstance(exc.detail, dict):
        error = str(exc.detail.get("error", "Error"))
        message = str(exc.detail.get("message", ""))
    else:
        error = message = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error, message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed query parameters are a 400, echoing the parse failure."""
    problems = []
    for err in exc.errors():
        # loc is ("query", "<param>")
        field = ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0])
        problems.append(f"{field}: {err['msg']}")
    message = "; ".join(problems)

    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid query parameters", message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
