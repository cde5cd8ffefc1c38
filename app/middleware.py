import logging
import time
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Settings
from app.errors import error_body

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("app.access")


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Install request middleware.

    Starlette runs the last added middleware first, so the stack is
    CORS -> access log -> recovery -> routes.
    """

    @app.middleware("http")
    async def recover_from_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body("Internal server error", str(e)),
            )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        latency_ms = (time.perf_counter() - started) * 1000
        client = request.client.host if request.client else "-"
        access_logger.info(
            "[%s] %s %s %d %.2fms %s",
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            request.method,
            request.url.path,
            response.status_code,
            latency_ms,
            client,
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=12 * 60 * 60,
    )
