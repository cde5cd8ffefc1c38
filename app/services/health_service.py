import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine

from app.database import pool_status

logger = logging.getLogger(__name__)


class HealthService:
    """Database liveness checks against the shared engine."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def ping(self) -> None:
        """Round trip a trivial statement. Raises on failure."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    async def check(self, timeout: float) -> None:
        """
        Ping the database from a worker thread with a deadline.

        Raises:
            asyncio.TimeoutError: if the ping does not finish in time
            Exception: whatever the driver raised
        """
        # An executor future is abandoned on timeout instead of awaited
        loop = asyncio.get_running_loop()
        await asyncio.wait_for(loop.run_in_executor(None, self.ping), timeout=timeout)

    async def probe_forever(self, period: float, timeout: float) -> None:
        """
        Periodically ping the pool and log its state.

        Runs until cancelled; failures are logged and probing continues.
        """
        while True:
            await asyncio.sleep(period)
            try:
                await self.check(timeout)
                logger.debug("Pool probe ok: %s", pool_status(self.engine))
            except Exception as e:
                logger.warning(f"Pool probe failed: {e!r}")
