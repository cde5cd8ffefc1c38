import logging
import time
from contextlib import ExitStack

from sqlalchemy import create_engine, event, exc, text
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine with the configured pool policy.

    - pool_size keeps DB_POOL_MIN_CONNS connections around
    - max_overflow allows bursting up to DB_POOL_MAX_CONNS
    - pool_recycle bounds the lifetime of every connection
    - pool_timeout caps the wait for a free connection at QUERY_TIMEOUT
    - connections idle for longer than DB_POOL_MAX_IDLE_TIME are
      discarded when next checked out
    """
    url = settings.database_url
    connect_args = {}
    if url.startswith("postgresql"):
        connect_args["connect_timeout"] = settings.DB_CONNECT_TIMEOUT

    engine = create_engine(
        url,
        pool_size=settings.DB_POOL_MIN_CONNS,
        max_overflow=max(settings.DB_POOL_MAX_CONNS - settings.DB_POOL_MIN_CONNS, 0),
        pool_recycle=settings.DB_POOL_MAX_LIFETIME,
        pool_pre_ping=True,
        pool_timeout=settings.QUERY_TIMEOUT,
        connect_args=connect_args,
    )
    _install_idle_recycling(engine, settings.DB_POOL_MAX_IDLE_TIME)
    return engine


def _install_idle_recycling(engine: Engine, max_idle: int) -> None:
    @event.listens_for(engine, "checkin")
    def _mark_idle(dbapi_connection, connection_record):
        connection_record.info["idle_since"] = time.monotonic()

    @event.listens_for(engine, "checkout")
    def _drop_idle(dbapi_connection, connection_record, connection_proxy):
        idle_since = connection_record.info.pop("idle_since", None)
        if idle_since is not None and time.monotonic() - idle_since > max_idle:
            logger.debug("Discarding connection idle for more than %ss", max_idle)
            # The pool invalidates the record and reconnects
            raise exc.DisconnectionError("connection exceeded max idle time")


# Create SQLAlchemy engine with connection pooling
engine = build_engine(settings)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency to get database session.
    Yields a database session and closes it after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_engine() -> Engine:
    """Dependency returning the process-wide engine."""
    return engine


def pool_status(engine: Engine) -> str:
    """Human readable pool statistics."""
    return engine.pool.status()


def warm_pool(engine: Engine, min_conns: int) -> None:
    """
    Open ``min_conns`` connections at once, ping over one of them, and
    return them all to the pool so they stay open.

    Pools without a fixed size (e.g. SQLite's StaticPool) are only pinged.

    Raises:
        SQLAlchemyError: if the database cannot be reached
    """
    count = max(min_conns, 1) if isinstance(engine.pool, QueuePool) else 1
    with ExitStack() as stack:
        connections = [stack.enter_context(engine.connect()) for _ in range(count)]
        connections[0].execute(text("SELECT 1"))
