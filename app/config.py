from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CORS_ORIGIN = "http://localhost:5173"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (or a .env file).
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database connection
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "postgres"
    DB_SSLMODE: str = "disable"
    DATABASE_URL: Optional[str] = None

    # Connection pool
    DB_POOL_MAX_CONNS: int = 25
    DB_POOL_MIN_CONNS: int = 5
    DB_POOL_MAX_LIFETIME: int = 3600
    DB_POOL_MAX_IDLE_TIME: int = 1800
    DB_HEALTH_CHECK_PERIOD: int = 60
    DB_CONNECT_TIMEOUT: int = 10

    # Deadlines (seconds)
    QUERY_TIMEOUT: float = 5.0
    AGGREGATE_TIMEOUT: float = 3.0
    HEALTH_CHECK_TIMEOUT: float = 2.0

    # HTTP server
    CORS_ALLOWED_ORIGINS: str = DEFAULT_CORS_ORIGIN
    PORT: int = 8080
    APP_MODE: str = "debug"
    SHUTDOWN_GRACE_PERIOD: int = 5

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?sslmode={self.DB_SSLMODE}"
        )

    @property
    def cors_origins(self) -> List[str]:
        origins = [o.strip() for o in self.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]
        return origins or [DEFAULT_CORS_ORIGIN]

    @property
    def is_release(self) -> bool:
        return self.APP_MODE.lower() == "release"


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
