from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    SERVICE_NAME: str = "educonnect-analytics"
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Supabase: auth keys and the Postgres database holding the contacts table
    SUPABASE_URL: str
    SUPABASE_JWKS_URL: str | None = None
    SUPABASE_DB_URL: str

    # Database pool
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 6
    DB_POOL_TIMEOUT: float = 15.0
    DB_POOL_MAX_IDLE: float = 300.0
    DB_POOL_MAX_LIFETIME: float = 3600.0
    DB_STATEMENT_TIMEOUT_MS: int = 10_000

    # Analytics
    ANALYTICS_DEFAULT_TIMEZONE: str = "UTC"
    REPORT_FILENAME_PREFIX: str = "educonnect-analytics"

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("ANALYTICS_DEFAULT_TIMEZONE")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"ANALYTICS_DEFAULT_TIMEZONE is not an IANA zone: {value}") from e
        return value

    def jwks_url(self) -> str:
        if self.SUPABASE_JWKS_URL:
            return self.SUPABASE_JWKS_URL
        return f"{self.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"

    def get_db_pool_config(self) -> dict:
        """Keyword arguments for AsyncConnectionPool, minus the connection hooks."""
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }
        if self.environment == "production":
            config["min_size"] = max(config["min_size"], 2)
        return config


settings = Settings()
