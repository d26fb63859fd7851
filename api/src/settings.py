import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .errors import ConfigurationError


class Settings(BaseModel):
    """Process-wide configuration, built once at startup and passed down explicitly"""

    # 3Commas platform credentials
    three_commas_api_key: str = Field(..., min_length=1)
    three_commas_api_secret: str = Field(..., min_length=1)
    three_commas_base_url: str = "https://api.3commas.io"
    three_commas_api_prefix: str = "/public/api"
    remote_timeout_seconds: float = Field(15.0, gt=0)

    # Retry policy for transient remote failures
    remote_retry_attempts: int = Field(2, ge=0, le=10)
    remote_retry_backoff_seconds: float = Field(0.5, ge=0)

    # Exchange (Binance) endpoints used for credential validation
    binance_base_url: str = "https://api.binance.com"
    exchange_timeout_seconds: float = Field(10.0, gt=0)

    # Local service
    database_url: str = Field(..., min_length=1)
    api_secret_key: str = Field(..., min_length=1)
    encryption_key: str = Field(..., min_length=1)
    environment: str = "development"

    # Logging
    logtail_source_token: Optional[str] = None
    logtail_host: Optional[str] = None

    @property
    def async_database_url(self) -> str:
        # Convert sync postgresql:// to async postgresql+asyncpg://
        if self.database_url.startswith("postgresql://"):
            return self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return self.database_url

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from the environment (and a .env file when present)"""
        load_dotenv()

        required = {
            "three_commas_api_key": "THREE_COMMAS_API_KEY",
            "three_commas_api_secret": "THREE_COMMAS_API_SECRET",
            "database_url": "DATABASE_URL",
            "api_secret_key": "API_SECRET_KEY",
            "encryption_key": "ENCRYPTION_KEY",
        }
        values = {}
        missing = []
        for field, env_name in required.items():
            value = os.getenv(env_name)
            if not value:
                missing.append(env_name)
            values[field] = value
        if missing:
            raise ConfigurationError(
                f"Required environment variables are not set: {', '.join(missing)}"
            )

        optional = {
            "three_commas_base_url": "THREE_COMMAS_BASE_URL",
            "three_commas_api_prefix": "THREE_COMMAS_API_PREFIX",
            "remote_timeout_seconds": "REMOTE_TIMEOUT_SECONDS",
            "remote_retry_attempts": "REMOTE_RETRY_ATTEMPTS",
            "remote_retry_backoff_seconds": "REMOTE_RETRY_BACKOFF_SECONDS",
            "binance_base_url": "BINANCE_BASE_URL",
            "exchange_timeout_seconds": "EXCHANGE_TIMEOUT_SECONDS",
            "environment": "ENVIRONMENT",
            "logtail_source_token": "LOGTAIL_SOURCE_TOKEN",
            "logtail_host": "LOGTAIL_HOST",
        }
        for field, env_name in optional.items():
            value = os.getenv(env_name)
            if value:
                values[field] = value

        return cls(**values)
