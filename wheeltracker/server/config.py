"""Configuration management for the wheel tracker.

This module handles configuration loading from environment variables,
providing sensible defaults for development and production.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration settings.

    Attributes:
        app_name: Application name
        version: Application version
        debug: Debug mode flag
        database_path: SQLite database file (supports ~ expansion)
        finnhub_api_key: API key for the Finnhub quote provider
        finnhub_base_url: Finnhub REST base URL
        request_timeout: Provider request timeout in seconds
        max_retries: Provider retry attempts for transient failures
        retry_delay: Initial backoff delay between retries (seconds)
        cors_origins: List of allowed CORS origins
        host: Server host address
        port: Server port number
    """

    model_config = SettingsConfigDict(env_prefix="WHEELTRACKER_", case_sensitive=False)

    app_name: str = "Wheel Tracker API"
    version: str = "1.0.0"
    debug: bool = False

    # Database configuration
    database_path: str = "~/.wheeltracker/ledger.db"

    # Market data provider
    finnhub_api_key: Optional[str] = None
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    request_timeout: int = 10
    max_retries: int = 3
    retry_delay: float = 1.0

    # CORS configuration - allow local development origins
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def database_url(self) -> str:
        """Get SQLAlchemy database URL.

        Returns:
            Database URL string for SQLAlchemy
        """
        expanded_path = os.path.expanduser(self.database_path)
        return f"sqlite:///{expanded_path}"

    def get_database_path(self) -> Path:
        """Get expanded database path as Path object.

        Returns:
            Resolved database file path
        """
        return Path(os.path.expanduser(self.database_path))


# Global settings instance
settings = Settings()
