"""
Adapter settings and logging configuration.
"""

import logging
import sys
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from ..utils.logging.structured import create_development_formatter


class Settings(BaseSettings):
    """Settings with environment variable support."""

    # Gemini
    google_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_API_KEY", "RAGCONNECT_GOOGLE_API_KEY"),
        description="Google AI API key used when a session is created without one",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Google AI REST endpoint",
    )
    gemini_timeout_seconds: int = Field(
        default=120, description="Total timeout for one Gemini request"
    )
    gemini_model: str = Field(default="gemini-pro", description="Default Gemini model")
    gemini_temperature: float = Field(default=0.1, description="Default temperature")
    gemini_top_p: float = Field(default=1.0, description="Default nucleus sampling")

    # Azure Cosmos DB for MongoDB vCore
    mongo_app_name: str = Field(
        default="RAGCONNECT_PYTHON",
        description="appname reported to the Mongo server by factory-built clients",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level for ragconnect.*")

    class Config:
        env_prefix = "RAGCONNECT_"
        env_file = ".env"
        extra = "ignore"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the ``ragconnect`` logger with development-friendly output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level = getattr(logging, level.upper())

    app_logger = logging.getLogger("ragconnect")
    app_logger.setLevel(log_level)

    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(create_development_formatter())
    app_logger.addHandler(console_handler)

    # Host applications keep their own root handlers
    app_logger.propagate = False


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
