"""Application configuration objects."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pydantic settings used to configure the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(
        default="Resale Inventory Tracker",
        description="Human friendly name for the API.",
    )
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment flag used for logging.",
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the users, items and categories documents.",
    )
    recent_items_limit: int = Field(
        default=5,
        ge=1,
        description="Number of items shown in the dashboard's recent list.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level used by the uvicorn entrypoint.",
    )
    access_control_allow_origin: str = Field(
        default="*",
        description="Allowed CORS origins for the API.",
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown logging level: {value!r}")
        return normalized


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of :class:`Settings`."""

    return Settings()


__all__ = ["Settings", "get_settings"]
