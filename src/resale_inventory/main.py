"""ASGI entrypoint for running the service."""
from __future__ import annotations

import logging

import uvicorn

from .config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def run() -> None:
    """Convenience wrapper used by ``python -m resale_inventory.main``."""

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "resale_inventory.api:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
