"""Utility helpers for administrative tasks."""
from __future__ import annotations

import logging
from typing import Dict

from .config import Settings, get_settings
from .main import configure_logging
from .repositories import CategoryRepository, ItemRepository, UserRepository
from .storage import JsonDocumentStore

logger = logging.getLogger(__name__)


def init_data(settings: Settings | None = None) -> Dict[str, int]:
    """Seed any missing documents and return the record count of each."""

    settings = settings or get_settings()
    store = JsonDocumentStore(settings.data_dir)
    counts: Dict[str, int] = {}
    for repository in (UserRepository(store), ItemRepository(store), CategoryRepository(store)):
        counts[repository.document] = len(repository.load())
    return counts


def cli_init_data() -> None:
    """CLI wrapper executed from :mod:`python -m`."""

    settings = get_settings()
    configure_logging(settings.log_level)
    for document, count in init_data(settings).items():
        logger.info("%s: %d records in %s", document, count, settings.data_dir)


if __name__ == "__main__":
    cli_init_data()
