from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from resale_inventory.api import create_app
from resale_inventory.config import Settings
from resale_inventory.repositories import CategoryRepository, ItemRepository
from resale_inventory.storage import JsonDocumentStore


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture()
def settings(data_dir: Path) -> Settings:
    return Settings(
        data_dir=data_dir,
        environment="test",
        access_control_allow_origin="*",
        app_name="Test Inventory Tracker",
    )


@pytest.fixture()
def store(data_dir: Path) -> JsonDocumentStore:
    return JsonDocumentStore(data_dir)


@pytest.fixture()
def items(store: JsonDocumentStore) -> ItemRepository:
    return ItemRepository(store)


@pytest.fixture()
def categories(store: JsonDocumentStore) -> CategoryRepository:
    return CategoryRepository(store)


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
