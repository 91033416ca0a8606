"""Typed whole-collection access to the JSON documents."""
from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .schemas import Category, InventoryItem, User
from .storage import JsonDocumentStore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


DEFAULT_USERS: List[Dict[str, Any]] = [{"username": "admin", "password": "admin"}]

DEFAULT_ITEMS: List[Dict[str, Any]] = [
    {
        "item_id": 1,
        "item_name": 'Samsung 4K Smart TV 55"',
        "item_category": "Electronics",
        "item_subcategory": "Televisions",
        "item_condition": "like new",
        "purchase_price": 45000,
        "sale_price": 55000,
        "quantity_in_stock": 5,
        "purchase_date": "2024-01-15",
        "profit_margin": 10000,
        "description": "55-inch 4K Smart TV with HDR",
    },
    {
        "item_id": 2,
        "item_name": "Leather Sofa Set",
        "item_category": "Furniture",
        "item_subcategory": "Sofas",
        "item_condition": "new",
        "purchase_price": 75000,
        "sale_price": 95000,
        "quantity_in_stock": 3,
        "purchase_date": "2024-01-10",
        "profit_margin": 20000,
        "description": "3-seater leather sofa with cushions",
    },
]

DEFAULT_CATEGORIES: List[Dict[str, Any]] = [
    {
        "id": 1,
        "name": "Electronics",
        "subcategories": [
            "Televisions",
            "Remote Controls",
            "Routers",
            "Iron Boxes",
            "Light Bulbs",
            "Aerials",
            "Smartphones",
            "Laptops",
        ],
    },
    {
        "id": 2,
        "name": "Furniture",
        "subcategories": ["Sofas", "Chairs", "Tables", "Beds", "Wardrobes", "Desks", "Bookshelves"],
    },
    {
        "id": 3,
        "name": "Motorcycles",
        "subcategories": ["Street Bikes", "Cruisers", "Sport Bikes", "Scooters", "Off-road"],
    },
    {
        "id": 4,
        "name": "Bicycles",
        "subcategories": ["Mountain Bikes", "Road Bikes", "Hybrid Bikes", "Electric Bikes", "BMX"],
    },
]


@dataclass
class StoredRecord(Generic[ModelT]):
    """One row of a document: the JSON as stored plus its model when it validates.

    Rows the model rejects keep ``record=None`` and are written back untouched,
    so a mutation never drops data it cannot interpret.
    """

    raw: Any
    record: Optional[ModelT] = None
    identifier: Optional[int] = None


class DocumentRepository(Generic[ModelT]):
    """Pairs one named document with a record model and a default seed."""

    document: ClassVar[str]
    model: ClassVar[Type[BaseModel]]
    default_records: ClassVar[List[Dict[str, Any]]]
    identifier_field: ClassVar[Optional[str]] = None

    def __init__(self, store: JsonDocumentStore) -> None:
        self.store = store

    def lock(self):
        return self.store.lock(self.document)

    def load_rows(self) -> List[StoredRecord[ModelT]]:
        raw = self.store.load(self.document, self.default_records)
        if not isinstance(raw, list):
            logger.warning(
                "Document %s is not a JSON array; using default records", self.document
            )
            raw = deepcopy(self.default_records)
        rows: List[StoredRecord[ModelT]] = []
        for index, entry in enumerate(raw):
            record: Optional[ModelT]
            try:
                record = self.model.model_validate(entry)  # type: ignore[assignment]
            except ValidationError as exc:
                logger.warning(
                    "Record #%d in %s does not validate, keeping it as stored: %s",
                    index,
                    self.document,
                    exc,
                )
                record = None
            rows.append(
                StoredRecord(raw=entry, record=record, identifier=self._identifier(entry))
            )
        return rows

    def load(self) -> List[ModelT]:
        return [row.record for row in self.load_rows() if row.record is not None]

    def wrap(self, record: ModelT) -> StoredRecord[ModelT]:
        raw = record.model_dump(mode="json")
        return StoredRecord(raw=raw, record=record, identifier=self._identifier(raw))

    def save_rows(self, rows: List[StoredRecord[ModelT]]) -> None:
        self.store.save(self.document, [row.raw for row in rows])

    def save(self, records: List[ModelT]) -> None:
        """Replace the whole document with ``records``."""

        self.store.save(
            self.document, [record.model_dump(mode="json") for record in records]
        )

    def _identifier(self, raw: Any) -> Optional[int]:
        if self.identifier_field is None or not isinstance(raw, dict):
            return None
        value = raw.get(self.identifier_field)
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return None


class UserRepository(DocumentRepository[User]):
    document = "users"
    model = User
    default_records = DEFAULT_USERS


class ItemRepository(DocumentRepository[InventoryItem]):
    document = "items"
    model = InventoryItem
    default_records = DEFAULT_ITEMS
    identifier_field = "item_id"


class CategoryRepository(DocumentRepository[Category]):
    document = "categories"
    model = Category
    default_records = DEFAULT_CATEGORIES
    identifier_field = "id"


__all__ = [
    "DEFAULT_CATEGORIES",
    "DEFAULT_ITEMS",
    "DEFAULT_USERS",
    "CategoryRepository",
    "DocumentRepository",
    "ItemRepository",
    "StoredRecord",
    "UserRepository",
]
