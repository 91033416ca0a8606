"""Create and delete operations for items and categories."""
from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, List, Optional

from .repositories import CategoryRepository, ItemRepository, StoredRecord
from .schemas import (
    MAX_PRICE,
    MAX_QUANTITY,
    Category,
    CategoryCreate,
    InventoryItem,
    ItemCondition,
)

logger = logging.getLogger(__name__)

REQUIRED_ITEM_FIELDS = (
    "item_name",
    "item_category",
    "item_condition",
    "purchase_price",
    "sale_price",
    "quantity_in_stock",
    "purchase_date",
)


class ValidationError(ValueError):
    """Raised when a create request is missing fields or carries bad values."""

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields = list(fields)


def next_identifier(existing: Iterable[int]) -> int:
    """Return one more than the largest identifier, or 1 for an empty collection."""

    return max(existing, default=0) + 1


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def _optional_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _parse_price(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        parsed = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def _parse_quantity(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _parse_date(value: Any, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format", [field]) from exc


def build_item(payload: Mapping[str, Any], item_id: int) -> InventoryItem:
    """Validate a raw create request and turn it into an item with ``item_id``."""

    missing = [field for field in REQUIRED_ITEM_FIELDS if _is_missing(payload.get(field))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", missing)

    purchase_price = _parse_price(payload["purchase_price"])
    sale_price = _parse_price(payload["sale_price"])
    quantity = _parse_quantity(payload["quantity_in_stock"])
    if purchase_price is None or sale_price is None or quantity is None:
        invalid = [
            name
            for name, parsed in (
                ("purchase_price", purchase_price),
                ("sale_price", sale_price),
                ("quantity_in_stock", quantity),
            )
            if parsed is None
        ]
        raise ValidationError(
            "Purchase price, sale price, and quantity must be valid numbers", invalid
        )
    negative = [
        name
        for name, parsed in (
            ("purchase_price", purchase_price),
            ("sale_price", sale_price),
            ("quantity_in_stock", quantity),
        )
        if parsed < 0
    ]
    if negative:
        raise ValidationError(f"Fields cannot be negative: {', '.join(negative)}", negative)
    oversized = [
        name
        for name, parsed, limit in (
            ("purchase_price", purchase_price, MAX_PRICE),
            ("sale_price", sale_price, MAX_PRICE),
            ("quantity_in_stock", quantity, MAX_QUANTITY),
        )
        if parsed > limit
    ]
    if oversized:
        raise ValidationError(
            f"Fields exceed the allowed maximum: {', '.join(oversized)}", oversized
        )

    try:
        condition = ItemCondition.parse(payload["item_condition"])
    except ValueError as exc:
        allowed = ", ".join(member.value for member in ItemCondition)
        raise ValidationError(
            f"item_condition must be one of: {allowed}", ["item_condition"]
        ) from exc

    purchase_date = _parse_date(payload["purchase_date"], "purchase_date")
    sale_date_raw = payload.get("sale_date")
    sale_date = None if _is_missing(sale_date_raw) else _parse_date(sale_date_raw, "sale_date")

    return InventoryItem(
        item_id=item_id,
        item_name=str(payload["item_name"]).strip(),
        item_category=str(payload["item_category"]).strip(),
        item_subcategory=_optional_text(payload.get("item_subcategory")),
        item_condition=condition,
        purchase_price=purchase_price,
        sale_price=sale_price,
        quantity_in_stock=quantity,
        purchase_date=purchase_date,
        sale_date=sale_date,
        profit_margin=sale_price - purchase_price,
        description=_optional_text(payload.get("description")),
    )


def _taken_identifiers(rows: Iterable[StoredRecord[Any]]) -> List[int]:
    return [row.identifier for row in rows if row.identifier is not None]


def create_item(repository: ItemRepository, payload: Mapping[str, Any]) -> InventoryItem:
    with repository.lock():
        rows = repository.load_rows()
        item = build_item(payload, next_identifier(_taken_identifiers(rows)))
        rows.append(repository.wrap(item))
        repository.save_rows(rows)
    logger.info("Created item %d (%s)", item.item_id, item.item_name)
    return item


def delete_item(repository: ItemRepository, item_id: int) -> bool:
    """Remove the item with ``item_id``; returns whether a row was removed.

    Rows that no longer validate can still be deleted by their stored id.
    """

    with repository.lock():
        rows = repository.load_rows()
        remaining = [row for row in rows if row.identifier != item_id]
        repository.save_rows(remaining)
    removed = len(remaining) != len(rows)
    if removed:
        logger.info("Deleted item %d", item_id)
    return removed


def create_category(repository: CategoryRepository, data: CategoryCreate) -> Category:
    with repository.lock():
        rows = repository.load_rows()
        category = Category(
            id=next_identifier(_taken_identifiers(rows)),
            name=data.name,
            subcategories=list(data.subcategories),
        )
        rows.append(repository.wrap(category))
        repository.save_rows(rows)
    logger.info("Created category %d (%s)", category.id, category.name)
    return category


def delete_category(repository: CategoryRepository, category_id: int) -> bool:
    """Remove a category by id. Items naming the category are left untouched."""

    with repository.lock():
        rows = repository.load_rows()
        remaining = [row for row in rows if row.identifier != category_id]
        repository.save_rows(remaining)
    removed = len(remaining) != len(rows)
    if removed:
        logger.info("Deleted category %d", category_id)
    return removed



__all__ = [
    "REQUIRED_ITEM_FIELDS",
    "ValidationError",
    "build_item",
    "create_category",
    "create_item",
    "delete_category",
    "delete_item",
    "next_identifier",
]
