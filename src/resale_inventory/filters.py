"""Filters and filter choices for the item list view."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .schemas import InventoryItem, ItemFacets


def _distinct(values: Iterable[str]) -> List[str]:
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)


def collect_facets(items: Sequence[InventoryItem]) -> ItemFacets:
    """Return the distinct categories and conditions in first-occurrence order."""

    return ItemFacets(
        categories=_distinct(item.item_category for item in items),
        conditions=_distinct(item.item_condition.value for item in items),
    )


def _normalize_condition(condition: str) -> str:
    # "-" and "_" fold to spaces to match the stored form; case is not folded
    return condition.replace("-", " ").replace("_", " ")


def filter_items(
    items: Sequence[InventoryItem],
    *,
    category: Optional[str] = None,
    condition: Optional[str] = None,
) -> List[InventoryItem]:
    """Keep items matching every given filter; blank filters are ignored."""

    wanted_condition = _normalize_condition(condition) if condition else None
    matches: List[InventoryItem] = []
    for item in items:
        if category and item.item_category != category:
            continue
        if wanted_condition and item.item_condition.value != wanted_condition:
            continue
        matches.append(item)
    return matches


__all__ = ["collect_facets", "filter_items"]
