"""Inventory statistics for the dashboard."""
from __future__ import annotations

from typing import Iterable, List, Sequence

from .schemas import CategoryRollup, InventoryDashboard, InventoryItem, InventoryStats

RECENT_ITEMS_LIMIT = 5


def compute_stats(items: Iterable[InventoryItem]) -> InventoryStats:
    """Sum quantity, stock value and profit overall and per category.

    Value is ``sale_price * quantity_in_stock`` and profit is
    ``profit_margin * quantity_in_stock``. Categories appear in the order they
    are first seen in ``items``.
    """

    stats = InventoryStats()
    for item in items:
        quantity = item.quantity_in_stock
        value = item.sale_price * quantity
        profit = item.profit_margin * quantity
        stats.total_items += quantity
        stats.total_value += value
        stats.total_profit += profit
        rollup = stats.category_stats.setdefault(item.item_category, CategoryRollup())
        rollup.count += quantity
        rollup.value += value
        rollup.profit += profit
    return stats


def recent_items(
    items: Sequence[InventoryItem], limit: int = RECENT_ITEMS_LIMIT
) -> List[InventoryItem]:
    # sorted() is stable with reverse=True, so equal dates keep insertion order
    ordered = sorted(items, key=lambda item: item.purchase_date, reverse=True)
    return ordered[: max(limit, 0)]


def build_dashboard(
    items: Sequence[InventoryItem], limit: int = RECENT_ITEMS_LIMIT
) -> InventoryDashboard:
    return InventoryDashboard(stats=compute_stats(items), recent_items=recent_items(items, limit))


__all__ = ["RECENT_ITEMS_LIMIT", "build_dashboard", "compute_stats", "recent_items"]
