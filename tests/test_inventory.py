import json
import threading
from datetime import date
from typing import Any, Dict, List

import pytest

from resale_inventory import crud
from resale_inventory.filters import collect_facets, filter_items
from resale_inventory.repositories import DEFAULT_ITEMS, CategoryRepository, ItemRepository
from resale_inventory.schemas import (
    MAX_PRICE,
    MAX_QUANTITY,
    CategoryCreate,
    InventoryItem,
    ItemCondition,
)
from resale_inventory.stats import build_dashboard, compute_stats, recent_items


def _payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "item_name": "Mountain Bike",
        "item_category": "Bicycles",
        "item_subcategory": "Mountain Bikes",
        "item_condition": "gently used",
        "purchase_price": "12000",
        "sale_price": "15500.50",
        "quantity_in_stock": "2",
        "purchase_date": "2024-02-01",
    }
    payload.update(overrides)
    return payload


def _item(item_id: int, category: str, purchase_date: str, **fields: Any) -> InventoryItem:
    record: Dict[str, Any] = {
        "item_id": item_id,
        "item_name": f"Item {item_id}",
        "item_category": category,
        "item_condition": "new",
        "purchase_price": 100,
        "sale_price": 150,
        "quantity_in_stock": 1,
        "purchase_date": purchase_date,
        "profit_margin": 50,
    }
    record.update(fields)
    return InventoryItem.model_validate(record)


def test_default_items_are_seeded(items: ItemRepository) -> None:
    loaded = items.load()

    assert [item.item_id for item in loaded] == [1, 2]
    assert loaded[0].item_name.startswith("Samsung")
    assert loaded[0].item_condition is ItemCondition.LIKE_NEW
    assert [item.profit_margin for item in loaded] == [10000, 20000]


def test_create_item_assigns_next_id_and_margin(items: ItemRepository) -> None:
    created = crud.create_item(items, _payload())

    assert created.item_id == 3
    assert created.purchase_price == 12000
    assert created.sale_price == 15500.5
    assert created.quantity_in_stock == 2
    assert created.profit_margin == created.sale_price - created.purchase_price
    assert created.purchase_date == date(2024, 2, 1)
    assert created.sale_date is None
    assert created.description == ""
    assert items.load()[-1] == created


def test_create_item_on_empty_collection_starts_at_one(items: ItemRepository) -> None:
    items.save([])

    created = crud.create_item(items, _payload())

    assert created.item_id == 1


def test_create_item_id_exceeds_gaps(items: ItemRepository) -> None:
    items.save([_item(7, "Tools", "2024-01-01"), _item(3, "Tools", "2024-01-02")])

    created = crud.create_item(items, _payload())

    assert created.item_id == 8


def test_create_item_reports_missing_fields(items: ItemRepository) -> None:
    payload = _payload(item_category="  ")
    del payload["purchase_price"]

    with pytest.raises(crud.ValidationError) as excinfo:
        crud.create_item(items, payload)

    assert excinfo.value.fields == ["item_category", "purchase_price"]
    assert "purchase_price" in str(excinfo.value)
    assert len(items.load()) == 2


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"sale_price": "cheap"}, "sale_price"),
        ({"quantity_in_stock": "2.5"}, "quantity_in_stock"),
        ({"purchase_price": "nan"}, "purchase_price"),
    ],
)
def test_create_item_rejects_non_numeric(
    items: ItemRepository, overrides: Dict[str, Any], field: str
) -> None:
    with pytest.raises(crud.ValidationError) as excinfo:
        crud.create_item(items, _payload(**overrides))

    assert "must be valid numbers" in str(excinfo.value)
    assert excinfo.value.fields == [field]


def test_create_item_rejects_bad_condition_and_date(items: ItemRepository) -> None:
    with pytest.raises(crud.ValidationError, match="item_condition"):
        crud.create_item(items, _payload(item_condition="broken"))
    with pytest.raises(crud.ValidationError, match="purchase_date"):
        crud.create_item(items, _payload(purchase_date="15/01/2024"))
    with pytest.raises(crud.ValidationError, match="cannot be negative"):
        crud.create_item(items, _payload(quantity_in_stock=-1))


def test_create_item_normalizes_condition_spelling(items: ItemRepository) -> None:
    created = crud.create_item(items, _payload(item_condition="Like-New", sale_date="2024-03-01"))

    assert created.item_condition is ItemCondition.LIKE_NEW
    assert created.sale_date == date(2024, 3, 1)


def test_create_item_rejects_oversized_quantity(items: ItemRepository) -> None:
    with pytest.raises(crud.ValidationError) as excinfo:
        crud.create_item(items, _payload(quantity_in_stock="9" * 400))

    assert excinfo.value.fields == ["quantity_in_stock"]
    assert "allowed maximum" in str(excinfo.value)
    assert len(items.load()) == 2
    compute_stats(items.load())


def test_create_item_accepts_values_at_the_limits(items: ItemRepository) -> None:
    created = crud.create_item(
        items,
        _payload(purchase_price=0, sale_price=MAX_PRICE, quantity_in_stock=MAX_QUANTITY),
    )

    assert created.quantity_in_stock == MAX_QUANTITY
    assert compute_stats(items.load()).total_items == 5 + 3 + MAX_QUANTITY



def test_delete_item(items: ItemRepository) -> None:
    assert crud.delete_item(items, 1) is True
    assert [item.item_id for item in items.load()] == [2]

    assert crud.delete_item(items, 99) is False
    assert [item.item_id for item in items.load()] == [2]


def _stored_items(items: ItemRepository) -> List[Dict[str, Any]]:
    return json.loads(items.store.path_for("items").read_text(encoding="utf-8"))


def test_create_item_keeps_rows_that_do_not_validate(items: ItemRepository) -> None:
    legacy = dict(DEFAULT_ITEMS[1], purchase_date="01/10/2024")
    items.store.save("items", [dict(DEFAULT_ITEMS[0]), legacy])

    created = crud.create_item(items, _payload())

    assert created.item_id == 3
    stored = _stored_items(items)
    assert [record["item_id"] for record in stored] == [1, 2, 3]
    assert stored[1] == legacy
    assert [item.item_id for item in items.load()] == [1, 3]


def test_create_item_id_counts_unreadable_rows(items: ItemRepository) -> None:
    items.store.save("items", [dict(DEFAULT_ITEMS[0]), {"item_id": 40, "item_name": "Half a row"}])

    created = crud.create_item(items, _payload())

    assert created.item_id == 41


def test_delete_item_removes_unreadable_row_by_id(items: ItemRepository) -> None:
    items.store.save("items", [dict(DEFAULT_ITEMS[0]), {"item_id": 9, "item_condition": "mint"}])

    assert crud.delete_item(items, 9) is True
    assert _stored_items(items) == [DEFAULT_ITEMS[0]]



def test_concurrent_creates_keep_every_item(items: ItemRepository) -> None:
    threads = [
        threading.Thread(target=crud.create_item, args=(items, _payload(item_name=f"Bike {n}")))
        for n in range(10)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    ids = [item.item_id for item in items.load()]
    assert sorted(ids) == list(range(1, 13))


def test_create_and_delete_category(categories: CategoryRepository, items: ItemRepository) -> None:
    created = crud.create_category(
        categories, CategoryCreate(name="Tools", subcategories=["Hand Tools", "Power Tools"])
    )
    assert created.id == 5
    assert created.subcategories == ["Hand Tools", "Power Tools"]

    assert crud.delete_category(categories, 1) is True
    assert [category.id for category in categories.load()] == [2, 3, 4, 5]
    # items keep referencing the removed category by name
    assert items.load()[0].item_category == "Electronics"

    assert crud.delete_category(categories, 42) is False
    assert len(categories.load()) == 4


def test_category_create_cleans_input() -> None:
    data = CategoryCreate(name="  Garden ", subcategories=["Hoses", " ", "Hoses"])

    assert data.name == "Garden"
    assert data.subcategories == ["Hoses", "Hoses"]
    assert CategoryCreate(name="Books").subcategories == []


def test_compute_stats_empty() -> None:
    stats = compute_stats([])

    assert stats.total_items == 0
    assert stats.total_value == 0
    assert stats.total_profit == 0
    assert stats.category_stats == {}


def test_compute_stats_rolls_up_categories(items: ItemRepository) -> None:
    loaded = items.load() + [
        _item(3, "Electronics", "2024-01-20", sale_price=2000, profit_margin=500, quantity_in_stock=4)
    ]

    stats = compute_stats(loaded)

    assert stats.total_items == 12
    assert stats.total_value == 55000 * 5 + 95000 * 3 + 2000 * 4
    assert stats.total_profit == 10000 * 5 + 20000 * 3 + 500 * 4
    assert list(stats.category_stats) == ["Electronics", "Furniture"]
    electronics = stats.category_stats["Electronics"]
    assert (electronics.count, electronics.value, electronics.profit) == (9, 283000, 52000)
    assert stats.total_value == sum(rollup.value for rollup in stats.category_stats.values())


def test_recent_items_sorted_and_truncated() -> None:
    collection = [
        _item(1, "A", "2024-01-01"),
        _item(2, "A", "2024-03-01"),
        _item(3, "A", "2024-02-01"),
        _item(4, "A", "2024-03-01"),
        _item(5, "A", "2023-12-31"),
        _item(6, "A", "2024-02-15"),
    ]

    recent = recent_items(collection)

    assert [item.item_id for item in recent] == [2, 4, 6, 3, 1]
    assert [item.item_id for item in collection] == [1, 2, 3, 4, 5, 6]
    assert [item.item_id for item in recent_items(collection, limit=2)] == [2, 4]


def test_build_dashboard_serializes_camel_case(items: ItemRepository) -> None:
    payload = build_dashboard(items.load()).model_dump(mode="json", by_alias=True)

    assert set(payload) == {"stats", "recentItems"}
    assert payload["stats"]["totalItems"] == 8
    assert payload["stats"]["categoryStats"]["Furniture"]["profit"] == 60000
    assert [item["item_id"] for item in payload["recentItems"]] == [1, 2]


def test_filter_items_by_category_and_condition() -> None:
    collection = [
        _item(1, "Electronics", "2024-01-01", item_condition="used"),
        _item(2, "Furniture", "2024-01-02"),
        _item(3, "Electronics", "2024-01-03", item_condition="like new"),
        _item(4, "electronics", "2024-01-04"),
    ]

    assert [item.item_id for item in filter_items(collection, category="Electronics")] == [1, 3]
    assert [
        item.item_id
        for item in filter_items(collection, category="Electronics", condition="like-new")
    ] == [3]
    assert [item.item_id for item in filter_items(collection, condition="like_new")] == [3]
    assert filter_items(collection, condition="Like-New") == []
    assert [item.item_id for item in filter_items(collection, category="", condition=None)] == [
        1,
        2,
        3,
        4,
    ]
    assert filter_items(collection, condition="Used") == []


def test_collect_facets_first_occurrence_order() -> None:
    collection = [
        _item(1, "Furniture", "2024-01-01", item_condition="used"),
        _item(2, "Electronics", "2024-01-02"),
        _item(3, "Furniture", "2024-01-03", item_condition="new"),
    ]

    facets = collect_facets(collection)

    assert facets.categories == ["Furniture", "Electronics"]
    assert facets.conditions == ["used", "new"]
