"""Pydantic schemas for persisted records and API payloads."""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

MAX_PRICE = 1e12
MAX_QUANTITY = 10**9


class ItemCondition(str, Enum):
    NEW = "new"
    LIKE_NEW = "like new"
    GENTLY_USED = "gently used"
    REFURBISHED = "refurbished"
    USED = "used"

    @classmethod
    def parse(cls, value: object) -> "ItemCondition":
        """Accept ``like-new``/``like_new`` style spellings as well as the stored form."""

        if isinstance(value, cls):
            return value
        text = " ".join(str(value).strip().lower().replace("-", " ").replace("_", " ").split())
        return cls(text)


class User(BaseModel):
    username: str
    password: str


class InventoryItem(BaseModel):
    """A unit (or stack) of stock as stored in ``items.json``."""

    item_id: int
    item_name: str
    item_category: str
    item_subcategory: str = ""
    item_condition: ItemCondition
    purchase_price: float = Field(..., ge=0, le=MAX_PRICE)
    sale_price: float = Field(..., ge=0, le=MAX_PRICE)
    quantity_in_stock: int = Field(..., ge=0, le=MAX_QUANTITY)
    purchase_date: date
    sale_date: Optional[date] = None
    profit_margin: float = Field(..., ge=-MAX_PRICE, le=MAX_PRICE)
    description: str = ""

    @field_validator("item_condition", mode="before")
    @classmethod
    def _normalize_condition(cls, value: object) -> ItemCondition:
        return ItemCondition.parse(value)

    @field_validator("sale_date", mode="before")
    @classmethod
    def _blank_sale_date(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and value.strip() == ""):
            return None
        return value

    @field_validator("item_subcategory", "description", mode="before")
    @classmethod
    def _blank_text(cls, value: object) -> object:
        return "" if value is None else value

    @field_serializer("sale_date")
    def _serialize_sale_date(self, value: Optional[date]) -> str:
        return "" if value is None else value.isoformat()


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    subcategories: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Category name cannot be blank")
        return stripped

    @field_validator("subcategories", mode="before")
    @classmethod
    def _clean_subcategories(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            return [str(entry).strip() for entry in value if str(entry).strip()]
        return value


class Category(BaseModel):
    id: int
    name: str
    subcategories: List[str] = Field(default_factory=list)


class CategoryRollup(BaseModel):
    count: int = 0
    value: float = 0.0
    profit: float = 0.0


class InventoryStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_items: int = 0
    total_value: float = 0.0
    total_profit: float = 0.0
    category_stats: Dict[str, CategoryRollup] = Field(default_factory=dict)


class InventoryDashboard(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    stats: InventoryStats
    recent_items: List[InventoryItem]


class ItemFacets(BaseModel):
    categories: List[str]
    conditions: List[str]


class OperationResult(BaseModel):
    success: bool = True


class HealthStatus(BaseModel):
    status: Literal["ok"] = "ok"
    environment: str


__all__ = [
    "MAX_PRICE",
    "MAX_QUANTITY",
    "ItemCondition",
    "User",
    "InventoryItem",
    "CategoryCreate",
    "Category",
    "CategoryRollup",
    "InventoryStats",
    "InventoryDashboard",
    "ItemFacets",
    "OperationResult",
    "HealthStatus",
]
