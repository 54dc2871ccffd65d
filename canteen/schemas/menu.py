# canteen/schemas/menu.py
from datetime import date, datetime

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


class MenuItemCreate(SQLModel):
    """
    Payload for creating a menu item.

    - id is optional: if omitted, generated from `name` ("Butter Chicken"
      -> "butter-chicken").
    """

    model_config = ConfigDict(extra="forbid")

    id: str | None = None
    name: str = Field(max_length=100)
    description: str = ""
    price: float = Field(gt=0)
    category: str = Field(max_length=50)
    image: str = ""
    available: bool = True
    preparation_time: int = Field(default=10, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    cost_price: float = Field(default=0.0, ge=0)
    customization_options: dict[str, list[str]] = {}

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)


class MenuItemUpdate(SQLModel):
    """
    Partial update payload for menu items.
    All fields are optional; the id never changes.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    category: str | None = Field(default=None, max_length=50)
    image: str | None = None
    available: bool | None = None
    preparation_time: int | None = Field(default=None, ge=0)
    stock_quantity: int | None = Field(default=None, ge=0)
    cost_price: float | None = Field(default=None, ge=0)
    customization_options: dict[str, list[str]] | None = None

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _strip_required(v)


class AvailabilityUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    available: bool


class MenuItemRead(SQLModel):
    id: str
    name: str
    description: str
    price: float
    category: str
    image: str
    available: bool
    preparation_time: int
    stock_quantity: int
    cost_price: float
    customization_options: dict[str, list[str]]
    average_rating: float
    total_reviews: int
    sales_count: int
    created_at: datetime


class MenuReviewCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    rating: float = Field(ge=1, le=5)
    comment: str = Field(default="", max_length=500)


class MenuReviewRead(SQLModel):
    id: int
    item_id: str
    rating: float
    comment: str
    user_name: str
    reviewed_on: date


class MenuItemDetailRead(MenuItemRead):
    """
    Menu item with its reviews, newest first.
    """

    reviews: list[MenuReviewRead]


# ---- Combos ----


class ComboItem(SQLModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    quantity: int = Field(default=1, ge=1)


class ComboCreate(SQLModel):
    """
    Payload for creating a combo offer.

    `original_price` is computed from the catalog when omitted.
    """

    model_config = ConfigDict(extra="forbid")

    id: str | None = None
    name: str = Field(max_length=100)
    description: str = ""
    items: list[ComboItem]
    original_price: float | None = Field(default=None, ge=0)
    discounted_price: float = Field(ge=0)
    valid_days: list[str] = list(WEEKDAYS)
    valid_until: date | None = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("items")
    @classmethod
    def at_least_one_item(cls, v: list[ComboItem]) -> list[ComboItem]:
        if not v:
            raise ValueError("a combo needs at least one item")
        return v

    @field_validator("valid_days")
    @classmethod
    def known_days(cls, v: list[str]) -> list[str]:
        unknown = [d for d in v if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"unknown weekday(s): {', '.join(unknown)}")
        return v

    @model_validator(mode="after")
    def discount_not_above_original(self):
        if self.original_price is not None and self.discounted_price > self.original_price:
            raise ValueError("discounted_price cannot exceed original_price")
        return self


class ComboUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    items: list[ComboItem] | None = None
    original_price: float | None = Field(default=None, ge=0)
    discounted_price: float | None = Field(default=None, ge=0)
    valid_days: list[str] | None = None
    valid_until: date | None = None
    is_active: bool | None = None

    @field_validator("valid_days")
    @classmethod
    def known_days(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        unknown = [d for d in v if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"unknown weekday(s): {', '.join(unknown)}")
        return v


class ComboRead(SQLModel):
    id: str
    name: str
    description: str
    items: list[ComboItem]
    original_price: float
    discounted_price: float
    savings: float
    valid_days: list[str]
    valid_until: date | None
    is_active: bool
    available_today: bool
