# canteen/models/menu.py
from datetime import date, datetime, timezone

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class MenuItem(SQLModel, table=True):
    """
    Catalog entry.

    `id` is a URL-friendly slug ("butter-chicken", "chai") so cart lines
    and order snapshots stay readable.
    """

    __tablename__ = "menu_items"

    id: str = Field(
        primary_key=True,
        max_length=100,
        description="Slug identifier (unique)",
    )

    name: str = Field(
        max_length=100,
        index=True,
    )

    description: str = Field(default="")

    price: float = Field(
        gt=0,
        description="Unit price (INR)",
    )

    category: str = Field(
        max_length=50,
        index=True,
    )

    image: str = Field(default="", description="Image URL")

    available: bool = Field(
        default=True,
        index=True,
        description="Whether the item is orderable right now",
    )

    preparation_time: int = Field(
        default=10,
        ge=0,
        description="Minutes",
    )

    stock_quantity: int = Field(default=0, ge=0)

    cost_price: float = Field(
        default=0.0,
        ge=0,
        description="Ingredient cost per unit, used by inventory stats",
    )

    # option name -> allowed values, e.g. {"spiceLevel": ["Mild", "Hot"]}
    customization_options: dict[str, list[str]] = Field(
        default_factory=dict,
        sa_column=Column(JSON),
    )

    average_rating: float = Field(default=0.0, ge=0)
    total_reviews: int = Field(default=0, ge=0)
    sales_count: int = Field(default=0, ge=0)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class MenuReview(SQLModel, table=True):
    __tablename__ = "menu_reviews"

    id: int | None = Field(default=None, primary_key=True)

    item_id: str = Field(
        foreign_key="menu_items.id",
        index=True,
    )

    rating: float = Field(ge=0, le=5)
    comment: str = Field(default="")
    user_name: str
    reviewed_on: date = Field(default_factory=date.today)


class ComboOffer(SQLModel, table=True):
    """
    Bundle of menu items sold at a discounted price on given weekdays.
    """

    __tablename__ = "combo_offers"

    id: str = Field(primary_key=True, max_length=100)

    name: str = Field(max_length=100)
    description: str = Field(default="")

    # [{"id": "<menu item id>", "quantity": 1}, ...]
    items: list[dict] = Field(
        default_factory=list,
        sa_column=Column(JSON),
    )

    original_price: float = Field(ge=0)
    discounted_price: float = Field(ge=0)

    # Weekday names ("Monday" ... "Sunday")
    valid_days: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON),
    )

    valid_until: date | None = None
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
