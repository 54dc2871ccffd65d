# canteen/models/order.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Pickup order placed from a cart snapshot.

    Immutable once created except for `status` and `updated_at`.
    The line items live in OrderItem rows copied at checkout time.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_number: str = Field(
        unique=True,
        index=True,
        description="Human-readable number shown to students, e.g. CB1718000000000",
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    user_name: str

    total_amount: float = Field(
        ge=0,
        description="Sum of price x quantity over the item snapshot",
    )

    # pending | preparing | ready | completed | cancelled
    status: str = Field(
        default="pending",
        index=True,
    )

    # wallet | cash | card
    payment_method: str

    pickup_time: datetime

    qr_code: str = Field(
        unique=True,
        index=True,
        description="Opaque pickup credential encoded in the QR",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderItem(SQLModel, table=True):
    """
    Line item snapshot inside an order.

    Values are copied from the cart line. No FK to menu_items: catalog
    deletes never touch order history.
    """

    __tablename__ = "order_items"

    id: int | None = Field(default=None, primary_key=True)

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    # Position in the cart at checkout, keeps the snapshot ordered
    position: int = Field(default=0, ge=0)

    item_id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(gt=0)

    customization: dict[str, str] = Field(
        default_factory=dict,
        sa_column=Column(JSON),
    )
