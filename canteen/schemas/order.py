# canteen/schemas/order.py
import uuid
from datetime import date, datetime, time
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel

OrderStatus = Literal["pending", "preparing", "ready", "completed", "cancelled"]
PaymentMethod = Literal["wallet", "cash", "card"]


class CheckoutRequest(SQLModel):
    """
    Payload for placing an order from the current cart.

    Student provides:
      - pickup date and time slot
      - payment method (wallet / cash / card)

    Backend derives:
      - user id and name from the token
      - items and total from the cart
      - status = 'pending', order number, QR pickup code

    Pickup fields are optional here so a missing slot is reported as a
    checkout validation error (400) instead of a schema error.
    """

    model_config = ConfigDict(extra="forbid")

    pickup_date: date | None = None
    pickup_time: time | None = None
    payment_method: PaymentMethod = "wallet"


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    order_number: str
    user_id: uuid.UUID
    user_name: str
    status: OrderStatus
    payment_method: PaymentMethod
    total_amount: float
    pickup_time: datetime
    qr_code: str
    created_at: datetime
    updated_at: datetime


class OrderItemRead(SQLModel):
    """
    Snapshot of a single order line.
    """

    item_id: str
    name: str
    price: float
    quantity: int
    customization: dict[str, str]
    line_total: float


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]
    item_count: int


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class QrScan(SQLModel):
    """
    Admin payload from the pickup counter's QR scanner.
    """

    model_config = ConfigDict(extra="forbid")

    qr_code: str

    @field_validator("qr_code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("qr_code cannot be empty")
        return v
