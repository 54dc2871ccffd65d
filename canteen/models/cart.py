# canteen/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class SavedCart(SQLModel, table=True):
    """
    Persisted cart snapshot, one document per user.

    Written by the cart save queue with whole-document replace, so the
    last write wins. `items` holds serialized CartLine dicts in cart order.
    """

    __tablename__ = "saved_carts"

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        primary_key=True,
    )

    items: list[dict] = Field(
        default_factory=list,
        sa_column=Column(JSON),
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
