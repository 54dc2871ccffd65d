# canteen/models/wallet.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class WalletTransaction(SQLModel, table=True):
    """
    Signed wallet ledger entry.

    amount > 0 for credit/refund, < 0 for debit.
    previous_balance + amount == new_balance for every row.
    """

    __tablename__ = "wallet_transactions"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # credit | debit | refund
    type: str = Field(index=True)

    amount: float
    previous_balance: float
    new_balance: float = Field(ge=0)

    description: str = Field(default="")

    order_id: uuid.UUID | None = Field(default=None, foreign_key="orders.id")
    admin_id: uuid.UUID | None = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
