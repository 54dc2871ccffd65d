# canteen/schemas/wallet.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

WalletTxType = Literal["credit", "debit", "refund"]


class WalletRead(SQLModel):
    user_id: uuid.UUID
    balance: float


class WalletTopUp(SQLModel):
    """
    Admin payload to add money to a student's wallet.
    """

    model_config = ConfigDict(extra="forbid")

    amount: float = Field(gt=0, le=10000)
    description: str = Field(default="Wallet top-up", max_length=200)


class WalletTransactionRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: WalletTxType
    amount: float
    previous_balance: float
    new_balance: float
    description: str
    order_id: uuid.UUID | None
    admin_id: uuid.UUID | None
    created_at: datetime


class StudentWalletRead(SQLModel):
    """
    Row of the admin "manage wallets" search.
    """

    id: uuid.UUID
    name: str
    email: str
    wallet_balance: float
