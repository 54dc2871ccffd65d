# canteen/models/credit.py
from datetime import date, datetime, timezone

from sqlmodel import SQLModel, Field


class CreditAccount(SQLModel, table=True):
    """
    Tab a student runs with the canteen (credit sales).

    current_balance is the amount owed; it is not the wallet.
    """

    __tablename__ = "credit_accounts"

    id: int | None = Field(default=None, primary_key=True)

    student_name: str = Field(max_length=100)
    email: str = Field(index=True)
    credit_limit: float = Field(gt=0)
    current_balance: float = Field(default=0.0)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CreditTransaction(SQLModel, table=True):
    __tablename__ = "credit_transactions"

    id: int | None = Field(default=None, primary_key=True)

    account_id: int = Field(
        foreign_key="credit_accounts.id",
        index=True,
    )

    # purchase | payment | credit
    type: str
    amount: float = Field(gt=0)
    description: str = Field(default="")
    transaction_date: date = Field(default_factory=date.today)
