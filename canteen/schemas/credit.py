# canteen/schemas/credit.py
from datetime import date
from typing import Literal

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

CreditTxType = Literal["purchase", "payment", "credit"]
CreditStatus = Literal["overdue", "active", "clear"]


class CreditAccountCreate(SQLModel):
    """
    Open a tab for a student. A positive `initial_balance` is recorded as
    a 'credit' transaction.
    """

    model_config = ConfigDict(extra="forbid")

    student_name: str = Field(max_length=100)
    email: EmailStr
    credit_limit: float = Field(gt=0)
    initial_balance: float = Field(default=0.0, ge=0)

    @field_validator("student_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("student_name cannot be empty")
        return v


class CreditAccountUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    student_name: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    credit_limit: float | None = Field(default=None, gt=0)


class CreditTransactionCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    type: CreditTxType
    amount: float = Field(gt=0)
    description: str = Field(default="", max_length=200)


class CreditTransactionRead(SQLModel):
    id: int
    account_id: int
    type: CreditTxType
    amount: float
    description: str
    transaction_date: date


class CreditAccountRead(SQLModel):
    id: int
    student_name: str
    email: str
    credit_limit: float
    current_balance: float
    utilization: float
    status: CreditStatus


class CreditAccountDetailRead(CreditAccountRead):
    transactions: list[CreditTransactionRead]


class CreditOverview(SQLModel):
    accounts: list[CreditAccountRead]
    total_limit: float
    total_outstanding: float
    overdue_count: int
