# canteen/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Canteen account (student or admin).

    Identity is mocked: /auth/login issues a token for any known email.
    This table is *not* responsible for password hashes.

    Role:
      - "student" | "admin"
      - guests are represented by a missing token.

    wallet_balance is a cached figure; the WalletTransaction ledger is
    authoritative and every change to the balance writes one row there.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(
        unique=True,
        index=True,
    )

    name: str = Field(
        max_length=50,
        description="Display name; first part of email by default",
    )

    role: str = Field(
        default="student",
        index=True,
        description="Application role: student | admin",
    )

    wallet_balance: float = Field(
        default=0.0,
        ge=0,
        description="Current wallet balance (never negative)",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
