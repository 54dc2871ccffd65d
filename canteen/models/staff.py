# canteen/models/staff.py
from datetime import date, datetime, time, timezone

from sqlmodel import SQLModel, Field


class StaffMember(SQLModel, table=True):
    __tablename__ = "staff_members"

    id: int | None = Field(default=None, primary_key=True)

    name: str = Field(max_length=100)
    role: str = Field(max_length=50, description="Chef, Cashier, ...")
    hourly_rate: float = Field(ge=0)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class AttendanceRecord(SQLModel, table=True):
    """
    One shift. `hours` is derived from check-in/check-out when the shift
    is closed and stays 0 while the member is still checked in.
    """

    __tablename__ = "attendance_records"

    id: int | None = Field(default=None, primary_key=True)

    staff_id: int = Field(
        foreign_key="staff_members.id",
        index=True,
    )

    work_date: date = Field(index=True)
    check_in: time
    check_out: time | None = None
    hours: float = Field(default=0.0, ge=0)
