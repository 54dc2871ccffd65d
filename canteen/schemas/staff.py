# canteen/schemas/staff.py
from datetime import date, time

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field


class StaffCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    role: str = Field(max_length=50)
    hourly_rate: float = Field(ge=0)

    @field_validator("name", "role")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class StaffUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    role: str | None = Field(default=None, max_length=50)
    hourly_rate: float | None = Field(default=None, ge=0)


class StaffRead(SQLModel):
    id: int
    name: str
    role: str
    hourly_rate: float


class AttendanceCreate(SQLModel):
    """
    One shift. Leave check_out empty while the member is still working.
    """

    model_config = ConfigDict(extra="forbid")

    work_date: date
    check_in: time
    check_out: time | None = None

    @model_validator(mode="after")
    def check_out_after_check_in(self):
        if self.check_out is not None and self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class AttendanceRead(SQLModel):
    id: int
    staff_id: int
    work_date: date
    check_in: time
    check_out: time | None
    hours: float


class StaffMonthSummary(SQLModel):
    staff_id: int
    name: str
    role: str
    hourly_rate: float
    days_worked: int
    total_hours: float
    salary: float


class MonthlyAttendanceSummary(SQLModel):
    year: int
    month: int
    members: list[StaffMonthSummary]
    total_hours: float
    total_salary: float
    present_today: int
