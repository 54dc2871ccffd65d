# canteen/services/staff_service.py
import calendar
from datetime import date, datetime, time

from sqlmodel import Session

from canteen.core.errors import NotFoundError, ValidationError
from canteen.models.staff import AttendanceRecord, StaffMember
from canteen.repositories.staff_repo import StaffRepository
from canteen.schemas.staff import (
    AttendanceCreate,
    MonthlyAttendanceSummary,
    StaffCreate,
    StaffMonthSummary,
    StaffUpdate,
)


def shift_hours(check_in: time, check_out: time | None) -> float:
    """Hours between two same-day times, 0 while still checked in."""
    if check_out is None:
        return 0.0
    start = datetime.combine(date.min, check_in)
    end = datetime.combine(date.min, check_out)
    return round(max(0.0, (end - start).total_seconds() / 3600), 2)


class StaffService:
    """
    Staff roster, attendance and monthly payroll figures.
    """

    def __init__(self, repo: StaffRepository):
        self.repo = repo

    # ----- Staff -----

    def list_staff(self, session: Session) -> list[StaffMember]:
        return self.repo.list_members(session)

    def get_staff(self, session: Session, staff_id: int) -> StaffMember:
        member = self.repo.get_by_id(session, staff_id)
        if not member:
            raise NotFoundError("Staff member not found")
        return member

    def create_staff(self, session: Session, payload: StaffCreate) -> StaffMember:
        return self.repo.save(session, StaffMember(**payload.model_dump()))

    def update_staff(self, session: Session, staff_id: int, payload: StaffUpdate) -> StaffMember:
        member = self.get_staff(session, staff_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(member, field, value)
        return self.repo.save(session, member)

    def delete_staff(self, session: Session, staff_id: int) -> None:
        self.repo.delete(session, self.get_staff(session, staff_id))

    # ----- Attendance -----

    def add_attendance(
        self,
        session: Session,
        staff_id: int,
        payload: AttendanceCreate,
    ) -> AttendanceRecord:
        """
        Record a shift; hours are derived from check-in/check-out.
        """
        member = self.get_staff(session, staff_id)
        record = AttendanceRecord(
            staff_id=member.id,
            work_date=payload.work_date,
            check_in=payload.check_in,
            check_out=payload.check_out,
            hours=shift_hours(payload.check_in, payload.check_out),
        )
        return self.repo.add_attendance(session, record)

    def list_attendance(
        self,
        session: Session,
        staff_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        member = self.get_staff(session, staff_id)
        return self.repo.list_attendance(session, member.id, start=start, end=end)

    def monthly_summary(
        self,
        session: Session,
        year: int,
        month: int,
        today: date | None = None,
    ) -> MonthlyAttendanceSummary:
        """
        Per-member hours and salary (hours x hourly rate) for one month.

        present_today counts members with a shift dated today, whatever
        month is being summarized.
        """
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")

        today = today or date.today()
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
        end_exclusive = date.fromordinal(end.toordinal() + 1)

        members: list[StaffMonthSummary] = []
        present_today = 0

        for member in self.repo.list_members(session):
            records = self.repo.list_attendance(session, member.id, start=start, end=end_exclusive)
            hours = round(sum(r.hours for r in records), 2)
            members.append(
                StaffMonthSummary(
                    staff_id=member.id,
                    name=member.name,
                    role=member.role,
                    hourly_rate=member.hourly_rate,
                    days_worked=len({r.work_date for r in records}),
                    total_hours=hours,
                    salary=round(hours * member.hourly_rate, 2),
                )
            )

            if self.repo.list_attendance(
                session,
                member.id,
                start=today,
                end=date.fromordinal(today.toordinal() + 1),
            ):
                present_today += 1

        return MonthlyAttendanceSummary(
            year=year,
            month=month,
            members=members,
            total_hours=round(sum(m.total_hours for m in members), 2),
            total_salary=round(sum(m.salary for m in members), 2),
            present_today=present_today,
        )
