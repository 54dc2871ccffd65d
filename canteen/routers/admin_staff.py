# canteen/routers/admin_staff.py
from datetime import date

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from canteen.core.auth import require_admin
from canteen.database import get_session
from canteen.repositories.staff_repo import StaffRepository
from canteen.schemas.staff import (
    AttendanceCreate,
    AttendanceRead,
    MonthlyAttendanceSummary,
    StaffCreate,
    StaffRead,
    StaffUpdate,
)
from canteen.services.staff_service import StaffService

router = APIRouter(
    prefix="/admin/staff",
    tags=["Admin Staff"],
    dependencies=[Depends(require_admin)],
)

repo = StaffRepository()
service = StaffService(repo)


@router.get("", response_model=list[StaffRead])
def list_staff(session: Session = Depends(get_session)):
    return service.list_staff(session)


@router.post("", response_model=StaffRead, status_code=status.HTTP_201_CREATED)
def create_staff(
    payload: StaffCreate,
    session: Session = Depends(get_session),
):
    return service.create_staff(session, payload)


@router.get("/summary", response_model=MonthlyAttendanceSummary)
def monthly_summary(
    year: int | None = None,
    month: int | None = None,
    session: Session = Depends(get_session),
):
    """
    Hours and salary per member for one month.

    Query params (optional):
      - year: defaults to current year
      - month: 1-12, defaults to current month
    """
    today = date.today()
    return service.monthly_summary(
        session,
        year=year or today.year,
        month=month or today.month,
    )


@router.patch("/{staff_id}", response_model=StaffRead)
def update_staff(
    staff_id: int,
    payload: StaffUpdate,
    session: Session = Depends(get_session),
):
    return service.update_staff(session, staff_id, payload)


@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(
    staff_id: int,
    session: Session = Depends(get_session),
):
    """
    Remove a staff member together with their attendance history.
    """
    service.delete_staff(session, staff_id)


@router.get("/{staff_id}/attendance", response_model=list[AttendanceRead])
def list_attendance(
    staff_id: int,
    start: date | None = None,
    end: date | None = None,
    session: Session = Depends(get_session),
):
    """
    Shifts of one member, oldest first. `end` is exclusive.
    """
    return service.list_attendance(session, staff_id, start=start, end=end)


@router.post(
    "/{staff_id}/attendance",
    response_model=AttendanceRead,
    status_code=status.HTTP_201_CREATED,
)
def add_attendance(
    staff_id: int,
    payload: AttendanceCreate,
    session: Session = Depends(get_session),
):
    """
    Record a shift. Hours are computed from check-in/check-out.
    """
    return service.add_attendance(session, staff_id, payload)
