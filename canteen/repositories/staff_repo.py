# canteen/repositories/staff_repo.py
from datetime import date

from sqlmodel import Session, select

from canteen.models.staff import AttendanceRecord, StaffMember


class StaffRepository:

    # ----- Staff -----

    def get_by_id(self, session: Session, staff_id: int) -> StaffMember | None:
        return session.get(StaffMember, staff_id)

    def list_members(self, session: Session) -> list[StaffMember]:
        return list(session.exec(select(StaffMember).order_by(StaffMember.name)).all())

    def save(self, session: Session, member: StaffMember) -> StaffMember:
        session.add(member)
        session.commit()
        session.refresh(member)
        return member

    def delete(self, session: Session, member: StaffMember) -> None:
        for record in self.list_attendance(session, member.id):
            session.delete(record)
        session.delete(member)
        session.commit()

    # ----- Attendance -----

    def list_attendance(
        self,
        session: Session,
        staff_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        """
        Shifts for one member, oldest first. `end` is exclusive.
        """
        stmt = select(AttendanceRecord).where(AttendanceRecord.staff_id == staff_id)
        if start is not None:
            stmt = stmt.where(AttendanceRecord.work_date >= start)
        if end is not None:
            stmt = stmt.where(AttendanceRecord.work_date < end)
        stmt = stmt.order_by(AttendanceRecord.work_date, AttendanceRecord.check_in)
        return list(session.exec(stmt).all())

    def add_attendance(self, session: Session, record: AttendanceRecord) -> AttendanceRecord:
        session.add(record)
        session.commit()
        session.refresh(record)
        return record
