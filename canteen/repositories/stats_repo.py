# canteen/repositories/stats_repo.py
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from canteen.models.order import Order
from canteen.models.user import User


class StatsRepository:
    """
    Read-only aggregated queries for the admin dashboard.
    """

    def total_revenue(self, session: Session, since: datetime | None = None) -> float:
        """
        Sum of total_amount for all non-cancelled orders
        (optionally created at or after `since`).
        """
        stmt = (
            select(func.coalesce(func.sum(Order.total_amount), 0.0))
            .where(Order.status != "cancelled")
        )
        if since is not None:
            stmt = stmt.where(Order.created_at >= since)
        value = session.exec(stmt).one()
        return float(value or 0.0)

    def count_students(self, session: Session) -> int:
        stmt = select(func.count()).select_from(User).where(User.role == "student")
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_orders(self, session: Session, since: datetime | None = None) -> int:
        stmt = select(func.count()).select_from(Order)
        if since is not None:
            stmt = stmt.where(Order.created_at >= since)
        value = session.exec(stmt).one()
        return int(value or 0)

    def orders_by_status(self, session: Session) -> dict[str, int]:
        stmt = select(Order.status, func.count(Order.id)).group_by(Order.status)
        return {status: int(count) for status, count in session.exec(stmt).all()}

    def latest_orders(self, session: Session, limit: int = 5) -> list[Order]:
        """
        Latest N orders by created_at (any status).
        """
        stmt = select(Order).order_by(Order.created_at.desc()).limit(limit)
        return list(session.exec(stmt).all())
