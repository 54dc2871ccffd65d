# canteen/repositories/order_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from canteen.models.order import Order, OrderItem


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; checkout is a multi-step transaction
        (order + wallet debit + catalog counters).
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        status: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = select(Order).where(Order.user_id == user_id)
        if status:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def list_all(
        self,
        session: Session,
        status: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        """
        All orders, newest first.

        `search` matches order number, customer name or any item name
        (case-insensitive substring).
        """
        stmt = select(Order)
        if status:
            stmt = stmt.where(Order.status == status)
        if search:
            pattern = f"%{search.strip().lower()}%"
            item_match = (
                select(OrderItem.order_id)
                .where(func.lower(OrderItem.name).like(pattern))
            )
            stmt = stmt.where(
                or_(
                    func.lower(Order.order_number).like(pattern),
                    func.lower(Order.user_name).like(pattern),
                    Order.id.in_(item_match),
                )
            )
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        value = session.exec(select(func.count()).select_from(Order)).one()
        return int(value or 0)

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def get_by_order_number(self, session: Session, order_number: str) -> Order | None:
        stmt = select(Order).where(Order.order_number == order_number)
        return session.exec(stmt).first()

    def get_by_qr(self, session: Session, qr_code: str) -> Order | None:
        stmt = select(Order).where(Order.qr_code == qr_code)
        return session.exec(stmt).first()

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing.
        """
        session.add(order)
        session.flush()
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        return order

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
        )
        return list(session.exec(stmt).all())

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items
