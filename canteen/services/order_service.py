# canteen/services/order_service.py
import logging
import secrets
import time
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from canteen.core.config import get_settings
from canteen.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from canteen.models.order import Order, OrderItem
from canteen.repositories.order_repo import OrderRepository
from canteen.schemas.cart import CartLine
from canteen.schemas.order import OrderItemRead, OrderWithItemsRead
from canteen.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

settings = get_settings()

PAYMENT_METHODS = ("wallet", "cash", "card")

TERMINAL_STATUSES = frozenset({"completed", "cancelled"})

ACTIVE_STATUSES = ("pending", "preparing", "ready")

# Kitchen flow; cancelled is reachable from every non-terminal status
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"preparing", "cancelled"},
    "preparing": {"ready", "cancelled"},
    "ready": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

# Allowed drift between the client-side total and the line sum
TOTAL_TOLERANCE = 0.005


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Create an order from a snapshot of cart lines
      - Mint order numbers and QR pickup codes
      - Enforce the status state machine (admin)
      - Refund wallet-paid orders on cancellation
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        wallet_service: WalletService,
        order_number_prefix: str | None = None,
    ):
        self.order_repo = order_repo
        self.wallet_service = wallet_service
        self.order_number_prefix = order_number_prefix or settings.ORDER_NUMBER_PREFIX

    # -------- Creation --------

    def _next_order_number(self, session: Session) -> str:
        """
        "<prefix><epoch-ms>", suffixed -2, -3, ... if already taken.
        """
        base = f"{self.order_number_prefix}{int(time.time() * 1000)}"
        number = base
        i = 2
        while self.order_repo.get_by_order_number(session, number) is not None:
            number = f"{base}-{i}"
            i += 1
        return number

    @staticmethod
    def _new_qr_code(order_number: str) -> str:
        return f"{order_number}-{secrets.token_hex(8)}"

    def create_order(
        self,
        session: Session,
        owner_id: uuid.UUID,
        owner_name: str,
        lines: list[CartLine],
        total_amount: float,
        payment_method: str,
        pickup_time: datetime | None,
        commit: bool = True,
    ) -> Order:
        """
        Persist a new pending order.

        Lines are copied by value into OrderItem rows, so later cart or
        catalog changes never touch the order.

        Raises:
            ValidationError: empty lines, quantity < 1, unknown payment
                method, missing pickup time, or a total that does not
                match the lines.
        """
        if not lines:
            raise ValidationError("Cart is empty")

        for line in lines:
            if line.quantity < 1:
                raise ValidationError(f"Invalid quantity for {line.name}")

        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(f"Unknown payment method: {payment_method}")

        if pickup_time is None:
            raise ValidationError("Pickup time is required")
        # Naive values are server local time; stored as UTC like the other timestamps
        pickup_time = pickup_time.astimezone(timezone.utc)

        line_sum = round(sum(line.price * line.quantity for line in lines), 2)
        if abs(line_sum - total_amount) > TOTAL_TOLERANCE:
            raise ValidationError(
                f"Order total {total_amount:.2f} does not match items ({line_sum:.2f})"
            )

        order_number = self._next_order_number(session)
        order = self.order_repo.create_order(
            session,
            Order(
                order_number=order_number,
                user_id=owner_id,
                user_name=owner_name,
                total_amount=line_sum,
                status="pending",
                payment_method=payment_method,
                pickup_time=pickup_time,
                qr_code=self._new_qr_code(order_number),
            ),
        )

        self.order_repo.create_items(
            session,
            [
                OrderItem(
                    order_id=order.id,
                    position=pos,
                    item_id=line.item_id,
                    name=line.name,
                    price=line.price,
                    quantity=line.quantity,
                    customization=dict(line.customization),
                )
                for pos, line in enumerate(lines)
            ],
        )

        if commit:
            session.commit()
            session.refresh(order)

        logger.info("Order %s created for %s (%.2f)", order_number, owner_id, line_sum)
        return order

    # -------- Queries --------

    def list_by_owner(
        self,
        session: Session,
        owner_id: uuid.UUID,
        status: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        """Orders of one student, newest first."""
        return self.order_repo.list_for_user(session, owner_id, status=status, skip=skip, limit=limit)

    def list_all(
        self,
        session: Session,
        status: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        """All orders (admin), newest first."""
        return self.order_repo.list_all(session, status=status, search=search, skip=skip, limit=limit)

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_for_owner(self, session: Session, owner_id: uuid.UUID, order_id: uuid.UUID) -> Order:
        """
        404 if the order does not exist or belongs to someone else.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != owner_id:
            raise NotFoundError("Order not found")
        return order

    def get_by_qr(self, session: Session, qr_code: str) -> Order:
        order = self.order_repo.get_by_qr(session, qr_code)
        if not order:
            raise NotFoundError("No order matches this QR code")
        return order

    # -------- Status --------

    def update_status(self, session: Session, order_id: uuid.UUID, new_status: str) -> Order:
        """
        Admin status change:

          pending   -> preparing, cancelled
          preparing -> ready, cancelled
          ready     -> completed, cancelled
          completed -> (terminal)
          cancelled -> (terminal)

        Setting the current status again is a no-op, except on a terminal
        order, which rejects every update. Cancelling a wallet-paid order
        refunds its total in the same transaction.
        """
        order = self.get_by_id(session, order_id)
        current = order.status

        if current in TERMINAL_STATUSES:
            raise InvalidTransitionError(f"Order {order.order_number} is already {current}")

        if new_status == current:
            return order

        if new_status not in ALLOWED_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(f"Invalid status transition: {current} -> {new_status}")

        order.status = new_status
        order.updated_at = datetime.now(timezone.utc)
        self.order_repo.update_order(session, order)

        if new_status == "cancelled" and order.payment_method == "wallet":
            self.wallet_service.refund(
                session,
                order.user_id,
                order.total_amount,
                description=f"Refund for order {order.order_number}",
                order_id=order.id,
                commit=False,
            )

        session.commit()
        session.refresh(order)
        logger.info("Order %s: %s -> %s", order.order_number, current, new_status)
        return order

    def redeem_pickup(self, session: Session, qr_code: str) -> Order:
        """
        Counter scan: a ready order becomes completed.
        """
        order = self.get_by_qr(session, qr_code)
        if order.status != "ready":
            raise InvalidTransitionError(
                f"Order {order.order_number} is {order.status}; only ready orders can be picked up"
            )
        return self.update_status(session, order.id, "completed")

    # -------- Helper DTO builder --------

    def build_order_dto(self, session: Session, order: Order) -> OrderWithItemsRead:
        """
        Compose OrderWithItemsRead from the order row and its item snapshot.
        """
        items = self.order_repo.list_items_for_order(session, order.id)
        item_dtos = [
            OrderItemRead(
                item_id=it.item_id,
                name=it.name,
                price=it.price,
                quantity=it.quantity,
                customization=dict(it.customization or {}),
                line_total=round(it.price * it.quantity, 2),
            )
            for it in items
        ]

        return OrderWithItemsRead(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            user_name=order.user_name,
            status=order.status,
            payment_method=order.payment_method,
            total_amount=order.total_amount,
            pickup_time=order.pickup_time,
            qr_code=order.qr_code,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=item_dtos,
            item_count=sum(it.quantity for it in items),
        )
