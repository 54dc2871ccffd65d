# canteen/services/checkout_service.py
import logging
from datetime import datetime, timedelta

from sqlmodel import Session

from canteen.core.errors import InsufficientFundsError, ValidationError
from canteen.models.user import User
from canteen.repositories.menu_repo import MenuRepository
from canteen.schemas.cart import CartLine
from canteen.schemas.order import CheckoutRequest, OrderWithItemsRead
from canteen.services.cart_engine import CartEngine
from canteen.services.order_service import OrderService
from canteen.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

# How far ahead a pickup slot may be booked
MAX_PICKUP_DAYS_AHEAD = 7


class CheckoutService:
    """
    Turns the student's cart into an order.

    Steps:
      1. Cart must be non-empty.
      2. Pickup date/time present and not in the past.
      3. Wallet payments: balance >= total, checked before any write.
      4. Create the order (pending).
      5. Debit the wallet (guarded again in the UPDATE itself).
      6. Update catalog stock / sales counters.
      7. Commit once.
      8. Take the checked-out lines out of the cart.

    Any failure in 4-7 rolls the session back; the cart is untouched.
    """

    def __init__(
        self,
        order_service: OrderService,
        wallet_service: WalletService,
        menu_repo: MenuRepository,
    ):
        self.order_service = order_service
        self.wallet_service = wallet_service
        self.menu_repo = menu_repo

    def _resolve_pickup(self, payload: CheckoutRequest) -> datetime:
        """
        Combine the pickup date and slot, rejecting past or far-future times.
        """
        if payload.pickup_date is None or payload.pickup_time is None:
            raise ValidationError("Please select a pickup date and time")

        # Slots are picked in canteen local time
        now = datetime.now().astimezone()
        pickup = datetime.combine(payload.pickup_date, payload.pickup_time).astimezone()

        if pickup < now:
            raise ValidationError("Pickup time cannot be in the past")

        if payload.pickup_date > now.date() + timedelta(days=MAX_PICKUP_DAYS_AHEAD):
            raise ValidationError(
                f"Pickup can be scheduled at most {MAX_PICKUP_DAYS_AHEAD} days ahead"
            )
        return pickup

    def _apply_sales(self, session: Session, lines: list[CartLine]) -> None:
        """
        Decrement stock (floored at 0) and bump sales counters.
        Lines whose item has left the catalog are skipped.
        """
        items = self.menu_repo.get_many(session, list({line.item_id for line in lines}))
        for line in lines:
            item = items.get(line.item_id)
            if item is None:
                logger.warning("Item %s no longer in catalog, skipping stock update", line.item_id)
                continue
            item.stock_quantity = max(0, item.stock_quantity - line.quantity)
            item.sales_count += line.quantity
            self.menu_repo.update(session, item, commit=False)

    def checkout(
        self,
        session: Session,
        user: User,
        engine: CartEngine,
        payload: CheckoutRequest,
    ) -> OrderWithItemsRead:
        state = engine.state
        lines = list(state.lines)

        if not lines:
            raise ValidationError("Cart is empty")

        pickup_time = self._resolve_pickup(payload)

        total = state.total
        if payload.payment_method == "wallet" and round(user.wallet_balance, 2) < round(total, 2):
            raise InsufficientFundsError(
                f"Insufficient wallet balance: have {user.wallet_balance:.2f}, need {total:.2f}"
            )

        try:
            order = self.order_service.create_order(
                session,
                owner_id=user.id,
                owner_name=user.name,
                lines=lines,
                total_amount=total,
                payment_method=payload.payment_method,
                pickup_time=pickup_time,
                commit=False,
            )

            if payload.payment_method == "wallet":
                self.wallet_service.debit(
                    session,
                    user.id,
                    order.total_amount,
                    description=f"Payment for order {order.order_number}",
                    order_id=order.id,
                    commit=False,
                )

            self._apply_sales(session, lines)
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(order)
        engine.consume(lines)

        logger.info("Checkout complete: %s by %s", order.order_number, user.email)
        return self.order_service.build_order_dto(session, order)
