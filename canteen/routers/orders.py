# canteen/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from canteen.core.auth import require_student, require_admin
from canteen.core.cart_sessions import get_cart_engine
from canteen.database import get_session
from canteen.models.user import User
from canteen.repositories.menu_repo import MenuRepository
from canteen.repositories.order_repo import OrderRepository
from canteen.repositories.user_repo import UserRepository
from canteen.repositories.wallet_repo import WalletRepository
from canteen.schemas.order import (
    CheckoutRequest,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderWithItemsRead,
    QrScan,
)
from canteen.services.cart_engine import CartEngine
from canteen.services.checkout_service import CheckoutService
from canteen.services.order_service import OrderService
from canteen.services.wallet_service import WalletService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
menu_repo = MenuRepository()
wallet_service = WalletService(UserRepository(), WalletRepository())
service = OrderService(order_repo, wallet_service)
checkout_service = CheckoutService(service, wallet_service, menu_repo)


# -------- Student endpoints --------


@router.post(
    "/checkout",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    payload: CheckoutRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
    engine: CartEngine = Depends(get_cart_engine),
):
    """
    Place an order from the current student's cart.

    Wallet payments are checked before anything is written; on success
    the wallet is debited and the cart cleared.
    """
    return checkout_service.checkout(session, current_user, engine, payload)


@router.get(
    "/me",
    response_model=list[OrderRead],
)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
    status: OrderStatus | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List the student's orders (without items), newest first.
    """
    return service.list_by_owner(session, current_user.id, status=status, skip=skip, limit=limit)


@router.get(
    "/me/{order_id}",
    response_model=OrderWithItemsRead,
)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Get a single order (with items) belonging to the current student.
    """
    order = service.get_for_owner(session, current_user.id, order_id)
    return service.build_order_dto(session, order)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    status: OrderStatus | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List all orders (admin only), newest first.

    search matches order number, customer name or item name.
    """
    return service.list_all(session, status=status, search=search, skip=skip, limit=limit)


@router.post(
    "/scan",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def scan_pickup_qr(
    payload: QrScan,
    session: Session = Depends(get_session),
):
    """
    Pickup counter: scanning a ready order's QR marks it completed.
    """
    order = service.redeem_pickup(session, payload.qr_code)
    return service.build_order_dto(session, order)


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get any order with items (admin only).
    """
    order = service.get_by_id(session, order_id)
    return service.build_order_dto(session, order)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status (admin only):

      pending   -> preparing, cancelled

      preparing -> ready, cancelled

      ready     -> completed, cancelled

      completed / cancelled -> (terminal)

    Cancelling a wallet-paid order refunds the wallet.
    """
    return service.update_status(session, order_id, payload.status)
