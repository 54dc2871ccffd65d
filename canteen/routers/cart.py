# canteen/routers/cart.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from canteen.core.cart_sessions import get_cart_engine
from canteen.database import get_session
from canteen.repositories.menu_repo import MenuRepository
from canteen.schemas.cart import CartItemAdd, CartQuantityUpdate, CartRead
from canteen.services.cart_engine import CartEngine
from canteen.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

menu_repo = MenuRepository()
service = CartService(menu_repo)


@router.get("", response_model=CartRead)
def get_my_cart(engine: CartEngine = Depends(get_cart_engine)):
    """
    Get the current student's cart with totals.

    Auth:
      - Only role='student' can access.
      - Admins are forbidden.
    """
    return service.get_cart(engine)


@router.post("/items", response_model=CartRead)
def add_to_cart(
    payload: CartItemAdd,
    session: Session = Depends(get_session),
    engine: CartEngine = Depends(get_cart_engine),
):
    """
    Add one unit of a menu item (with optional customization).

    The same item with the same choices merges into one line; different
    choices make a separate line.
    """
    return service.add_to_cart(session, engine, payload)


@router.patch("/items/{line_id}", response_model=CartRead)
def update_cart_line(
    line_id: str,
    payload: CartQuantityUpdate,
    engine: CartEngine = Depends(get_cart_engine),
):
    """
    Set the quantity of a cart line. 0 or less removes it.
    Unknown line ids leave the cart unchanged.
    """
    return service.update_quantity(engine, line_id, payload)


@router.delete("/items/{line_id}", response_model=CartRead)
def remove_cart_line(
    line_id: str,
    engine: CartEngine = Depends(get_cart_engine),
):
    """
    Remove a cart line. Unknown line ids leave the cart unchanged.
    """
    return service.remove_item(engine, line_id)


@router.delete("", response_model=CartRead)
def clear_cart(engine: CartEngine = Depends(get_cart_engine)):
    """
    Clear the entire cart.
    """
    return service.clear_cart(engine)


@router.post("/open", response_model=CartRead)
def open_cart(engine: CartEngine = Depends(get_cart_engine)):
    return service.open_cart(engine)


@router.post("/close", response_model=CartRead)
def close_cart(engine: CartEngine = Depends(get_cart_engine)):
    return service.close_cart(engine)
