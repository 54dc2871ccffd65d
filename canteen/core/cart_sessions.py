# canteen/core/cart_sessions.py
from fastapi import Depends, Request

from canteen.core.auth import require_student
from canteen.models.user import User
from canteen.services.cart_engine import CartEngine
from canteen.services.cart_service import CartSessionManager


def get_cart_sessions(request: Request) -> CartSessionManager:
    """
    The process-wide CartSessionManager, built in the app lifespan.
    """
    return request.app.state.cart_sessions


def get_cart_engine(
    current_user: User = Depends(require_student),
    sessions: CartSessionManager = Depends(get_cart_sessions),
) -> CartEngine:
    """
    FastAPI dependency: the signed-in student's cart engine.

    Usage:

        @router.get("/cart")
        def read_cart(engine: CartEngine = Depends(get_cart_engine)):
            ...
    """
    return sessions.get(current_user.id)
