# canteen/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from canteen.core.auth import require_auth
from canteen.core.cart_sessions import get_cart_sessions
from canteen.database import get_session
from canteen.models.user import User
from canteen.repositories.user_repo import UserRepository
from canteen.schemas.user import LoginRequest, SignupRequest, TokenRead
from canteen.services.cart_service import CartSessionManager
from canteen.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
service = UserService(repo)


@router.post("/signup", response_model=TokenRead, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    session: Session = Depends(get_session),
):
    """
    Create a student account (wallet starts at 0) and return a token.

    Identity is mocked: the password is accepted but not stored.
    """
    return service.signup(session, payload)


@router.post("/login", response_model=TokenRead)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
):
    """
    Issue a token for a known email. The password is not verified.
    """
    return service.login(session, payload)


@router.post("/logout")
def logout(
    current_user: User = Depends(require_auth),
    sessions: CartSessionManager = Depends(get_cart_sessions),
):
    """
    End the caller's cart session.

    The in-memory cart is dropped; whatever was last saved is restored on
    the next login. Tokens are stateless and simply expire.
    """
    sessions.end_session(current_user.id)
    return {"detail": "Logged out"}
