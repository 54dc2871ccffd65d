# canteen/routers/users.py
import uuid
from typing import Literal

from fastapi import APIRouter, Depends
from sqlmodel import Session

from canteen.core.auth import require_auth, require_admin
from canteen.database import get_session
from canteen.models.user import User
from canteen.repositories.user_repo import UserRepository
from canteen.schemas.user import UserRead, UserUpdate, UserRoleUpdate
from canteen.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile, including wallet balance.
    """
    return service.get_me(current_user)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update the authenticated user's profile (partial update).

    Currently, only `name` is editable.
    """
    return service.update_me(session, current_user, payload)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    role: Literal["student", "admin"] | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List users (admin only), optionally by role or name/email search.
    """
    return service.list_users(session, role=role, search=search, skip=skip, limit=limit)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a specific user by id (admin only).
    """
    return service.get_user(session, user_id)


@router.patch(
    "/{user_id}/role",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
):
    """
    Update a user's role (admin only).

    Allowed roles: student, admin.
    Guests are anonymous and don't have rows.
    """
    return service.update_role(session, user_id, payload)
