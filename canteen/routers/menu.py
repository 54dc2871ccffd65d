# canteen/routers/menu.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from canteen.core.auth import require_auth
from canteen.database import get_session
from canteen.models.user import User
from canteen.repositories.menu_repo import MenuRepository
from canteen.schemas.menu import (
    ComboRead,
    MenuItemDetailRead,
    MenuItemRead,
    MenuReviewCreate,
    MenuReviewRead,
)
from canteen.services.menu_service import MenuService

router = APIRouter(prefix="/menu", tags=["Menu"])

repo = MenuRepository()
service = MenuService(repo)


# -------- Public catalog (guests allowed) --------


@router.get("/items", response_model=list[MenuItemRead])
def list_menu_items(
    session: Session = Depends(get_session),
    category: str | None = None,
    search: str | None = None,
    available_only: bool = False,
):
    """
    Browse the menu.

    Filters:
      - category: exact category name
      - search: substring of name or description
      - available_only: hide items switched off by the kitchen
    """
    return service.get_all_menu_items(
        session,
        category=category,
        search=search,
        only_available=available_only,
    )


@router.get("/categories", response_model=list[str])
def list_categories(session: Session = Depends(get_session)):
    return service.list_categories(session)


@router.get("/items/{item_id}", response_model=MenuItemDetailRead)
def get_menu_item(
    item_id: str,
    session: Session = Depends(get_session),
):
    """
    Single menu item with its reviews.
    """
    return service.get_menu_item_detail(session, item_id)


@router.get("/combos", response_model=list[ComboRead])
def list_active_combos(session: Session = Depends(get_session)):
    """
    Combos that are switched on and not expired.
    `available_today` tells whether today is one of the valid days.
    """
    return service.get_active_combos(session)


# -------- Reviews (signed-in users) --------


@router.post(
    "/items/{item_id}/reviews",
    response_model=MenuReviewRead,
    status_code=status.HTTP_201_CREATED,
)
def add_review(
    item_id: str,
    payload: MenuReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Rate a menu item (1-5). Updates the item's average rating.
    """
    return service.add_review(
        session,
        item_id=item_id,
        rating=payload.rating,
        comment=payload.comment,
        user_name=current_user.name,
    )
