# canteen/routers/admin_menu.py
from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    UploadFile,
    status,
)
from sqlmodel import Session

from canteen.core.auth import require_admin
from canteen.database import get_session
from canteen.repositories.menu_repo import MenuRepository
from canteen.schemas.menu import (
    AvailabilityUpdate,
    ComboCreate,
    ComboRead,
    ComboUpdate,
    MenuItemCreate,
    MenuItemRead,
    MenuItemUpdate,
)
from canteen.services.menu_service import MenuService

router = APIRouter(
    prefix="/admin",
    tags=["Admin Menu"],
    dependencies=[Depends(require_admin)],
)

repo = MenuRepository()
service = MenuService(repo)


# -------- Menu items --------


@router.post("/menu", response_model=MenuItemRead, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    payload: MenuItemCreate,
    session: Session = Depends(get_session),
):
    """
    Create a menu item. The id defaults to a slug of the name.
    """
    return service.create_item(session, payload)


@router.patch("/menu/{item_id}", response_model=MenuItemRead)
def update_menu_item(
    item_id: str,
    payload: MenuItemUpdate,
    session: Session = Depends(get_session),
):
    """
    Partial update (price, stock, options, ...).
    """
    return service.update_item(session, item_id, payload)


@router.patch("/menu/{item_id}/availability", response_model=MenuItemRead)
def set_menu_item_availability(
    item_id: str,
    payload: AvailabilityUpdate,
    session: Session = Depends(get_session),
):
    return service.set_availability(session, item_id, payload.available)


@router.delete("/menu/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    item_id: str,
    session: Session = Depends(get_session),
):
    """
    Delete a menu item and its reviews. Existing orders keep their copy.
    """
    service.delete_item(session, item_id)
    return None


@router.post(
    "/menu/{item_id}/image",
    response_model=MenuItemRead,
    summary="Upload or replace the image of a menu item",
)
def upload_menu_item_image(
    item_id: str,
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    """
    Upload a new image for the menu item to Supabase Storage.

    - Accepts JPEG, PNG, WEBP.
    - Replaces any previous image stored in our bucket.
    """
    if not file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )

    file_bytes = file.file.read()
    return service.set_image(
        session=session,
        item_id=item_id,
        content_type=file.content_type,
        file_bytes=file_bytes,
    )


# -------- Combos --------


@router.get("/combos", response_model=list[ComboRead])
def list_all_combos(session: Session = Depends(get_session)):
    """
    Every combo, including inactive and expired ones.
    """
    return service.list_combos(session)


@router.post("/combos", response_model=ComboRead, status_code=status.HTTP_201_CREATED)
def create_combo(
    payload: ComboCreate,
    session: Session = Depends(get_session),
):
    """
    Create a combo. original_price defaults to the catalog price of its items.
    """
    return service.combo_read(service.create_combo(session, payload))


@router.patch("/combos/{combo_id}", response_model=ComboRead)
def update_combo(
    combo_id: str,
    payload: ComboUpdate,
    session: Session = Depends(get_session),
):
    return service.combo_read(service.update_combo(session, combo_id, payload))


@router.post("/combos/{combo_id}/toggle", response_model=ComboRead)
def toggle_combo(
    combo_id: str,
    session: Session = Depends(get_session),
):
    """
    Switch a combo on/off.
    """
    combo = service.get_combo(session, combo_id)
    return service.combo_read(service.set_combo_active(session, combo_id, not combo.is_active))


@router.delete("/combos/{combo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_combo(
    combo_id: str,
    session: Session = Depends(get_session),
):
    service.delete_combo(session, combo_id)
    return None
