# canteen/services/menu_service.py
import logging
import re
from datetime import date

from fastapi import HTTPException, status
from sqlmodel import Session

from canteen.core.errors import ConflictError, NotFoundError, ValidationError
from canteen.core.storage_utils import (
    upload_to_storage,
    delete_public_url,
    generate_filename,
)
from canteen.models.menu import ComboOffer, MenuItem, MenuReview
from canteen.repositories.menu_repo import MenuRepository
from canteen.schemas.menu import (
    WEEKDAYS,
    ComboCreate,
    ComboItem,
    ComboRead,
    ComboUpdate,
    MenuItemCreate,
    MenuItemDetailRead,
    MenuItemRead,
    MenuItemUpdate,
    MenuReviewRead,
)

logger = logging.getLogger(__name__)


# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class MenuService:
    """
    Business logic for the catalog: menu items, reviews and combo offers.

    Responsibilities:
      - id (slug) generation & uniqueness
      - validation beyond pydantic (customization options, combo items)
      - image upload/delete orchestration with Supabase
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(self, repo: MenuRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _slugify(raw: str) -> str:
        """
        Basic slugification:
          - lowercase
          - non-alphanumeric -> '-'
          - collapse multiple '-'
          - strip leading/trailing '-'
        """
        value = raw.strip().lower()
        value = re.sub(r"[^a-z0-9]+", "-", value)
        value = re.sub(r"-+", "-", value)
        value = value.strip("-")
        return value or "item"

    def _ensure_unique_id(self, session: Session, base: str) -> str:
        """
        Ensure item id is unique by appending -2, -3, ... if needed.
        """
        candidate = base
        i = 2
        while self.repo.get_by_id(session, candidate) is not None:
            candidate = f"{base}-{i}"
            i += 1
        return candidate

    @staticmethod
    def _validate_options(options: dict[str, list[str]]) -> dict[str, list[str]]:
        cleaned: dict[str, list[str]] = {}
        for name, values in options.items():
            name = name.strip()
            values = [v.strip() for v in values if v and v.strip()]
            if not name or not values:
                raise ValidationError("Customization options need a name and at least one value")
            cleaned[name] = values
        return cleaned

    @staticmethod
    def _validate_and_get_ext(content_type: str, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise ValidationError("Unsupported image type. Allowed: JPEG, PNG, WEBP.")

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Image too large (max 5MB).",
            )

        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    # ----- Menu items -----

    def get_all_menu_items(
        self,
        session: Session,
        category: str | None = None,
        search: str | None = None,
        only_available: bool = False,
    ) -> list[MenuItem]:
        return self.repo.list_items(
            session,
            category=category,
            search=search,
            only_available=only_available,
        )

    def get_menu_item(self, session: Session, item_id: str) -> MenuItem:
        item = self.repo.get_by_id(session, item_id)
        if not item:
            raise NotFoundError("Menu item not found")
        return item

    def get_menu_item_detail(self, session: Session, item_id: str) -> MenuItemDetailRead:
        item = self.get_menu_item(session, item_id)
        reviews = self.repo.list_reviews(session, item.id)
        return MenuItemDetailRead(
            **MenuItemRead.model_validate(item).model_dump(),
            reviews=[MenuReviewRead.model_validate(r) for r in reviews],
        )

    def list_categories(self, session: Session) -> list[str]:
        return sorted({item.category for item in self.repo.list_items(session)})

    def create_item(self, session: Session, payload: MenuItemCreate) -> MenuItem:
        """
        Create a menu item.

        - explicit id => slugified, 409 if taken
        - no id => slug from name, made unique with -2, -3, ...
        """
        if payload.id:
            item_id = self._slugify(payload.id)
            if self.repo.get_by_id(session, item_id) is not None:
                raise ConflictError(f"Menu item '{item_id}' already exists")
        else:
            item_id = self._ensure_unique_id(session, self._slugify(payload.name))

        item = MenuItem(
            id=item_id,
            name=payload.name,
            description=payload.description,
            price=payload.price,
            category=payload.category,
            image=payload.image,
            available=payload.available,
            preparation_time=payload.preparation_time,
            stock_quantity=payload.stock_quantity,
            cost_price=payload.cost_price,
            customization_options=self._validate_options(payload.customization_options),
        )
        item = self.repo.create(session, item)
        logger.info("Menu item created: %s", item.id)
        return item

    def update_item(self, session: Session, item_id: str, payload: MenuItemUpdate) -> MenuItem:
        """
        Partial update of a menu item.
        """
        item = self.get_menu_item(session, item_id)
        data = payload.model_dump(exclude_unset=True)

        if "customization_options" in data and data["customization_options"] is not None:
            data["customization_options"] = self._validate_options(data["customization_options"])

        for field, value in data.items():
            if value is not None:
                setattr(item, field, value)

        return self.repo.update(session, item)

    def set_availability(self, session: Session, item_id: str, available: bool) -> MenuItem:
        item = self.get_menu_item(session, item_id)
        item.available = available
        return self.repo.update(session, item)

    def delete_item(self, session: Session, item_id: str) -> None:
        """
        Delete a menu item with its reviews, and clean up its image in Storage.

        Past orders keep their own copy of the item and are not affected.
        """
        item = self.get_menu_item(session, item_id)
        if item.image:
            delete_public_url(item.image)
        self.repo.delete(session, item)
        logger.info("Menu item deleted: %s", item_id)

    def set_image(
        self,
        session: Session,
        item_id: str,
        content_type: str,
        file_bytes: bytes,
    ) -> MenuItem:
        """
        Upload or replace the image for a menu item.

        - Validates content type + size.
        - Deletes old image from Storage if it lives in our bucket.
        - Uploads to menu/<item_id>/<uuid>.<ext>
        """
        item = self.get_menu_item(session, item_id)
        ext = self._validate_and_get_ext(content_type, file_bytes)

        if item.image:
            delete_public_url(item.image)

        path = f"menu/{item.id}/{generate_filename(ext)}"
        item.image = upload_to_storage(path, file_bytes)
        return self.repo.update(session, item)

    # ----- Reviews -----

    def add_review(
        self,
        session: Session,
        item_id: str,
        rating: float,
        comment: str,
        user_name: str,
    ) -> MenuReview:
        """
        Store a review and fold it into the item's running average.
        """
        item = self.get_menu_item(session, item_id)
        review = self.repo.add_review(
            session,
            MenuReview(
                item_id=item.id,
                rating=rating,
                comment=comment.strip(),
                user_name=user_name,
            ),
        )

        total = item.total_reviews + 1
        item.average_rating = round((item.average_rating * item.total_reviews + rating) / total, 2)
        item.total_reviews = total
        self.repo.update(session, item, commit=False)

        session.commit()
        session.refresh(review)
        return review

    # ----- Combos -----

    @staticmethod
    def is_combo_active(combo: ComboOffer, today: date) -> bool:
        """Switched on and not past its valid_until date."""
        if not combo.is_active:
            return False
        return combo.valid_until is None or combo.valid_until >= today

    def _combo_dto(self, combo: ComboOffer, today: date) -> ComboRead:
        return ComboRead(
            id=combo.id,
            name=combo.name,
            description=combo.description,
            items=[ComboItem(**entry) for entry in combo.items or []],
            original_price=combo.original_price,
            discounted_price=combo.discounted_price,
            savings=round(combo.original_price - combo.discounted_price, 2),
            valid_days=list(combo.valid_days or []),
            valid_until=combo.valid_until,
            is_active=combo.is_active,
            available_today=(
                self.is_combo_active(combo, today)
                and WEEKDAYS[today.weekday()] in (combo.valid_days or [])
            ),
        )

    def _price_combo_items(self, session: Session, items: list[ComboItem]) -> float:
        catalog = self.repo.get_many(session, [entry.id for entry in items])
        missing = [entry.id for entry in items if entry.id not in catalog]
        if missing:
            raise ValidationError(f"Unknown menu item(s) in combo: {', '.join(missing)}")
        return round(sum(catalog[entry.id].price * entry.quantity for entry in items), 2)

    def get_combo(self, session: Session, combo_id: str) -> ComboOffer:
        combo = self.repo.get_combo(session, combo_id)
        if not combo:
            raise NotFoundError("Combo offer not found")
        return combo

    def get_active_combos(self, session: Session, today: date | None = None) -> list[ComboRead]:
        today = today or date.today()
        return [
            self._combo_dto(combo, today)
            for combo in self.repo.list_combos(session, only_active=True)
            if self.is_combo_active(combo, today)
        ]

    def list_combos(self, session: Session, today: date | None = None) -> list[ComboRead]:
        today = today or date.today()
        return [self._combo_dto(combo, today) for combo in self.repo.list_combos(session)]

    def combo_read(self, combo: ComboOffer, today: date | None = None) -> ComboRead:
        return self._combo_dto(combo, today or date.today())

    def create_combo(self, session: Session, payload: ComboCreate) -> ComboOffer:
        catalog_price = self._price_combo_items(session, payload.items)
        original = payload.original_price if payload.original_price is not None else catalog_price
        if payload.discounted_price > original:
            raise ValidationError("Discounted price cannot exceed the original price")

        if payload.id:
            combo_id = self._slugify(payload.id)
            if self.repo.get_combo(session, combo_id) is not None:
                raise ConflictError(f"Combo '{combo_id}' already exists")
        else:
            base = self._slugify(payload.name)
            combo_id = base
            i = 2
            while self.repo.get_combo(session, combo_id) is not None:
                combo_id = f"{base}-{i}"
                i += 1

        combo = ComboOffer(
            id=combo_id,
            name=payload.name,
            description=payload.description,
            items=[entry.model_dump() for entry in payload.items],
            original_price=original,
            discounted_price=payload.discounted_price,
            valid_days=list(payload.valid_days),
            valid_until=payload.valid_until,
            is_active=payload.is_active,
        )
        return self.repo.save_combo(session, combo)

    def update_combo(self, session: Session, combo_id: str, payload: ComboUpdate) -> ComboOffer:
        combo = self.get_combo(session, combo_id)
        data = payload.model_dump(exclude_unset=True)

        if data.get("items") is not None:
            items = [ComboItem(**entry) for entry in data.pop("items")]
            catalog_price = self._price_combo_items(session, items)
            combo.items = [entry.model_dump() for entry in items]
            if "original_price" not in data:
                combo.original_price = catalog_price

        for field, value in data.items():
            if field == "valid_until" or value is not None:
                setattr(combo, field, value)

        if combo.discounted_price > combo.original_price:
            raise ValidationError("Discounted price cannot exceed the original price")

        return self.repo.save_combo(session, combo)

    def set_combo_active(self, session: Session, combo_id: str, is_active: bool) -> ComboOffer:
        combo = self.get_combo(session, combo_id)
        combo.is_active = is_active
        return self.repo.save_combo(session, combo)

    def delete_combo(self, session: Session, combo_id: str) -> None:
        combo = self.get_combo(session, combo_id)
        self.repo.delete_combo(session, combo)
