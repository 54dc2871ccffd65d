# canteen/services/cart_service.py
import logging
import threading
import uuid

from sqlmodel import Session

from canteen.core.config import Settings
from canteen.core.errors import NotFoundError, ValidationError
from canteen.models.menu import MenuItem
from canteen.repositories.menu_repo import MenuRepository
from canteen.schemas.cart import (
    CartItemAdd,
    CartItemInput,
    CartQuantityUpdate,
    CartRead,
)
from canteen.services.cart_engine import CartEngine
from canteen.services.cart_persistence import (
    CartSaveQueue,
    ProfileStore,
    SqlProfileStore,
    SupabaseProfileStore,
)

logger = logging.getLogger(__name__)


class CartSessionManager:
    """
    Holds one CartEngine per signed-in user.

    The first access for a user restores the persisted snapshot; every
    later mutation is saved through the shared CartSaveQueue.
    """

    def __init__(self, store: ProfileStore, queue: CartSaveQueue):
        self.store = store
        self.queue = queue
        self._engines: dict[uuid.UUID, CartEngine] = {}
        self._lock = threading.RLock()

    def get(self, owner_id: uuid.UUID) -> CartEngine:
        with self._lock:
            engine = self._engines.get(owner_id)
        if engine is not None:
            return engine

        # Restored outside the manager lock. A save from the previous
        # session may still be queued.
        self.queue.flush(owner_id, timeout=5.0)
        saved = self.store.load_cart(owner_id)

        with self._lock:
            engine = self._engines.get(owner_id)
            if engine is None:
                engine = CartEngine(owner_id=owner_id, on_change=self.queue.schedule)
                engine.load(saved)
                self._engines[owner_id] = engine
                logger.info("Cart session started for %s (%d item(s))", owner_id, engine.get_total_items())
            return engine

    def end_session(self, owner_id: uuid.UUID) -> None:
        """
        Logout: forget the in-memory cart. Already queued saves still run,
        so the next login restores the last saved contents.
        """
        with self._lock:
            engine = self._engines.pop(owner_id, None)
        if engine is not None:
            engine.reset()
            logger.info("Cart session ended for %s", owner_id)

    def active_sessions(self) -> int:
        with self._lock:
            return len(self._engines)

    def shutdown(self, timeout: float | None = 5.0) -> None:
        self.queue.shutdown(timeout)
        with self._lock:
            self._engines.clear()


def build_cart_sessions(settings: Settings, engine) -> CartSessionManager:
    """
    Wire the profile store selected by CART_STORE to a save queue.
    """
    if settings.CART_STORE == "supabase":
        store: ProfileStore = SupabaseProfileStore(table=settings.SUPABASE_PROFILE_TABLE)
    else:
        store = SqlProfileStore(engine)

    queue = CartSaveQueue(
        store,
        debounce_seconds=settings.CART_SAVE_DEBOUNCE_SECONDS,
        max_retries=settings.CART_SAVE_MAX_RETRIES,
        backoff_seconds=settings.CART_SAVE_BACKOFF_SECONDS,
    )
    return CartSessionManager(store, queue)


class CartService:
    """
    Business rules in front of the cart engine.

    Responsibilities:
      - resolve menu items and check they are orderable
      - validate customization choices against the item's options
      - translate engine state into CartRead responses

    Line-level commands on absent lines are no-ops and simply return
    the current cart.
    """

    def __init__(self, menu_repo: MenuRepository):
        self.menu_repo = menu_repo

    # ---- internal helpers ----

    def _get_orderable_item(self, session: Session, item_id: str) -> MenuItem:
        item = self.menu_repo.get_by_id(session, item_id)
        if not item:
            raise NotFoundError("Menu item not found")
        if not item.available:
            raise ValidationError(f"{item.name} is currently unavailable")
        return item

    def _validate_customization(self, item: MenuItem, customization: dict[str, str]) -> dict[str, str]:
        options = item.customization_options or {}
        cleaned: dict[str, str] = {}
        for key, value in customization.items():
            if value in (None, ""):
                continue
            allowed = options.get(key)
            if allowed is None:
                raise ValidationError(f"{item.name} has no '{key}' option")
            if value not in allowed:
                raise ValidationError(
                    f"Invalid {key} '{value}' for {item.name}. Choose one of: {', '.join(allowed)}"
                )
            cleaned[key] = value
        return cleaned

    # ---- public operations ----

    def get_cart(self, engine: CartEngine) -> CartRead:
        return CartRead.from_state(engine.state)

    def add_to_cart(
        self,
        session: Session,
        engine: CartEngine,
        payload: CartItemAdd,
    ) -> CartRead:
        """
        Add one unit of a menu item.

        Rules:
          - item must exist (404) and be available (400)
          - every customization key must be one of the item's options
            and its value one of the allowed choices
          - the unit price is the catalog price at the time of adding
        """
        item = self._get_orderable_item(session, payload.item_id)
        customization = self._validate_customization(item, payload.customization)

        state = engine.add_item(
            CartItemInput(id=item.id, name=item.name, price=item.price, image=item.image),
            customization,
        )
        return CartRead.from_state(state)

    def update_quantity(
        self,
        engine: CartEngine,
        line_id: str,
        payload: CartQuantityUpdate,
    ) -> CartRead:
        return CartRead.from_state(engine.update_quantity(line_id, payload.quantity))

    def remove_item(self, engine: CartEngine, line_id: str) -> CartRead:
        return CartRead.from_state(engine.remove_item(line_id))

    def clear_cart(self, engine: CartEngine) -> CartRead:
        return CartRead.from_state(engine.clear())

    def open_cart(self, engine: CartEngine) -> CartRead:
        return CartRead.from_state(engine.open())

    def close_cart(self, engine: CartEngine) -> CartRead:
        return CartRead.from_state(engine.close())
