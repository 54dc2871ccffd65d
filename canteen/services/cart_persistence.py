# canteen/services/cart_persistence.py
"""
Cart snapshot persistence.

ProfileStore implementations read and write the per-user cart document.
CartSaveQueue sits between the cart engines and the store: it coalesces
bursts of mutations into one write, keeps at most one write in flight,
and retries failed writes with exponential backoff. Failures end up in
the log, never in the caller.
"""
import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, Protocol

from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session

from canteen.core.supabase_client import supabase_public
from canteen.repositories.cart_repo import CartRepository
from canteen.schemas.cart import CartLine

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    def load_cart(self, owner_id: uuid.UUID) -> list[CartLine]: ...

    def save_cart(self, owner_id: uuid.UUID, lines: list[CartLine]) -> None: ...


def _parse_lines(owner_id: uuid.UUID, docs: Iterable[dict]) -> list[CartLine]:
    """Rebuild CartLines from stored dicts, skipping entries that don't parse."""
    lines: list[CartLine] = []
    for doc in docs:
        try:
            lines.append(CartLine.from_document(doc))
        except (KeyError, TypeError, ValueError, PydanticValidationError) as exc:
            logger.warning("Skipping malformed saved cart line for %s: %r (%s)", owner_id, doc, exc)
    return lines


class SqlProfileStore:
    """
    Cart documents in the `saved_carts` table.

    Runs on the save queue's worker thread, so it opens its own session
    per call instead of borrowing a request session.
    """

    def __init__(self, engine, cart_repo: CartRepository | None = None):
        self.engine = engine
        self.cart_repo = cart_repo or CartRepository()

    def load_cart(self, owner_id: uuid.UUID) -> list[CartLine]:
        with Session(self.engine) as session:
            doc = self.cart_repo.get(session, owner_id)
            if doc is None:
                return []
            return _parse_lines(owner_id, doc.items or [])

    def save_cart(self, owner_id: uuid.UUID, lines: list[CartLine]) -> None:
        with Session(self.engine) as session:
            self.cart_repo.replace(session, owner_id, [line.to_document() for line in lines])


class SupabaseProfileStore:
    """
    Cart documents embedded in a Supabase profile row:

        {"user_id": "<uuid>", "cart": {"items": [...], "lastUpdated": "<iso>"}}
    """

    def __init__(self, client_factory: Callable = supabase_public, table: str = "profiles"):
        self.client_factory = client_factory
        self.table = table

    def load_cart(self, owner_id: uuid.UUID) -> list[CartLine]:
        res = (
            self.client_factory()
            .table(self.table)
            .select("cart")
            .eq("user_id", str(owner_id))
            .limit(1)
            .execute()
        )
        rows = res.data or []
        if not rows:
            return []
        cart = rows[0].get("cart") or {}
        return _parse_lines(owner_id, cart.get("items") or [])

    def save_cart(self, owner_id: uuid.UUID, lines: list[CartLine]) -> None:
        payload = {
            "user_id": str(owner_id),
            "cart": {
                "items": [line.to_document() for line in lines],
                "lastUpdated": datetime.now(timezone.utc).isoformat(),
            },
        }
        self.client_factory().table(self.table).upsert(payload).execute()


class CartSaveQueue:
    """
    Coalescing, single-worker save queue.

    Guarantees:
      - one snapshot pending per owner; a newer snapshot replaces it
      - one save in flight at a time (a single worker thread)
      - a failed save is retried max_retries times, sleeping
        backoff_seconds * 2**attempt between attempts, unless a newer
        snapshot for the same owner has arrived meanwhile

    The worker thread is started lazily on the first schedule().
    """

    def __init__(
        self,
        store: ProfileStore,
        debounce_seconds: float = 0.5,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.debounce_seconds = max(0.0, debounce_seconds)
        self.max_retries = max(0, max_retries)
        self.backoff_seconds = max(0.0, backoff_seconds)
        self._sleep = sleep

        # owner -> (lines, due monotonic time)
        self._pending: dict[uuid.UUID, tuple[list[CartLine], float]] = {}
        self._in_flight: set[uuid.UUID] = set()
        self._lock = threading.RLock()
        self._cond = threading.Condition(self._lock)
        self._stopped = False
        self._thread: threading.Thread | None = None

    # -------- producer side --------

    def schedule(self, owner_id: uuid.UUID, lines: list[CartLine]) -> None:
        """Queue a snapshot for saving. Never blocks on I/O, never raises."""
        with self._cond:
            if self._stopped:
                logger.warning("Cart save queue stopped, dropping save for %s", owner_id)
                return
            due = time.monotonic() + self.debounce_seconds
            self._pending[owner_id] = (list(lines), due)
            self._ensure_worker()
            self._cond.notify_all()

    def cancel(self, owner_id: uuid.UUID) -> bool:
        """Drop the pending (not yet started) save for an owner."""
        with self._cond:
            dropped = self._pending.pop(owner_id, None) is not None
            self._cond.notify_all()
            return dropped

    def has_pending(self, owner_id: uuid.UUID | None = None) -> bool:
        with self._lock:
            if owner_id is None:
                return bool(self._pending or self._in_flight)
            return owner_id in self._pending or owner_id in self._in_flight

    def flush(self, owner_id: uuid.UUID | None = None, timeout: float | None = None) -> bool:
        """
        Make pending saves due now and wait until they are written.

        With `owner_id`, only that owner's work is awaited.
        Returns False if the timeout expired first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            now = time.monotonic()
            for key, (lines, due) in list(self._pending.items()):
                if owner_id is None or key == owner_id:
                    self._pending[key] = (lines, min(due, now))
            self._cond.notify_all()

            while self.has_pending(owner_id):
                if self._thread is None or not self._thread.is_alive():
                    return False
                if deadline is None:
                    self._cond.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                    self._cond.wait(remaining)
            return True

    def shutdown(self, timeout: float | None = 5.0) -> None:
        """Flush what is queued, then stop the worker. Leftovers are dropped."""
        if not self.flush(timeout=timeout):
            with self._cond:
                unsaved = len(self._pending) + len(self._in_flight)
            logger.error("Cart save queue shutdown with %d unsaved cart(s)", unsaved)
        with self._cond:
            self._stopped = True
            self._pending.clear()
            self._cond.notify_all()
            thread = self._thread
        if thread is not None:
            thread.join(timeout)

    # -------- worker side --------

    def _ensure_worker(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(
                target=self._run,
                name="cart-save-queue",
                daemon=True,
            )
            self._thread.start()

    def _next_due(self) -> tuple[uuid.UUID | None, float | None]:
        now = time.monotonic()
        earliest: float | None = None
        for owner_id, (_, due) in self._pending.items():
            if owner_id in self._in_flight:
                continue
            if due <= now:
                return owner_id, None
            earliest = due if earliest is None else min(earliest, due)
        return None, (None if earliest is None else earliest - now)

    def _run(self) -> None:
        while True:
            with self._cond:
                while True:
                    if self._stopped:
                        return
                    owner_id, wait = self._next_due()
                    if owner_id is not None:
                        break
                    self._cond.wait(wait)
                lines, _ = self._pending.pop(owner_id)
                self._in_flight.add(owner_id)

            try:
                self._save_with_retry(owner_id, lines)
            finally:
                with self._cond:
                    self._in_flight.discard(owner_id)
                    self._cond.notify_all()

    def _save_with_retry(self, owner_id: uuid.UUID, lines: list[CartLine]) -> bool:
        for attempt in range(self.max_retries + 1):
            try:
                self.store.save_cart(owner_id, lines)
                logger.debug("Saved cart for %s (%d line(s))", owner_id, len(lines))
                return True
            except Exception as exc:
                logger.warning(
                    "Cart save failed for %s (attempt %d/%d): %s",
                    owner_id,
                    attempt + 1,
                    self.max_retries + 1,
                    exc,
                )

            if attempt == self.max_retries:
                break

            with self._lock:
                if owner_id in self._pending:
                    logger.info("Newer cart snapshot queued for %s, abandoning retries", owner_id)
                    return False

            self._sleep(self.backoff_seconds * (2 ** attempt))

        logger.error("Giving up on cart save for %s after %d attempt(s)", owner_id, self.max_retries + 1)
        return False
