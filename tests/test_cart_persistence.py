import logging
import threading
import time
import uuid

from canteen.repositories.cart_repo import CartRepository
from canteen.schemas.cart import CartItemInput
from canteen.services.cart_engine import CartEngine
from canteen.services.cart_persistence import CartSaveQueue, SqlProfileStore
from canteen.services.cart_service import CartSessionManager

CHAI = CartItemInput(id="chai", name="Masala Chai", price=25)
SAMOSA = CartItemInput(id="samosa", name="Vegetable Samosa", price=30)


class RecordingStore:
    def __init__(self, failures: int = 0):
        self.failures = failures
        self.attempts = 0
        self.saved: list[tuple[uuid.UUID, list]] = []
        self._lock = threading.Lock()

    def load_cart(self, owner_id):
        for owner, lines in reversed(self.saved):
            if owner == owner_id:
                return list(lines)
        return []

    def save_cart(self, owner_id, lines):
        with self._lock:
            self.attempts += 1
            if self.attempts <= self.failures:
                raise ConnectionError("profile store unavailable")
            self.saved.append((owner_id, list(lines)))


class BlockingStore(RecordingStore):
    """Saves hang until `release` is set."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def save_cart(self, owner_id, lines):
        self.started.set()
        assert self.release.wait(10)
        super().save_cart(owner_id, lines)


def lines_of(*items):
    engine = CartEngine()
    for item in items:
        engine.add_item(item)
    return engine.lines


class TestCartSaveQueue:
    def test_burst_of_changes_is_saved_once(self):
        store = RecordingStore()
        queue = CartSaveQueue(store, debounce_seconds=0.5)
        owner = uuid.uuid4()

        queue.schedule(owner, lines_of(CHAI))
        queue.schedule(owner, lines_of(CHAI, CHAI))
        queue.schedule(owner, lines_of(CHAI, CHAI, SAMOSA))

        assert queue.flush(timeout=5)
        assert len(store.saved) == 1
        saved_owner, saved_lines = store.saved[0]
        assert saved_owner == owner
        assert [(l.item_id, l.quantity) for l in saved_lines] == [("chai", 2), ("samosa", 1)]
        queue.shutdown()

    def test_owners_are_saved_independently(self):
        store = RecordingStore()
        queue = CartSaveQueue(store, debounce_seconds=0.5)
        a, b = uuid.uuid4(), uuid.uuid4()

        queue.schedule(a, lines_of(CHAI))
        queue.schedule(b, lines_of(SAMOSA))

        assert queue.flush(timeout=5)
        assert {owner for owner, _ in store.saved} == {a, b}
        queue.shutdown()

    def test_failed_save_is_retried_with_backoff(self):
        store = RecordingStore(failures=2)
        sleeps = []
        queue = CartSaveQueue(
            store,
            debounce_seconds=0,
            max_retries=3,
            backoff_seconds=0.1,
            sleep=sleeps.append,
        )
        owner = uuid.uuid4()

        queue.schedule(owner, lines_of(CHAI))

        assert queue.flush(timeout=5)
        assert store.attempts == 3
        assert len(store.saved) == 1
        assert sleeps == [0.1, 0.2]
        queue.shutdown()

    def test_gives_up_after_max_retries(self):
        store = RecordingStore(failures=100)
        queue = CartSaveQueue(store, debounce_seconds=0, max_retries=2, sleep=lambda s: None)
        owner = uuid.uuid4()

        queue.schedule(owner, lines_of(CHAI))

        assert queue.flush(timeout=5)
        assert store.attempts == 3
        assert store.saved == []
        assert not queue.has_pending(owner)
        queue.shutdown()

    def test_cancel_drops_pending_snapshot(self):
        store = RecordingStore()
        queue = CartSaveQueue(store, debounce_seconds=60)
        owner = uuid.uuid4()

        queue.schedule(owner, lines_of(CHAI))
        assert queue.has_pending(owner)
        assert queue.cancel(owner) is True
        assert queue.cancel(owner) is False
        assert not queue.has_pending()
        queue.shutdown()
        assert store.saved == []

    def test_schedule_after_shutdown_is_ignored(self):
        store = RecordingStore()
        queue = CartSaveQueue(store, debounce_seconds=0)
        queue.shutdown()

        queue.schedule(uuid.uuid4(), lines_of(CHAI))

        assert not queue.has_pending()
        assert store.saved == []

    def test_flush_with_nothing_queued_returns_immediately(self):
        queue = CartSaveQueue(RecordingStore())
        assert queue.flush(timeout=0.1) is True

    def test_shutdown_reports_saves_still_in_flight(self, caplog):
        store = BlockingStore()
        queue = CartSaveQueue(store, debounce_seconds=0)
        queue.schedule(uuid.uuid4(), lines_of(CHAI))
        assert store.started.wait(5)

        with caplog.at_level(logging.ERROR, logger="canteen.services.cart_persistence"):
            queue.shutdown(timeout=0.2)
        store.release.set()

        assert "shutdown with 1 unsaved cart(s)" in caplog.text


class TestSqlProfileStore:
    def test_saved_cart_is_loaded_back(self, db_engine):
        store = SqlProfileStore(db_engine)
        owner = uuid.uuid4()
        engine = CartEngine()
        engine.add_item(CHAI)
        engine.add_item(CHAI)
        engine.add_item(SAMOSA, {"spiceLevel": "Hot"})

        store.save_cart(owner, engine.lines)

        assert store.load_cart(owner) == engine.lines

    def test_unknown_owner_has_empty_cart(self, db_engine):
        assert SqlProfileStore(db_engine).load_cart(uuid.uuid4()) == []

    def test_malformed_entries_are_skipped(self, db_engine, session):
        owner = uuid.uuid4()
        CartRepository().replace(
            session,
            owner,
            [
                {"id": "chai", "name": "Masala Chai", "price": 25, "quantity": 2},
                {"name": "no id"},
                {"id": "samosa", "price": "free", "quantity": 1},
            ],
        )

        lines = SqlProfileStore(db_engine).load_cart(owner)

        assert [(l.item_id, l.quantity) for l in lines] == [("chai", 2)]


class TestCartSessionManager:
    def test_cart_survives_logout_and_login(self, db_engine):
        store = SqlProfileStore(db_engine)
        sessions = CartSessionManager(store, CartSaveQueue(store, debounce_seconds=0))
        owner = uuid.uuid4()

        sessions.get(owner).add_item(CHAI)
        sessions.get(owner).add_item(CHAI)
        sessions.end_session(owner)
        assert sessions.active_sessions() == 0

        restored = sessions.get(owner)

        assert restored.get_line("chai").quantity == 2
        assert restored.get_total_price() == 50
        sessions.shutdown()

    def test_same_engine_within_a_session(self, db_engine):
        store = SqlProfileStore(db_engine)
        sessions = CartSessionManager(store, CartSaveQueue(store, debounce_seconds=0))
        owner = uuid.uuid4()

        assert sessions.get(owner) is sessions.get(owner)
        sessions.shutdown()

    def test_slow_restore_does_not_block_other_users(self):
        store = BlockingStore()
        queue = CartSaveQueue(store, debounce_seconds=0)
        sessions = CartSessionManager(store, queue)
        slow, busy = uuid.uuid4(), uuid.uuid4()
        busy_cart = sessions.get(busy)

        # `slow` logged out with a save still being written
        queue.schedule(slow, lines_of(CHAI, CHAI))
        assert store.started.wait(5)
        restoring = threading.Thread(target=sessions.get, args=(slow,))
        restoring.start()
        time.sleep(0.1)

        started = time.monotonic()
        assert sessions.get(busy) is busy_cart
        assert time.monotonic() - started < 0.5
        assert restoring.is_alive()

        store.release.set()
        restoring.join(5)
        assert sessions.get(slow).get_line("chai").quantity == 2
        sessions.shutdown()
