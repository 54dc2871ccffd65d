# canteen/services/cart_engine.py
"""
In-memory cart state machine for one user session.

Every command builds a new immutable CartState and swaps it in under a
lock, so readers never observe lines and totals out of step. Totals are
maintained incrementally by each command; `load` is the only place that
sums the lines.

When the engine has an owner, each line-changing command hands the new
line sequence to `on_change` (normally CartSaveQueue.schedule). That
call must not block or raise.
"""
import threading
import uuid
from typing import Callable, Iterable

from canteen.schemas.cart import (
    CartItemInput,
    CartLine,
    CartState,
    customization_fingerprint,
    make_line_id,
)

OnChange = Callable[[uuid.UUID, list[CartLine]], None]


def _money(value: float) -> float:
    return round(value, 2)


class CartEngine:
    """
    Cart commands (add / remove / update quantity / clear / open / close).

    Absent line ids are benign no-ops; nothing here raises for a
    well-formed call.
    """

    def __init__(
        self,
        owner_id: uuid.UUID | None = None,
        on_change: OnChange | None = None,
    ):
        self.owner_id = owner_id
        self._on_change = on_change
        self._state = CartState()
        self._lock = threading.RLock()

    # ---- readers ----

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def lines(self) -> list[CartLine]:
        return list(self._state.lines)

    def get_line(self, line_id: str) -> CartLine | None:
        for line in self._state.lines:
            if line.line_id == line_id:
                return line
        return None

    def get_total_price(self) -> float:
        return self._state.total

    def get_total_items(self) -> int:
        return self._state.item_count

    # ---- commands ----

    def add_item(
        self,
        item: CartItemInput,
        customization: dict[str, str] | None = None,
    ) -> CartState:
        """
        Add one unit of `item`.

        Merges into the line with the same item id and customization
        fingerprint, otherwise appends a new line at quantity 1.
        """
        customization = dict(customization or {})
        fingerprint = customization_fingerprint(customization)

        with self._lock:
            state = self._state
            lines = list(state.lines)

            for idx, line in enumerate(lines):
                if line.item_id == item.id and line.fingerprint == fingerprint:
                    lines[idx] = line.model_copy(update={"quantity": line.quantity + 1})
                    # Merge at the line's own price so total stays == sum(lines)
                    added = line.price
                    break
            else:
                lines.append(
                    CartLine(
                        line_id=make_line_id(item.id, customization),
                        item_id=item.id,
                        name=item.name,
                        price=item.price,
                        image=item.image,
                        quantity=1,
                        customization=customization,
                    )
                )
                added = item.price

            return self._commit(
                state.model_copy(
                    update={
                        "lines": tuple(lines),
                        "total": _money(state.total + added),
                        "item_count": state.item_count + 1,
                    }
                )
            )

    def remove_item(self, line_id: str) -> CartState:
        """Drop a line entirely. No-op if the line is absent."""
        with self._lock:
            state = self._state
            target = self.get_line(line_id)
            if target is None:
                return state

            return self._commit(
                state.model_copy(
                    update={
                        "lines": tuple(l for l in state.lines if l.line_id != line_id),
                        "total": _money(state.total - target.price * target.quantity),
                        "item_count": state.item_count - target.quantity,
                    }
                )
            )

    def update_quantity(self, line_id: str, quantity: int) -> CartState:
        """
        Set a line's quantity. quantity <= 0 removes the line.
        No-op if the line is absent.
        """
        if quantity <= 0:
            return self.remove_item(line_id)

        with self._lock:
            state = self._state
            target = self.get_line(line_id)
            if target is None:
                return state

            delta = quantity - target.quantity
            if delta == 0:
                return state

            lines = tuple(
                l.model_copy(update={"quantity": quantity}) if l.line_id == line_id else l
                for l in state.lines
            )
            return self._commit(
                state.model_copy(
                    update={
                        "lines": lines,
                        "total": _money(state.total + target.price * delta),
                        "item_count": state.item_count + delta,
                    }
                )
            )

    def clear(self) -> CartState:
        """Empty the cart (keeps the open/closed flag)."""
        with self._lock:
            return self._commit(CartState(is_open=self._state.is_open))

    def consume(self, lines: Iterable[CartLine]) -> CartState:
        """
        Take a checked-out snapshot out of the cart.

        Each snapshot line lowers the matching line by its quantity, so
        units added after the snapshot was taken stay in the cart.
        """
        taken: dict[str, int] = {}
        for line in lines:
            taken[line.line_id] = taken.get(line.line_id, 0) + line.quantity

        with self._lock:
            state = self._state
            kept: list[CartLine] = []
            removed_total = 0.0
            removed_count = 0
            for line in state.lines:
                qty = min(taken.get(line.line_id, 0), line.quantity)
                removed_total += line.price * qty
                removed_count += qty
                if qty < line.quantity:
                    kept.append(line.model_copy(update={"quantity": line.quantity - qty}) if qty else line)

            if removed_count == 0:
                return state

            return self._commit(
                state.model_copy(
                    update={
                        "lines": tuple(kept),
                        "total": _money(state.total - removed_total),
                        "item_count": state.item_count - removed_count,
                    }
                )
            )

    def load(self, lines: Iterable[CartLine]) -> CartState:
        """
        Replace contents with a persisted snapshot.

        Lines with the same identity are merged and non-positive
        quantities dropped, so a hand-edited snapshot still yields a
        valid state. Does not trigger a save.
        """
        merged: dict[str, CartLine] = {}
        for line in lines:
            if line.quantity <= 0:
                continue
            key = make_line_id(line.item_id, line.customization)
            if key in merged:
                prev = merged[key]
                merged[key] = prev.model_copy(update={"quantity": prev.quantity + line.quantity})
            else:
                merged[key] = line.model_copy(update={"line_id": key})

        new_lines = tuple(merged.values())
        with self._lock:
            return self._commit(
                CartState(
                    lines=new_lines,
                    total=_money(sum(l.price * l.quantity for l in new_lines)),
                    item_count=sum(l.quantity for l in new_lines),
                    is_open=self._state.is_open,
                ),
                persist=False,
            )

    def reset(self) -> CartState:
        """Identity lost (logout): forget contents without saving."""
        with self._lock:
            return self._commit(CartState(), persist=False)

    def open(self) -> CartState:
        with self._lock:
            return self._commit(self._state.model_copy(update={"is_open": True}), persist=False)

    def close(self) -> CartState:
        with self._lock:
            return self._commit(self._state.model_copy(update={"is_open": False}), persist=False)

    # ---- internal ----

    def _commit(self, new_state: CartState, persist: bool = True) -> CartState:
        self._state = new_state
        if persist and self.owner_id is not None and self._on_change is not None:
            self._on_change(self.owner_id, list(new_state.lines))
        return new_state
