# canteen/schemas/cart.py
import hashlib
import json

from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import SQLModel


def customization_fingerprint(customization: dict[str, str] | None) -> str:
    """
    Canonical, key-order independent encoding of a customization mapping.

    {"spice": "Hot", "size": "Large"} and {"size": "Large", "spice": "Hot"}
    produce the same fingerprint; None and {} both encode as "{}".
    """
    return json.dumps(
        customization or {},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def make_line_id(item_id: str, customization: dict[str, str] | None) -> str:
    """
    Stable line identifier for an (item, customization) pair.

    Plain items keep their item id as line id; customized ones get a short
    digest of the fingerprint appended: "butter-chicken~3f2a9c01d4".
    """
    if not customization:
        return item_id
    digest = hashlib.sha1(customization_fingerprint(customization).encode("utf-8"))
    return f"{item_id}~{digest.hexdigest()[:10]}"


class CartItemInput(BaseModel):
    """What the cart needs to know about a purchasable item."""

    id: str
    name: str
    price: float = Field(ge=0)
    image: str = ""


class CartLine(BaseModel):
    """
    One distinct (item, customization) pairing with a quantity.

    Frozen: the engine replaces lines instead of mutating them.
    """

    model_config = ConfigDict(frozen=True)

    line_id: str
    item_id: str
    name: str
    price: float
    image: str = ""
    quantity: int = Field(ge=1)
    customization: dict[str, str] = Field(default_factory=dict)

    @property
    def fingerprint(self) -> str:
        return customization_fingerprint(self.customization)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_document(self) -> dict:
        """Serialized form stored in the profile store."""
        return {
            "id": self.item_id,
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "quantity": self.quantity,
            "customization": dict(self.customization),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "CartLine":
        customization = dict(doc.get("customization") or {})
        return cls(
            line_id=make_line_id(doc["id"], customization),
            item_id=doc["id"],
            name=doc.get("name", doc["id"]),
            price=float(doc["price"]),
            image=doc.get("image") or "",
            quantity=int(doc["quantity"]),
            customization=customization,
        )


class CartState(BaseModel):
    """
    Immutable cart snapshot.

    total == sum(price * quantity) and item_count == sum(quantity) for
    every state the engine publishes.
    """

    model_config = ConfigDict(frozen=True)

    lines: tuple[CartLine, ...] = ()
    total: float = 0.0
    item_count: int = 0
    is_open: bool = False


# ---- API payloads ----


class CartItemAdd(SQLModel):
    """
    Payload for adding one unit of a menu item to the cart.
    """

    model_config = ConfigDict(extra="forbid")

    item_id: str
    customization: dict[str, str] = {}


class CartQuantityUpdate(SQLModel):
    """
    Payload for setting a line's quantity. Zero or negative removes the line.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int


class CartLineRead(SQLModel):
    line_id: str
    item_id: str
    name: str
    price: float
    image: str
    quantity: int
    customization: dict[str, str]
    line_total: float


class CartRead(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLineRead]
    total: float
    item_count: int
    is_open: bool

    @classmethod
    def from_state(cls, state: CartState) -> "CartRead":
        return cls(
            items=[
                CartLineRead(
                    line_id=line.line_id,
                    item_id=line.item_id,
                    name=line.name,
                    price=line.price,
                    image=line.image,
                    quantity=line.quantity,
                    customization=dict(line.customization),
                    line_total=line.line_total,
                )
                for line in state.lines
            ],
            total=state.total,
            item_count=state.item_count,
            is_open=state.is_open,
        )
