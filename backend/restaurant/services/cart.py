# restaurant/services/cart.py
"""
Cart value object and its per-customer store.

`Cart` is a plain in-memory object owned by whoever handles the request; it never
talks to Firestore. `CartStore` loads/saves it under `carts/{uid}` between requests.
Totals are always recomputed from the lines (Decimal, 2 places).
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterator, List, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from restaurant.config import collection_name
from restaurant.core.errors import PlatformError, ValidationError

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Any) -> int:
    """Money as an exact integer number of cents."""
    return int(to_money(value) * 100)


@dataclass
class CartItem:
    id: str
    name: str
    unit_price: Decimal
    quantity: int = 1
    special_instructions: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return (self.unit_price * self.quantity).quantize(CENT, rounding=ROUND_HALF_UP)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit_price": float(self.unit_price),
            "quantity": self.quantity,
            "special_instructions": self.special_instructions,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartItem":
        return cls(
            id=str(d["id"]),
            name=d.get("name") or "",
            unit_price=to_money(d.get("unit_price", 0)),
            quantity=int(d.get("quantity", 1)),
            special_instructions=d.get("special_instructions"),
        )


class Cart:
    """Selected menu items keyed by item id. Every line has quantity >= 1."""

    def __init__(self, items: Optional[List[CartItem]] = None):
        self._items: Dict[str, CartItem] = {}
        for it in items or []:
            if it.quantity >= 1:
                self._items[it.id] = it

    def add(
        self,
        item_id: str,
        name: str,
        unit_price: Any,
        quantity: int = 1,
        special_instructions: Optional[str] = None,
    ) -> CartItem:
        """Insert a new line or increase the quantity of an existing one."""
        if quantity < 1:
            raise ValidationError("quantity must be at least 1")
        price = to_money(unit_price)
        if price <= 0:
            raise ValidationError("unit price must be positive")

        existing = self._items.get(item_id)
        if existing is not None:
            existing.quantity += quantity
            if special_instructions:
                existing.special_instructions = special_instructions
            return existing

        line = CartItem(
            id=item_id,
            name=name,
            unit_price=price,
            quantity=quantity,
            special_instructions=special_instructions or None,
        )
        self._items[item_id] = line
        return line

    def update_quantity(self, item_id: str, quantity: int) -> None:
        """Set the quantity directly; 0 or negative removes the line."""
        if quantity <= 0:
            self.remove(item_id)
            return
        line = self._items.get(item_id)
        if line is not None:
            line.quantity = quantity

    def remove(self, item_id: str) -> None:
        self._items.pop(item_id, None)

    def clear(self) -> None:
        self._items.clear()

    @property
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    @property
    def total_amount(self) -> Decimal:
        return sum((it.subtotal for it in self._items.values()), Decimal("0.00")).quantize(CENT)

    @property
    def item_count(self) -> int:
        return sum(it.quantity for it in self._items.values())

    def is_empty(self) -> bool:
        return not self._items

    def get(self, item_id: str) -> Optional[CartItem]:
        return self._items.get(item_id)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def to_dict(self) -> Dict[str, Any]:
        return {"items": [it.to_dict() for it in self._items.values()]}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Cart":
        raw = (data or {}).get("items") or []
        return cls([CartItem.from_dict(d) for d in raw if d.get("id")])


class CartStore:
    """Keeps each customer's cart in `carts/{uid}` between requests."""

    def __init__(self, db):
        self.db = db

    def _ref(self, uid: str):
        return self.db.collection(collection_name("carts")).document(uid)

    def load(self, uid: str) -> Cart:
        try:
            snap = self._ref(uid).get()
        except GoogleAPICallError as exc:
            raise PlatformError(f"Could not load cart: {exc}") from exc
        return Cart.from_dict(snap.to_dict() if snap.exists else None)

    def save(self, uid: str, cart: Cart) -> None:
        if cart.is_empty():
            self.clear(uid)
            return
        payload = cart.to_dict()
        payload["updated_at"] = SERVER_TIMESTAMP
        try:
            self._ref(uid).set(payload)
        except GoogleAPICallError as exc:
            raise PlatformError(f"Could not save cart: {exc}") from exc

    def clear(self, uid: str) -> None:
        try:
            self._ref(uid).delete()
        except GoogleAPICallError as exc:
            raise PlatformError(f"Could not clear cart: {exc}") from exc


def cart_to_out(uid: str, cart: Cart, currency: str) -> Dict[str, Any]:
    return {
        "user_id": uid,
        "items": [
            {
                "id": it.id,
                "name": it.name,
                "unit_price": float(it.unit_price),
                "quantity": it.quantity,
                "subtotal": float(it.subtotal),
                "special_instructions": it.special_instructions,
            }
            for it in cart.items
        ],
        "item_count": cart.item_count,
        "total_amount": float(cart.total_amount),
        "currency": currency,
    }
