"""Shopping cart state and its persistent store."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from storefront.errors import ParseError, ValidationError
from storefront.state.store import PersistentStore

LineKey = Tuple[str, Optional[str], Optional[str]]


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    price: float
    quantity: int
    size: Optional[str] = None
    color: Optional[str] = None
    image: Optional[str] = None

    @property
    def key(self) -> LineKey:
        return (self.product_id, self.size, self.color)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "size": self.size,
            "color": self.color,
            "image": self.image,
        }


@dataclass(frozen=True)
class CartState:
    lines: Tuple[CartLine, ...] = ()
    is_open: bool = False

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total(self) -> float:
        return sum(line.line_total for line in self.lines)

    def find(self, key: LineKey) -> Optional[CartLine]:
        for line in self.lines:
            if line.key == key:
                return line
        return None

    def with_added(self, line: CartLine) -> "CartState":
        existing = self.find(line.key)
        if existing is None:
            return replace(self, lines=self.lines + (line,))
        merged = replace(existing, quantity=existing.quantity + line.quantity)
        return replace(self, lines=tuple(merged if l.key == line.key else l for l in self.lines))

    def with_quantity(self, key: LineKey, quantity: int) -> "CartState":
        if self.find(key) is None:
            return self
        if quantity <= 0:
            return self.without(key)
        return replace(
            self,
            lines=tuple(replace(l, quantity=quantity) if l.key == key else l for l in self.lines),
        )

    def without(self, key: LineKey) -> "CartState":
        return replace(self, lines=tuple(l for l in self.lines if l.key != key))


def _line_from_dict(raw: Any) -> CartLine:
    if not isinstance(raw, dict):
        raise ParseError("Cart line is not an object")
    try:
        line = CartLine(
            product_id=str(raw["product_id"]),
            name=str(raw["name"]),
            price=float(raw["price"]),
            quantity=int(raw["quantity"]),
            size=raw.get("size"),
            color=raw.get("color"),
            image=raw.get("image"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ParseError("Malformed cart line") from exc
    if not math.isfinite(line.price) or line.price < 0 or line.quantity < 1:
        raise ParseError("Cart line out of range")
    return line


class CartStore(PersistentStore[CartState]):
    storage_key = "cart"

    def empty(self) -> CartState:
        return CartState()

    def encode(self, state: CartState) -> Dict[str, Any]:
        # is_open is a visibility flag and stays out of storage
        return {"lines": [line.to_dict() for line in state.lines]}

    def decode(self, data: Dict[str, Any]) -> CartState:
        raw_lines = data.get("lines")
        if not isinstance(raw_lines, list):
            raise ParseError("Cart record has no line list")
        state = CartState()
        for raw in raw_lines:
            state = state.with_added(_line_from_dict(raw))
        return state

    # --- derived ---
    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return self.snapshot.lines

    @property
    def item_count(self) -> int:
        return self.snapshot.item_count

    @property
    def total(self) -> float:
        return self.snapshot.total

    @property
    def is_open(self) -> bool:
        return self.snapshot.is_open

    # --- mutators ---
    def add_item(
        self,
        product_id: str,
        name: str,
        price: float,
        quantity: int = 1,
        size: Optional[str] = None,
        color: Optional[str] = None,
        image: Optional[str] = None,
    ) -> CartState:
        if price is None or isinstance(price, bool) or not math.isfinite(price) or price < 0:
            raise ValidationError("Price must be a finite number >= 0", {"price": repr(price)})
        if not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("Quantity must be a whole number >= 1", {"quantity": quantity})

        line = CartLine(
            product_id=str(product_id),
            name=name,
            price=price,
            quantity=int(quantity),
            size=size,
            color=color,
            image=image,
        )
        return self._commit(self.snapshot.with_added(line))

    def update_quantity(
        self,
        product_id: str,
        quantity: int,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> CartState:
        return self._commit(self.snapshot.with_quantity((str(product_id), size, color), int(quantity)))

    def remove_item(self, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> CartState:
        return self._commit(self.snapshot.without((str(product_id), size, color)))

    def clear(self) -> CartState:
        return self._commit(replace(self.snapshot, lines=()))

    def open_cart(self) -> CartState:
        return self._replace_transient(replace(self.snapshot, is_open=True))

    def close_cart(self) -> CartState:
        return self._replace_transient(replace(self.snapshot, is_open=False))
