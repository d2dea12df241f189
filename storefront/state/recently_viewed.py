"""Recently viewed products, newest first, deduplicated and bounded."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from storefront.errors import ParseError
from storefront.state.store import PersistentStore

DEFAULT_LIMIT = 8


@dataclass(frozen=True)
class RecentlyViewedEntry:
    product_id: str
    name: str
    slug: Optional[str]
    image: Optional[str]
    price: float
    is_new: bool = False
    is_sale: bool = False
    viewed_at: float = 0.0

    @classmethod
    def from_product(cls, product, viewed_at: Optional[float] = None) -> "RecentlyViewedEntry":
        return cls(
            product_id=str(product.id),
            name=product.name,
            slug=product.slug,
            image=product.images[0] if product.images else None,
            price=product.price,
            is_new=bool(product.is_new),
            is_sale=bool(product.is_sale),
            viewed_at=time.time() if viewed_at is None else viewed_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "slug": self.slug,
            "image": self.image,
            "price": self.price,
            "is_new": self.is_new,
            "is_sale": self.is_sale,
            "viewed_at": self.viewed_at,
        }


class RecentlyViewedStore(PersistentStore[Tuple[RecentlyViewedEntry, ...]]):
    """Most-recent-first product history, bounded to `limit` entries."""

    storage_key = "recently_viewed"

    def __init__(self, storage, limit: int = DEFAULT_LIMIT):
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.limit = limit
        super().__init__(storage)

    def empty(self) -> Tuple[RecentlyViewedEntry, ...]:
        return ()

    def encode(self, state) -> Dict[str, Any]:
        return {"entries": [entry.to_dict() for entry in state]}

    def decode(self, data: Dict[str, Any]) -> Tuple[RecentlyViewedEntry, ...]:
        raw_entries = data.get("entries")
        if not isinstance(raw_entries, list):
            raise ParseError("Recently viewed record has no entry list")
        entries = []
        seen = set()
        for raw in raw_entries:
            try:
                entry = RecentlyViewedEntry(
                    product_id=str(raw["product_id"]),
                    name=str(raw["name"]),
                    slug=raw.get("slug"),
                    image=raw.get("image"),
                    price=float(raw["price"]),
                    is_new=bool(raw.get("is_new", False)),
                    is_sale=bool(raw.get("is_sale", False)),
                    viewed_at=float(raw.get("viewed_at", 0.0)),
                )
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise ParseError("Malformed recently viewed entry") from exc
            if not math.isfinite(entry.price):
                raise ParseError("Recently viewed entry has no usable price")
            if entry.product_id not in seen:
                seen.add(entry.product_id)
                entries.append(entry)
        return tuple(entries[: self.limit])

    @property
    def entries(self) -> Tuple[RecentlyViewedEntry, ...]:
        return self.snapshot

    def record_view(self, product, viewed_at: Optional[float] = None):
        entry = RecentlyViewedEntry.from_product(product, viewed_at)
        rest = tuple(e for e in self.snapshot if e.product_id != entry.product_id)
        return self._commit(((entry,) + rest)[: self.limit])

    def clear_all(self):
        return self._commit(())
