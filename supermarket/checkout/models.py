"""Data models for scanned items and priced baskets."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal

from .errors import InvalidItem


def is_amount(value: object) -> bool:
    """Return True for a finite numeric amount (bools are not amounts)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int)


def amount_kind(value: object) -> type | None:
    """Decimal or float for amounts that cannot be mixed, None for ints."""
    if isinstance(value, Decimal):
        return Decimal
    if isinstance(value, float):
        return float
    return None


@dataclass(eq=False)
class Item:
    """A single product placed in the basket.

    Items compare by identity: two apples at the same price are still two
    separate basket entries.
    """

    type: str
    price: float
    consumed: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type:
            raise InvalidItem(f"Item type must be a non-empty string: {self.type!r}")
        if not is_amount(self.price):
            raise InvalidItem(f"Item price must be a finite number: {self.price!r}")
        if self.price < 0:
            raise InvalidItem(f"Item price must not be negative: {self.price!r}")

    def mark_consumed(self) -> None:
        """Flag the item as counted toward a promotion. Never reverts."""
        self.consumed = True


@dataclass(frozen=True)
class AppliedBundle:
    """A group of same-type items charged at a bundle price."""

    target_type: str
    threshold_count: int
    bundle_price: float
    items: tuple[Item, ...] = ()

    @property
    def regular_price(self) -> float:
        """What the bundled items would have cost individually."""
        return sum(item.price for item in self.items)

    @property
    def savings(self) -> float:
        return self.regular_price - self.bundle_price


@dataclass(frozen=True)
class Receipt:
    """Breakdown of a finalized checkout total."""

    bundles: tuple[AppliedBundle, ...] = ()
    loose_items: tuple[Item, ...] = ()
    bundle_total: float = 0
    loose_total: float = 0
    subtotal: float = 0
    discount: float = 0
    total: float = 0

    @property
    def item_count(self) -> int:
        return len(self.loose_items) + sum(len(b.items) for b in self.bundles)

    def summary_dict(self) -> dict:
        """Return a summary dict for JSON serialization."""
        return {
            "bundles": [
                {
                    "type": b.target_type,
                    "count": len(b.items),
                    "price": b.bundle_price,
                    "savings": b.savings,
                }
                for b in self.bundles
            ],
            "loose_items": [
                {"type": i.type, "price": i.price} for i in self.loose_items
            ],
            "item_count": self.item_count,
            "bundle_total": self.bundle_total,
            "loose_total": self.loose_total,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "total": self.total,
        }
