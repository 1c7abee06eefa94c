"""Promotion rule base class, rule outcomes, and the two rule kinds."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .errors import InvalidRuleConfiguration
from .models import Item, is_amount


class RuleScope(Enum):
    ITEM = "item"      # evaluated when a matching item is scanned
    BASKET = "basket"  # evaluated once, on the whole basket, at total time


@dataclass(frozen=True)
class PricingContext:
    """State a rule is evaluated against."""

    items: Sequence[Item] = ()
    subtotal: float = 0


@dataclass(frozen=True)
class RuleOutcome:
    """Result of trying a rule. The session applies it, not the rule."""

    applied: bool
    price_delta: float = 0
    consumed: tuple[Item, ...] = ()

    @classmethod
    def not_applied(cls) -> RuleOutcome:
        return cls(applied=False)


class Rule(ABC):
    """Abstract base for a single promotion."""

    scope: ClassVar[RuleScope]

    @abstractmethod
    def applies_to(self, item_type: str) -> bool:
        """Whether scanning an item of this type should trigger the rule."""
        ...

    @abstractmethod
    def try_apply(self, context: PricingContext) -> RuleOutcome:
        """Evaluate the rule against the context without mutating it."""
        ...

    def amounts(self) -> tuple[float, ...]:
        """Monetary amounts the rule adds to or compares with a total."""
        return ()


def _require_amount(name: str, value: object) -> None:
    if value is None:
        raise InvalidRuleConfiguration(f"{name} is required")
    if not is_amount(value):
        raise InvalidRuleConfiguration(f"{name} must be a finite number: {value!r}")
    if value < 0:
        raise InvalidRuleConfiguration(f"{name} must not be negative: {value!r}")


@dataclass(frozen=True)
class CountItemsRule(Rule):
    """Charge ``bundle_price`` for every ``threshold_count`` items of a type."""

    threshold_count: int
    target_type: str
    bundle_price: float

    scope: ClassVar[RuleScope] = RuleScope.ITEM

    def __post_init__(self) -> None:
        count = self.threshold_count
        if not isinstance(count, int) or isinstance(count, bool):
            raise InvalidRuleConfiguration(
                f"threshold_count must be an integer: {count!r}"
            )
        if count <= 0:
            raise InvalidRuleConfiguration(
                f"threshold_count must be positive: {count!r}"
            )
        if not isinstance(self.target_type, str) or not self.target_type:
            raise InvalidRuleConfiguration(
                f"target_type must be a non-empty string: {self.target_type!r}"
            )
        _require_amount("bundle_price", self.bundle_price)

    def amounts(self) -> tuple[float, ...]:
        return (self.bundle_price,)

    def eligible_items(self, items: Sequence[Item]) -> list[Item]:
        """Unconsumed items of the target type, in scan order."""
        return [
            item for item in items
            if item.type == self.target_type and not item.consumed
        ]

    def is_satisfied(self, eligible_items: Sequence[Item]) -> bool:
        return len(eligible_items) >= self.threshold_count

    def applies_to(self, item_type: str) -> bool:
        return item_type == self.target_type

    def try_apply(self, context: PricingContext) -> RuleOutcome:
        """Form at most one bundle from the earliest-scanned eligible items."""
        eligible = self.eligible_items(context.items)
        if not self.is_satisfied(eligible):
            return RuleOutcome.not_applied()
        return RuleOutcome(
            applied=True,
            price_delta=self.bundle_price,
            consumed=tuple(eligible[: self.threshold_count]),
        )


@dataclass(frozen=True)
class FinalPriceDiscount(Rule):
    """Subtract ``discount_amount`` once the basket reaches ``minimum_total``.

    The discount is not clamped here; a discount larger than the basket
    yields a negative delta and the session decides whether to floor it.
    """

    minimum_total: float
    discount_amount: float

    scope: ClassVar[RuleScope] = RuleScope.BASKET

    def __post_init__(self) -> None:
        _require_amount("minimum_total", self.minimum_total)
        _require_amount("discount_amount", self.discount_amount)

    def amounts(self) -> tuple[float, ...]:
        return (self.minimum_total, self.discount_amount)

    def is_satisfied(self, total_price: float) -> bool:
        return total_price >= self.minimum_total

    def applies_to(self, item_type: str) -> bool:
        return False

    def try_apply(self, context: PricingContext) -> RuleOutcome:
        if not self.is_satisfied(context.subtotal):
            return RuleOutcome.not_applied()
        return RuleOutcome(applied=True, price_delta=-self.discount_amount)
