"""Checkout session: scans items and prices the basket."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .errors import CheckoutAlreadyFinalized, InvalidItem, InvalidRuleConfiguration
from .models import AppliedBundle, Item, Receipt, amount_kind
from .rules import PricingContext, Rule, RuleScope

logger = logging.getLogger(__name__)


class Checkout:
    """A single checkout session.

    Item rules are tried as each item is scanned; the basket rule is tried
    once when the total is taken. Taking the total finalizes the session:
    later scans raise ``CheckoutAlreadyFinalized`` and later calls to
    ``total()`` return the same amount.
    """

    def __init__(self, rules: Iterable[Rule] = (), *, floor_at_zero: bool = False) -> None:
        rules = tuple(rules)
        for rule in rules:
            if not isinstance(rule, Rule):
                raise InvalidRuleConfiguration(f"Not a promotion rule: {rule!r}")
        self._rules = rules
        self._amount_kind = _rules_amount_kind(rules)
        self._floor_at_zero = floor_at_zero
        self._items: list[Item] = []
        self._bundles: list[AppliedBundle] = []
        self._receipt: Receipt | None = None
        self._shadow_checked: set[str] = set()
        self._warn_on_extra_basket_rules()

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(self._items)

    @property
    def bundles(self) -> tuple[AppliedBundle, ...]:
        return tuple(self._bundles)

    @property
    def finalized(self) -> bool:
        return self._receipt is not None

    def scan(self, item: Item) -> None:
        """Add an item and form a bundle if it completes one.

        Only the first item rule matching the item's type is consulted and
        at most one bundle is formed per scan.
        """
        if not isinstance(item, Item):
            raise InvalidItem(f"Only items can be scanned: {item!r}")
        if self.finalized:
            raise CheckoutAlreadyFinalized(
                "Checkout already totalled; start a new session to scan more items"
            )
        if item.consumed:
            raise InvalidItem(f"Item already counted toward a promotion: {item!r}")
        if any(scanned is item for scanned in self._items):
            raise InvalidItem(f"Item already scanned in this checkout: {item!r}")
        kind = amount_kind(item.price)
        if kind is not None and self._amount_kind not in (None, kind):
            raise InvalidItem(
                f"Cannot mix {kind.__name__} and {self._amount_kind.__name__} amounts: "
                f"{item.price!r}"
            )
        if kind is not None:
            self._amount_kind = kind

        self._items.append(item)
        logger.debug("Scanned %s at %s", item.type, item.price)

        rule = self._item_rule_for(item.type)
        if rule is None:
            return

        outcome = rule.try_apply(PricingContext(items=self._items))
        if not outcome.applied:
            return

        for consumed in outcome.consumed:
            consumed.mark_consumed()
        bundle = AppliedBundle(
            target_type=item.type,
            threshold_count=len(outcome.consumed),
            bundle_price=outcome.price_delta,
            items=outcome.consumed,
        )
        self._bundles.append(bundle)
        logger.debug(
            "Bundle formed: %d x %s for %s",
            bundle.threshold_count,
            bundle.target_type,
            bundle.bundle_price,
        )

    def subtotal(self) -> float:
        """Bundle prices plus unconsumed items, before the basket rule."""
        bundle_total = sum(b.bundle_price for b in self._bundles)
        loose_total = sum(i.price for i in self._items if not i.consumed)
        return bundle_total + loose_total

    def total(self) -> float:
        """Return the basket total and finalize the session."""
        return self.receipt().total

    def receipt(self) -> Receipt:
        """Return the priced breakdown of the basket and finalize the session."""
        if self._receipt is None:
            self._receipt = self._build_receipt()
        return self._receipt

    def _build_receipt(self) -> Receipt:
        loose_items = tuple(i for i in self._items if not i.consumed)
        bundle_total = sum(b.bundle_price for b in self._bundles)
        loose_total = sum(i.price for i in loose_items)
        subtotal = bundle_total + loose_total

        total = subtotal
        rule = self._basket_rule()
        if rule is not None:
            outcome = rule.try_apply(
                PricingContext(items=self._items, subtotal=subtotal)
            )
            if outcome.applied:
                total = subtotal + outcome.price_delta
                logger.debug("Basket discount applied: %s", outcome.price_delta)
            else:
                logger.debug("Basket discount not reached at %s", subtotal)

        if total < 0:
            if self._floor_at_zero:
                total = 0
            else:
                logger.warning("Basket total is negative: %s", total)

        return Receipt(
            bundles=tuple(self._bundles),
            loose_items=loose_items,
            bundle_total=bundle_total,
            loose_total=loose_total,
            subtotal=subtotal,
            discount=subtotal - total,
            total=total,
        )

    def _item_rule_for(self, item_type: str) -> Rule | None:
        matching = [
            rule for rule in self._rules
            if rule.scope is RuleScope.ITEM and rule.applies_to(item_type)
        ]
        if len(matching) > 1 and item_type not in self._shadow_checked:
            logger.warning(
                "%d item rules match type %r; only the first is applied",
                len(matching),
                item_type,
            )
        self._shadow_checked.add(item_type)
        return matching[0] if matching else None

    def _basket_rule(self) -> Rule | None:
        for rule in self._rules:
            if rule.scope is RuleScope.BASKET:
                return rule
        return None

    def _warn_on_extra_basket_rules(self) -> None:
        basket_rules = [r for r in self._rules if r.scope is RuleScope.BASKET]
        if len(basket_rules) > 1:
            logger.warning(
                "%d basket rules configured; only the first is applied",
                len(basket_rules),
            )


def _rules_amount_kind(rules: tuple[Rule, ...]) -> type | None:
    """The one non-int amount type used by the rules, if any."""
    kinds = {
        kind
        for rule in rules
        for kind in map(amount_kind, rule.amounts())
        if kind is not None
    }
    if len(kinds) > 1:
        raise InvalidRuleConfiguration(
            "Cannot mix Decimal and float amounts in one rule set"
        )
    return kinds.pop() if kinds else None
