"""Tests for promotion rules."""

from decimal import Decimal

import pytest

from supermarket.checkout.errors import InvalidRuleConfiguration
from supermarket.checkout.models import Item
from supermarket.checkout.rules import (
    CountItemsRule,
    FinalPriceDiscount,
    PricingContext,
    Rule,
    RuleOutcome,
    RuleScope,
)


@pytest.fixture
def three_a():
    return CountItemsRule(threshold_count=3, target_type="A", bundle_price=75)


@pytest.fixture
def over_150():
    return FinalPriceDiscount(minimum_total=150, discount_amount=20)


class TestCountItemsRule:
    def test_scope(self, three_a):
        assert isinstance(three_a, Rule)
        assert three_a.scope is RuleScope.ITEM

    def test_applies_to(self, three_a):
        assert three_a.applies_to("A")
        assert not three_a.applies_to("B")
        assert not three_a.applies_to("a")

    def test_eligible_items_filters_type_and_consumed(self, three_a):
        a1, b1, a2, a3 = (
            Item(type="A", price=30),
            Item(type="B", price=20),
            Item(type="A", price=30),
            Item(type="A", price=30),
        )
        a2.mark_consumed()
        assert three_a.eligible_items([a1, b1, a2, a3]) == [a1, a3]

    def test_eligible_items_is_idempotent(self, three_a):
        items = [Item(type="A", price=30), Item(type="C", price=50)]
        first = three_a.eligible_items(items)
        second = three_a.eligible_items(items)
        assert first == second
        assert not any(i.consumed for i in items)

    def test_is_satisfied(self, three_a):
        items = [Item(type="A", price=30) for _ in range(3)]
        assert not three_a.is_satisfied(items[:2])
        assert three_a.is_satisfied(items)
        assert three_a.is_satisfied(items + [Item(type="A", price=30)])

    def test_try_apply_not_satisfied(self, three_a):
        items = [Item(type="A", price=30) for _ in range(2)]
        outcome = three_a.try_apply(PricingContext(items=items))
        assert outcome == RuleOutcome.not_applied()
        assert outcome.price_delta == 0

    def test_try_apply_takes_earliest_items(self, three_a):
        items = [Item(type="A", price=p) for p in (10, 20, 30, 40)]
        outcome = three_a.try_apply(PricingContext(items=items))
        assert outcome.applied
        assert outcome.price_delta == 75
        assert outcome.consumed == tuple(items[:3])

    def test_try_apply_does_not_mutate(self, three_a):
        items = [Item(type="A", price=30) for _ in range(3)]
        three_a.try_apply(PricingContext(items=items))
        assert not any(i.consumed for i in items)

    def test_try_apply_forms_only_one_bundle(self, three_a):
        items = [Item(type="A", price=30) for _ in range(6)]
        outcome = three_a.try_apply(PricingContext(items=items))
        assert len(outcome.consumed) == 3
        assert outcome.price_delta == 75

    @pytest.mark.parametrize("count", [0, -1, 1.5, "3", None, True])
    def test_invalid_threshold(self, count):
        with pytest.raises(InvalidRuleConfiguration):
            CountItemsRule(threshold_count=count, target_type="A", bundle_price=75)

    @pytest.mark.parametrize("target", ["", None])
    def test_invalid_target_type(self, target):
        with pytest.raises(InvalidRuleConfiguration):
            CountItemsRule(threshold_count=3, target_type=target, bundle_price=75)

    @pytest.mark.parametrize("price", [-1, None, "75", float("nan"), float("inf"), Decimal("sNaN")])
    def test_invalid_bundle_price(self, price):
        with pytest.raises(InvalidRuleConfiguration):
            CountItemsRule(threshold_count=3, target_type="A", bundle_price=price)

    def test_amounts(self, three_a):
        assert three_a.amounts() == (75,)

    def test_rules_are_immutable(self, three_a):
        with pytest.raises(AttributeError):
            three_a.bundle_price = 10


class TestFinalPriceDiscount:
    def test_scope(self, over_150):
        assert over_150.scope is RuleScope.BASKET

    def test_never_applies_to_items(self, over_150):
        assert not over_150.applies_to("A")

    def test_is_satisfied_boundary(self, over_150):
        assert not over_150.is_satisfied(149.99)
        assert over_150.is_satisfied(150)
        assert over_150.is_satisfied(175)

    def test_try_apply(self, over_150):
        outcome = over_150.try_apply(PricingContext(subtotal=175))
        assert outcome.applied
        assert outcome.price_delta == -20
        assert outcome.consumed == ()

    def test_amounts(self, over_150):
        assert over_150.amounts() == (150, 20)

    def test_try_apply_below_threshold(self, over_150):
        outcome = over_150.try_apply(PricingContext(subtotal=140))
        assert not outcome.applied

    @pytest.mark.parametrize(
        "minimum, discount",
        [
            (-1, 20), (150, -20), (None, 20), (150, None), ("150", 20),
            (float("inf"), 20), (150, float("nan")), (Decimal("NaN"), 20),
        ],
    )
    def test_invalid_configuration(self, minimum, discount):
        with pytest.raises(InvalidRuleConfiguration):
            FinalPriceDiscount(minimum_total=minimum, discount_amount=discount)


def test_rule_is_abstract():
    with pytest.raises(TypeError):
        Rule()
