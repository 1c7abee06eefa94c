"""Supermarket checkout pricing with bundle and minimum-spend promotions."""

from .config import (
    CheckoutConfig,
    CountRuleConfig,
    FinalPriceConfig,
    build_rule,
    load_config,
)
from .errors import (
    CheckoutAlreadyFinalized,
    CheckoutError,
    InvalidItem,
    InvalidRuleConfiguration,
)
from .models import AppliedBundle, Item, Receipt
from .rules import (
    CountItemsRule,
    FinalPriceDiscount,
    PricingContext,
    Rule,
    RuleOutcome,
    RuleScope,
)
from .session import Checkout

__all__ = [
    "Checkout",
    "Item",
    "AppliedBundle",
    "Receipt",
    "Rule",
    "RuleScope",
    "RuleOutcome",
    "PricingContext",
    "CountItemsRule",
    "FinalPriceDiscount",
    "CheckoutError",
    "InvalidRuleConfiguration",
    "InvalidItem",
    "CheckoutAlreadyFinalized",
    "CheckoutConfig",
    "CountRuleConfig",
    "FinalPriceConfig",
    "build_rule",
    "load_config",
]
