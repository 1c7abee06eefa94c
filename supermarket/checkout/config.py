"""TOML configuration loader for checkout promotion rules."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

from .errors import InvalidRuleConfiguration
from .rules import CountItemsRule, FinalPriceDiscount, Rule
from .session import Checkout

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class CountRuleConfig:
    threshold_count: int
    target_type: str
    bundle_price: float


@dataclass
class FinalPriceConfig:
    minimum_total: float
    discount_amount: float


@dataclass
class CheckoutConfig:
    floor_at_zero: bool = False
    count_rules: list[CountRuleConfig] = field(default_factory=list)
    final_price: FinalPriceConfig | None = None

    def build_rules(self) -> list[Rule]:
        """Instantiate rules: count rules in file order, then the basket rule."""
        rules: list[Rule] = [
            build_rule("count", vars(c)) for c in self.count_rules
        ]
        if self.final_price is not None:
            rules.append(build_rule("final_price", vars(self.final_price)))
        return rules

    def new_checkout(self) -> Checkout:
        return Checkout(self.build_rules(), floor_at_zero=self.floor_at_zero)


_REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "count": ("threshold_count", "target_type", "bundle_price"),
    "final_price": ("minimum_total", "discount_amount"),
}


def build_rule(kind: str, params: dict) -> Rule:
    """Create a rule of the given kind from a parameter table."""
    required = _REQUIRED_KEYS.get(kind)
    if required is None:
        raise InvalidRuleConfiguration(
            f"Unknown rule kind: {kind!r}  (choose count / final_price)"
        )
    if not isinstance(params, dict):
        raise InvalidRuleConfiguration(
            f"{kind} rule must be a table of settings: {params!r}"
        )
    missing = [key for key in required if key not in params]
    if missing:
        raise InvalidRuleConfiguration(
            f"{kind} rule is missing {', '.join(missing)}"
        )

    match kind:
        case "count":
            return CountItemsRule(
                threshold_count=params["threshold_count"],
                target_type=params["target_type"],
                bundle_price=params["bundle_price"],
            )
        case "final_price":
            return FinalPriceDiscount(
                minimum_total=params["minimum_total"],
                discount_amount=params["discount_amount"],
            )


def load_config(path: str | Path | None = None) -> CheckoutConfig:
    """Load a promotion rule set from a TOML file.

    Falls back to defaults (no rules) if no path is given or the file
    doesn't exist.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    chk = raw.get("checkout", {})
    floor_at_zero = chk.get("floor_at_zero", False)
    if not isinstance(floor_at_zero, bool):
        raise InvalidRuleConfiguration(
            f"checkout.floor_at_zero must be true or false: {floor_at_zero!r}"
        )
    rls = raw.get("rules", {})

    count_tables = rls.get("count", [])
    if not isinstance(count_tables, list):
        raise InvalidRuleConfiguration("[[rules.count]] must be an array of tables")

    count_rules = []
    for table in count_tables:
        # Validates keys and values before the dataclass is kept.
        build_rule("count", table)
        count_rules.append(
            CountRuleConfig(
                threshold_count=table["threshold_count"],
                target_type=table["target_type"],
                bundle_price=table["bundle_price"],
            )
        )

    final_price = None
    fp = rls.get("final_price")
    if fp is not None:
        build_rule("final_price", fp)
        final_price = FinalPriceConfig(
            minimum_total=fp["minimum_total"],
            discount_amount=fp["discount_amount"],
        )

    return CheckoutConfig(
        floor_at_zero=floor_at_zero,
        count_rules=count_rules,
        final_price=final_price,
    )
