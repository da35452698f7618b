"""
EngineConfig schema.

Frozen dataclasses describing the tunable constants of the farm finance
engines.  The loader parses ``sets/<name>.yaml`` into these types;
``get_active_config()`` is the only runtime entrypoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class LoanPolicy:
    """How annual loan cost is split and how operating interest accrues."""

    simple_mode_interest_share: Decimal = Decimal("0.40")
    day_count_basis: int = 365


@dataclass(frozen=True)
class ScenarioPolicy:
    """Shape of the yield x price grid."""

    default_steps: int = 7
    yield_low_pct: Decimal = Decimal("0.50")
    yield_high_pct: Decimal = Decimal("1.20")
    aph_fallback_start: Decimal = Decimal("100")
    aph_fallback_step: Decimal = Decimal("20")
    price_low_pct: Decimal = Decimal("0.60")
    price_high_pct: Decimal = Decimal("1.40")


@dataclass(frozen=True)
class CommodityPricing:
    """Default base price and scenario rounding increment for one commodity."""

    commodity: str
    default_price: Decimal
    price_increment: Decimal


@dataclass(frozen=True)
class InsuranceSettings:
    sco_top_level: Decimal = Decimal("0.86")


@dataclass(frozen=True)
class EngineConfig:
    """
    Compiled engine configuration -- the sole runtime config artifact.

    ``checksum`` is the SHA-256 of the canonical JSON of the source YAML.
    """

    config_id: str
    version: int
    loans: LoanPolicy
    scenarios: ScenarioPolicy
    commodities: tuple[CommodityPricing, ...]
    fallback_commodity: CommodityPricing
    insurance: InsuranceSettings
    checksum: str = ""

    def pricing_for(self, commodity: str) -> CommodityPricing:
        """Pricing for ``commodity``; unknown commodities get the fallback."""
        key = getattr(commodity, "value", commodity)
        for pricing in self.commodities:
            if pricing.commodity == key:
                return pricing
        return self.fallback_commodity

    def default_prices(self) -> dict[str, Decimal]:
        return {p.commodity: p.default_price for p in self.commodities}

    def price_increments(self) -> dict[str, Decimal]:
        return {p.commodity: p.price_increment for p in self.commodities}
