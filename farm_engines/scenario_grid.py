"""
Module: farm_engines.scenario_grid
Responsibility:
    Build the yield and price axes of the profit matrix.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Axes:
    - Yield: ``steps`` points from yield_low_pct to yield_high_pct of APH,
      rounded to whole bushels.  APH <= 0 falls back to
      ``start, start + step, ...``.  Explicit min/max replace the band and
      are spaced linearly.
    - Price: ``steps`` points from price_low_pct to price_high_pct of the
      base price (the policy's projected price, else the commodity
      default).  Explicit min/max replace the band.  Every point is rounded
      to the commodity's increment ($0.10 soybeans, $0.05 otherwise).

Failure modes:
    - InvalidScenarioRangeError: steps < 2, min > max, or a negative bound.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from farm_kernel.domain.records import CommodityType
from farm_kernel.domain.values import ZERO, round_to_increment, round_whole
from farm_kernel.exceptions import InvalidScenarioRangeError
from farm_kernel.logging_config import get_logger

logger = get_logger("engines.scenario_grid")

DEFAULT_PRICES: dict[str, Decimal] = {
    CommodityType.CORN.value: Decimal("4.66"),
    CommodityType.SOYBEANS.value: Decimal("11.20"),
    CommodityType.WHEAT.value: Decimal("5.50"),
}

PRICE_INCREMENTS: dict[str, Decimal] = {
    CommodityType.CORN.value: Decimal("0.05"),
    CommodityType.SOYBEANS.value: Decimal("0.10"),
    CommodityType.WHEAT.value: Decimal("0.05"),
}


def _linspace(low: Decimal, high: Decimal, steps: int) -> list[Decimal]:
    span = high - low
    last = steps - 1
    return [low + span * i / last for i in range(steps)]


class ScenarioGridBuilder:
    """
    Yield and price scenario axes.

    Contract:
        Deterministic; both axes are ascending.
    """

    def __init__(
        self,
        default_steps: int = 7,
        yield_low_pct: Decimal = Decimal("0.50"),
        yield_high_pct: Decimal = Decimal("1.20"),
        aph_fallback_start: Decimal = Decimal("100"),
        aph_fallback_step: Decimal = Decimal("20"),
        price_low_pct: Decimal = Decimal("0.60"),
        price_high_pct: Decimal = Decimal("1.40"),
        default_prices: Mapping[str, Decimal] | None = None,
        price_increments: Mapping[str, Decimal] | None = None,
        fallback_price: Decimal = Decimal("5.00"),
        fallback_increment: Decimal = Decimal("0.05"),
    ):
        self.default_steps = default_steps
        self.yield_low_pct = yield_low_pct
        self.yield_high_pct = yield_high_pct
        self.aph_fallback_start = aph_fallback_start
        self.aph_fallback_step = aph_fallback_step
        self.price_low_pct = price_low_pct
        self.price_high_pct = price_high_pct
        self.default_prices = dict(DEFAULT_PRICES if default_prices is None else default_prices)
        self.price_increments = dict(PRICE_INCREMENTS if price_increments is None else price_increments)
        self.fallback_price = fallback_price
        self.fallback_increment = fallback_increment

    def _steps(self, axis: str, steps: int | None) -> int:
        if steps is None:
            return self.default_steps
        if steps < 2:
            raise InvalidScenarioRangeError(axis, f"steps must be at least 2, got {steps}")
        return steps

    @staticmethod
    def _check_bounds(axis: str, low: Decimal | None, high: Decimal | None) -> None:
        for bound in (low, high):
            if bound is not None and bound < ZERO:
                raise InvalidScenarioRangeError(axis, f"bound must not be negative, got {bound}")
        if low is not None and high is not None and low > high:
            raise InvalidScenarioRangeError(axis, f"min {low} is greater than max {high}")

    def base_price(self, commodity: CommodityType | str, projected_price: Decimal | None = None) -> Decimal:
        """Policy projected price when positive, else the commodity default."""
        if projected_price is not None and projected_price > ZERO:
            return projected_price
        key = getattr(commodity, "value", commodity)
        return self.default_prices.get(key, self.fallback_price)

    def price_increment(self, commodity: CommodityType | str) -> Decimal:
        key = getattr(commodity, "value", commodity)
        return self.price_increments.get(key, self.fallback_increment)

    def yield_axis(
        self,
        aph: Decimal,
        steps: int | None = None,
        yield_min: Decimal | None = None,
        yield_max: Decimal | None = None,
    ) -> tuple[Decimal, ...]:
        count = self._steps("yield", steps)
        self._check_bounds("yield", yield_min, yield_max)

        if yield_min is None and yield_max is None:
            if aph <= ZERO:
                return tuple(
                    self.aph_fallback_start + self.aph_fallback_step * i for i in range(count)
                )
            low, high = aph * self.yield_low_pct, aph * self.yield_high_pct
        else:
            if aph > ZERO:
                default_low, default_high = aph * self.yield_low_pct, aph * self.yield_high_pct
            else:
                default_low = self.aph_fallback_start
                default_high = self.aph_fallback_start + self.aph_fallback_step * (count - 1)
            low = default_low if yield_min is None else yield_min
            high = default_high if yield_max is None else yield_max
            self._check_bounds("yield", low, high)

        return tuple(round_whole(v) for v in _linspace(low, high, count))

    def price_axis(
        self,
        commodity: CommodityType | str,
        base_price: Decimal,
        steps: int | None = None,
        price_min: Decimal | None = None,
        price_max: Decimal | None = None,
    ) -> tuple[Decimal, ...]:
        count = self._steps("price", steps)
        self._check_bounds("price", price_min, price_max)

        low = base_price * self.price_low_pct if price_min is None else price_min
        high = base_price * self.price_high_pct if price_max is None else price_max
        self._check_bounds("price", low, high)

        increment = self.price_increment(commodity)
        return tuple(round_to_increment(v, increment) for v in _linspace(low, high, count))
