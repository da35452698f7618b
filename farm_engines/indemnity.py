"""
Module: farm_engines.indemnity
Responsibility:
    Per-acre crop insurance indemnity for one yield / harvest-price
    scenario: the base policy (RP, YP or RP-HPE) plus the optional SCO and
    ECO area endorsements.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Default ``calculate_indemnity`` collaborator of ProfitMatrixEngine.

Formulas (coverage levels are whole percentages):
    RP      max(0, aph x cov x max(proj, harvest) - yield x harvest)
    YP      max(0, aph x cov - yield) x proj
    RP_HPE  max(0, aph x cov x proj - yield x harvest)

    SCO band runs from ``sco_top_level`` (86%) down to the base coverage
    level; ECO from the ECO level down to 86%.  Band dollars are
    ``aph x (top - bottom) x band_price`` where band_price is
    max(proj, harvest) for RP and proj otherwise.

    With county yields the band pays on the county loss ratio (yield ratio
    for YP, revenue ratio otherwise).  Without them a farm-level revenue
    shortfall against the band top is paid, capped at the band.

Invariants enforced:
    - Every payout is >= 0.
    - An empty or inverted band pays zero.
"""

from __future__ import annotations

from decimal import Decimal

from farm_kernel.domain.records import (
    CountyYield,
    Indemnity,
    InsurancePlanType,
    InsurancePolicy,
)
from farm_kernel.domain.values import ZERO

HUNDRED = Decimal("100")


class CropInsuranceIndemnityCalculator:
    """
    Indemnity for a policy under one scenario.

    Instances are callable with the ``calculate_indemnity`` signature so
    they can be injected into ProfitMatrixEngine directly.
    """

    def __init__(self, sco_top_level: Decimal = Decimal("0.86")):
        self.sco_top_level = sco_top_level

    def __call__(
        self,
        policy: InsurancePolicy,
        aph: Decimal,
        actual_yield: Decimal,
        harvest_price: Decimal,
        county_yield: CountyYield | None = None,
    ) -> Indemnity:
        return self.calculate(policy, aph, actual_yield, harvest_price, county_yield)

    def calculate(
        self,
        policy: InsurancePolicy,
        aph: Decimal,
        actual_yield: Decimal,
        harvest_price: Decimal,
        county_yield: CountyYield | None = None,
    ) -> Indemnity:
        coverage = policy.coverage_level / HUNDRED
        projected = policy.projected_price
        plan = InsurancePlanType(policy.plan_type)

        base = self.base_indemnity(plan, aph, coverage, projected, actual_yield, harvest_price)

        sco = ZERO
        if policy.has_sco:
            sco = self.band_indemnity(
                plan, aph, self.sco_top_level, coverage,
                projected, actual_yield, harvest_price, county_yield,
            )

        eco = ZERO
        if policy.has_eco and policy.eco_level:
            eco = self.band_indemnity(
                plan, aph, policy.eco_level / HUNDRED, self.sco_top_level,
                projected, actual_yield, harvest_price, county_yield,
            )

        return Indemnity(base=base, sco=sco, eco=eco)

    @staticmethod
    def base_indemnity(
        plan: InsurancePlanType,
        aph: Decimal,
        coverage: Decimal,
        projected: Decimal,
        actual_yield: Decimal,
        harvest_price: Decimal,
    ) -> Decimal:
        if plan == InsurancePlanType.RP:
            guarantee = aph * coverage * max(projected, harvest_price)
            return max(ZERO, guarantee - actual_yield * harvest_price)
        if plan == InsurancePlanType.YP:
            return max(ZERO, aph * coverage - actual_yield) * projected
        guarantee = aph * coverage * projected
        return max(ZERO, guarantee - actual_yield * harvest_price)

    @staticmethod
    def band_indemnity(
        plan: InsurancePlanType,
        aph: Decimal,
        top: Decimal,
        bottom: Decimal,
        projected: Decimal,
        actual_yield: Decimal,
        harvest_price: Decimal,
        county_yield: CountyYield | None,
    ) -> Decimal:
        width = top - bottom
        if width <= ZERO:
            return ZERO

        band_price = max(projected, harvest_price) if plan == InsurancePlanType.RP else projected
        actual_price = max(projected, harvest_price) if plan == InsurancePlanType.RP else harvest_price
        band = aph * width * band_price

        if county_yield is not None and county_yield.expected_county_yield > ZERO:
            if plan == InsurancePlanType.YP:
                ratio = county_yield.simulated_county_yield / county_yield.expected_county_yield
            else:
                expected_revenue = county_yield.expected_county_yield * projected
                if expected_revenue <= ZERO:
                    return ZERO
                ratio = county_yield.simulated_county_yield * actual_price / expected_revenue

            if ratio >= top:
                return ZERO
            loss = min(top - ratio, width)
            return loss / width * band

        # Farm-level fallback
        top_revenue = aph * top * band_price
        if plan == InsurancePlanType.YP:
            actual_revenue = actual_yield * band_price
        else:
            actual_revenue = actual_yield * actual_price
        return min(max(ZERO, top_revenue - actual_revenue), band)
