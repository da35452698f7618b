"""
Module: farm_engines.cost_basis
Responsibility:
    Turn a farm's input usage, other costs and loan allocation into a
    per-acre cost basis with a category breakdown.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - INSURANCE other-cost rows are excluded; premium enters the profit
      matrix from the insurance policy instead.
    - Operating principal is never a cost (revolving line).
    - Each category is divided by acres and rounded to cents on its own;
      total_cost_per_acre is the rounded quotient of the unrounded total;
      the unrounded quotient is carried for scenario arithmetic.
    - acres <= 0 returns an all-zero breakdown and zero per-acre cost.
    - Trucking is not part of the basis (it is yield-dependent).
"""

from __future__ import annotations

from decimal import Decimal

from farm_engines.tracer import traced_engine
from farm_kernel.domain.records import (
    CostBasis,
    CostBreakdown,
    CostType,
    Farm,
    FarmInterestAllocation,
)
from farm_kernel.domain.values import ZERO, round_money, to_decimal
from farm_kernel.logging_config import get_logger

logger = get_logger("engines.cost_basis")


class CostBasisBuilder:
    """Per-acre cost basis for one farm."""

    @staticmethod
    def _other_cost_totals(farm: Farm) -> tuple[Decimal, Decimal]:
        land_rent = ZERO
        other = ZERO
        for cost in farm.other_costs:
            if cost.cost_type == CostType.INSURANCE:
                continue
            amount = cost.amount * farm.acres if cost.is_per_acre else cost.amount
            if cost.cost_type == CostType.LAND_RENT:
                land_rent += amount
            else:
                other += amount
        return land_rent, other

    @traced_engine("cost_basis", "1.0", fingerprint_fields=("farm", "allocation"))
    def build(self, farm: Farm, allocation: FarmInterestAllocation) -> CostBasis:
        fertilizer = sum((u.amount_used * u.price_per_unit for u in farm.fertilizer_usage), ZERO)
        chemical = sum((u.amount_used * u.price_per_unit for u in farm.chemical_usage), ZERO)
        seed = sum((to_decimal(u.bags_used) * u.price_per_bag for u in farm.seed_usage), ZERO)
        land_rent, other = self._other_cost_totals(farm)

        totals = {
            "fertilizer": fertilizer,
            "chemical": chemical,
            "seed": seed,
            "land_rent": land_rent,
            "other": other,
            "land_loan_interest": allocation.land_loan_interest,
            "land_loan_principal": allocation.land_loan_principal,
            "operating_loan_interest": allocation.operating_loan_interest,
            "equipment_loan_interest": allocation.equipment_loan_interest,
            "equipment_loan_principal": allocation.equipment_loan_principal,
        }
        total_cost = sum(totals.values(), ZERO)

        if farm.acres <= ZERO:
            logger.warning(
                "cost_basis_zero_acres",
                extra={"farm_id": farm.id, "total_cost": str(total_cost)},
            )
            return CostBasis(total_cost=round_money(total_cost), total_cost_per_acre=ZERO)

        breakdown = CostBreakdown(
            **{name: round_money(value / farm.acres) for name, value in totals.items()}
        )
        basis = CostBasis(
            total_cost=round_money(total_cost),
            total_cost_per_acre=round_money(total_cost / farm.acres),
            breakdown=breakdown,
            unrounded_cost_per_acre=total_cost / farm.acres,
        )
        logger.info(
            "cost_basis_completed",
            extra={
                "farm_id": farm.id,
                "acres": str(farm.acres),
                "total_cost_per_acre": str(basis.total_cost_per_acre),
            },
        )
        return basis
