"""
Module: farm_engines.profit_matrix
Responsibility:
    Simulate per-acre profit for a farm over a yield x price grid, with
    contracted (marketed) grain at its contract price, unmarketed grain at
    the scenario price plus basis, per-bushel trucking, insurance premium
    and insurance indemnity.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Receives the loaded farm, its cost basis and its policy from
    FarmFinanceService.

Invariants enforced:
    - Marketed bushels per acre are capped at the scenario yield; the rest
      of the scenario yield is unmarketed.
    - Contract effective price priority: cash, futures + basis, futures,
      basis.  Allocations priced at or below zero are skipped and do not
      dilute the average.  Only active, live contracts of the farm's year
      and commodity count.
    - All money in cells and in the response is rounded to cents.
    - break_even_price = total_cost_per_acre / projected_yield + trucking
      fee, and zero when projected yield is zero.

Failure modes:
    - InvalidScenarioRangeError propagated from ScenarioGridBuilder.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal

from farm_engines.indemnity import CropInsuranceIndemnityCalculator
from farm_engines.scenario_grid import ScenarioGridBuilder
from farm_engines.tracer import traced_engine
from farm_kernel.domain.records import (
    CostBasis,
    CountyYield,
    Farm,
    GrainContract,
    Indemnity,
    InsurancePolicy,
    MarketedPosition,
    ProfitMatrixCell,
    ProfitMatrixResponse,
    ScenarioOverrides,
)
from farm_kernel.domain.values import ZERO, round_money, safe_divide
from farm_kernel.logging_config import get_logger

logger = get_logger("engines.profit_matrix")

IndemnityFn = Callable[
    [InsurancePolicy, Decimal, Decimal, Decimal, CountyYield | None],
    Indemnity,
]


def _priced(value: Decimal | None) -> bool:
    return value is not None and value != ZERO


def effective_price(contract: GrainContract) -> Decimal:
    """Per-bushel price a contract locks in; zero when nothing is priced."""
    if _priced(contract.cash_price):
        return contract.cash_price
    if _priced(contract.futures_price) and _priced(contract.basis_price):
        return contract.futures_price + contract.basis_price
    if _priced(contract.futures_price):
        return contract.futures_price
    if _priced(contract.basis_price):
        return contract.basis_price
    return ZERO


class ProfitMatrixEngine:
    """
    Yield x price profit grid for one farm.

    Contract:
        Pure; identical inputs produce an identical response.
    Non-goals:
        - Does not load the farm, cost basis or policy.
        - Does not model delivery shortfall when yield < marketed bushels.
    """

    def __init__(
        self,
        grid_builder: ScenarioGridBuilder | None = None,
        calculate_indemnity: IndemnityFn | None = None,
    ):
        self.grid_builder = grid_builder or ScenarioGridBuilder()
        self.calculate_indemnity = calculate_indemnity or CropInsuranceIndemnityCalculator()

    def marketed_position(self, farm: Farm) -> MarketedPosition:
        bushels = ZERO
        value = ZERO
        skipped = 0
        for allocation in farm.contract_allocations:
            contract = allocation.contract
            if not contract.is_active or contract.is_deleted:
                continue
            if contract.year != farm.year or contract.commodity_type != farm.commodity_type:
                continue
            price = effective_price(contract)
            if price <= ZERO:
                skipped += 1
                continue
            bushels += allocation.allocated_bushels
            value += allocation.allocated_bushels * price

        if skipped:
            logger.debug(
                "unpriced_allocations_skipped",
                extra={"farm_id": farm.id, "skipped": skipped},
            )

        per_acre = safe_divide(bushels, farm.acres)
        return MarketedPosition(
            marketed_bushels=bushels,
            marketed_value=value,
            marketed_bu_per_acre=per_acre,
            marketed_avg_price=safe_divide(value, bushels),
            unmarketed_bu_per_acre=max(ZERO, farm.projected_yield - per_acre),
        )

    @staticmethod
    def break_even_price(
        total_cost_per_acre: Decimal,
        projected_yield: Decimal,
        trucking_fee_per_bushel: Decimal,
    ) -> Decimal:
        if projected_yield <= ZERO:
            return ZERO
        return round_money(total_cost_per_acre / projected_yield + trucking_fee_per_bushel)

    def _cell(
        self,
        scenario_yield: Decimal,
        scenario_price: Decimal,
        position: MarketedPosition,
        cost_per_acre: Decimal,
        trucking_fee: Decimal,
        premium: Decimal,
        basis: Decimal,
        policy: InsurancePolicy | None,
        aph: Decimal,
        county_yield: CountyYield | None,
    ) -> ProfitMatrixCell:
        marketed = min(position.marketed_bu_per_acre, scenario_yield)
        unmarketed = max(ZERO, scenario_yield - position.marketed_bu_per_acre)
        gross = marketed * position.marketed_avg_price + unmarketed * (scenario_price + basis)

        indemnity = Indemnity()
        if policy is not None:
            indemnity = self.calculate_indemnity(policy, aph, scenario_yield, scenario_price, county_yield)

        trucking = trucking_fee * scenario_yield
        scenario_cost = cost_per_acre + trucking
        payout = indemnity.total

        return ProfitMatrixCell(
            yield_bu_acre=scenario_yield,
            price_bu=scenario_price,
            gross_revenue_per_acre=round_money(gross),
            total_cost_per_acre=round_money(cost_per_acre),
            trucking_cost_per_acre=round_money(trucking),
            scenario_total_cost_per_acre=round_money(scenario_cost),
            profit_without_insurance=round_money(gross - scenario_cost),
            insurance_indemnity=round_money(indemnity.base),
            sco_indemnity=round_money(indemnity.sco),
            eco_indemnity=round_money(indemnity.eco),
            total_insurance_payout=round_money(payout),
            insurance_premium_cost=round_money(premium),
            net_profit_per_acre=round_money(gross - scenario_cost - premium + payout),
        )

    @traced_engine(
        "profit_matrix", "1.0",
        fingerprint_fields=("farm", "cost_basis", "policy", "overrides"),
    )
    def build(
        self,
        farm: Farm,
        cost_basis: CostBasis,
        policy: InsurancePolicy | None = None,
        overrides: ScenarioOverrides | None = None,
    ) -> ProfitMatrixResponse:
        overrides = overrides or ScenarioOverrides()
        logger.info(
            "profit_matrix_started",
            extra={
                "farm_id": farm.id,
                "has_policy": policy is not None,
                "yield_steps": overrides.yield_steps,
                "price_steps": overrides.price_steps,
            },
        )

        yields = self.grid_builder.yield_axis(
            farm.aph, overrides.yield_steps, overrides.yield_min, overrides.yield_max
        )
        base_price = self.grid_builder.base_price(
            farm.commodity_type, policy.projected_price if policy else None
        )
        prices = self.grid_builder.price_axis(
            farm.commodity_type, base_price, overrides.price_steps,
            overrides.price_min, overrides.price_max,
        )

        position = self.marketed_position(farm)
        trucking_fee = farm.resolved_trucking_fee
        premium = policy.total_premium_per_acre if policy else ZERO
        cost_per_acre = cost_basis.exact_cost_per_acre

        matrix = tuple(
            tuple(
                self._cell(
                    y, p, position, cost_per_acre, trucking_fee, premium,
                    overrides.basis, policy, farm.aph, overrides.county_yield,
                )
                for p in prices
            )
            for y in yields
        )

        response = ProfitMatrixResponse(
            farm_id=farm.id,
            farm_name=farm.name,
            commodity_type=farm.commodity_type,
            acres=farm.acres,
            aph=farm.aph,
            projected_yield=farm.projected_yield,
            policy=policy,
            breakdown=cost_basis.breakdown,
            total_cost_per_acre=round_money(cost_per_acre),
            trucking_fee_per_bushel=trucking_fee,
            break_even_price=self.break_even_price(cost_per_acre, farm.projected_yield, trucking_fee),
            marketed_bushels_per_acre=round_money(position.marketed_bu_per_acre),
            marketed_avg_price=round_money(position.marketed_avg_price),
            unmarketed_bushels_per_acre=round_money(position.unmarketed_bu_per_acre),
            yield_scenarios=yields,
            price_scenarios=prices,
            matrix=matrix,
        )

        logger.info(
            "profit_matrix_completed",
            extra={
                "farm_id": farm.id,
                "rows": len(yields),
                "columns": len(prices),
                "break_even_price": str(response.break_even_price),
            },
        )
        return response
