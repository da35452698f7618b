"""
Tests for ProfitMatrixEngine.

Covers:
- Contract effective price priority
- Marketed position filtering and averaging
- Cell revenue with marketed cap and basis
- Trucking, premium and indemnity in net profit
- Break-even price
- Grid shape and axis overrides
"""

from decimal import Decimal

import pytest

from farm_engines.cost_basis import CostBasisBuilder
from farm_engines.profit_matrix import ProfitMatrixEngine, effective_price
from farm_kernel.domain.records import (
    CommodityType,
    CostBasis,
    CostType,
    CountyYield,
    FarmInterestAllocation,
    GrainContract,
    Indemnity,
    OtherCost,
    ScenarioOverrides,
)
from farm_kernel.exceptions import InvalidScenarioRangeError
from tests.conftest import make_contract_allocation, make_farm, make_policy

COST = CostBasis(total_cost=Decimal("72900.00"), total_cost_per_acre=Decimal("729.00"))

TWO_BY_TWO = ScenarioOverrides(
    yield_steps=2, price_steps=2,
    yield_min=Decimal("150"), yield_max=Decimal("200"),
    price_min=Decimal("4.00"), price_max=Decimal("5.00"),
)


def _contract(**prices):
    return GrainContract(id="c1", commodity_type=CommodityType.CORN, year=2024, **prices)


class RecordingIndemnity:
    """calculate_indemnity stub returning a fixed payout."""

    def __init__(self, result=None):
        self.result = result or Indemnity(base=Decimal("10"), sco=Decimal("2"), eco=Decimal("1"))
        self.calls = []

    def __call__(self, policy, aph, actual_yield, harvest_price, county_yield=None):
        self.calls.append((policy, aph, actual_yield, harvest_price, county_yield))
        return self.result


class TestEffectivePrice:

    def test_cash_price_wins(self):
        contract = _contract(cash_price=Decimal("4.50"), futures_price=Decimal("5.00"))
        assert effective_price(contract) == Decimal("4.50")

    def test_futures_plus_basis(self):
        contract = _contract(futures_price=Decimal("4.80"), basis_price=Decimal("-0.30"))
        assert effective_price(contract) == Decimal("4.50")

    def test_futures_only(self):
        assert effective_price(_contract(futures_price=Decimal("4.80"))) == Decimal("4.80")

    def test_basis_only(self):
        assert effective_price(_contract(basis_price=Decimal("0.25"))) == Decimal("0.25")

    def test_unpriced_is_zero(self):
        assert effective_price(_contract()) == Decimal("0")

    def test_zero_cash_price_counts_as_unpriced(self):
        contract = _contract(cash_price=Decimal("0"), futures_price=Decimal("4.80"))
        assert effective_price(contract) == Decimal("4.80")


class TestMarketedPosition:

    def setup_method(self):
        self.engine = ProfitMatrixEngine()

    def test_weighted_average_of_priced_contracts(self):
        farm = make_farm(
            acres=Decimal("100"),
            projected_yield=Decimal("180"),
            contract_allocations=(
                make_contract_allocation("5000", cash_price=Decimal("5.00")),
                make_contract_allocation("3000", futures_price=Decimal("4.80"), basis_price=Decimal("-0.30")),
            ),
        )
        position = self.engine.marketed_position(farm)

        assert position.marketed_bushels == Decimal("8000")
        assert position.marketed_value == Decimal("38500")
        assert position.marketed_bu_per_acre == Decimal("80")
        assert position.marketed_avg_price == Decimal("4.8125")
        assert position.unmarketed_bu_per_acre == Decimal("100")

    def test_ineligible_allocations_skipped(self):
        farm = make_farm(
            contract_allocations=(
                make_contract_allocation("5000", cash_price=Decimal("5.00")),
                make_contract_allocation("2000"),
                make_contract_allocation("1000", cash_price=Decimal("4.00"), year=2023),
                make_contract_allocation(
                    "1000", cash_price=Decimal("11.00"), commodity_type=CommodityType.SOYBEANS
                ),
                make_contract_allocation("1000", cash_price=Decimal("4.00"), is_active=False),
                make_contract_allocation("1000", cash_price=Decimal("4.00"), is_deleted=True),
                make_contract_allocation("1000", futures_price=Decimal("-1.00")),
            ),
        )
        position = self.engine.marketed_position(farm)

        assert position.marketed_bushels == Decimal("5000")
        assert position.marketed_avg_price == Decimal("5.00")

    def test_no_contracts(self):
        position = self.engine.marketed_position(make_farm())
        assert position.marketed_bu_per_acre == Decimal("0")
        assert position.marketed_avg_price == Decimal("0")
        assert position.unmarketed_bu_per_acre == Decimal("180")

    def test_over_marketed_farm_has_no_unmarketed(self):
        farm = make_farm(
            contract_allocations=(make_contract_allocation("20000", cash_price=Decimal("5.00")),),
        )
        assert self.engine.marketed_position(farm).unmarketed_bu_per_acre == Decimal("0")


class TestBreakEven:

    def test_cost_over_projected_yield(self):
        assert ProfitMatrixEngine.break_even_price(Decimal("729"), Decimal("180"), Decimal("0")) == Decimal("4.05")

    def test_trucking_added_per_bushel(self):
        assert ProfitMatrixEngine.break_even_price(Decimal("729"), Decimal("180"), Decimal("0.15")) == Decimal("4.20")

    def test_zero_yield(self):
        assert ProfitMatrixEngine.break_even_price(Decimal("729"), Decimal("0"), Decimal("0.15")) == Decimal("0")


class TestMatrixCells:

    def setup_method(self):
        self.engine = ProfitMatrixEngine()

    def test_unmarketed_cell_without_policy(self):
        response = self.engine.build(make_farm(), COST, overrides=TWO_BY_TWO)
        cell = response.matrix[0][0]

        assert (cell.yield_bu_acre, cell.price_bu) == (Decimal("150"), Decimal("4.00"))
        assert cell.gross_revenue_per_acre == Decimal("600.00")
        assert cell.total_cost_per_acre == Decimal("729.00")
        assert cell.profit_without_insurance == Decimal("-129.00")
        assert cell.total_insurance_payout == Decimal("0.00")
        assert cell.insurance_premium_cost == Decimal("0.00")
        assert cell.net_profit_per_acre == Decimal("-129.00")

    def test_marketed_bushels_at_contract_price(self):
        farm = make_farm(
            contract_allocations=(make_contract_allocation("8000", cash_price=Decimal("5.00")),),
        )
        cell = self.engine.build(farm, COST, overrides=TWO_BY_TWO).matrix[0][0]
        # 80 bu at 5.00 + 70 bu at 4.00
        assert cell.gross_revenue_per_acre == Decimal("680.00")

    def test_marketed_capped_at_scenario_yield(self):
        farm = make_farm(
            contract_allocations=(make_contract_allocation("8000", cash_price=Decimal("5.00")),),
        )
        overrides = ScenarioOverrides(
            yield_steps=2, yield_min=Decimal("50"), yield_max=Decimal("100"),
            price_steps=2, price_min=Decimal("4.00"), price_max=Decimal("5.00"),
        )
        cell = self.engine.build(farm, COST, overrides=overrides).matrix[0][0]
        assert cell.gross_revenue_per_acre == Decimal("250.00")

    def test_basis_applies_to_unmarketed(self):
        overrides = ScenarioOverrides(
            yield_steps=2, yield_min=Decimal("150"), yield_max=Decimal("200"),
            price_steps=2, price_min=Decimal("4.00"), price_max=Decimal("5.00"),
            basis=Decimal("-0.25"),
        )
        cell = self.engine.build(make_farm(), COST, overrides=overrides).matrix[0][0]
        assert cell.gross_revenue_per_acre == Decimal("562.50")

    def test_trucking_is_per_scenario_bushel(self):
        farm = make_farm(trucking_fee_per_bushel=Decimal("0.15"))
        response = self.engine.build(farm, COST, overrides=TWO_BY_TWO)
        cell = response.matrix[0][0]

        assert cell.trucking_cost_per_acre == Decimal("22.50")
        assert cell.scenario_total_cost_per_acre == Decimal("751.50")
        assert cell.profit_without_insurance == Decimal("-151.50")
        assert response.matrix[1][0].trucking_cost_per_acre == Decimal("30.00")

    def test_business_trucking_fee_fallback(self):
        farm = make_farm(business_trucking_fee_per_bushel=Decimal("0.10"))
        response = self.engine.build(farm, COST, overrides=TWO_BY_TWO)
        assert response.trucking_fee_per_bushel == Decimal("0.10")
        assert response.break_even_price == Decimal("4.15")

    def test_farm_trucking_fee_overrides_business(self):
        farm = make_farm(
            trucking_fee_per_bushel=Decimal("0"),
            business_trucking_fee_per_bushel=Decimal("0.10"),
        )
        response = self.engine.build(farm, COST, overrides=TWO_BY_TWO)
        assert response.trucking_fee_per_bushel == Decimal("0")

    def test_policy_premium_and_payout(self):
        indemnity = RecordingIndemnity()
        engine = ProfitMatrixEngine(calculate_indemnity=indemnity)
        policy = make_policy(has_sco=True, sco_premium_per_acre=Decimal("6.00"))

        cell = engine.build(make_farm(), COST, policy, TWO_BY_TWO).matrix[0][0]

        assert cell.insurance_premium_cost == Decimal("24.50")
        assert cell.insurance_indemnity == Decimal("10.00")
        assert cell.sco_indemnity == Decimal("2.00")
        assert cell.eco_indemnity == Decimal("1.00")
        assert cell.total_insurance_payout == Decimal("13.00")
        # 600 - 729 - 24.50 + 13
        assert cell.net_profit_per_acre == Decimal("-140.50")
        assert cell.profit_without_insurance == Decimal("-129.00")

    def test_indemnity_called_per_cell_with_scenario(self):
        indemnity = RecordingIndemnity()
        engine = ProfitMatrixEngine(calculate_indemnity=indemnity)
        policy = make_policy()
        county = CountyYield(Decimal("200"), Decimal("150"))
        overrides = ScenarioOverrides(
            yield_steps=2, yield_min=Decimal("150"), yield_max=Decimal("200"),
            price_steps=2, price_min=Decimal("4.00"), price_max=Decimal("5.00"),
            county_yield=county,
        )

        engine.build(make_farm(aph=Decimal("175")), COST, policy, overrides)

        assert len(indemnity.calls) == 4
        assert indemnity.calls[0] == (policy, Decimal("175"), Decimal("150"), Decimal("4.00"), county)

    def test_no_policy_never_calls_indemnity(self):
        indemnity = RecordingIndemnity()
        ProfitMatrixEngine(calculate_indemnity=indemnity).build(make_farm(), COST, None, TWO_BY_TWO)
        assert indemnity.calls == []


class TestUnroundedCostBasis:
    """Cells and break-even work from total_cost / acres, rounding only the outputs."""

    PINNED = ScenarioOverrides(
        yield_steps=2, price_steps=2,
        yield_min=Decimal("10"), yield_max=Decimal("20"),
        price_min=Decimal("1.00"), price_max=Decimal("2.00"),
    )

    def setup_method(self):
        self.engine = ProfitMatrixEngine()

    @staticmethod
    def _farm_with_other_cost(amount, **overrides):
        return make_farm(
            acres=Decimal("2"),
            other_costs=(OtherCost(cost_type=CostType.OTHER, amount=amount),),
            **overrides,
        )

    def _basis(self, farm):
        return CostBasisBuilder().build(farm, FarmInterestAllocation(farm_id=farm.id))

    def test_basis_carries_unrounded_cost(self):
        basis = self._basis(self._farm_with_other_cost(Decimal("1.01")))

        assert basis.total_cost_per_acre == Decimal("0.51")
        assert basis.exact_cost_per_acre == Decimal("0.505")

    def test_cell_net_rounded_once(self):
        farm = self._farm_with_other_cost(Decimal("1.01"))
        cell = self.engine.build(farm, self._basis(farm), overrides=self.PINNED).matrix[0][0]

        assert (cell.yield_bu_acre, cell.price_bu) == (Decimal("10"), Decimal("1.00"))
        # 10.00 - 0.505 = 9.495
        assert cell.profit_without_insurance == Decimal("9.50")
        assert cell.net_profit_per_acre == Decimal("9.50")
        assert cell.total_cost_per_acre == Decimal("0.51")

    def test_break_even_uses_unrounded_cost(self):
        farm = self._farm_with_other_cost(Decimal("1.49"), projected_yield=Decimal("10"))
        response = self.engine.build(farm, self._basis(farm), overrides=self.PINNED)

        # 0.745 / 10 = 0.0745, where the rounded 0.75 would give 0.08
        assert response.total_cost_per_acre == Decimal("0.75")
        assert response.break_even_price == Decimal("0.07")

    def test_hand_built_basis_falls_back_to_reported_cost(self):
        assert COST.exact_cost_per_acre == Decimal("729.00")


class TestMatrixResponse:

    def setup_method(self):
        self.engine = ProfitMatrixEngine()

    def test_default_grid_is_seven_by_seven(self):
        response = self.engine.build(make_farm(), COST)

        assert len(response.yield_scenarios) == 7
        assert len(response.price_scenarios) == 7
        assert len(response.matrix) == 7
        assert all(len(row) == 7 for row in response.matrix)

    def test_rows_follow_yield_axis_columns_follow_price_axis(self):
        response = self.engine.build(make_farm(), COST)
        for i, row in enumerate(response.matrix):
            for j, cell in enumerate(row):
                assert cell.yield_bu_acre == response.yield_scenarios[i]
                assert cell.price_bu == response.price_scenarios[j]

    def test_policy_projected_price_centres_price_axis(self):
        policy = make_policy(projected_price=Decimal("5.00"))
        response = self.engine.build(make_farm(), COST, policy, ScenarioOverrides(price_steps=5))
        assert response.price_scenarios == tuple(
            Decimal(p) for p in ("3.00", "4.00", "5.00", "6.00", "7.00")
        )

    def test_summary_fields(self):
        farm = make_farm(
            contract_allocations=(make_contract_allocation("8000", cash_price=Decimal("5.00")),),
        )
        response = self.engine.build(farm, COST)

        assert response.farm_id == farm.id
        assert response.farm_name == "North 80"
        assert response.commodity_type == CommodityType.CORN
        assert response.total_cost_per_acre == Decimal("729.00")
        assert response.break_even_price == Decimal("4.05")
        assert response.marketed_bushels_per_acre == Decimal("80.00")
        assert response.marketed_avg_price == Decimal("5.00")
        assert response.unmarketed_bushels_per_acre == Decimal("100.00")
        assert response.policy is None

    def test_invalid_override_propagates(self):
        with pytest.raises(InvalidScenarioRangeError):
            self.engine.build(make_farm(), COST, overrides=ScenarioOverrides(yield_steps=1))

    def test_logs_start_and_completion(self, captured_logs):
        self.engine.build(make_farm(), COST)
        messages = [r["message"] for r in captured_logs()]
        assert "profit_matrix_started" in messages
        assert "profit_matrix_completed" in messages
        assert "FARM_ENGINE_TRACE" in messages
