"""
FarmFinanceService -- public entry points for farm loan cost and profit scenarios.

Responsibility:
    Loads farms, loans, acreage and insurance through a FarmRepository,
    reads the current date from an injected Clock, and composes the pure
    engines: LoanInterestAllocationEngine -> CostBasisBuilder ->
    ProfitMatrixEngine.

Architecture position:
    Services -- imperative shell over engines + kernel.
    The only layer that touches both the repository and the clock.

Invariants enforced:
    - Engines receive ``today`` from the clock, never from the system time.
    - Missing optional data (loans, policy, contracts) contributes zero.
    - A missing farm yields an all-zero allocation, but is a hard
      FarmNotFoundError for the profit matrix.

Failure modes:
    - FarmNotFoundError from ``get_profit_matrix``.
    - InvalidScenarioRangeError from ``get_profit_matrix`` on bad overrides.
"""

from __future__ import annotations

from farm_config import EngineConfig, get_active_config
from farm_engines.cost_allocator import CostAllocator
from farm_engines.cost_basis import CostBasisBuilder
from farm_engines.indemnity import CropInsuranceIndemnityCalculator
from farm_engines.interest_allocation import LoanInterestAllocationEngine
from farm_engines.profit_matrix import IndemnityFn, ProfitMatrixEngine
from farm_engines.scenario_grid import ScenarioGridBuilder
from farm_kernel.domain.clock import Clock, SystemClock
from farm_kernel.domain.records import (
    CostBasis,
    Farm,
    FarmInterestAllocation,
    InterestSummary,
    ProfitMatrixResponse,
    ScenarioOverrides,
)
from farm_kernel.domain.repository import FarmRepository
from farm_kernel.exceptions import FarmNotFoundError
from farm_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.farm_finance")


def build_engines(
    config: EngineConfig,
    calculate_indemnity: IndemnityFn | None = None,
) -> tuple[LoanInterestAllocationEngine, CostBasisBuilder, ProfitMatrixEngine]:
    """Wire the engines from a compiled configuration."""
    allocator = CostAllocator(config.loans.simple_mode_interest_share)
    scenarios = config.scenarios
    grid = ScenarioGridBuilder(
        default_steps=scenarios.default_steps,
        yield_low_pct=scenarios.yield_low_pct,
        yield_high_pct=scenarios.yield_high_pct,
        aph_fallback_start=scenarios.aph_fallback_start,
        aph_fallback_step=scenarios.aph_fallback_step,
        price_low_pct=scenarios.price_low_pct,
        price_high_pct=scenarios.price_high_pct,
        default_prices=config.default_prices(),
        price_increments=config.price_increments(),
        fallback_price=config.fallback_commodity.default_price,
        fallback_increment=config.fallback_commodity.price_increment,
    )
    indemnity = calculate_indemnity or CropInsuranceIndemnityCalculator(
        config.insurance.sco_top_level
    )
    return (
        LoanInterestAllocationEngine(allocator, config.loans.day_count_basis),
        CostBasisBuilder(),
        ProfitMatrixEngine(grid, indemnity),
    )


class FarmFinanceService:
    """
    Farm interest allocation, interest summary and profit matrix.

    Contract:
        Stateless between calls; every call re-reads the repository, so
        repeated calls with unchanged data return equal results.

    Usage:
        with session_scope() as session:
            service = FarmFinanceService(FarmSelector(session))
            matrix = service.get_profit_matrix(farm_id, business_id)
    """

    def __init__(
        self,
        repository: FarmRepository,
        clock: Clock | None = None,
        config: EngineConfig | None = None,
        calculate_indemnity: IndemnityFn | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()
        self._allocation, self._cost_basis, self._profit_matrix = build_engines(
            self._config, calculate_indemnity
        )

    def get_farm_interest_allocation(self, farm_id: str, year: int) -> FarmInterestAllocation:
        """Loan cost charged to one farm for ``year``; zeros if the farm is missing."""
        with LogContext.bind(farm_id=farm_id):
            farm = self._repository.find_farm(farm_id)
            if farm is None:
                logger.warning(
                    "interest_allocation_farm_missing",
                    extra={"farm_id": str(farm_id), "year": year},
                )
                return FarmInterestAllocation(farm_id=str(farm_id))
            return self._allocate(farm, year)

    def get_interest_summary(self, business_id: str, year: int) -> InterestSummary:
        """Business-wide land-loan and operating-loan interest for ``year``."""
        with LogContext.bind(business_id=business_id):
            parcels = self._repository.find_land_parcels(business_id)
            operating = self._repository.find_business_operating_loans(business_id, year)
            return self._allocation.interest_summary(
                business_id=str(business_id),
                year=year,
                today=self._clock.today(),
                parcels=parcels,
                operating_loans=operating,
            )

    def get_cost_basis(self, farm_id: str, business_id: str | None = None) -> CostBasis:
        """Per-acre cost basis of a farm for its own crop year."""
        farm = self._require_farm(farm_id, business_id)
        return self._cost_basis.build(farm, self._allocate(farm, farm.year))

    def get_profit_matrix(
        self,
        farm_id: str,
        business_id: str,
        overrides: ScenarioOverrides | None = None,
    ) -> ProfitMatrixResponse:
        """
        Yield x price profit grid for a farm owned by ``business_id``.

        Raises:
            FarmNotFoundError: farm missing, deleted, or owned elsewhere.
            InvalidScenarioRangeError: unusable axis overrides.
        """
        with LogContext.bind(farm_id=farm_id, business_id=business_id):
            farm = self._require_farm(farm_id, business_id)
            basis = self._cost_basis.build(farm, self._allocate(farm, farm.year))
            policy = self._repository.get_insurance_policy(farm.id, business_id)
            return self._profit_matrix.build(farm, basis, policy, overrides)

    # ------------------------------------------------------------------

    def _require_farm(self, farm_id: str, business_id: str | None) -> Farm:
        farm = self._repository.find_farm(farm_id, business_id)
        if farm is None:
            logger.warning(
                "farm_not_found",
                extra={"farm_id": str(farm_id), "business_id": str(business_id)},
            )
            raise FarmNotFoundError(farm_id, business_id)
        return farm

    def _allocate(self, farm: Farm, year: int) -> FarmInterestAllocation:
        land_loans = (
            self._repository.find_land_parcel_loans(farm.land_parcel_id)
            if farm.land_parcel_id
            else ()
        )
        return self._allocation.allocate(
            farm=farm,
            year=year,
            today=self._clock.today(),
            land_loans=land_loans,
            operating_loans=self._repository.find_operating_loans(farm.grain_entity_id, year),
            entity_acres=self._repository.sum_farm_acres(year, grain_entity_id=farm.grain_entity_id),
            equipment_loans=self._repository.find_equipment_loans(farm.business_id, year),
            business_acres=self._repository.sum_farm_acres(year, business_id=farm.business_id),
        )
