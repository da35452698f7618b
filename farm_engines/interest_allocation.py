"""
Module: farm_engines.interest_allocation
Responsibility:
    Attribute a year's land, operating and equipment loan cost to a single
    farm, compute the business-wide equipment cost per acre, and summarize
    interest expense across a business.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Loans, acreage totals and ``today`` are passed in by the service.

Allocation policy:
    - Land: 100% of the annual interest and principal of every active loan
      on the farm's land parcel is charged to the farm.
    - Operating: the entity's year-to-date interest
      (balance x rate x days / day_count_basis) prorated by
      farm acres / entity acres for the year.
    - Equipment: the business's per-acre equipment cost times farm acres.
      Only loans flagged include_in_breakeven participate.

Invariants enforced:
    - Every ratio is guarded: zero acres contribute zero, never a
      division error.
    - Allocation components are rounded to cents; totals are sums of the
      rounded components.
    - Day count: 365 (the basis) for years before or after ``today``;
      for the current year, days elapsed since Jan 1 inclusive.

Failure modes:
    - None.  Missing loans or acres produce zero components.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from farm_engines.cost_allocator import CostAllocator
from farm_engines.tracer import traced_engine
from farm_kernel.domain.records import (
    EntityInterest,
    EquipmentCostPerAcre,
    EquipmentLoan,
    Farm,
    FarmInterestAllocation,
    InterestSummary,
    LandLoan,
    LandParcel,
    OperatingLoan,
    ParcelInterest,
)
from farm_kernel.domain.values import ZERO, round_money, safe_divide
from farm_kernel.logging_config import get_logger

logger = get_logger("engines.interest_allocation")


class LoanInterestAllocationEngine:
    """
    Loan cost attribution for farms and businesses.

    Contract:
        Pure functions of their arguments; ``today`` is always explicit.
    Non-goals:
        - Does not load loans or acres; FarmFinanceService does.
        - Does not model intra-year balance history; operating interest
          accrues on the current balance.
    """

    def __init__(self, cost_allocator: CostAllocator | None = None, day_count_basis: int = 365):
        self.cost_allocator = cost_allocator or CostAllocator()
        self.day_count_basis = day_count_basis

    def days_to_use(self, year: int, today: date) -> int:
        """Accrual days for ``year`` as seen on ``today``."""
        if year != today.year:
            return self.day_count_basis
        return (today - date(year, 1, 1)).days + 1

    def operating_interest(self, loans: Sequence[OperatingLoan], year: int, today: date) -> Decimal:
        """Year-to-date interest on a set of operating loans, full precision."""
        days = Decimal(self.days_to_use(year, today))
        basis = Decimal(self.day_count_basis)
        total = ZERO
        for loan in loans:
            total += loan.current_balance * loan.interest_rate * days / basis
        return total

    @traced_engine("equipment_cost_per_acre", "1.0", fingerprint_fields=("loans", "total_acres"))
    def equipment_cost_per_acre(
        self,
        loans: Sequence[EquipmentLoan],
        total_acres: Decimal,
    ) -> EquipmentCostPerAcre:
        """
        Business equipment cost spread over all business acres.

        Only ``include_in_breakeven`` loans count.  Zero acres -> zeros.
        Full precision; callers round.
        """
        interest = ZERO
        principal = ZERO
        for loan in loans:
            if not loan.include_in_breakeven:
                continue
            interest += self.cost_allocator.annual_interest(loan)
            principal += self.cost_allocator.annual_principal(loan)

        return EquipmentCostPerAcre(
            interest_per_acre=safe_divide(interest, total_acres),
            principal_per_acre=safe_divide(principal, total_acres),
        )

    @traced_engine("loan_interest_allocation", "1.0", fingerprint_fields=("farm", "year", "today"))
    def allocate(
        self,
        farm: Farm,
        year: int,
        today: date,
        land_loans: Sequence[LandLoan] = (),
        operating_loans: Sequence[OperatingLoan] = (),
        entity_acres: Decimal = ZERO,
        equipment_loans: Sequence[EquipmentLoan] = (),
        business_acres: Decimal = ZERO,
    ) -> FarmInterestAllocation:
        """
        Loan cost attributed to ``farm`` for ``year``.

        Args:
            farm: The farm receiving the allocation.
            year: Crop year being allocated.
            today: Current date, for the operating-interest day count.
            land_loans: Active loans on the farm's land parcel.
            operating_loans: Active operating loans of the farm's entity for ``year``.
            entity_acres: Total acres of the entity's farms in ``year``.
            equipment_loans: Active equipment loans of the business.
            business_acres: Total acres of the business's farms in ``year``.
        """
        logger.info(
            "interest_allocation_started",
            extra={
                "farm_id": farm.id,
                "year": year,
                "land_loan_count": len(land_loans),
                "operating_loan_count": len(operating_loans),
                "equipment_loan_count": len(equipment_loans),
            },
        )

        land_interest = ZERO
        land_principal = ZERO
        for loan in land_loans:
            if not loan.is_active:
                continue
            land_interest += self.cost_allocator.annual_interest(loan)
            land_principal += self.cost_allocator.annual_principal(loan)

        entity_interest = self.operating_interest(
            [loan for loan in operating_loans if loan.is_active], year, today
        )
        operating = safe_divide(entity_interest * farm.acres, entity_acres)

        per_acre = self.equipment_cost_per_acre(
            [loan for loan in equipment_loans if loan.is_active], business_acres
        )

        allocation = FarmInterestAllocation(
            farm_id=farm.id,
            land_loan_interest=round_money(land_interest),
            land_loan_principal=round_money(land_principal),
            operating_loan_interest=round_money(operating),
            equipment_loan_interest=round_money(per_acre.interest_per_acre * farm.acres),
            equipment_loan_principal=round_money(per_acre.principal_per_acre * farm.acres),
        )

        logger.info(
            "interest_allocation_completed",
            extra={
                "farm_id": farm.id,
                "total_interest": str(allocation.total_interest),
                "total_principal": str(allocation.total_principal),
                "total_loan_cost": str(allocation.total_loan_cost),
            },
        )
        return allocation

    @traced_engine("interest_summary", "1.0", fingerprint_fields=("business_id", "year", "today"))
    def interest_summary(
        self,
        business_id: str,
        year: int,
        today: date,
        parcels: Sequence[LandParcel] = (),
        operating_loans: Sequence[OperatingLoan] = (),
    ) -> InterestSummary:
        """
        Business interest expense: annual land-loan interest per parcel and
        year-to-date operating interest per grain entity.
        """
        parcel_rows = []
        for parcel in parcels:
            annual = sum(
                (self.cost_allocator.annual_interest(loan) for loan in parcel.loans if loan.is_active),
                ZERO,
            )
            parcel_rows.append(
                ParcelInterest(
                    land_parcel_id=parcel.id,
                    land_parcel_name=parcel.name,
                    total_acres=parcel.total_acres,
                    annual_interest=round_money(annual),
                    interest_per_acre=round_money(safe_divide(annual, parcel.total_acres)),
                )
            )

        # Grouped by entity, in first-seen order
        by_entity: dict[str, list[OperatingLoan]] = {}
        for loan in operating_loans:
            if loan.is_active:
                by_entity.setdefault(loan.grain_entity_id, []).append(loan)

        entity_rows = tuple(
            EntityInterest(
                grain_entity_id=entity_id,
                grain_entity_name=loans[0].grain_entity_name,
                ytd_interest=round_money(self.operating_interest(loans, year, today)),
            )
            for entity_id, loans in by_entity.items()
        )

        summary = InterestSummary(
            business_id=business_id,
            year=year,
            land_loan_interest=tuple(parcel_rows),
            operating_loan_interest=entity_rows,
        )
        logger.info(
            "interest_summary_completed",
            extra={
                "business_id": business_id,
                "year": year,
                "parcel_count": len(parcel_rows),
                "entity_count": len(entity_rows),
                "total_interest_expense": str(summary.total_interest_expense),
            },
        )
        return summary
