"""
Module: farm_engines.cost_allocator
Responsibility:
    Split a land or equipment loan's annual cost into an interest part and a
    principal part.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import farm_kernel/domain.

Rules, in priority order:
    1. Equipment loan with an explicit override -> the override, verbatim.
    2. Simple-mode loan, or an equipment LEASE -> the annual payment split
       by ``simple_mode_interest_share`` (interest) and its complement
       (principal).
    3. Full amortization -> interest = remaining_balance x interest_rate;
       principal = max(0, monthly_payment x 12 - annual interest), where
       annual interest honours an interest override.

Missing numbers read as zero.  Outputs are full precision; callers round.
"""

from __future__ import annotations

from decimal import Decimal

from farm_kernel.domain.records import EquipmentLoan, FinancingType, LandLoan
from farm_kernel.domain.values import ZERO, to_decimal

MONTHS_PER_YEAR = Decimal("12")

Loan = LandLoan | EquipmentLoan


class CostAllocator:
    """
    Annual interest / principal for one loan.

    Contract:
        Pure; the same loan always yields the same split.
    """

    def __init__(self, simple_mode_interest_share: Decimal = Decimal("0.40")):
        self.simple_mode_interest_share = simple_mode_interest_share

    def _uses_payment_split(self, loan: Loan) -> bool:
        if loan.use_simple_mode:
            return True
        return isinstance(loan, EquipmentLoan) and loan.financing_type == FinancingType.LEASE

    def annual_interest(self, loan: Loan) -> Decimal:
        if isinstance(loan, EquipmentLoan) and loan.annual_interest_override is not None:
            return loan.annual_interest_override
        if self._uses_payment_split(loan):
            return to_decimal(loan.annual_payment) * self.simple_mode_interest_share
        return to_decimal(loan.remaining_balance) * to_decimal(loan.interest_rate)

    def annual_principal(self, loan: Loan) -> Decimal:
        if isinstance(loan, EquipmentLoan) and loan.annual_principal_override is not None:
            return loan.annual_principal_override
        if self._uses_payment_split(loan):
            return to_decimal(loan.annual_payment) * (1 - self.simple_mode_interest_share)
        return max(ZERO, to_decimal(loan.monthly_payment) * MONTHS_PER_YEAR - self.annual_interest(loan))

    def annual_cost(self, loan: Loan) -> tuple[Decimal, Decimal]:
        """``(interest, principal)`` for ``loan``."""
        return self.annual_interest(loan), self.annual_principal(loan)
