"""
Records -- frozen value objects for farm finance inputs and outputs.

Responsibility:
    The vocabulary shared by the repository, the engines and the services:
    farms and their input-usage rows, land/operating/equipment loans,
    grain contracts, insurance policies, and the computed allocation,
    cost-basis and profit-matrix results.  Structure only, no business logic
    beyond trivial derived properties.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Selectors build these
    from ORM rows; engines consume and produce them.

Invariants enforced:
    - All money, rate, acreage and yield fields are ``Decimal``.
    - All records are frozen; collections are tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from farm_kernel.domain.values import ZERO


class CommodityType(str, Enum):
    CORN = "CORN"
    SOYBEANS = "SOYBEANS"
    WHEAT = "WHEAT"


class FinancingType(str, Enum):
    """How a piece of equipment is financed."""

    LOAN = "LOAN"
    LEASE = "LEASE"
    LINE_OF_CREDIT = "LINE_OF_CREDIT"


class LoanTransactionType(str, Enum):
    DRAW = "DRAW"
    PAYMENT = "PAYMENT"


class CostType(str, Enum):
    """Categories of farm "other cost" rows."""

    LAND_RENT = "LAND_RENT"
    INSURANCE = "INSURANCE"
    CUSTOM_WORK = "CUSTOM_WORK"
    FUEL = "FUEL"
    REPAIRS = "REPAIRS"
    DRYING = "DRYING"
    OTHER = "OTHER"


class InsurancePlanType(str, Enum):
    RP = "RP"  # Revenue Protection
    YP = "YP"  # Yield Protection
    RP_HPE = "RP_HPE"  # Revenue Protection with Harvest Price Exclusion


# ---------------------------------------------------------------------------
# Loans
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LandLoan:
    """
    A loan secured by a land parcel.

    ``use_simple_mode`` loans only carry ``annual_payment``; full-amortization
    loans carry principal, rate, term, monthly payment and remaining balance.
    Missing numbers are ``None`` and read as zero by the cost allocator.
    """

    id: str
    land_parcel_id: str
    lender: str
    use_simple_mode: bool = False
    principal: Decimal | None = None
    interest_rate: Decimal | None = None
    term_months: int | None = None
    monthly_payment: Decimal | None = None
    remaining_balance: Decimal | None = None
    annual_payment: Decimal | None = None
    is_active: bool = True


@dataclass(frozen=True)
class LandParcel:
    id: str
    business_id: str
    name: str
    total_acres: Decimal
    loans: tuple[LandLoan, ...] = ()


@dataclass(frozen=True)
class EquipmentLoan:
    """
    A loan or lease financing one piece of equipment.

    Only loans with ``include_in_breakeven`` contribute to per-acre cost.
    ``annual_interest_override`` / ``annual_principal_override`` supersede
    computed values.
    """

    id: str
    equipment_id: str
    lender: str
    financing_type: FinancingType = FinancingType.LOAN
    use_simple_mode: bool = False
    principal: Decimal | None = None
    interest_rate: Decimal | None = None
    term_months: int | None = None
    monthly_payment: Decimal | None = None
    remaining_balance: Decimal | None = None
    annual_payment: Decimal | None = None
    annual_interest_override: Decimal | None = None
    annual_principal_override: Decimal | None = None
    include_in_breakeven: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class OperatingLoanTransaction:
    """Immutable ledger entry; ``balance_after`` is the loan balance once applied."""

    id: str
    operating_loan_id: str
    type: LoanTransactionType
    amount: Decimal
    balance_after: Decimal
    transaction_date: date
    description: str | None = None


@dataclass(frozen=True)
class LoanPayment:
    """
    A recorded payment on a land or equipment loan.

    ``remaining_balance_after`` is the loan balance once the principal part
    was applied (clamped at zero).
    """

    id: str
    loan_id: str
    payment_date: date
    total_amount: Decimal
    principal_amount: Decimal
    interest_amount: Decimal
    remaining_balance_after: Decimal
    notes: str | None = None


@dataclass(frozen=True)
class OperatingLoan:
    """A revolving operating line of credit held by a grain entity for one year."""

    id: str
    grain_entity_id: str
    lender: str
    credit_limit: Decimal
    interest_rate: Decimal
    current_balance: Decimal
    year: int
    grain_entity_name: str = ""
    is_active: bool = True

    @property
    def available_credit(self) -> Decimal:
        return self.credit_limit - self.current_balance


# ---------------------------------------------------------------------------
# Farm inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InputUsage:
    """Fertilizer or chemical applied to a farm: amount x product unit price."""

    product_name: str
    amount_used: Decimal
    price_per_unit: Decimal
    unit: str = ""


@dataclass(frozen=True)
class SeedUsage:
    hybrid_name: str
    bags_used: Decimal | None
    price_per_bag: Decimal


@dataclass(frozen=True)
class OtherCost:
    """
    A miscellaneous farm cost.

    ``is_per_acre`` amounts are multiplied by farm acres; otherwise
    ``amount`` is a lump total for the farm.
    """

    cost_type: CostType
    amount: Decimal
    is_per_acre: bool = False
    description: str = ""


@dataclass(frozen=True)
class GrainContract:
    id: str
    commodity_type: CommodityType
    year: int
    cash_price: Decimal | None = None
    futures_price: Decimal | None = None
    basis_price: Decimal | None = None
    is_active: bool = True
    is_deleted: bool = False


@dataclass(frozen=True)
class ContractAllocation:
    """Bushels of a grain contract assigned to one farm."""

    contract: GrainContract
    allocated_bushels: Decimal


@dataclass(frozen=True)
class Farm:
    """
    One crop-year field (a "farm") with its loaded cost records.

    ``trucking_fee_per_bushel`` is the farm's own value; ``None`` falls back
    to ``business_trucking_fee_per_bushel``.
    """

    id: str
    name: str
    business_id: str
    grain_entity_id: str
    acres: Decimal
    aph: Decimal
    projected_yield: Decimal
    commodity_type: CommodityType
    year: int
    land_parcel_id: str | None = None
    trucking_fee_per_bushel: Decimal | None = None
    business_trucking_fee_per_bushel: Decimal | None = None
    fertilizer_usage: tuple[InputUsage, ...] = ()
    chemical_usage: tuple[InputUsage, ...] = ()
    seed_usage: tuple[SeedUsage, ...] = ()
    other_costs: tuple[OtherCost, ...] = ()
    contract_allocations: tuple[ContractAllocation, ...] = ()

    @property
    def resolved_trucking_fee(self) -> Decimal:
        if self.trucking_fee_per_bushel is not None:
            return self.trucking_fee_per_bushel
        if self.business_trucking_fee_per_bushel is not None:
            return self.business_trucking_fee_per_bushel
        return ZERO


# ---------------------------------------------------------------------------
# Insurance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InsurancePolicy:
    """
    Crop insurance policy on a farm.

    ``coverage_level`` and ``eco_level`` are whole percentages (e.g. 80, 95).
    """

    farm_id: str
    plan_type: InsurancePlanType
    coverage_level: Decimal
    projected_price: Decimal
    premium_per_acre: Decimal
    volatility_factor: Decimal = Decimal("0.20")
    has_sco: bool = False
    has_eco: bool = False
    eco_level: Decimal | None = None
    sco_premium_per_acre: Decimal = ZERO
    eco_premium_per_acre: Decimal = ZERO

    @property
    def total_premium_per_acre(self) -> Decimal:
        premium = self.premium_per_acre
        if self.has_sco:
            premium += self.sco_premium_per_acre
        if self.has_eco:
            premium += self.eco_premium_per_acre
        return premium


@dataclass(frozen=True)
class CountyYield:
    """County-level yields driving area-triggered SCO/ECO payouts."""

    expected_county_yield: Decimal
    simulated_county_yield: Decimal


@dataclass(frozen=True)
class Indemnity:
    base: Decimal = ZERO
    sco: Decimal = ZERO
    eco: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.base + self.sco + self.eco


# ---------------------------------------------------------------------------
# Computed results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EquipmentCostPerAcre:
    interest_per_acre: Decimal = ZERO
    principal_per_acre: Decimal = ZERO

    @property
    def total_per_acre(self) -> Decimal:
        return self.interest_per_acre + self.principal_per_acre


@dataclass(frozen=True)
class FarmInterestAllocation:
    """Annual loan cost attributed to one farm for one year (whole-farm dollars)."""

    farm_id: str
    land_loan_interest: Decimal = ZERO
    land_loan_principal: Decimal = ZERO
    operating_loan_interest: Decimal = ZERO
    equipment_loan_interest: Decimal = ZERO
    equipment_loan_principal: Decimal = ZERO

    @property
    def total_interest(self) -> Decimal:
        return self.land_loan_interest + self.operating_loan_interest + self.equipment_loan_interest

    @property
    def total_principal(self) -> Decimal:
        return self.land_loan_principal + self.equipment_loan_principal

    @property
    def total_loan_cost(self) -> Decimal:
        return self.total_interest + self.total_principal

    def as_dict(self) -> dict[str, Decimal | str]:
        return {
            "farm_id": self.farm_id,
            "land_loan_interest": self.land_loan_interest,
            "land_loan_principal": self.land_loan_principal,
            "operating_loan_interest": self.operating_loan_interest,
            "equipment_loan_interest": self.equipment_loan_interest,
            "equipment_loan_principal": self.equipment_loan_principal,
            "total_interest": self.total_interest,
            "total_principal": self.total_principal,
            "total_loan_cost": self.total_loan_cost,
        }


@dataclass(frozen=True)
class ParcelInterest:
    land_parcel_id: str
    land_parcel_name: str
    total_acres: Decimal
    annual_interest: Decimal
    interest_per_acre: Decimal


@dataclass(frozen=True)
class EntityInterest:
    grain_entity_id: str
    grain_entity_name: str
    ytd_interest: Decimal


@dataclass(frozen=True)
class InterestSummary:
    business_id: str
    year: int
    land_loan_interest: tuple[ParcelInterest, ...] = ()
    operating_loan_interest: tuple[EntityInterest, ...] = ()

    @property
    def total_land_loan_interest(self) -> Decimal:
        return sum((p.annual_interest for p in self.land_loan_interest), ZERO)

    @property
    def total_operating_loan_interest(self) -> Decimal:
        return sum((e.ytd_interest for e in self.operating_loan_interest), ZERO)

    @property
    def total_interest_expense(self) -> Decimal:
        return self.total_land_loan_interest + self.total_operating_loan_interest


@dataclass(frozen=True)
class CostBreakdown:
    """Per-acre cost by category, each rounded to cents."""

    fertilizer: Decimal = ZERO
    chemical: Decimal = ZERO
    seed: Decimal = ZERO
    land_rent: Decimal = ZERO
    other: Decimal = ZERO
    land_loan_interest: Decimal = ZERO
    land_loan_principal: Decimal = ZERO
    operating_loan_interest: Decimal = ZERO
    equipment_loan_interest: Decimal = ZERO
    equipment_loan_principal: Decimal = ZERO

    @property
    def loan_cost(self) -> Decimal:
        return (
            self.land_loan_interest
            + self.land_loan_principal
            + self.operating_loan_interest
            + self.equipment_loan_interest
            + self.equipment_loan_principal
        )


@dataclass(frozen=True)
class CostBasis:
    """
    ``total_cost_per_acre`` is the reported (rounded) figure;
    ``unrounded_cost_per_acre`` is total_cost / acres at full precision,
    used for scenario arithmetic.
    """

    total_cost: Decimal
    total_cost_per_acre: Decimal
    breakdown: CostBreakdown = field(default_factory=CostBreakdown)
    unrounded_cost_per_acre: Decimal | None = None

    @property
    def exact_cost_per_acre(self) -> Decimal:
        if self.unrounded_cost_per_acre is None:
            return self.total_cost_per_acre
        return self.unrounded_cost_per_acre


@dataclass(frozen=True)
class MarketedPosition:
    """Contracted grain on a farm, per acre."""

    marketed_bushels: Decimal = ZERO
    marketed_value: Decimal = ZERO
    marketed_bu_per_acre: Decimal = ZERO
    marketed_avg_price: Decimal = ZERO
    unmarketed_bu_per_acre: Decimal = ZERO


@dataclass(frozen=True)
class ProfitMatrixCell:
    yield_bu_acre: Decimal
    price_bu: Decimal
    gross_revenue_per_acre: Decimal
    total_cost_per_acre: Decimal
    trucking_cost_per_acre: Decimal
    scenario_total_cost_per_acre: Decimal
    profit_without_insurance: Decimal
    insurance_indemnity: Decimal
    sco_indemnity: Decimal
    eco_indemnity: Decimal
    total_insurance_payout: Decimal
    insurance_premium_cost: Decimal
    net_profit_per_acre: Decimal


@dataclass(frozen=True)
class ProfitMatrixResponse:
    farm_id: str
    farm_name: str
    commodity_type: CommodityType
    acres: Decimal
    aph: Decimal
    projected_yield: Decimal
    policy: InsurancePolicy | None
    breakdown: CostBreakdown
    total_cost_per_acre: Decimal
    trucking_fee_per_bushel: Decimal
    break_even_price: Decimal
    marketed_bushels_per_acre: Decimal
    marketed_avg_price: Decimal
    unmarketed_bushels_per_acre: Decimal
    yield_scenarios: tuple[Decimal, ...]
    price_scenarios: tuple[Decimal, ...]
    matrix: tuple[tuple[ProfitMatrixCell, ...], ...]


@dataclass(frozen=True)
class ScenarioOverrides:
    """
    Caller-supplied knobs for ``get_profit_matrix``.

    ``basis`` is added to the scenario price for unmarketed bushels.
    """

    yield_steps: int | None = None
    price_steps: int | None = None
    yield_min: Decimal | None = None
    yield_max: Decimal | None = None
    price_min: Decimal | None = None
    price_max: Decimal | None = None
    basis: Decimal = ZERO
    county_yield: CountyYield | None = None
