"""Pure domain layer: value records, Decimal helpers, clock and the read port."""

from farm_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from farm_kernel.domain.records import (
    CommodityType,
    ContractAllocation,
    CostBasis,
    CostBreakdown,
    CostType,
    CountyYield,
    EntityInterest,
    EquipmentCostPerAcre,
    EquipmentLoan,
    Farm,
    FarmInterestAllocation,
    FinancingType,
    GrainContract,
    Indemnity,
    InputUsage,
    InsurancePlanType,
    InsurancePolicy,
    InterestSummary,
    LandLoan,
    LandParcel,
    LoanPayment,
    LoanTransactionType,
    MarketedPosition,
    OperatingLoan,
    OperatingLoanTransaction,
    OtherCost,
    ParcelInterest,
    ProfitMatrixCell,
    ProfitMatrixResponse,
    ScenarioOverrides,
    SeedUsage,
)
from farm_kernel.domain.repository import FarmRepository

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "FarmRepository",
    "CommodityType",
    "FinancingType",
    "LoanTransactionType",
    "CostType",
    "InsurancePlanType",
    "LandParcel",
    "LandLoan",
    "OperatingLoan",
    "OperatingLoanTransaction",
    "LoanPayment",
    "EquipmentLoan",
    "InputUsage",
    "SeedUsage",
    "OtherCost",
    "GrainContract",
    "ContractAllocation",
    "Farm",
    "InsurancePolicy",
    "CountyYield",
    "Indemnity",
    "EquipmentCostPerAcre",
    "FarmInterestAllocation",
    "ParcelInterest",
    "EntityInterest",
    "InterestSummary",
    "CostBreakdown",
    "CostBasis",
    "MarketedPosition",
    "ProfitMatrixCell",
    "ProfitMatrixResponse",
    "ScenarioOverrides",
]
