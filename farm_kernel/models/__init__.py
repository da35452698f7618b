"""SQLAlchemy ORM models for the farm kernel."""

from farm_kernel.models.business import Business, GrainEntity
from farm_kernel.models.farm import (
    Chemical,
    Farm,
    FarmChemicalUsage,
    FarmFertilizerUsage,
    FarmOtherCost,
    FarmSeedUsage,
    Fertilizer,
    SeedHybrid,
)
from farm_kernel.models.insurance import CropInsurancePolicy
from farm_kernel.models.loan import (
    Equipment,
    EquipmentLoan,
    EquipmentLoanPayment,
    LandLoan,
    LandLoanPayment,
    LandParcel,
    OperatingLoan,
    OperatingLoanTransaction,
)
from farm_kernel.models.marketing import FarmContractAllocation, GrainContract

__all__ = [
    "Business",
    "GrainEntity",
    "Fertilizer",
    "Chemical",
    "SeedHybrid",
    "Farm",
    "FarmFertilizerUsage",
    "FarmChemicalUsage",
    "FarmSeedUsage",
    "FarmOtherCost",
    "LandParcel",
    "LandLoan",
    "LandLoanPayment",
    "OperatingLoan",
    "OperatingLoanTransaction",
    "Equipment",
    "EquipmentLoan",
    "EquipmentLoanPayment",
    "GrainContract",
    "FarmContractAllocation",
    "CropInsurancePolicy",
]
