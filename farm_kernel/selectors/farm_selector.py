"""
FarmSelector -- SQLAlchemy implementation of the FarmRepository read port.

Responsibility:
    Loads farms, land parcels, loans and insurance policies from the ORM and
    maps them to frozen domain records for the engines.

Architecture position:
    Kernel > Selectors.  Satisfies ``farm_kernel.domain.repository.FarmRepository``.

Invariants enforced:
    - Soft-deleted rows (``deleted_at IS NOT NULL``) are never returned.
    - Inactive loans and inactive equipment are never returned.
    - Business scoping: ``find_farm`` with a business_id only returns farms
      reached through that business's grain entities.

Failure modes:
    - None of its own.  Missing rows are ``None`` / empty tuples / zero.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from farm_kernel.domain import records
from farm_kernel.domain.values import to_decimal
from farm_kernel.logging_config import get_logger
from farm_kernel.models.business import Business, GrainEntity
from farm_kernel.models.farm import (
    Farm,
    FarmChemicalUsage,
    FarmFertilizerUsage,
    FarmSeedUsage,
)
from farm_kernel.models.insurance import CropInsurancePolicy
from farm_kernel.models.loan import (
    Equipment,
    EquipmentLoan,
    LandLoan,
    LandParcel,
    OperatingLoan,
)
from farm_kernel.models.marketing import FarmContractAllocation
from farm_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.farm")


def _cost_type(value: str) -> records.CostType:
    try:
        return records.CostType(value)
    except ValueError:
        return records.CostType.OTHER


def land_loan_to_record(row: LandLoan) -> records.LandLoan:
    return records.LandLoan(
        id=str(row.id),
        land_parcel_id=str(row.land_parcel_id),
        lender=row.lender,
        use_simple_mode=row.use_simple_mode,
        principal=row.principal,
        interest_rate=row.interest_rate,
        term_months=row.term_months,
        monthly_payment=row.monthly_payment,
        remaining_balance=row.remaining_balance,
        annual_payment=row.annual_payment,
        is_active=row.is_active,
    )


def equipment_loan_to_record(row: EquipmentLoan) -> records.EquipmentLoan:
    return records.EquipmentLoan(
        id=str(row.id),
        equipment_id=str(row.equipment_id),
        lender=row.lender,
        financing_type=records.FinancingType(row.financing_type),
        use_simple_mode=row.use_simple_mode,
        principal=row.principal,
        interest_rate=row.interest_rate,
        term_months=row.term_months,
        monthly_payment=row.monthly_payment,
        remaining_balance=row.remaining_balance,
        annual_payment=row.annual_payment,
        annual_interest_override=row.annual_interest_override,
        annual_principal_override=row.annual_principal_override,
        include_in_breakeven=row.include_in_breakeven,
        is_active=row.is_active,
    )


def operating_loan_to_record(row: OperatingLoan, entity_name: str = "") -> records.OperatingLoan:
    return records.OperatingLoan(
        id=str(row.id),
        grain_entity_id=str(row.grain_entity_id),
        grain_entity_name=entity_name,
        lender=row.lender,
        credit_limit=row.credit_limit,
        interest_rate=row.interest_rate,
        current_balance=row.current_balance,
        year=row.year,
        is_active=row.is_active,
    )


def _allocation_to_record(row: FarmContractAllocation) -> records.ContractAllocation:
    contract = row.contract
    return records.ContractAllocation(
        allocated_bushels=row.allocated_bushels,
        contract=records.GrainContract(
            id=str(contract.id),
            commodity_type=records.CommodityType(contract.commodity_type),
            year=contract.year,
            cash_price=contract.cash_price,
            futures_price=contract.futures_price,
            basis_price=contract.basis_price,
            is_active=contract.is_active,
            is_deleted=contract.deleted_at is not None,
        ),
    )


class FarmSelector(BaseSelector[Farm]):
    """
    Read-only queries backing the farm finance service.

    Contract:
        Every method returns frozen records from ``farm_kernel.domain.records``.
    """

    def find_farm(self, farm_id: str, business_id: str | None = None) -> records.Farm | None:
        stmt = (
            select(Farm, GrainEntity.business_id, Business.trucking_fee_per_bushel)
            .join(GrainEntity, Farm.grain_entity_id == GrainEntity.id)
            .join(Business, GrainEntity.business_id == Business.id)
            .where(Farm.id == farm_id, Farm.deleted_at.is_(None))
            .options(
                selectinload(Farm.fertilizer_usage).selectinload(FarmFertilizerUsage.fertilizer),
                selectinload(Farm.chemical_usage).selectinload(FarmChemicalUsage.chemical),
                selectinload(Farm.seed_usage).selectinload(FarmSeedUsage.seed_hybrid),
                selectinload(Farm.other_costs),
                selectinload(Farm.contract_allocations).selectinload(FarmContractAllocation.contract),
            )
        )
        if business_id is not None:
            stmt = stmt.where(GrainEntity.business_id == business_id)

        row = self.session.execute(stmt).first()
        if row is None:
            logger.debug("farm_not_found", extra={"farm_id": str(farm_id)})
            return None

        farm, owner_id, business_fee = row
        return records.Farm(
            id=str(farm.id),
            name=farm.name,
            business_id=str(owner_id),
            grain_entity_id=str(farm.grain_entity_id),
            land_parcel_id=str(farm.land_parcel_id) if farm.land_parcel_id else None,
            acres=farm.acres,
            aph=farm.aph,
            projected_yield=farm.projected_yield,
            commodity_type=records.CommodityType(farm.commodity_type),
            year=farm.year,
            trucking_fee_per_bushel=farm.trucking_fee_per_bushel,
            business_trucking_fee_per_bushel=business_fee,
            fertilizer_usage=tuple(
                records.InputUsage(
                    product_name=u.fertilizer.name,
                    amount_used=u.amount_used,
                    price_per_unit=u.fertilizer.price_per_unit,
                    unit=u.fertilizer.unit,
                )
                for u in farm.fertilizer_usage
                if u.deleted_at is None
            ),
            chemical_usage=tuple(
                records.InputUsage(
                    product_name=u.chemical.name,
                    amount_used=u.amount_used,
                    price_per_unit=u.chemical.price_per_unit,
                    unit=u.chemical.unit,
                )
                for u in farm.chemical_usage
                if u.deleted_at is None
            ),
            seed_usage=tuple(
                records.SeedUsage(
                    hybrid_name=u.seed_hybrid.name,
                    bags_used=u.bags_used,
                    price_per_bag=u.seed_hybrid.price_per_bag,
                )
                for u in farm.seed_usage
                if u.deleted_at is None
            ),
            other_costs=tuple(
                records.OtherCost(
                    cost_type=_cost_type(c.cost_type),
                    amount=c.amount,
                    is_per_acre=c.is_per_acre,
                    description=c.description or "",
                )
                for c in farm.other_costs
                if c.deleted_at is None
            ),
            contract_allocations=tuple(
                _allocation_to_record(a)
                for a in farm.contract_allocations
                if a.deleted_at is None
            ),
        )

    def find_land_parcel_loans(self, land_parcel_id: str) -> Sequence[records.LandLoan]:
        rows = self.session.execute(
            select(LandLoan)
            .where(
                LandLoan.land_parcel_id == land_parcel_id,
                LandLoan.is_active.is_(True),
                LandLoan.deleted_at.is_(None),
            )
            .order_by(LandLoan.created_at)
        ).scalars().all()
        return tuple(land_loan_to_record(r) for r in rows)

    def find_operating_loans(self, grain_entity_id: str, year: int) -> Sequence[records.OperatingLoan]:
        rows = self.session.execute(
            select(OperatingLoan, GrainEntity.name)
            .join(GrainEntity, OperatingLoan.grain_entity_id == GrainEntity.id)
            .where(
                OperatingLoan.grain_entity_id == grain_entity_id,
                OperatingLoan.year == year,
                OperatingLoan.is_active.is_(True),
                OperatingLoan.deleted_at.is_(None),
            )
        ).all()
        return tuple(operating_loan_to_record(loan, name) for loan, name in rows)

    def find_equipment_loans(
        self,
        business_id: str,
        year: int | None = None,
        include_in_breakeven: bool = True,
    ) -> Sequence[records.EquipmentLoan]:
        stmt = (
            select(EquipmentLoan)
            .join(Equipment, EquipmentLoan.equipment_id == Equipment.id)
            .where(
                Equipment.business_id == business_id,
                Equipment.is_active.is_(True),
                Equipment.deleted_at.is_(None),
                EquipmentLoan.is_active.is_(True),
                EquipmentLoan.deleted_at.is_(None),
            )
        )
        if include_in_breakeven:
            stmt = stmt.where(EquipmentLoan.include_in_breakeven.is_(True))
        rows = self.session.execute(stmt).scalars().all()
        return tuple(equipment_loan_to_record(r) for r in rows)

    def sum_farm_acres(
        self,
        year: int,
        grain_entity_id: str | None = None,
        business_id: str | None = None,
    ) -> Decimal:
        stmt = select(func.sum(Farm.acres)).where(Farm.year == year, Farm.deleted_at.is_(None))
        if grain_entity_id is not None:
            stmt = stmt.where(Farm.grain_entity_id == grain_entity_id)
        if business_id is not None:
            stmt = stmt.join(GrainEntity, Farm.grain_entity_id == GrainEntity.id).where(
                GrainEntity.business_id == business_id
            )
        return to_decimal(self.session.execute(stmt).scalar())

    def get_insurance_policy(
        self, farm_id: str, business_id: str | None = None
    ) -> records.InsurancePolicy | None:
        stmt = select(CropInsurancePolicy).where(
            CropInsurancePolicy.farm_id == farm_id,
            CropInsurancePolicy.deleted_at.is_(None),
        )
        if business_id is not None:
            stmt = (
                stmt.join(Farm, CropInsurancePolicy.farm_id == Farm.id)
                .join(GrainEntity, Farm.grain_entity_id == GrainEntity.id)
                .where(GrainEntity.business_id == business_id)
            )
        row = self.session.execute(stmt).scalar_one_or_none()
        if row is None:
            return None
        return records.InsurancePolicy(
            farm_id=str(row.farm_id),
            plan_type=records.InsurancePlanType(row.plan_type),
            coverage_level=row.coverage_level,
            projected_price=row.projected_price,
            volatility_factor=row.volatility_factor,
            premium_per_acre=row.premium_per_acre,
            has_sco=row.has_sco,
            has_eco=row.has_eco,
            eco_level=row.eco_level,
            sco_premium_per_acre=row.sco_premium_per_acre,
            eco_premium_per_acre=row.eco_premium_per_acre,
        )

    def find_land_parcels(self, business_id: str) -> Sequence[records.LandParcel]:
        parcels = self.session.execute(
            select(LandParcel)
            .where(LandParcel.business_id == business_id, LandParcel.deleted_at.is_(None))
            .options(selectinload(LandParcel.loans))
            .order_by(LandParcel.name)
        ).scalars().all()
        return tuple(
            records.LandParcel(
                id=str(p.id),
                business_id=str(p.business_id),
                name=p.name,
                total_acres=p.total_acres,
                loans=tuple(
                    land_loan_to_record(loan)
                    for loan in p.loans
                    if loan.is_active and loan.deleted_at is None
                ),
            )
            for p in parcels
        )

    def find_business_operating_loans(self, business_id: str, year: int) -> Sequence[records.OperatingLoan]:
        rows = self.session.execute(
            select(OperatingLoan, GrainEntity.name)
            .join(GrainEntity, OperatingLoan.grain_entity_id == GrainEntity.id)
            .where(
                GrainEntity.business_id == business_id,
                OperatingLoan.year == year,
                OperatingLoan.is_active.is_(True),
                OperatingLoan.deleted_at.is_(None),
            )
            .order_by(GrainEntity.name)
        ).all()
        return tuple(operating_loan_to_record(loan, name) for loan, name in rows)
