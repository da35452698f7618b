"""
Module: farm_kernel.models.farm
Responsibility: ORM persistence for farms (one crop-year field) and their
    cost inputs: fertilizer, chemical and seed usage against priced products,
    plus miscellaneous "other cost" rows.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Product prices live on the product row (fertilizers, chemicals,
      seed_hybrids); usage rows carry only the quantity applied.
    - Acres, APH and projected yield are Decimal, never float.

Failure modes:
    - IntegrityError on a usage row referencing a missing farm or product.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from farm_kernel.db.base import TrackedBase, UUIDString


class Fertilizer(TrackedBase):
    __tablename__ = "fertilizers"

    business_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("businesses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Chemical(TrackedBase):
    __tablename__ = "chemicals"

    business_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("businesses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class SeedHybrid(TrackedBase):
    __tablename__ = "seed_hybrids"

    business_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("businesses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    commodity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    price_per_bag: Mapped[Decimal] = mapped_column(nullable=False)
    seeds_per_bag: Mapped[int] = mapped_column(Integer, default=80000, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Farm(TrackedBase):
    """
    A field planted to one commodity in one crop year.

    Guarantees:
        - Belongs to exactly one grain entity (and through it one business).
        - land_parcel_id, when set, ties the farm to the parcel whose land
          loans it carries.
        - trucking_fee_per_bushel NULL means "use the business default".
    """

    __tablename__ = "farms"

    __table_args__ = (
        Index("idx_farm_entity_year", "grain_entity_id", "year"),
        Index("idx_farm_land_parcel", "land_parcel_id"),
    )

    grain_entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("grain_entities.id"),
        nullable=False,
    )

    land_parcel_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("land_parcels.id"),
        nullable=True,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    acres: Mapped[Decimal] = mapped_column(nullable=False)

    # Actual production history, bu/acre
    aph: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    projected_yield: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    commodity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    trucking_fee_per_bushel: Mapped[Decimal | None] = mapped_column(nullable=True)

    grain_entity: Mapped["GrainEntity"] = relationship()  # noqa: F821

    fertilizer_usage: Mapped[list["FarmFertilizerUsage"]] = relationship(
        back_populates="farm",
        cascade="all, delete-orphan",
    )
    chemical_usage: Mapped[list["FarmChemicalUsage"]] = relationship(
        back_populates="farm",
        cascade="all, delete-orphan",
    )
    seed_usage: Mapped[list["FarmSeedUsage"]] = relationship(
        back_populates="farm",
        cascade="all, delete-orphan",
    )
    other_costs: Mapped[list["FarmOtherCost"]] = relationship(
        back_populates="farm",
        cascade="all, delete-orphan",
    )
    contract_allocations: Mapped[list["FarmContractAllocation"]] = relationship(  # noqa: F821
        back_populates="farm",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Farm {self.name} {self.year} {self.commodity_type}>"


class FarmFertilizerUsage(TrackedBase):
    __tablename__ = "farm_fertilizer_usage"

    farm_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("farms.id"), nullable=False)
    fertilizer_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("fertilizers.id"), nullable=False)
    amount_used: Mapped[Decimal] = mapped_column(nullable=False)

    farm: Mapped[Farm] = relationship(back_populates="fertilizer_usage")
    fertilizer: Mapped[Fertilizer] = relationship()


class FarmChemicalUsage(TrackedBase):
    __tablename__ = "farm_chemical_usage"

    farm_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("farms.id"), nullable=False)
    chemical_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("chemicals.id"), nullable=False)
    amount_used: Mapped[Decimal] = mapped_column(nullable=False)

    farm: Mapped[Farm] = relationship(back_populates="chemical_usage")
    chemical: Mapped[Chemical] = relationship()


class FarmSeedUsage(TrackedBase):
    __tablename__ = "farm_seed_usage"

    farm_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("farms.id"), nullable=False)
    seed_hybrid_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("seed_hybrids.id"), nullable=False)

    # NULL when only a planting population was recorded
    bags_used: Mapped[Decimal | None] = mapped_column(nullable=True)

    farm: Mapped[Farm] = relationship(back_populates="seed_usage")
    seed_hybrid: Mapped[SeedHybrid] = relationship()


class FarmOtherCost(TrackedBase):
    """
    Miscellaneous farm cost (rent, custom work, insurance, ...).

    is_per_acre amounts are multiplied by farm acres when building the cost
    basis; otherwise amount is the whole-farm total.
    """

    __tablename__ = "farm_other_costs"

    farm_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("farms.id"), nullable=False)
    cost_type: Mapped[str] = mapped_column(String(30), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    is_per_acre: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    farm: Mapped[Farm] = relationship(back_populates="other_costs")
