"""
Module: farm_kernel.models.marketing
Responsibility: ORM persistence for grain marketing contracts and the
    bushels of each contract allocated to individual farms.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - A contract is priced by any combination of cash, futures and basis;
      the effective per-bushel price is resolved by the profit engine, not
      stored.
    - Allocations to inactive or deleted contracts are ignored by readers.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from farm_kernel.db.base import TrackedBase, UUIDString


class GrainContract(TrackedBase):
    __tablename__ = "grain_contracts"

    __table_args__ = (Index("idx_grain_contract_entity_year", "grain_entity_id", "year"),)

    grain_entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("grain_entities.id"),
        nullable=False,
    )
    contract_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    buyer: Mapped[str] = mapped_column(String(200), nullable=False)
    commodity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    total_bushels: Mapped[Decimal] = mapped_column(nullable=False)

    cash_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    futures_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    basis_price: Mapped[Decimal | None] = mapped_column(nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    allocations: Mapped[list["FarmContractAllocation"]] = relationship(back_populates="contract")

    def __repr__(self) -> str:
        return f"<GrainContract {self.buyer} {self.commodity_type} {self.year}>"


class FarmContractAllocation(TrackedBase):
    __tablename__ = "farm_contract_allocations"

    farm_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("farms.id"), nullable=False)
    grain_contract_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("grain_contracts.id"),
        nullable=False,
    )
    allocated_bushels: Mapped[Decimal] = mapped_column(nullable=False)

    farm: Mapped["Farm"] = relationship(back_populates="contract_allocations")  # noqa: F821
    contract: Mapped[GrainContract] = relationship(back_populates="allocations")
