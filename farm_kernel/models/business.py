"""
Module: farm_kernel.models.business
Responsibility: ORM persistence for the farm business and the grain entities
    (operating companies / partnerships) that hold farms and operating loans.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - A grain entity belongs to exactly one business.
    - business.trucking_fee_per_bushel is the default used when a farm does
      not carry its own fee.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from farm_kernel.db.base import TrackedBase, UUIDString


class Business(TrackedBase):
    """A farming business; the tenancy boundary for every other record."""

    __tablename__ = "businesses"

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Business-wide default hauling cost, $/bu
    trucking_fee_per_bushel: Mapped[Decimal | None] = mapped_column(nullable=True)

    grain_entities: Mapped[list["GrainEntity"]] = relationship(
        back_populates="business",
    )

    def __repr__(self) -> str:
        return f"<Business {self.name}>"


class GrainEntity(TrackedBase):
    """
    A legal entity that farms acres and borrows on an operating line.

    Guarantees:
        - Operating-loan interest is tracked per entity and prorated to its
          farms by acres.
    """

    __tablename__ = "grain_entities"

    __table_args__ = (Index("idx_grain_entity_business", "business_id"),)

    business_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("businesses.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    business: Mapped[Business] = relationship(back_populates="grain_entities")

    def __repr__(self) -> str:
        return f"<GrainEntity {self.name}>"
