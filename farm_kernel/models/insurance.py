"""
Module: farm_kernel.models.insurance
Responsibility: ORM persistence for the crop insurance policy attached to a
    farm, including optional SCO and ECO area endorsements.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - At most one policy per farm (uq_insurance_policy_farm).
    - coverage_level and eco_level are whole percentages (70-95).
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from farm_kernel.db.base import TrackedBase, UUIDString


class CropInsurancePolicy(TrackedBase):
    __tablename__ = "crop_insurance_policies"

    __table_args__ = (UniqueConstraint("farm_id", name="uq_insurance_policy_farm"),)

    farm_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("farms.id"), nullable=False)

    # InsurancePlanType value: RP, YP or RP_HPE
    plan_type: Mapped[str] = mapped_column(String(10), nullable=False)
    coverage_level: Mapped[Decimal] = mapped_column(nullable=False)
    projected_price: Mapped[Decimal] = mapped_column(nullable=False)
    volatility_factor: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.20"))
    premium_per_acre: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    has_sco: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_eco: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    eco_level: Mapped[Decimal | None] = mapped_column(nullable=True)
    sco_premium_per_acre: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    eco_premium_per_acre: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
