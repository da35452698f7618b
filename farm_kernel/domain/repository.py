"""FarmRepository -- read port consumed by the farm finance service.

The engines never query storage.  FarmFinanceService loads value objects
through this protocol and hands them to the engines.  The production
implementation is ``farm_kernel.selectors.farm_selector.FarmSelector``;
tests may supply an in-memory fake.

Every method returns plain frozen records from ``farm_kernel.domain.records``
and filters out soft-deleted and inactive rows.  Absent data is an empty
tuple, ``None`` or zero, never an exception.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, Sequence, runtime_checkable

from farm_kernel.domain.records import (
    EquipmentLoan,
    Farm,
    InsurancePolicy,
    LandLoan,
    LandParcel,
    OperatingLoan,
)


@runtime_checkable
class FarmRepository(Protocol):
    """Read access to farms, loans and policies scoped to one business."""

    def find_farm(self, farm_id: str, business_id: str | None = None) -> Farm | None:
        """Return the farm with its usage, cost and allocation rows.

        When ``business_id`` is given, a farm owned by another business is
        reported as ``None``.
        """
        ...

    def find_land_parcel_loans(self, land_parcel_id: str) -> Sequence[LandLoan]:
        """Active land loans on a parcel."""
        ...

    def find_operating_loans(self, grain_entity_id: str, year: int) -> Sequence[OperatingLoan]:
        """Active operating loans of one grain entity for one year."""
        ...

    def find_equipment_loans(
        self,
        business_id: str,
        year: int | None = None,
        include_in_breakeven: bool = True,
    ) -> Sequence[EquipmentLoan]:
        """Active loans on the business's active equipment.

        Equipment loans are not year-scoped; ``year`` is accepted for symmetry
        with the other finders and does not filter.  With
        ``include_in_breakeven`` only flagged loans are returned.
        """
        ...

    def sum_farm_acres(
        self,
        year: int,
        grain_entity_id: str | None = None,
        business_id: str | None = None,
    ) -> Decimal:
        """Total acres of live farms in ``year`` for an entity or a business."""
        ...

    def get_insurance_policy(self, farm_id: str, business_id: str | None = None) -> InsurancePolicy | None:
        """The farm's policy, or ``None``.  Scoped to ``business_id`` when given."""
        ...

    def find_land_parcels(self, business_id: str) -> Sequence[LandParcel]:
        """Live parcels of a business, each carrying its active loans."""
        ...

    def find_business_operating_loans(self, business_id: str, year: int) -> Sequence[OperatingLoan]:
        """Active operating loans across every grain entity of a business."""
        ...
