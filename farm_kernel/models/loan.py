"""
Module: farm_kernel.models.loan
Responsibility: ORM persistence for the three kinds of farm debt -- land
    loans on parcels, operating lines of credit on grain entities, and
    equipment loans/leases -- together with their payment and draw ledgers.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - operating_loans.current_balance is the running balance; each
      operating_loan_transactions row records balance_after so the ledger
      can be audited against the stored balance.
    - Ledger rows (transactions, payments) are append-only; the loan row is
      updated in the same database transaction as the ledger insert.
    - Soft deletion: deleted_at on parcels, loans and equipment.

Failure modes:
    - IntegrityError on a ledger row referencing a missing loan.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from farm_kernel.db.base import TrackedBase, UUIDString


class _AmortizedLoanColumns:
    """Columns shared by land and equipment loans."""

    lender: Mapped[str] = mapped_column(String(200), nullable=False)
    loan_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Simple mode: only annual_payment is known, split by a fixed share
    use_simple_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    principal: Mapped[Decimal | None] = mapped_column(nullable=True)
    interest_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    term_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    monthly_payment: Mapped[Decimal | None] = mapped_column(nullable=True)
    remaining_balance: Mapped[Decimal | None] = mapped_column(nullable=True)
    annual_payment: Mapped[Decimal | None] = mapped_column(nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


# ---------------------------------------------------------------------------
# Land
# ---------------------------------------------------------------------------


class LandParcel(TrackedBase):
    """Owned land, possibly farmed as several farms, possibly mortgaged."""

    __tablename__ = "land_parcels"

    __table_args__ = (
        UniqueConstraint("business_id", "name", name="uq_land_parcel_business_name"),
    )

    business_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("businesses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    total_acres: Mapped[Decimal] = mapped_column(nullable=False)
    county: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    loans: Mapped[list["LandLoan"]] = relationship(back_populates="land_parcel")

    def __repr__(self) -> str:
        return f"<LandParcel {self.name} ({self.total_acres} ac)>"


class LandLoan(_AmortizedLoanColumns, TrackedBase):
    __tablename__ = "land_loans"

    __table_args__ = (Index("idx_land_loan_parcel", "land_parcel_id"),)

    land_parcel_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("land_parcels.id"),
        nullable=False,
    )

    land_parcel: Mapped[LandParcel] = relationship(back_populates="loans")
    payments: Mapped[list["LandLoanPayment"]] = relationship(back_populates="land_loan")


class LandLoanPayment(TrackedBase):
    __tablename__ = "land_loan_payments"

    land_loan_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("land_loans.id"), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    principal_amount: Mapped[Decimal] = mapped_column(nullable=False)
    interest_amount: Mapped[Decimal] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    land_loan: Mapped[LandLoan] = relationship(back_populates="payments")


# ---------------------------------------------------------------------------
# Operating
# ---------------------------------------------------------------------------


class OperatingLoan(TrackedBase):
    """
    A grain entity's revolving operating line for one crop year.

    Guarantees:
        - current_balance changes only through the ledger service, in the
          same transaction as the matching OperatingLoanTransaction insert.
    """

    __tablename__ = "operating_loans"

    __table_args__ = (Index("idx_operating_loan_entity_year", "grain_entity_id", "year"),)

    grain_entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("grain_entities.id"),
        nullable=False,
    )
    lender: Mapped[str] = mapped_column(String(200), nullable=False)
    loan_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    credit_limit: Mapped[Decimal] = mapped_column(nullable=False)
    interest_rate: Mapped[Decimal] = mapped_column(nullable=False)
    current_balance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    grain_entity: Mapped["GrainEntity"] = relationship()  # noqa: F821
    transactions: Mapped[list["OperatingLoanTransaction"]] = relationship(
        back_populates="operating_loan",
        order_by="OperatingLoanTransaction.transaction_date",
    )


class OperatingLoanTransaction(TrackedBase):
    __tablename__ = "operating_loan_transactions"

    __table_args__ = (Index("idx_operating_txn_loan", "operating_loan_id"),)

    operating_loan_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("operating_loans.id"),
        nullable=False,
    )

    # LoanTransactionType value: DRAW or PAYMENT
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Who recorded the draw or payment, when known
    created_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    operating_loan: Mapped[OperatingLoan] = relationship(back_populates="transactions")


# ---------------------------------------------------------------------------
# Equipment
# ---------------------------------------------------------------------------


class Equipment(TrackedBase):
    __tablename__ = "equipment"

    business_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("businesses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    equipment_type: Mapped[str] = mapped_column(String(30), nullable=False, default="OTHER")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    loans: Mapped[list["EquipmentLoan"]] = relationship(back_populates="equipment")


class EquipmentLoan(_AmortizedLoanColumns, TrackedBase):
    """
    Loan or lease on one piece of equipment.

    Guarantees:
        - Only rows with include_in_breakeven contribute to per-acre cost.
        - annual_interest_override / annual_principal_override, when set,
          replace the computed split.
    """

    __tablename__ = "equipment_loans"

    __table_args__ = (Index("idx_equipment_loan_equipment", "equipment_id"),)

    equipment_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("equipment.id"),
        nullable=False,
    )
    financing_type: Mapped[str] = mapped_column(String(20), nullable=False, default="LOAN")
    annual_interest_override: Mapped[Decimal | None] = mapped_column(nullable=True)
    annual_principal_override: Mapped[Decimal | None] = mapped_column(nullable=True)
    include_in_breakeven: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    equipment: Mapped[Equipment] = relationship(back_populates="loans")
    payments: Mapped[list["EquipmentLoanPayment"]] = relationship(back_populates="equipment_loan")


class EquipmentLoanPayment(TrackedBase):
    __tablename__ = "equipment_loan_payments"

    equipment_loan_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("equipment_loans.id"),
        nullable=False,
    )
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    principal_amount: Mapped[Decimal] = mapped_column(nullable=False)
    interest_amount: Mapped[Decimal] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    equipment_loan: Mapped[EquipmentLoan] = relationship(back_populates="payments")
