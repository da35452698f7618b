"""
LoanLedgerService -- atomic draws and payments against farm loans.

Responsibility:
    Records operating-loan draws and payments, and land / equipment loan
    payments.  Each call inserts one ledger row and updates the loan's
    balance as a single unit of work.

Architecture position:
    Kernel > Services -- imperative shell.  Called by application code
    inside ``session_scope()``; the caller commits.

Invariants enforced:
    - Row lock: the loan row is read with ``SELECT ... FOR UPDATE`` so
      concurrent draws and payments on one loan serialize.
    - Operating draw: ``balance_after = current_balance + amount``.  Draws do
      not check the credit limit.
    - Operating payment: ``balance_after = max(0, current_balance - amount)``.
    - Land / equipment payment: ``remaining_balance`` decreases by the
      principal part and never goes below zero.
    - The ledger row and the balance update are flushed together; on a
      database error the session is rolled back so neither persists.

Failure modes:
    - LoanNotFoundError: no live loan with that id.
    - InvalidTransactionError: non-positive amount, unknown transaction
      type, or a payment split that does not fit the total.
    - LedgerPersistenceError: SQLAlchemy error during the write (after
      rollback).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from farm_kernel.domain.records import (
    LoanPayment,
    LoanTransactionType,
    OperatingLoanTransaction as TransactionRecord,
)
from farm_kernel.domain.values import ZERO, to_decimal
from farm_kernel.exceptions import (
    InvalidTransactionError,
    LedgerPersistenceError,
    LoanNotFoundError,
)
from farm_kernel.logging_config import get_logger
from farm_kernel.models.loan import (
    EquipmentLoan,
    EquipmentLoanPayment,
    LandLoan,
    LandLoanPayment,
    OperatingLoan,
    OperatingLoanTransaction,
)
from farm_kernel.services.base import BaseService

logger = get_logger("services.loan_ledger")


class LoanLedgerService(BaseService[OperatingLoan]):
    """
    Append-only loan ledger with balance maintenance.

    Contract:
        One call == one ledger row + one balance update, flushed together.

    Non-goals:
        - Does NOT compute interest; the allocation engine does.
        - Does NOT enforce credit limits on draws.
    """

    def record_loan_transaction(
        self,
        loan_id: str,
        transaction_type: LoanTransactionType | str,
        amount: Decimal,
        transaction_date: date,
        description: str | None = None,
        actor_id: str | None = None,
    ) -> TransactionRecord:
        """
        Record a draw on or payment to an operating loan.

        Returns:
            The stored transaction, including ``balance_after``.

        Raises:
            LoanNotFoundError, InvalidTransactionError, LedgerPersistenceError.
        """
        txn_type = self._parse_type(loan_id, transaction_type)
        amount = self._positive(loan_id, amount, "amount")

        logger.info(
            "loan_transaction_started",
            extra={"loan_id": str(loan_id), "type": txn_type.value, "amount": str(amount)},
        )

        try:
            loan = self._lock(OperatingLoan, loan_id)
            if loan is None:
                raise LoanNotFoundError(loan_id, "operating")

            if txn_type is LoanTransactionType.DRAW:
                new_balance = loan.current_balance + amount
            else:
                new_balance = max(ZERO, loan.current_balance - amount)

            row = OperatingLoanTransaction(
                operating_loan_id=loan.id,
                type=txn_type.value,
                amount=amount,
                balance_after=new_balance,
                transaction_date=transaction_date,
                description=description,
                created_by_id=actor_id,
            )
            self.session.add(row)
            loan.current_balance = new_balance
            self.session.flush()
        except SQLAlchemyError as exc:
            self._fail(loan_id, "operating_" + txn_type.value.lower(), exc)

        logger.info(
            "loan_transaction_completed",
            extra={
                "loan_id": str(loan_id),
                "type": txn_type.value,
                "balance_after": str(new_balance),
            },
        )
        return TransactionRecord(
            id=str(row.id),
            operating_loan_id=str(loan.id),
            type=txn_type,
            amount=amount,
            balance_after=new_balance,
            transaction_date=transaction_date,
            description=description,
        )

    def record_land_loan_payment(
        self,
        loan_id: str,
        payment_date: date,
        total_amount: Decimal,
        principal_amount: Decimal,
        interest_amount: Decimal,
        notes: str | None = None,
    ) -> LoanPayment:
        """Record a land-loan payment and reduce the remaining balance by principal."""
        return self._record_payment(
            LandLoan, LandLoanPayment, "land_loan_id", "land",
            loan_id, payment_date, total_amount, principal_amount, interest_amount, notes,
        )

    def record_equipment_loan_payment(
        self,
        loan_id: str,
        payment_date: date,
        total_amount: Decimal,
        principal_amount: Decimal,
        interest_amount: Decimal,
        notes: str | None = None,
    ) -> LoanPayment:
        """Record an equipment-loan payment and reduce the remaining balance by principal."""
        return self._record_payment(
            EquipmentLoan, EquipmentLoanPayment, "equipment_loan_id", "equipment",
            loan_id, payment_date, total_amount, principal_amount, interest_amount, notes,
        )

    # ------------------------------------------------------------------

    def _record_payment(
        self,
        loan_model: type,
        payment_model: type,
        fk_name: str,
        loan_kind: str,
        loan_id: str,
        payment_date: date,
        total_amount: Decimal,
        principal_amount: Decimal,
        interest_amount: Decimal,
        notes: str | None,
    ) -> LoanPayment:
        total = self._positive(loan_id, total_amount, "total_amount")
        principal = self._non_negative(loan_id, principal_amount, "principal_amount")
        interest = self._non_negative(loan_id, interest_amount, "interest_amount")
        if principal + interest > total:
            raise InvalidTransactionError(
                loan_id, f"principal {principal} + interest {interest} exceeds total {total}"
            )

        logger.info(
            "loan_payment_started",
            extra={"loan_id": str(loan_id), "loan_kind": loan_kind, "principal": str(principal)},
        )

        try:
            loan = self._lock(loan_model, loan_id)
            if loan is None:
                raise LoanNotFoundError(loan_id, loan_kind)

            remaining = max(ZERO, to_decimal(loan.remaining_balance) - principal)
            payment = payment_model(
                **{fk_name: loan.id},
                payment_date=payment_date,
                total_amount=total,
                principal_amount=principal,
                interest_amount=interest,
                notes=notes,
            )
            self.session.add(payment)
            loan.remaining_balance = remaining
            self.session.flush()
        except SQLAlchemyError as exc:
            self._fail(loan_id, f"{loan_kind}_payment", exc)

        logger.info(
            "loan_payment_completed",
            extra={"loan_id": str(loan_id), "loan_kind": loan_kind, "remaining_balance": str(remaining)},
        )
        return LoanPayment(
            id=str(payment.id),
            loan_id=str(loan.id),
            payment_date=payment_date,
            total_amount=total,
            principal_amount=principal,
            interest_amount=interest,
            remaining_balance_after=remaining,
            notes=notes,
        )

    def _lock(self, model: type, loan_id: str) -> Any:
        return self.session.execute(
            select(model)
            .where(model.id == loan_id, model.deleted_at.is_(None))
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _fail(self, loan_id: str, operation: str, exc: SQLAlchemyError) -> None:
        self.session.rollback()
        logger.error(
            "loan_ledger_write_failed",
            extra={"loan_id": str(loan_id), "operation": operation, "error": str(exc)},
        )
        raise LedgerPersistenceError(str(loan_id), operation, str(exc)) from exc

    @staticmethod
    def _parse_type(loan_id: str, value: LoanTransactionType | str) -> LoanTransactionType:
        try:
            return LoanTransactionType(value)
        except ValueError:
            raise InvalidTransactionError(loan_id, f"unknown transaction type {value!r}") from None

    @staticmethod
    def _positive(loan_id: str, value: Any, name: str) -> Decimal:
        amount = LoanLedgerService._amount(loan_id, value, name)
        if amount <= ZERO:
            raise InvalidTransactionError(loan_id, f"{name} must be positive, got {amount}")
        return amount

    @staticmethod
    def _non_negative(loan_id: str, value: Any, name: str) -> Decimal:
        amount = LoanLedgerService._amount(loan_id, value, name)
        if amount < ZERO:
            raise InvalidTransactionError(loan_id, f"{name} must not be negative, got {amount}")
        return amount

    @staticmethod
    def _amount(loan_id: str, value: Any, name: str) -> Decimal:
        try:
            return to_decimal(value)
        except ValueError:
            raise InvalidTransactionError(loan_id, f"{name} is not a number: {value!r}") from None
