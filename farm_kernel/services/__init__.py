"""Kernel write services."""

from farm_kernel.services.base import BaseService
from farm_kernel.services.loan_ledger_service import LoanLedgerService

__all__ = ["BaseService", "LoanLedgerService"]
