"""
Typed Exception Hierarchy for the Farm Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from FarmKernelError:

    FarmKernelError (base)
    |
    +-- NotFoundError
    |   +-- FarmNotFoundError
    |   +-- LoanNotFoundError
    |
    +-- InvalidInputError
    |   +-- InvalidScenarioRangeError
    |   +-- InvalidTransactionError
    |
    +-- PersistenceError
        +-- LedgerPersistenceError

Missing optional data (loans, insurance policy, contract allocations) is
NOT an error anywhere in the kernel or engines -- it contributes zero.

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                     | When Raised
-------------|--------------------------|--------------------------------------------
NotFound     | FARM_NOT_FOUND           | Farm missing, soft-deleted or not in business
             | LOAN_NOT_FOUND           | Loan id passed to a ledger write doesn't exist
-------------|--------------------------|--------------------------------------------
InvalidInput | INVALID_SCENARIO_RANGE   | steps < 2, or min > max on a scenario axis
             | INVALID_TRANSACTION      | Non-positive ledger amount, unknown type
-------------|--------------------------|--------------------------------------------
Persistence  | LEDGER_PERSISTENCE_FAILED| Ledger insert/balance update rolled back

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        response = service.get_profit_matrix(farm_id, business_id, overrides)
    except FarmNotFoundError as e:
        return {"error": e.code, "farm_id": e.farm_id}
    except InvalidScenarioRangeError as e:
        return {"error": e.code, "axis": e.axis, "reason": e.reason}

Codes are class attributes so callers can map them without instantiation.
"""


class FarmKernelError(Exception):
    """
    Base exception for all farm kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "FARM_KERNEL_ERROR"


# NotFound


class NotFoundError(FarmKernelError):
    """Base exception for absent required records."""

    code: str = "NOT_FOUND"


class FarmNotFoundError(NotFoundError):
    """Farm is missing, soft-deleted, or belongs to another business."""

    code: str = "FARM_NOT_FOUND"

    def __init__(self, farm_id: str, business_id: str | None = None):
        self.farm_id = str(farm_id)
        self.business_id = str(business_id) if business_id is not None else None
        super().__init__("Farm not found or access denied")


class LoanNotFoundError(NotFoundError):
    """Loan targeted by a ledger write does not exist."""

    code: str = "LOAN_NOT_FOUND"

    def __init__(self, loan_id: str, loan_kind: str = "operating"):
        self.loan_id = str(loan_id)
        self.loan_kind = loan_kind
        super().__init__(f"Loan not found: {loan_id} ({loan_kind})")


# InvalidInput


class InvalidInputError(FarmKernelError):
    """Base exception for caller-supplied values the engines cannot use."""

    code: str = "INVALID_INPUT"


class InvalidScenarioRangeError(InvalidInputError):
    """A scenario axis override cannot produce an evenly spaced axis."""

    code: str = "INVALID_SCENARIO_RANGE"

    def __init__(self, axis: str, reason: str):
        self.axis = axis
        self.reason = reason
        super().__init__(f"Invalid {axis} scenario range: {reason}")


class InvalidTransactionError(InvalidInputError):
    """A ledger write was requested with an unusable amount or type."""

    code: str = "INVALID_TRANSACTION"

    def __init__(self, loan_id: str, reason: str):
        self.loan_id = str(loan_id)
        self.reason = reason
        super().__init__(f"Invalid transaction for loan {loan_id}: {reason}")


# Persistence


class PersistenceError(FarmKernelError):
    """Base exception for failed writes."""

    code: str = "PERSISTENCE_ERROR"


class LedgerPersistenceError(PersistenceError):
    """
    Ledger insert and balance update failed and were rolled back together.

    Neither the transaction row nor the balance change is visible after
    this error is raised.
    """

    code: str = "LEDGER_PERSISTENCE_FAILED"

    def __init__(self, loan_id: str, operation: str, cause: str):
        self.loan_id = str(loan_id)
        self.operation = operation
        self.cause = cause
        super().__init__(
            f"Ledger {operation} for loan {loan_id} was not applied: {cause}"
        )
