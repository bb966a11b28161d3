"""
Typed Exception Hierarchy for the Payroll Kernel.

Every error has a typed class, a machine-readable ``code`` class attribute,
and structured attributes instead of a message to be parsed.  The API layer
maps these 1:1 onto HTTP responses; nothing here knows about HTTP.

    PayrollKernelError (base)
    |
    +-- ValidationError
    |
    +-- NotFoundError
    |   +-- EmployeeNotFoundError
    |   +-- CompanyNotFoundError
    |
    +-- UnauthorizedError
    |
    +-- AlreadyWithdrawnError
    |
    +-- StorageError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

Category        | Code                    | When Raised
----------------|-------------------------|-----------------------------------------
Validation      | VALIDATION_ERROR        | Amount missing, malformed or not > 0
Not found       | EMPLOYEE_NOT_FOUND      | Employee id does not exist
                | COMPANY_NOT_FOUND       | Company balance row was never created
Auth            | UNAUTHORIZED            | Secret credential mismatch
Eligibility     | ALREADY_WITHDRAWN       | Salary already withdrawn this month
Storage         | STORAGE_ERROR           | Datastore statement or commit failed
Immutability    | IMMUTABILITY_VIOLATION  | Update/delete of a ledger record
"""

from datetime import datetime


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a ``code`` class attribute.  ``public_message``
    is the text that may be shown to API clients; ``str(exc)`` may carry
    internal detail and is meant for logs only.
    """

    code: str = "PAYROLL_KERNEL_ERROR"

    @property
    def public_message(self) -> str:
        return str(self)


class ValidationError(PayrollKernelError):
    """Input is missing, malformed, or violates a basic constraint."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")

    @property
    def public_message(self) -> str:
        return "Invalid request"


class NotFoundError(PayrollKernelError):
    """Base exception for a referenced entity that does not exist."""

    code: str = "NOT_FOUND"


class EmployeeNotFoundError(NotFoundError):
    """Employee with the given id was not found."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")

    @property
    def public_message(self) -> str:
        return "Employee not found"


class CompanyNotFoundError(NotFoundError):
    """The singleton company balance row is missing."""

    code: str = "COMPANY_NOT_FOUND"

    def __init__(self, company_id: int):
        self.company_id = company_id
        super().__init__(
            f"Company balance row {company_id} does not exist; run init-db first"
        )

    @property
    def public_message(self) -> str:
        return "Company account not initialized"


class UnauthorizedError(PayrollKernelError):
    """Supplied secret credential does not match the employee's."""

    code: str = "UNAUTHORIZED"

    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(f"Credential mismatch for employee {employee_id}")

    @property
    def public_message(self) -> str:
        return "Unauthorized"


class AlreadyWithdrawnError(PayrollKernelError):
    """Employee already withdrew a salary in the current calendar month."""

    code: str = "ALREADY_WITHDRAWN"

    def __init__(self, employee_id: int, last_withdrawal: datetime):
        self.employee_id = employee_id
        self.last_withdrawal = last_withdrawal
        super().__init__(
            f"Employee {employee_id} already withdrew salary on "
            f"{last_withdrawal.isoformat()}"
        )

    @property
    def public_message(self) -> str:
        return "Salary already withdrawn this month"


class StorageError(PayrollKernelError):
    """
    A datastore operation failed and the transaction was rolled back.

    ``operation`` is a short verb phrase ("top up balance") used to build
    the client-facing message; ``detail`` is the underlying driver error.
    """

    code: str = "STORAGE_ERROR"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Failed to {operation}: {detail}")

    @property
    def public_message(self) -> str:
        return f"Failed to {self.operation}"


# Immutability-related exceptions


class ImmutabilityError(PayrollKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Top-up and deduction records are append-only once written.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )

    @property
    def public_message(self) -> str:
        return "Ledger record is immutable"
