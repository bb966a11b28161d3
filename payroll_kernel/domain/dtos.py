"""
DTOs -- immutable data returned by services and selectors.

Services and selectors return these instead of ORM entities so nothing
outside the kernel can lazily load or mutate persistent state.  No DTO
carries an employee's secret credential.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from payroll_kernel.models.employee import Employee as EmployeeModel


class LedgerOperation(str, Enum):
    """Balance-affecting operations."""

    TOP_UP = "top_up"
    DEDUCT = "deduct"
    WITHDRAW = "withdraw"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a successful ledger operation."""

    operation: LedgerOperation
    message: str
    amount: Decimal
    balance: Decimal
    record_id: int | None = None
    employee_id: int | None = None
    success: bool = True


@dataclass(frozen=True)
class LedgerEntryInfo:
    """A top-up or deduction record."""

    id: int
    operation: LedgerOperation
    amount: Decimal
    transaction_at: datetime


@dataclass(frozen=True)
class EmployeeInfo:
    """Employee with the salary of their position."""

    id: int
    name: str
    position_id: int
    position_name: str
    salary: Decimal
    withdrawn: bool
    last_month: datetime | None

    @classmethod
    def from_model(cls, employee: "EmployeeModel") -> "EmployeeInfo":
        """Boundary converter; only called from services and selectors."""
        return cls(
            id=employee.id,
            name=employee.name,
            position_id=employee.position.id,
            position_name=employee.position.name,
            salary=employee.position.salary,
            withdrawn=employee.withdrawn,
            last_month=employee.last_month,
        )

