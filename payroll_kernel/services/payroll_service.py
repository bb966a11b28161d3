"""
Payroll Service - Coordinates every balance-affecting operation.

The PayrollService ties together:
- Value parsing (domain/values.py)
- Ledger writes and balance changes (LedgerService)
- Employee lookup, locking and state change (EmployeeService)
- Monthly eligibility (domain/eligibility.py)

Manages its own transaction boundary: each public operation opens exactly
one ``LedgerDatabase.session_scope()``, so the ledger entry (or the
withdrawal flag) and the balance change are committed together or rolled
back together.  Validation happens before the scope opens and performs no
I/O.

Failure modes:
    - ValidationError: malformed or non-positive amount.
    - EmployeeNotFoundError: unknown or non-integer employee id.
    - UnauthorizedError: secret credential mismatch.
    - AlreadyWithdrawnError: salary already taken in the current month.
    - StorageError: any datastore failure; nothing from the operation persists.
"""

import hmac
import time
from decimal import Decimal
from typing import Any

from payroll_kernel.db.engine import LedgerDatabase
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import (
    EmployeeInfo,
    LedgerOperation,
    OperationResult,
)
from payroll_kernel.domain.eligibility import has_withdrawn_this_month
from payroll_kernel.domain.values import parse_amount, parse_employee_id
from payroll_kernel.exceptions import AlreadyWithdrawnError, UnauthorizedError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.selectors.employee_selector import EmployeeSelector
from payroll_kernel.selectors.ledger_selector import LedgerSelector
from payroll_kernel.services.employee_service import EmployeeService
from payroll_kernel.services.ledger_service import LedgerService

logger = get_logger("services.payroll")

TOP_UP_MESSAGE = "Balance topped up successfully"
DEDUCT_MESSAGE = "Balance deducted successfully"
WITHDRAW_MESSAGE = "Salary withdrawn successfully"


def _secrets_match(supplied: str | None, stored: str) -> bool:
    if supplied is None:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))


class PayrollService:
    """
    Top-ups, deductions and salary withdrawals against the company balance.

    Contract:
        Constructed with an explicit LedgerDatabase; holds no connection of
        its own.  Safe to share between threads: every call checks out its
        own session for the duration of one transaction.
    """

    def __init__(self, database: LedgerDatabase, clock: Clock | None = None):
        self._database = database
        self._clock = clock or SystemClock()

    @property
    def database(self) -> LedgerDatabase:
        return self._database

    # ------------------------------------------------------------------
    # Company balance
    # ------------------------------------------------------------------

    def top_up(self, amount: Any) -> OperationResult:
        """
        Credit the company balance and record a top-up entry.

        Raises:
            ValidationError: amount is not a finite number > 0.
            StorageError: the insert, the update or the commit failed.
        """
        value = parse_amount(amount)
        start = time.monotonic()
        with LogContext.bind(operation=LedgerOperation.TOP_UP.value):
            with self._database.session_scope("top up balance") as session:
                ledger = LedgerService(session)
                record = ledger.record_top_up(value, self._clock.now())
                balance = ledger.apply_balance_delta(value)

            logger.info(
                "top_up_applied",
                extra={
                    "record_id": record.id,
                    "amount": value,
                    "balance": balance,
                    "duration_ms": round((time.monotonic() - start) * 1000, 2),
                },
            )
        return OperationResult(
            operation=LedgerOperation.TOP_UP,
            message=TOP_UP_MESSAGE,
            amount=value,
            balance=balance,
            record_id=record.id,
        )

    def deduct(self, amount: Any) -> OperationResult:
        """
        Debit the company balance and record a deduction entry.

        The resulting balance may go negative; no floor is enforced.

        Raises:
            ValidationError: amount is not a finite number > 0.
            StorageError: the insert, the update or the commit failed.
        """
        value = parse_amount(amount)
        start = time.monotonic()
        with LogContext.bind(operation=LedgerOperation.DEDUCT.value):
            with self._database.session_scope("deduct balance") as session:
                ledger = LedgerService(session)
                record = ledger.record_deduction(value, self._clock.now())
                balance = ledger.apply_balance_delta(-value)

            logger.info(
                "deduction_applied",
                extra={
                    "record_id": record.id,
                    "amount": value,
                    "balance": balance,
                    "duration_ms": round((time.monotonic() - start) * 1000, 2),
                },
            )
        return OperationResult(
            operation=LedgerOperation.DEDUCT,
            message=DEDUCT_MESSAGE,
            amount=value,
            balance=balance,
            record_id=record.id,
        )

    # ------------------------------------------------------------------
    # Salary withdrawal
    # ------------------------------------------------------------------

    def withdraw(self, employee_id: Any, secret_id: str | None) -> OperationResult:
        """
        Pay an employee's monthly salary out of the company balance.

        Lookup, credential check, eligibility check and both writes run in a
        single transaction with the employee row locked, so a concurrent
        second withdrawal waits and then fails the eligibility check.

        Raises:
            EmployeeNotFoundError: no such employee.
            UnauthorizedError: ``secret_id`` does not match.
            AlreadyWithdrawnError: already withdrawn this calendar month.
            StorageError: any write or the commit failed.
        """
        emp_id = parse_employee_id(employee_id)
        with LogContext.bind(
            operation=LedgerOperation.WITHDRAW.value, employee_id=str(emp_id)
        ):
            with self._database.session_scope("withdraw salary") as session:
                employees = EmployeeService(session)
                employee = employees.lock_for_withdrawal(emp_id)

                if not _secrets_match(secret_id, employee.secret_id):
                    logger.warning("withdrawal_unauthorized")
                    raise UnauthorizedError(emp_id)

                now = self._clock.now()
                if has_withdrawn_this_month(
                    employee.withdrawn, employee.last_month, now
                ):
                    logger.info(
                        "withdrawal_rejected_already_withdrawn",
                        extra={"last_month": employee.last_month},
                    )
                    raise AlreadyWithdrawnError(emp_id, employee.last_month)

                salary = employee.position.salary
                balance = LedgerService(session).apply_balance_delta(-salary)
                employees.mark_withdrawn(employee, now)

            logger.info(
                "salary_withdrawn",
                extra={"salary": salary, "balance": balance},
            )
        return OperationResult(
            operation=LedgerOperation.WITHDRAW,
            message=WITHDRAW_MESSAGE,
            amount=salary,
            balance=balance,
            employee_id=emp_id,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_balance(self) -> Decimal:
        """Current company balance."""
        with self._database.session_scope("read balance") as session:
            return LedgerSelector(session).get_balance()

    def get_employee(self, employee_id: Any) -> EmployeeInfo:
        """Employee and position details, without the secret credential."""
        emp_id = parse_employee_id(employee_id)
        with self._database.session_scope("read employee") as session:
            return EmployeeSelector(session).get(emp_id)
