"""
Pytest fixtures for the payroll ledger test suite.

Provides:
- A fresh ledger database per test (company row at 1000.00)
- A deterministic clock and a PayrollService wired to both
- Factories for positions and employees
- Log capture as parsed JSON records

Environment Variables:
- DATABASE_URL: PostgreSQL connection URL.  If not set, each test gets its
  own SQLite file under pytest's tmp_path.
"""

import json
import logging
import os
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from payroll_kernel.db.engine import LedgerDatabase
from payroll_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_kernel.models.employee import Employee, Position
from payroll_kernel.selectors.ledger_selector import LedgerSelector
from payroll_kernel.services.payroll_service import PayrollService

OPENING_BALANCE = Decimal("1000.00")

# Mid-month so advancing a few days never crosses a month boundary
TEST_NOW = datetime(2024, 3, 15, 9, 30, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, payroll_service):
            payroll_service.top_up("10")
            logs = captured_logs()
            assert any(r["message"] == "top_up_applied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _immutability_listeners():
    register_immutability_listeners()
    yield
    unregister_immutability_listeners()


def get_database_url(tmp_path) -> str:
    """DATABASE_URL if set, otherwise a throwaway SQLite file."""
    return os.environ.get("DATABASE_URL") or f"sqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture
def database(tmp_path):
    """A clean ledger database with the company row at OPENING_BALANCE."""
    db = LedgerDatabase.from_url(get_database_url(tmp_path), pool_size=20)
    db.drop_tables()
    db.create_tables(opening_balance=OPENING_BALANCE)
    yield db
    db.drop_tables()
    db.dispose()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(TEST_NOW)


@pytest.fixture
def payroll_service(database, clock) -> PayrollService:
    return PayrollService(database, clock)


@pytest.fixture
def session(database):
    """A plain session for assertions.  Never committed."""
    sess = database.new_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def read_balance(database):
    """Read the committed company balance in a fresh session."""

    def _read() -> Decimal:
        with database.session_scope("read balance") as s:
            return LedgerSelector(s).get_balance()

    return _read


@pytest.fixture
def ledger_counts(database):
    """Return (top_up count, deduction count) as committed."""

    def _counts() -> tuple[int, int]:
        with database.session_scope("count ledger") as s:
            selector = LedgerSelector(s)
            return len(selector.list_top_ups()), len(selector.list_deductions())

    return _counts


@pytest.fixture
def make_position(database):
    def _make(name: str = "Engineer", salary: Decimal = Decimal("300.00")) -> int:
        with database.session_scope("create position") as s:
            position = Position(name=name, salary=salary)
            s.add(position)
            s.flush()
            return position.id

    return _make


@pytest.fixture
def make_employee(database, make_position):
    """
    Create an employee (and a position for them) and return the employee id.
    """

    def _make(
        name: str = "Ayu Lestari",
        secret_id: str = "s3cret",
        salary: Decimal = Decimal("300.00"),
        withdrawn: bool = False,
        last_month: datetime | None = None,
        position_id: int | None = None,
    ) -> int:
        if position_id is None:
            position_id = make_position(salary=salary)
        with database.session_scope("create employee") as s:
            employee = Employee(
                name=name,
                secret_id=secret_id,
                position_id=position_id,
                withdrawn=withdrawn,
                last_month=last_month,
            )
            s.add(employee)
            s.flush()
            return employee.id

    return _make


def as_utc(moment: datetime) -> datetime:
    """SQLite returns naive UTC datetimes; PostgreSQL returns aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
