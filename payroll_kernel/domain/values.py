"""
Values -- input parsing for ledger operations.

Responsibility:
    Turns loosely-typed request values (JSON numbers, numeric strings, form
    fields) into the exact types the services work with, rejecting anything
    that is not a usable amount or identifier.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Amounts are finite Decimals strictly greater than zero that fit the
      Numeric(38, 9) money columns: at most 9 fractional digits and fewer
      than 30 integer digits.  Anything else would be rounded to zero or
      overflow in storage.
    - Floats are converted through ``str()`` so 0.1 stays 0.1 rather than
      the binary expansion.
    - Employee ids are plain ASCII digit strings (or ints) within the
      BIGINT key range.

Failure modes:
    - ValidationError for missing, boolean, non-numeric, NaN, infinite, zero,
      negative, over-precise or out-of-range amounts.
    - EmployeeNotFoundError for an employee id that cannot name a row
      (no such employee can exist).
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from payroll_kernel.exceptions import EmployeeNotFoundError, ValidationError

# Numeric(38, 9): 9 fractional digits, 29 integer digits
AMOUNT_SCALE = 9
AMOUNT_LIMIT = Decimal("1e29")

# BIGINT primary key
MAX_EMPLOYEE_ID = 2**63 - 1


def _fraction_digits(amount: Decimal) -> int:
    """Fractional digits needed to represent ``amount`` exactly."""
    _, digits, exponent = amount.as_tuple()
    trailing_zeros = len(digits) - len("".join(map(str, digits)).rstrip("0"))
    return max(0, -(exponent + trailing_zeros))


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Parse a monetary amount.

    Args:
        value: Decimal, int, float or numeric string.
        field: Field name used in the error.

    Returns:
        The amount as a finite, positive Decimal that the ledger can store
        without rounding.

    Raises:
        ValidationError: If the value is not a finite number > 0 within the
            storable range.
    """
    if value is None:
        raise ValidationError(field, "is required")
    # bool is an int subclass; true/false is never an amount
    if isinstance(value, bool):
        raise ValidationError(field, "must be a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(field, f"not a number: {value!r}") from None
    else:
        raise ValidationError(field, f"unsupported type {type(value).__name__}")

    if not amount.is_finite():
        raise ValidationError(field, "must be finite")
    if amount <= 0:
        raise ValidationError(field, "must be greater than zero")
    if amount >= AMOUNT_LIMIT:
        raise ValidationError(field, f"must be less than {AMOUNT_LIMIT:E}")
    if _fraction_digits(amount) > AMOUNT_SCALE:
        raise ValidationError(
            field, f"at most {AMOUNT_SCALE} decimal places are supported"
        )
    return amount


def parse_employee_id(value: Any) -> int:
    """
    Parse an employee identifier from a form or query value.

    A value that cannot be an integer id cannot name an existing employee,
    so it is reported as not found rather than as a malformed request.
    Only ASCII digits are accepted; ``int()`` would also take underscores,
    signs and other scripts' digits.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        employee_id = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdecimal():
        employee_id = int(value.strip())
    else:
        raise EmployeeNotFoundError(str(value))

    if not 0 < employee_id <= MAX_EMPLOYEE_ID:
        raise EmployeeNotFoundError(str(value))
    return employee_id
