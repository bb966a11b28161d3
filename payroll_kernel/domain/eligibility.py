"""
Eligibility -- the monthly salary withdrawal window.

An employee may withdraw one salary per calendar month.  The window is
identified by (year, month); comparing the month alone would treat a
withdrawal made exactly twelve months earlier as "this month" and block the
employee for the whole month.
"""

from datetime import datetime, timezone


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def same_calendar_month(a: datetime, b: datetime) -> bool:
    """True if both instants fall in the same UTC calendar year and month."""
    a, b = _as_utc(a), _as_utc(b)
    return (a.year, a.month) == (b.year, b.month)


def has_withdrawn_this_month(
    withdrawn: bool, last_withdrawal: datetime | None, now: datetime
) -> bool:
    """
    Decide whether a withdrawal has already been taken in ``now``'s month.

    ``withdrawn`` is never reset by the system, so it only counts when the
    last withdrawal also lies in the current window.
    """
    if not withdrawn or last_withdrawal is None:
        return False
    return same_calendar_month(last_withdrawal, now)
