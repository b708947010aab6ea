"""Recurrence periods and next-occurrence date arithmetic."""
from datetime import date, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

from .errors import InvalidRecurrencePeriod
from .extract import parse_canonical_date


class RecurrencePeriod(str, Enum):
    DAILY = 'daily'
    WEEKLY = 'weekly'
    BIWEEKLY = 'biweekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'


_DAY_STEPS = {
    RecurrencePeriod.DAILY: relativedelta(days=1),
    RecurrencePeriod.WEEKLY: relativedelta(weeks=1),
    RecurrencePeriod.BIWEEKLY: relativedelta(weeks=2),
}
_MONTH_STEPS = {
    RecurrencePeriod.MONTHLY: 1,
    RecurrencePeriod.YEARLY: 12,
}


def parse_period(value) -> RecurrencePeriod:
    """Coerce a stored repeat value to a RecurrencePeriod."""
    if isinstance(value, RecurrencePeriod):
        return value
    try:
        return RecurrencePeriod(value)
    except ValueError as e:
        raise InvalidRecurrencePeriod(f'invalid recurrence period: {value!r}') from e


def add_months_overflow(d: date, months: int) -> date:
    """Add calendar months keeping the day number; excess days spill over.

    Jan 31 + 1 month is Mar 2 in a leap year (Feb has 29 days, the two
    extra days roll into March) rather than being clamped to Feb 29.
    """
    first = d.replace(day=1) + relativedelta(months=months)
    return first + timedelta(days=d.day - 1)


def advance_date(value, period) -> str:
    """Return the next occurrence after ``value`` for ``period``.

    ``value`` is a YYYY-MM-DD string or a date; the result is always a
    YYYY-MM-DD string.

    >>> advance_date('2024-01-31', 'monthly')
    '2024-03-02'
    >>> advance_date('2024-02-29', 'yearly')
    '2025-03-01'
    """
    p = parse_period(period)
    d = value if isinstance(value, date) else parse_canonical_date(value)
    if p in _DAY_STEPS:
        nxt = d + _DAY_STEPS[p]
    else:
        nxt = add_months_overflow(d, _MONTH_STEPS[p])
    return nxt.isoformat()
