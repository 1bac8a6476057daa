"""Calendar arithmetic shared by the retirement engines.

All spans are computed as calendar component differences (whole years, then
whole months, then days) with dateutil's relativedelta, then converted to
quarters or years in closed form.
"""

from datetime import date
from dateutil.relativedelta import relativedelta


def last_day_of(year: int) -> date:
    """Return Dec 31 of the given year (date of a recorded situation)."""
    return date(year, 12, 31)


def add_years(start: date, years: int) -> date:
    """Return the anniversary of start after the given number of years (Feb 29 → Feb 28)."""
    return start + relativedelta(years=years)


def add_quarters(start: date, quarters: int) -> date:
    return start + relativedelta(months=3 * quarters)


def whole_years_between(start: date, end: date) -> int:
    """Number of full years from start to end (negative if end is before start)."""
    return relativedelta(end, start).years


def fractional_years_between(start: date, end: date):
    """Span from start to end in years, counting whole months as twelfths.

    Returns:
        Tuple (years, months) of the calendar difference. Days are ignored.
    """
    delta = relativedelta(end, start)
    return delta.years, delta.months


def quarters_rounded_down(start: date, end: date) -> int:
    """Whole quarters accrued between start and end, rounded down.

    Example:
        2019-12-31 → 2026-09-22 is 6 years 8 months 22 days → 24 + 2 = 26 quarters
    """
    if end < start:
        return -quarters_rounded_up(end, start)
    delta = relativedelta(end, start)
    return delta.years * 4 + delta.months // 3


def quarters_rounded_up(start: date, end: date) -> int:
    """Quarters missing between start and end, any started quarter counting as one.

    Only the month component is rounded; remaining days do not open a new quarter.

    Example:
        2020-01-15 → 2022-01-10 is 1 year 11 months 26 days → 4 + 4 = 8 quarters
    """
    if end < start:
        return -quarters_rounded_down(end, start)
    delta = relativedelta(end, start)
    quotient, remainder = divmod(delta.months, 3)
    return delta.years * 4 + quotient + (1 if remainder > 0 else 0)
