"""Interest calculator — pure functions, no I/O.

Every caller (transaction enrichment, customer totals, dashboard totals,
payment validation) goes through these functions so the month/year
arithmetic exists exactly once.

Amounts are int paise; rates are percent per year (Decimal).
"""

import calendar
from datetime import datetime, timedelta
from decimal import Decimal

from src.kb_common.datetime_utils import ensure_utc, utc_now
from src.kb_common.enums import InterestTimeUnit
from src.kb_common.paise import round_to_paise

_DAYS_PER_YEAR = Decimal(365)
_SECONDS_PER_DAY = Decimal(86400)


def _to_years(time: Decimal, time_unit: str | None) -> Decimal:
    if time_unit == InterestTimeUnit.DAYS:
        return time / _DAYS_PER_YEAR
    if time_unit == InterestTimeUnit.YEARS:
        return time
    # months, and anything unrecognised
    return time / 12


def _interest(principal: int, rate_percent: Decimal, years: Decimal) -> int:
    if years <= 0:
        return 0
    value = Decimal(principal) * rate_percent * years / 100
    return max(round_to_paise(value), 0)


def simple_interest(
    principal: int,
    rate_percent: Decimal | int | None,
    time: Decimal | int | None,
    time_unit: str | None = InterestTimeUnit.MONTHS,
) -> int:
    """(principal x rate x years) / 100, rounded to whole paise.

    Used for live previews before a purchase is committed.
    Returns 0 when principal, rate or time is zero or missing.
    """
    if not principal or not rate_percent or not time:
        return 0
    years = _to_years(Decimal(str(time)), time_unit)
    return _interest(principal, Decimal(str(rate_percent)), years)


def completed_months(start: datetime, as_of: datetime) -> int:
    """Whole calendar months between two instants.

    A month only counts once the day-of-month of `start` has been reached.
    """
    months = (as_of.year - start.year) * 12 + (as_of.month - start.month)
    if as_of.day < start.day:
        months -= 1
    return months


def deferred_interest(
    principal: int,
    rate_percent: Decimal | int | None,
    start_date: datetime | None,
    time_unit: str | None = InterestTimeUnit.MONTHS,
    as_of: datetime | None = None,
) -> int:
    """Interest accrued only for the time elapsed after `start_date`.

    Zero until `as_of` passes the start date (the grace period), then grows
    simple-interest style:

      days   -> fractional days elapsed / 365
      months -> completed months / 12
      years  -> completed months / 12 (whole years plus completed extra months)
    """
    if not principal or not rate_percent or start_date is None:
        return 0

    start = ensure_utc(start_date)
    now = ensure_utc(as_of) if as_of is not None else utc_now()
    if now <= start:
        return 0

    unit = time_unit or InterestTimeUnit.MONTHS
    if unit == InterestTimeUnit.DAYS:
        elapsed_days = Decimal(str((now - start).total_seconds())) / _SECONDS_PER_DAY
        years = elapsed_days / _DAYS_PER_YEAR
    else:
        years = Decimal(completed_months(start, now)) / 12

    return _interest(principal, Decimal(str(rate_percent)), years)


def add_months(value: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the end of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def interest_start_date(
    now: datetime, duration: int, time_unit: str | None
) -> datetime:
    """now + duration in the given unit: the end of the interest-free period."""
    if time_unit == InterestTimeUnit.DAYS:
        return now + timedelta(days=duration)
    if time_unit == InterestTimeUnit.YEARS:
        return add_months(now, duration * 12)
    return add_months(now, duration)
