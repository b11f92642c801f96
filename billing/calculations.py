"""
Lease pricing utilities for OH Plus quotations.
Handles calendar-accurate proration of monthly rates, VAT totals and the
duration labels printed on quotation documents.
"""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterator, List, Optional, Sequence

import pandas as pd
from dateutil.relativedelta import relativedelta

from .dates import calendar_day, normalize

# Fixed business constants (Philippine VAT)
VAT_RATE = 0.12
GRAND_TOTAL_MULTIPLIER = 1.12
# Display-only month length used by format_duration and quotation creation
DISPLAY_MONTH_DAYS = 30

BREAKDOWN_COLUMNS = [
    'year', 'month', 'days_in_month', 'start_day', 'end_day',
    'days_counted', 'daily_rate', 'amount',
]


def _f(v) -> float:
    try:
        return float(v or 0)
    except Exception:
        return 0.0


def days_in_month(year: int, month: int) -> int:
    """Days in a 1-based calendar month; leap Februaries have 29."""
    return calendar.monthrange(year, month)[1]


def _is_inverted(start: date, end: date) -> bool:
    # Full instant comparison when both sides are comparable datetimes,
    # otherwise fall back to calendar days.
    if isinstance(start, datetime) and isinstance(end, datetime):
        if (start.tzinfo is None) == (end.tzinfo is None):
            return end < start
    return calendar_day(end) < calendar_day(start)


def iter_month_segments(monthly_rate: float, start: date, end: date) -> Iterator[Dict[str, Any]]:
    """Yield one dict per calendar month touched by [start, end].

    Nothing is yielded for an inverted range.
    """
    if _is_inverted(start, end):
        return
    first = calendar_day(start)
    last = calendar_day(end)
    cursor = first
    while cursor <= last:
        year, month = cursor.year, cursor.month
        dim = days_in_month(year, month)
        daily_rate = monthly_rate / dim
        start_day = cursor.day if (year, month) == (first.year, first.month) else 1
        end_day = last.day if (year, month) == (last.year, last.month) else dim
        counted = end_day - start_day + 1
        yield {
            'year': year,
            'month': month,
            'days_in_month': dim,
            'start_day': start_day,
            'end_day': end_day,
            'days_counted': counted,
            'daily_rate': daily_rate,
            'amount': daily_rate * counted,
        }
        cursor = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)


def prorated_price(monthly_rate: float, start: date, end: date) -> float:
    """Bill a monthly rate over [start, end], month by month.

    Each touched month contributes (rate / days in that month) per covered
    day. Inverted ranges bill 0. No rounding is applied.
    """
    total = 0.0
    for seg in iter_month_segments(monthly_rate, start, end):
        total += seg['daily_rate'] * seg['days_counted']
    return total


def prorated_breakdown(monthly_rate: float, start: date, end: date) -> pd.DataFrame:
    """Per-month proration table (empty with the same columns when inverted)."""
    rows = list(iter_month_segments(monthly_rate, start, end))
    return pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)


def format_duration(days: int) -> str:
    """Human label for a day count using fixed 30-day months."""
    if isinstance(days, float) and days.is_integer():
        days = int(days)
    if days <= 0:
        return "0 days"
    months = int(days // DISPLAY_MONTH_DAYS)
    remaining = days % DISPLAY_MONTH_DAYS

    def _plural(n, unit):
        return f"{n} {unit}{'s' if n != 1 else ''}"

    if months == 0:
        return _plural(days, 'day')
    if remaining == 0:
        return _plural(months, 'month')
    return f"{_plural(months, 'month')} and {_plural(remaining, 'day')}"


def format_calendar_duration(days: int, start: Any = None, end: Any = None) -> str:
    """Duration label for cost estimates, measured in calendar months.

    With both dates resolvable the label is "N years and M months and D days"
    (zero parts omitted). Whole months are stepped from the start date and
    clamped to the month end (Jan 31 + 1 month is Feb 29 in a leap year); the
    remainder up to the end date is counted in days. Without
    dates it falls back to the 30-day ``format_duration`` label, except that
    a non-positive day count reads "1 month".
    """
    s, e = normalize(start), normalize(end)
    if s is not None and e is not None:
        first, last = calendar_day(s), calendar_day(e)
        if last <= first:
            return "0 days"
        delta = relativedelta(last, first)
        parts = []
        for n, unit in ((delta.years, 'year'), (delta.months, 'month'), (delta.days, 'day')):
            if n > 0:
                parts.append(f"{n} {unit}{'s' if n != 1 else ''}")
        return " and ".join(parts)
    days = _f(days)
    if days <= 0:
        return "1 month"
    return format_duration(days)


def compute_lease_totals(monthly_rate: float, start: date, end: date) -> Dict[str, float]:
    total_lease = prorated_price(monthly_rate, start, end)
    return {
        'total_lease': total_lease,
        'vat': total_lease * VAT_RATE,
        'grand_total': total_lease * GRAND_TOTAL_MULTIPLIER,
    }


def duration_days_between(start: Any, end: Any) -> int:
    """Whole days from start to end, rounded up, never below 1."""
    s, e = normalize(start), normalize(end)
    if s is None or e is None:
        return 1
    if not isinstance(s, datetime):
        s = datetime(s.year, s.month, s.day)
    if not isinstance(e, datetime):
        e = datetime(e.year, e.month, e.day)
    if (s.tzinfo is None) != (e.tzinfo is None):
        s, e = s.replace(tzinfo=None), e.replace(tzinfo=None)
    days = math.ceil((e - s) / timedelta(days=1))
    return max(1, days)


def calculate_quotation_total(start: Any, end: Any, items: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Quotation-creation total: each item billed price/30 per contract day.

    Returns the shared duration, the summed total and copies of the items
    annotated with ``item_total_amount`` and ``duration_days``.
    """
    duration = duration_days_between(start, end)
    priced: List[Dict[str, Any]] = []
    total_amount = 0.0
    for item in items or []:
        daily_rate = _f(item.get('price')) / DISPLAY_MONTH_DAYS
        item_total = daily_rate * duration
        row = dict(item)
        row['item_total_amount'] = item_total
        row['duration_days'] = duration
        priced.append(row)
        total_amount += item_total
    return {
        'duration_days': duration,
        'total_amount': total_amount,
        'items': priced,
    }


def format_amount(value: Optional[float], currency: str = 'PHP') -> str:
    """Presentation rounding for money values: 'PHP 1,234.56'."""
    return f"{currency} {_f(value):,.2f}"
