"""Percentages and month buckets shared by the report builders."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

ONE_PLACE = Decimal('0.1')


def _round1(value):
    return float(Decimal(value).quantize(ONE_PLACE, rounding=ROUND_HALF_UP))


def percentage_change(previous, current) -> float:
    """
    Percentage change from previous to current, rounded to 1 decimal.

    With no previous value the change is 100 when current is positive and
    0 otherwise, so it never divides by zero.
    """
    previous = Decimal(str(previous or 0))
    current = Decimal(str(current or 0))
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return _round1((current - previous) / previous * 100)


def compliance_rate(compliant, total) -> float:
    """Share of compliant traders as a percentage; 0 with no traders."""
    if not total:
        return 0.0
    return _round1(Decimal(compliant) / Decimal(total) * 100)


def month_buckets(start_date: date, end_date: date) -> list[date]:
    """First day of every month from start_date's month to end_date's month."""
    buckets = []
    current = start_date.replace(day=1)
    last = end_date.replace(day=1)
    while current <= last:
        buckets.append(current)
        if current.month == 12:
            current = current.replace(year=current.year + 1, month=1)
        else:
            current = current.replace(month=current.month + 1)
    return buckets


def month_label(bucket: date, with_year: bool = False) -> str:
    return bucket.strftime('%b %Y' if with_year else '%b')


def month_labels(buckets: list[date]) -> list[str]:
    """Short month names, with the year once the buckets cross a year end."""
    with_year = len({b.year for b in buckets}) > 1
    return [month_label(b, with_year) for b in buckets]
