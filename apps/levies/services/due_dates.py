"""Due date rules for levy frequencies."""

from datetime import datetime, timedelta
from typing import Optional

from apps.levies.choices import PaymentFrequency

_DAY_BASED = {
    PaymentFrequency.DAILY: 1,
    PaymentFrequency.WEEKLY: 7,
    PaymentFrequency.BI_WEEKLY: 14,
}

# Month-based frequencies fall due on the first day of a later month
_MONTH_BASED = {
    PaymentFrequency.MONTHLY: 1,
    PaymentFrequency.QUARTERLY: 3,
    PaymentFrequency.HALF_YEARLY: 6,
    PaymentFrequency.YEARLY: 12,
}


def first_day_of_month_after(value: datetime, months: int) -> datetime:
    """First day of the month ``months`` months after ``value``'s month, same time of day."""
    index = value.month - 1 + months
    return value.replace(year=value.year + index // 12, month=index % 12 + 1, day=1)


def compute_due_date(frequency: str, from_dt: datetime) -> datetime:
    """
    When the next levy falls due after a payment made at ``from_dt``.

    Daily, weekly and bi-weekly add 1, 7 and 14 days. Monthly, quarterly,
    half-yearly and yearly move to the first day of the month 1, 3, 6 and
    12 months ahead.

    Raises:
        ValueError: If frequency is not a PaymentFrequency value
    """
    frequency = PaymentFrequency(frequency)
    if frequency in _DAY_BASED:
        return from_dt + timedelta(days=_DAY_BASED[frequency])
    return first_day_of_month_after(from_dt, _MONTH_BASED[frequency])


def is_payment_due(
    *,
    last_payment_date: Optional[datetime],
    frequency: str,
    now: datetime
) -> bool:
    """True when there is no previous payment or its due date has been reached."""
    if last_payment_date is None:
        return True
    return now >= compute_due_date(frequency, last_payment_date)
