"""
Report date ranges.

Turns a time frame, a preset or a calendar year into a concrete inclusive
[start_date, end_date] window. Weeks start on Sunday; month and year
windows start on day 1 and end today.
"""

import calendar
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import Optional

from django.db import models
from django.utils import timezone

from .exceptions import InvalidDateRangeError, InvalidTimeFrameError


class TimeFrame(models.TextChoices):
    TODAY = 'today', 'Today'
    THIS_WEEK = 'this_week', 'This week'
    THIS_MONTH = 'this_month', 'This month'
    THIS_YEAR = 'this_year', 'This year'
    LAST_SIX_MONTHS = 'last_six_months', 'Last 6 months'
    CUSTOM = 'custom', 'Custom'


class DateRangePreset(models.TextChoices):
    TODAY = 'today', 'Today'
    YESTERDAY = 'yesterday', 'Yesterday'
    LAST_7_DAYS = 'last_7_days', 'Last 7 Days'
    THIS_MONTH = 'this_month', 'This Month'
    LAST_MONTH = 'last_month', 'Last Month'
    THIS_YEAR = 'this_year', 'This Year'
    LAST_SIX_MONTHS = 'last_six_months', 'Last 6 Months'
    CUSTOM = 'custom', 'Custom'


@dataclass(frozen=True)
class DateRange:
    start_date: date
    end_date: date
    is_preset: bool = True
    preset_label: str = ''
    range_granularity: str = ''

    @property
    def is_valid(self):
        return self.start_date <= self.end_date

    @property
    def day_count(self):
        return (self.end_date - self.start_date).days + 1

    def as_dict(self):
        data = asdict(self)
        data['day_count'] = self.day_count
        return data


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def shift_months(day: date, months: int) -> date:
    """Move ``day`` by whole months, clamping to the end of short months."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _today(today):
    return today or timezone.localdate()


def date_range_for_preset(preset, today: Optional[date] = None) -> DateRange:
    """
    Resolve a DateRangePreset against ``today``.

    Raises:
        InvalidTimeFrameError: If preset is not a DateRangePreset value
    """
    today = _today(today)

    if preset == DateRangePreset.TODAY:
        return DateRange(today, today, True, 'Today', 'Daily')

    if preset == DateRangePreset.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return DateRange(yesterday, yesterday, True, 'Yesterday', 'Daily')

    if preset == DateRangePreset.LAST_7_DAYS:
        return DateRange(today - timedelta(days=7), today, True, 'Last 7 Days', 'Weekly')

    if preset == DateRangePreset.THIS_MONTH:
        return DateRange(today.replace(day=1), today, True, 'This Month', 'Monthly')

    if preset == DateRangePreset.LAST_MONTH:
        last_month_end = today.replace(day=1) - timedelta(days=1)
        return DateRange(
            last_month_end.replace(day=1), last_month_end, True, 'Last Month', 'Monthly'
        )

    if preset == DateRangePreset.THIS_YEAR:
        return DateRange(date(today.year, 1, 1), today, True, 'This Year', 'Yearly')

    if preset == DateRangePreset.LAST_SIX_MONTHS:
        return DateRange(shift_months(today, -6), today, True, 'Last 6 Months', 'SemiAnnual')

    if preset == DateRangePreset.CUSTOM:
        return DateRange(today, today, False, 'Custom', 'Custom')

    raise InvalidTimeFrameError(f"Unknown date range preset: {preset}")


def date_range_for_timeframe(
    timeframe,
    today: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> DateRange:
    """
    Resolve a TimeFrame against ``today``.

    A custom time frame takes its bounds from start_date/end_date; with
    neither given it collapses to today.

    Raises:
        InvalidTimeFrameError: If timeframe is not a TimeFrame value
        InvalidDateRangeError: If a custom range is half open or reversed
    """
    today = _today(today)

    if timeframe == TimeFrame.TODAY:
        return date_range_for_preset(DateRangePreset.TODAY, today)

    if timeframe == TimeFrame.THIS_WEEK:
        return DateRange(week_start(today), today, True, 'This Week', 'Weekly')

    if timeframe == TimeFrame.THIS_MONTH:
        return date_range_for_preset(DateRangePreset.THIS_MONTH, today)

    if timeframe == TimeFrame.THIS_YEAR:
        return date_range_for_preset(DateRangePreset.THIS_YEAR, today)

    if timeframe == TimeFrame.LAST_SIX_MONTHS:
        return date_range_for_preset(DateRangePreset.LAST_SIX_MONTHS, today)

    if timeframe == TimeFrame.CUSTOM:
        if start_date is None and end_date is None:
            return DateRange(today, today, False, 'Custom', 'Custom')
        if start_date is None or end_date is None:
            raise InvalidDateRangeError("A custom range needs both start_date and end_date")
        date_range = DateRange(start_date, end_date, False, 'Custom', 'Custom')
        if not date_range.is_valid:
            raise InvalidDateRangeError("start_date must be on or before end_date")
        return date_range

    raise InvalidTimeFrameError(f"Unknown time frame: {timeframe}")


def date_range_for_year(year: int) -> DateRange:
    """Whole calendar year, Jan 1 to Dec 31."""
    return DateRange(date(year, 1, 1), date(year, 12, 31), False, 'YearlyCustom', 'Yearly')


def timeframe_display(timeframe) -> str:
    try:
        return TimeFrame(timeframe).label
    except ValueError:
        raise InvalidTimeFrameError(f"Unknown time frame: {timeframe}")
