"""
Export report.

The data behind a downloadable levy report for a date window. Rendering it
as CSV, Excel or PDF is left to the client.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings
from django.utils import timezone

from apps.markets.identifiers import normalize_optional_id
from apps.markets.models import Market
from .aggregation import LevyAggregates, ZERO
from .date_ranges import DateRange
from .exceptions import InvalidDateRangeError, MarketNotFoundError

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def resolve_report_timezone(name: Optional[str]):
    """
    Return the ZoneInfo for ``name``.

    Unknown or malformed names fall back to UTC with a warning.
    """
    name = name or getattr(settings, 'REPORT_DEFAULT_TIMEZONE', 'UTC')
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown report time zone %r, falling back to UTC", name)
        return ZoneInfo('UTC')


def build_export_report(
    *,
    start_date: date,
    end_date: date,
    market_id=None,
    lga_id=None,
    time_zone: Optional[str] = None,
    now=None
) -> dict:
    """
    Collect revenue and compliance figures for an export.

    Args:
        start_date: First day of the window (inclusive)
        end_date: Last day of the window (inclusive)
        market_id: Restrict to one market
        lga_id: Restrict to one local government
        time_zone: IANA name the report date is expressed in
        now: Reference time, defaults to timezone.now()

    Returns:
        dict with report totals, per-market details and monthly rows

    Raises:
        InvalidDateRangeError: If start_date is after end_date
        MarketNotFoundError: If market_id doesn't exist
    """
    date_range = DateRange(start_date, end_date, False, 'Custom', 'Custom')
    if not date_range.is_valid:
        raise InvalidDateRangeError("start_date must be on or before end_date")

    tz = resolve_report_timezone(time_zone)
    report_date = timezone.localtime(now or timezone.now(), tz)

    markets = Market.objects.all()
    market_id = normalize_optional_id(market_id)
    if market_id:
        markets = markets.filter(id=market_id)
        if not markets.exists():
            raise MarketNotFoundError(f"Market {market_id} not found")
    lga_id = normalize_optional_id(lga_id)
    if lga_id:
        markets = markets.filter(local_government_id=lga_id)
    markets = list(markets.order_by('name'))
    market_ids = [m.id for m in markets]

    stats = LevyAggregates.market_stats_bulk(market_ids, start_date, end_date)

    total_revenue = sum((s['total_revenue'] for s in stats.values()), ZERO)
    total_transactions = sum(s['transaction_count'] for s in stats.values())
    total_traders = sum(s['total_traders'] for s in stats.values())
    compliant_traders = sum(s['compliant_traders'] for s in stats.values())

    average_compliance = 0.0
    if stats:
        average_compliance = round(
            sum(s['compliance_rate'] for s in stats.values()) / len(stats), 1
        )

    daily_average = (total_revenue / max(1, date_range.day_count)).quantize(
        TWO_PLACES, rounding=ROUND_HALF_UP
    )

    names = {m.id: m.name for m in markets}
    monthly_rows = sorted(
        LevyAggregates.monthly_breakdown(market_ids, start_date, end_date),
        key=lambda row: (names[row['market_id']], row['year'], row['month']),
    )

    return {
        'report_date': report_date,
        'time_zone': str(tz),
        'start_date': start_date,
        'end_date': end_date,
        'market_count': len(markets),
        'total_revenue': total_revenue,
        'total_transactions': total_transactions,
        'total_traders': total_traders,
        'compliant_traders': compliant_traders,
        'average_compliance_rate': average_compliance,
        'daily_average_revenue': daily_average,
        'revenue_by_payment_method': LevyAggregates.revenue_by_payment_method(
            market_ids, start_date, end_date
        ),
        'market_details': [
            {
                'market_id': market.id,
                'market_name': market.name,
                'location': market.location,
                'total_traders': stats[market.id]['total_traders'],
                'revenue': stats[market.id]['total_revenue'],
                'compliance_rate': stats[market.id]['compliance_rate'],
                'transaction_count': stats[market.id]['transaction_count'],
            }
            for market in markets
        ],
        'monthly_revenue': [
            {
                'market_id': row['market_id'],
                'market_name': names[row['market_id']],
                'year': row['year'],
                'month': row['month'],
                'revenue': row['revenue'],
                'transaction_count': row['transaction_count'],
            }
            for row in monthly_rows
        ],
    }
