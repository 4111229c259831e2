"""
Dashboard assembly.

Builds the admin/chairman dashboard payload and the options for its filters
from LevyAggregates. Everything returned is plain dicts and lists.
"""

from datetime import date
from itertools import cycle
from typing import Optional

from django.conf import settings
from django.db.models.functions import ExtractYear
from django.utils import timezone

from apps.levies.models import LevyPayment
from apps.markets.models import Market, LocalGovernment
from .aggregation import LevyAggregates, ZERO
from .date_ranges import (
    TimeFrame,
    date_range_for_timeframe,
    date_range_for_year,
    timeframe_display,
)
from .metrics import month_labels


def dashboard_colors():
    colors = getattr(settings, 'DASHBOARD_COLORS', None)
    return list(colors) if colors else ['#FF6B8E', '#20C997', '#FFD700']


def dashboard_top_n():
    return getattr(settings, 'DASHBOARD_TOP_MARKETS', 3)


def filtered_markets(*, lga_filter=None, market_filter=None, scope=None):
    """Markets visible to the caller, narrowed by LGA and market name."""
    markets = Market.objects.select_related('local_government')
    if scope is not None:
        markets = scope.restrict_markets(markets)
    if lga_filter:
        markets = markets.filter(local_government__name__iexact=lga_filter.strip())
    if market_filter:
        markets = markets.filter(name__iexact=market_filter.strip())
    return markets


def build_dashboard(
    *,
    lga_filter: Optional[str] = None,
    market_filter: Optional[str] = None,
    timeframe=TimeFrame.THIS_MONTH,
    year: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None,
    scope=None
) -> dict:
    """
    Assemble the dashboard for the filtered markets.

    Args:
        lga_filter: Local government name (case-insensitive)
        market_filter: Market name (case-insensitive)
        timeframe: TimeFrame value, ignored when year is given
        year: Whole calendar year window
        start_date: First day of a custom window
        end_date: Last day of a custom window
        today: Reference date, defaults to the local date
        scope: CallerScope limiting visible markets

    Returns:
        dict with market_count, total_revenue, levy_payments,
        compliance_rates, levy_collection, date_range and generated_at

    Raises:
        InvalidTimeFrameError: If timeframe is unknown
        InvalidDateRangeError: If a custom window is half open or reversed
    """
    today = today or timezone.localdate()
    if year:
        date_range = date_range_for_year(year)
        time_frame_label = str(year)
    else:
        date_range = date_range_for_timeframe(
            timeframe, today=today, start_date=start_date, end_date=end_date
        )
        time_frame_label = timeframe_display(timeframe)
    report_year = year or today.year

    markets = list(filtered_markets(
        lga_filter=lga_filter,
        market_filter=market_filter,
        scope=scope,
    ))
    stats = LevyAggregates.market_stats_bulk(
        [m.id for m in markets], date_range.start_date, date_range.end_date
    )

    total_revenue = sum((s['total_revenue'] for s in stats.values()), ZERO)
    top_n = dashboard_top_n()
    top_by_revenue = LevyAggregates.top_markets_by_revenue(markets, stats, top_n)
    top_by_traders = LevyAggregates.top_markets_by_traders(markets, stats, top_n)

    buckets, monthly = LevyAggregates.monthly_revenue(
        [m.id for m in top_by_revenue], date_range.start_date, date_range.end_date
    )

    palette = dashboard_colors()

    return {
        'market_count': {
            'count': len(markets),
            'description': 'Total Number of registered markets',
        },
        'total_revenue': {
            'amount': total_revenue,
            'time_frame': time_frame_label,
            'description': 'Total levy paid',
        },
        'levy_payments': {
            'months': month_labels(buckets),
            'market_data': [
                {
                    'market_name': market.name,
                    'color': color,
                    'values': monthly[market.id],
                }
                for market, color in zip(top_by_revenue, cycle(palette))
            ],
        },
        'compliance_rates': {
            'year': report_year,
            'market_compliance': [
                {
                    'market_name': market.name,
                    'percentage': stats[market.id]['compliance_rate'],
                    'color': color,
                }
                for market, color in zip(top_by_traders, cycle(palette))
            ],
        },
        'levy_collection': {
            'year': report_year,
            'total_amount': total_revenue,
            'market_levy': [
                {
                    'market_name': market.name,
                    'amount': stats[market.id]['total_revenue'],
                }
                for market in top_by_revenue
            ],
        },
        'date_range': date_range.as_dict(),
        'generated_at': timezone.now(),
    }


def get_filter_options(*, scope=None) -> dict:
    """LGA names, market names, payment years and time frames the caller can filter on."""
    markets = filtered_markets(scope=scope)

    lgas = list(
        LocalGovernment.objects.filter(markets__in=markets)
        .distinct()
        .order_by('name')
        .values_list('name', flat=True)
    )
    market_names = list(markets.order_by('name').values_list('name', flat=True))

    years = sorted(
        set(
            LevyPayment.objects.collections()
            .filter(market__in=markets)
            .annotate(year=ExtractYear('payment_date'))
            .order_by()
            .values_list('year', flat=True)
            .distinct()
        ),
        reverse=True,
    )
    if not years:
        years = [timezone.localdate().year]

    return {
        'lgas': lgas,
        'markets': market_names,
        'years': years,
        'time_frames': [
            {'value': value, 'label': label} for value, label in TimeFrame.choices
        ],
    }
