"""
Aggregation Module
==================

Revenue and compliance queries over levy payments.

Classes:
    LevyAggregates: Static methods computing per-market revenue, compliance
        and month-by-month breakdowns.

Example:
    Stats for one market in January::

        from apps.reports.aggregation import LevyAggregates

        stats = LevyAggregates.compute_market_stats(
            market.id, date(2025, 1, 1), date(2025, 1, 31)
        )
        print(f"{stats['compliance_rate']}% of traders paid")

Note:
    Only paid, non-setup LevyPayment rows count as revenue. A trader is
    compliant when they made at least one such payment in the window, no
    matter how many.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from django.db.models import Sum, Count, Q
from django.db.models.functions import Coalesce, ExtractYear, ExtractMonth
from django.utils import timezone

from apps.levies.choices import PaymentMethod
from apps.levies.models import LevyPayment
from apps.markets.identifiers import normalize_id
from apps.markets.models import Market, Trader
from .exceptions import MarketNotFoundError
from .metrics import compliance_rate, month_buckets

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def _payment_method_label(value):
    try:
        return PaymentMethod(value).label
    except ValueError:
        return 'Unknown'


class LevyAggregates:
    """
    Read-only levy aggregates for dashboards and reports.

    Methods take normalized market ids and inclusive calendar-date windows.
    Passing None for both window bounds aggregates over all time.
    """

    @staticmethod
    def paid_payments(market_ids, start_date=None, end_date=None):
        payments = LevyPayment.objects.paid().filter(market_id__in=market_ids)
        if start_date is not None and end_date is not None:
            payments = payments.in_window(start_date, end_date)
        return payments

    @staticmethod
    def compute_market_stats(market_id, start_date=None, end_date=None):
        """
        Revenue and compliance for one market.

        Returns:
            dict: market_id, total_revenue, transaction_count, total_traders,
                compliant_traders, non_compliant_traders, compliance_rate

        Raises:
            MarketNotFoundError: If the market doesn't exist
        """
        market_id = normalize_id(market_id)
        if not Market.objects.filter(id=market_id).exists():
            raise MarketNotFoundError(f"Market {market_id} not found")

        return LevyAggregates.market_stats_bulk([market_id], start_date, end_date)[market_id]

    @staticmethod
    def market_stats_bulk(market_ids, start_date=None, end_date=None):
        """
        compute_market_stats for many markets in two grouped queries.

        Returns:
            dict: market id -> stats dict (markets without data get zeros)
        """
        market_ids = list(market_ids)

        revenue_rows = (
            LevyAggregates.paid_payments(market_ids, start_date, end_date)
            .order_by()
            .values('market_id')
            .annotate(
                revenue=Coalesce(Sum('amount'), ZERO),
                transactions=Count('id'),
                compliant=Count(
                    'trader',
                    distinct=True,
                    filter=Q(trader__is_active=True),
                ),
            )
        )
        revenue_by_market = {row['market_id']: row for row in revenue_rows}

        trader_counts = dict(
            Trader.objects.filter(market_id__in=market_ids, is_active=True)
            .order_by()
            .values('market_id')
            .annotate(total=Count('id'))
            .values_list('market_id', 'total')
        )

        stats = {}
        for market_id in market_ids:
            row = revenue_by_market.get(market_id, {})
            total_traders = trader_counts.get(market_id, 0)
            compliant = row.get('compliant', 0)
            stats[market_id] = {
                'market_id': market_id,
                'total_revenue': row.get('revenue', ZERO),
                'transaction_count': row.get('transactions', 0),
                'total_traders': total_traders,
                'compliant_traders': compliant,
                'non_compliant_traders': max(total_traders - compliant, 0),
                'compliance_rate': compliance_rate(compliant, total_traders),
            }
        return stats

    @staticmethod
    def monthly_revenue(market_ids, start_date: date, end_date: date):
        """
        Zero-filled revenue per calendar month.

        Returns:
            tuple: (buckets, values) where buckets is the list of month
                starts and values maps market id -> list of Decimals aligned
                with buckets. Months without payments hold exactly 0.
        """
        market_ids = list(market_ids)
        buckets = month_buckets(start_date, end_date)
        positions = {(b.year, b.month): i for i, b in enumerate(buckets)}
        values = {market_id: [ZERO] * len(buckets) for market_id in market_ids}

        for row in LevyAggregates._monthly_rows(market_ids, start_date, end_date):
            index = positions.get((row['year'], row['month']))
            if index is not None:
                values[row['market_id']][index] = row['revenue']

        return buckets, values

    @staticmethod
    def monthly_breakdown(market_ids, start_date: date, end_date: date):
        """Month rows that had paid payments, with revenue and transaction count."""
        return list(LevyAggregates._monthly_rows(market_ids, start_date, end_date))

    @staticmethod
    def _monthly_rows(market_ids, start_date, end_date):
        return (
            LevyAggregates.paid_payments(market_ids, start_date, end_date)
            .annotate(
                year=ExtractYear('payment_date'),
                month=ExtractMonth('payment_date'),
            )
            .order_by()
            .values('market_id', 'year', 'month')
            .annotate(
                revenue=Coalesce(Sum('amount'), ZERO),
                transaction_count=Count('id'),
            )
            .order_by('market_id', 'year', 'month')
        )

    @staticmethod
    def revenue_by_payment_method(market_ids, start_date=None, end_date=None):
        """Paid revenue keyed by payment method label ('Unknown' when unrecognised)."""
        rows = (
            LevyAggregates.paid_payments(market_ids, start_date, end_date)
            .order_by()
            .values('payment_method')
            .annotate(total=Coalesce(Sum('amount'), ZERO))
        )
        totals = defaultdict(lambda: ZERO)
        for row in rows:
            totals[_payment_method_label(row['payment_method'])] += row['total']
        return dict(totals)

    @staticmethod
    def top_markets_by_revenue(markets: Iterable[Market], stats, limit=3):
        """Markets ordered by revenue in stats, ties broken by name."""
        return sorted(
            markets,
            key=lambda m: (-stats[m.id]['total_revenue'], m.name),
        )[:limit]

    @staticmethod
    def top_markets_by_traders(markets: Iterable[Market], stats, limit=3):
        return sorted(
            markets,
            key=lambda m: (-stats[m.id]['total_traders'], m.name),
        )[:limit]

    @staticmethod
    def refresh_market_snapshot(
        market_id,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Market:
        """
        Store current stats in the market's snapshot fields.

        The snapshot is a cache for listings; reports never read it.
        """
        stats = LevyAggregates.compute_market_stats(market_id, start_date, end_date)
        market = Market.objects.get(id=stats['market_id'])

        market.total_revenue = stats['total_revenue']
        market.total_traders = stats['total_traders']
        market.compliant_traders = stats['compliant_traders']
        market.non_compliant_traders = stats['non_compliant_traders']
        market.compliance_rate = Decimal(str(stats['compliance_rate']))
        market.snapshot_refreshed_at = timezone.now()
        market.save(update_fields=[
            'total_revenue',
            'total_traders',
            'compliant_traders',
            'non_compliant_traders',
            'compliance_rate',
            'snapshot_refreshed_at',
            'updated_at',
        ])

        logger.info("Refreshed snapshot for market %s", market.id)
        return market


compute_market_stats = LevyAggregates.compute_market_stats
refresh_market_snapshot = LevyAggregates.refresh_market_snapshot
