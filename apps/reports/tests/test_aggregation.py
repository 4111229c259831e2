import uuid
from datetime import date
from decimal import Decimal

import pytest
from apps.levies.models import PaymentStatus, PaymentMethod
from apps.markets.models import Market, Trader
from apps.reports.aggregation import LevyAggregates, compute_market_stats, refresh_market_snapshot
from apps.reports.exceptions import MarketNotFoundError

JAN_START = date(2025, 1, 1)
JAN_END = date(2025, 1, 31)


# =============================================================================
# Market Stats Tests
# =============================================================================

@pytest.mark.django_db
class TestComputeMarketStats:

    def test_half_the_traders_paid(self, market, trader, second_trader, make_payment):
        """One of two active traders paid 1000 in January."""
        make_payment(market, trader, date(2025, 1, 10), '1000.00')

        stats = compute_market_stats(market.id, JAN_START, JAN_END)

        assert stats['total_revenue'] == Decimal('1000.00')
        assert stats['transaction_count'] == 1
        assert stats['total_traders'] == 2
        assert stats['compliant_traders'] == 1
        assert stats['non_compliant_traders'] == 1
        assert stats['compliance_rate'] == 50.0

    def test_repeat_payments_count_trader_once(self, market, trader, second_trader, make_payment):
        """Five payments by one trader make one compliant trader."""
        for day in range(1, 6):
            make_payment(market, trader, date(2025, 1, day), '200.00')

        stats = compute_market_stats(market.id, JAN_START, JAN_END)

        assert stats['compliant_traders'] == 1
        assert stats['transaction_count'] == 5
        assert stats['total_revenue'] == Decimal('1000.00')

    def test_only_paid_collections_count(self, market, trader, second_trader, make_payment):
        """Pending, failed and setup rows are not revenue."""
        make_payment(market, trader, date(2025, 1, 3), status=PaymentStatus.PENDING)
        make_payment(market, trader, date(2025, 1, 4), status=PaymentStatus.FAILED)
        make_payment(market, second_trader, date(2025, 1, 5), is_setup_record=True)

        stats = compute_market_stats(market.id, JAN_START, JAN_END)

        assert stats['total_revenue'] == Decimal('0.00')
        assert stats['compliant_traders'] == 0
        assert stats['compliance_rate'] == 0.0

    def test_window_is_inclusive(self, market, trader, make_payment):
        """Payments on the first and last day of the window count."""
        make_payment(market, trader, JAN_START, '100.00')
        make_payment(market, trader, JAN_END, '100.00')
        make_payment(market, trader, date(2025, 2, 1), '100.00')

        stats = compute_market_stats(market.id, JAN_START, JAN_END)

        assert stats['total_revenue'] == Decimal('200.00')

    def test_all_time_without_window(self, market, trader, make_payment):
        make_payment(market, trader, date(2024, 6, 1), '100.00')
        make_payment(market, trader, date(2025, 6, 1), '100.00')

        stats = compute_market_stats(market.id)

        assert stats['total_revenue'] == Decimal('200.00')

    def test_inactive_traders_excluded(self, market, trader, second_trader, make_payment):
        """Deactivated traders count neither as total nor compliant."""
        make_payment(market, second_trader, date(2025, 1, 10))
        Trader.objects.filter(id=second_trader.id).update(is_active=False)

        stats = compute_market_stats(market.id, JAN_START, JAN_END)

        assert stats['total_traders'] == 1
        assert stats['compliant_traders'] == 0

    def test_no_traders(self, market):
        stats = compute_market_stats(market.id, JAN_START, JAN_END)

        assert stats['compliance_rate'] == 0.0
        assert stats['non_compliant_traders'] == 0

    def test_unknown_market(self, db):
        with pytest.raises(MarketNotFoundError):
            compute_market_stats(uuid.uuid4(), JAN_START, JAN_END)

    def test_bulk_keeps_markets_apart(self, market, other_market, trader, make_payment):
        other_trader = Trader.objects.create(
            market=other_market,
            trader_name='Kemi',
            business_name='Kemi Fabrics',
            tin='TIN-0300',
        )
        make_payment(market, trader, date(2025, 1, 10), '1000.00')
        make_payment(other_market, other_trader, date(2025, 1, 11), '300.00')

        stats = LevyAggregates.market_stats_bulk([market.id, other_market.id], JAN_START, JAN_END)

        assert stats[market.id]['total_revenue'] == Decimal('1000.00')
        assert stats[other_market.id]['total_revenue'] == Decimal('300.00')


# =============================================================================
# Monthly Revenue Tests
# =============================================================================

@pytest.mark.django_db
class TestMonthlyRevenue:

    def test_zero_fills_empty_months(self, market, trader, make_payment):
        """February without payments holds exactly zero."""
        make_payment(market, trader, date(2025, 1, 20), '400.00')
        make_payment(market, trader, date(2025, 3, 2), '250.00')
        make_payment(market, trader, date(2025, 3, 9), '250.00')

        buckets, values = LevyAggregates.monthly_revenue(
            [market.id], date(2025, 1, 1), date(2025, 3, 31)
        )

        assert buckets == [date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)]
        assert values[market.id] == [Decimal('400.00'), Decimal('0.00'), Decimal('500.00')]

    def test_breakdown_rows(self, market, trader, make_payment):
        make_payment(market, trader, date(2025, 3, 2), '250.00')
        make_payment(market, trader, date(2025, 3, 9), '250.00')

        rows = LevyAggregates.monthly_breakdown([market.id], date(2025, 1, 1), date(2025, 3, 31))

        assert len(rows) == 1
        assert rows[0]['year'] == 2025
        assert rows[0]['month'] == 3
        assert rows[0]['revenue'] == Decimal('500.00')
        assert rows[0]['transaction_count'] == 2

    def test_revenue_by_payment_method(self, market, trader, make_payment):
        make_payment(market, trader, date(2025, 1, 5), '100.00', payment_method=PaymentMethod.CASH)
        make_payment(market, trader, date(2025, 1, 6), '300.00', payment_method=PaymentMethod.MOBILE_MONEY)

        totals = LevyAggregates.revenue_by_payment_method([market.id], JAN_START, JAN_END)

        assert totals == {'Cash': Decimal('100.00'), 'Mobile Money': Decimal('300.00')}


# =============================================================================
# Ranking and Snapshot Tests
# =============================================================================

@pytest.mark.django_db
class TestRankingAndSnapshot:

    def test_top_markets_ties_broken_by_name(self, lga):
        markets = [
            Market.objects.create(name=name, local_government=lga)
            for name in ['Oshodi', 'Balogun', 'Mile 12', 'Alaba']
        ]
        stats = {
            markets[0].id: {'total_revenue': Decimal('500'), 'total_traders': 1},
            markets[1].id: {'total_revenue': Decimal('900'), 'total_traders': 4},
            markets[2].id: {'total_revenue': Decimal('500'), 'total_traders': 4},
            markets[3].id: {'total_revenue': Decimal('100'), 'total_traders': 9},
        }

        by_revenue = LevyAggregates.top_markets_by_revenue(markets, stats, limit=3)
        by_traders = LevyAggregates.top_markets_by_traders(markets, stats, limit=2)

        assert [m.name for m in by_revenue] == ['Balogun', 'Mile 12', 'Oshodi']
        assert [m.name for m in by_traders] == ['Alaba', 'Balogun']

    def test_refresh_snapshot(self, market, trader, second_trader, make_payment):
        """Snapshot fields hold the freshly computed stats."""
        make_payment(market, trader, date(2025, 1, 10), '1000.00')

        refreshed = refresh_market_snapshot(market.id)

        market.refresh_from_db()
        assert refreshed.id == market.id
        assert market.total_revenue == Decimal('1000.00')
        assert market.total_traders == 2
        assert market.compliant_traders == 1
        assert market.non_compliant_traders == 1
        assert market.compliance_rate == Decimal('50.0')
        assert market.snapshot_refreshed_at is not None
