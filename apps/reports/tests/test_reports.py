import uuid
from datetime import date, timedelta
from decimal import Decimal
from zoneinfo import available_timezones

import pytest
from django.utils import timezone
from apps.accounts.models import User, UserRole
from apps.levies.services import configure_levy_setup
from apps.markets.models import Chairman, Trader
from apps.markets.scope import resolve_caller_scope
from apps.reports.chairman import get_chairman_dashboard
from apps.reports.dashboard import build_dashboard, get_filter_options
from apps.reports.exceptions import (
    ChairmanNotFoundError,
    InvalidDateRangeError,
    InvalidTimeFrameError,
    MarketNotFoundError,
)
from apps.reports.export import build_export_report, resolve_report_timezone


@pytest.fixture
def other_trader(other_market):
    return Trader.objects.create(
        market=other_market,
        trader_name='Kemi',
        business_name='Kemi Fabrics',
        tin='TIN-0300',
    )


@pytest.fixture
def levy_history(market, other_market, trader, second_trader, other_trader, make_payment):
    """1000 in Computer Village in January, 300 in Tejuosho in March 2025."""
    make_payment(market, trader, date(2025, 1, 10), '1000.00')
    make_payment(other_market, other_trader, date(2025, 3, 5), '300.00')


# =============================================================================
# Dashboard Tests
# =============================================================================

@pytest.mark.django_db
class TestBuildDashboard:

    def test_whole_year(self, levy_history):
        """A year filter covers January to December."""
        data = build_dashboard(year=2025)

        assert data['market_count']['count'] == 2
        assert data['total_revenue']['amount'] == Decimal('1300.00')
        assert data['total_revenue']['time_frame'] == '2025'
        assert len(data['levy_payments']['months']) == 12
        assert data['levy_payments']['months'][0] == 'Jan'

        series = data['levy_payments']['market_data']
        assert [s['market_name'] for s in series] == ['Computer Village', 'Tejuosho']
        assert series[0]['values'][0] == Decimal('1000.00')
        assert series[0]['values'][1] == Decimal('0.00')
        assert series[1]['values'][2] == Decimal('300.00')

        assert data['levy_collection']['total_amount'] == Decimal('1300.00')
        assert data['levy_collection']['year'] == 2025
        assert data['date_range']['range_granularity'] == 'Yearly'

    def test_compliance_series(self, levy_history):
        """Markets ranked by trader count with their compliance rate."""
        data = build_dashboard(year=2025)

        compliance = data['compliance_rates']['market_compliance']
        assert compliance[0] == {
            'market_name': 'Computer Village',
            'percentage': 50.0,
            'color': '#FF6B8E',
        }
        assert compliance[1]['percentage'] == 100.0

    def test_time_frame_window(self, levy_history):
        """this_month runs from the first of the month to today."""
        data = build_dashboard(timeframe='this_month', today=date(2025, 1, 20))

        assert data['total_revenue']['amount'] == Decimal('1000.00')
        assert data['total_revenue']['time_frame'] == 'This month'
        assert data['levy_payments']['months'] == ['Jan']

    def test_custom_window(self, levy_history):
        """A custom time frame uses the given dates, not today."""
        data = build_dashboard(
            timeframe='custom',
            start_date=date(2025, 1, 1),
            end_date=date(2025, 3, 31),
            today=date(2025, 3, 15),
        )

        assert data['date_range']['start_date'] == date(2025, 1, 1)
        assert data['date_range']['end_date'] == date(2025, 3, 31)
        assert data['total_revenue']['amount'] == Decimal('1300.00')
        assert data['levy_payments']['months'] == ['Jan', 'Feb', 'Mar']

    def test_custom_window_excludes_earlier_payments(self, levy_history):
        data = build_dashboard(
            timeframe='custom',
            start_date=date(2025, 2, 1),
            end_date=date(2025, 3, 31),
        )

        assert data['total_revenue']['amount'] == Decimal('300.00')

    def test_months_across_year_end_carry_year(self, levy_history):
        data = build_dashboard(
            timeframe='custom',
            start_date=date(2024, 12, 1),
            end_date=date(2025, 2, 28),
        )

        assert data['levy_payments']['months'] == ['Dec 2024', 'Jan 2025', 'Feb 2025']
        assert data['levy_payments']['market_data'][0]['values'][1] == Decimal('1000.00')

    def test_custom_window_reversed(self, db):
        with pytest.raises(InvalidDateRangeError):
            build_dashboard(
                timeframe='custom',
                start_date=date(2025, 3, 31),
                end_date=date(2025, 1, 1),
            )

    def test_lga_filter(self, levy_history):
        data = build_dashboard(lga_filter='SURULERE', year=2025)

        assert data['market_count']['count'] == 1
        assert data['total_revenue']['amount'] == Decimal('300.00')

    def test_market_filter(self, levy_history):
        data = build_dashboard(market_filter='computer village', year=2025)

        assert data['market_count']['count'] == 1

    def test_chairman_scope(self, levy_history, chairman_account):
        """Chairmen only see their own market."""
        data = build_dashboard(year=2025, scope=resolve_caller_scope(chairman_account))

        assert data['market_count']['count'] == 1
        assert data['total_revenue']['amount'] == Decimal('1000.00')

    def test_colors_cycle(self, levy_history, settings):
        """A short palette repeats."""
        settings.DASHBOARD_COLORS = ['#000001']

        data = build_dashboard(year=2025)

        colors = [s['color'] for s in data['levy_payments']['market_data']]
        assert colors == ['#000001', '#000001']

    def test_top_n(self, levy_history, settings):
        settings.DASHBOARD_TOP_MARKETS = 1

        data = build_dashboard(year=2025)

        assert len(data['levy_payments']['market_data']) == 1
        assert data['levy_collection']['market_levy'] == [
            {'market_name': 'Computer Village', 'amount': Decimal('1000.00')}
        ]

    def test_unknown_time_frame(self, db):
        with pytest.raises(InvalidTimeFrameError):
            build_dashboard(timeframe='someday')

    def test_no_markets(self, db):
        data = build_dashboard(year=2025)

        assert data['market_count']['count'] == 0
        assert data['total_revenue']['amount'] == Decimal('0.00')
        assert data['levy_payments']['market_data'] == []


@pytest.mark.django_db
class TestFilterOptions:

    def test_options(self, levy_history, market, trader, make_payment):
        make_payment(market, trader, date(2024, 6, 1), '50.00')

        options = get_filter_options()

        assert options['lgas'] == ['Ikeja', 'Surulere']
        assert options['markets'] == ['Computer Village', 'Tejuosho']
        assert options['years'] == [2025, 2024]
        assert {'value': 'this_week', 'label': 'This week'} in options['time_frames']

    def test_years_default_to_current(self, market):
        options = get_filter_options()

        assert options['years'] == [timezone.localdate().year]

    def test_scoped(self, levy_history, chairman_account):
        options = get_filter_options(scope=resolve_caller_scope(chairman_account))

        assert options['markets'] == ['Computer Village']
        assert options['lgas'] == ['Ikeja']


# =============================================================================
# Export Tests
# =============================================================================

@pytest.mark.django_db
class TestBuildExportReport:

    def test_totals(self, levy_history):
        report = build_export_report(start_date=date(2025, 1, 1), end_date=date(2025, 1, 10))

        assert report['market_count'] == 2
        assert report['total_revenue'] == Decimal('1000.00')
        assert report['total_transactions'] == 1
        assert report['total_traders'] == 3
        assert report['compliant_traders'] == 1
        assert report['average_compliance_rate'] == 25.0
        assert report['daily_average_revenue'] == Decimal('100.00')
        assert report['revenue_by_payment_method'] == {'Cash': Decimal('1000.00')}
        assert [m['market_name'] for m in report['market_details']] == ['Computer Village', 'Tejuosho']
        assert report['monthly_revenue'][0]['market_name'] == 'Computer Village'
        assert report['monthly_revenue'][0]['month'] == 1

    def test_single_market(self, levy_history, other_market):
        report = build_export_report(
            start_date=date(2025, 1, 1), end_date=date(2025, 12, 31), market_id=other_market.id
        )

        assert report['market_count'] == 1
        assert report['total_revenue'] == Decimal('300.00')

    def test_lga_filter(self, levy_history, lga):
        report = build_export_report(
            start_date=date(2025, 1, 1), end_date=date(2025, 12, 31), lga_id=str(lga.id)
        )

        assert [m['market_name'] for m in report['market_details']] == ['Computer Village']

    @pytest.mark.skipif(
        'Africa/Lagos' not in available_timezones(), reason='tz database not installed'
    )
    def test_time_zone(self, levy_history):
        report = build_export_report(
            start_date=date(2025, 1, 1), end_date=date(2025, 1, 31), time_zone='Africa/Lagos'
        )

        assert report['time_zone'] == 'Africa/Lagos'
        assert report['report_date'].utcoffset() == timedelta(hours=1)

    def test_unknown_time_zone_falls_back_to_utc(self, db):
        report = build_export_report(
            start_date=date(2025, 1, 1), end_date=date(2025, 1, 31), time_zone='Invalid/Zone'
        )

        assert report['time_zone'] == 'UTC'
        assert str(resolve_report_timezone('../etc')) == 'UTC'

    def test_reversed_window(self, db):
        with pytest.raises(InvalidDateRangeError):
            build_export_report(start_date=date(2025, 2, 1), end_date=date(2025, 1, 1))

    def test_unknown_market(self, db):
        with pytest.raises(MarketNotFoundError):
            build_export_report(
                start_date=date(2025, 1, 1), end_date=date(2025, 1, 31), market_id=uuid.uuid4()
            )


# =============================================================================
# Chairman Dashboard Tests
# =============================================================================

@pytest.mark.django_db
class TestChairmanDashboard:

    def test_revenue_and_headcounts(self, chairman, market, caretaker, trader, second_trader, make_payment):
        today = timezone.localdate()
        make_payment(market, trader, today, '1000.00')
        make_payment(market, second_trader, today - timedelta(days=1), '500.00')
        configure_levy_setup(market_id=market.id, amount=Decimal('500'), frequency='daily')

        data = get_chairman_dashboard(chairman_id=chairman.id)

        assert data['market_name'] == 'Computer Village'
        assert data['chairman_name'] == 'Chief Okafor'
        assert data['total_traders'] == 2
        assert data['total_caretakers'] == 1
        assert data['active_levy_setups'] == 1
        assert data['daily_revenue'] == Decimal('1000.00')
        assert data['weekly_revenue'] >= Decimal('1000.00')
        assert data['monthly_revenue'] >= Decimal('1000.00')
        assert data['daily_revenue_change'] == 100.0
        # Every trader was registered today
        assert data['traders_change'] == 100.0
        assert len(data['recent_payments']) == 2
        assert data['recent_payments'][0]['trader_name'] == 'Ada Provisions'

    def test_chairman_without_market(self, lga):
        account = User.objects.create_user(
            email='idle.chairman@example.com',
            password='TestPass123!',
            role=UserRole.CHAIRMAN,
        )
        idle = Chairman.objects.create(user=account, local_government=lga)

        data = get_chairman_dashboard(chairman_id=idle.id)

        assert data['market_id'] is None
        assert data['daily_revenue'] == Decimal('0.00')
        assert data['recent_payments'] == []

    def test_unknown_chairman(self, db):
        with pytest.raises(ChairmanNotFoundError):
            get_chairman_dashboard(chairman_id=uuid.uuid4())
