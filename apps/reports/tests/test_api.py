import uuid
from datetime import date
from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User, UserRole


# =============================================================================
# Dashboard Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestDashboardEndpoints:
    """Tests for /api/reports/dashboard/ and /api/reports/filter-options/"""

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('reports:dashboard'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_collector_forbidden(self, goodboy_api):
        """Dashboards are for chairmen and administrators."""
        response = goodboy_api.get(reverse('reports:dashboard'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_dashboard_for_year(self, admin_api, market, trader, make_payment):
        make_payment(market, trader, date(2025, 4, 2), '750.00')

        response = admin_api.get(reverse('reports:dashboard'), {'year': 2025})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_revenue']['amount'] == Decimal('750.00')
        assert response.data['levy_payments']['months'][3] == 'Apr'

    def test_invalid_time_frame(self, admin_api):
        response = admin_api.get(reverse('reports:dashboard'), {'time_frame': 'forever'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_custom_window(self, admin_api, market, trader, make_payment):
        make_payment(market, trader, date(2025, 1, 10), '1000.00')

        response = admin_api.get(reverse('reports:dashboard'), {
            'time_frame': 'custom',
            'start_date': '2025-01-01',
            'end_date': '2025-03-31',
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_revenue']['amount'] == Decimal('1000.00')
        assert response.data['levy_payments']['months'] == ['Jan', 'Feb', 'Mar']

    def test_custom_window_needs_both_dates(self, admin_api):
        response = admin_api.get(reverse('reports:dashboard'), {
            'time_frame': 'custom',
            'start_date': '2025-01-01',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_dates_without_custom_time_frame(self, admin_api):
        response = admin_api.get(reverse('reports:dashboard'), {
            'start_date': '2025-01-01',
            'end_date': '2025-03-31',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_chairman_sees_own_market(self, chairman_api, market, other_market):
        response = chairman_api.get(reverse('reports:dashboard'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['market_count']['count'] == 1

    def test_filter_options(self, admin_api, market, other_market):
        response = admin_api.get(reverse('reports:filter-options'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['markets'] == ['Computer Village', 'Tejuosho']
        assert len(response.data['time_frames']) == 6


# =============================================================================
# Export Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestExportEndpoint:
    """Tests for /api/reports/export/"""

    def test_admin_export(self, admin_api, market, trader, make_payment):
        make_payment(market, trader, date(2025, 1, 5), '500.00')

        response = admin_api.get(
            reverse('reports:export'),
            {'start_date': '2025-01-01', 'end_date': '2025-01-31'}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_revenue'] == Decimal('500.00')
        assert response.data['time_zone'] == 'UTC'

    def test_chairman_forced_to_own_market(self, chairman_api, market, other_market):
        response = chairman_api.get(
            reverse('reports:export'),
            {'start_date': '2025-01-01', 'end_date': '2025-01-31'}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['market_count'] == 1
        assert response.data['market_details'][0]['market_name'] == market.name

    def test_chairman_other_market_forbidden(self, chairman_api, other_market):
        response = chairman_api.get(reverse('reports:export'), {'market': str(other_market.id)})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reversed_window(self, admin_api):
        response = admin_api.get(
            reverse('reports:export'),
            {'start_date': '2025-02-01', 'end_date': '2025-01-01'}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_market(self, admin_api):
        response = admin_api.get(reverse('reports:export'), {'market': str(uuid.uuid4())})

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Market Stats Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestMarketStatsEndpoints:

    def test_stats_all_time(self, chairman_api, market, trader, second_trader, make_payment):
        make_payment(market, trader, date(2024, 12, 1), '1000.00')

        url = reverse('reports:market-stats', kwargs={'market_id': market.id})
        response = chairman_api.get(url, {'all_time': 'true'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_revenue'] == Decimal('1000.00')
        assert response.data['compliance_rate'] == 50.0

    def test_stats_other_market_forbidden(self, chairman_api, other_market):
        url = reverse('reports:market-stats', kwargs={'market_id': other_market.id})
        response = chairman_api.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_stats_unknown_market(self, admin_api):
        url = reverse('reports:market-stats', kwargs={'market_id': uuid.uuid4()})
        response = admin_api.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_refresh(self, admin_api, market, trader, make_payment):
        make_payment(market, trader, date(2025, 1, 5), '500.00')

        url = reverse('reports:market-refresh', kwargs={'market_id': market.id})
        response = admin_api.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_revenue'] == Decimal('500.00')
        assert response.data['transaction_count'] == 1
        assert response.data['compliance_rate'] == 100.0


# =============================================================================
# Chairman Dashboard Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestChairmanDashboardEndpoint:

    def test_own_dashboard(self, chairman_api, chairman, market):
        response = chairman_api.get(reverse('reports:chairman-dashboard'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['chairman_id'] == chairman.id
        assert response.data['market_name'] == market.name

    def test_admin_requires_chairman(self, admin_api):
        response = admin_api.get(reverse('reports:chairman-dashboard'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_admin_picks_chairman(self, admin_api, chairman, market):
        response = admin_api.get(
            reverse('reports:chairman-dashboard'),
            {'chairman': str(chairman.id)}
        )

        assert response.status_code == status.HTTP_200_OK

    def test_admin_unknown_chairman(self, admin_api):
        response = admin_api.get(
            reverse('reports:chairman-dashboard'),
            {'chairman': str(uuid.uuid4())}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_chairman_without_profile(self, make_client):
        """A chairman account with no chairman record gets a 404."""
        account = User.objects.create_user(
            email='no.profile@example.com',
            password='TestPass123!',
            role=UserRole.CHAIRMAN,
        )
        response = make_client(account).get(reverse('reports:chairman-dashboard'))

        assert response.status_code == status.HTTP_404_NOT_FOUND
