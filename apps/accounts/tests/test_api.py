import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User, UserRole
from apps.accounts.services import (
    authenticate_user,
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
)
from apps.markets.scope import resolve_caller_scope


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        """Successfully login with valid credentials."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['email'] == user.email
        assert response.data['user']['role'] == UserRole.TRADER

    def test_login_is_case_insensitive_on_email(self, api_client, user):
        """Email lookup ignores case."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'TestUser@Example.com', 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK

    def test_login_wrong_password(self, api_client, user):
        """Login fails with wrong password."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'WrongPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_unknown_email(self, api_client):
        """Login fails for unknown email."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'nobody@example.com', 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, api_client, user_inactive):
        """Inactive account cannot login."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user_inactive.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_missing_fields(self, api_client):
        """Login requires email and password."""
        url = reverse('users:login')
        response = api_client.post(url, {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_login_updates_last_login(self, user):
        """Authenticating stamps last_login."""
        assert user.last_login is None
        authenticate_user(email=user.email, password='TestPass123!')

        user.refresh_from_db()
        assert user.last_login is not None

    def test_authenticate_user_wrong_password_raises(self, user):
        """Service raises InvalidCredentialsError on bad password."""
        with pytest.raises(InvalidCredentialsError):
            authenticate_user(email=user.email, password='nope')

    def test_unknown_email_and_wrong_password_look_alike(self, api_client, user):
        """The login response does not reveal whether an email is registered."""
        url = reverse('users:login')
        wrong_password = api_client.post(url, {'email': user.email, 'password': 'WrongPass123!'})
        unknown_email = api_client.post(url, {'email': 'nobody@example.com', 'password': 'WrongPass123!'})

        assert wrong_password.data == unknown_email.data

    def test_authenticate_deactivated_account_raises(self, user_inactive):
        """A deactivated account raises InactiveAccountError, an AccountsServiceError."""
        with pytest.raises(InactiveAccountError) as exc_info:
            authenticate_user(email=user_inactive.email, password='TestPass123!')

        assert isinstance(exc_info.value, AccountsServiceError)


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestCurrentUser:
    """Tests for GET /api/auth/user/"""

    def test_requires_authentication(self, api_client):
        """Anonymous request is rejected."""
        response = api_client.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_trader_without_profile(self, make_client, user):
        """Account without a trader profile gets an empty scope."""
        response = make_client(user).get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['email'] == user.email
        assert response.data['scope']['role'] == UserRole.TRADER
        assert response.data['scope']['market_id'] is None

    def test_chairman_scope_includes_market(self, chairman_api, chairman, market):
        """Chairman scope carries their chairman and market ids."""
        response = chairman_api.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['scope']['role'] == UserRole.CHAIRMAN
        assert response.data['scope']['chairman_id'] == str(chairman.id)
        assert response.data['scope']['market_id'] == str(market.id)


# =============================================================================
# Caller Scope Tests
# =============================================================================

@pytest.mark.django_db
class TestCallerScope:

    def test_superuser_is_admin(self):
        """Superusers resolve to the admin role whatever their role field says."""
        superuser = User.objects.create_superuser(email='root@example.com', password='x')
        superuser.role = UserRole.TRADER
        superuser.save()

        scope = resolve_caller_scope(superuser)
        assert scope.is_admin
        assert scope.can_access_market(None)

    def test_good_boy_scope(self, goodboy_account, good_boy, market):
        """Collector scope carries market, caretaker and collector ids."""
        scope = resolve_caller_scope(goodboy_account)

        assert scope.good_boy_id == good_boy.id
        assert scope.caretaker_id == good_boy.caretaker_id
        assert scope.market_id == market.id

    def test_restrict_markets(self, chairman_account, market, other_market):
        """Non-admin callers only see their own market."""
        from apps.markets.models import Market

        scope = resolve_caller_scope(chairman_account)
        visible = list(scope.restrict_markets(Market.objects.all()))

        assert visible == [market]
        assert not scope.can_access_market(other_market.id)

    def test_chairman_without_market_sees_nothing(self, chairman_account, lga):
        """A chairman not yet assigned a market is scoped to no markets."""
        from apps.markets.models import Chairman, Market

        Chairman.objects.create(user=chairman_account, local_government=lga)
        scope = resolve_caller_scope(chairman_account)

        assert scope.market_id is None
        assert scope.restrict_markets(Market.objects.all()).count() == 0
