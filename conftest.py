import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.markets.models import (
    LocalGovernment,
    Market,
    Chairman,
    Caretaker,
    GoodBoy,
    Trader,
    OccupancyType,
)


def client_for(user):
    """Return an API client authenticated as user using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Accounts
# =============================================================================

@pytest.fixture
def admin_account(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def chairman_account(db):
    return User.objects.create_user(
        email='chairman@example.com',
        password='TestPass123!',
        display_name='Chief Okafor',
        role=UserRole.CHAIRMAN,
    )


@pytest.fixture
def caretaker_account(db):
    return User.objects.create_user(
        email='caretaker@example.com',
        password='TestPass123!',
        display_name='Caretaker',
        role=UserRole.CARETAKER,
    )


@pytest.fixture
def goodboy_account(db):
    return User.objects.create_user(
        email='goodboy@example.com',
        password='TestPass123!',
        display_name='Collector',
        role=UserRole.GOODBOY,
    )


@pytest.fixture
def trader_account(db):
    return User.objects.create_user(
        email='trader@example.com',
        password='TestPass123!',
        display_name='Trader',
        role=UserRole.TRADER,
    )


# =============================================================================
# Markets
# =============================================================================

@pytest.fixture
def lga(db):
    return LocalGovernment.objects.create(name='Ikeja', state='Lagos', code='IKJ')


@pytest.fixture
def chairman(chairman_account, lga):
    return Chairman.objects.create(user=chairman_account, local_government=lga)


@pytest.fixture
def market(lga, chairman):
    """Market governed by the chairman fixture."""
    return Market.objects.create(
        name='Computer Village',
        location='Otigba Street',
        local_government=lga,
        chairman=chairman,
        capacity=100,
    )


@pytest.fixture
def other_market(db):
    other_lga = LocalGovernment.objects.create(name='Surulere', state='Lagos')
    return Market.objects.create(name='Tejuosho', local_government=other_lga)


@pytest.fixture
def caretaker(caretaker_account, market):
    return Caretaker.objects.create(user=caretaker_account, market=market)


@pytest.fixture
def good_boy(goodboy_account, market, caretaker):
    return GoodBoy.objects.create(user=goodboy_account, market=market, caretaker=caretaker)


@pytest.fixture
def trader(market, caretaker):
    """Shop trader without a personal levy rate."""
    return Trader.objects.create(
        market=market,
        caretaker=caretaker,
        trader_name='Ada Obi',
        business_name='Ada Provisions',
        tin='TIN-0001',
        occupancy_type=OccupancyType.SHOP,
    )


@pytest.fixture
def second_trader(market):
    return Trader.objects.create(
        market=market,
        trader_name='Bayo Ade',
        business_name='Bayo Phones',
        tin='TIN-0002',
        occupancy_type=OccupancyType.KIOSK,
    )


# =============================================================================
# Clients
# =============================================================================

@pytest.fixture
def admin_api(admin_account):
    return client_for(admin_account)


@pytest.fixture
def chairman_api(chairman_account, market):
    return client_for(chairman_account)


@pytest.fixture
def goodboy_api(goodboy_account, good_boy):
    return client_for(goodboy_account)


@pytest.fixture
def trader_api(trader_account):
    return client_for(trader_account)


@pytest.fixture
def make_client(db):
    """Return a factory building JWT-authenticated clients."""
    return client_for
