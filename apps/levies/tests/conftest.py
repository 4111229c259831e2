from decimal import Decimal

import pytest
from apps.levies.models import LevyPayment, PaymentStatus, PaymentMethod
from apps.levies.services import configure_levy_setup
from apps.markets.models import OccupancyType


@pytest.fixture
def shop_daily_setup(market):
    """Market rate of 500 per day for shops."""
    return configure_levy_setup(
        market_id=market.id,
        amount=Decimal('500.00'),
        frequency='daily',
        occupancy_type=OccupancyType.SHOP,
    )


@pytest.fixture
def wildcard_weekly_setup(market):
    """Market rate of 1500 per week for every occupancy type."""
    return configure_levy_setup(
        market_id=market.id,
        amount=Decimal('1500.00'),
        frequency='weekly',
        occupancy_type=None,
    )


@pytest.fixture
def pending_payment(market, trader, shop_daily_setup):
    """Bank transfer awaiting confirmation."""
    return LevyPayment.objects.create(
        market=market,
        trader=trader,
        levy_setup=shop_daily_setup,
        amount=Decimal('500.00'),
        period='daily',
        payment_method=PaymentMethod.BANK_TRANSFER,
        status=PaymentStatus.PENDING,
        transaction_reference='TXN-PENDING-0001',
    )
