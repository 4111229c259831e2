import itertools
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from apps.levies.models import LevyPayment, PaymentStatus, PaymentMethod

_references = itertools.count(1)


@pytest.fixture
def make_payment(db):
    """Return a factory creating levy payments on a given day at noon UTC."""

    def _make(market, trader, day, amount='1000.00', status=PaymentStatus.PAID,
              payment_method=PaymentMethod.CASH, is_setup_record=False):
        return LevyPayment.objects.create(
            market=market,
            trader=trader,
            amount=Decimal(amount),
            period='daily',
            payment_method=payment_method,
            status=status,
            transaction_reference=f'TXN-TEST-{next(_references):06d}',
            payment_date=datetime(day.year, day.month, day.day, 12, 0, tzinfo=dt_timezone.utc),
            is_setup_record=is_setup_record,
        )

    return _make
