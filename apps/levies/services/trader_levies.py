"""Trader levy breakdown - what a trader has paid and what they still owe."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db.models import Sum, Min
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.markets.identifiers import normalize_id
from apps.markets.models import Trader
from apps.levies.models import LevyPayment, PaymentStatus
from .due_dates import compute_due_date, is_payment_due
from .exceptions import TraderNotFoundError, ConfigurationMissingError
from .payment_recording import resolve_trader_rate

STATUS_OVERDUE = 'Overdue'
STATUS_PENDING = 'Pending'
STATUS_UP_TO_DATE = 'Up to Date'


def get_trader_levy_breakdown(*, trader_id, as_of: Optional[datetime] = None) -> dict:
    """
    Summarize a trader's levy position.

    Outstanding money is the sum of the trader's pending, unpaid and
    failed collections. Overdue days count from the oldest outstanding due
    date. The status is 'Overdue' when that is in the past, 'Pending' when
    something is outstanding but not yet due, and 'Up to Date' otherwise.

    Args:
        trader_id: Trader id
        as_of: Reference time (defaults to now)

    Returns:
        Dictionary with:
        - trader_id, business_name, market_id
        - rate_amount, rate_frequency, rate_source (None when unconfigured)
        - total_paid, outstanding_amount, overdue_days, status
        - last_payment_date, next_due_date, is_due
        - recent_payments: last 10 collections

    Raises:
        TraderNotFoundError: If trader doesn't exist
    """
    trader_id = normalize_id(trader_id)
    try:
        trader = Trader.objects.get(id=trader_id)
    except Trader.DoesNotExist:
        raise TraderNotFoundError(f"Trader {trader_id} not found")

    as_of = as_of or timezone.now()
    payments = LevyPayment.objects.collections().filter(trader=trader)

    total_paid = payments.filter(status=PaymentStatus.PAID).aggregate(
        total=Coalesce(Sum('amount'), Decimal('0.00'))
    )['total']

    outstanding = payments.outstanding().aggregate(
        total=Coalesce(Sum('amount'), Decimal('0.00')),
    )
    # Failed rows are terminal and do not age
    oldest_due = payments.filter(
        status__in=[PaymentStatus.PENDING, PaymentStatus.UNPAID]
    ).aggregate(oldest_due=Min('due_date'))['oldest_due']
    overdue_days = max(0, (as_of - oldest_due).days) if oldest_due else 0

    if overdue_days > 0:
        status = STATUS_OVERDUE
    elif outstanding['total'] > 0:
        status = STATUS_PENDING
    else:
        status = STATUS_UP_TO_DATE

    try:
        rate = resolve_trader_rate(trader)
    except ConfigurationMissingError:
        rate = None

    last_payment = (
        payments.filter(status=PaymentStatus.PAID)
        .order_by('-payment_date')
        .first()
    )
    last_payment_date = last_payment.payment_date if last_payment else None

    next_due_date = None
    is_due = False
    if rate is not None:
        if last_payment_date is not None:
            next_due_date = compute_due_date(rate.frequency, last_payment_date)
        is_due = is_payment_due(
            last_payment_date=last_payment_date,
            frequency=rate.frequency,
            now=as_of,
        )

    recent_payments = list(
        payments.order_by('-payment_date')
        .values('id', 'amount', 'status', 'period', 'payment_method',
                'transaction_reference', 'payment_date', 'due_date')[:10]
    )

    return {
        'trader_id': trader.id,
        'business_name': trader.business_name,
        'market_id': trader.market_id,
        'rate_amount': rate.amount if rate else None,
        'rate_frequency': rate.frequency if rate else None,
        'rate_source': rate.source if rate else None,
        'total_paid': total_paid,
        'outstanding_amount': outstanding['total'],
        'overdue_days': overdue_days,
        'status': status,
        'last_payment_date': last_payment_date,
        'next_due_date': next_due_date,
        'is_due': is_due,
        'recent_payments': recent_payments,
    }
