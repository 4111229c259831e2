"""Collector (GoodBoy) summary."""

from datetime import date
from decimal import Decimal
from typing import Optional

from django.db.models import Sum, Count
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.markets.identifiers import normalize_id
from apps.markets.models import GoodBoy
from apps.levies.models import LevyPayment
from .exceptions import CollectorNotFoundError


def get_collector_summary(
    *,
    good_boy_id,
    start_date: date,
    end_date: date,
    today: Optional[date] = None
) -> dict:
    """
    Paid collections taken by one collector.

    Args:
        good_boy_id: Collector id
        start_date: Window start (inclusive)
        end_date: Window end (inclusive)
        today: Day used for the 'today' figures (defaults to the current date)

    Returns:
        Dictionary with total_collected and transaction_count for the
        window, plus today's total, count and collections list

    Raises:
        CollectorNotFoundError: If collector doesn't exist
    """
    good_boy_id = normalize_id(good_boy_id)
    try:
        good_boy = GoodBoy.objects.select_related('market').get(id=good_boy_id)
    except GoodBoy.DoesNotExist:
        raise CollectorNotFoundError(f"Collector {good_boy_id} not found")

    today = today or timezone.localdate()
    paid = LevyPayment.objects.paid().filter(good_boy=good_boy)

    window = paid.in_window(start_date, end_date).aggregate(
        total=Coalesce(Sum('amount'), Decimal('0.00')),
        count=Count('id'),
    )
    todays = paid.in_window(today, today)
    today_totals = todays.aggregate(
        total=Coalesce(Sum('amount'), Decimal('0.00')),
        count=Count('id'),
    )

    return {
        'good_boy_id': good_boy.id,
        'market_id': good_boy.market_id,
        'market_name': good_boy.market.name,
        'start_date': start_date,
        'end_date': end_date,
        'total_collected': window['total'],
        'transaction_count': window['count'],
        'today_total': today_totals['total'],
        'today_count': today_totals['count'],
        'today_collections': list(
            todays.order_by('-payment_date').values(
                'id', 'trader_id', 'trader__business_name', 'amount',
                'payment_method', 'transaction_reference', 'payment_date',
            )
        ),
    }
