"""Chairman dashboard: today, this week and this month for the chairman's market."""

from datetime import timedelta

from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.levies.models import LevyPayment, LevySetup
from apps.markets.identifiers import normalize_id
from apps.markets.models import Chairman, Market, Trader, Caretaker
from .aggregation import ZERO
from .date_ranges import week_start
from .exceptions import ChairmanNotFoundError
from .metrics import percentage_change

RECENT_PAYMENTS_LIMIT = 10


def _revenue(payments, start_date, end_date):
    return payments.in_window(start_date, end_date).aggregate(
        total=Coalesce(Sum('amount'), ZERO)
    )['total']


def get_chairman_dashboard(*, chairman_id, now=None) -> dict:
    """
    Revenue and headcounts for the chairman's market.

    A chairman without a market gets an all-zero dashboard.

    Raises:
        ChairmanNotFoundError: If chairman doesn't exist
    """
    chairman_id = normalize_id(chairman_id)
    chairman = Chairman.objects.select_related('user').filter(id=chairman_id).first()
    if chairman is None:
        raise ChairmanNotFoundError(f"Chairman {chairman_id} not found")

    today = timezone.localtime(now or timezone.now()).date()
    yesterday = today - timedelta(days=1)

    market = Market.objects.filter(chairman=chairman).first()
    if market is None:
        return {
            'chairman_id': chairman.id,
            'chairman_name': chairman.user.get_display_name(),
            'market_id': None,
            'market_name': None,
            'total_traders': 0,
            'total_caretakers': 0,
            'active_levy_setups': 0,
            'daily_revenue': ZERO,
            'weekly_revenue': ZERO,
            'monthly_revenue': ZERO,
            'daily_revenue_change': 0.0,
            'traders_change': 0.0,
            'recent_payments': [],
        }

    paid = LevyPayment.objects.paid().filter(market=market)
    daily = _revenue(paid, today, today)
    previous_day = _revenue(paid, yesterday, yesterday)

    traders = Trader.objects.filter(market=market, is_active=True)
    total_traders = traders.count()
    traders_before_today = traders.filter(created_at__date__lt=today).count()

    recent = (
        LevyPayment.objects.collections()
        .filter(market=market)
        .select_related('trader')
        .order_by('-payment_date', '-created_at')[:RECENT_PAYMENTS_LIMIT]
    )

    return {
        'chairman_id': chairman.id,
        'chairman_name': chairman.user.get_display_name(),
        'market_id': market.id,
        'market_name': market.name,
        'total_traders': total_traders,
        'total_caretakers': Caretaker.objects.filter(market=market).count(),
        'active_levy_setups': LevySetup.objects.filter(market=market, is_active=True).count(),
        'daily_revenue': daily,
        'weekly_revenue': _revenue(paid, week_start(today), today),
        'monthly_revenue': _revenue(paid, today.replace(day=1), today),
        'daily_revenue_change': percentage_change(previous_day, daily),
        'traders_change': percentage_change(traders_before_today, total_traders),
        'recent_payments': [
            {
                'id': payment.id,
                'trader_name': payment.trader.business_name if payment.trader else '',
                'amount': payment.amount,
                'payment_method': payment.payment_method,
                'status': payment.status,
                'payment_date': payment.payment_date,
                'transaction_reference': payment.transaction_reference,
            }
            for payment in recent
        ],
    }
