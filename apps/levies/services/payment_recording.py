"""Levy payment recording - matches a collection against the governing rate."""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.markets.identifiers import normalize_id, normalize_optional_id
from apps.markets.models import Market, Trader, GoodBoy
from apps.markets.services import TraderQRCode
from apps.levies.models import LevyPayment, LevySetup, PaymentMethod, PaymentStatus
from .due_dates import compute_due_date
from .exceptions import (
    ConfigurationMissingError,
    MarketNotFoundError,
    TraderNotFoundError,
    CollectorNotFoundError,
    CollectorScopeError,
    TraderMarketMismatchError,
    DuplicateTransactionReferenceError,
)
from .setup_resolver import resolve_active_setup
from .validation import validate_levy_amount, validate_incentive, validate_payment_details

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRate:
    """The amount and frequency a trader owes, and where they came from."""
    amount: Decimal
    frequency: str
    levy_setup: Optional[LevySetup] = None
    source: str = 'market'


def resolve_trader_rate(trader: Trader) -> ResolvedRate:
    """
    Rate for a trader: the trader override if set, else the market setup.

    Raises:
        ConfigurationMissingError: If neither exists
    """
    if trader.has_levy_override:
        return ResolvedRate(
            amount=trader.levy_amount,
            frequency=trader.levy_frequency,
            source='trader',
        )

    setup = resolve_active_setup(
        market_id=trader.market_id,
        occupancy_type=trader.occupancy_type,
    )
    if setup is None:
        raise ConfigurationMissingError(
            f"Levy is not configured for market {trader.market_id} "
            f"and occupancy type {trader.occupancy_type}"
        )
    return ResolvedRate(amount=setup.amount, frequency=setup.frequency, levy_setup=setup)


def generate_transaction_reference(now: Optional[datetime] = None) -> str:
    """Format: TXN-<YYYYMMDDHHMMSS>-<8 upper-case hex digits>."""
    now = now or timezone.now()
    return f"TXN-{now:%Y%m%d%H%M%S}-{secrets.token_hex(4).upper()}"


def status_for_method(payment_method: str) -> str:
    """Methods listed in LEVY_CONFIRMATION_METHODS start as pending."""
    confirmation_methods = getattr(
        settings, 'LEVY_CONFIRMATION_METHODS', [PaymentMethod.BANK_TRANSFER]
    )
    if payment_method in confirmation_methods:
        return PaymentStatus.PENDING
    return PaymentStatus.PAID


def _check_collector(good_boy_id, trader: Trader) -> GoodBoy:
    try:
        good_boy = GoodBoy.objects.get(id=good_boy_id)
    except GoodBoy.DoesNotExist:
        raise CollectorNotFoundError(f"Collector {good_boy_id} not found")

    if good_boy.market_id != trader.market_id:
        raise CollectorScopeError("Collector does not work in the trader's market")
    if (
        trader.caretaker_id
        and good_boy.caretaker_id
        and trader.caretaker_id != good_boy.caretaker_id
    ):
        raise CollectorScopeError("Trader is assigned to a different caretaker")
    return good_boy


@transaction.atomic
def record_payment(
    *,
    trader_id,
    market_id,
    payment_method: str,
    good_boy_id=None,
    amount: Optional[Decimal] = None,
    transaction_reference: Optional[str] = None,
    incentive_amount: Optional[Decimal] = None,
    notes: str = '',
    qr_code_scanned: bool = False,
    collection_date: Optional[datetime] = None
) -> LevyPayment:
    """
    Record a levy payment for a trader.

    This operation:
    1. Checks the trader is registered in the market
    2. Checks the collector (if any) works that market and caretaker
    3. Resolves the rate: trader override first, then the market setup
    4. Validates amount, incentive, notes and collection date
    5. Creates the payment with its due date

    Market snapshot fields are not touched; reports refresh them.

    Args:
        trader_id: Trader paying
        market_id: Market the payment is for
        payment_method: PaymentMethod value
        good_boy_id: Collector taking the payment
        amount: Amount paid (defaults to the resolved rate)
        transaction_reference: External reference (generated when omitted)
        incentive_amount: Optional collector incentive
        notes: Free text, at most 500 characters
        qr_code_scanned: Whether the trader was identified by QR code
        collection_date: When the cash was collected (defaults to now)

    Returns:
        Created LevyPayment; status paid, or pending for methods that need
        confirmation

    Raises:
        TraderNotFoundError: If trader doesn't exist
        MarketNotFoundError: If market doesn't exist
        TraderMarketMismatchError: If trader belongs to another market
        CollectorNotFoundError: If collector doesn't exist
        CollectorScopeError: If collector works another market or caretaker
        ConfigurationMissingError: If no override and no active setup
        InvalidLevyAmountError: If amount is out of range
        InvalidIncentiveError: If incentive is invalid
        InvalidPaymentDetailsError: If notes or collection date are invalid
        DuplicateTransactionReferenceError: If reference already used
    """
    trader_id = normalize_id(trader_id)
    market_id = normalize_id(market_id)
    good_boy_id = normalize_optional_id(good_boy_id)

    try:
        trader = Trader.objects.select_related('market').get(id=trader_id)
    except Trader.DoesNotExist:
        raise TraderNotFoundError(f"Trader {trader_id} not found")

    if trader.market_id != market_id:
        if not Market.objects.filter(id=market_id).exists():
            raise MarketNotFoundError(f"Market {market_id} not found")
        raise TraderMarketMismatchError("Trader is not registered in this market")

    good_boy = _check_collector(good_boy_id, trader) if good_boy_id else None

    rate = resolve_trader_rate(trader)
    amount = validate_levy_amount(rate.amount if amount is None else amount)
    incentive = validate_incentive(incentive_amount, amount)

    now = timezone.now()
    validate_payment_details(notes=notes, collection_date=collection_date, now=now)

    reference = (transaction_reference or '').strip() or generate_transaction_reference(now)
    if LevyPayment.objects.filter(transaction_reference=reference).exists():
        raise DuplicateTransactionReferenceError(
            f"Transaction reference {reference} has already been used"
        )

    try:
        with transaction.atomic():
            payment = LevyPayment.objects.create(
                market=trader.market,
                trader=trader,
                good_boy=good_boy,
                chairman_id=trader.market.chairman_id,
                levy_setup=rate.levy_setup,
                amount=amount,
                has_incentive=incentive is not None,
                incentive_amount=incentive,
                occupancy_type=trader.occupancy_type,
                period=rate.frequency,
                payment_method=payment_method,
                status=status_for_method(payment_method),
                transaction_reference=reference,
                payment_date=now,
                due_date=compute_due_date(rate.frequency, now),
                collection_date=collection_date or now,
                notes=notes,
                qr_code_scanned=qr_code_scanned,
            )
    except IntegrityError:
        raise DuplicateTransactionReferenceError(
            f"Transaction reference {reference} has already been used"
        )

    logger.info(
        "Recorded levy payment %s: trader %s, market %s, %s %s (%s rate), status %s",
        payment.id, trader.id, market_id, amount, rate.frequency, rate.source, payment.status,
    )
    return payment


def record_payment_by_qr(*, qr_payload: str, payment_method: str, good_boy_id=None, **kwargs) -> LevyPayment:
    """
    Record a payment for the trader identified by a scanned QR payload.

    Raises:
        InvalidQRCodeError: If the payload is not a trader QR code
        TraderNotFoundError: If the trader doesn't exist
        (plus everything record_payment raises)
    """
    trader_id = TraderQRCode.parse_payload(qr_payload)
    market_id = Trader.objects.filter(id=trader_id).values_list('market_id', flat=True).first()
    if market_id is None:
        raise TraderNotFoundError(f"Trader {trader_id} not found")

    return record_payment(
        trader_id=trader_id,
        market_id=market_id,
        payment_method=payment_method,
        good_boy_id=good_boy_id,
        qr_code_scanned=True,
        **kwargs
    )
