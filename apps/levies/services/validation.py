"""Input rules shared by levy setup and payment services."""

from decimal import Decimal, InvalidOperation
from typing import Optional

from django.conf import settings
from django.utils import timezone

from .exceptions import (
    InvalidLevyAmountError,
    InvalidIncentiveError,
    InvalidPaymentDetailsError,
)

MAX_NOTES_LENGTH = 500


def max_levy_amount() -> Decimal:
    return Decimal(str(getattr(settings, 'LEVY_MAX_AMOUNT', '1000000')))


def validate_levy_amount(amount) -> Decimal:
    """
    Coerce to Decimal and check 0 < amount < LEVY_MAX_AMOUNT.

    Raises:
        InvalidLevyAmountError: If the amount is malformed or out of range
    """
    try:
        value = Decimal(str(amount)).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidLevyAmountError(f"Invalid amount: {amount!r}")

    if value <= 0:
        raise InvalidLevyAmountError("Amount must be greater than zero")
    if value >= max_levy_amount():
        raise InvalidLevyAmountError(
            f"Amount must be less than {max_levy_amount():,.2f}"
        )
    return value


def validate_incentive(incentive_amount, amount: Decimal) -> Optional[Decimal]:
    if incentive_amount is None:
        return None
    try:
        value = Decimal(str(incentive_amount)).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidIncentiveError(f"Invalid incentive amount: {incentive_amount!r}")
    if value <= 0:
        raise InvalidIncentiveError("Incentive amount must be greater than zero")
    if value >= amount:
        raise InvalidIncentiveError("Incentive amount must be less than the levy amount")
    return value


def validate_payment_details(*, notes: str = '', collection_date=None, now=None):
    if notes and len(notes) > MAX_NOTES_LENGTH:
        raise InvalidPaymentDetailsError(
            f"Notes cannot exceed {MAX_NOTES_LENGTH} characters"
        )
    now = now or timezone.now()
    if collection_date is not None and collection_date > now:
        raise InvalidPaymentDetailsError("Collection date cannot be in the future")
