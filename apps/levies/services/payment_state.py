"""Payment state machine - pending payments are confirmed or rejected."""

import logging
from typing import Optional

from django.db import transaction

from apps.accounts.models import User
from apps.markets.identifiers import normalize_id
from apps.levies.models import LevyPayment, PaymentStatus
from .exceptions import LevyPaymentNotFoundError, InvalidStateTransitionError

logger = logging.getLogger(__name__)


def _lock_payment(payment_id) -> LevyPayment:
    payment_id = normalize_id(payment_id)
    try:
        return LevyPayment.objects.select_for_update().get(id=payment_id)
    except LevyPayment.DoesNotExist:
        raise LevyPaymentNotFoundError(f"Levy payment {payment_id} not found")


def _check_transition(payment: LevyPayment, new_status: str):
    if payment.is_setup_record:
        raise InvalidStateTransitionError("Setup records have no payment status")
    if not payment.can_transition_to(new_status):
        raise InvalidStateTransitionError(
            f"Cannot change payment from {payment.status} to {new_status}"
        )


@transaction.atomic
def confirm_payment(*, payment_id, confirmed_by: Optional[User] = None) -> LevyPayment:
    """
    Move a pending (or unpaid) payment to paid.

    Raises:
        LevyPaymentNotFoundError: If payment doesn't exist
        InvalidStateTransitionError: If payment is already paid or failed
    """
    payment = _lock_payment(payment_id)
    _check_transition(payment, PaymentStatus.PAID)

    payment.mark_paid(confirmed_by=confirmed_by)
    logger.info("Levy payment %s confirmed", payment.id)
    return payment


@transaction.atomic
def fail_payment(*, payment_id, reason: str = '') -> LevyPayment:
    """
    Move a pending (or unpaid) payment to failed.

    Raises:
        LevyPaymentNotFoundError: If payment doesn't exist
        InvalidStateTransitionError: If payment is already paid or failed
    """
    payment = _lock_payment(payment_id)
    _check_transition(payment, PaymentStatus.FAILED)

    payment.mark_failed(reason=reason[:255])
    logger.info("Levy payment %s marked failed", payment.id)
    return payment
