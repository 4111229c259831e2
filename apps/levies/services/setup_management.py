"""Levy setup management - configure, supersede and deactivate rates."""

import logging
from decimal import Decimal
from typing import Optional

from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.accounts.models import User
from apps.markets.identifiers import normalize_id, normalize_optional_id
from apps.markets.models import Market, Chairman
from apps.levies.models import LevySetup
from .exceptions import (
    MarketNotFoundError,
    LevySetupNotFoundError,
    LevySetupConflictError,
)
from .validation import validate_levy_amount

logger = logging.getLogger(__name__)


def configure_levy_setup(
    *,
    market_id,
    amount: Decimal,
    frequency: str,
    occupancy_type: Optional[str] = None,
    chairman_id=None,
    created_by: Optional[User] = None
) -> LevySetup:
    """
    Set the levy rate for a (market, occupancy type, frequency) triple.

    This operation:
    1. Validates the amount
    2. Locks the market row so rate changes of one market run one at a time
    3. Deactivates the currently active setups of the triple (history kept)
    4. Inserts the new active setup

    Steps 2-4 run in one transaction. The conditional unique constraint on
    active setups backs the application check; a writer that still collides
    gets LevySetupConflictError and nothing is changed.

    Args:
        market_id: Market id
        amount: Levy amount per period
        frequency: PaymentFrequency value
        occupancy_type: OccupancyType value, or None for all occupancies
        chairman_id: Chairman configuring the rate (defaults to the market's chairman)
        created_by: User performing the change

    Returns:
        The new active LevySetup

    Raises:
        InvalidLevyAmountError: If amount is out of range
        MarketNotFoundError: If market doesn't exist
        LevySetupConflictError: If a concurrent change won the race
    """
    amount = validate_levy_amount(amount)
    market_id = normalize_id(market_id)
    chairman_id = normalize_optional_id(chairman_id)

    try:
        with transaction.atomic():
            try:
                market = Market.objects.select_for_update().get(id=market_id)
            except Market.DoesNotExist:
                raise MarketNotFoundError(f"Market {market_id} not found")

            chairman = None
            if chairman_id:
                chairman = Chairman.objects.filter(id=chairman_id).first()
            elif market.chairman_id:
                chairman = market.chairman

            superseded = list(
                LevySetup.objects
                .select_for_update()
                .filter(
                    market=market,
                    occupancy_type=occupancy_type,
                    frequency=frequency,
                    is_active=True,
                )
            )
            now = timezone.now()
            for old in superseded:
                old.is_active = False
                old.deactivated_at = now
                old.save(update_fields=['is_active', 'deactivated_at', 'updated_at'])

            setup = LevySetup.objects.create(
                market=market,
                chairman=chairman,
                occupancy_type=occupancy_type,
                frequency=frequency,
                amount=amount,
                is_active=True,
                created_by=created_by,
            )
    except IntegrityError:
        logger.warning(
            "Rejected concurrent levy setup change for market %s (%s, %s)",
            market_id, occupancy_type or 'all', frequency,
        )
        raise LevySetupConflictError(
            "Another rate change for this market, occupancy and frequency "
            "was saved at the same time. Reload and try again."
        )

    logger.info(
        "Levy setup %s configured for market %s: %s %s (%s), superseded %d",
        setup.id, market_id, amount, frequency, occupancy_type or 'all', len(superseded),
    )
    return setup


@transaction.atomic
def deactivate_levy_setup(*, setup_id) -> LevySetup:
    """
    Deactivate a levy setup. Deactivating an inactive setup is a no-op.

    Raises:
        LevySetupNotFoundError: If setup doesn't exist
    """
    setup_id = normalize_id(setup_id)
    try:
        setup = LevySetup.objects.select_for_update().get(id=setup_id)
    except LevySetup.DoesNotExist:
        raise LevySetupNotFoundError(f"Levy setup {setup_id} not found")

    if setup.is_active:
        setup.deactivate()
        logger.info("Levy setup %s deactivated", setup.id)
    return setup


def get_setup_history(
    *,
    market_id,
    frequency: Optional[str] = None,
    occupancy_type: Optional[str] = None
):
    """All setups of a market, active and superseded, newest first."""
    queryset = LevySetup.objects.filter(market_id=normalize_id(market_id))
    if frequency:
        queryset = queryset.filter(frequency=frequency)
    if occupancy_type:
        queryset = queryset.filter(occupancy_type=occupancy_type)
    return queryset.order_by('-created_at', '-id')
