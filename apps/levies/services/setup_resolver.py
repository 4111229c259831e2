"""Levy setup resolver - finds the rate that governs a market and occupancy."""

from typing import Optional
from uuid import UUID

from django.db.models import Q

from apps.markets.identifiers import normalize_id
from apps.levies.models import LevySetup
from .exceptions import ConfigurationMissingError


def _active_setups(market_id: UUID, occupancy_type: Optional[str]):
    queryset = LevySetup.objects.filter(market_id=market_id, is_active=True)
    if occupancy_type:
        # A null occupancy type on the setup applies to every occupancy
        return queryset.filter(
            Q(occupancy_type=occupancy_type) | Q(occupancy_type__isnull=True)
        )
    return queryset.filter(occupancy_type__isnull=True)


def resolve_active_setup(
    *,
    market_id,
    occupancy_type: Optional[str],
    frequency: Optional[str] = None
) -> Optional[LevySetup]:
    """
    Find the active levy setup for a market and occupancy type.

    Candidates are active setups of the market whose occupancy type equals
    ``occupancy_type`` or is null. When ``frequency`` is given only setups
    with that frequency qualify. The most recently created candidate wins.

    Args:
        market_id: Market id (UUID or string in any case)
        occupancy_type: Trader occupancy type
        frequency: Optional PaymentFrequency value

    Returns:
        The winning LevySetup, or None when nothing matches

    Example:
        >>> setup = resolve_active_setup(market_id=market.id, occupancy_type='shop')
        >>> setup.amount
        Decimal('500.00')
    """
    queryset = _active_setups(normalize_id(market_id), occupancy_type)

    if frequency:
        queryset = queryset.filter(frequency=frequency)

    return queryset.order_by('-created_at', '-id').first()


def get_active_setup_or_raise(
    *,
    market_id,
    occupancy_type: Optional[str],
    frequency: Optional[str] = None
) -> LevySetup:
    """Same as resolve_active_setup but raises ConfigurationMissingError."""
    setup = resolve_active_setup(
        market_id=market_id,
        occupancy_type=occupancy_type,
        frequency=frequency,
    )
    if setup is None:
        raise ConfigurationMissingError(
            "Levy is not configured for this market and occupancy type"
        )
    return setup


def list_active_setups(*, market_id) -> list[LevySetup]:
    """
    Latest active setup per (occupancy type, frequency) of a market.

    Ordered by frequency then occupancy type, wildcard last.
    """
    latest = {}
    queryset = (
        LevySetup.objects
        .filter(market_id=normalize_id(market_id), is_active=True)
        .order_by('-created_at', '-id')
    )
    for setup in queryset:
        latest.setdefault((setup.occupancy_type, setup.frequency), setup)

    return sorted(
        latest.values(),
        key=lambda s: (s.frequency, s.occupancy_type is None, s.occupancy_type or ''),
    )
