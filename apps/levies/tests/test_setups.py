import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone
from apps.levies.models import LevySetup
from apps.levies.services import (
    resolve_active_setup,
    get_active_setup_or_raise,
    list_active_setups,
    configure_levy_setup,
    deactivate_levy_setup,
    get_setup_history,
    ConfigurationMissingError,
    InvalidLevyAmountError,
    MarketNotFoundError,
    LevySetupNotFoundError,
)
from apps.markets.models import OccupancyType


def _age(setup, minutes):
    """Backdate a setup's created_at."""
    LevySetup.objects.filter(id=setup.id).update(
        created_at=timezone.now() - timedelta(minutes=minutes)
    )


# =============================================================================
# Resolver Tests
# =============================================================================

@pytest.mark.django_db
class TestResolveActiveSetup:

    def test_latest_configured_rate_wins(self, market):
        """Reconfiguring a triple leaves only the newer rate in force."""
        first = configure_levy_setup(
            market_id=market.id, amount=Decimal('300'), frequency='daily',
            occupancy_type=OccupancyType.SHOP,
        )
        second = configure_levy_setup(
            market_id=market.id, amount=Decimal('400'), frequency='daily',
            occupancy_type=OccupancyType.SHOP,
        )

        resolved = resolve_active_setup(market_id=market.id, occupancy_type=OccupancyType.SHOP)

        assert resolved == second
        first.refresh_from_db()
        assert not first.is_active
        assert first.deactivated_at is not None

    def test_newest_candidate_wins_across_occupancy(self, market):
        """Between a wildcard and a specific daily rate the newer one applies."""
        older = configure_levy_setup(
            market_id=market.id, amount=Decimal('200'), frequency='daily',
            occupancy_type=None,
        )
        newer = configure_levy_setup(
            market_id=market.id, amount=Decimal('500'), frequency='daily',
            occupancy_type=OccupancyType.SHOP,
        )
        _age(older, 10)
        _age(newer, 5)

        resolved = resolve_active_setup(market_id=market.id, occupancy_type=OccupancyType.SHOP)

        assert resolved == newer

    def test_wildcard_matches_any_occupancy(self, market, wildcard_weekly_setup):
        """A null occupancy setup applies when nothing more specific exists."""
        for occupancy in OccupancyType.values:
            resolved = resolve_active_setup(market_id=market.id, occupancy_type=occupancy)
            assert resolved == wildcard_weekly_setup

    def test_frequency_filter(self, market, shop_daily_setup, wildcard_weekly_setup):
        """Only setups of the requested frequency qualify."""
        resolved = resolve_active_setup(
            market_id=market.id,
            occupancy_type=OccupancyType.SHOP,
            frequency='weekly',
        )

        assert resolved == wildcard_weekly_setup

    def test_inactive_setups_ignored(self, market, shop_daily_setup):
        """A deactivated setup no longer resolves."""
        deactivate_levy_setup(setup_id=shop_daily_setup.id)

        assert resolve_active_setup(market_id=market.id, occupancy_type=OccupancyType.SHOP) is None

    def test_other_market_setups_ignored(self, other_market, shop_daily_setup):
        """Setups never leak across markets."""
        assert resolve_active_setup(
            market_id=other_market.id, occupancy_type=OccupancyType.SHOP
        ) is None

    def test_string_market_id_any_case(self, market, shop_daily_setup):
        """Market ids are compared as UUIDs, not strings."""
        resolved = resolve_active_setup(
            market_id=str(market.id).upper(),
            occupancy_type=OccupancyType.SHOP,
        )

        assert resolved == shop_daily_setup

    def test_or_raise(self, market):
        """Missing configuration raises ConfigurationMissingError."""
        with pytest.raises(ConfigurationMissingError):
            get_active_setup_or_raise(market_id=market.id, occupancy_type=OccupancyType.KIOSK)

    def test_list_active_setups(self, market, shop_daily_setup, wildcard_weekly_setup):
        """One entry per (occupancy, frequency), ordered by frequency."""
        setups = list_active_setups(market_id=market.id)

        assert setups == [shop_daily_setup, wildcard_weekly_setup]


# =============================================================================
# Setup Management Tests
# =============================================================================

@pytest.mark.django_db
class TestConfigureLevySetup:

    def test_defaults_chairman_to_market_chairman(self, market, chairman, shop_daily_setup):
        """Setup records the market's chairman when none is given."""
        assert shop_daily_setup.chairman == chairman
        assert shop_daily_setup.is_active

    def test_supersede_keeps_history(self, market, shop_daily_setup):
        """The superseded row stays in the history."""
        configure_levy_setup(
            market_id=market.id, amount=Decimal('600'), frequency='daily',
            occupancy_type=OccupancyType.SHOP,
        )

        history = list(get_setup_history(market_id=market.id))
        assert len(history) == 2
        assert sum(1 for s in history if s.is_active) == 1

    def test_other_triples_untouched(self, market, shop_daily_setup, wildcard_weekly_setup):
        """Configuring one triple does not deactivate others."""
        configure_levy_setup(
            market_id=market.id, amount=Decimal('700'), frequency='daily',
            occupancy_type=OccupancyType.KIOSK,
        )

        shop_daily_setup.refresh_from_db()
        wildcard_weekly_setup.refresh_from_db()
        assert shop_daily_setup.is_active
        assert wildcard_weekly_setup.is_active

    @pytest.mark.parametrize('amount', ['0', '-5', '1000000', 'abc'])
    def test_invalid_amount(self, market, amount):
        """Amount must be positive and below the maximum."""
        with pytest.raises(InvalidLevyAmountError):
            configure_levy_setup(market_id=market.id, amount=amount, frequency='daily')

    def test_unknown_market(self, db):
        """Unknown market raises MarketNotFoundError."""
        with pytest.raises(MarketNotFoundError):
            configure_levy_setup(market_id=uuid.uuid4(), amount=Decimal('100'), frequency='daily')

    def test_database_rejects_second_active_setup(self, market, shop_daily_setup):
        """Two active setups for one triple cannot coexist."""
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                LevySetup.objects.create(
                    market=market,
                    occupancy_type=OccupancyType.SHOP,
                    frequency='daily',
                    amount=Decimal('900'),
                )

    def test_database_rejects_second_active_wildcard_setup(self, market):
        """Two active all-occupancy setups for one frequency cannot coexist."""
        LevySetup.objects.create(market=market, occupancy_type=None, frequency='weekly', amount=Decimal('300'))

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                LevySetup.objects.create(
                    market=market,
                    occupancy_type=None,
                    frequency='weekly',
                    amount=Decimal('400'),
                )

    def test_wildcard_supersede_keeps_one_active(self, market):
        """Reconfiguring an all-occupancy rate deactivates the previous one."""
        first = configure_levy_setup(market_id=market.id, amount=Decimal('300'), frequency='weekly')
        second = configure_levy_setup(market_id=market.id, amount=Decimal('400'), frequency='weekly')

        first.refresh_from_db()
        assert not first.is_active
        assert second.is_active
        assert LevySetup.objects.filter(
            market=market, occupancy_type__isnull=True, frequency='weekly', is_active=True
        ).count() == 1

    def test_deactivate_is_idempotent(self, shop_daily_setup):
        """Deactivating twice keeps the first deactivation time."""
        first = deactivate_levy_setup(setup_id=shop_daily_setup.id)
        stamp = first.deactivated_at
        second = deactivate_levy_setup(setup_id=shop_daily_setup.id)

        assert not second.is_active
        assert second.deactivated_at == stamp

    def test_deactivate_unknown(self, db):
        """Unknown setup raises LevySetupNotFoundError."""
        with pytest.raises(LevySetupNotFoundError):
            deactivate_levy_setup(setup_id=uuid.uuid4())
