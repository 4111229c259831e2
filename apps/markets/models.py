from django.db import models
from django.db.models import Q
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid

from apps.levies.choices import PaymentFrequency


class OccupancyType(models.TextChoices):
    OPEN_SPACE = 'open_space', 'Open Space'
    KIOSK = 'kiosk', 'Kiosk'
    SHOP = 'shop', 'Shop'
    WAREHOUSE = 'warehouse', 'Warehouse'


class BuildingType(models.TextChoices):
    OPEN_SPACE = 'open_space', 'Open Space'
    KIOSK = 'kiosk', 'Kiosk'
    SHOP = 'shop', 'Shop'
    WAREHOUSE = 'warehouse', 'Warehouse'


class LocalGovernment(models.Model):
    """Local government area that owns a set of markets."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150, unique=True)
    state = models.CharField(max_length=100, blank=True)
    code = models.CharField(max_length=20, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'local_governments'
        ordering = ['name']

    def __str__(self):
        return self.name


class Chairman(models.Model):
    """Chairman profile. Governs at most one market via Market.chairman."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='chairman_profile'
    )
    local_government = models.ForeignKey(
        LocalGovernment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='chairmen'
    )
    title = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'chairmen'
        ordering = ['-created_at']

    def __str__(self):
        return self.user.get_display_name()


class Market(models.Model):
    """
    A market under a local government.

    The total_* / compliance fields are a snapshot cache refreshed by
    reports; LevyPayment rows remain the source of truth.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    location = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    capacity = models.PositiveIntegerField(default=0)

    local_government = models.ForeignKey(
        LocalGovernment,
        on_delete=models.PROTECT,
        related_name='markets'
    )
    chairman = models.OneToOneField(
        Chairman,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='market'
    )
    caretaker = models.ForeignKey(
        'markets.Caretaker',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='lead_markets'
    )

    # Snapshot cache
    total_revenue = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )
    total_traders = models.PositiveIntegerField(default=0)
    compliant_traders = models.PositiveIntegerField(default=0)
    non_compliant_traders = models.PositiveIntegerField(default=0)
    compliance_rate = models.DecimalField(
        max_digits=5,
        decimal_places=1,
        default=Decimal('0.0')
    )
    snapshot_refreshed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'markets'
        constraints = [
            models.UniqueConstraint(
                fields=['local_government', 'name'],
                name='unique_market_name_per_lga',
            ),
        ]
        indexes = [
            models.Index(fields=['name'], name='markets_name_idx'),
            models.Index(fields=['local_government', 'name'], name='markets_lga_name_idx'),
        ]
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.local_government.name})"

    def occupancy_rate(self):
        """Traders per unit of capacity as a percentage (0 when capacity is unset)."""
        if not self.capacity:
            return 0.0
        return round(self.traders.count() / self.capacity * 100, 1)


class MarketSection(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    market = models.ForeignKey(
        Market,
        on_delete=models.CASCADE,
        related_name='sections'
    )
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'market_sections'
        unique_together = [['market', 'name']]
        ordering = ['name']

    def __str__(self):
        return f"{self.market.name} / {self.name}"


class Caretaker(models.Model):
    """Caretaker profile, attached to one market."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='caretaker_profile'
    )
    market = models.ForeignKey(
        Market,
        on_delete=models.CASCADE,
        related_name='caretakers'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'caretakers'
        indexes = [
            models.Index(fields=['market', 'created_at'], name='caretakers_market_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.user.get_display_name()


class GoodBoy(models.Model):
    """Field levy collector working a market, optionally under a caretaker."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='goodboy_profile'
    )
    market = models.ForeignKey(
        Market,
        on_delete=models.CASCADE,
        related_name='good_boys'
    )
    caretaker = models.ForeignKey(
        Caretaker,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='good_boys'
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'good_boys'
        ordering = ['-created_at']

    def __str__(self):
        return self.user.get_display_name()


class Trader(models.Model):
    """
    A trader registered in a market.

    levy_amount and levy_frequency form an optional trader-level rate that
    takes precedence over the market's levy setup. Both are set or neither.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='trader_profile'
    )
    market = models.ForeignKey(
        Market,
        on_delete=models.PROTECT,
        related_name='traders'
    )
    caretaker = models.ForeignKey(
        Caretaker,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='traders'
    )
    section = models.ForeignKey(
        MarketSection,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='traders'
    )

    trader_name = models.CharField(max_length=150)
    business_name = models.CharField(max_length=200)
    business_type = models.CharField(max_length=100, blank=True)
    tin = models.CharField(max_length=20, unique=True)
    occupancy_type = models.CharField(
        max_length=20,
        choices=OccupancyType.choices,
        default=OccupancyType.OPEN_SPACE
    )

    # Trader-level override
    levy_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    levy_frequency = models.CharField(
        max_length=20,
        choices=PaymentFrequency.choices,
        null=True,
        blank=True
    )

    qr_code = models.CharField(max_length=64, blank=True, db_index=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'traders'
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(levy_amount__isnull=True, levy_frequency__isnull=True)
                    | Q(levy_amount__isnull=False, levy_frequency__isnull=False)
                ),
                name='trader_levy_override_complete',
            ),
        ]
        indexes = [
            models.Index(fields=['market', 'occupancy_type'], name='traders_market_occupancy_idx'),
            models.Index(fields=['market', 'created_at'], name='traders_market_created_idx'),
            models.Index(fields=['caretaker'], name='traders_caretaker_idx'),
        ]
        ordering = ['business_name']

    def __str__(self):
        return f"{self.business_name} ({self.tin})"

    def clean(self):
        if (self.levy_amount is None) != (self.levy_frequency is None):
            raise ValidationError(
                'Trader levy override needs both an amount and a frequency.'
            )

    def save(self, *args, **kwargs):
        """Derive the QR payload from the id if not set."""
        if not self.qr_code:
            self.qr_code = f"TRADER:{self.id}"
        super().save(*args, **kwargs)

    @property
    def has_levy_override(self):
        return self.levy_amount is not None and self.levy_frequency is not None


class TraderBuildingType(models.Model):
    """Count of one kind of building a trader occupies."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trader = models.ForeignKey(
        Trader,
        on_delete=models.CASCADE,
        related_name='building_types'
    )
    building_type = models.CharField(max_length=20, choices=BuildingType.choices)
    count = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )

    class Meta:
        db_table = 'trader_building_types'
        unique_together = [['trader', 'building_type']]

    def __str__(self):
        return f"{self.count} x {self.get_building_type_display()}"
