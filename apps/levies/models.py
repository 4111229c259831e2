from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid

from apps.markets.models import OccupancyType
from .choices import PaymentFrequency, PaymentMethod, PaymentStatus

__all__ = [
    'PaymentFrequency',
    'PaymentMethod',
    'PaymentStatus',
    'LevySetup',
    'LevyPayment',
    'ALLOWED_TRANSITIONS',
]


# Paid and failed are terminal
ALLOWED_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.UNPAID: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: set(),
    PaymentStatus.FAILED: set(),
}


class LevySetup(models.Model):
    """
    Levy rate a market charges for an occupancy type and frequency.

    A null occupancy_type applies to every occupancy type. Rates are
    superseded by deactivating the old row, never by deleting it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    market = models.ForeignKey(
        'markets.Market',
        on_delete=models.CASCADE,
        related_name='levy_setups'
    )
    chairman = models.ForeignKey(
        'markets.Chairman',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='levy_setups'
    )
    occupancy_type = models.CharField(
        max_length=20,
        choices=OccupancyType.choices,
        null=True,
        blank=True
    )
    frequency = models.CharField(max_length=20, choices=PaymentFrequency.choices)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    is_active = models.BooleanField(default=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='levy_setups_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'levy_setups'
        constraints = [
            models.UniqueConstraint(
                fields=['market', 'occupancy_type', 'frequency'],
                condition=Q(is_active=True),
                name='unique_active_levy_setup',
            ),
            # Nulls are distinct in the constraint above
            models.UniqueConstraint(
                fields=['market', 'frequency'],
                condition=Q(is_active=True, occupancy_type__isnull=True),
                name='unique_active_wildcard_levy_setup',
            ),
        ]
        indexes = [
            models.Index(fields=['market', 'is_active', 'occupancy_type'], name='levy_setups_active_idx'),
            models.Index(fields=['market', 'frequency', 'created_at'], name='levy_setups_history_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        occupancy = self.get_occupancy_type_display() if self.occupancy_type else 'All occupancies'
        return f"{self.market.name}: {self.amount} {self.get_frequency_display()} ({occupancy})"

    @property
    def is_setup_record(self):
        return True

    def deactivate(self):
        self.is_active = False
        self.deactivated_at = timezone.now()
        self.save(update_fields=['is_active', 'deactivated_at', 'updated_at'])


class LevyPaymentQuerySet(models.QuerySet):

    def collections(self):
        """Actual collections, excluding setup mirror rows."""
        return self.filter(is_setup_record=False)

    def paid(self):
        """Rows that count as revenue."""
        return self.collections().filter(status=PaymentStatus.PAID)

    def outstanding(self):
        return self.collections().filter(status__in=[
            PaymentStatus.PENDING,
            PaymentStatus.UNPAID,
            PaymentStatus.FAILED,
        ])

    def in_window(self, start_date, end_date):
        """Filter on payment_date with inclusive calendar-date bounds."""
        return self.filter(
            payment_date__date__gte=start_date,
            payment_date__date__lte=end_date,
        )


class LevyPayment(models.Model):
    """
    A levy collection, or a setup mirror row when is_setup_record is set.

    Mirror rows carry configuration only and must never count as revenue;
    aggregate through LevyPayment.objects.paid().
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    market = models.ForeignKey(
        'markets.Market',
        on_delete=models.PROTECT,
        related_name='levy_payments'
    )
    trader = models.ForeignKey(
        'markets.Trader',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='levy_payments'
    )
    good_boy = models.ForeignKey(
        'markets.GoodBoy',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='levy_payments'
    )
    chairman = models.ForeignKey(
        'markets.Chairman',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='levy_payments'
    )
    levy_setup = models.ForeignKey(
        LevySetup,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )

    # Financial details
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    has_incentive = models.BooleanField(default=False)
    incentive_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True
    )

    occupancy_type = models.CharField(
        max_length=20,
        choices=OccupancyType.choices,
        null=True,
        blank=True
    )
    period = models.CharField(max_length=20, choices=PaymentFrequency.choices)
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH
    )
    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    transaction_reference = models.CharField(max_length=64, unique=True)

    # Dates
    payment_date = models.DateTimeField(default=timezone.now)
    due_date = models.DateTimeField(null=True, blank=True)
    collection_date = models.DateTimeField(null=True, blank=True)

    notes = models.CharField(max_length=500, blank=True)
    qr_code_scanned = models.BooleanField(default=False)
    is_setup_record = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    # Confirmation
    confirmed_at = models.DateTimeField(null=True, blank=True)
    confirmed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='confirmed_levy_payments'
    )
    failure_reason = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LevyPaymentQuerySet.as_manager()

    class Meta:
        db_table = 'levy_payments'
        indexes = [
            models.Index(fields=['market', 'status', 'payment_date'], name='levy_pay_market_status_idx'),
            models.Index(fields=['trader', 'payment_date'], name='levy_pay_trader_date_idx'),
            models.Index(fields=['good_boy', 'payment_date'], name='levy_pay_goodboy_date_idx'),
            models.Index(fields=['is_setup_record', 'status'], name='levy_pay_setup_status_idx'),
        ]
        ordering = ['-payment_date', '-created_at']

    def __str__(self):
        who = self.trader.business_name if self.trader else 'setup'
        return f"{self.transaction_reference} {self.amount} ({self.status}, {who})"

    def can_transition_to(self, new_status):
        if self.is_setup_record:
            return False
        return new_status in ALLOWED_TRANSITIONS.get(self.status, set())

    def mark_paid(self, confirmed_by=None):
        """Mark payment as paid."""
        self.status = PaymentStatus.PAID
        self.confirmed_at = timezone.now()
        self.confirmed_by = confirmed_by
        self.save(update_fields=['status', 'confirmed_at', 'confirmed_by', 'updated_at'])

    def mark_failed(self, reason=''):
        """Mark payment as failed."""
        self.status = PaymentStatus.FAILED
        self.failure_reason = reason
        self.save(update_fields=['status', 'failure_reason', 'updated_at'])
