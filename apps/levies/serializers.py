"""
Serializers for the levies app.

Input Serializers:
    LevySetupQuerySerializer - market filter for setup listing
    ConfigureLevySetupSerializer - new rate for a market
    ResolveSetupQuerySerializer - market, occupancy and frequency to resolve
    LevyPaymentFilterSerializer - payment listing filters
    RecordPaymentSerializer - levy collection
    ScanPaymentSerializer - levy collection identified by QR payload
    FailPaymentSerializer - reason for rejecting a pending payment
    DateWindowQuerySerializer - inclusive start/end dates

Response Serializers:
    LevySetupSerializer, LevyPaymentSerializer,
    TraderLevyBreakdownSerializer, CollectorSummarySerializer
"""

from datetime import timedelta

from django.utils import timezone
from rest_framework import serializers

from apps.markets.models import OccupancyType
from .models import LevySetup, LevyPayment, PaymentFrequency, PaymentMethod, PaymentStatus


# =============================================================================
# Input Serializers
# =============================================================================

class LevySetupQuerySerializer(serializers.Serializer):
    market = serializers.UUIDField(required=False)
    include_inactive = serializers.BooleanField(required=False, default=False)


class ConfigureLevySetupSerializer(serializers.Serializer):
    """
    Validate a new levy rate.

    Fields:
        market (UUID): Market the rate applies to
        amount (Decimal): Amount per period
        frequency (str): PaymentFrequency value
        occupancy_type (str|null): OccupancyType value, null for all occupancies
    """

    market = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    frequency = serializers.ChoiceField(choices=PaymentFrequency.choices)
    occupancy_type = serializers.ChoiceField(
        choices=OccupancyType.choices,
        required=False,
        allow_null=True,
        default=None
    )


class ResolveSetupQuerySerializer(serializers.Serializer):
    market = serializers.UUIDField()
    occupancy_type = serializers.ChoiceField(choices=OccupancyType.choices)
    frequency = serializers.ChoiceField(choices=PaymentFrequency.choices, required=False)


class LevyPaymentFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for payment listing.

    Query Parameters:
        market (UUID), trader (UUID), good_boy (UUID)
        status (str): PaymentStatus value
        date_from (date), date_to (date): payment date window
    """

    market = serializers.UUIDField(required=False)
    trader = serializers.UUIDField(required=False)
    good_boy = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })
        return attrs


class RecordPaymentSerializer(serializers.Serializer):
    """Validate a levy collection. Amount defaults to the resolved rate."""

    trader = serializers.UUIDField()
    market = serializers.UUIDField()
    good_boy = serializers.UUIDField(required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    transaction_reference = serializers.CharField(max_length=64, required=False, allow_blank=True)
    incentive_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True
    )
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    collection_date = serializers.DateTimeField(required=False, allow_null=True)


class ScanPaymentSerializer(serializers.Serializer):
    qr_payload = serializers.CharField(max_length=100)
    good_boy = serializers.UUIDField(required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class FailPaymentSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class DateWindowQuerySerializer(serializers.Serializer):
    """
    Inclusive date window, defaulting to the last 30 days.

    Query Parameters:
        start_date (date), end_date (date)
    """

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        end = attrs.get('end_date') or timezone.localdate()
        start = attrs.get('start_date') or end - timedelta(days=29)
        if start > end:
            raise serializers.ValidationError({
                'start_date': 'Start date must be before end date'
            })
        attrs['start_date'] = start
        attrs['end_date'] = end
        return attrs


# =============================================================================
# Response Serializers
# =============================================================================

class LevySetupSerializer(serializers.ModelSerializer):
    market_name = serializers.CharField(source='market.name', read_only=True)

    class Meta:
        model = LevySetup
        fields = [
            'id',
            'market',
            'market_name',
            'chairman',
            'occupancy_type',
            'frequency',
            'amount',
            'is_active',
            'deactivated_at',
            'created_at',
        ]
        read_only_fields = fields


class LevyPaymentSerializer(serializers.ModelSerializer):
    trader_business_name = serializers.CharField(
        source='trader.business_name', read_only=True, default=None
    )

    class Meta:
        model = LevyPayment
        fields = [
            'id',
            'market',
            'trader',
            'trader_business_name',
            'good_boy',
            'chairman',
            'levy_setup',
            'amount',
            'has_incentive',
            'incentive_amount',
            'occupancy_type',
            'period',
            'payment_method',
            'status',
            'transaction_reference',
            'payment_date',
            'due_date',
            'collection_date',
            'notes',
            'qr_code_scanned',
            'is_setup_record',
            'confirmed_at',
            'failure_reason',
            'created_at',
        ]
        read_only_fields = fields


class RecentPaymentSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = serializers.CharField()
    period = serializers.CharField()
    payment_method = serializers.CharField()
    transaction_reference = serializers.CharField()
    payment_date = serializers.DateTimeField()
    due_date = serializers.DateTimeField(allow_null=True)


class TraderLevyBreakdownSerializer(serializers.Serializer):
    trader_id = serializers.UUIDField()
    business_name = serializers.CharField()
    market_id = serializers.UUIDField()
    rate_amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    rate_frequency = serializers.CharField(allow_null=True)
    rate_source = serializers.CharField(allow_null=True)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    outstanding_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    overdue_days = serializers.IntegerField()
    status = serializers.CharField()
    last_payment_date = serializers.DateTimeField(allow_null=True)
    next_due_date = serializers.DateTimeField(allow_null=True)
    is_due = serializers.BooleanField()
    recent_payments = RecentPaymentSerializer(many=True)


class CollectorSummarySerializer(serializers.Serializer):
    good_boy_id = serializers.UUIDField()
    market_id = serializers.UUIDField()
    market_name = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    total_collected = serializers.DecimalField(max_digits=14, decimal_places=2)
    transaction_count = serializers.IntegerField()
    today_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    today_count = serializers.IntegerField()
    today_collections = serializers.ListField(child=serializers.DictField())


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
    code = serializers.CharField(required=False)
