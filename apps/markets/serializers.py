from decimal import Decimal
from rest_framework import serializers
from apps.levies.choices import PaymentFrequency
from .models import (
    Market,
    Trader,
    TraderBuildingType,
    OccupancyType,
    BuildingType,
)


# =============================================================================
# Input Serializers
# =============================================================================

class MarketFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for market listing.

    Query Parameters:
        lga (str): Local government name (case-insensitive)
        search (str): Substring of the market name
    """

    lga = serializers.CharField(max_length=150, required=False)
    search = serializers.CharField(max_length=200, required=False)


class TraderFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for trader listing.

    Query Parameters:
        market (UUID): Only traders of this market
        caretaker (UUID): Only traders under this caretaker
        occupancy_type (str): OccupancyType value
        search (str): Substring of business name, trader name or TIN
    """

    market = serializers.UUIDField(required=False)
    caretaker = serializers.UUIDField(required=False)
    occupancy_type = serializers.ChoiceField(choices=OccupancyType.choices, required=False)
    search = serializers.CharField(max_length=200, required=False)


class BuildingTypeInputSerializer(serializers.Serializer):
    building_type = serializers.ChoiceField(choices=BuildingType.choices)
    count = serializers.IntegerField(min_value=1, default=1)


class TraderCreateSerializer(serializers.Serializer):
    """Validate input for registering a trader."""

    market = serializers.UUIDField()
    trader_name = serializers.CharField(max_length=150)
    business_name = serializers.CharField(max_length=200)
    business_type = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    tin = serializers.CharField(max_length=20)
    occupancy_type = serializers.ChoiceField(choices=OccupancyType.choices)
    caretaker = serializers.UUIDField(required=False, allow_null=True)
    section = serializers.UUIDField(required=False, allow_null=True)
    building_types = BuildingTypeInputSerializer(many=True, required=False)
    levy_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.01'),
        required=False,
        allow_null=True
    )
    levy_frequency = serializers.ChoiceField(
        choices=PaymentFrequency.choices,
        required=False,
        allow_null=True
    )

    def validate(self, attrs):
        """Override amount and frequency come together."""
        has_amount = attrs.get('levy_amount') is not None
        has_frequency = attrs.get('levy_frequency') is not None
        if has_amount != has_frequency:
            raise serializers.ValidationError({
                'levy_frequency': 'Levy amount and frequency must be given together'
            })
        return attrs


# =============================================================================
# Output Serializers
# =============================================================================

class TraderBuildingTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = TraderBuildingType
        fields = ['building_type', 'count']


class MarketSerializer(serializers.ModelSerializer):
    local_government_name = serializers.CharField(source='local_government.name', read_only=True)
    chairman_id = serializers.UUIDField(read_only=True, allow_null=True)
    occupancy_rate = serializers.SerializerMethodField()

    class Meta:
        model = Market
        fields = [
            'id',
            'name',
            'location',
            'description',
            'capacity',
            'local_government',
            'local_government_name',
            'chairman_id',
            'caretaker',
            'total_revenue',
            'total_traders',
            'compliant_traders',
            'non_compliant_traders',
            'compliance_rate',
            'occupancy_rate',
            'snapshot_refreshed_at',
            'created_at',
        ]
        read_only_fields = fields

    def get_occupancy_rate(self, obj) -> float:
        return obj.occupancy_rate()


class TraderSerializer(serializers.ModelSerializer):
    market_name = serializers.CharField(source='market.name', read_only=True)
    building_types = TraderBuildingTypeSerializer(many=True, read_only=True)

    class Meta:
        model = Trader
        fields = [
            'id',
            'trader_name',
            'business_name',
            'business_type',
            'tin',
            'occupancy_type',
            'market',
            'market_name',
            'caretaker',
            'section',
            'levy_amount',
            'levy_frequency',
            'qr_code',
            'building_types',
            'is_active',
            'created_at',
        ]
        read_only_fields = fields
