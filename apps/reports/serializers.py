"""
Serializers for reports app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting

Input Serializers:
    DashboardQuerySerializer - Dashboard filters and time frame
    ExportQuerySerializer - Export window, market/LGA filters and time zone
    MarketStatsQuerySerializer - Window for a single market's stats
    ChairmanDashboardQuerySerializer - Chairman to report on (admins only)

Response Serializers:
    DashboardResponseSerializer - Dashboard payload
    FilterOptionsSerializer - Values for the dashboard filters
    ExportReportSerializer - Export report payload
    MarketStatsSerializer - Revenue and compliance for one market
    ChairmanDashboardSerializer - Chairman dashboard payload
"""

from django.utils import timezone
from rest_framework import serializers

from .date_ranges import TimeFrame


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class DashboardQuerySerializer(serializers.Serializer):
    """
    Query Parameters:
        lga (str): Local government name
        market (str): Market name
        time_frame (str): TimeFrame value, default this_month
        year (int): Whole calendar year, overrides time_frame
        start_date (date): First day, custom time frame only
        end_date (date): Last day, custom time frame only
    """

    lga = serializers.CharField(required=False, allow_blank=True)
    market = serializers.CharField(required=False, allow_blank=True)
    time_frame = serializers.ChoiceField(
        choices=TimeFrame.choices,
        required=False,
        default=TimeFrame.THIS_MONTH
    )
    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start = attrs.get('start_date')
        end = attrs.get('end_date')
        if start is None and end is None:
            return attrs
        if attrs.get('time_frame') != TimeFrame.CUSTOM:
            raise serializers.ValidationError({
                'time_frame': 'start_date and end_date need the custom time frame'
            })
        if start is None or end is None:
            raise serializers.ValidationError({
                'start_date': 'A custom range needs both start_date and end_date'
            })
        if start > end:
            raise serializers.ValidationError({
                'start_date': 'Start date must be before end date'
            })
        return attrs


class DateWindowMixin:

    def validate(self, attrs):
        end = attrs.get('end_date') or timezone.localdate()
        start = attrs.get('start_date') or end.replace(day=1)
        if start > end:
            raise serializers.ValidationError({
                'start_date': 'Start date must be before end date'
            })
        attrs['start_date'] = start
        attrs['end_date'] = end
        return attrs


class ExportQuerySerializer(DateWindowMixin, serializers.Serializer):
    """Window defaults to the current month to date."""

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    market = serializers.UUIDField(required=False)
    lga = serializers.UUIDField(required=False)
    time_zone = serializers.CharField(required=False, allow_blank=True, max_length=64)


class MarketStatsQuerySerializer(DateWindowMixin, serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    all_time = serializers.BooleanField(required=False, default=False)


class ChairmanDashboardQuerySerializer(serializers.Serializer):
    chairman = serializers.UUIDField(required=False)


# =============================================================================
# Response Serializers
# =============================================================================

class DateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    is_preset = serializers.BooleanField()
    preset_label = serializers.CharField()
    range_granularity = serializers.CharField()
    day_count = serializers.IntegerField()


class CountCardSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    description = serializers.CharField()


class RevenueCardSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    time_frame = serializers.CharField()
    description = serializers.CharField()


class MarketSeriesSerializer(serializers.Serializer):
    market_name = serializers.CharField()
    color = serializers.CharField()
    values = serializers.ListField(
        child=serializers.DecimalField(max_digits=14, decimal_places=2)
    )


class LevyPaymentsChartSerializer(serializers.Serializer):
    months = serializers.ListField(child=serializers.CharField())
    market_data = MarketSeriesSerializer(many=True)


class MarketComplianceSerializer(serializers.Serializer):
    market_name = serializers.CharField()
    percentage = serializers.FloatField()
    color = serializers.CharField()


class ComplianceRatesSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    market_compliance = MarketComplianceSerializer(many=True)


class MarketLevySerializer(serializers.Serializer):
    market_name = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class LevyCollectionSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    market_levy = MarketLevySerializer(many=True)


class DashboardResponseSerializer(serializers.Serializer):
    market_count = CountCardSerializer()
    total_revenue = RevenueCardSerializer()
    levy_payments = LevyPaymentsChartSerializer()
    compliance_rates = ComplianceRatesSerializer()
    levy_collection = LevyCollectionSerializer()
    date_range = DateRangeSerializer()
    generated_at = serializers.DateTimeField()


class TimeFrameOptionSerializer(serializers.Serializer):
    value = serializers.CharField()
    label = serializers.CharField()


class FilterOptionsSerializer(serializers.Serializer):
    lgas = serializers.ListField(child=serializers.CharField())
    markets = serializers.ListField(child=serializers.CharField())
    years = serializers.ListField(child=serializers.IntegerField())
    time_frames = TimeFrameOptionSerializer(many=True)


class MarketStatsSerializer(serializers.Serializer):
    market_id = serializers.UUIDField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    transaction_count = serializers.IntegerField()
    total_traders = serializers.IntegerField()
    compliant_traders = serializers.IntegerField()
    non_compliant_traders = serializers.IntegerField()
    compliance_rate = serializers.FloatField()


class MarketDetailSerializer(serializers.Serializer):
    market_id = serializers.UUIDField()
    market_name = serializers.CharField()
    location = serializers.CharField()
    total_traders = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    compliance_rate = serializers.FloatField()
    transaction_count = serializers.IntegerField()


class MonthlyRevenueSerializer(serializers.Serializer):
    market_id = serializers.UUIDField()
    market_name = serializers.CharField()
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    transaction_count = serializers.IntegerField()


class ExportReportSerializer(serializers.Serializer):
    report_date = serializers.DateTimeField()
    time_zone = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    market_count = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_transactions = serializers.IntegerField()
    total_traders = serializers.IntegerField()
    compliant_traders = serializers.IntegerField()
    average_compliance_rate = serializers.FloatField()
    daily_average_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    revenue_by_payment_method = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=2)
    )
    market_details = MarketDetailSerializer(many=True)
    monthly_revenue = MonthlyRevenueSerializer(many=True)


class ChairmanRecentPaymentSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    trader_name = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.CharField()
    status = serializers.CharField()
    payment_date = serializers.DateTimeField()
    transaction_reference = serializers.CharField()


class ChairmanDashboardSerializer(serializers.Serializer):
    chairman_id = serializers.UUIDField()
    chairman_name = serializers.CharField()
    market_id = serializers.UUIDField(allow_null=True)
    market_name = serializers.CharField(allow_null=True)
    total_traders = serializers.IntegerField()
    total_caretakers = serializers.IntegerField()
    active_levy_setups = serializers.IntegerField()
    daily_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    weekly_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    monthly_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    daily_revenue_change = serializers.FloatField()
    traders_change = serializers.FloatField()
    recent_payments = ChairmanRecentPaymentSerializer(many=True)


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
