from django.contrib import admin
from .models import (
    LocalGovernment,
    Market,
    MarketSection,
    Chairman,
    Caretaker,
    GoodBoy,
    Trader,
    TraderBuildingType,
)


@admin.register(LocalGovernment)
class LocalGovernmentAdmin(admin.ModelAdmin):
    list_display = ['name', 'state', 'code']
    search_fields = ['name', 'state']


class MarketSectionInline(admin.TabularInline):
    model = MarketSection
    extra = 0


@admin.register(Market)
class MarketAdmin(admin.ModelAdmin):
    """
    Markets with their cached snapshot.

    Snapshot fields are read-only here; they are recomputed from levy
    payments by the reports app.
    """

    list_display = [
        'name',
        'local_government',
        'chairman',
        'total_traders',
        'total_revenue',
        'compliance_rate',
        'snapshot_refreshed_at',
    ]
    list_filter = ['local_government']
    search_fields = ['name', 'location']
    inlines = [MarketSectionInline]
    readonly_fields = [
        'total_revenue',
        'total_traders',
        'compliant_traders',
        'non_compliant_traders',
        'compliance_rate',
        'snapshot_refreshed_at',
        'created_at',
        'updated_at',
    ]


@admin.register(Chairman)
class ChairmanAdmin(admin.ModelAdmin):
    list_display = ['user', 'local_government', 'title', 'created_at']
    search_fields = ['user__email', 'user__display_name']


@admin.register(Caretaker)
class CaretakerAdmin(admin.ModelAdmin):
    list_display = ['user', 'market', 'created_at']
    list_filter = ['market']
    search_fields = ['user__email', 'user__display_name']


@admin.register(GoodBoy)
class GoodBoyAdmin(admin.ModelAdmin):
    list_display = ['user', 'market', 'caretaker', 'is_active', 'created_at']
    list_filter = ['market', 'is_active']
    search_fields = ['user__email', 'user__display_name']


class TraderBuildingTypeInline(admin.TabularInline):
    model = TraderBuildingType
    extra = 0


@admin.register(Trader)
class TraderAdmin(admin.ModelAdmin):
    list_display = [
        'business_name',
        'trader_name',
        'tin',
        'market',
        'occupancy_type',
        'levy_amount',
        'levy_frequency',
        'is_active',
    ]
    list_filter = ['market', 'occupancy_type', 'is_active']
    search_fields = ['business_name', 'trader_name', 'tin']
    inlines = [TraderBuildingTypeInline]
    readonly_fields = ['qr_code', 'created_at', 'updated_at']
