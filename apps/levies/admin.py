from django.contrib import admin
from django.utils.html import format_html
from .models import LevySetup, LevyPayment, PaymentStatus


@admin.register(LevySetup)
class LevySetupAdmin(admin.ModelAdmin):
    """Levy rates. Superseded rates stay listed as inactive."""

    list_display = [
        'market',
        'occupancy_type',
        'frequency',
        'amount',
        'is_active',
        'created_at',
        'deactivated_at',
    ]
    list_filter = ['is_active', 'frequency', 'occupancy_type', 'market']
    search_fields = ['market__name']
    readonly_fields = ['created_at', 'updated_at', 'deactivated_at']

    def has_delete_permission(self, request, obj=None):
        """Rates are deactivated, not deleted."""
        return False


@admin.register(LevyPayment)
class LevyPaymentAdmin(admin.ModelAdmin):
    list_display = [
        'transaction_reference',
        'market',
        'trader',
        'amount',
        'period',
        'payment_method',
        'status_badge',
        'payment_date',
        'is_setup_record',
    ]
    list_filter = ['status', 'payment_method', 'period', 'is_setup_record', 'market']
    search_fields = ['transaction_reference', 'trader__business_name', 'trader__tin']
    date_hierarchy = 'payment_date'
    readonly_fields = [
        'transaction_reference',
        'levy_setup',
        'confirmed_at',
        'confirmed_by',
        'created_at',
        'updated_at',
    ]

    def status_badge(self, obj):
        """Display payment status as colored badge."""
        colors = {
            PaymentStatus.PENDING: ('#E5C49A', '#2C1810'),
            PaymentStatus.UNPAID: ('#E5C49A', '#2C1810'),
            PaymentStatus.PAID: ('#6B8E5E', 'white'),
            PaymentStatus.FAILED: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
