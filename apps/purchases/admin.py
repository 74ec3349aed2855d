"""
Django Admin configuration for Purchases app.
Purchases are write-once, so the admin is read-only.
"""

from django.contrib import admin

from apps.purchases.infrastructure.persistence.models import PurchaseRecord


@admin.register(PurchaseRecord)
class PurchaseRecordAdmin(admin.ModelAdmin):
    """Admin interface for PurchaseRecord model."""

    list_display = ('description', 'transaction_date', 'get_amount', 'has_client_key', 'created_at')
    list_filter = ('transaction_date', 'currency')
    search_fields = ('description', 'idempotency_key')
    date_hierarchy = 'transaction_date'
    ordering = ('-transaction_date', '-created_at')
    readonly_fields = (
        'id',
        'description',
        'transaction_date',
        'amount',
        'currency',
        'idempotency_key',
        'created_at',
    )

    fieldsets = (
        ('Purchase', {
            'fields': ('description', 'transaction_date', 'amount', 'currency')
        }),
        ('Metadata', {
            'fields': ('id', 'idempotency_key', 'created_at'),
            'classes': ('collapse',)
        }),
    )

    def get_amount(self, obj):
        return f"{obj.currency} {obj.amount:,.2f}"
    get_amount.short_description = 'Amount'
    get_amount.admin_order_field = 'amount'

    @admin.display(boolean=True, description='Client key')
    def has_client_key(self, obj):
        return bool(obj.idempotency_key) and not obj.idempotency_key.startswith('auto-')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
