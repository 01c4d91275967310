from django.contrib import admin

from .models import GatewayEventLog, Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('transaction_id', 'order_id', 'user', 'package', 'amount', 'status', 'paid_at', 'created_at')
    list_filter = ('status', 'payment_method', 'created_at')
    search_fields = ('transaction_id', 'order_id', 'user__email')
    raw_id_fields = ('user', 'package', 'membership')
    date_hierarchy = 'created_at'

    # Status changes come from gateway callbacks only
    readonly_fields = (
        'transaction_id', 'order_id', 'user', 'package', 'membership', 'amount', 'status',
        'payment_method', 'gateway_response', 'paid_at', 'created_at', 'updated_at',
    )

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(GatewayEventLog)
class GatewayEventLogAdmin(admin.ModelAdmin):
    list_display = ('gateway', 'event_type', 'reference', 'status_code', 'correlation_id', 'created_at')
    list_filter = ('gateway', 'status_code')
    search_fields = ('reference', 'correlation_id')
    readonly_fields = [f.name for f in GatewayEventLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
