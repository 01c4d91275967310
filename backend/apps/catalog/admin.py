from django.contrib import admin

from .models import SubscriptionPackage


@admin.register(SubscriptionPackage)
class SubscriptionPackageAdmin(admin.ModelAdmin):
    list_display = ('name', 'duration_months', 'price', 'is_active', 'created_at')
    list_filter = ('is_active', 'duration_months')
    search_fields = ('name', 'description')
    readonly_fields = ('created_at', 'updated_at')
    ordering = ('-created_at',)
    actions = ['activate', 'deactivate']

    @admin.action(description='Activate selected packages')
    def activate(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f"{updated} package(s) activated.")

    @admin.action(description='Deactivate selected packages')
    def deactivate(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} package(s) deactivated.")
