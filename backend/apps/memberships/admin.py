from django.contrib import admin
from django.utils import timezone

from .models import Membership


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'package', 'status', 'effective_status', 'started_at', 'expires_at')
    list_filter = ('status', 'package')
    search_fields = ('user__email', 'package__name')
    raw_id_fields = ('user', 'package')
    readonly_fields = ('created_at', 'updated_at')
    actions = ['cancel_memberships']

    @admin.display(description='Effective status')
    def effective_status(self, obj):
        return obj.effective_status_at(timezone.now())

    @admin.action(description='Cancel selected memberships')
    def cancel_memberships(self, request, queryset):
        updated = queryset.update(status=Membership.Status.CANCELLED)
        self.message_user(request, f"{updated} membership(s) cancelled.")
