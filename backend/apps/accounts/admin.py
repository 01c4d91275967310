from django.contrib import admin

from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'role', 'is_active', 'date_joined')
    list_filter = ('role', 'is_active', 'is_staff')
    search_fields = ('email', 'name', 'phone')
    readonly_fields = ('date_joined', 'updated_at', 'last_login')
    exclude = ('password', 'groups', 'user_permissions')
    ordering = ('email',)
