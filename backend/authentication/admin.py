from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('unique_id', 'email', 'role', 'admin', 'super_admin', 'overall_verification_status', 'locked')
    list_filter = ('role', 'overall_verification_status', 'locked', 'is_staff')
    search_fields = ('unique_id', 'first_name', 'last_name', 'email')
    ordering = ('unique_id',)
