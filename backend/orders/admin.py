from django.contrib import admin
from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'marketer', 'device_type', 'quantity', 'sold_amount', 'status', 'commission_paid')
    list_filter = ('status', 'commission_paid', 'device_type')
    search_fields = ('marketer__unique_id', 'marketer__email', 'device_name')
