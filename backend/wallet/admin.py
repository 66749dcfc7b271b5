from django.contrib import admin
from .models import CommissionRate, Wallet, WalletTransaction, WithdrawalRequest


@admin.register(CommissionRate)
class CommissionRateAdmin(admin.ModelAdmin):
    list_display = ('device_type', 'marketer_rate', 'admin_rate', 'superadmin_rate', 'updated_at')
    search_fields = ('device_type',)


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    list_display = ('user', 'total_balance', 'available_balance', 'withheld_balance', 'updated_at')
    search_fields = ('user__unique_id', 'user__email')
    readonly_fields = ('total_balance', 'available_balance', 'withheld_balance')
    raw_id_fields = ('user',)


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'transaction_type', 'amount', 'order', 'created_at')
    list_filter = ('transaction_type',)
    search_fields = ('user__unique_id', 'user__email')
    raw_id_fields = ('user', 'order')

    # Ledger rows are append-only
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(WithdrawalRequest)
class WithdrawalRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'amount_requested', 'fee', 'status', 'requested_at', 'reviewed_by')
    list_filter = ('status',)
    search_fields = ('user__unique_id', 'user__email', 'account_number')
    raw_id_fields = ('user', 'reviewed_by')
