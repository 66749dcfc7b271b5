from rest_framework import serializers

from authentication.serializers import UserLiteSerializer
from .models import CommissionRate, Wallet, WalletTransaction, WithdrawalRequest


class CommissionRateSerializer(serializers.ModelSerializer):
    class Meta:
        model = CommissionRate
        fields = ['id', 'device_type', 'marketer_rate', 'admin_rate', 'superadmin_rate', 'updated_at']
        read_only_fields = ['updated_at']

    def validate(self, attrs):
        for tier in ('marketer_rate', 'admin_rate', 'superadmin_rate'):
            if tier in attrs and attrs[tier] < 0:
                raise serializers.ValidationError({tier: 'Rate cannot be negative.'})
        return attrs


class WalletTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = WalletTransaction
        fields = ['id', 'amount', 'transaction_type', 'meta', 'order', 'created_at']
        read_only_fields = fields


class WithdrawalRequestSerializer(serializers.ModelSerializer):
    user = UserLiteSerializer(read_only=True)
    reviewed_by = UserLiteSerializer(read_only=True)
    total_deducted = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = WithdrawalRequest
        fields = [
            'id', 'user', 'amount_requested', 'fee', 'net_amount', 'total_deducted',
            'account_name', 'account_number', 'bank_name',
            'status', 'reviewed_by', 'reviewed_at', 'requested_at',
        ]
        read_only_fields = fields


class WithdrawalCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    account_name = serializers.CharField(max_length=150)
    account_number = serializers.CharField(max_length=30)
    bank_name = serializers.CharField(max_length=150)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero.')
        return value


class WithdrawalReviewSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['approve', 'reject'])


class WalletSerializer(serializers.ModelSerializer):
    user = UserLiteSerializer(read_only=True)

    class Meta:
        model = Wallet
        fields = ['id', 'user', 'total_balance', 'available_balance', 'withheld_balance', 'updated_at']
        read_only_fields = fields


class WalletDetailSerializer(WalletSerializer):
    """Wallet with its most recent ledger entries and withdrawals."""
    recent_transactions = serializers.SerializerMethodField()
    recent_withdrawals = serializers.SerializerMethodField()

    class Meta(WalletSerializer.Meta):
        fields = WalletSerializer.Meta.fields + ['recent_transactions', 'recent_withdrawals']
        read_only_fields = fields

    def get_recent_transactions(self, obj):
        entries = WalletTransaction.objects.filter(user=obj.user)[:20]
        return WalletTransactionSerializer(entries, many=True).data

    def get_recent_withdrawals(self, obj):
        requests = WithdrawalRequest.objects.filter(user=obj.user)[:10]
        return WithdrawalRequestSerializer(requests, many=True).data


class BalanceMoveResponseSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    wallet = WalletSerializer()
