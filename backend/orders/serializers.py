from rest_framework import serializers

from authentication.serializers import UserLiteSerializer
from .models import Order


class OrderSerializer(serializers.ModelSerializer):
    marketer = UserLiteSerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'marketer', 'device_type', 'device_name', 'quantity', 'sold_amount',
            'status', 'commission_paid', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CommissionCreditSerializer(serializers.Serializer):
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    available = serializers.DecimalField(max_digits=14, decimal_places=2)
    withheld = serializers.DecimalField(max_digits=14, decimal_places=2)
    credited = serializers.BooleanField()


class ReleaseConfirmationSerializer(serializers.Serializer):
    order = OrderSerializer()
    commissions = serializers.DictField(child=CommissionCreditSerializer())
