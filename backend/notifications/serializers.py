from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for Notification model."""

    class Meta:
        model = Notification
        fields = [
            'id', 'title', 'message', 'notification_type', 'priority',
            'is_read', 'read_at', 'related_object_type', 'related_object_id', 'created_at'
        ]
        read_only_fields = fields


class MarkAsReadSerializer(serializers.Serializer):
    notification_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
