import json
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.db import close_old_connections
from django.utils import timezone

from .group_utils import NotificationGroupManager

security_logger = logging.getLogger('security')


class NotificationConsumer(AsyncWebsocketConsumer):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.group_manager = NotificationGroupManager()
        self.user = None
        self.group_name = None

    @database_sync_to_async
    def get_user_from_token(self, token_key):
        """Resolve the DRF token passed in the query string to an active user."""
        from rest_framework.authtoken.models import Token

        token = Token.objects.select_related('user').filter(key=token_key).first()
        if token is None or not token.user.is_active:
            return None
        return token.user

    async def connect(self):
        query_string = self.scope["query_string"].decode()
        token_key = parse_qs(query_string).get("token", [None])[0]

        client_ip = (self.scope.get('client') or ['unknown'])[0]
        security_logger.info(f"WebSocket connection attempt from {client_ip}")

        if token_key:
            close_old_connections()
            self.user = await self.get_user_from_token(token_key)

        if not self.user:
            security_logger.warning("WebSocket connection rejected: user not authenticated or inactive")
            await self.close()
            return

        self.group_name = await self.group_manager.add_user_to_group(self.user, self.channel_name)
        await self.accept()

        await self.send(text_data=json.dumps({
            "message": "WebSocket connected!",
            "user_id": self.user.id,
            "unique_id": self.user.unique_id,
            "group": self.group_name,
            "timestamp": timezone.now().isoformat(),
        }))

        # Push unread notifications so the client can render current state
        batch = await self._get_unread_notifications()
        await self.send(text_data=json.dumps({
            "type": "notification_batch",
            "notifications": batch,
            "count": len(batch)
        }, default=str))

    async def disconnect(self, close_code):
        if self.user and self.group_name:
            await self.group_manager.remove_user_from_group(self.user, self.channel_name)
            security_logger.info(f"WebSocket user {self.user.id} disconnected")

    @database_sync_to_async
    def _get_unread_notifications(self):
        """Return last 50 unread notifications as plain dicts"""
        from .models import Notification
        unread = (
            Notification.objects
            .filter(recipient=self.user, is_read=False)
            .order_by('-created_at')
            .values(
                'id', 'title', 'message', 'notification_type', 'priority',
                'is_read', 'related_object_type', 'related_object_id', 'created_at'
            )[:50]
        )
        return list(unread)

    @database_sync_to_async
    def _mark_notification_as_read(self, notification_id):
        from .models import Notification
        notification = Notification.objects.filter(id=notification_id, recipient=self.user).first()
        if notification is None:
            return False
        notification.mark_as_read()
        return True

    async def receive(self, text_data):
        """Handle incoming WebSocket messages from client"""
        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            security_logger.warning(f"WebSocket invalid JSON received from user {self.user.id}")
            await self.send(text_data=json.dumps({
                "type": "error",
                "message": "Invalid JSON format"
            }))
            return

        message_type = data.get('type')
        if message_type == 'ping':
            await self.send(text_data=json.dumps({
                "type": "pong",
                "timestamp": timezone.now().isoformat()
            }))
        elif message_type == 'mark_as_read':
            notification_id = data.get('notification_id')
            if notification_id:
                success = await self._mark_notification_as_read(notification_id)
                await self.send(text_data=json.dumps({
                    "type": "mark_as_read_response",
                    "notification_id": notification_id,
                    "success": success
                }))

    async def send_notification(self, event):
        """Handle notification broadcast from the user's group"""
        await self.send(text_data=json.dumps({
            "type": "notification",
            "notification": event["notification"]
        }, default=str))
