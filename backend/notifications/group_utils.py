"""
Channel group management for real-time notifications.

Every user listens on a personal group keyed by their ``unique_id``; the
notification service pushes to that group and the consumer joins it.
"""

from channels.layers import get_channel_layer


class NotificationGroupManager:
    """Manages channel groups for notification targeting"""

    def __init__(self):
        self.channel_layer = None

    @property
    def _channel_layer(self):
        """Lazy initialization of channel layer"""
        if self.channel_layer is None:
            self.channel_layer = get_channel_layer()
        return self.channel_layer

    @staticmethod
    def get_user_group(unique_id: str) -> str:
        """Get user-specific notification group name"""
        return f"notifications_user_{unique_id}"

    async def add_user_to_group(self, user, channel_name: str) -> str:
        group_name = self.get_user_group(user.unique_id)
        await self._channel_layer.group_add(group_name, channel_name)
        return group_name

    async def remove_user_from_group(self, user, channel_name: str) -> str:
        group_name = self.get_user_group(user.unique_id)
        await self._channel_layer.group_discard(group_name, channel_name)
        return group_name

    async def send_to_user(self, unique_id: str, message: dict):
        """Send notification to specific user"""
        if self._channel_layer is None:
            return
        await self._channel_layer.group_send(self.get_user_group(unique_id), {
            'type': 'send_notification',
            'notification': message
        })
