import logging

from asgiref.sync import async_to_sync
from django.db import transaction
from django.utils import timezone

from .group_utils import NotificationGroupManager
from .models import Notification
from .outbox import Outbox

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Service for delivering and managing notifications.
    """

    group_manager = NotificationGroupManager()

    @staticmethod
    def dispatch(outbox: Outbox):
        """
        Deliver every queued notification: persist a Notification row, then push
        it to the recipient's channel group.

        Delivery is best-effort. A failure for one item is logged and the
        remaining items are still delivered; nothing is raised to the caller.

        Returns:
            List of created Notification objects
        """
        created_notifications = []
        for item in outbox:
            try:
                notification = Notification.objects.create(
                    recipient=item.recipient,
                    title=item.title,
                    message=item.message,
                    notification_type=item.notification_type,
                    priority=item.priority,
                    related_object_type=item.related_object_type,
                    related_object_id=item.related_object_id,
                )
            except Exception:
                logger.exception(f"Failed to persist {item.notification_type} notification for user {item.recipient.pk}")
                continue
            created_notifications.append(notification)
            NotificationService._push(notification, item.payload)
        return created_notifications

    @staticmethod
    def dispatch_on_commit(outbox: Outbox):
        """Deliver the outbox once the current transaction commits."""
        if outbox:
            transaction.on_commit(lambda: NotificationService.dispatch(outbox))

    @staticmethod
    def _push(notification, payload=None):
        message = {
            'id': notification.id,
            'title': notification.title,
            'message': notification.message,
            'notification_type': notification.notification_type,
            'priority': notification.priority,
            'related_object_type': notification.related_object_type,
            'related_object_id': notification.related_object_id,
            'created_at': notification.created_at.isoformat(),
            **(payload or {}),
        }
        try:
            async_to_sync(NotificationService.group_manager.send_to_user)(
                notification.recipient.unique_id, message
            )
        except Exception:
            logger.exception(f"Real-time push failed for notification {notification.id}")

    @staticmethod
    def get_unread_count(user):
        return Notification.objects.filter(recipient=user, is_read=False).count()

    @staticmethod
    def mark_notifications_as_read(user, notification_ids=None):
        """
        Mark the given notifications (or all of them) as read for ``user``.
        Returns the number of rows updated.
        """
        queryset = Notification.objects.filter(recipient=user, is_read=False)
        if notification_ids:
            queryset = queryset.filter(id__in=notification_ids)
        return queryset.update(is_read=True, read_at=timezone.now())
