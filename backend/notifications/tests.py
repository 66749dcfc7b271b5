from unittest import mock

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from authentication.models import User
from .models import Notification
from .outbox import Outbox
from .services import NotificationService


class NotificationServiceTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='mk@example.com', password='x', role=User.ROLE_MARKETER)
        self.other = User.objects.create_user(email='ad@example.com', password='x', role=User.ROLE_ADMIN)

    def _outbox(self):
        outbox = Outbox()
        outbox.add(self.user, 'commission_credited', 'You earned 100', title='Commission credited',
                   related_object_type='order', related_object_id=7)
        outbox.add(self.other, 'withdrawal_requested', 'New request')
        return outbox

    def test_dispatch_persists_every_item(self):
        created = NotificationService.dispatch(self._outbox())

        self.assertEqual(len(created), 2)
        notification = Notification.objects.get(recipient=self.user)
        self.assertEqual(notification.notification_type, 'commission_credited')
        self.assertEqual(notification.related_object_id, 7)
        self.assertFalse(notification.is_read)

    def test_push_failure_does_not_stop_delivery(self):
        with mock.patch.object(
            NotificationService.group_manager, 'send_to_user', side_effect=RuntimeError('layer down')
        ):
            created = NotificationService.dispatch(self._outbox())

        self.assertEqual(len(created), 2)
        self.assertEqual(Notification.objects.count(), 2)

    def test_dispatch_on_commit_waits_for_commit(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            NotificationService.dispatch_on_commit(self._outbox())
            self.assertFalse(Notification.objects.exists())

        self.assertEqual(len(callbacks), 1)
        callbacks[0]()
        self.assertEqual(Notification.objects.count(), 2)

    def test_empty_outbox_registers_nothing(self):
        with self.captureOnCommitCallbacks() as callbacks:
            NotificationService.dispatch_on_commit(Outbox())
        self.assertEqual(callbacks, [])


class NotificationEndpointTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='mk@example.com', password='x', role=User.ROLE_MARKETER)
        self.stranger = User.objects.create_user(email='st@example.com', password='x', role=User.ROLE_MARKETER)
        self.first = Notification.objects.create(
            recipient=self.user, message='first', notification_type='commission_credited'
        )
        self.second = Notification.objects.create(
            recipient=self.user, message='second', notification_type='withheld_released'
        )
        Notification.objects.create(recipient=self.stranger, message='not yours', notification_type='commission_credited')
        self.client.force_authenticate(user=self.user)

    def test_list_only_returns_own_notifications(self):
        response = self.client.get(reverse('notifications:notification-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    def test_filter_by_type(self):
        response = self.client.get(reverse('notifications:notification-list'), {'type': 'withheld_released'})
        self.assertEqual([item['id'] for item in response.data['results']], [self.second.id])

    def test_unread_count_and_mark_one_read(self):
        response = self.client.get(reverse('notifications:notification-unread-count'))
        self.assertEqual(response.data['unread_count'], 2)

        response = self.client.post(reverse('notifications:notification-mark-as-read', args=[self.first.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.first.refresh_from_db()
        self.assertTrue(self.first.is_read)
        self.assertIsNotNone(self.first.read_at)

    def test_cannot_mark_someone_elses_notification(self):
        foreign = Notification.objects.get(recipient=self.stranger)
        response = self.client.post(reverse('notifications:notification-mark-as-read', args=[foreign.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_as_read(self):
        response = self.client.post(reverse('notifications:notification-mark-all-as-read'), {}, format='json')
        self.assertEqual(response.data['count'], 2)
        self.assertFalse(Notification.objects.filter(recipient=self.user, is_read=False).exists())
        self.assertTrue(Notification.objects.filter(recipient=self.stranger, is_read=False).exists())
