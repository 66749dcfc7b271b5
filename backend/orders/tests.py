from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from authentication.models import User
from notifications.models import Notification
from wallet.models import CommissionRate, Wallet
from .models import Order


class ConfirmReleaseTests(APITestCase):
    def setUp(self):
        self.master = User.objects.create_user(email='ma@example.com', password='x', role=User.ROLE_MASTER_ADMIN)
        self.super_admin = User.objects.create_user(email='sa@example.com', password='x', role=User.ROLE_SUPER_ADMIN)
        self.admin = User.objects.create_user(
            email='ad@example.com', password='x', role=User.ROLE_ADMIN, super_admin=self.super_admin
        )
        self.marketer = User.objects.create_user(
            email='mk@example.com', password='x', role=User.ROLE_MARKETER, admin=self.admin
        )
        CommissionRate.objects.create(
            device_type='android', marketer_rate=Decimal('10000'), admin_rate=Decimal('2000'),
            superadmin_rate=Decimal('1500'),
        )
        self.order = Order.objects.create(
            marketer=self.marketer, device_type='android', device_name='Tecno Spark 10',
            quantity=2, sold_amount=Decimal('250000'), status=Order.STATUS_RELEASED,
        )
        self.url = reverse('orders:confirm-release', args=[self.order.pk])

    def test_confirm_release_pays_commissions_and_notifies(self):
        self.client.force_authenticate(user=self.master)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['status'], Order.STATUS_RELEASED_CONFIRMED)
        self.assertTrue(response.data['order']['commission_paid'])
        self.assertEqual(response.data['commissions']['marketer']['available'], '8000.00')
        self.assertEqual(response.data['commissions']['marketer']['withheld'], '12000.00')
        self.assertEqual(response.data['commissions']['admin']['total'], '4000.00')

        self.assertEqual(Wallet.objects.get(user=self.admin).available_balance, Decimal('4000.00'))
        self.assertEqual(
            Notification.objects.filter(notification_type='commission_credited').count(), 3
        )

    def test_repeat_confirmation_pays_nothing(self):
        self.client.force_authenticate(user=self.master)
        self.client.post(self.url)
        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['commissions']['marketer']['credited'])
        self.assertEqual(Wallet.objects.get(user=self.marketer).total_balance, Decimal('20000.00'))

    def test_marketer_cannot_confirm(self):
        self.client.force_authenticate(user=self.marketer)
        response = self.client.post(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_order_is_404(self):
        self.client.force_authenticate(user=self.master)
        response = self.client.post(reverse('orders:confirm-release', args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
