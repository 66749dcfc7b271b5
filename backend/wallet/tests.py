from decimal import Decimal

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from authentication.models import User
from notifications.models import Notification
from .models import CommissionRate, Wallet, WalletTransaction, WithdrawalRequest
from .services import LedgerService
from .tasks import release_withheld_balances


def fund(user, available='0', withheld='0'):
    wallet = LedgerService.ensure_wallet(user)
    wallet.available_balance = Decimal(available)
    wallet.withheld_balance = Decimal(withheld)
    wallet.total_balance = wallet.available_balance + wallet.withheld_balance
    wallet.save()
    return wallet


@override_settings(WITHDRAWAL_FEE=100)
class WalletAPITests(APITestCase):
    def setUp(self):
        self.master = User.objects.create_user(email='ma@example.com', password='x', role=User.ROLE_MASTER_ADMIN)
        self.super_admin = User.objects.create_user(email='sa@example.com', password='x', role=User.ROLE_SUPER_ADMIN)
        self.admin = User.objects.create_user(
            email='ad@example.com', password='x', role=User.ROLE_ADMIN, super_admin=self.super_admin
        )
        self.marketer = User.objects.create_user(
            email='mk@example.com', password='x', role=User.ROLE_MARKETER, admin=self.admin
        )
        self.bank = {'account_name': 'Mo', 'account_number': '0123456789', 'bank_name': 'First Bank'}

    def test_my_wallet_is_created_on_demand(self):
        self.client.force_authenticate(user=self.marketer)
        response = self.client.get(reverse('wallet:my-wallet'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_balance'], '0.00')
        self.assertEqual(response.data['recent_transactions'], [])
        self.assertTrue(Wallet.objects.filter(user=self.marketer).exists())

    def test_create_and_reject_withdrawal(self):
        fund(self.marketer, available='5000')
        self.client.force_authenticate(user=self.marketer)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse('wallet:create-withdrawal'), {'amount': '1000', **self.bank}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_deducted'], '1100.00')
        self.assertTrue(Notification.objects.filter(recipient=self.master, notification_type='withdrawal_requested').exists())

        self.client.force_authenticate(user=self.master)
        pending = self.client.get(reverse('wallet:pending-withdrawals'))
        self.assertEqual(len(pending.data), 1)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                reverse('wallet:review-withdrawal', args=[pending.data[0]['id']]), {'action': 'reject'}, format='json'
            )
        self.assertEqual(response.data['status'], WithdrawalRequest.STATUS_REJECTED)
        self.assertEqual(Wallet.objects.get(user=self.marketer).available_balance, Decimal('5000.00'))
        self.assertTrue(Notification.objects.filter(recipient=self.marketer, notification_type='withdrawal_reviewed').exists())

    def test_insufficient_balance_is_400(self):
        fund(self.marketer, available='500')
        self.client.force_authenticate(user=self.marketer)
        response = self.client.post(reverse('wallet:create-withdrawal'), {'amount': '450', **self.bank}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient', response.data['error']['message'])

    def test_admin_second_withdrawal_in_month_is_429(self):
        fund(self.admin, available='9000')
        self.client.force_authenticate(user=self.admin)
        url = reverse('wallet:create-withdrawal')
        self.assertEqual(self.client.post(url, {'amount': '100', **self.bank}, format='json').status_code, 201)
        response = self.client.post(url, {'amount': '100', **self.bank}, format='json')
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)

    def test_master_admin_cannot_withdraw(self):
        self.client.force_authenticate(user=self.master)
        response = self.client.post(reverse('wallet:create-withdrawal'), {'amount': '100', **self.bank}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_only_master_admin_reviews_withdrawals(self):
        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get(reverse('wallet:pending-withdrawals')).status_code, 403)

    def test_release_and_reject_withheld(self):
        fund(self.marketer, available='800', withheld='1200')
        self.client.force_authenticate(user=self.master)

        response = self.client.post(reverse('wallet:release-withheld', args=[self.marketer.unique_id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['amount'], '1200.00')
        self.assertEqual(response.data['wallet']['withheld_balance'], '0.00')

        response = self.client.post(reverse('wallet:reject-withheld', args=[self.marketer.unique_id]))
        self.assertEqual(response.data['amount'], '1200.00')
        self.assertEqual(response.data['wallet']['withheld_balance'], '1200.00')

    def test_user_summary_respects_hierarchy(self):
        fund(self.marketer, available='10')
        outsider = User.objects.create_user(email='oa@example.com', password='x', role=User.ROLE_ADMIN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse('wallet:user-summary', args=[self.marketer.unique_id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['wallet']['available_balance'], '10.00')

        self.client.force_authenticate(user=outsider)
        response = self.client.get(reverse('wallet:user-summary', args=[self.marketer.unique_id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_withheld_list_and_wallet_list_are_scoped(self):
        fund(self.marketer, withheld='300')
        fund(User.objects.create_user(email='x@example.com', password='x', role=User.ROLE_MARKETER), withheld='50')

        self.client.force_authenticate(user=self.super_admin)
        withheld = self.client.get(reverse('wallet:withheld-wallets'))
        self.assertEqual([item['user']['unique_id'] for item in withheld.data], [self.marketer.unique_id])

        wallets = self.client.get(reverse('wallet:wallet-list'), {'user__role': User.ROLE_MARKETER})
        self.assertEqual(wallets.data['count'], 1)

    def test_fee_stats(self):
        fund(self.marketer, available='5000')
        self.client.force_authenticate(user=self.marketer)
        self.client.post(reverse('wallet:create-withdrawal'), {'amount': '1000', **self.bank}, format='json')

        self.client.force_authenticate(user=self.master)
        response = self.client.get(reverse('wallet:withdrawal-fee-stats'))
        self.assertEqual(response.data['pending_requests'], 1)
        self.assertEqual(response.data['fees_pending'], Decimal('100.00'))
        self.assertEqual(response.data['fees_collected'], Decimal('0.00'))


class CommissionRateAPITests(APITestCase):
    def setUp(self):
        self.master = User.objects.create_user(email='ma@example.com', password='x', role=User.ROLE_MASTER_ADMIN)
        self.marketer = User.objects.create_user(email='mk@example.com', password='x', role=User.ROLE_MARKETER)

    def test_master_admin_creates_rate_with_canonical_device_type(self):
        self.client.force_authenticate(user=self.master)
        response = self.client.post(reverse('wallet:commission-rate-list'), {
            'device_type': ' Android ', 'marketer_rate': '10000', 'admin_rate': '2000', 'superadmin_rate': '1500',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(CommissionRate.rate_for('ANDROID', 'admin_rate'), Decimal('2000.00'))

    def test_marketer_reads_but_cannot_write(self):
        CommissionRate.objects.create(device_type='ios', marketer_rate=Decimal('5'))
        self.client.force_authenticate(user=self.marketer)
        self.assertEqual(self.client.get(reverse('wallet:commission-rate-list')).status_code, 200)
        response = self.client.post(reverse('wallet:commission-rate-list'), {'device_type': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_negative_rate_rejected(self):
        self.client.force_authenticate(user=self.master)
        response = self.client.post(reverse('wallet:commission-rate-list'), {
            'device_type': 'tablet', 'marketer_rate': '-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class MonthlyReleaseTaskTests(APITestCase):
    def test_task_releases_and_notifies(self):
        marketer = User.objects.create_user(email='mk@example.com', password='x', role=User.ROLE_MARKETER)
        fund(marketer, available='10', withheld='90')

        result = release_withheld_balances()

        self.assertEqual(result['released_users'], 1)
        self.assertEqual(result['total_released'], '90.00')
        wallet = Wallet.objects.get(user=marketer)
        self.assertEqual(wallet.available_balance, Decimal('100.00'))
        self.assertEqual(WalletTransaction.objects.filter(transaction_type=WalletTransaction.WITHHELD_RELEASE).count(), 1)
        self.assertTrue(Notification.objects.filter(recipient=marketer, notification_type='withheld_released').exists())
