"""
Withdrawal requests and withheld-balance release/reversal.
"""

from decimal import Decimal
from unittest import mock

import pytest
from django.test import override_settings

from core_config.exceptions import WorkflowValidationError, RateLimitExceeded, ResourceNotFound
from wallet.models import Wallet, WalletTransaction, WithdrawalRequest
from wallet.services import LedgerService, WithdrawalService

BANK = {'account_name': 'Mo Marketer', 'account_number': '0123456789', 'bank_name': 'First Bank'}


def fund(user, available='0', withheld='0'):
    wallet = LedgerService.ensure_wallet(user)
    wallet.available_balance = Decimal(available)
    wallet.withheld_balance = Decimal(withheld)
    wallet.total_balance = wallet.available_balance + wallet.withheld_balance
    wallet.save()
    return wallet


@pytest.mark.django_db
@override_settings(WITHDRAWAL_FEE=100)
def test_withdrawal_deducts_amount_and_fee(marketer, master_admin):
    fund(marketer, available='5000', withheld='3000')

    result = WithdrawalService.create_withdrawal_request(marketer, Decimal('1000'), BANK)

    wallet = Wallet.objects.get(user=marketer)
    assert wallet.available_balance == Decimal('3900.00')
    assert wallet.withheld_balance == Decimal('3000.00')
    assert wallet.is_balanced
    assert result.request.fee == Decimal('100.00')
    assert result.request.status == WithdrawalRequest.STATUS_PENDING
    entry = WalletTransaction.objects.get(user=marketer, transaction_type=WalletTransaction.WITHDRAWAL_REQUEST)
    assert entry.amount == Decimal('-1100.00')
    assert [item.recipient for item in result.outbox] == [master_admin]


@pytest.mark.django_db
@override_settings(WITHDRAWAL_FEE=100)
def test_withdrawal_requires_amount_plus_fee(marketer):
    fund(marketer, available='1050')

    with pytest.raises(WorkflowValidationError):
        WithdrawalService.create_withdrawal_request(marketer, Decimal('1000'), BANK)
    assert not WithdrawalRequest.objects.exists()
    assert Wallet.objects.get(user=marketer).available_balance == Decimal('1050.00')


@pytest.mark.django_db
def test_withdrawal_rejects_non_positive_amount_and_missing_bank(marketer):
    fund(marketer, available='5000')

    with pytest.raises(WorkflowValidationError):
        WithdrawalService.create_withdrawal_request(marketer, Decimal('0'), BANK)
    with pytest.raises(WorkflowValidationError):
        WithdrawalService.create_withdrawal_request(marketer, Decimal('10'), {'account_name': 'Mo'})


@pytest.mark.django_db
def test_admin_limited_to_one_withdrawal_per_month(admin):
    fund(admin, available='10000')

    WithdrawalService.create_withdrawal_request(admin, Decimal('1000'), BANK)
    with pytest.raises(RateLimitExceeded):
        WithdrawalService.create_withdrawal_request(admin, Decimal('1000'), BANK)


@pytest.mark.django_db
@override_settings(WITHDRAWAL_FEE=100)
def test_monthly_limit_is_checked_under_the_wallet_lock(admin):
    fund(admin, available='10000')
    WithdrawalService.create_withdrawal_request(admin, Decimal('1000'), BANK)

    with mock.patch.object(
        WithdrawalService, '_locked_wallet', wraps=WithdrawalService._locked_wallet
    ) as locked_wallet:
        with pytest.raises(RateLimitExceeded):
            WithdrawalService.create_withdrawal_request(admin, Decimal('1000'), BANK)

    locked_wallet.assert_called_once_with(admin)
    assert WithdrawalRequest.objects.filter(user=admin).count() == 1
    assert Wallet.objects.get(user=admin).available_balance == Decimal('8900.00')


@pytest.mark.django_db
def test_marketer_may_withdraw_more_than_once_a_month(marketer):
    fund(marketer, available='10000')

    WithdrawalService.create_withdrawal_request(marketer, Decimal('1000'), BANK)
    WithdrawalService.create_withdrawal_request(marketer, Decimal('1000'), BANK)
    assert WithdrawalRequest.objects.filter(user=marketer).count() == 2


@pytest.mark.django_db
@override_settings(WITHDRAWAL_FEE=100)
def test_rejected_withdrawal_refunds_everything(marketer, master_admin):
    fund(marketer, available='5000')
    request = WithdrawalService.create_withdrawal_request(marketer, Decimal('1000'), BANK).request

    result = WithdrawalService.review_withdrawal_request(request.pk, 'reject', master_admin)

    wallet = Wallet.objects.get(user=marketer)
    assert wallet.available_balance == Decimal('5000.00')
    assert wallet.total_balance == Decimal('5000.00')
    assert result.request.status == WithdrawalRequest.STATUS_REJECTED
    assert result.request.reviewed_by == master_admin
    refund = WalletTransaction.objects.get(user=marketer, transaction_type=WalletTransaction.WITHDRAWAL_REFUND)
    assert refund.amount == Decimal('1100.00')


@pytest.mark.django_db
@override_settings(WITHDRAWAL_FEE=100)
def test_approved_withdrawal_keeps_deduction(marketer, master_admin):
    fund(marketer, available='5000')
    request = WithdrawalService.create_withdrawal_request(marketer, Decimal('1000'), BANK).request

    WithdrawalService.review_withdrawal_request(request.pk, 'approve', master_admin)

    assert Wallet.objects.get(user=marketer).available_balance == Decimal('3900.00')
    with pytest.raises(WorkflowValidationError):
        WithdrawalService.review_withdrawal_request(request.pk, 'reject', master_admin)


@pytest.mark.django_db
def test_reviewing_missing_request_is_not_found(master_admin):
    with pytest.raises(ResourceNotFound):
        WithdrawalService.review_withdrawal_request(999, 'approve', master_admin)


@pytest.mark.django_db
def test_release_then_reject_restores_withheld(marketer, master_admin):
    fund(marketer, available='800', withheld='1200')

    released = WithdrawalService.release_withheld_for_user(marketer, master_admin)
    assert released.amount == Decimal('1200.00')
    wallet = Wallet.objects.get(user=marketer)
    assert (wallet.available_balance, wallet.withheld_balance) == (Decimal('2000.00'), Decimal('0.00'))

    reversed_ = WithdrawalService.reject_withheld_release(marketer, master_admin)
    assert reversed_.amount == Decimal('1200.00')
    wallet.refresh_from_db()
    assert (wallet.available_balance, wallet.withheld_balance) == (Decimal('800.00'), Decimal('1200.00'))
    assert wallet.is_balanced

    # Nothing left to reverse
    assert WithdrawalService.reject_withheld_release(marketer, master_admin).amount == Decimal('0.00')


@pytest.mark.django_db
def test_release_with_nothing_withheld_is_noop(marketer, master_admin):
    fund(marketer, available='800')

    result = WithdrawalService.release_withheld_for_user(marketer, master_admin)

    assert result.amount == Decimal('0.00')
    assert not result.outbox
    assert not WalletTransaction.objects.filter(user=marketer).exists()


@pytest.mark.django_db
def test_reject_release_needs_available_funds(marketer, master_admin):
    fund(marketer, withheld='1200')
    WithdrawalService.release_withheld_for_user(marketer, master_admin)
    WithdrawalService.create_withdrawal_request(marketer, Decimal('1000'), BANK)

    with pytest.raises(WorkflowValidationError):
        WithdrawalService.reject_withheld_release(marketer, master_admin)


@pytest.mark.django_db
def test_monthly_batch_releases_every_wallet(marketer, admin):
    fund(marketer, available='100', withheld='900')
    fund(admin, withheld='50')

    summary = WithdrawalService.release_all_withheld()

    assert summary['released_users'] == 2
    assert summary['total_released'] == Decimal('950.00')
    assert not Wallet.objects.filter(withheld_balance__gt=0).exists()
    assert WalletTransaction.objects.filter(transaction_type=WalletTransaction.WITHHELD_RELEASE).count() == 2
