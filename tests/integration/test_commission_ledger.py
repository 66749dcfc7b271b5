"""
Commission crediting against the database: idempotence, balance invariants
and the order release scenario.
"""

from decimal import Decimal

import pytest

from orders.models import Order
from orders.services import confirm_order_release
from wallet.models import Wallet, WalletTransaction
from wallet.services import LedgerService


def wallet_of(user):
    return Wallet.objects.get(user=user)


@pytest.mark.django_db
def test_marketer_credit_splits_forty_sixty(marketer, android_rate, order_factory):
    order = order_factory(quantity=2)

    result = LedgerService.credit_marketer_commission(marketer, order, 'android', 2)

    assert result.credited
    assert result.total == Decimal('20000.00')
    assert result.available == Decimal('8000.00')
    assert result.withheld == Decimal('12000.00')
    wallet = wallet_of(marketer)
    assert wallet.total_balance == Decimal('20000.00')
    assert wallet.available_balance == Decimal('8000.00')
    assert wallet.withheld_balance == Decimal('12000.00')
    assert wallet.is_balanced
    assert WalletTransaction.objects.filter(user=marketer, order=order).count() == 3
    assert len(result.outbox.for_recipient(marketer)) == 1


@pytest.mark.django_db
def test_marketer_credit_is_idempotent(marketer, android_rate, order_factory):
    order = order_factory(quantity=2)

    LedgerService.credit_marketer_commission(marketer, order, 'android', 2)
    second = LedgerService.credit_marketer_commission(marketer, order, 'android', 2)

    assert not second.credited
    assert second.total == Decimal('0.00')
    assert not second.outbox
    assert WalletTransaction.objects.filter(user=marketer, order=order).count() == 3
    assert wallet_of(marketer).total_balance == Decimal('20000.00')


@pytest.mark.django_db
def test_credit_skipped_when_commission_already_paid(marketer, android_rate, order_factory):
    order = order_factory(quantity=2, commission_paid=True)

    result = LedgerService.credit_marketer_commission(marketer, order, 'android', 2)

    assert not result.credited
    assert not WalletTransaction.objects.filter(order=order).exists()


@pytest.mark.django_db
def test_admin_credit_goes_fully_to_available(marketer, admin, android_rate, order_factory):
    order = order_factory(quantity=2)

    result = LedgerService.credit_admin_commission(marketer, order, 2)

    assert result.total == Decimal('4000.00')
    wallet = wallet_of(admin)
    assert wallet.available_balance == Decimal('4000.00')
    assert wallet.withheld_balance == Decimal('0.00')
    assert wallet.total_balance == Decimal('4000.00')


@pytest.mark.django_db
def test_superadmin_credit_carries_chain_details(marketer, admin, super_admin, android_rate, order_factory):
    order = order_factory(quantity=2)

    LedgerService.credit_superadmin_commission(marketer, order, 2)

    entry = WalletTransaction.objects.get(user=super_admin, transaction_type=WalletTransaction.SUPERADMIN_COMMISSION)
    assert entry.amount == Decimal('3000.00')
    assert entry.meta['marketerName'] == marketer.name
    assert entry.meta['adminName'] == admin.name
    assert entry.meta['quantity'] == 2
    assert entry.meta['orderId'] == order.pk


@pytest.mark.django_db
def test_unknown_device_type_credits_nothing(marketer, android_rate, order_factory):
    order = order_factory(device_type='feature-phone', quantity=3)

    result = LedgerService.credit_marketer_commission(marketer, order, 'feature-phone', 3)

    assert not result.credited
    assert result.total == Decimal('0.00')
    assert not WalletTransaction.objects.filter(order=order).exists()


@pytest.mark.django_db
def test_admin_credit_without_assigned_admin_is_zero(admin, android_rate, order_factory):
    from authentication.models import User
    loner = User.objects.create_user(email='loner@example.com', password='secret', role=User.ROLE_MARKETER)
    order = order_factory(owner=loner)

    result = LedgerService.credit_admin_commission(loner, order, 2)

    assert not result.credited
    assert not WalletTransaction.objects.filter(order=order).exists()


@pytest.mark.django_db
def test_confirm_order_release_pays_every_tier_once(marketer, admin, super_admin, android_rate, order_factory):
    order = order_factory(quantity=2)

    order, credits, outbox = confirm_order_release(order)

    assert order.status == Order.STATUS_RELEASED_CONFIRMED
    assert order.commission_paid
    assert credits['marketer'].total == Decimal('20000.00')
    assert credits['admin'].total == Decimal('4000.00')
    assert credits['superadmin'].total == Decimal('3000.00')
    assert {item.recipient.pk for item in outbox} == {marketer.pk, admin.pk, super_admin.pk}

    _, repeat_credits, repeat_outbox = confirm_order_release(order)
    assert all(not result.credited for result in repeat_credits.values())
    assert not repeat_outbox
    assert WalletTransaction.objects.filter(order=order).count() == 5
    for user in (marketer, admin, super_admin):
        assert wallet_of(user).is_balanced


@pytest.mark.django_db
def test_cancelled_order_cannot_be_confirmed(android_rate, order_factory):
    from core_config.exceptions import WorkflowValidationError
    order = order_factory(status=Order.STATUS_CANCELLED)

    with pytest.raises(WorkflowValidationError):
        confirm_order_release(order)
    assert not WalletTransaction.objects.filter(order=order).exists()
