"""
Commission ledger and withdrawal services.

Every balance change is the side effect of inserting a WalletTransaction in
the same database transaction. Commission credits are idempotent per
(user, transaction_type, order); withdrawal and withheld-release flows lock
the wallet row before touching it.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_FLOOR

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from authentication.models import User
from core_config.exceptions import WorkflowValidationError, ResourceNotFound, RateLimitExceeded
from notifications.outbox import Outbox
from orders.models import Order
from .models import CommissionRate, Wallet, WalletTransaction, WithdrawalRequest

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
# Share of a marketer's commission that is withdrawable straight away; the rest is withheld
MARKETER_AVAILABLE_SHARE = Decimal('0.4')


def _money(value):
    return Decimal(value).quantize(Decimal('0.01'))


def split_commission(total):
    """
    Split a marketer commission into (available, withheld).
    ``available`` is floor(total * 0.4); the remainder is withheld.
    """
    total = Decimal(total)
    available = (total * MARKETER_AVAILABLE_SHARE).to_integral_value(rounding=ROUND_FLOOR)
    return _money(available), _money(total - available)


@dataclass
class CreditResult:
    total: Decimal = ZERO
    available: Decimal = ZERO
    withheld: Decimal = ZERO
    credited: bool = False
    recipient: object = None
    outbox: Outbox = field(default_factory=Outbox)

    @classmethod
    def zero(cls, recipient=None):
        return cls(recipient=recipient)


@dataclass
class BalanceMoveResult:
    amount: Decimal = ZERO
    wallet: Wallet = None
    transaction: WalletTransaction = None
    outbox: Outbox = field(default_factory=Outbox)


@dataclass
class WithdrawalResult:
    request: WithdrawalRequest
    wallet: Wallet
    outbox: Outbox = field(default_factory=Outbox)


class LedgerService:
    """
    Credits commission into wallets exactly once per qualifying order.
    """

    @staticmethod
    def ensure_wallet(user):
        wallet, _ = Wallet.objects.get_or_create(user=user)
        return wallet

    @staticmethod
    def _locked_order(order):
        """Re-read the order under a row lock; the caller must be inside transaction.atomic()."""
        try:
            return Order.objects.select_for_update().get(pk=order.pk)
        except Order.DoesNotExist:
            raise ResourceNotFound(f"Order {order.pk} not found.")

    @staticmethod
    def _record_entries(user, order, entries, meta):
        """
        Insert ledger rows keyed on (user, type, order), skipping rows that
        already exist. Returns True when at least one row was new.
        """
        created_any = False
        for transaction_type, amount in entries:
            _, created = WalletTransaction.objects.get_or_create(
                user=user,
                transaction_type=transaction_type,
                order=order,
                defaults={'amount': amount, 'meta': {**meta, 'orderId': order.pk}},
            )
            created_any = created_any or created
        return created_any

    @staticmethod
    def credit_split(user, order, total, type_tag, meta=None):
        """
        Credit a marketer commission: 40% available, the rest withheld.
        """
        total = _money(total)
        if total <= ZERO:
            return CreditResult.zero(recipient=user)
        available, withheld = split_commission(total)

        with transaction.atomic():
            wallet = LedgerService.ensure_wallet(user)
            created = LedgerService._record_entries(user, order, [
                (type_tag, total),
                (f"{type_tag}_available", available),
                (f"{type_tag}_withheld", withheld),
            ], meta or {})
            if not created:
                logger.info(f"Duplicate {type_tag} credit for order {order.pk} and user {user.pk} ignored")
                return CreditResult.zero(recipient=user)

            Wallet.objects.filter(pk=wallet.pk).update(
                total_balance=F('total_balance') + total,
                available_balance=F('available_balance') + available,
                withheld_balance=F('withheld_balance') + withheld,
                updated_at=timezone.now(),
            )

        logger.info(f"Credited {type_tag} {total} ({available} available, {withheld} withheld) to user {user.pk} for order {order.pk}")
        result = CreditResult(total=total, available=available, withheld=withheld, credited=True, recipient=user)
        result.outbox.add(
            user, 'commission_credited',
            f"You earned a commission of {total} for order #{order.pk}: {available} available now, {withheld} withheld.",
            title='Commission credited',
            related_object_type='order', related_object_id=order.pk,
        )
        return result

    @staticmethod
    def credit_full(user, order, amount, type_tag, meta=None):
        """
        Credit a commission straight into the available balance.
        """
        amount = _money(amount)
        if amount <= ZERO:
            return CreditResult.zero(recipient=user)

        with transaction.atomic():
            wallet = LedgerService.ensure_wallet(user)
            created = LedgerService._record_entries(user, order, [(type_tag, amount)], meta or {})
            if not created:
                logger.info(f"Duplicate {type_tag} credit for order {order.pk} and user {user.pk} ignored")
                return CreditResult.zero(recipient=user)

            Wallet.objects.filter(pk=wallet.pk).update(
                total_balance=F('total_balance') + amount,
                available_balance=F('available_balance') + amount,
                updated_at=timezone.now(),
            )

        logger.info(f"Credited {type_tag} {amount} to user {user.pk} for order {order.pk}")
        result = CreditResult(total=amount, available=amount, credited=True, recipient=user)
        result.outbox.add(
            user, 'commission_credited',
            f"You earned a commission of {amount} for order #{order.pk}.",
            title='Commission credited',
            related_object_type='order', related_object_id=order.pk,
        )
        return result

    @staticmethod
    def credit_marketer_commission(marketer, order, device_type, qty):
        with transaction.atomic():
            locked = LedgerService._locked_order(order)
            if locked.commission_paid:
                return CreditResult.zero(recipient=marketer)

            rate = CommissionRate.rate_for(device_type, 'marketer_rate')
            return LedgerService.credit_split(
                marketer, locked, rate * qty, WalletTransaction.MARKETER_COMMISSION,
                meta={'deviceType': device_type, 'quantity': qty, 'rate': str(rate)},
            )

    @staticmethod
    def credit_admin_commission(marketer, order, qty):
        with transaction.atomic():
            locked = LedgerService._locked_order(order)
            if locked.commission_paid:
                return CreditResult.zero()

            admin = marketer.admin
            if admin is None:
                logger.warning(f"Marketer {marketer.pk} has no admin; admin commission for order {order.pk} skipped")
                return CreditResult.zero()

            rate = CommissionRate.rate_for(locked.device_type, 'admin_rate')
            return LedgerService.credit_full(
                admin, locked, rate * qty, WalletTransaction.ADMIN_COMMISSION,
                meta={'marketerId': marketer.unique_id, 'deviceType': locked.device_type, 'quantity': qty},
            )

    @staticmethod
    def credit_superadmin_commission(marketer, order, qty):
        with transaction.atomic():
            locked = LedgerService._locked_order(order)
            if locked.commission_paid:
                return CreditResult.zero()

            admin = marketer.admin
            super_admin = admin.super_admin if admin else None
            if super_admin is None:
                logger.warning(f"Marketer {marketer.pk} has no super-admin in their chain; commission for order {order.pk} skipped")
                return CreditResult.zero()

            rate = CommissionRate.rate_for(locked.device_type, 'superadmin_rate')
            # Denormalised for the super-admin commission report
            meta = {
                'marketerId': marketer.unique_id,
                'marketerName': marketer.name,
                'adminId': admin.unique_id,
                'adminName': admin.name,
                'deviceType': locked.device_type,
                'deviceName': locked.device_name,
                'quantity': qty,
                'soldAmount': str(locked.sold_amount),
            }
            return LedgerService.credit_full(
                super_admin, locked, rate * qty, WalletTransaction.SUPERADMIN_COMMISSION, meta=meta,
            )


class WithdrawalService:
    """
    Withdrawal requests and withheld-balance moves, all under a wallet row lock.
    """

    LIMITED_ROLES = (User.ROLE_ADMIN, User.ROLE_SUPER_ADMIN)

    @staticmethod
    def withdrawal_fee():
        return _money(settings.WITHDRAWAL_FEE)

    @staticmethod
    def _locked_wallet(user):
        """Lock and return the user's wallet; the caller must be inside transaction.atomic()."""
        LedgerService.ensure_wallet(user)
        return Wallet.objects.select_for_update().get(user=user)

    @staticmethod
    def create_withdrawal_request(user, amount, bank_details):
        amount = _money(amount)
        if amount <= ZERO:
            raise WorkflowValidationError("Withdrawal amount must be greater than zero.")

        missing = [key for key in ('account_name', 'account_number', 'bank_name') if not bank_details.get(key)]
        if missing:
            raise WorkflowValidationError(f"Missing bank details: {', '.join(missing)}.")

        fee = WithdrawalService.withdrawal_fee()
        total_cost = amount + fee

        with transaction.atomic():
            wallet = WithdrawalService._locked_wallet(user)
            if user.role in WithdrawalService.LIMITED_ROLES:
                month_start = timezone.now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
                if WithdrawalRequest.objects.filter(user=user, requested_at__gte=month_start).exists():
                    raise RateLimitExceeded("You can only request one withdrawal per month.")
            if wallet.available_balance < total_cost:
                raise WorkflowValidationError(
                    f"Insufficient available balance: {wallet.available_balance} available, "
                    f"{total_cost} required including the {fee} fee."
                )

            request = WithdrawalRequest.objects.create(
                user=user,
                amount_requested=amount,
                fee=fee,
                net_amount=amount,
                account_name=bank_details['account_name'],
                account_number=bank_details['account_number'],
                bank_name=bank_details['bank_name'],
            )
            WalletTransaction.objects.create(
                user=user,
                amount=-total_cost,
                transaction_type=WalletTransaction.WITHDRAWAL_REQUEST,
                meta={'withdrawalId': request.pk, 'fee': str(fee)},
            )
            wallet.available_balance -= total_cost
            wallet.total_balance -= total_cost
            wallet.save(update_fields=['available_balance', 'total_balance', 'updated_at'])

        logger.info(f"Withdrawal request {request.pk} of {amount} (fee {fee}) created for user {user.pk}")
        result = WithdrawalResult(request=request, wallet=wallet)
        for reviewer in User.objects.filter(role=User.ROLE_MASTER_ADMIN, is_active=True):
            result.outbox.add(
                reviewer, 'withdrawal_requested',
                f"{user.name} ({user.unique_id}) requested a withdrawal of {amount}.",
                title='New withdrawal request',
                related_object_type='withdrawal', related_object_id=request.pk,
            )
        return result

    @staticmethod
    def review_withdrawal_request(request_id, action, reviewer):
        """
        Approve or reject a pending request. Approval keeps the deduction;
        rejection refunds amount + fee.
        """
        if action not in ('approve', 'reject'):
            raise WorkflowValidationError("Action must be 'approve' or 'reject'.")

        with transaction.atomic():
            try:
                request = WithdrawalRequest.objects.select_for_update().select_related('user').get(pk=request_id)
            except WithdrawalRequest.DoesNotExist:
                raise ResourceNotFound(f"Withdrawal request {request_id} not found.")

            if request.status != WithdrawalRequest.STATUS_PENDING:
                raise WorkflowValidationError(f"Withdrawal request is already {request.status}.")

            wallet = WithdrawalService._locked_wallet(request.user)
            if action == 'reject':
                refund = request.total_deducted
                WalletTransaction.objects.create(
                    user=request.user,
                    amount=refund,
                    transaction_type=WalletTransaction.WITHDRAWAL_REFUND,
                    meta={'withdrawalId': request.pk, 'reviewer': reviewer.unique_id},
                )
                wallet.available_balance += refund
                wallet.total_balance += refund
                wallet.save(update_fields=['available_balance', 'total_balance', 'updated_at'])
                request.status = WithdrawalRequest.STATUS_REJECTED
            else:
                request.status = WithdrawalRequest.STATUS_APPROVED

            request.reviewed_by = reviewer
            request.reviewed_at = timezone.now()
            request.save(update_fields=['status', 'reviewed_by', 'reviewed_at'])

        logger.info(f"Withdrawal request {request.pk} {request.status} by user {reviewer.pk}")
        result = WithdrawalResult(request=request, wallet=wallet)
        if request.status == WithdrawalRequest.STATUS_APPROVED:
            message = f"Your withdrawal of {request.amount_requested} has been approved."
        else:
            message = (f"Your withdrawal of {request.amount_requested} was rejected; "
                       f"{request.total_deducted} has been returned to your available balance.")
        result.outbox.add(
            request.user, 'withdrawal_reviewed', message,
            title='Withdrawal reviewed',
            related_object_type='withdrawal', related_object_id=request.pk,
        )
        return result

    @staticmethod
    def release_withheld_for_user(user, reviewer=None):
        """
        Move the user's whole withheld balance into available.
        Shared by the manual release endpoint and the monthly batch.
        """
        with transaction.atomic():
            wallet = WithdrawalService._locked_wallet(user)
            amount = wallet.withheld_balance
            if amount <= ZERO:
                return BalanceMoveResult(wallet=wallet)

            entry = WalletTransaction.objects.create(
                user=user,
                amount=amount,
                transaction_type=WalletTransaction.WITHHELD_RELEASE,
                meta={'reviewer': reviewer.unique_id if reviewer else 'system'},
            )
            wallet.available_balance += amount
            wallet.withheld_balance = ZERO
            wallet.save(update_fields=['available_balance', 'withheld_balance', 'updated_at'])

        logger.info(f"Released withheld balance {amount} for user {user.pk}")
        result = BalanceMoveResult(amount=amount, wallet=wallet, transaction=entry)
        result.outbox.add(
            user, 'withheld_released',
            f"{amount} of your withheld commission is now available for withdrawal.",
            title='Withheld balance released',
        )
        return result

    @staticmethod
    def reject_withheld_release(user, reviewer):
        """
        Reverse the most recent release that has not been reversed yet,
        moving that amount from available back to withheld.
        """
        with transaction.atomic():
            wallet = WithdrawalService._locked_wallet(user)
            reversed_ids = {
                meta.get('releaseId')
                for meta in WalletTransaction.objects.filter(
                    user=user, transaction_type=WalletTransaction.WITHHELD_REJECT
                ).values_list('meta', flat=True)
            }
            release = next(
                (entry for entry in WalletTransaction.objects.filter(
                    user=user, transaction_type=WalletTransaction.WITHHELD_RELEASE
                ) if entry.pk not in reversed_ids),
                None,
            )
            if release is None:
                return BalanceMoveResult(wallet=wallet)

            amount = release.amount
            if wallet.available_balance < amount:
                raise WorkflowValidationError(
                    f"Cannot reverse release of {amount}: only {wallet.available_balance} is still available."
                )

            entry = WalletTransaction.objects.create(
                user=user,
                amount=amount,
                transaction_type=WalletTransaction.WITHHELD_REJECT,
                meta={'reviewer': reviewer.unique_id, 'releaseId': release.pk},
            )
            wallet.available_balance -= amount
            wallet.withheld_balance += amount
            wallet.save(update_fields=['available_balance', 'withheld_balance', 'updated_at'])

        logger.info(f"Reversed withheld release {release.pk} of {amount} for user {user.pk}")
        result = BalanceMoveResult(amount=amount, wallet=wallet, transaction=entry)
        result.outbox.add(
            user, 'withheld_release_reversed',
            f"A release of {amount} was reversed and returned to your withheld balance.",
            title='Withheld release reversed',
        )
        return result

    @staticmethod
    def release_all_withheld():
        """
        Monthly batch: release every withheld balance through the per-user
        path. A failure for one user is logged and the batch moves on.

        Returns:
            Dict with released user count, total amount and failed user ids
        """
        from notifications.services import NotificationService

        summary = {'released_users': 0, 'total_released': ZERO, 'failed_users': []}
        user_ids = Wallet.objects.filter(withheld_balance__gt=ZERO).values_list('user_id', flat=True)
        for user in User.objects.filter(pk__in=list(user_ids)):
            try:
                result = WithdrawalService.release_withheld_for_user(user)
            except Exception:
                logger.exception(f"Monthly withheld release failed for user {user.pk}")
                summary['failed_users'].append(user.pk)
                continue
            if result.amount > ZERO:
                summary['released_users'] += 1
                summary['total_released'] += result.amount
                NotificationService.dispatch(result.outbox)
        logger.info(f"Monthly withheld release finished: {summary}")
        return summary
