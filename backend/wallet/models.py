from decimal import Decimal
from django.conf import settings
from django.db import models
from django.db.models import Q


class CommissionRate(models.Model):
    """
    Flat commission paid per unit sold, per device type and tier.
    """
    device_type = models.CharField(max_length=50, unique=True)
    marketer_rate = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    admin_rate = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    superadmin_rate = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['device_type']

    def __str__(self):
        return f"{self.device_type}: {self.marketer_rate}/{self.admin_rate}/{self.superadmin_rate}"

    def save(self, *args, **kwargs):
        # Lookups are case-insensitive; store one canonical spelling
        self.device_type = self.device_type.strip().lower()
        super().save(*args, **kwargs)

    @classmethod
    def rate_for(cls, device_type, tier):
        """
        Rate for ``tier`` ('marketer_rate', 'admin_rate' or 'superadmin_rate').
        Unknown device types earn nothing.
        """
        rate = cls.objects.filter(device_type=(device_type or '').strip().lower()).values_list(tier, flat=True).first()
        return rate if rate is not None else Decimal('0.00')


class Wallet(models.Model):
    """
    Running balances for one user. ``total_balance`` always equals
    ``available_balance + withheld_balance``.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='wallet')
    total_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    available_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    withheld_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Wallet of {self.user_id}: {self.total_balance}"

    @property
    def is_balanced(self):
        return self.total_balance == self.available_balance + self.withheld_balance


class WalletTransaction(models.Model):
    """
    Immutable ledger entry. Commission rows are unique per
    (user, transaction_type, order), which makes crediting idempotent.
    """
    MARKETER_COMMISSION = 'marketer_commission'
    MARKETER_COMMISSION_AVAILABLE = 'marketer_commission_available'
    MARKETER_COMMISSION_WITHHELD = 'marketer_commission_withheld'
    ADMIN_COMMISSION = 'admin_commission'
    SUPERADMIN_COMMISSION = 'superadmin_commission'
    WITHHELD_RELEASE = 'withheld_release'
    WITHHELD_REJECT = 'withheld_reject'
    WITHDRAWAL_REQUEST = 'withdrawal_request'
    WITHDRAWAL_REFUND = 'withdrawal_refund'

    TYPE_CHOICES = [
        (MARKETER_COMMISSION, 'Marketer Commission'),
        (MARKETER_COMMISSION_AVAILABLE, 'Marketer Commission (Available)'),
        (MARKETER_COMMISSION_WITHHELD, 'Marketer Commission (Withheld)'),
        (ADMIN_COMMISSION, 'Admin Commission'),
        (SUPERADMIN_COMMISSION, 'SuperAdmin Commission'),
        (WITHHELD_RELEASE, 'Withheld Release'),
        (WITHHELD_REJECT, 'Withheld Release Reversed'),
        (WITHDRAWAL_REQUEST, 'Withdrawal Request'),
        (WITHDRAWAL_REFUND, 'Withdrawal Refund'),
    ]

    COMMISSION_TYPES = (
        MARKETER_COMMISSION, MARKETER_COMMISSION_AVAILABLE, MARKETER_COMMISSION_WITHHELD,
        ADMIN_COMMISSION, SUPERADMIN_COMMISSION,
    )

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='wallet_transactions')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    transaction_type = models.CharField(max_length=40, choices=TYPE_CHOICES)
    meta = models.JSONField(default=dict, blank=True)
    order = models.ForeignKey(
        'orders.Order', on_delete=models.PROTECT, null=True, blank=True, related_name='wallet_transactions'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'transaction_type', 'order'],
                condition=Q(order__isnull=False),
                name='unique_ledger_entry_per_order',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'transaction_type'], name='wallet_tx_user_type_idx'),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.amount} for {self.user_id}"


class WithdrawalRequest(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='withdrawal_requests')
    amount_requested = models.DecimalField(max_digits=14, decimal_places=2)
    fee = models.DecimalField(max_digits=14, decimal_places=2)
    net_amount = models.DecimalField(max_digits=14, decimal_places=2)

    account_name = models.CharField(max_length=150)
    account_number = models.CharField(max_length=30)
    bank_name = models.CharField(max_length=150)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='reviewed_withdrawals'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)

    requested_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-requested_at']

    def __str__(self):
        return f"Withdrawal {self.pk} of {self.amount_requested} by {self.user_id} ({self.status})"

    @property
    def total_deducted(self):
        return self.amount_requested + self.fee
