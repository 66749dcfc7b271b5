from decimal import Decimal
from django.conf import settings
from django.db import models


class Order(models.Model):
    """
    A marketer's device sale. Order management lives elsewhere; the wallet
    ledger only reads ``commission_paid`` and the sale details.
    """
    STATUS_PENDING = 'pending'
    STATUS_RELEASED = 'released'
    STATUS_RELEASED_CONFIRMED = 'released_confirmed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_RELEASED, 'Released'),
        (STATUS_RELEASED_CONFIRMED, 'Released Confirmed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    # State machine: Valid transitions for status
    STATUS_TRANSITIONS = {
        STATUS_PENDING: [STATUS_RELEASED, STATUS_RELEASED_CONFIRMED, STATUS_CANCELLED],
        STATUS_RELEASED: [STATUS_RELEASED_CONFIRMED, STATUS_CANCELLED],
        STATUS_RELEASED_CONFIRMED: [],  # Final state
        STATUS_CANCELLED: [],  # Final state
    }

    marketer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='orders'
    )
    device_type = models.CharField(max_length=50, help_text="e.g. android, ios, smartphone")
    device_name = models.CharField(max_length=150, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    sold_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_PENDING)
    commission_paid = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Order {self.pk} by {self.marketer_id} ({self.device_type} x{self.quantity})"

    def can_transition_to(self, new_status):
        return new_status in self.STATUS_TRANSITIONS.get(self.status, [])
