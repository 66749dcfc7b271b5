import logging

from django.db import transaction

from core_config.exceptions import WorkflowValidationError, ResourceNotFound
from notifications.outbox import Outbox
from wallet.services import LedgerService
from .models import Order

logger = logging.getLogger(__name__)


def confirm_order_release(order):
    """
    Mark an order ``released_confirmed`` and pay its commissions.

    The marketer, admin and super-admin credits all run under the order row
    lock, and ``commission_paid`` is set in the same transaction, so a
    repeated confirmation never pays twice.

    Returns:
        (order, credits, outbox) where credits maps tier to CreditResult
    """
    with transaction.atomic():
        try:
            locked = Order.objects.select_for_update().select_related('marketer__admin__super_admin').get(pk=order.pk)
        except Order.DoesNotExist:
            raise ResourceNotFound(f"Order {order.pk} not found.")

        if locked.status != Order.STATUS_RELEASED_CONFIRMED:
            if not locked.can_transition_to(Order.STATUS_RELEASED_CONFIRMED):
                raise WorkflowValidationError(
                    f"Order {locked.pk} cannot be confirmed from status '{locked.status}'."
                )
            locked.status = Order.STATUS_RELEASED_CONFIRMED
            locked.save(update_fields=['status', 'updated_at'])

        marketer = locked.marketer
        credits = {
            'marketer': LedgerService.credit_marketer_commission(marketer, locked, locked.device_type, locked.quantity),
            'admin': LedgerService.credit_admin_commission(marketer, locked, locked.quantity),
            'superadmin': LedgerService.credit_superadmin_commission(marketer, locked, locked.quantity),
        }

        if not locked.commission_paid:
            locked.commission_paid = True
            locked.save(update_fields=['commission_paid', 'updated_at'])

    outbox = Outbox()
    for result in credits.values():
        outbox.extend(result.outbox)
    logger.info(
        f"Order {locked.pk} release confirmed; commissions "
        f"{', '.join(f'{tier}={result.total}' for tier, result in credits.items())}"
    )
    return locked, credits, outbox
