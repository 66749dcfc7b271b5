from django.shortcuts import get_object_or_404
from drf_yasg.utils import swagger_auto_schema
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from authentication.models import User
from authentication.permissions import HasRole
from notifications.services import NotificationService
from .models import Order
from .serializers import ReleaseConfirmationSerializer
from .services import confirm_order_release


class CanConfirmRelease(HasRole):
    allowed_roles = (User.ROLE_MASTER_ADMIN, User.ROLE_DEALER)


@swagger_auto_schema(method='post', responses={200: ReleaseConfirmationSerializer}, tags=['Orders'])
@api_view(['POST'])
@permission_classes([CanConfirmRelease])
def confirm_release(request, pk):
    """
    Confirm an order's release and pay its commissions. Safe to repeat.
    """
    order = get_object_or_404(Order, pk=pk)
    order, credits, outbox = confirm_order_release(order)
    NotificationService.dispatch_on_commit(outbox)
    return Response(ReleaseConfirmationSerializer({'order': order, 'commissions': credits}).data)
