import logging
from decimal import Decimal

from django.db.models import Sum, Count, Q
from django.shortcuts import get_object_or_404
from drf_yasg.utils import swagger_auto_schema
from rest_framework import generics, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from authentication.models import User
from authentication.permissions import IsMasterAdmin, IsReviewer, IsWalletHolder, is_in_hierarchy, users_in_hierarchy
from core_config.exceptions import ActionForbidden
from notifications.services import NotificationService
from .models import CommissionRate, Wallet, WalletTransaction, WithdrawalRequest
from .serializers import (
    CommissionRateSerializer, WalletSerializer, WalletDetailSerializer, WalletTransactionSerializer,
    WithdrawalRequestSerializer, WithdrawalCreateSerializer, WithdrawalReviewSerializer,
    BalanceMoveResponseSerializer,
)
from .services import LedgerService, WithdrawalService

logger = logging.getLogger(__name__)


def _wallets_in_hierarchy(actor):
    return Wallet.objects.select_related('user').filter(user__in=users_in_hierarchy(actor))


def _target_user(actor, unique_id):
    target = get_object_or_404(User, unique_id=unique_id)
    if not is_in_hierarchy(actor, target):
        raise ActionForbidden("This user is outside your hierarchy.")
    return target


@swagger_auto_schema(method='get', responses={200: WalletDetailSerializer}, tags=['Wallet'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_wallet(request):
    """The caller's wallet with recent transactions and withdrawals."""
    wallet = LedgerService.ensure_wallet(request.user)
    return Response(WalletDetailSerializer(wallet).data)


@swagger_auto_schema(method='get', responses={200: WithdrawalRequestSerializer(many=True)}, tags=['Wallet'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_withdrawals(request):
    requests = WithdrawalRequest.objects.filter(user=request.user).select_related('user', 'reviewed_by')
    status_filter = request.query_params.get('status')
    if status_filter:
        requests = requests.filter(status=status_filter)
    return Response(WithdrawalRequestSerializer(requests, many=True).data)


@swagger_auto_schema(method='post', request_body=WithdrawalCreateSerializer, responses={201: WithdrawalRequestSerializer}, tags=['Wallet'])
@api_view(['POST'])
@permission_classes([IsWalletHolder])
def create_withdrawal(request):
    """
    Request a withdrawal. ``amount`` plus the flat fee is deducted from the
    available balance immediately and refunded if the request is rejected.
    """
    serializer = WithdrawalCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = WithdrawalService.create_withdrawal_request(request.user, data['amount'], {
        'account_name': data['account_name'],
        'account_number': data['account_number'],
        'bank_name': data['bank_name'],
    })
    NotificationService.dispatch_on_commit(result.outbox)
    return Response(WithdrawalRequestSerializer(result.request).data, status=status.HTTP_201_CREATED)


@swagger_auto_schema(method='get', responses={200: WithdrawalRequestSerializer(many=True)}, tags=['Wallet'])
@api_view(['GET'])
@permission_classes([IsMasterAdmin])
def pending_withdrawals(request):
    requests = WithdrawalRequest.objects.filter(
        status=WithdrawalRequest.STATUS_PENDING
    ).select_related('user', 'reviewed_by').order_by('requested_at')
    return Response(WithdrawalRequestSerializer(requests, many=True).data)


@swagger_auto_schema(method='post', request_body=WithdrawalReviewSerializer, responses={200: WithdrawalRequestSerializer}, tags=['Wallet'])
@api_view(['POST'])
@permission_classes([IsMasterAdmin])
def review_withdrawal(request, pk):
    serializer = WithdrawalReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = WithdrawalService.review_withdrawal_request(pk, serializer.validated_data['action'], request.user)
    NotificationService.dispatch_on_commit(result.outbox)
    return Response(WithdrawalRequestSerializer(result.request).data)


@swagger_auto_schema(method='get', tags=['Wallet'])
@api_view(['GET'])
@permission_classes([IsMasterAdmin])
def withdrawal_fee_stats(request):
    """Fee income and request counts grouped by status."""
    zero = Decimal('0.00')
    stats = WithdrawalRequest.objects.aggregate(
        total_requests=Count('id'),
        pending_requests=Count('id', filter=Q(status=WithdrawalRequest.STATUS_PENDING)),
        approved_requests=Count('id', filter=Q(status=WithdrawalRequest.STATUS_APPROVED)),
        rejected_requests=Count('id', filter=Q(status=WithdrawalRequest.STATUS_REJECTED)),
        fees_collected=Sum('fee', filter=Q(status=WithdrawalRequest.STATUS_APPROVED)),
        fees_pending=Sum('fee', filter=Q(status=WithdrawalRequest.STATUS_PENDING)),
        amount_paid_out=Sum('amount_requested', filter=Q(status=WithdrawalRequest.STATUS_APPROVED)),
    )
    for key in ('fees_collected', 'fees_pending', 'amount_paid_out'):
        stats[key] = stats[key] or zero
    stats['current_fee'] = WithdrawalService.withdrawal_fee()
    return Response(stats)


@swagger_auto_schema(method='get', responses={200: WalletSerializer(many=True)}, tags=['Wallet'])
@api_view(['GET'])
@permission_classes([IsReviewer])
def withheld_wallets(request):
    """Wallets in the caller's hierarchy that still hold withheld commission."""
    wallets = _wallets_in_hierarchy(request.user).filter(withheld_balance__gt=0).order_by('-withheld_balance')
    return Response(WalletSerializer(wallets, many=True).data)


@swagger_auto_schema(method='get', tags=['Wallet'])
@api_view(['GET'])
@permission_classes([IsReviewer])
def user_wallet_summary(request, unique_id):
    target = _target_user(request.user, unique_id)
    wallet = LedgerService.ensure_wallet(target)

    totals = dict(
        WalletTransaction.objects.filter(user=target)
        .values('transaction_type')
        .annotate(total=Sum('amount'))
        .values_list('transaction_type', 'total')
    )
    recent = WalletTransaction.objects.filter(user=target)[:10]
    return Response({
        'wallet': WalletSerializer(wallet).data,
        'totals_by_type': totals,
        'pending_withdrawals': WithdrawalRequest.objects.filter(
            user=target, status=WithdrawalRequest.STATUS_PENDING
        ).count(),
        'recent_transactions': WalletTransactionSerializer(recent, many=True).data,
    })


@swagger_auto_schema(method='post', responses={200: BalanceMoveResponseSerializer}, tags=['Wallet'])
@api_view(['POST'])
@permission_classes([IsMasterAdmin])
def release_withheld(request, unique_id):
    """Move the user's whole withheld balance to available."""
    target = _target_user(request.user, unique_id)
    result = WithdrawalService.release_withheld_for_user(target, reviewer=request.user)
    NotificationService.dispatch_on_commit(result.outbox)
    return Response(BalanceMoveResponseSerializer({'amount': result.amount, 'wallet': result.wallet}).data)


@swagger_auto_schema(method='post', responses={200: BalanceMoveResponseSerializer}, tags=['Wallet'])
@api_view(['POST'])
@permission_classes([IsMasterAdmin])
def reject_withheld(request, unique_id):
    """Reverse the user's most recent withheld release."""
    target = _target_user(request.user, unique_id)
    result = WithdrawalService.reject_withheld_release(target, reviewer=request.user)
    NotificationService.dispatch_on_commit(result.outbox)
    return Response(BalanceMoveResponseSerializer({'amount': result.amount, 'wallet': result.wallet}).data)


@swagger_auto_schema(tags=['Wallet'])
class WalletListView(generics.ListAPIView):
    """
    Wallets of the users under the caller, filterable by ``user__role``.
    """
    serializer_class = WalletSerializer
    permission_classes = [IsReviewer]
    filterset_fields = ['user__role']

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Wallet.objects.none()
        return _wallets_in_hierarchy(self.request.user).order_by('-total_balance')


class IsMasterAdminOrReadOnly(IsMasterAdmin):
    def has_permission(self, request, view):
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)


@swagger_auto_schema(tags=['Wallet'])
class CommissionRateViewSet(viewsets.ModelViewSet):
    """
    Per-device commission rates. Everyone may read them; only MasterAdmin
    may change them.
    """
    queryset = CommissionRate.objects.all()
    serializer_class = CommissionRateSerializer
    permission_classes = [IsMasterAdminOrReadOnly]
    pagination_class = None

    def perform_create(self, serializer):
        rate = serializer.save()
        logger.info(f"Commission rate for '{rate.device_type}' created by user {self.request.user.pk}")

    def perform_update(self, serializer):
        rate = serializer.save()
        logger.info(f"Commission rate for '{rate.device_type}' updated by user {self.request.user.pk}")
