import logging

from django.shortcuts import get_object_or_404
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from authentication.models import User
from authentication.permissions import IsMarketer, IsAdmin, IsSuperAdmin, IsMasterAdmin, IsReviewer
from notifications.services import NotificationService
from . import services
from .models import VerificationSubmission
from .serializers import (
    FORM_SERIALIZERS, split_form_data,
    FormStatusSerializer, VerificationStatusSerializer, VerificationSubmissionSerializer, WorkflowLogSerializer,
    TransitionResponseSerializer, AdminUploadSerializer, AdminReviewSerializer, SuperAdminVerifySerializer,
    MasterAdminDecisionSerializer, CancelSerializer, AllowRefillSerializer,
)

logger = logging.getLogger(__name__)


def _respond(result, status_code=status.HTTP_200_OK):
    NotificationService.dispatch_on_commit(result.outbox)
    return Response(TransitionResponseSerializer(result).data, status=status_code)


def _submit_form(request, form_type):
    serializer_class = FORM_SERIALIZERS[form_type]
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)

    _, _, file_fields = services.FORM_TYPES[form_type]
    data, files = split_form_data(serializer.validated_data, file_fields)
    result = services.submit_form(request.user, form_type, data, files)
    return _respond(result, status.HTTP_201_CREATED)


@swagger_auto_schema(method='post', request_body=FORM_SERIALIZERS['biodata'], responses={201: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsMarketer])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def submit_biodata(request):
    return _submit_form(request, services.FORM_BIODATA)


@swagger_auto_schema(method='post', request_body=FORM_SERIALIZERS['guarantor'], responses={201: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsMarketer])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def submit_guarantor(request):
    return _submit_form(request, services.FORM_GUARANTOR)


@swagger_auto_schema(method='post', request_body=FORM_SERIALIZERS['commitment'], responses={201: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsMarketer])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def submit_commitment(request):
    return _submit_form(request, services.FORM_COMMITMENT)


@swagger_auto_schema(method='get', responses={200: FormStatusSerializer}, tags=['Verification'])
@api_view(['GET'])
@permission_classes([IsMarketer])
def form_status(request):
    """Which of the three forms the marketer has submitted."""
    return Response(FormStatusSerializer(services.get_form_status(request.user)).data)


@swagger_auto_schema(method='get', responses={200: VerificationStatusSerializer}, tags=['Verification'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def verification_status(request):
    return Response(VerificationStatusSerializer(services.get_verification_status(request.user)).data)


status_param = openapi.Parameter(
    'status', openapi.IN_QUERY, type=openapi.TYPE_STRING,
    enum=[choice for choice, _ in VerificationSubmission.STATUS_CHOICES],
    description="Filter by submission status",
)


@swagger_auto_schema(method='get', manual_parameters=[status_param], responses={200: VerificationSubmissionSerializer(many=True)}, tags=['Verification'])
@api_view(['GET'])
@permission_classes([IsReviewer])
def submission_list(request):
    """
    Submissions of the marketers under the caller: an admin sees their own
    marketers, a super-admin their admins' marketers, a master-admin everyone.
    """
    submissions = services.submissions_for(request.user, request.query_params.get('status'))
    submissions = submissions.select_related('admin_details', 'rejected_by')
    return Response(VerificationSubmissionSerializer(submissions, many=True).data)


@swagger_auto_schema(method='get', responses={200: WorkflowLogSerializer(many=True)}, tags=['Verification'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def submission_history(request, pk):
    submission, logs = services.get_workflow_history(request.user, pk)
    return Response({
        'submission': VerificationSubmissionSerializer(submission).data,
        'history': WorkflowLogSerializer(logs, many=True).data,
    })


@swagger_auto_schema(method='post', request_body=AdminUploadSerializer, responses={200: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsAdmin])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def upload_admin_verification(request, pk):
    """Upload the admin's visit notes and evidence photos. No status change."""
    serializer = AdminUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    photos = {group: data[group] for group in services.PHOTO_GROUPS if data.get(group)}
    result = services.upload_admin_verification(request.user, pk, data['verification_notes'], photos)
    return _respond(result)


@swagger_auto_schema(method='post', request_body=AdminReviewSerializer, responses={200: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsAdmin])
def admin_review(request, pk):
    serializer = AdminReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    report = data.pop('report')

    result = services.admin_review(request.user, pk, data, report)
    return _respond(result)


@swagger_auto_schema(method='post', responses={200: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsAdmin])
def verify_and_send(request, pk):
    """Send the verified submission to the super-admin."""
    return _respond(services.verify_and_send(request.user, pk))


@swagger_auto_schema(method='post', request_body=SuperAdminVerifySerializer, responses={200: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsSuperAdmin])
def superadmin_verify(request, pk):
    serializer = SuperAdminVerifySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = services.superadmin_verify(
        request.user, pk, serializer.validated_data['verified'], serializer.validated_data['report']
    )
    return _respond(result)


@swagger_auto_schema(method='post', request_body=MasterAdminDecisionSerializer, responses={200: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsMasterAdmin])
def masteradmin_decision(request, pk):
    serializer = MasterAdminDecisionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = services.masteradmin_decide(
        request.user, pk, serializer.validated_data['action'], serializer.validated_data['reason']
    )
    return _respond(result)


@swagger_auto_schema(method='post', request_body=CancelSerializer, responses={200: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsMasterAdmin])
def cancel_submission(request, pk):
    serializer = CancelSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return _respond(services.cancel_submission(request.user, pk, serializer.validated_data['reason']))


@swagger_auto_schema(method='post', request_body=AllowRefillSerializer, responses={200: TransitionResponseSerializer}, tags=['Verification'])
@api_view(['POST'])
@permission_classes([IsMasterAdmin])
def allow_refill(request):
    """Reopen one of a marketer's forms for resubmission."""
    serializer = AllowRefillSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    marketer = get_object_or_404(User, unique_id=serializer.validated_data['marketer_unique_id'])
    result = services.allow_refill(request.user, marketer, serializer.validated_data['form_type'])
    return _respond(result)
