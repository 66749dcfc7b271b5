"""
Error bodies produced by the global exception handler.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.test import RequestFactory
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, Throttled, ValidationError

from core_config.exceptions import WorkflowValidationError, ResourceNotFound, ActionForbidden, RateLimitExceeded
from core_config.global_exception_handler import global_exception_handler


def _context():
    request = RequestFactory().post('/api/wallet/withdrawals/')
    request.user = None
    return {'request': request, 'view': None}


def test_workflow_error_is_400_with_message():
    response = global_exception_handler(WorkflowValidationError("Insufficient available balance"), _context())
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.data['success'] is False
    assert response.data['error']['code'] == 'VALIDATION_ERROR'
    assert response.data['error']['message'] == "Insufficient available balance"


def test_typed_errors_keep_their_status():
    assert global_exception_handler(ResourceNotFound(), _context()).status_code == 404
    assert global_exception_handler(ActionForbidden(), _context()).status_code == 403
    assert global_exception_handler(RateLimitExceeded(), _context()).status_code == 429


def test_serializer_errors_carry_field_details():
    response = global_exception_handler(ValidationError({'amount': ['This field is required.']}), _context())
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.data['error']['details'] == {'amount': ['This field is required.']}


def test_django_errors_are_mapped():
    assert global_exception_handler(Http404(), _context()).status_code == 404
    response = global_exception_handler(DjangoValidationError(['bad value']), _context())
    assert response.status_code == 400
    assert response.data['error']['details'] == {'errors': ['bad value']}


def test_authentication_and_throttling():
    assert global_exception_handler(NotAuthenticated(), _context()).status_code == 401
    response = global_exception_handler(Throttled(wait=30), _context())
    assert response.status_code == 429
    assert response.data['error']['details']['retry_after'] == 30


def test_unexpected_error_is_generic_500():
    response = global_exception_handler(RuntimeError("database exploded"), _context())
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert 'exploded' not in response.data['error']['message']
