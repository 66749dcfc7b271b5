"""
Global Exception Handler for Django REST Framework
Provides consistent error handling across all API endpoints
"""

import logging
from typing import Optional, Dict, Any

from django.core.exceptions import ValidationError as DjangoValidationError, PermissionDenied
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException, AuthenticationFailed, NotAuthenticated,
    PermissionDenied as DRFPermissionDenied, NotFound,
    ValidationError as DRFValidationError, Throttled,
)
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def error_response(code: str, message: str, status_code: int, details: Optional[Dict[str, Any]] = None) -> Response:
    """Uniform error body used by every API endpoint."""
    body = {
        'success': False,
        'error': {
            'code': code,
            'message': message,
            'details': details or {},
        },
    }
    return Response(body, status=status_code)


def global_exception_handler(exc, context):
    """
    Global exception handler that returns standardized error responses

    Args:
        exc: The exception instance
        context: Context dictionary containing view, request, etc.

    Returns:
        Response: Standardized error response
    """
    request = context.get('request')
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'Unknown'
    user_id = getattr(getattr(request, 'user', None), 'id', None)

    if isinstance(exc, NotAuthenticated):
        return error_response('NOT_AUTHENTICATED', "Authentication credentials were not provided",
                              status.HTTP_401_UNAUTHORIZED)

    if isinstance(exc, AuthenticationFailed):
        return error_response('AUTHENTICATION_FAILED', "Invalid authentication credentials",
                              status.HTTP_401_UNAUTHORIZED)

    if isinstance(exc, (PermissionDenied, DRFPermissionDenied)):
        logger.warning(f"Permission denied in {view_name} for user {user_id}: {exc}")
        message = str(exc.detail) if isinstance(exc, APIException) else str(exc)
        return error_response('PERMISSION_DENIED', message or "You do not have permission to perform this action",
                              status.HTTP_403_FORBIDDEN)

    if isinstance(exc, (NotFound, Http404)):
        message = str(exc.detail) if isinstance(exc, APIException) else "The requested resource was not found"
        return error_response('NOT_FOUND', message, status.HTTP_404_NOT_FOUND)

    if isinstance(exc, (DjangoValidationError, DRFValidationError)):
        return error_response('VALIDATION_ERROR', "Validation failed", status.HTTP_400_BAD_REQUEST,
                              _extract_validation_details(exc))

    if isinstance(exc, Throttled):
        return error_response('RATE_LIMITED', "Rate limit exceeded. Please try again later.",
                              status.HTTP_429_TOO_MANY_REQUESTS, {'retry_after': exc.wait})

    if isinstance(exc, APIException):
        # Typed service errors and the remaining DRF errors keep their own status and message
        logger.info(f"{type(exc).__name__} in {view_name} for user {user_id}: {exc.detail}")
        return error_response(str(exc.default_code).upper(), str(exc.detail), exc.status_code)

    logger.exception(f"Unhandled exception in {view_name} for user {user_id}: {type(exc).__name__}")
    return error_response('SERVER_ERROR', "An unexpected error occurred. Please try again later.",
                          status.HTTP_500_INTERNAL_SERVER_ERROR)


def _extract_validation_details(exc) -> Dict[str, Any]:
    """
    Extract validation error details from exception
    """
    if hasattr(exc, 'detail'):
        if isinstance(exc.detail, dict):
            return exc.detail
        if isinstance(exc.detail, list):
            return {'errors': exc.detail}
        return {'message': str(exc.detail)}
    if hasattr(exc, 'message_dict'):
        return exc.message_dict
    if hasattr(exc, 'messages'):
        return {'errors': exc.messages}
    return {'message': str(exc)}
