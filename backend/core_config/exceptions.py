"""
Typed errors raised by the workflow and wallet services.

Services raise these instead of returning error responses so that the
global exception handler can translate them into HTTP statuses.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class WorkflowValidationError(APIException):
    """Missing field, illegal transition, insufficient balance, duplicate submission."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The request could not be processed.'
    default_code = 'validation_error'


class ResourceNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'The requested resource was not found.'
    default_code = 'not_found'


class ActionForbidden(APIException):
    """Wrong role, or a target outside the caller's hierarchy."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not allowed to perform this action.'
    default_code = 'forbidden'


class RateLimitExceeded(APIException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = 'Rate limit exceeded. Please try again later.'
    default_code = 'rate_limited'
