"""
Error taxonomy and DRF exception handler for the Subscription Platform.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler for DRF.
    Standardizes all API error responses into a consistent envelope:
    {"error": true, "code": <status>, "message": ..., "details": ...}
    """
    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(response.data, dict) and 'detail' in response.data:
            message = response.data['detail']
        elif isinstance(exc, ValidationError):
            message = 'Validation failed.'
        else:
            message = str(exc)

        response.data = {
            'error': True,
            'code': response.status_code,
            'message': message,
            'details': response.data,
        }
        return response

    # Anything DRF does not know how to render is an internal error
    view = context.get('view')
    logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}")
    return Response({
        'error': True,
        'code': status.HTTP_500_INTERNAL_SERVER_ERROR,
        'message': 'Internal server error',
        'details': None,
    }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class InvalidPackage(APIException):
    """
    Raised when a checkout references a package that does not exist
    or is no longer offered.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The selected subscription package is invalid.'
    default_code = 'invalid_package'


class TransactionNotFound(APIException):
    """
    Raised when a gateway callback references an unknown order id.
    The callback view reports it to the gateway instead of letting it escape.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Transaction not found'
    default_code = 'transaction_not_found'


class Forbidden(PermissionDenied):
    """Role or ownership check failed."""
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'


class ValidationFailed(ValidationError):
    """Malformed create/update input."""
    default_detail = 'Invalid input.'
    default_code = 'validation_failed'


class PackageInUse(APIException):
    """
    A package referenced by the ledger cannot be deleted.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This package has transactions or memberships. Deactivate it instead.'
    default_code = 'package_in_use'
