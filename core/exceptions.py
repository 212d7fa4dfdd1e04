import logging

from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from rest_framework import exceptions as drf_exceptions
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    PermissionDenied,
    MethodNotAllowed,
    NotFound,
)
from django.db.models import ProtectedError
from django.http import JsonResponse

logger = logging.getLogger("chitvault.request")


# -----------------------
# Domain errors
# -----------------------

class ValidationError(drf_exceptions.ValidationError):
    """Missing or malformed input."""


class InvalidPlanError(ValidationError):
    default_detail = "Invalid plan selected."
    default_code = "invalid_plan"


class PlanGateError(ValidationError):
    default_detail = "upgrade required"
    default_code = "plan_gate"


class NotFoundError(NotFound):
    pass


class AuthError(AuthenticationFailed):
    """Bad signature, bad credentials or an expired/invalid OTP."""


class ConcurrentUpdateError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record was modified concurrently. Please retry."
    default_code = "concurrent_update"


class GatewayError(APIException):
    """
    External payment provider failure.
    `payload` is the provider's error body, forwarded for diagnostics.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Payment gateway request failed."
    default_code = "gateway_error"

    def __init__(self, detail=None, payload=None, code=None):
        super().__init__(detail=detail, code=code)
        self.payload = payload


def custom_api_exception_handler(exc, context):
    if isinstance(exc, ProtectedError):
        return Response(
            {
                "status": "error",
                "message": "Resource is in use",
                "error": {
                    "detail": "The record is referenced by payments and cannot be deleted.",
                },
            },
            status=status.HTTP_409_CONFLICT,
        )

    response = exception_handler(exc, context)

    if response is None:
        logger.error("Unhandled API exception: %s", exc, exc_info=True)
        return Response(
            {
                "status": "error",
                "message": "Internal server error",
                "error": {
                    "detail": str(exc),
                },
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, PlanGateError):
        message = "Upgrade required"
    elif isinstance(exc, drf_exceptions.ValidationError):
        message = "Validation failed"
    elif isinstance(exc, AuthenticationFailed):
        message = "Authentication failed"
    elif isinstance(exc, PermissionDenied):
        message = "Permission denied"
    elif isinstance(exc, MethodNotAllowed):
        message = "Method not allowed"
    else:
        message = str(exc.detail) if hasattr(exc, "detail") else str(exc)

    error_data = response.data
    if isinstance(exc, GatewayError):
        error_data = {"detail": str(exc.detail), "gateway_error": exc.payload}

    response.data = {
        "status": "error",
        "message": message,
        "error": error_data,
    }
    return response


def custom_404_handler(request, exception):
    return JsonResponse(
        {
            "status": "error",
            "message": "Resource not found",
            "error": {
                "detail": "The requested resource does not exist."
            },
        },
        status=404,
    )
