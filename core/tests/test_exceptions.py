from django.db.models import ProtectedError
from django.test import SimpleTestCase
from rest_framework import status
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import (
    AuthError,
    ConcurrentUpdateError,
    GatewayError,
    PlanGateError,
    ValidationError,
    custom_api_exception_handler,
)


class ExceptionHandlerTests(SimpleTestCase):
    def handle(self, exc):
        return custom_api_exception_handler(exc, {})

    def test_validation_envelope(self):
        response = self.handle(ValidationError({"amount": ["Invalid amount."]}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["status"], "error")
        self.assertEqual(response.data["message"], "Validation failed")
        self.assertEqual(response.data["error"], {"amount": ["Invalid amount."]})

    def test_plan_gate(self):
        response = self.handle(PlanGateError("upgrade required"))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Upgrade required")

    def test_auth_error(self):
        response = self.handle(AuthError("Invalid payment signature."))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "Authentication failed")

    def test_permission_denied(self):
        response = self.handle(PermissionDenied())

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "Permission denied")

    def test_not_found_uses_detail(self):
        response = self.handle(NotFound("Merchant not found"))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Merchant not found")

    def test_conflict(self):
        response = self.handle(ConcurrentUpdateError())

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_gateway_error_forwards_payload(self):
        response = self.handle(GatewayError("Razorpay order creation failed.", payload={"error": "BadRequestError"}))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"]["gateway_error"], {"error": "BadRequestError"})
        self.assertEqual(response.data["error"]["detail"], "Razorpay order creation failed.")

    def test_protected_error(self):
        response = self.handle(ProtectedError("in use", set()))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["message"], "Resource is in use")

    def test_unhandled_exception(self):
        response = self.handle(RuntimeError("boom"))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["message"], "Internal server error")
