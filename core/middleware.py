import time
import uuid
import logging
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger("chitvault.request")


def _principal_context(request):
    """
    DRF writes the resolved principal back onto the Django request, so by
    the time a response is produced request.user is the principal.
    """
    principal = getattr(request, "user", None)
    if not getattr(principal, "is_authenticated", False):
        return {"principal_id": "Anonymous", "role": "N/A", "merchant_id": "N/A"}
    return {
        "principal_id": str(getattr(principal, "id", "N/A")),
        "role": getattr(principal, "role", "N/A"),
        "merchant_id": str(getattr(principal, "tenant_id", None) or "N/A"),
    }


class LoggingMiddleware(MiddlewareMixin):
    """
    Logs every request/response pair with a correlation id, duration and
    the identity of the caller.
    """
    SENSITIVE_KEYS = {
        "password", "token", "otp", "authorization", "cookie", "email",
        "razorpay_signature", "x-razorpay-signature",
    }

    def process_request(self, request):
        request.start_time = time.time()
        request.request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

    def _log_context(self, request):
        duration_ms = int((time.time() - getattr(request, "start_time", time.time())) * 1000)
        context = {
            "request_id": getattr(request, "request_id", "N/A"),
            "execution_time_ms": duration_ms,
        }
        context.update(_principal_context(request))
        return context

    def masked_headers(self, request):
        headers = dict(request.headers)
        for key in headers:
            if key.lower() in self.SENSITIVE_KEYS:
                headers[key] = "[MASKED]"
        return headers

    def process_response(self, request, response):
        status_code = response.status_code
        level = logging.INFO
        if 400 <= status_code < 500:
            level = logging.WARNING
        elif status_code >= 500:
            level = logging.ERROR

        log_data = self._log_context(request)
        msg = f"{request.method} {request.path} - {status_code} ({log_data['execution_time_ms']}ms)"
        if level >= logging.WARNING:
            log_data["headers"] = self.masked_headers(request)
        logger.log(level, msg, extra=log_data)

        response["X-Request-ID"] = getattr(request, "request_id", "N/A")
        return response

    def process_exception(self, request, exception):
        msg = f"CRITICAL Exception on {request.method} {request.path}: {str(exception)}"
        logger.critical(msg, extra=self._log_context(request), exc_info=True)
        return None
