"""
Outbound payment gateway clients.

Gateway A (Razorpay) uses the order/capture model through the official SDK.
Gateway B (PayPal) uses the REST v1 payments API (create, redirect, execute)
over `requests`. Every call carries the configured timeout and is made
exactly once; failures surface as GatewayError with the provider's payload.
"""
import logging

import razorpay
import requests
from requests.auth import HTTPBasicAuth
from django.core.cache import cache

from core.exceptions import GatewayError

logger = logging.getLogger("chitvault.payments")

COMMON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}
PAYPAL_TOKEN_CACHE_KEY = "paypal_access_token:{client_id}"
# refresh the cached token this many seconds before PayPal expires it
PAYPAL_TOKEN_EXPIRY_MARGIN = 60


class TimeoutSession(requests.Session):
    """requests.Session that applies a default timeout to every request."""

    def __init__(self, timeout):
        super().__init__()
        self.timeout = timeout

    def request(self, method, url, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, url, **kwargs)


def _razorpay_error_payload(exc):
    return {"error": exc.__class__.__name__, "description": str(exc)}


class RazorpayGateway:
    def __init__(self, config, client=None):
        self.config = config
        self.client = client or razorpay.Client(
            session=TimeoutSession(config.timeout),
            auth=(config.razorpay_key_id, config.razorpay_key_secret),
        )

    def _call(self, action, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (
            razorpay.errors.BadRequestError,
            razorpay.errors.GatewayError,
            razorpay.errors.ServerError,
            requests.RequestException,
        ) as e:
            logger.error(f"Razorpay {action} failed: {e}")
            raise GatewayError(f"Razorpay {action} failed.", payload=_razorpay_error_payload(e))

    def create_order(self, amount, currency, receipt, notes=None):
        data = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1,
        }
        if notes:
            data["notes"] = notes
        return self._call("order creation", self.client.order.create, data=data)

    def fetch_order(self, order_id):
        return self._call("order fetch", self.client.order.fetch, order_id)

    def fetch_order_payments(self, order_id):
        response = self._call("order payments fetch", self.client.order.payments, order_id)
        return (response or {}).get("items", [])


class PayPalGateway:
    def __init__(self, config, session=None):
        self.config = config
        self.base_url = config.paypal_base_url
        self.session = session or TimeoutSession(config.timeout)

    def _error_payload(self, response):
        try:
            return response.json()
        except ValueError:
            return {"status_code": response.status_code, "body": response.text[:500]}

    def _request(self, action, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"PayPal {action} failed: {e}")
            raise GatewayError(f"PayPal {action} failed.", payload={"error": str(e)})

        if response.status_code >= 400:
            payload = self._error_payload(response)
            logger.error(f"PayPal {action} failed with {response.status_code}: {payload}")
            raise GatewayError(f"PayPal {action} failed.", payload=payload)

        return response.json()

    def get_access_token(self):
        cache_key = PAYPAL_TOKEN_CACHE_KEY.format(client_id=self.config.paypal_client_id)
        token = cache.get(cache_key)
        if token:
            return token

        data = self._request(
            "authentication",
            "POST",
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
            auth=HTTPBasicAuth(self.config.paypal_client_id, self.config.paypal_client_secret),
        )
        token = data["access_token"]
        ttl = max(int(data.get("expires_in", 0)) - PAYPAL_TOKEN_EXPIRY_MARGIN, 1)
        cache.set(cache_key, token, timeout=ttl)
        return token

    def _auth_headers(self):
        return {**COMMON_HEADERS, "Authorization": f"Bearer {self.get_access_token()}"}

    def create_payment(self, payload):
        """
        Creates a sale and returns `(payment, approval_url)`.
        """
        payment = self._request(
            "payment creation",
            "POST",
            "/v1/payments/payment",
            json=payload,
            headers=self._auth_headers(),
        )
        for link in payment.get("links", []):
            if link.get("rel") == "approval_url":
                return payment, link["href"]

        raise GatewayError("Approval URL not found.", payload={"payment_id": payment.get("id")})

    def execute_payment(self, payment_id, payer_id, amount, currency):
        body = {
            "payer_id": payer_id,
            "transactions": [{"amount": {"currency": currency, "total": amount}}],
        }
        return self._request(
            "payment execution",
            "POST",
            f"/v1/payments/payment/{payment_id}/execute",
            json=body,
            headers=self._auth_headers(),
        )
