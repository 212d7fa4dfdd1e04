from dataclasses import dataclass

from django.conf import settings

PAYPAL_BASE_URLS = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}


@dataclass(frozen=True)
class PaymentConfig:
    """
    Gateway credentials and endpoints, read once at startup and passed
    explicitly to the order, signature and gateway code.
    """
    razorpay_key_id: str
    razorpay_key_secret: str
    paypal_mode: str
    paypal_client_id: str
    paypal_client_secret: str
    paypal_currency: str
    public_base_url: str
    timeout: float

    @classmethod
    def from_settings(cls):
        return cls(
            razorpay_key_id=settings.RAZORPAY_KEY_ID,
            razorpay_key_secret=settings.RAZORPAY_KEY_SECRET,
            paypal_mode=settings.PAYPAL_MODE,
            paypal_client_id=settings.PAYPAL_CLIENT_ID,
            paypal_client_secret=settings.PAYPAL_CLIENT_SECRET,
            paypal_currency=settings.PAYPAL_CURRENCY,
            public_base_url=settings.PUBLIC_BASE_URL.rstrip("/"),
            timeout=settings.PAYMENT_GATEWAY_TIMEOUT,
        )

    @property
    def paypal_base_url(self):
        return PAYPAL_BASE_URLS.get(self.paypal_mode, PAYPAL_BASE_URLS["sandbox"])

    def __repr__(self):
        # keep secrets out of logs and tracebacks
        return (
            f"PaymentConfig(razorpay_key_id={self.razorpay_key_id!r}, "
            f"paypal_mode={self.paypal_mode!r}, timeout={self.timeout!r})"
        )
