import hashlib
import hmac


def generate_signature(order_id: str, payment_id: str, secret: str) -> str:
    """
    HMAC-SHA256 of "<order_id>|<payment_id>" keyed by the gateway secret,
    hex encoded. This is what gateway A sends back after checkout.
    """
    message = f"{order_id}|{payment_id}"
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(order_id, payment_id, signature, secret) -> bool:
    if not all(isinstance(value, str) for value in (order_id, payment_id, signature, secret)):
        return False
    if not secret:
        return False

    expected = generate_signature(order_id, payment_id, secret)
    # compare as bytes; compare_digest rejects non-ASCII str
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
