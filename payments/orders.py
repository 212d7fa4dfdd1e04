"""
Payment order construction for gateway A.

Amounts come in two shapes: a named plan priced from PLAN_PRICES, or a
free-form amount string from the registration page ("1500", "₹1500/mo").
Both end up as an integer count of minor units (paise) on the order.
"""
import logging
import re
import secrets
import time
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from core.constants import DEFAULT_CURRENCY, PLAN_PRICES
from core.exceptions import InvalidPlanError, ValidationError
from payments.gateways import RazorpayGateway

logger = logging.getLogger("chitvault.payments")

# gateway A caps receipts at 40 characters
MAX_RECEIPT_LENGTH = 40
NON_NUMERIC = re.compile(r"[^0-9.]")


@dataclass(frozen=True)
class Order:
    amount: int
    currency: str
    receipt: str
    gateway_order: dict = field(default_factory=dict)

    @property
    def id(self):
        return self.gateway_order.get("id")

    def as_response(self, key_id=None):
        data = {
            "order_id": self.id,
            "amount": self.amount,
            "currency": self.currency,
            "receipt": self.receipt,
        }
        if key_id:
            data["razorpay_key_id"] = key_id
        return data


def price_for_plan(plan):
    try:
        return PLAN_PRICES[plan]
    except (KeyError, TypeError):
        raise InvalidPlanError(f"Invalid plan selected: {plan}.")


def parse_amount(raw):
    if raw is None:
        raise ValidationError({"amount": "This field is required."})

    cleaned = NON_NUMERIC.sub("", str(raw))
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValidationError({"amount": f"Invalid amount: {raw!r}."})

    if not amount.is_finite() or amount <= 0:
        raise ValidationError({"amount": "Amount must be greater than zero."})
    return amount


def to_minor_units(amount):
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def generate_receipt(prefix="receipt"):
    suffix = secrets.token_hex(3)
    receipt = f"{prefix}_{int(time.time() * 1000)}_{suffix}"
    if len(receipt) > MAX_RECEIPT_LENGTH:
        # keep the unique tail, trim the prefix
        receipt = receipt[-MAX_RECEIPT_LENGTH:]
    return receipt


def create_order(config, plan=None, amount=None, currency=DEFAULT_CURRENCY,
                 receipt_prefix="receipt", gateway=None, notes=None) -> Order:
    """
    Price the order, then make a single gateway A call.

    Exactly one of `plan` or `amount` is expected; `plan` wins when both are
    given. Gateway failures propagate as GatewayError and are not retried.
    """
    if plan is not None:
        major_amount = price_for_plan(plan)
    else:
        major_amount = parse_amount(amount)

    minor_amount = to_minor_units(major_amount)
    receipt = generate_receipt(receipt_prefix)

    if gateway is None:
        gateway = RazorpayGateway(config)

    gateway_order = gateway.create_order(minor_amount, currency, receipt, notes=notes)
    logger.info(f"Created gateway order {gateway_order.get('id')} for {minor_amount} {currency} ({receipt})")

    return Order(
        amount=minor_amount,
        currency=currency,
        receipt=receipt,
        gateway_order=gateway_order,
    )
