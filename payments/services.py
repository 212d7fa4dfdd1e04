import logging
from decimal import Decimal
from urllib.parse import urlencode

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.urls import reverse
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from chit_plans.models import ChitPlan
from core import notifications
from core.choices import SubscriptionStatusChoices, VerificationStatusChoices
from core.constants import RECONCILE_FAILED_ORDER_TTL, RECONCILE_TIME
from core.exceptions import AuthError, NotFoundError, ValidationError
from merchants.services import update_merchant_state
from merchants.subscriptions import compute_renewal, ensure_plan_selectable
from payments.gateways import PayPalGateway, RazorpayGateway
from payments.models import (
    Payment,
    PaymentStatus,
    ReconciliationEvent,
    ReconciliationKind,
    RenewalOrder,
    RenewalOrderStatus,
)
from payments.orders import create_order, parse_amount, price_for_plan
from payments.signatures import verify_signature

logger = logging.getLogger("chitvault.payments")

User = get_user_model()


# -----------------------
# Merchant renewals
# -----------------------

def apply_renewal(merchant, plan, now=None):
    """
    Set the plan and roll the subscription window forward by one period.

    The window is recomputed from whatever expiry is current at write time,
    so two concurrent renewals both land.
    """
    price_for_plan(plan)
    now = now or timezone.now()

    def build_changes(current):
        window = compute_renewal(now, current.subscription_expiry_date)
        return {
            "plan": plan,
            "subscription_start_date": window.start,
            "subscription_expiry_date": window.expiry,
            "subscription_status": SubscriptionStatusChoices.ACTIVE,
        }

    merchant = update_merchant_state(merchant, build_changes)
    logger.info(
        f"Merchant {merchant.id} renewed on {plan} until {merchant.subscription_expiry_date.isoformat()}"
    )
    return merchant


def renew_without_payment(merchant, plan, now=None):
    """Complimentary renewal granted by an administrator."""
    ensure_plan_selectable(merchant.chit_plans.count(), plan)
    return apply_renewal(merchant, plan, now=now)


def create_renewal_order(config, merchant, plan, gateway=None):
    ensure_plan_selectable(merchant.chit_plans.count(), plan)

    order = create_order(
        config,
        plan=plan,
        receipt_prefix="renewal",
        gateway=gateway,
        notes={"merchant_id": str(merchant.id), "plan": plan},
    )

    renewal_order = RenewalOrder.objects.create(
        merchant=merchant,
        plan=plan,
        amount=order.amount,
        currency=order.currency,
        receipt=order.receipt,
        razorpay_order_id=order.id,
    )
    logger.info(f"Renewal order {renewal_order.razorpay_order_id} created for merchant {merchant.id} ({plan})")
    return order, renewal_order


@transaction.atomic
def complete_renewal_order(order, payment_id, signature=None, now=None):
    """
    Marks the order PAID and renews the merchant in one transaction.
    Completing an order that is already PAID does nothing.
    """
    order = RenewalOrder.objects.select_for_update().select_related("merchant").get(pk=order.pk)

    if order.status == RenewalOrderStatus.PAID:
        logger.info(f"Renewal order {order.razorpay_order_id} already paid, skipping")
        return order

    apply_renewal(order.merchant, order.plan, now=now)

    order.status = RenewalOrderStatus.PAID
    order.razorpay_payment_id = payment_id
    if signature:
        order.razorpay_signature = signature
    order.paid_at = timezone.now()
    order.save()
    return order


def verify_renewal_payment(config, merchant, order_id, payment_id, signature, plan=None):
    if not verify_signature(order_id, payment_id, signature, config.razorpay_key_secret):
        logger.warning(f"Invalid renewal payment signature for order {order_id} (merchant {merchant.id})")
        raise AuthError("Invalid payment signature.")

    order = RenewalOrder.objects.filter(razorpay_order_id=order_id, merchant=merchant).first()
    if order is None:
        raise NotFoundError("Renewal order not found.")

    if plan and plan != order.plan:
        raise ValidationError({"plan": f"Order {order_id} was created for the {order.plan} plan."})

    try:
        return complete_renewal_order(order, payment_id, signature)
    except Exception as e:
        record_reconciliation_event(
            ReconciliationKind.RENEWAL,
            order_id,
            {
                "order_id": order_id,
                "payment_id": payment_id,
                "signature": signature,
                "merchant_id": str(merchant.id),
            },
            error=e,
        )
        raise


def reconcile_pending_renewal_orders(config, gateway=None, now=None):
    """
    Polling fallback for renewal orders whose callback never arrived.
    Checks CREATED orders older than RECONCILE_TIME minutes.
    """
    now = now or timezone.now()
    gateway = gateway or RazorpayGateway(config)
    threshold = now - timezone.timedelta(minutes=RECONCILE_TIME)
    failed_before = now - timezone.timedelta(hours=RECONCILE_FAILED_ORDER_TTL)

    summary = {"checked": 0, "completed": 0, "failed": 0}
    pending = RenewalOrder.objects.filter(status=RenewalOrderStatus.CREATED, created_at__lt=threshold)

    for order in pending:
        summary["checked"] += 1
        try:
            remote = gateway.fetch_order(order.razorpay_order_id)
            if remote.get("status") == "paid":
                payments = gateway.fetch_order_payments(order.razorpay_order_id)
                captured = next(
                    (p for p in payments if p.get("status") in ("captured", "authorized")),
                    None,
                )
                if captured:
                    complete_renewal_order(order, captured["id"])
                    summary["completed"] += 1
            elif remote.get("status") == "attempted" and order.created_at < failed_before:
                order.status = RenewalOrderStatus.FAILED
                order.save(update_fields=["status", "updated_at"])
                summary["failed"] += 1
        except Exception:
            logger.exception(f"Error reconciling renewal order {order.razorpay_order_id}")

    logger.info(f"Renewal reconciliation finished: {summary}")
    return summary


# -----------------------
# Chit plan payments
# -----------------------

def _get_chit_plan(chit_plan_id):
    chit_plan = ChitPlan.objects.select_related("merchant", "merchant__account").filter(pk=chit_plan_id).first()
    if chit_plan is None:
        raise NotFoundError("Chit plan not found.")
    return chit_plan


def _get_user(user_id):
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFoundError("User not found.")
    return user


def build_paypal_payment(config, chit_plan, user_id, amount):
    query = urlencode({
        "user_id": str(user_id),
        "chit_plan_id": str(chit_plan.id),
        "amount": amount,
    })
    base_url = config.public_base_url
    return {
        "intent": "sale",
        "payer": {"payment_method": "paypal"},
        "redirect_urls": {
            "return_url": f"{base_url}{reverse('payment-success')}?{query}",
            "cancel_url": f"{base_url}{reverse('payment-cancel')}",
        },
        "transactions": [{
            "item_list": {
                "items": [{
                    "name": f"Chit Plan: {chit_plan.plan_name}",
                    "sku": str(chit_plan.id),
                    "price": amount,
                    "currency": config.paypal_currency,
                    "quantity": 1,
                }]
            },
            "amount": {"currency": config.paypal_currency, "total": amount},
            "description": f"Payment for Chit Plan {chit_plan.plan_name}",
            "payee": {"email": chit_plan.merchant.paypal_email},
        }],
    }


def create_chit_plan_payment(config, user, chit_plan_id, amount, gateway=None):
    """
    Starts a PayPal sale payable to the plan's merchant and returns the
    approval URL the subscriber is redirected to.
    """
    chit_plan = _get_chit_plan(chit_plan_id)
    merchant = chit_plan.merchant

    if merchant.kyc_status != VerificationStatusChoices.VERIFIED:
        raise PermissionDenied(
            f"Merchant is not verified to receive payments. Verification Status: {merchant.kyc_status}"
        )
    if not merchant.paypal_email:
        raise ValidationError("Merchant does not have a PayPal account linked.")

    amount = f"{parse_amount(amount):.2f}"
    payload = build_paypal_payment(config, chit_plan, user.id, amount)

    gateway = gateway or PayPalGateway(config)
    payment, approval_url = gateway.create_payment(payload)
    logger.info(f"PayPal payment {payment.get('id')} created for chit plan {chit_plan.id} by user {user.id}")
    return approval_url


def apply_payment_completion(chit_plan_id, user_id, amount, gateway_payment_id, gateway_payload,
                             currency="USD"):
    """
    Records a gateway-confirmed chit plan payment.

    The merchant always comes from the chit plan. Replaying the same gateway
    payment id returns the existing record instead of creating another.
    """
    existing = Payment.objects.filter(payment_id=gateway_payment_id).first()
    if existing:
        logger.info(f"Payment {gateway_payment_id} already recorded, skipping")
        return existing

    chit_plan = _get_chit_plan(chit_plan_id)
    user = _get_user(user_id)
    amount = parse_amount(amount)

    try:
        with transaction.atomic():
            payment = Payment.objects.create(
                user=user,
                merchant=chit_plan.merchant,
                chit_plan=chit_plan,
                amount=amount,
                currency=currency,
                payment_id=gateway_payment_id,
                status=PaymentStatus.COMPLETED,
                gateway_response=gateway_payload or {},
                paid_at=timezone.now(),
            )
    except IntegrityError:
        # a concurrent callback recorded it first
        return Payment.objects.get(payment_id=gateway_payment_id)

    logger.info(f"Payment {gateway_payment_id} of {amount} {currency} recorded for chit plan {chit_plan.id}")
    notify_payment_received(payment)
    return payment


def execute_chit_plan_payment(config, payment_id, payer_id, user_id, chit_plan_id, amount, gateway=None):
    """
    Handles the PayPal return redirect: executes the approved payment and
    records it. A local failure after PayPal has taken the money is parked
    as a reconciliation event.
    """
    if not payment_id or not payer_id:
        raise ValidationError("paymentId and PayerID are required.")

    # reject bad callbacks before any money moves
    _get_chit_plan(chit_plan_id)
    _get_user(user_id)
    amount = f"{parse_amount(amount):.2f}"

    existing = Payment.objects.filter(payment_id=payment_id).first()
    if existing:
        return existing

    gateway = gateway or PayPalGateway(config)
    executed = gateway.execute_payment(payment_id, payer_id, amount, config.paypal_currency)

    try:
        return apply_payment_completion(
            chit_plan_id, user_id, amount, payment_id, executed, currency=config.paypal_currency
        )
    except Exception as e:
        record_reconciliation_event(
            ReconciliationKind.CHIT_PAYMENT,
            payment_id,
            {
                "chit_plan_id": str(chit_plan_id),
                "user_id": str(user_id),
                "amount": amount,
                "currency": config.paypal_currency,
                "payment_id": payment_id,
                "gateway_payload": executed,
            },
            error=e,
        )
        raise


def notify_payment_received(payment):
    merchant = payment.merchant
    return notifications.send(
        merchant.email,
        "Payment received",
        {
            "name": merchant.name,
            "amount": str(payment.amount),
            "currency": payment.currency,
            "plan_name": payment.chit_plan.plan_name,
            "payment_id": payment.payment_id,
        },
        template="payment_received",
    )


# -----------------------
# Reconciliation
# -----------------------

def record_reconciliation_event(kind, reference, payload, error=None):
    event = ReconciliationEvent.objects.create(
        kind=kind,
        reference=reference,
        payload=payload,
        processing_error=str(error) if error else None,
    )
    logger.error(f"Gateway confirmed {kind} {reference} but the local commit failed: {error}")

    from payments.tasks import process_reconciliation_event
    transaction.on_commit(lambda: process_reconciliation_event.delay(str(event.id)))
    return event


def process_reconciliation_event(event):
    """
    Re-applies the local side of a gateway-confirmed transition.
    Both branches are idempotent, so an event may be processed again safely.
    """
    payload = event.payload

    if event.kind == ReconciliationKind.RENEWAL:
        order = RenewalOrder.objects.filter(razorpay_order_id=payload["order_id"]).first()
        if order is None:
            raise NotFoundError(f"Renewal order {payload['order_id']} not found.")
        complete_renewal_order(order, payload["payment_id"], payload.get("signature"))

    elif event.kind == ReconciliationKind.CHIT_PAYMENT:
        apply_payment_completion(
            payload["chit_plan_id"],
            payload["user_id"],
            Decimal(payload["amount"]),
            payload["payment_id"],
            payload.get("gateway_payload"),
            currency=payload.get("currency", "USD"),
        )

    else:
        raise ValidationError(f"Unknown reconciliation event kind: {event.kind}")

    event.is_processed = True
    event.processed_at = timezone.now()
    event.processing_error = None
    event.save(update_fields=["is_processed", "processed_at", "processing_error"])
    return event
