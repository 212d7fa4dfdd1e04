from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from core.choices import VerificationStatusChoices
from core.exceptions import InvalidPlanError, NotFoundError, ValidationError
from core.tests.helpers import create_account, create_chit_plan, create_merchant
from merchants.models import Merchant
from payments import services
from payments.models import (
    Payment,
    PaymentStatus,
    ReconciliationEvent,
    ReconciliationKind,
    RenewalOrder,
    RenewalOrderStatus,
)
from payments.signatures import generate_signature
from payments.tasks import process_reconciliation_event, retry_reconciliation_events_job
from payments.tests.test_orders import CONFIG


def make_renewal_order(merchant, order_id="order_1", plan="Standard", age=None):
    order = RenewalOrder.objects.create(
        merchant=merchant,
        plan=plan,
        amount=150000,
        receipt=f"renewal_{order_id}",
        razorpay_order_id=order_id,
    )
    if age is not None:
        RenewalOrder.objects.filter(pk=order.pk).update(created_at=timezone.now() - age)
        order.refresh_from_db()
    return order


class RenewalTests(TestCase):
    def setUp(self):
        self.now = timezone.now()
        self.expiry = self.now + timedelta(days=10)
        self.merchant = create_merchant(subscription_expiry_date=self.expiry)

    def test_apply_renewal_stacks(self):
        services.apply_renewal(self.merchant, "Premium", now=self.now)
        merchant = services.apply_renewal(self.merchant, "Premium", now=self.now)

        self.assertEqual(merchant.plan, "Premium")
        self.assertEqual(merchant.subscription_expiry_date, self.expiry + timedelta(days=60))
        self.assertEqual(merchant.version, 2)

    def test_concurrent_renewals_both_land(self):
        first = Merchant.objects.get(pk=self.merchant.pk)
        second = Merchant.objects.get(pk=self.merchant.pk)

        services.apply_renewal(first, "Standard", now=self.now)
        services.apply_renewal(second, "Standard", now=self.now)

        self.merchant.refresh_from_db()
        self.assertEqual(self.merchant.subscription_expiry_date, self.expiry + timedelta(days=60))

    def test_lapsed_subscription_restarts_from_now(self):
        self.merchant.subscription_expiry_date = self.now - timedelta(days=2)
        self.merchant.save()

        merchant = services.apply_renewal(self.merchant, "Standard", now=self.now)

        self.assertEqual(merchant.subscription_expiry_date, self.now + timedelta(days=30))
        self.assertEqual(merchant.subscription_start_date, self.now)

    def test_create_renewal_order(self):
        gateway = MagicMock()
        gateway.create_order.return_value = {"id": "order_1", "status": "created"}

        order, renewal_order = services.create_renewal_order(CONFIG, self.merchant, "Premium", gateway=gateway)

        self.assertEqual(order.amount, 500000)
        self.assertEqual(renewal_order.amount, 500000)
        self.assertEqual(renewal_order.razorpay_order_id, "order_1")
        notes = gateway.create_order.call_args.kwargs["notes"]
        self.assertEqual(notes, {"merchant_id": str(self.merchant.id), "plan": "Premium"})

    def test_renewal_order_with_unknown_plan(self):
        gateway = MagicMock()

        with self.assertRaises(InvalidPlanError):
            services.create_renewal_order(CONFIG, self.merchant, "Gold", gateway=gateway)

        gateway.create_order.assert_not_called()
        self.assertFalse(RenewalOrder.objects.exists())

    def test_complimentary_renewal_with_unknown_plan(self):
        with self.assertRaises(InvalidPlanError):
            services.renew_without_payment(self.merchant, "Gold", now=self.now)

        stored = Merchant.objects.get(pk=self.merchant.pk)
        self.assertEqual(stored.subscription_expiry_date, self.expiry)
        self.assertEqual(stored.version, 0)

    def test_complete_is_idempotent(self):
        order = make_renewal_order(self.merchant)

        services.complete_renewal_order(order, "pay_1", "sig", now=self.now)
        services.complete_renewal_order(order, "pay_1", "sig", now=self.now)

        self.merchant.refresh_from_db()
        self.assertEqual(self.merchant.subscription_expiry_date, self.expiry + timedelta(days=30))
        order.refresh_from_db()
        self.assertEqual(order.status, RenewalOrderStatus.PAID)
        self.assertIsNotNone(order.paid_at)

    def test_local_failure_after_payment_is_recorded(self):
        order = make_renewal_order(self.merchant)
        signature = generate_signature("order_1", "pay_1", CONFIG.razorpay_key_secret)

        with self.captureOnCommitCallbacks(execute=True):
            with patch("payments.services.apply_renewal", side_effect=DatabaseError("disk full")):
                with self.assertRaises(DatabaseError):
                    services.verify_renewal_payment(CONFIG, self.merchant, "order_1", "pay_1", signature)

            event = ReconciliationEvent.objects.get()
            self.assertEqual(event.kind, ReconciliationKind.RENEWAL)
            self.assertEqual(event.reference, "order_1")
            self.assertEqual(event.processing_error, "disk full")
            order.refresh_from_db()
            self.assertEqual(order.status, RenewalOrderStatus.CREATED)

        # the queued reconciliation task completes the renewal
        event.refresh_from_db()
        self.assertTrue(event.is_processed)
        self.assertIsNone(event.processing_error)
        order.refresh_from_db()
        self.assertEqual(order.status, RenewalOrderStatus.PAID)
        self.merchant.refresh_from_db()
        self.assertEqual(self.merchant.subscription_expiry_date, self.expiry + timedelta(days=30))


class ReconcilePendingOrdersTests(TestCase):
    def setUp(self):
        self.merchant = create_merchant()
        self.gateway = MagicMock()

    def test_paid_order_is_completed(self):
        order = make_renewal_order(self.merchant, age=timedelta(minutes=10))
        self.gateway.fetch_order.return_value = {"id": "order_1", "status": "paid"}
        self.gateway.fetch_order_payments.return_value = [
            {"id": "pay_failed", "status": "failed"},
            {"id": "pay_1", "status": "captured"},
        ]

        summary = services.reconcile_pending_renewal_orders(CONFIG, gateway=self.gateway)

        self.assertEqual(summary, {"checked": 1, "completed": 1, "failed": 0})
        order.refresh_from_db()
        self.assertEqual(order.status, RenewalOrderStatus.PAID)
        self.assertEqual(order.razorpay_payment_id, "pay_1")

    def test_recent_orders_are_left_alone(self):
        make_renewal_order(self.merchant)

        summary = services.reconcile_pending_renewal_orders(CONFIG, gateway=self.gateway)

        self.assertEqual(summary["checked"], 0)
        self.gateway.fetch_order.assert_not_called()

    def test_stale_attempted_order_fails(self):
        order = make_renewal_order(self.merchant, age=timedelta(hours=25))
        self.gateway.fetch_order.return_value = {"id": "order_1", "status": "attempted"}

        summary = services.reconcile_pending_renewal_orders(CONFIG, gateway=self.gateway)

        self.assertEqual(summary["failed"], 1)
        order.refresh_from_db()
        self.assertEqual(order.status, RenewalOrderStatus.FAILED)

    def test_gateway_error_does_not_stop_the_sweep(self):
        make_renewal_order(self.merchant, order_id="order_1", age=timedelta(minutes=10))
        make_renewal_order(self.merchant, order_id="order_2", age=timedelta(minutes=10))
        self.gateway.fetch_order.side_effect = [Exception("timeout"), {"status": "created"}]

        summary = services.reconcile_pending_renewal_orders(CONFIG, gateway=self.gateway)

        self.assertEqual(summary["checked"], 2)
        self.assertEqual(self.gateway.fetch_order.call_count, 2)


@patch("payments.services.notifications.send")
class ChitPlanPaymentTests(TestCase):
    def setUp(self):
        self.merchant = create_merchant(
            kyc_status=VerificationStatusChoices.VERIFIED,
            paypal_email="payee@example.com",
        )
        self.chit_plan = create_chit_plan(self.merchant)
        self.user = create_account("asha@example.com")
        self.gateway = MagicMock()

    def test_create_payment(self, mock_send):
        self.gateway.create_payment.return_value = ({"id": "PAYID-1"}, "https://paypal.test/approve")

        approval_url = services.create_chit_plan_payment(
            CONFIG, self.user, self.chit_plan.id, "1000", gateway=self.gateway,
        )

        self.assertEqual(approval_url, "https://paypal.test/approve")
        payload = self.gateway.create_payment.call_args.args[0]
        self.assertEqual(payload["transactions"][0]["amount"], {"currency": "USD", "total": "1000.00"})
        self.assertEqual(payload["transactions"][0]["payee"], {"email": "payee@example.com"})
        return_url = payload["redirect_urls"]["return_url"]
        self.assertTrue(return_url.startswith("http://testserver/api/v1/payments/success/?"))
        self.assertIn(f"chit_plan_id={self.chit_plan.id}", return_url)

    def test_unverified_merchant_cannot_receive(self, mock_send):
        self.merchant.kyc_status = VerificationStatusChoices.PENDING
        self.merchant.save()

        with self.assertRaises(PermissionDenied):
            services.create_chit_plan_payment(CONFIG, self.user, self.chit_plan.id, "1000", gateway=self.gateway)

        self.gateway.create_payment.assert_not_called()

    def test_merchant_without_paypal(self, mock_send):
        self.merchant.paypal_email = ""
        self.merchant.save()

        with self.assertRaises(ValidationError):
            services.create_chit_plan_payment(CONFIG, self.user, self.chit_plan.id, "1000", gateway=self.gateway)

    def test_unknown_plan(self, mock_send):
        with self.assertRaises(NotFoundError):
            services.create_chit_plan_payment(
                CONFIG, self.user, "00000000-0000-0000-0000-000000000000", "1000", gateway=self.gateway,
            )

    def test_completion_is_idempotent(self, mock_send):
        first = services.apply_payment_completion(self.chit_plan.id, self.user.id, "1000.00", "PAYID-1", {})
        second = services.apply_payment_completion(self.chit_plan.id, self.user.id, "1000.00", "PAYID-1", {})

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Payment.objects.count(), 1)
        self.assertEqual(first.merchant, self.merchant)
        self.assertEqual(first.status, PaymentStatus.COMPLETED)
        self.assertEqual(first.amount, Decimal("1000.00"))
        mock_send.assert_called_once()
        self.assertEqual(mock_send.call_args.kwargs["template"], "payment_received")

    def test_execute_records_payment(self, mock_send):
        self.gateway.execute_payment.return_value = {"id": "PAYID-1", "state": "approved"}

        payment = services.execute_chit_plan_payment(
            CONFIG, "PAYID-1", "PAYER1", self.user.id, self.chit_plan.id, "1000", gateway=self.gateway,
        )

        self.assertEqual(payment.payment_id, "PAYID-1")
        self.assertEqual(payment.gateway_response["state"], "approved")
        self.gateway.execute_payment.assert_called_once_with("PAYID-1", "PAYER1", "1000.00", "USD")

    def test_execute_replay_skips_gateway(self, mock_send):
        services.apply_payment_completion(self.chit_plan.id, self.user.id, "1000", "PAYID-1", {})

        payment = services.execute_chit_plan_payment(
            CONFIG, "PAYID-1", "PAYER1", self.user.id, self.chit_plan.id, "1000", gateway=self.gateway,
        )

        self.assertEqual(payment.payment_id, "PAYID-1")
        self.gateway.execute_payment.assert_not_called()

    def test_execute_rejects_bad_callback_before_gateway(self, mock_send):
        with self.assertRaises(NotFoundError):
            services.execute_chit_plan_payment(
                CONFIG, "PAYID-1", "PAYER1", "00000000-0000-0000-0000-000000000000",
                self.chit_plan.id, "1000", gateway=self.gateway,
            )
        with self.assertRaises(ValidationError):
            services.execute_chit_plan_payment(
                CONFIG, "PAYID-1", "PAYER1", self.user.id, self.chit_plan.id, "free", gateway=self.gateway,
            )

        self.gateway.execute_payment.assert_not_called()

    def test_execute_local_failure_is_reconciled(self, mock_send):
        self.gateway.execute_payment.return_value = {"id": "PAYID-1", "state": "approved"}

        with patch("payments.services.apply_payment_completion", side_effect=DatabaseError("locked")):
            with self.assertRaises(DatabaseError):
                services.execute_chit_plan_payment(
                    CONFIG, "PAYID-1", "PAYER1", self.user.id, self.chit_plan.id, "1000", gateway=self.gateway,
                )

        event = ReconciliationEvent.objects.get()
        self.assertEqual(event.kind, ReconciliationKind.CHIT_PAYMENT)
        self.assertEqual(event.payload["amount"], "1000.00")
        self.assertFalse(Payment.objects.exists())

        process_reconciliation_event(str(event.id))

        event.refresh_from_db()
        self.assertTrue(event.is_processed)
        self.assertEqual(event.attempts, 1)
        payment = Payment.objects.get(payment_id="PAYID-1")
        self.assertEqual(payment.gateway_response["state"], "approved")


class ReconciliationTaskTests(TestCase):
    def test_missing_event(self):
        self.assertEqual(process_reconciliation_event("00000000-0000-0000-0000-000000000000"), "Missing")

    def test_processed_event_is_skipped(self):
        event = ReconciliationEvent.objects.create(
            kind=ReconciliationKind.RENEWAL, reference="order_1", payload={}, is_processed=True,
        )

        self.assertEqual(process_reconciliation_event(str(event.id)), "Already processed")

    def test_retry_job_requeues_unprocessed_events(self):
        pending = ReconciliationEvent.objects.create(
            kind=ReconciliationKind.RENEWAL, reference="order_1", payload={"order_id": "order_1"},
        )
        ReconciliationEvent.objects.create(
            kind=ReconciliationKind.RENEWAL, reference="order_2", payload={}, is_processed=True,
        )
        ReconciliationEvent.objects.create(
            kind=ReconciliationKind.RENEWAL, reference="order_3", payload={}, attempts=10,
        )

        with patch("payments.tasks.process_reconciliation_event.delay") as mock_delay:
            result = retry_reconciliation_events_job()

        self.assertEqual(result, "Queued 1 reconciliation events")
        mock_delay.assert_called_once_with(str(pending.id))
