from decimal import Decimal
from unittest.mock import patch

from rest_framework import status
from rest_framework.test import APITestCase

from core.choices import UserRoleChoices, VerificationStatusChoices
from core.exceptions import GatewayError
from core.tests.helpers import authenticate, create_account, create_chit_plan, create_merchant
from payments.apps import get_payment_config
from payments.models import Payment, PaymentStatus, ReconciliationEvent, ReconciliationKind
from payments.signatures import generate_signature


class PayPalFlowTests(APITestCase):
    def setUp(self):
        self.merchant = create_merchant(
            kyc_status=VerificationStatusChoices.VERIFIED,
            paypal_email="payee@example.com",
        )
        self.chit_plan = create_chit_plan(self.merchant)
        self.user = create_account("asha@example.com")

    @patch("payments.services.PayPalGateway")
    def test_create_payment(self, gateway_cls):
        gateway_cls.return_value.create_payment.return_value = ({"id": "PAYID-1"}, "https://paypal.test/approve")
        authenticate(self.client, self.user)

        response = self.client.post("/api/v1/payments/pay/", {
            "chit_plan_id": str(self.chit_plan.id), "amount": "1000",
        })

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["approval_url"], "https://paypal.test/approve")

    @patch("payments.services.PayPalGateway")
    def test_gateway_failure_envelope(self, gateway_cls):
        gateway_cls.return_value.create_payment.side_effect = GatewayError(
            "PayPal payment creation failed.", payload={"name": "VALIDATION_ERROR"},
        )
        authenticate(self.client, self.user)

        response = self.client.post("/api/v1/payments/pay/", {
            "chit_plan_id": str(self.chit_plan.id), "amount": "1000",
        })

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["status"], "error")
        self.assertEqual(response.data["error"]["gateway_error"], {"name": "VALIDATION_ERROR"})

    def test_merchant_cannot_pay(self):
        authenticate(self.client, self.merchant.account)

        response = self.client.post("/api/v1/payments/pay/", {
            "chit_plan_id": str(self.chit_plan.id), "amount": "1000",
        })

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @patch("payments.services.notifications.send")
    @patch("payments.services.PayPalGateway")
    def test_success_callback_records_payment(self, gateway_cls, mock_send):
        gateway_cls.return_value.execute_payment.return_value = {"id": "PAYID-1", "state": "approved"}
        params = {
            "paymentId": "PAYID-1",
            "PayerID": "PAYER1",
            "user_id": str(self.user.id),
            "chit_plan_id": str(self.chit_plan.id),
            "amount": "1000.00",
        }

        response = self.client.get("/api/v1/payments/success/", params)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Payment Successful")
        payment = Payment.objects.get(payment_id="PAYID-1")
        self.assertEqual(payment.merchant, self.merchant)
        self.assertEqual(payment.user, self.user)

        # PayPal may redirect twice
        response = self.client.get("/api/v1/payments/success/", params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Payment.objects.count(), 1)
        gateway_cls.return_value.execute_payment.assert_called_once()

    def test_success_callback_requires_params(self):
        response = self.client.get("/api/v1/payments/success/", {"paymentId": "PAYID-1"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel(self):
        response = self.client.get("/api/v1/payments/cancel/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Payment Cancelled")


class SubscriptionOrderTests(APITestCase):
    @patch("payments.orders.RazorpayGateway")
    def test_create_order_from_display_amount(self, gateway_cls):
        gateway_cls.return_value.create_order.return_value = {"id": "order_reg_1", "status": "created"}

        response = self.client.post("/api/v1/payments/subscription-orders/", {"amount": "₹1500/mo"})

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data["data"]
        self.assertEqual(data["order_id"], "order_reg_1")
        self.assertEqual(data["amount"], 150000)
        self.assertEqual(data["currency"], "INR")
        self.assertEqual(data["order"]["id"], "order_reg_1")
        amount, currency, receipt = gateway_cls.return_value.create_order.call_args.args
        self.assertEqual((amount, currency), (150000, "INR"))
        self.assertTrue(receipt.startswith("receipt_"))

    @patch("payments.orders.RazorpayGateway")
    def test_invalid_amount(self, gateway_cls):
        response = self.client.post("/api/v1/payments/subscription-orders/", {"amount": "free"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        gateway_cls.return_value.create_order.assert_not_called()

    def test_verify_signature(self):
        secret = get_payment_config().razorpay_key_secret
        data = {
            "razorpay_order_id": "order_reg_1",
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": generate_signature("order_reg_1", "pay_1", secret),
        }

        response = self.client.post("/api/v1/payments/subscription-orders/verify/", data)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["payment_id"], "pay_1")

        data["razorpay_payment_id"] = "pay_2"
        response = self.client.post("/api/v1/payments/subscription-orders/verify/", data)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["status"], "failed")
        self.assertEqual(response.data["message"], "Invalid signature")


class PaymentListTests(APITestCase):
    def setUp(self):
        self.admin = create_account("admin@example.com", role=UserRoleChoices.ADMIN)
        self.merchant = create_merchant()
        self.other_merchant = create_merchant("other@example.com")
        self.user = create_account("asha@example.com")
        self.other_user = create_account("ravi@example.com")

        self.mine = self.make_payment("PAYID-1", self.user, create_chit_plan(self.merchant))
        self.theirs = self.make_payment("PAYID-2", self.other_user, create_chit_plan(self.other_merchant))

    def make_payment(self, payment_id, user, chit_plan):
        return Payment.objects.create(
            user=user,
            merchant=chit_plan.merchant,
            chit_plan=chit_plan,
            amount=Decimal("1000.00"),
            payment_id=payment_id,
            status=PaymentStatus.COMPLETED,
        )

    def ids(self, response):
        return {p["payment_id"] for p in response.data["data"]}

    def test_admin_sees_all(self):
        authenticate(self.client, self.admin)

        self.assertEqual(self.ids(self.client.get("/api/v1/payments/")), {"PAYID-1", "PAYID-2"})

    def test_merchant_sees_received(self):
        authenticate(self.client, self.merchant.account)

        self.assertEqual(self.ids(self.client.get("/api/v1/payments/")), {"PAYID-1"})

    def test_user_sees_own(self):
        authenticate(self.client, self.other_user)

        self.assertEqual(self.ids(self.client.get("/api/v1/payments/")), {"PAYID-2"})

    def test_status_filter(self):
        authenticate(self.client, self.admin)

        response = self.client.get("/api/v1/payments/", {"status": PaymentStatus.FAILED})

        self.assertEqual(self.ids(response), set())


class ReconciliationEventListTests(APITestCase):
    def setUp(self):
        self.admin = create_account("admin@example.com", role=UserRoleChoices.ADMIN)
        ReconciliationEvent.objects.create(kind=ReconciliationKind.RENEWAL, reference="order_1", payload={})
        ReconciliationEvent.objects.create(
            kind=ReconciliationKind.CHIT_PAYMENT, reference="PAYID-1", payload={}, is_processed=True,
        )

    def test_admin_filters_unprocessed(self):
        authenticate(self.client, self.admin)

        response = self.client.get("/api/v1/payments/reconciliation-events/", {"is_processed": "false"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e["reference"] for e in response.data["data"]], ["order_1"])

    def test_non_admin_forbidden(self):
        authenticate(self.client, create_account("asha@example.com"))

        response = self.client.get("/api/v1/payments/reconciliation-events/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
