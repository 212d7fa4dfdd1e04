import logging
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status

from core.pagination import DefaultPagination
from core.permissions import IsAdmin, IsEndUser
from core.principals import AdminPrincipal, MerchantPrincipal
from payments.apps import get_payment_config
from payments.models import Payment, ReconciliationEvent
from payments.orders import create_order
from payments.serializers import (
    PaymentSerializer,
    ReconciliationEventSerializer,
    PayPalPaymentCreateSerializer,
    PayPalCallbackSerializer,
    SubscriptionOrderSerializer,
    SignatureVerifySerializer,
)
from payments.services import create_chit_plan_payment, execute_chit_plan_payment
from payments.signatures import verify_signature

logger = logging.getLogger("chitvault.payments")


# --- CHIT PLAN PAYMENTS (PayPal) ---

class PayPalPaymentCreateAPIView(APIView):
    """
    POST /payments/pay/ -> approval URL for a chit plan payment
    """
    permission_classes = [IsAuthenticated, IsEndUser]

    def post(self, request):
        serializer = PayPalPaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        approval_url = create_chit_plan_payment(
            get_payment_config(),
            request.user.account,
            serializer.validated_data["chit_plan_id"],
            serializer.validated_data["amount"],
        )

        return Response(
            {
                "status": "success",
                "message": "Payment created. Redirect the payer to the approval URL.",
                "data": {"approval_url": approval_url},
            },
            status=status.HTTP_201_CREATED,
        )


class PayPalSuccessAPIView(APIView):
    """
    GET /payments/success/ -> PayPal return URL; executes the payment
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        serializer = PayPalCallbackSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payment = execute_chit_plan_payment(
            get_payment_config(),
            payment_id=data["paymentId"],
            payer_id=data["PayerID"],
            user_id=data["user_id"],
            chit_plan_id=data["chit_plan_id"],
            amount=data["amount"],
        )

        return Response(
            {
                "status": "success",
                "message": "Payment Successful",
                "data": PaymentSerializer(payment).data,
            },
            status=status.HTTP_200_OK,
        )


class PayPalCancelAPIView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(
            {
                "status": "success",
                "message": "Payment Cancelled",
                "data": None,
            },
            status=status.HTTP_200_OK,
        )


# --- REGISTRATION SUBSCRIPTION (Razorpay) ---

class SubscriptionOrderCreateAPIView(APIView):
    """
    POST /payments/subscription-orders/ -> order for the merchant registration fee
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = SubscriptionOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        config = get_payment_config()
        order = create_order(
            config,
            amount=serializer.validated_data["amount"],
            currency=serializer.validated_data["currency"],
            receipt_prefix="receipt",
        )

        data = order.as_response(key_id=config.razorpay_key_id)
        data["order"] = order.gateway_order

        return Response(
            {
                "status": "success",
                "message": "Payment order created successfully",
                "data": data,
            },
            status=status.HTTP_201_CREATED,
        )


class SubscriptionPaymentVerifyAPIView(APIView):
    """
    POST /payments/subscription-orders/verify/ -> signature check only, no state change
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = SignatureVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        is_valid = verify_signature(
            data["razorpay_order_id"],
            data["razorpay_payment_id"],
            data["razorpay_signature"],
            get_payment_config().razorpay_key_secret,
        )

        if not is_valid:
            logger.warning(f"Invalid subscription payment signature for order {data['razorpay_order_id']}")
            return Response(
                {
                    "status": "failed",
                    "message": "Invalid signature",
                    "error": None,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            {
                "status": "success",
                "message": "Payment verified",
                "data": {"payment_id": data["razorpay_payment_id"]},
            },
            status=status.HTTP_200_OK,
        )


# --- LISTINGS ---

class PaymentListAPIView(APIView):
    """
    GET /payments/
    ADMIN: all payments, MERCHANT: payments received, USER: own payments
    """
    permission_classes = [IsAuthenticated]

    def get_queryset(self, request):
        qs = Payment.objects.select_related("chit_plan")
        principal = request.user

        if isinstance(principal, AdminPrincipal):
            pass
        elif isinstance(principal, MerchantPrincipal):
            qs = qs.filter(merchant_id=principal.merchant.id)
        else:
            qs = qs.filter(user_id=principal.id)

        payment_status = request.query_params.get("status")
        if payment_status:
            qs = qs.filter(status=payment_status)

        return qs.order_by("-created_at")

    def get(self, request):
        paginator = DefaultPagination()
        page = paginator.paginate_queryset(self.get_queryset(request), request)

        response_data = {
            "status": "success",
            "message": "Payments retrieved successfully",
            "data": PaymentSerializer(page, many=True).data,
        }
        response_data.update(paginator.get_root_pagination_data())

        return Response(response_data, status=status.HTTP_200_OK)


class ReconciliationEventListAPIView(APIView):
    """
    GET /payments/reconciliation-events/?is_processed=
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        qs = ReconciliationEvent.objects.all()

        is_processed = request.query_params.get("is_processed")
        if is_processed:
            qs = qs.filter(is_processed=is_processed.lower() == "true")

        paginator = DefaultPagination()
        page = paginator.paginate_queryset(qs.order_by("-created_at"), request)

        response_data = {
            "status": "success",
            "message": "Reconciliation events retrieved successfully",
            "data": ReconciliationEventSerializer(page, many=True).data,
        }
        response_data.update(paginator.get_root_pagination_data())

        return Response(response_data, status=status.HTTP_200_OK)
