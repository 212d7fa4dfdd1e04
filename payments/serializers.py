from rest_framework import serializers

from core.constants import DEFAULT_CURRENCY
from payments.models import Payment, ReconciliationEvent


class PaymentSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True)
    merchant_id = serializers.UUIDField(read_only=True)
    chit_plan_id = serializers.UUIDField(read_only=True)
    plan_name = serializers.CharField(source="chit_plan.plan_name", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "user_id",
            "merchant_id",
            "chit_plan_id",
            "plan_name",
            "amount",
            "currency",
            "payment_id",
            "status",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields


class ReconciliationEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReconciliationEvent
        fields = '__all__'


class PayPalPaymentCreateSerializer(serializers.Serializer):
    chit_plan_id = serializers.UUIDField()
    # free-form; parsed and checked by the payment services
    amount = serializers.CharField(max_length=32)


class PayPalCallbackSerializer(serializers.Serializer):
    """Query string PayPal appends to our return URL."""
    paymentId = serializers.CharField(max_length=100)
    PayerID = serializers.CharField(max_length=100)
    user_id = serializers.UUIDField()
    chit_plan_id = serializers.UUIDField()
    amount = serializers.CharField(max_length=32)


class SubscriptionOrderSerializer(serializers.Serializer):
    amount = serializers.CharField(max_length=32)
    currency = serializers.CharField(max_length=3, default=DEFAULT_CURRENCY)

    def validate_currency(self, value):
        return value.upper()


class SignatureVerifySerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField(max_length=100)
    razorpay_payment_id = serializers.CharField(max_length=100)
    razorpay_signature = serializers.CharField(max_length=255)
