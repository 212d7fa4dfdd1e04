from rest_framework import serializers

from core.choices import MerchantStatusChoices, VerificationStatusChoices
from merchants.models import Merchant


class MerchantListSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(read_only=True)
    subscription_status = serializers.SerializerMethodField()
    chit_plan_count = serializers.SerializerMethodField()

    class Meta:
        model = Merchant
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "address",
            "plan",
            "status",
            "subscription_start_date",
            "subscription_expiry_date",
            "subscription_status",
            "kyc_status",
            "chit_plan_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_subscription_status(self, obj):
        return obj.current_subscription_status()

    def get_chit_plan_count(self, obj):
        # annotated by the list view; fall back to a count query
        count = getattr(obj, "chit_plan_count", None)
        return count if count is not None else obj.chit_plans.count()


class MerchantDetailSerializer(MerchantListSerializer):
    class Meta(MerchantListSerializer.Meta):
        fields = MerchantListSerializer.Meta.fields + [
            "account_holder_name",
            "account_number",
            "ifsc_code",
            "bank_name",
            "branch_name",
            "bank_verification_status",
            "paypal_email",
            "gstin",
            "registration_payment_id",
            "version",
            "updated_at",
        ]
        read_only_fields = fields


class MerchantUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, required=False)
    phone = serializers.CharField(max_length=20, required=False)
    address = serializers.CharField(required=False)

    account_holder_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    account_number = serializers.CharField(max_length=34, required=False, allow_blank=True)
    ifsc_code = serializers.CharField(max_length=11, required=False, allow_blank=True)
    bank_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    branch_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    gstin = serializers.CharField(max_length=15, required=False, allow_blank=True)
    paypal_email = serializers.EmailField(required=False, allow_blank=True)

    def validate_ifsc_code(self, value):
        return value.upper()

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No fields to update.")
        return attrs


class MerchantStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=MerchantStatusChoices.choices)


class MerchantVerificationSerializer(serializers.Serializer):
    kyc_status = serializers.ChoiceField(choices=VerificationStatusChoices.choices, required=False)
    bank_verification_status = serializers.ChoiceField(choices=VerificationStatusChoices.choices, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError(
                "Provide kyc_status and/or bank_verification_status."
            )
        return attrs


class PlanSerializer(serializers.Serializer):
    # validated against the price table by the renewal services
    plan = serializers.CharField(max_length=20)


class RenewalVerifySerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField(max_length=100)
    razorpay_payment_id = serializers.CharField(max_length=100)
    razorpay_signature = serializers.CharField(max_length=255)
    plan = serializers.CharField(max_length=20, required=False, allow_blank=True)
