from decimal import Decimal
from rest_framework import serializers

from chit_plans.models import ChitPlan, ChitPlanSubscription


class ChitPlanSerializer(serializers.ModelSerializer):
    merchant_id = serializers.UUIDField(read_only=True)
    merchant_name = serializers.CharField(source="merchant.name", read_only=True)
    subscriber_count = serializers.SerializerMethodField()

    class Meta:
        model = ChitPlan
        fields = [
            "id",
            "merchant_id",
            "merchant_name",
            "plan_name",
            "monthly_amount",
            "duration_months",
            "total_amount",
            "description",
            "subscriber_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "merchant_id", "merchant_name", "subscriber_count", "created_at", "updated_at"]

    def get_subscriber_count(self, obj):
        count = getattr(obj, "subscriber_count", None)
        return count if count is not None else obj.subscribers.count()


class ChitPlanWriteSerializer(serializers.ModelSerializer):
    monthly_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    duration_months = serializers.IntegerField(min_value=1)
    total_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01"), required=False
    )

    class Meta:
        model = ChitPlan
        fields = ["plan_name", "monthly_amount", "duration_months", "total_amount", "description"]

    def create(self, validated_data):
        plan = ChitPlan(**validated_data)
        if "total_amount" not in validated_data:
            plan.total_amount = plan.compute_total_amount()
        plan.save()
        return plan

    def update(self, instance, validated_data):
        for field, value in validated_data.items():
            setattr(instance, field, value)

        # an explicit total wins; otherwise keep it in step with the terms
        if "total_amount" not in validated_data and (
            "monthly_amount" in validated_data or "duration_months" in validated_data
        ):
            instance.total_amount = instance.compute_total_amount()

        instance.save()
        return instance


class ChitPlanSubscriptionSerializer(serializers.ModelSerializer):
    chit_plan_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = ChitPlanSubscription
        fields = ["id", "chit_plan_id", "user_id", "status", "joined_at"]
        read_only_fields = fields
