import uuid
from django.conf import settings
from django.db import models

from core.choices import ChitSubscriberStatusChoices
from merchants.models import Merchant


class ChitPlan(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    merchant = models.ForeignKey(
        Merchant,
        on_delete=models.CASCADE,
        related_name="chit_plans",
    )

    plan_name = models.CharField(max_length=255)
    monthly_amount = models.DecimalField(max_digits=12, decimal_places=2)
    duration_months = models.PositiveIntegerField()
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    description = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "chit_plans"
        indexes = [
            models.Index(fields=["merchant"], name="chit_plans_merchant_idx"),
            models.Index(fields=["created_at"], name="chit_plans_created_idx"),
        ]

    def __str__(self):
        return self.plan_name

    def compute_total_amount(self):
        return self.monthly_amount * self.duration_months


class ChitPlanSubscription(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    chit_plan = models.ForeignKey(
        ChitPlan,
        on_delete=models.CASCADE,
        related_name="subscribers",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chit_subscriptions",
    )

    status = models.CharField(
        max_length=20,
        choices=ChitSubscriberStatusChoices.choices,
        default=ChitSubscriberStatusChoices.ACTIVE,
    )

    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "chit_plan_subscriptions"
        constraints = [
            models.UniqueConstraint(fields=["chit_plan", "user"], name="unique_chit_plan_subscriber"),
        ]

    def __str__(self):
        return f"{self.user} -> {self.chit_plan}"
