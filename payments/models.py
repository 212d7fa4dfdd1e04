import uuid
from django.conf import settings
from django.db import models

from core.choices import MerchantPlanChoices
from core.constants import DEFAULT_CURRENCY


class PaymentStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    COMPLETED = "Completed", "Completed"
    FAILED = "Failed", "Failed"


class RenewalOrderStatus(models.TextChoices):
    CREATED = "CREATED", "Created"
    PAID = "PAID", "Paid"
    FAILED = "FAILED", "Failed"


class ReconciliationKind(models.TextChoices):
    RENEWAL = "RENEWAL", "Renewal"
    CHIT_PAYMENT = "CHIT_PAYMENT", "Chit plan payment"


class Payment(models.Model):
    """
    A chit plan payment confirmed by the gateway. Append-only.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    merchant = models.ForeignKey(
        "merchants.Merchant",
        on_delete=models.PROTECT,
        related_name="payments_received",
    )
    chit_plan = models.ForeignKey(
        "chit_plans.ChitPlan",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")

    # Gateway payment identifier
    payment_id = models.CharField(max_length=100, unique=True)

    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )

    gateway_response = models.JSONField(default=dict, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "payments"
        indexes = [
            models.Index(fields=["status", "created_at"], name="payments_status_created_idx"),
        ]

    def __str__(self):
        return f"Payment {self.payment_id} - {self.status}"


class RenewalOrder(models.Model):
    """
    A merchant subscription renewal order issued to gateway A.
    Callbacks are checked against this record, never against client input.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    merchant = models.ForeignKey(
        "merchants.Merchant",
        on_delete=models.CASCADE,
        related_name="renewal_orders",
    )

    plan = models.CharField(max_length=20, choices=MerchantPlanChoices.choices)

    # Minor units (paise)
    amount = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
    receipt = models.CharField(max_length=40)

    # Razorpay identifiers
    razorpay_order_id = models.CharField(max_length=100, unique=True)
    razorpay_payment_id = models.CharField(max_length=100, blank=True)
    razorpay_signature = models.CharField(max_length=255, blank=True)

    status = models.CharField(
        max_length=20,
        choices=RenewalOrderStatus.choices,
        default=RenewalOrderStatus.CREATED,
        db_index=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "renewal_orders"
        indexes = [
            models.Index(fields=["status", "created_at"], name="renewal_status_created_idx"),
        ]

    def __str__(self):
        return f"{self.razorpay_order_id} ({self.status})"


class ReconciliationEvent(models.Model):
    """
    Money moved at the gateway but the local commit failed.
    Retried by the reconciliation task until processed.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    kind = models.CharField(max_length=20, choices=ReconciliationKind.choices, db_index=True)

    # Gateway order or payment identifier
    reference = models.CharField(max_length=100, db_index=True)
    payload = models.JSONField(default=dict)

    is_processed = models.BooleanField(default=False, db_index=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    attempts = models.PositiveIntegerField(default=0)
    processing_error = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "reconciliation_events"
        indexes = [
            models.Index(fields=["is_processed", "created_at"], name="recon_processed_created_idx"),
        ]

    def __str__(self):
        return f"{self.kind} - {self.reference}"
