import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone

from core.choices import (
    MerchantPlanChoices,
    MerchantStatusChoices,
    SubscriptionStatusChoices,
    VerificationStatusChoices,
)
from merchants.subscriptions import effective_subscription_status


class Merchant(models.Model):
    """
    Plan issuer. One merchant profile per MERCHANT account.

    `version` is bumped on every state write made through the services so
    concurrent renewals can detect a lost update.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    account = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="merchant_profile",
    )

    name = models.CharField(max_length=150)
    phone = models.CharField(max_length=20)
    address = models.TextField()

    plan = models.CharField(
        max_length=20,
        choices=MerchantPlanChoices.choices,
        default=MerchantPlanChoices.STANDARD,
    )

    status = models.CharField(
        max_length=20,
        choices=MerchantStatusChoices.choices,
        default=MerchantStatusChoices.PENDING,
        db_index=True,
    )

    subscription_start_date = models.DateTimeField(null=True, blank=True)
    subscription_expiry_date = models.DateTimeField(null=True, blank=True)
    subscription_status = models.CharField(
        max_length=20,
        choices=SubscriptionStatusChoices.choices,
        default=SubscriptionStatusChoices.INACTIVE,
        db_index=True,
    )

    version = models.PositiveIntegerField(default=0)

    # Bank details
    account_holder_name = models.CharField(max_length=150, blank=True)
    account_number = models.CharField(max_length=34, blank=True)
    ifsc_code = models.CharField(max_length=11, blank=True)
    bank_name = models.CharField(max_length=150, blank=True)
    branch_name = models.CharField(max_length=150, blank=True)
    bank_verification_status = models.CharField(
        max_length=20,
        choices=VerificationStatusChoices.choices,
        default=VerificationStatusChoices.PENDING,
    )

    kyc_status = models.CharField(
        max_length=20,
        choices=VerificationStatusChoices.choices,
        default=VerificationStatusChoices.PENDING,
    )
    paypal_email = models.EmailField(blank=True)
    gstin = models.CharField(max_length=15, blank=True)

    # Gateway payment reference for the registration fee
    registration_payment_id = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "merchants"
        indexes = [
            models.Index(fields=["status", "created_at"], name="merchants_status_created_idx"),
            models.Index(fields=["subscription_expiry_date"], name="merchants_expiry_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.status})"

    @property
    def email(self):
        return self.account.email

    @property
    def is_approved(self):
        return self.status == MerchantStatusChoices.APPROVED

    def current_subscription_status(self, now=None):
        return effective_subscription_status(
            self.subscription_status,
            self.subscription_expiry_date,
            now or timezone.now(),
        )
