# core/choices.py
from django.db import models

class UserRoleChoices(models.TextChoices):
    ADMIN = "ADMIN", "Admin"
    MERCHANT = "MERCHANT", "Merchant"
    USER = "USER", "User"


class MerchantPlanChoices(models.TextChoices):
    STANDARD = "Standard", "Standard"
    PREMIUM = "Premium", "Premium"


class MerchantStatusChoices(models.TextChoices):
    PENDING = "Pending", "Pending"
    APPROVED = "Approved", "Approved"
    REJECTED = "Rejected", "Rejected"


class SubscriptionStatusChoices(models.TextChoices):
    INACTIVE = "inactive", "Inactive"
    ACTIVE = "active", "Active"
    EXPIRED = "expired", "Expired"
    CANCELLED = "cancelled", "Cancelled"


class VerificationStatusChoices(models.TextChoices):
    PENDING = "pending", "Pending"
    VERIFIED = "verified", "Verified"
    FAILED = "failed", "Failed"


class ChitSubscriberStatusChoices(models.TextChoices):
    ACTIVE = "active", "Active"
    COMPLETED = "completed", "Completed"
