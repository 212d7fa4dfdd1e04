from decimal import Decimal

from django.contrib.auth import get_user_model

from chit_plans.models import ChitPlan
from core.choices import (
    MerchantStatusChoices,
    SubscriptionStatusChoices,
    UserRoleChoices,
    VerificationStatusChoices,
)
from core.principals import resolve_principal
from merchants.models import Merchant

User = get_user_model()

PASSWORD = "Str0ng-Passw0rd!"


def create_account(email, role=UserRoleChoices.USER, password=PASSWORD, **extra):
    return User.objects.create_user(
        username=email,
        email=email,
        password=password,
        role=role,
        **extra,
    )


def create_merchant(email="merchant@example.com", status=MerchantStatusChoices.APPROVED, **fields):
    """Approved merchants start with an active subscription, as approval would leave them."""
    account = create_account(email, role=UserRoleChoices.MERCHANT)
    defaults = {
        "name": "Gold House",
        "phone": "9000000000",
        "address": "12 Market Road",
        "status": status,
        "bank_verification_status": VerificationStatusChoices.VERIFIED,
    }
    if status == MerchantStatusChoices.APPROVED:
        defaults["subscription_status"] = SubscriptionStatusChoices.ACTIVE
    defaults.update(fields)
    return Merchant.objects.create(account=account, **defaults)


def authenticate(client, account):
    """force_authenticate with the principal the JWT authentication would resolve."""
    client.force_authenticate(user=resolve_principal(account))


def create_chit_plan(merchant, plan_name="Gold 12", monthly_amount=Decimal("1000.00"), duration_months=12, **fields):
    return ChitPlan.objects.create(
        merchant=merchant,
        plan_name=plan_name,
        monthly_amount=monthly_amount,
        duration_months=duration_months,
        total_amount=monthly_amount * duration_months,
        **fields,
    )
