import logging
from django.db import IntegrityError, transaction

from chit_plans.models import ChitPlanSubscription
from core.choices import VerificationStatusChoices
from core.exceptions import ValidationError
from rest_framework.exceptions import PermissionDenied

logger = logging.getLogger("chitvault.chit_plans")


def ensure_can_issue_plans(merchant):
    if merchant.bank_verification_status != VerificationStatusChoices.VERIFIED:
        raise PermissionDenied("Bank details verification required to create chit plans.")


def subscribe(chit_plan, user):
    """
    Adds `user` to the plan's subscribers. A user joins a plan at most once.
    """
    if ChitPlanSubscription.objects.filter(chit_plan=chit_plan, user=user).exists():
        raise ValidationError("Already subscribed")

    try:
        with transaction.atomic():
            subscription = ChitPlanSubscription.objects.create(chit_plan=chit_plan, user=user)
    except IntegrityError:
        raise ValidationError("Already subscribed")

    logger.info(f"User {user.id} subscribed to chit plan {chit_plan.id}")
    return subscription
