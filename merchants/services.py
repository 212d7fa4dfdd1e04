import logging
from django.db.models import Q
from django.utils import timezone

from core import notifications
from core.choices import MerchantStatusChoices, SubscriptionStatusChoices
from core.constants import MAX_RENEWAL_ATTEMPTS
from core.exceptions import ConcurrentUpdateError, NotFoundError
from merchants.models import Merchant
from merchants.subscriptions import initial_window

logger = logging.getLogger("chitvault.merchants")


def _compare_and_swap(merchant, changes):
    """
    Write `changes` only if nobody else wrote the row since `merchant` was read.
    """
    new_version = merchant.version + 1
    updated = Merchant.objects.filter(pk=merchant.pk, version=merchant.version).update(
        version=new_version,
        updated_at=timezone.now(),
        **changes,
    )
    if not updated:
        return False

    for field, value in changes.items():
        setattr(merchant, field, value)
    merchant.version = new_version
    return True


def update_merchant_state(merchant, build_changes, attempts=MAX_RENEWAL_ATTEMPTS):
    """
    Apply `build_changes(current) -> dict` with optimistic concurrency.

    On a lost race the row is re-read and the changes are rebuilt from the
    fresh state, so derived values (e.g. a renewal's expiry) never drop a
    concurrent writer's update.
    """
    current = merchant
    for attempt in range(1, attempts + 1):
        changes = build_changes(current)
        if _compare_and_swap(current, changes):
            if current is not merchant:
                merchant.refresh_from_db()
            return merchant

        logger.warning(
            f"Merchant {merchant.pk} changed concurrently (attempt {attempt}/{attempts}), re-reading"
        )
        try:
            current = Merchant.objects.get(pk=merchant.pk)
        except Merchant.DoesNotExist:
            raise NotFoundError("Merchant not found.")

    raise ConcurrentUpdateError()


def set_status(merchant, new_status, now=None):
    """
    Admin-driven approval state change.

    Moving into Approved from any other status opens a fresh subscription
    window. Re-approving an approved merchant leaves the dates alone.
    A status notification goes out whenever the status actually changes.
    """
    now = now or timezone.now()
    transition = {}

    def build_changes(current):
        old_status = current.status
        transition["old"] = old_status
        changes = {"status": new_status}

        if new_status == MerchantStatusChoices.APPROVED and old_status != MerchantStatusChoices.APPROVED:
            window = initial_window(now)
            changes.update(
                subscription_start_date=window.start,
                subscription_expiry_date=window.expiry,
                subscription_status=SubscriptionStatusChoices.ACTIVE,
            )
        return changes

    merchant = update_merchant_state(merchant, build_changes)
    old_status = transition["old"]

    if old_status != new_status:
        logger.info(f"Merchant {merchant.id} status {old_status} -> {new_status}")
        notify_status_change(merchant)

    return merchant


def notify_status_change(merchant):
    expiry = merchant.subscription_expiry_date
    return notifications.send(
        merchant.email,
        f"Account {merchant.status}",
        {
            "name": merchant.name,
            "status": merchant.status,
            "expiry_date": expiry.date().isoformat() if expiry else "",
        },
        template="merchant_status",
    )


def update_profile(merchant, changes):
    """Profile and bank detail edits made by the merchant or an admin."""
    merchant = update_merchant_state(merchant, lambda current: dict(changes))
    logger.info(f"Merchant {merchant.id} profile updated: {sorted(changes)}")
    return merchant


def set_verification(merchant, kyc_status=None, bank_verification_status=None):
    changes = {}
    if kyc_status is not None:
        changes["kyc_status"] = kyc_status
    if bank_verification_status is not None:
        changes["bank_verification_status"] = bank_verification_status

    merchant = update_merchant_state(merchant, lambda current: dict(changes))
    logger.info(f"Merchant {merchant.id} verification updated: {changes}")
    return merchant


def filter_by_subscription_status(queryset, subscription_status, now=None):
    """
    Query-side counterpart of Merchant.current_subscription_status: an
    active row whose expiry has passed counts as expired, one that never
    had a window counts as inactive.
    """
    now = now or timezone.now()

    if subscription_status == SubscriptionStatusChoices.ACTIVE:
        return queryset.filter(
            subscription_status=SubscriptionStatusChoices.ACTIVE,
            subscription_expiry_date__gte=now,
        )

    if subscription_status == SubscriptionStatusChoices.INACTIVE:
        return queryset.filter(
            Q(subscription_status=SubscriptionStatusChoices.INACTIVE)
            | Q(
                subscription_status=SubscriptionStatusChoices.ACTIVE,
                subscription_expiry_date__isnull=True,
            )
        )

    if subscription_status == SubscriptionStatusChoices.EXPIRED:
        return queryset.filter(
            Q(subscription_status=SubscriptionStatusChoices.EXPIRED)
            | Q(
                subscription_status=SubscriptionStatusChoices.ACTIVE,
                subscription_expiry_date__lt=now,
            )
        )

    return queryset.filter(subscription_status=subscription_status)
