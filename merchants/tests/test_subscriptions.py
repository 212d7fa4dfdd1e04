from datetime import datetime, timedelta, timezone

from django.test import SimpleTestCase

from core.choices import MerchantPlanChoices, SubscriptionStatusChoices
from core.exceptions import PlanGateError
from merchants.subscriptions import (
    SUBSCRIPTION_PERIOD,
    can_select_plan,
    compute_renewal,
    effective_subscription_status,
    ensure_plan_selectable,
    initial_window,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class WindowTests(SimpleTestCase):
    def test_initial_window(self):
        window = initial_window(NOW)

        self.assertEqual(window.start, NOW)
        self.assertEqual(window.expiry, NOW + timedelta(days=30))

    def test_renewal_extends_future_expiry(self):
        current_expiry = NOW + timedelta(days=10)

        window = compute_renewal(NOW, current_expiry)

        self.assertEqual(window.start, NOW)
        self.assertEqual(window.expiry, current_expiry + SUBSCRIPTION_PERIOD)

    def test_renewal_after_lapse_starts_fresh(self):
        window = compute_renewal(NOW, NOW - timedelta(days=3))

        self.assertEqual(window.expiry, NOW + SUBSCRIPTION_PERIOD)

    def test_renewal_without_expiry(self):
        window = compute_renewal(NOW, None)

        self.assertEqual(window.expiry, NOW + SUBSCRIPTION_PERIOD)

    def test_renewal_expiring_exactly_now_starts_fresh(self):
        window = compute_renewal(NOW, NOW)

        self.assertEqual(window.expiry, NOW + SUBSCRIPTION_PERIOD)

    def test_renewals_stack(self):
        first = compute_renewal(NOW, NOW + timedelta(days=5))
        second = compute_renewal(NOW, first.expiry)

        self.assertEqual(second.expiry, NOW + timedelta(days=5) + 2 * SUBSCRIPTION_PERIOD)


class EffectiveStatusTests(SimpleTestCase):
    def test_active_past_expiry_reads_expired(self):
        status = effective_subscription_status(
            SubscriptionStatusChoices.ACTIVE, NOW - timedelta(seconds=1), NOW
        )
        self.assertEqual(status, SubscriptionStatusChoices.EXPIRED)

    def test_active_within_window(self):
        status = effective_subscription_status(
            SubscriptionStatusChoices.ACTIVE, NOW + timedelta(days=1), NOW
        )
        self.assertEqual(status, SubscriptionStatusChoices.ACTIVE)

    def test_active_without_window_reads_inactive(self):
        status = effective_subscription_status(SubscriptionStatusChoices.ACTIVE, None, NOW)

        self.assertEqual(status, SubscriptionStatusChoices.INACTIVE)

    def test_inactive_is_kept(self):
        status = effective_subscription_status(SubscriptionStatusChoices.INACTIVE, None, NOW)

        self.assertEqual(status, SubscriptionStatusChoices.INACTIVE)

    def test_cancelled_is_kept(self):
        status = effective_subscription_status(
            SubscriptionStatusChoices.CANCELLED, NOW - timedelta(days=1), NOW
        )
        self.assertEqual(status, SubscriptionStatusChoices.CANCELLED)


class PlanGateTests(SimpleTestCase):
    def test_below_threshold_any_plan(self):
        self.assertTrue(can_select_plan(0, MerchantPlanChoices.STANDARD))
        self.assertTrue(can_select_plan(5, MerchantPlanChoices.STANDARD))
        self.assertTrue(can_select_plan(5, MerchantPlanChoices.PREMIUM))

    def test_six_plans_need_premium(self):
        self.assertFalse(can_select_plan(6, MerchantPlanChoices.STANDARD))
        self.assertTrue(can_select_plan(6, MerchantPlanChoices.PREMIUM))
        self.assertFalse(can_select_plan(20, MerchantPlanChoices.STANDARD))

    def test_negative_count(self):
        with self.assertRaises(ValueError):
            can_select_plan(-1, MerchantPlanChoices.STANDARD)

    def test_ensure_raises_upgrade_required(self):
        with self.assertRaises(PlanGateError) as ctx:
            ensure_plan_selectable(6, MerchantPlanChoices.STANDARD)

        self.assertIn("upgrade required", str(ctx.exception.detail))
