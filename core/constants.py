from decimal import Decimal

# OTP cache lifetime and resend cooldown (seconds)
CACHE_TIMEOUT = 600
RESEND_TIME = 60
OTP_LENGTH = 6

pagination_page_size = 10
max_pagination_page_size = 100

# Merchant subscriptions
SUBSCRIPTION_PERIOD_DAYS = 30
PREMIUM_REQUIRED_PLAN_COUNT = 6
MAX_RENEWAL_ATTEMPTS = 3

# Whole currency units (INR)
PLAN_PRICES = {
    "Standard": Decimal("1500"),
    "Premium": Decimal("5000"),
}
DEFAULT_CURRENCY = "INR"

# Renewal order reconciliation
RECONCILE_TIME = 5  # minutes
RECONCILE_FAILED_ORDER_TTL = 24  # hours
