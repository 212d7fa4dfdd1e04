"""
One-time passcodes kept in the cache.

Each purpose has its own key space so a login code can never be used to
reset a password. A cooldown key throttles resends.
"""
import logging
from django.core.cache import cache
from rest_framework.exceptions import Throttled

from core import notifications
from core.constants import CACHE_TIMEOUT, RESEND_TIME
from core.utils import generate_otp, otp_matches

logger = logging.getLogger("chitvault.auth")

MERCHANT_LOGIN = "merchant_login"
REGISTRATION = "registration"
PASSWORD_RESET = "password_reset"

SUBJECTS = {
    MERCHANT_LOGIN: "Login Verification Code",
    REGISTRATION: "Email Verification",
    PASSWORD_RESET: "Password Reset Code",
}

INTROS = {
    MERCHANT_LOGIN: "Your login verification code is:",
    REGISTRATION: "Your email verification code is:",
    PASSWORD_RESET: "Use this code to reset your password:",
}


def otp_key(purpose, identifier):
    return f"{purpose}_otp:{str(identifier).lower()}"


def cooldown_key(purpose, identifier):
    return f"{purpose}_otp_cooldown:{str(identifier).lower()}"


def issue_otp(purpose, identifier, email):
    if cache.get(cooldown_key(purpose, identifier)):
        raise Throttled(detail="OTP already sent. Please wait before retrying.", wait=RESEND_TIME)

    otp = generate_otp()
    # overwriting invalidates any earlier code
    cache.set(otp_key(purpose, identifier), {"otp": otp}, timeout=CACHE_TIMEOUT)
    cache.set(cooldown_key(purpose, identifier), True, timeout=RESEND_TIME)

    notifications.send(
        email,
        SUBJECTS[purpose],
        {
            "intro": INTROS[purpose],
            "otp": otp,
            "valid_minutes": CACHE_TIMEOUT // 60,
        },
        template="otp",
    )
    logger.info(f"Issued {purpose} OTP for {identifier}")
    return otp


def check_otp(purpose, identifier, supplied, consume=True):
    key = otp_key(purpose, identifier)
    cached = cache.get(key)
    if not cached or not otp_matches(cached["otp"], supplied):
        return False

    if consume:
        cache.delete(key)
    return True
