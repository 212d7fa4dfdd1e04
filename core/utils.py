import secrets
import string

from core.constants import OTP_LENGTH

def generate_otp(length=OTP_LENGTH):
    # Numeric code with a non-zero leading digit (e.g. '402913')
    first = secrets.choice(string.digits[1:])
    return first + ''.join(secrets.choice(string.digits) for _ in range(length - 1))


def otp_matches(expected, supplied):
    if not expected or not supplied:
        return False
    return secrets.compare_digest(str(expected), str(supplied))
