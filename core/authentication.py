from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken
from django.core.cache import cache

from core.principals import resolve_principal


def blacklist_key(jti):
    return f"blacklisted_access_token:{jti}"


class CustomJWTAuthentication(JWTAuthentication):
    """
    Validates the bearer token, rejects tokens revoked on logout and hands
    the view a Principal instead of the raw account.
    """
    def get_validated_token(self, raw_token):
        validated_token = super().get_validated_token(raw_token)

        jti = validated_token.get("jti")
        if cache.get(blacklist_key(jti)):
            raise InvalidToken("Token is blacklisted", code="token_not_valid")

        return validated_token

    def authenticate(self, request):
        result = super().authenticate(request)
        if result is None:
            return None

        account, validated_token = result
        return resolve_principal(account), validated_token
