import time
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError, InvalidToken
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.cache import cache
from django.db import transaction

from core import notifications
from core.authentication import blacklist_key
from core.choices import MerchantPlanChoices, MerchantStatusChoices, UserRoleChoices
from core.exceptions import AuthError, NotFoundError
from merchants.models import Merchant
from users import otp as otp_store

User = get_user_model()


def issue_tokens(account):
    refresh = RefreshToken.for_user(account)
    return {
        "access": str(refresh.access_token),
        "refresh": str(refresh),
    }


def blacklist_token(token):
    """Revoke a simplejwt token until it would have expired anyway."""
    ttl = int(token.get("exp", 0) - time.time())
    if ttl > 0:
        cache.set(blacklist_key(token.get("jti")), True, timeout=ttl)


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("User already exists.")
        return value

    def validate_password(self, value):
        """
        Use Django's default password validators
        """
        validate_password(value)
        return value

    def create(self, validated_data):
        user = User(
            username=validated_data["email"],
            email=validated_data["email"],
            first_name=validated_data["name"],
            phone=validated_data.get("phone", ""),
            address=validated_data.get("address", ""),
            role=UserRoleChoices.USER,
        )
        user.set_password(validated_data["password"])
        user.save()
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        user = User.objects.filter(email__iexact=attrs["email"]).first()

        # merchant accounts sign in through the merchant login
        if (
            user is None
            or user.role == UserRoleChoices.MERCHANT
            or not user.is_active
            or not user.check_password(attrs["password"])
        ):
            raise AuthError("Invalid credentials")

        attrs["user"] = user
        return attrs


class MerchantRegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    phone = serializers.CharField(max_length=20)
    address = serializers.CharField()
    plan = serializers.ChoiceField(choices=MerchantPlanChoices.choices, default=MerchantPlanChoices.STANDARD)
    payment_id = serializers.CharField(max_length=100, required=False, allow_blank=True)

    account_holder_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    account_number = serializers.CharField(max_length=34, required=False, allow_blank=True)
    ifsc_code = serializers.CharField(max_length=11, required=False, allow_blank=True)
    bank_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    branch_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    gstin = serializers.CharField(max_length=15, required=False, allow_blank=True)
    paypal_email = serializers.EmailField(required=False, allow_blank=True)

    PROFILE_FIELDS = (
        "name", "phone", "address", "plan",
        "account_holder_name", "account_number", "ifsc_code", "bank_name", "branch_name",
        "gstin", "paypal_email",
    )

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Merchant already exists.")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    @transaction.atomic
    def create(self, validated_data):
        account = User(
            username=validated_data["email"],
            email=validated_data["email"],
            first_name=validated_data["name"],
            phone=validated_data["phone"],
            address=validated_data["address"],
            role=UserRoleChoices.MERCHANT,
        )
        account.set_password(validated_data["password"])
        account.save()

        profile = {field: validated_data[field] for field in self.PROFILE_FIELDS if field in validated_data}
        merchant = Merchant.objects.create(
            account=account,
            registration_payment_id=validated_data.get("payment_id", ""),
            **profile,
        )

        transaction.on_commit(lambda: notifications.send(
            account.email,
            "Registration Received",
            {"name": merchant.name, "plan": merchant.plan, "email": account.email},
            template="merchant_registered",
        ))
        return merchant


def _approved_merchant_account(email):
    """
    Returns the merchant for `email`, refusing accounts that have not been
    approved yet.
    """
    merchant = (
        Merchant.objects.select_related("account")
        .filter(account__email__iexact=email, account__role=UserRoleChoices.MERCHANT)
        .first()
    )
    if merchant is None:
        return None

    if merchant.status == MerchantStatusChoices.REJECTED:
        raise AuthError(f"Your account is {merchant.status}. Please contact Admin for Refund.")
    if merchant.status != MerchantStatusChoices.APPROVED:
        raise AuthError(f"Your account is {merchant.status}. Please wait for Admin approval.")
    return merchant


class MerchantLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        merchant = (
            Merchant.objects.select_related("account")
            .filter(account__email__iexact=attrs["email"])
            .first()
        )
        if merchant is None or not merchant.account.check_password(attrs["password"]):
            raise AuthError("Invalid credentials")

        _approved_merchant_account(attrs["email"])
        attrs["merchant"] = merchant
        return attrs


class MerchantLoginOTPSendSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate(self, attrs):
        merchant = Merchant.objects.filter(account__email__iexact=attrs["email"]).first()
        if merchant is None:
            raise NotFoundError("Email not registered")

        if merchant.status != MerchantStatusChoices.APPROVED:
            raise AuthError(f"Account status: {merchant.status}.")

        attrs["merchant"] = merchant
        return attrs

    def save(self):
        merchant = self.validated_data["merchant"]
        otp_store.issue_otp(otp_store.MERCHANT_LOGIN, merchant.account_id, merchant.email)
        return merchant


class MerchantLoginOTPVerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.CharField(min_length=6, max_length=6)

    def validate(self, attrs):
        merchant = _approved_merchant_account(attrs["email"])
        if merchant is None or not otp_store.check_otp(
            otp_store.MERCHANT_LOGIN, merchant.account_id, attrs["otp"]
        ):
            raise serializers.ValidationError({"otp": "Invalid OTP or expired"})

        attrs["merchant"] = merchant
        return attrs


class RegistrationOTPSendSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already registered")
        return value

    def save(self):
        email = self.validated_data["email"]
        otp_store.issue_otp(otp_store.REGISTRATION, email, email)
        return email


class RegistrationOTPVerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.CharField(min_length=6, max_length=6)

    def validate(self, attrs):
        if not otp_store.check_otp(otp_store.REGISTRATION, attrs["email"], attrs["otp"]):
            raise serializers.ValidationError({"otp": "Invalid OTP"})
        return attrs


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate(self, attrs):
        user = User.objects.filter(email__iexact=attrs["email"]).first()
        if user is None:
            raise NotFoundError("Email not registered")
        attrs["user"] = user
        return attrs

    def save(self):
        user = self.validated_data["user"]
        otp_store.issue_otp(otp_store.PASSWORD_RESET, user.id, user.email)
        return user


class PasswordResetOTPVerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.CharField(min_length=6, max_length=6)

    consume_otp = False

    def validate(self, attrs):
        user = User.objects.filter(email__iexact=attrs["email"]).first()
        if user is None:
            raise NotFoundError("User not found")

        if not otp_store.check_otp(otp_store.PASSWORD_RESET, user.id, attrs["otp"], consume=self.consume_otp):
            raise serializers.ValidationError({"otp": "Invalid OTP or expired"})

        attrs["user"] = user
        return attrs


class ResetPasswordSerializer(PasswordResetOTPVerifySerializer):
    password = serializers.CharField(write_only=True)

    consume_otp = True

    def validate_password(self, value):
        validate_password(value)
        return value

    def save(self):
        user = self.validated_data["user"]
        user.set_password(self.validated_data["password"])
        user.save(update_fields=["password", "updated_at"])
        return user


class CheckEmailSerializer(serializers.Serializer):
    email = serializers.EmailField()

    @property
    def exists(self):
        return User.objects.filter(email__iexact=self.validated_data["email"]).exists()


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()

    def validate_refresh(self, value):
        try:
            self.token = RefreshToken(value)
        except TokenError:
            raise serializers.ValidationError("Invalid or expired refresh token.")
        return value

    def save(self):
        blacklist_token(self.token)


class TokenRefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()

    def validate(self, attrs):
        try:
            old_token = RefreshToken(attrs["refresh"])
        except (TokenError, InvalidToken):
            raise serializers.ValidationError(
                {"refresh": ["Invalid, expired, or blacklisted refresh token."]}
            )

        if cache.get(blacklist_key(old_token.get("jti"))):
            raise serializers.ValidationError(
                {"refresh": ["Invalid, expired, or blacklisted refresh token."]}
            )

        user = User.objects.filter(id=old_token["user_id"]).first()
        if user is None:
            raise serializers.ValidationError(
                {"refresh": ["User associated with this token does not exist."]}
            )

        # rotate: the presented refresh token cannot be used again
        blacklist_token(old_token)
        return issue_tokens(user)
