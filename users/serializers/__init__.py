from .auth import (
    RegisterSerializer,
    LoginSerializer,
    MerchantRegisterSerializer,
    MerchantLoginSerializer,
    MerchantLoginOTPSendSerializer,
    MerchantLoginOTPVerifySerializer,
    RegistrationOTPSendSerializer,
    RegistrationOTPVerifySerializer,
    ForgotPasswordSerializer,
    PasswordResetOTPVerifySerializer,
    ResetPasswordSerializer,
    CheckEmailSerializer,
    LogoutSerializer,
    TokenRefreshSerializer,
    issue_tokens,
    blacklist_token,
)
from .user import UserListDetailSerializer, UserUpdateSerializer
