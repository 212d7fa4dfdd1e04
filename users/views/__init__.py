from .auth import (
    RegisterAPIView,
    LoginAPIView,
    MerchantRegisterAPIView,
    MerchantLoginAPIView,
    MerchantLoginOTPSendAPIView,
    MerchantLoginOTPVerifyAPIView,
    RegistrationOTPSendAPIView,
    RegistrationOTPVerifyAPIView,
    ForgotPasswordAPIView,
    VerifyPasswordResetOTPAPIView,
    ResetPasswordAPIView,
    CheckEmailAPIView,
    LogoutAPIView,
    TokenRefreshAPIView,
)
from .user import UserListAPIView, MeAPIView
