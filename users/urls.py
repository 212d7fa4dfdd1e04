from django.urls import path
from .views import (
    RegisterAPIView, LoginAPIView, MerchantRegisterAPIView, MerchantLoginAPIView,
    MerchantLoginOTPSendAPIView, MerchantLoginOTPVerifyAPIView, RegistrationOTPSendAPIView,
    RegistrationOTPVerifyAPIView, ForgotPasswordAPIView, VerifyPasswordResetOTPAPIView,
    ResetPasswordAPIView, CheckEmailAPIView, LogoutAPIView, TokenRefreshAPIView,
    UserListAPIView, MeAPIView,
)


urlpatterns = [
    path("auth/register/", RegisterAPIView.as_view()),
    path("auth/login/", LoginAPIView.as_view()),
    path("auth/merchants/register/", MerchantRegisterAPIView.as_view()),
    path("auth/merchants/login/", MerchantLoginAPIView.as_view()),
    path("auth/merchants/login/send-otp/", MerchantLoginOTPSendAPIView.as_view()),
    path("auth/merchants/login/verify-otp/", MerchantLoginOTPVerifyAPIView.as_view()),
    path("auth/registration/send-otp/", RegistrationOTPSendAPIView.as_view()),
    path("auth/registration/verify-otp/", RegistrationOTPVerifyAPIView.as_view()),
    path("auth/forgot-password/", ForgotPasswordAPIView.as_view()),
    path("auth/verify-otp/", VerifyPasswordResetOTPAPIView.as_view()),
    path("auth/reset-password/", ResetPasswordAPIView.as_view()),
    path("auth/check-email/", CheckEmailAPIView.as_view()),
    path("auth/logout/", LogoutAPIView.as_view()),
    path("auth/refresh/", TokenRefreshAPIView.as_view()),

    path("users/", UserListAPIView.as_view()),
    path("users/me/", MeAPIView.as_view()),
]
