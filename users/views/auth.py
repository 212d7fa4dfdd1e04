from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status

from users.serializers import (
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
    UserListDetailSerializer,
    issue_tokens,
    blacklist_token,
)
from merchants.serializers import MerchantDetailSerializer


def _user_session(user):
    return {
        **issue_tokens(user),
        "user": UserListDetailSerializer(user).data,
    }


def _merchant_session(merchant):
    return {
        **issue_tokens(merchant.account),
        "merchant": MerchantDetailSerializer(merchant).data,
    }


class RegisterAPIView(APIView):
    """
    POST /auth/register/
    End user self-registration
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        return Response(
            {
                "status": "success",
                "message": "Registration successful",
                "data": _user_session(user),
            },
            status=status.HTTP_201_CREATED,
        )


class LoginAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return Response(
            {
                "status": "success",
                "message": "Login successful",
                "data": _user_session(serializer.validated_data["user"]),
            },
            status=status.HTTP_200_OK,
        )


class MerchantRegisterAPIView(APIView):
    """
    POST /auth/merchants/register/
    New merchants start as Pending until an administrator approves them.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = MerchantRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        merchant = serializer.save()

        return Response(
            {
                "status": "success",
                "message": "Registration received. Your application is under review.",
                "data": MerchantDetailSerializer(merchant).data,
            },
            status=status.HTTP_201_CREATED,
        )


class MerchantLoginAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = MerchantLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return Response(
            {
                "status": "success",
                "message": "Login successful",
                "data": _merchant_session(serializer.validated_data["merchant"]),
            },
            status=status.HTTP_200_OK,
        )


class MerchantLoginOTPSendAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = MerchantLoginOTPSendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response(
            {
                "status": "success",
                "message": "OTP sent to email",
                "data": {"email": serializer.validated_data["email"], "otp_sent": True},
            },
            status=status.HTTP_200_OK,
        )


class MerchantLoginOTPVerifyAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = MerchantLoginOTPVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return Response(
            {
                "status": "success",
                "message": "Login successful",
                "data": _merchant_session(serializer.validated_data["merchant"]),
            },
            status=status.HTTP_200_OK,
        )


class RegistrationOTPSendAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegistrationOTPSendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response(
            {
                "status": "success",
                "message": "Verification OTP sent",
                "data": None,
            },
            status=status.HTTP_200_OK,
        )


class RegistrationOTPVerifyAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegistrationOTPVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return Response(
            {
                "status": "success",
                "message": "Email verified",
                "data": None,
            },
            status=status.HTTP_200_OK,
        )


class ForgotPasswordAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response(
            {
                "status": "success",
                "message": "OTP sent to email",
                "data": None,
            },
            status=status.HTTP_200_OK,
        )


class VerifyPasswordResetOTPAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = PasswordResetOTPVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return Response(
            {
                "status": "success",
                "message": "OTP verified",
                "data": None,
            },
            status=status.HTTP_200_OK,
        )


class ResetPasswordAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response(
            {
                "status": "success",
                "message": "Password reset successful",
                "data": None,
            },
            status=status.HTTP_200_OK,
        )


class CheckEmailAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = CheckEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        exists = serializer.exists

        return Response(
            {
                "status": "success",
                "message": "Email already registered" if exists else "Email available",
                "data": {"exists": exists},
            },
            status=status.HTTP_200_OK,
        )


class LogoutAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        # Blacklist the access token for the rest of its lifetime
        if request.auth is not None:
            blacklist_token(request.auth)

        return Response(
            {
                "status": "success",
                "message": "Logout successful",
                "data": None,
            },
            status=status.HTTP_200_OK,
        )


class TokenRefreshAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = TokenRefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        return Response(
            {
                "status": "success",
                "message": "Token refreshed successfully",
                "data": {
                    "access": serializer.validated_data["access"],
                    "refresh": serializer.validated_data["refresh"],
                },
            },
            status=status.HTTP_200_OK,
        )
