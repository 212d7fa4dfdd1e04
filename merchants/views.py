from django.db.models import Count
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status

from core.exceptions import NotFoundError
from core.pagination import DefaultPagination
from core.permissions import IsAdmin, IsMerchant, IsMerchantSelfOrAdmin
from core.principals import AdminPrincipal, MerchantPrincipal
from merchants.models import Merchant
from merchants.serializers import (
    MerchantListSerializer,
    MerchantDetailSerializer,
    MerchantUpdateSerializer,
    MerchantStatusUpdateSerializer,
    MerchantVerificationSerializer,
    PlanSerializer,
    RenewalVerifySerializer,
)
from merchants import services
from payments.apps import get_payment_config
from payments.services import create_renewal_order, renew_without_payment, verify_renewal_payment

SORTABLE_FIELDS = {"created_at", "name", "plan", "status", "subscription_expiry_date"}


def get_merchant_or_404(merchant_id):
    merchant = Merchant.objects.select_related("account").filter(pk=merchant_id).first()
    if merchant is None:
        raise NotFoundError("Merchant not found")
    return merchant


class MerchantListAPIView(APIView):
    """
    GET /merchants/?status=&subscription_status=&keyword=&sort=&page=&limit=
    """
    permission_classes = [AllowAny]

    def get_queryset(self, request):
        qs = Merchant.objects.select_related("account").annotate(chit_plan_count=Count("chit_plans"))

        merchant_status = request.query_params.get("status")
        if merchant_status:
            qs = qs.filter(status=merchant_status)

        subscription_status = request.query_params.get("subscription_status")
        if subscription_status:
            qs = services.filter_by_subscription_status(qs, subscription_status)

        keyword = request.query_params.get("keyword")
        if keyword:
            qs = qs.filter(name__icontains=keyword)

        # newest first unless a sort field is given; sorts are descending
        sort = request.query_params.get("sort")
        if sort in SORTABLE_FIELDS:
            return qs.order_by(f"-{sort}", "-created_at")
        return qs.order_by("-created_at")

    def get(self, request):
        paginator = DefaultPagination()
        page = paginator.paginate_queryset(self.get_queryset(request), request)

        serializer = MerchantListSerializer(page, many=True)

        response_data = {
            "status": "success",
            "message": "Merchants retrieved successfully",
            "data": serializer.data,
        }
        response_data.update(paginator.get_root_pagination_data())

        return Response(response_data, status=status.HTTP_200_OK)


class MerchantDetailAPIView(APIView):
    """
    GET    /merchants/<id>/ -> public profile (full profile for self/admin)
    PATCH  /merchants/<id>/ -> update profile (self or ADMIN)
    DELETE /merchants/<id>/ -> remove merchant (ADMIN only)
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        if self.request.method == "DELETE":
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsMerchantSelfOrAdmin()]

    def get(self, request, id):
        merchant = get_merchant_or_404(id)

        principal = request.user
        is_owner = isinstance(principal, MerchantPrincipal) and principal.merchant.id == merchant.id
        serializer_class = (
            MerchantDetailSerializer
            if is_owner or isinstance(principal, AdminPrincipal)
            else MerchantListSerializer
        )

        return Response(
            {
                "status": "success",
                "message": "Merchant retrieved successfully",
                "data": serializer_class(merchant).data,
            },
            status=status.HTTP_200_OK,
        )

    def patch(self, request, id):
        merchant = get_merchant_or_404(id)
        self.check_object_permissions(request, merchant)

        serializer = MerchantUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        merchant = services.update_profile(merchant, serializer.validated_data)

        return Response(
            {
                "status": "success",
                "message": "Merchant updated successfully",
                "data": MerchantDetailSerializer(merchant).data,
            },
            status=status.HTTP_200_OK,
        )

    def delete(self, request, id):
        merchant = get_merchant_or_404(id)
        # the account goes with the profile
        merchant.account.delete()

        return Response(
            {
                "status": "success",
                "message": "Merchant removed",
                "data": None,
            },
            status=status.HTTP_200_OK,
        )


class MerchantStatusAPIView(APIView):
    """
    PATCH /merchants/<id>/status/ -> Approve / Reject / reset to Pending
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    def patch(self, request, id):
        merchant = get_merchant_or_404(id)

        serializer = MerchantStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        merchant = services.set_status(merchant, serializer.validated_data["status"])

        return Response(
            {
                "status": "success",
                "message": f"Merchant status updated to {merchant.status}",
                "data": MerchantDetailSerializer(merchant).data,
            },
            status=status.HTTP_200_OK,
        )


class MerchantVerificationAPIView(APIView):
    """
    PATCH /merchants/<id>/verification/ -> KYC and bank verification flags
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    def patch(self, request, id):
        merchant = get_merchant_or_404(id)

        serializer = MerchantVerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        merchant = services.set_verification(merchant, **serializer.validated_data)

        return Response(
            {
                "status": "success",
                "message": "Merchant verification updated",
                "data": MerchantDetailSerializer(merchant).data,
            },
            status=status.HTTP_200_OK,
        )


class MerchantRenewAPIView(APIView):
    """
    POST /merchants/<id>/renew/ -> complimentary renewal, no payment (ADMIN only)
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, id):
        merchant = get_merchant_or_404(id)

        serializer = PlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        merchant = renew_without_payment(merchant, serializer.validated_data["plan"])

        return Response(
            {
                "status": "success",
                "message": "Subscription renewed",
                "data": MerchantDetailSerializer(merchant).data,
            },
            status=status.HTTP_200_OK,
        )


class RenewalOrderCreateAPIView(APIView):
    """
    POST /merchants/renewal/orders/ -> gateway order for a plan renewal
    """
    permission_classes = [IsAuthenticated, IsMerchant]

    def post(self, request):
        serializer = PlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        config = get_payment_config()
        order, renewal_order = create_renewal_order(
            config,
            request.user.merchant,
            serializer.validated_data["plan"],
        )

        data = order.as_response(key_id=config.razorpay_key_id)
        data["plan"] = renewal_order.plan

        return Response(
            {
                "status": "success",
                "message": "Payment order created successfully",
                "data": data,
            },
            status=status.HTTP_201_CREATED,
        )


class RenewalVerifyAPIView(APIView):
    """
    POST /merchants/renewal/verify/ -> verify the gateway signature and renew
    """
    permission_classes = [IsAuthenticated, IsMerchant]

    def post(self, request):
        serializer = RenewalVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = verify_renewal_payment(
            get_payment_config(),
            request.user.merchant,
            data["razorpay_order_id"],
            data["razorpay_payment_id"],
            data["razorpay_signature"],
            plan=data.get("plan") or None,
        )
        merchant = Merchant.objects.select_related("account").get(pk=order.merchant_id)

        return Response(
            {
                "status": "success",
                "message": "Payment verified and subscription renewed",
                "data": MerchantDetailSerializer(merchant).data,
            },
            status=status.HTTP_200_OK,
        )
