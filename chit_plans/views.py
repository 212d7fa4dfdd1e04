from django.db.models import Count
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status

from chit_plans.models import ChitPlan
from chit_plans.serializers import (
    ChitPlanSerializer,
    ChitPlanWriteSerializer,
    ChitPlanSubscriptionSerializer,
)
from chit_plans import services
from core.exceptions import NotFoundError
from core.pagination import DefaultPagination
from core.permissions import IsChitPlanOwnerOrReadOnly, IsEndUser, IsMerchant
from merchants.models import Merchant


def chit_plan_queryset():
    return ChitPlan.objects.select_related("merchant").annotate(subscriber_count=Count("subscribers"))


def get_chit_plan_or_404(plan_id):
    chit_plan = chit_plan_queryset().filter(pk=plan_id).first()
    if chit_plan is None:
        raise NotFoundError("Chit plan not found")
    return chit_plan


def paginated_response(request, queryset, message):
    paginator = DefaultPagination()
    page = paginator.paginate_queryset(queryset, request)

    response_data = {
        "status": "success",
        "message": message,
        "data": ChitPlanSerializer(page, many=True).data,
    }
    response_data.update(paginator.get_root_pagination_data())
    return Response(response_data, status=status.HTTP_200_OK)


class ChitPlanListCreateAPIView(APIView):
    """
    GET  /chit-plans/?keyword= -> public catalogue
    POST /chit-plans/          -> create (MERCHANT with verified bank details)
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated(), IsMerchant()]

    def get(self, request):
        qs = chit_plan_queryset()

        keyword = request.query_params.get("keyword")
        if keyword:
            qs = qs.filter(plan_name__icontains=keyword)

        return paginated_response(request, qs.order_by("-created_at"), "Chit plans retrieved successfully")

    def post(self, request):
        merchant = request.user.merchant
        services.ensure_can_issue_plans(merchant)

        serializer = ChitPlanWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        chit_plan = serializer.save(merchant=merchant)

        return Response(
            {
                "status": "success",
                "message": "Chit plan created successfully",
                "data": ChitPlanSerializer(get_chit_plan_or_404(chit_plan.id)).data,
            },
            status=status.HTTP_201_CREATED,
        )


class MerchantChitPlanListAPIView(APIView):
    """
    GET /chit-plans/merchant/<merchant_id>/
    """
    permission_classes = [AllowAny]

    def get(self, request, merchant_id):
        if not Merchant.objects.filter(pk=merchant_id).exists():
            raise NotFoundError("Merchant not found")

        qs = chit_plan_queryset().filter(merchant_id=merchant_id).order_by("-created_at")
        return paginated_response(request, qs, "Chit plans retrieved successfully")


class ChitPlanDetailAPIView(APIView):
    """
    GET    /chit-plans/<id>/
    PATCH  /chit-plans/<id>/ -> owner only
    DELETE /chit-plans/<id>/ -> owner only
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated(), IsMerchant(), IsChitPlanOwnerOrReadOnly()]

    def get(self, request, id):
        return Response(
            {
                "status": "success",
                "message": "Chit plan retrieved successfully",
                "data": ChitPlanSerializer(get_chit_plan_or_404(id)).data,
            },
            status=status.HTTP_200_OK,
        )

    def patch(self, request, id):
        chit_plan = get_chit_plan_or_404(id)
        self.check_object_permissions(request, chit_plan)

        serializer = ChitPlanWriteSerializer(chit_plan, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response(
            {
                "status": "success",
                "message": "Chit plan updated successfully",
                "data": ChitPlanSerializer(get_chit_plan_or_404(id)).data,
            },
            status=status.HTTP_200_OK,
        )

    def delete(self, request, id):
        chit_plan = get_chit_plan_or_404(id)
        self.check_object_permissions(request, chit_plan)
        chit_plan.delete()

        return Response(
            {
                "status": "success",
                "message": "Chit plan removed",
                "data": None,
            },
            status=status.HTTP_200_OK,
        )


class ChitPlanSubscribeAPIView(APIView):
    """
    POST /chit-plans/<id>/subscribe/ -> join a plan (end users)
    """
    permission_classes = [IsAuthenticated, IsEndUser]

    def post(self, request, id):
        chit_plan = get_chit_plan_or_404(id)
        subscription = services.subscribe(chit_plan, request.user.account)

        return Response(
            {
                "status": "success",
                "message": "Subscribed successfully",
                "data": ChitPlanSubscriptionSerializer(subscription).data,
            },
            status=status.HTTP_201_CREATED,
        )
