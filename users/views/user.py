from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status
from django.contrib.auth import get_user_model

from users.serializers import UserListDetailSerializer, UserUpdateSerializer
from core.permissions import IsAdmin
from core.pagination import DefaultPagination

User = get_user_model()


class UserListAPIView(APIView):
    """
    GET /users/ -> List accounts (ADMIN only)
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    def get_queryset(self, request):
        qs = User.objects.all()

        role = request.query_params.get("role")
        if role:
            qs = qs.filter(role=role.upper())

        keyword = request.query_params.get("keyword")
        if keyword:
            qs = qs.filter(email__icontains=keyword)

        return qs.order_by("-created_at")

    def get(self, request):
        paginator = DefaultPagination()
        page = paginator.paginate_queryset(self.get_queryset(request), request)

        serializer = UserListDetailSerializer(page, many=True)

        response_data = {
            "status": "success",
            "message": "Users retrieved successfully",
            "data": serializer.data,
        }
        response_data.update(paginator.get_root_pagination_data())

        return Response(response_data, status=status.HTTP_200_OK)


class MeAPIView(APIView):
    """
    GET   /users/me/ -> Own account
    PATCH /users/me/ -> Update own name, phone, address
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(
            {
                "status": "success",
                "message": "User retrieved successfully",
                "data": UserListDetailSerializer(request.user.account).data,
            },
            status=status.HTTP_200_OK,
        )

    def patch(self, request):
        serializer = UserUpdateSerializer(request.user.account, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        return Response(
            {
                "status": "success",
                "message": "User updated successfully",
                "data": UserListDetailSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )
