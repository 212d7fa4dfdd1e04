from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()


class UserListDetailSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="display_name", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "address",
            "role",
            "created_at",
        ]
        read_only_fields = fields


class UserUpdateSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="first_name", max_length=150, required=False)

    class Meta:
        model = User
        fields = ["name", "phone", "address"]
