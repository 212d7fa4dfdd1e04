import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser
from core.choices import UserRoleChoices


class User(AbstractUser):
    id = models.UUIDField(primary_key=True , default= uuid.uuid4 , editable=False)

    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)

    role = models.CharField(
            max_length = 20,
            choices=UserRoleChoices.choices,
            default=UserRoleChoices.USER
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    REQUIRED_FIELDS = ["email"]
    USERNAME_FIELD = "username"

    class Meta:
        db_table = "users"
        indexes = [
            models.Index(fields=["role"], name="users_role_idx"),
            models.Index(fields=["created_at"], name="users_created_idx"),
        ]

    def __str__(self):
        return f"{self.email} ({self.role})"

    @property
    def display_name(self):
        return self.get_full_name() or self.username
