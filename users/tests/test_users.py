from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from core.choices import UserRoleChoices
from core.tests.helpers import authenticate, create_account, create_merchant

User = get_user_model()


class UserListTests(APITestCase):
    def setUp(self):
        self.admin = create_account("admin@example.com", role=UserRoleChoices.ADMIN)
        self.user = create_account("asha@example.com")
        create_merchant("shop@example.com")

    def test_admin_lists_accounts(self):
        authenticate(self.client, self.admin)

        response = self.client.get("/api/v1/users/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 3)

    def test_admin_filters_by_role(self):
        authenticate(self.client, self.admin)

        response = self.client.get("/api/v1/users/", {"role": "merchant"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u["email"] for u in response.data["data"]], ["shop@example.com"])

    def test_end_user_cannot_list(self):
        authenticate(self.client, self.user)

        response = self.client.get("/api/v1/users/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "Permission denied")

    def test_anonymous_cannot_list(self):
        response = self.client.get("/api/v1/users/")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class MeTests(APITestCase):
    def setUp(self):
        self.user = create_account("asha@example.com", first_name="Asha")
        authenticate(self.client, self.user)

    def test_get_me(self):
        response = self.client.get("/api/v1/users/me/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["email"], "asha@example.com")
        self.assertEqual(response.data["data"]["name"], "Asha")

    def test_update_me(self):
        response = self.client.patch("/api/v1/users/me/", {"name": "Asha R", "phone": "9111111111"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, "Asha R")
        self.assertEqual(self.user.phone, "9111111111")

    def test_role_is_not_writable(self):
        self.client.patch("/api/v1/users/me/", {"role": "ADMIN"})

        self.user.refresh_from_db()
        self.assertEqual(self.user.role, UserRoleChoices.USER)


@override_settings(ADMIN_USERNAME="root", ADMIN_EMAIL="Root@Example.com", ADMIN_PASSWORD="Str0ng-Passw0rd!")
class SeedAdminCommandTests(TestCase):
    def test_creates_admin_once(self):
        call_command("seed_admin", stdout=StringIO())
        call_command("seed_admin", stdout=StringIO())

        admins = User.objects.filter(role=UserRoleChoices.ADMIN)
        self.assertEqual(admins.count(), 1)
        self.assertEqual(admins.get().email, "root@example.com")
        self.assertTrue(admins.get().check_password("Str0ng-Passw0rd!"))

    @override_settings(ADMIN_PASSWORD=None)
    def test_skips_without_credentials(self):
        call_command("seed_admin", stdout=StringIO())

        self.assertFalse(User.objects.filter(role=UserRoleChoices.ADMIN).exists())
