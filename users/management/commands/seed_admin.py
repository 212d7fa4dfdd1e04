from django.core.management.base import BaseCommand
from django.conf import settings
from django.contrib.auth import get_user_model
from core.choices import UserRoleChoices

User = get_user_model()

class Command(BaseCommand):
    help = 'Seeds the database with the default ADMIN account if one does not exist.'

    def handle(self, *args, **options):
        username = settings.ADMIN_USERNAME
        email = settings.ADMIN_EMAIL
        password = settings.ADMIN_PASSWORD

        if not all([username, email, password]):
            self.stdout.write(self.style.WARNING("Missing environment variables: ADMIN_USERNAME, ADMIN_EMAIL, ADMIN_PASSWORD. Skipping."))
            return

        # Check by email so re-running the seed is harmless
        if User.objects.filter(email__iexact=email).exists():
            self.stdout.write(self.style.WARNING(f"An account for {email} already exists. Skipping creation."))
            return

        self.stdout.write(f"Attempting to create ADMIN: {username}...")

        admin = User(
            username=username,
            email=email.lower(),
            first_name="Admin",
            role=UserRoleChoices.ADMIN,
            is_staff=True,
            is_superuser=True,
            is_active=True,
        )
        admin.set_password(password)
        admin.save()

        self.stdout.write(self.style.SUCCESS("ADMIN created successfully."))
        self.stdout.write(f"Username: {username}")
        self.stdout.write(f"Email: {email}")
