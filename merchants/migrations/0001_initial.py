import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Merchant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=150)),
                ("phone", models.CharField(max_length=20)),
                ("address", models.TextField()),
                ("plan", models.CharField(choices=[("Standard", "Standard"), ("Premium", "Premium")], default="Standard", max_length=20)),
                ("status", models.CharField(choices=[("Pending", "Pending"), ("Approved", "Approved"), ("Rejected", "Rejected")], db_index=True, default="Pending", max_length=20)),
                ("subscription_start_date", models.DateTimeField(blank=True, null=True)),
                ("subscription_expiry_date", models.DateTimeField(blank=True, null=True)),
                ("subscription_status", models.CharField(choices=[("inactive", "Inactive"), ("active", "Active"), ("expired", "Expired"), ("cancelled", "Cancelled")], db_index=True, default="inactive", max_length=20)),
                ("version", models.PositiveIntegerField(default=0)),
                ("account_holder_name", models.CharField(blank=True, max_length=150)),
                ("account_number", models.CharField(blank=True, max_length=34)),
                ("ifsc_code", models.CharField(blank=True, max_length=11)),
                ("bank_name", models.CharField(blank=True, max_length=150)),
                ("branch_name", models.CharField(blank=True, max_length=150)),
                ("bank_verification_status", models.CharField(choices=[("pending", "Pending"), ("verified", "Verified"), ("failed", "Failed")], default="pending", max_length=20)),
                ("kyc_status", models.CharField(choices=[("pending", "Pending"), ("verified", "Verified"), ("failed", "Failed")], default="pending", max_length=20)),
                ("paypal_email", models.EmailField(blank=True, max_length=254)),
                ("gstin", models.CharField(blank=True, max_length=15)),
                ("registration_payment_id", models.CharField(blank=True, max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="merchant_profile", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "merchants",
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="merchants_status_created_idx"),
                    models.Index(fields=["subscription_expiry_date"], name="merchants_expiry_idx"),
                ],
            },
        ),
    ]
