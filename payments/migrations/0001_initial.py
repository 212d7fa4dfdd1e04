import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("chit_plans", "0001_initial"),
        ("merchants", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("payment_id", models.CharField(max_length=100, unique=True)),
                ("status", models.CharField(choices=[("Pending", "Pending"), ("Completed", "Completed"), ("Failed", "Failed")], db_index=True, default="Pending", max_length=20)),
                ("gateway_response", models.JSONField(blank=True, default=dict)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("chit_plan", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="chit_plans.chitplan")),
                ("merchant", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments_received", to="merchants.merchant")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "payments",
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="payments_status_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RenewalOrder",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("plan", models.CharField(choices=[("Standard", "Standard"), ("Premium", "Premium")], max_length=20)),
                ("amount", models.PositiveIntegerField()),
                ("currency", models.CharField(default="INR", max_length=3)),
                ("receipt", models.CharField(max_length=40)),
                ("razorpay_order_id", models.CharField(max_length=100, unique=True)),
                ("razorpay_payment_id", models.CharField(blank=True, max_length=100)),
                ("razorpay_signature", models.CharField(blank=True, max_length=255)),
                ("status", models.CharField(choices=[("CREATED", "Created"), ("PAID", "Paid"), ("FAILED", "Failed")], db_index=True, default="CREATED", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("merchant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="renewal_orders", to="merchants.merchant")),
            ],
            options={
                "db_table": "renewal_orders",
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="renewal_status_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReconciliationEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("kind", models.CharField(choices=[("RENEWAL", "Renewal"), ("CHIT_PAYMENT", "Chit plan payment")], db_index=True, max_length=20)),
                ("reference", models.CharField(db_index=True, max_length=100)),
                ("payload", models.JSONField(default=dict)),
                ("is_processed", models.BooleanField(db_index=True, default=False)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("attempts", models.PositiveIntegerField(default=0)),
                ("processing_error", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "reconciliation_events",
                "indexes": [
                    models.Index(fields=["is_processed", "created_at"], name="recon_processed_created_idx"),
                ],
            },
        ),
    ]
