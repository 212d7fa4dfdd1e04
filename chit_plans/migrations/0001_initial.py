import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("merchants", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ChitPlan",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("plan_name", models.CharField(max_length=255)),
                ("monthly_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("duration_months", models.PositiveIntegerField()),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("merchant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="chit_plans", to="merchants.merchant")),
            ],
            options={
                "db_table": "chit_plans",
                "indexes": [
                    models.Index(fields=["merchant"], name="chit_plans_merchant_idx"),
                    models.Index(fields=["created_at"], name="chit_plans_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChitPlanSubscription",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("status", models.CharField(choices=[("active", "Active"), ("completed", "Completed")], default="active", max_length=20)),
                ("joined_at", models.DateTimeField(auto_now_add=True)),
                ("chit_plan", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="subscribers", to="chit_plans.chitplan")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="chit_subscriptions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "chit_plan_subscriptions",
                "constraints": [
                    models.UniqueConstraint(fields=("chit_plan", "user"), name="unique_chit_plan_subscriber"),
                ],
            },
        ),
    ]
