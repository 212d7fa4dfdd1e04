from django.apps import AppConfig


class ChitPlansConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "chit_plans"
