from django.apps import AppConfig, apps


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"

    payment_config = None

    def ready(self):
        from payments.config import PaymentConfig

        self.payment_config = PaymentConfig.from_settings()


def get_payment_config():
    return apps.get_app_config("payments").payment_config
