import logging
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

logger = logging.getLogger("chitvault.notifications")


@shared_task(bind=True, autoretry_for=(Exception,), retry_kwargs={"max_retries": 3, "countdown": 10})
def send_notification_email(self, email, subject, template, context):
    """
    Renders `emails/<template>.txt` with `context` and mails it.
    """
    context = dict(context or {})
    context.setdefault("app_name", settings.APP_NAME)
    context.setdefault("frontend_url", settings.FRONTEND_URL)

    message = render_to_string(f"emails/{template}.txt", context)
    send_mail(
        subject=subject,
        message=message,
        from_email=None,
        recipient_list=[email],
        fail_silently=False,
    )
    logger.info(f"Notification '{template}' sent to {email}")
