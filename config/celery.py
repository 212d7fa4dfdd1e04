import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("ChitVault")

app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()

app.conf.beat_schedule = {
    "reconcile-pending-renewal-orders": {
        "task": "payments.tasks.reconcile_pending_renewal_orders_job",
        "schedule": crontab(minute="*/5"),
    },
    "retry-reconciliation-events": {
        "task": "payments.tasks.retry_reconciliation_events_job",
        "schedule": crontab(minute="*/15"),
    },
}
