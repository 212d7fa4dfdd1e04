import logging
from celery import shared_task
from django.db.models import F

from payments.apps import get_payment_config
from payments.models import ReconciliationEvent
from payments import services

logger = logging.getLogger("chitvault.payments")

MAX_RECONCILIATION_ATTEMPTS = 10


@shared_task(bind=True, autoretry_for=(Exception,), retry_backoff=True, max_retries=5)
def process_reconciliation_event(self, event_id):
    try:
        event = ReconciliationEvent.objects.get(id=event_id)
    except ReconciliationEvent.DoesNotExist:
        logger.warning(f"Task Skipped: reconciliation event {event_id} does not exist")
        return "Missing"

    if event.is_processed:
        logger.info(f"Task Skipped: reconciliation event {event_id} already processed")
        return "Already processed"

    ReconciliationEvent.objects.filter(pk=event.pk).update(attempts=F("attempts") + 1)

    try:
        services.process_reconciliation_event(event)
    except Exception as e:
        logger.error(f"Task Failed: reconciliation event {event_id}: {e}", exc_info=True)
        ReconciliationEvent.objects.filter(pk=event.pk).update(processing_error=str(e))
        raise

    logger.info(f"Task Completed: reconciled {event.kind} {event.reference}")
    return f"Processed {event.kind}"


@shared_task(name="payments.tasks.reconcile_pending_renewal_orders_job")
def reconcile_pending_renewal_orders_job():
    """
    Periodic task to complete renewal orders by polling the gateway.
    """
    summary = services.reconcile_pending_renewal_orders(get_payment_config())
    return f"Reconciliation complete: {summary}"


@shared_task(name="payments.tasks.retry_reconciliation_events_job")
def retry_reconciliation_events_job():
    """
    Re-queues unprocessed reconciliation events that still have attempts left.
    """
    pending = ReconciliationEvent.objects.filter(
        is_processed=False,
        attempts__lt=MAX_RECONCILIATION_ATTEMPTS,
    ).values_list("id", flat=True)

    count = 0
    for event_id in pending:
        process_reconciliation_event.delay(str(event_id))
        count += 1
    return f"Queued {count} reconciliation events"
