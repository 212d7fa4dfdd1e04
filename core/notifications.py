"""
Notification collaborator.

Delivery is fire-and-forget: a failure to hand the message to the queue is
logged and never propagated to the state transition that triggered it.
"""
import logging

from core.tasks import send_notification_email

logger = logging.getLogger("chitvault.notifications")


def send(to_address, subject, template_data, template="generic"):
    if not to_address:
        logger.warning(f"Notification '{template}' skipped: no recipient address")
        return False

    try:
        send_notification_email.delay(to_address, subject, template, template_data)
    except Exception:
        logger.exception(f"Notification '{template}' to {to_address} could not be queued")
        return False

    return True
