"""Celery tasks for booking e-mails."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from shared.domain.exceptions import NotificationError

from .models import EmailNotification
from .services import deliver_email_notification

logger = logging.getLogger(__name__)


# ============================================================================
# NOTIFICATION TASKS
# ============================================================================

@shared_task(name="notifications.deliver_booking_email")
def deliver_booking_email(notification_id: int) -> bool:
    """Send a queued booking e-mail. The outcome is kept on the record."""
    try:
        notification = deliver_email_notification(notification_id)
    except EmailNotification.DoesNotExist:
        logger.error(f"E-mail notification {notification_id} not found")
        return False
    except NotificationError as e:
        logger.error(f"[NOTIFICATION] E-mail {notification_id} was not delivered: {e}", exc_info=True)
        return False

    logger.info(
        f"[NOTIFICATION] {notification.type} e-mail for booking {notification.booking_id} "
        f"sent to {notification.recipient_email}"
    )
    return True
