"""Domain event handlers that hand booking e-mails to Celery after commit."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingExpired
from shared.application.message_bus import MessageBus

from .tasks import deliver_booking_email

logger = logging.getLogger(__name__)


def send_booking_email(event) -> None:  # type: ignore
    if not event.notification_id:
        return
    deliver_booking_email.delay(event.notification_id)
    logger.debug(f"Booking {event.booking_id}: e-mail {event.notification_id} handed to Celery")


def register_handlers(bus: MessageBus) -> None:
    bus.register_event_handler(BookingConfirmed, send_booking_email)
    bus.register_event_handler(BookingCancelled, send_booking_email)
    bus.register_event_handler(BookingExpired, send_booking_email)
