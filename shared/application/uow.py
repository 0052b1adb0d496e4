"""
Unit of Work

One database transaction plus the domain events raised inside it.
Events reach the message bus through ``transaction.on_commit``, so
rolled-back work never notifies anybody.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Usage:
        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.select_for_update().get(pk=booking_id)
            booking.confirm(payment_id=payment.pk)
            booking.save()
            uow.collect_events(booking)
        # BookingConfirmed is published once the outermost atomic block commits
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._schedule_publish()
            elif self._events:
                logger.warning(f"Transaction rolled back, dropping {len(self._events)} events")
        finally:
            self._events = []
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent):
        """Record an event that no aggregate carries (e.g. a failed payment)"""
        self._events.append(event)

    def collect_events(self, aggregate):
        """Move pending events off an aggregate root"""
        pending = aggregate.events
        if not pending:
            return
        self._events.extend(pending)
        aggregate.clear_events()
        logger.debug(f"Collected {len(pending)} events from {aggregate.__class__.__name__} {aggregate.pk}")

    def _schedule_publish(self):
        if not self._events:
            return
        events = list(self._events)
        transaction.on_commit(lambda: self._publish(events))

    @staticmethod
    def _publish(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        message_bus.publish_events(events)
