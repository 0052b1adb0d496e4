"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.db.models import Exists, OuterRef  # type: ignore
from django.utils import timezone  # type: ignore

from apps.finances.models import Payment
from apps.finances.services import pending_payments
from apps.notifications.models import EmailNotification
from apps.notifications.services import queue_booking_email
from shared.application.uow import DjangoUnitOfWork

from .models import Booking

logger = logging.getLogger(__name__)

EXPIRED_REASON = "Payment deadline passed"


def overdue_bookings(now=None):  # type: ignore
    """Unpaid bookings whose payment deadline has passed."""

    now = now or timezone.now()
    paid = Payment.objects.filter(booking=OuterRef("pk"), payment_status=Payment.Status.SUCCESS)
    return (
        Booking.objects.alive()
        .filter(
            status__in=Booking.AWAITING_PAYMENT_STATUSES,
            payment_due_at__isnull=False,
            payment_due_at__lte=now,
        )
        .exclude(Exists(paid))
        .order_by("payment_due_at", "id")
    )


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_overdue_bookings")
def expire_overdue_bookings() -> dict[str, int]:
    """
    Expire bookings that were not paid in time.

    Each booking is expired in its own transaction together with its
    pending payments, which are marked FAILED.

    Runs every 5 minutes via Celery Beat.

    Returns:
        dict: {"expired": number of expired bookings}
    """
    now = timezone.now()
    expired_count = 0

    for booking_id in overdue_bookings(now).values_list("pk", flat=True):
        try:
            with DjangoUnitOfWork() as uow:
                booking = overdue_bookings(now).select_for_update().filter(pk=booking_id).first()
                if booking is None:
                    continue

                expiry_notice = queue_booking_email(booking, EmailNotification.Type.BOOKING_EXPIRED)
                booking.expire(reason=EXPIRED_REASON, notification_id=expiry_notice.pk)
                booking.save()
                for payment in pending_payments(booking).select_for_update():
                    payment.mark_failed()
                    payment.save()
                uow.collect_events(booking)

            expired_count += 1
            logger.info(f"Booking {booking_id} expired automatically, payment was due {booking.payment_due_at}")
        except Exception as e:
            logger.error(f"Error expiring booking {booking_id}: {e}", exc_info=True)

    if expired_count > 0:
        logger.info(f"Expired {expired_count} overdue bookings")

    return {"expired": expired_count}
