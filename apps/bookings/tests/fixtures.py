"""Bookings created directly in the database for tests."""

from __future__ import annotations

from datetime import date, timedelta

from django.utils import timezone

from apps.bookings.models import Booking
from apps.finances.models import Payment


def create_booking(
    room,  # type: ignore
    user,  # type: ignore
    check_in: date,
    check_out: date,
    *,
    status: str = Booking.Status.WAITING_PAYMENT,
    payment_method: str = Booking.PaymentMethod.PAYMENT_GATEWAY,
    total: int = 2_430_000,
    with_payment: bool = True,
) -> Booking:
    booking = Booking.objects.create(
        user=user,
        property=room.property,
        room=room,
        check_in_date=check_in,
        check_out_date=check_out,
        nights=(check_out - check_in).days,
        guests_count=1,
        status=status,
        payment_method=payment_method,
        nightly_subtotal_idr=total,
        total_price_idr=total,
        payment_due_at=timezone.now() + timedelta(hours=24),
    )
    if with_payment:
        Payment.objects.create(
            booking=booking,
            user=user,
            amount_idr=total,
            payment_method=payment_method,
        )
    return booking
