"""Read side of the booking domain."""

from django.db.models import Prefetch

from apps.bookings.models import Booking, NightlyRate
from apps.finances.models import Payment
from apps.users.permissions import user_is_admin
from shared.domain.exceptions import AuthorizationError, NotFoundError


def booking_queryset():
    """Live bookings with everything the detail shape renders."""
    return (
        Booking.objects.alive()
        .select_related("user", "property", "property__location", "room")
        .prefetch_related(
            Prefetch("nightly_rates", queryset=NightlyRate.objects.order_by("date")),
            Prefetch("payments", queryset=Payment.objects.order_by("-requested_at", "-id")),
        )
    )


def get_booking(booking_id: int, user) -> Booking:
    """
    Booking visible to its owner and to admins

    Raises:
        NotFoundError: no live booking with this id
        AuthorizationError: caller is neither the owner nor an admin
    """
    booking = booking_queryset().filter(pk=booking_id).first()
    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found")
    if booking.user_id != user.pk and not user_is_admin(user):
        raise AuthorizationError("You can only view your own bookings")
    return booking


def list_user_bookings(user):
    """The caller's live bookings, newest first"""
    return booking_queryset().filter(user=user).order_by("-created_at", "-id")
