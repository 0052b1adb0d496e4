"""Availability checks for rooms."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from django.db import transaction  # type: ignore
from django.db.models import Exists, OuterRef, Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.properties.models import Property, Room
from shared.domain.exceptions import NotFoundError, ValidationError

from .models import Booking


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def blocking_bookings(
    room_id: int,
    check_in: date,
    check_out: date,
    *,
    exclude_booking_id: Optional[int] = None,
):
    """Live bookings of the room that still hold at least one night of [check_in, check_out)."""

    overlapping_filter = Q(check_in_date__lt=check_out) & Q(check_out_date__gt=check_in)

    queryset = (
        Booking.objects.alive()
        .filter(room_id=room_id)
        .exclude(status__in=Booking.RELEASED_STATUSES)
        .filter(overlapping_filter)
    )
    if exclude_booking_id is not None:
        queryset = queryset.exclude(pk=exclude_booking_id)
    return queryset


def is_room_available(
    room_id: int,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """True when no blocking booking overlaps the stay; the check-out day is free."""

    queryset = blocking_bookings(room_id, check_in, check_out, exclude_booking_id=exclude_booking_id)
    return not _lock_queryset_if_possible(queryset).exists()


@dataclass(frozen=True)
class RoomAvailabilityQuery:
    property_id: int
    check_in: date
    check_out: date
    guests_count: Optional[int] = None

    def validate(self) -> None:
        if self.check_in >= self.check_out:
            raise ValidationError("check_in_date must be before check_out_date.")
        if self.check_in < timezone.localdate():
            raise ValidationError("check_in_date cannot be in the past.")
        if self.guests_count is not None and self.guests_count < 1:
            raise ValidationError("guests_count must be at least 1.")


@dataclass(frozen=True)
class RoomAvailability:
    room: Room
    is_available: bool


def list_available_rooms(
    property_id: int,
    check_in: date,
    check_out: date,
    guests_count: Optional[int] = None,
) -> list[RoomAvailability]:
    """Every live room of the property with an availability flag for the stay."""

    query = RoomAvailabilityQuery(property_id, check_in, check_out, guests_count)
    query.validate()

    if not Property.objects.alive().filter(pk=property_id).exists():
        raise NotFoundError(f"Property {property_id} not found.")

    taken = (
        Booking.objects.alive()
        .filter(room=OuterRef("pk"), check_in_date__lt=check_out, check_out_date__gt=check_in)
        .exclude(status__in=Booking.RELEASED_STATUSES)
    )
    rooms = (
        Room.objects.alive()
        .filter(property_id=property_id)
        .annotate(is_taken=Exists(taken))
        .prefetch_related("facilities")
        .order_by("name", "id")
    )
    if guests_count is not None:
        rooms = rooms.filter(max_guests__gte=guests_count)

    return [RoomAvailability(room=room, is_available=not room.is_taken) for room in rooms]
