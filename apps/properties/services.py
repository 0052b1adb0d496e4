"""Catalog services: peak-season rate manager and room maintenance."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Sequence

from django.db import transaction  # type: ignore

from shared.domain.exceptions import ConflictError, NotFoundError, ValidationError

from .models import (
    PEAK_SEASON_NOTE_MAX_LENGTH,
    PERCENTAGE_ADJUSTMENT_MAX,
    Facility,
    PeakSeasonRate,
    Property,
    PropertyFacility,
    Room,
    RoomFacility,
)

logger = logging.getLogger(__name__)

RATE_FIELDS = ("start_date", "end_date", "adjustment_type", "adjustment_value", "note", "is_active")


def get_live_room(room_id: int, *, for_update: bool = False) -> Room:
    queryset = Room.objects.alive().filter(property__deleted_at__isnull=True)
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.select_related("property").get(pk=room_id)
    except Room.DoesNotExist:
        raise NotFoundError(f"Room {room_id} not found.")


def _get_live_rate(rate_id: int) -> PeakSeasonRate:
    try:
        return PeakSeasonRate.objects.alive().select_related("room").get(
            pk=rate_id, room__deleted_at__isnull=True
        )
    except PeakSeasonRate.DoesNotExist:
        raise NotFoundError(f"Peak season rate {rate_id} not found.")


def validate_rate_values(
    start_date: date,
    end_date: date,
    adjustment_type: str,
    adjustment_value: int,
    note: str = "",
    *,
    label: str = "Peak season rate",
) -> None:
    """Check a complete set of rate values. ``label`` names the offending item in errors."""

    if start_date is None or end_date is None:
        raise ValidationError(f"{label}: start_date and end_date are required.")
    if start_date > end_date:
        raise ValidationError(f"{label}: start_date must be on or before end_date.")
    if adjustment_type not in PeakSeasonRate.AdjustmentType.values:
        raise ValidationError(f"{label}: unknown adjustment_type {adjustment_type!r}.")
    if adjustment_value is None or adjustment_value < 0:
        raise ValidationError(f"{label}: adjustment_value must not be negative.")
    if (
        adjustment_type == PeakSeasonRate.AdjustmentType.PERCENTAGE
        and adjustment_value > PERCENTAGE_ADJUSTMENT_MAX
    ):
        raise ValidationError(
            f"{label}: percentage adjustment must be between 0 and {PERCENTAGE_ADJUSTMENT_MAX}."
        )
    if note and len(note) > PEAK_SEASON_NOTE_MAX_LENGTH:
        raise ValidationError(f"{label}: note must be at most {PEAK_SEASON_NOTE_MAX_LENGTH} characters.")


def _validate_item(data: Mapping[str, Any], label: str) -> None:
    validate_rate_values(
        data.get("start_date"),
        data.get("end_date"),
        data.get("adjustment_type"),
        data.get("adjustment_value"),
        data.get("note") or "",
        label=label,
    )


def _rate_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    kwargs = {field: data[field] for field in RATE_FIELDS if field in data}
    kwargs["note"] = kwargs.get("note") or ""
    return kwargs


def list_rates(room_id: int, *, include_inactive: bool = False):
    """Live rates of a room ordered by start date."""

    room = get_live_room(room_id)
    queryset = PeakSeasonRate.objects.alive().filter(room=room)
    if not include_inactive:
        queryset = queryset.filter(is_active=True)
    return queryset.order_by("start_date", "id")


@transaction.atomic
def create_rate(room_id: int, data: Mapping[str, Any]) -> PeakSeasonRate:
    room = get_live_room(room_id)
    _validate_item(data, "Peak season rate")
    rate = PeakSeasonRate.objects.create(room=room, **_rate_kwargs(data))
    logger.info(f"Peak season rate {rate.pk} created for room {room.pk}")
    return rate


def bulk_create_rates(room_id: int, items: Sequence[Mapping[str, Any]]) -> list[PeakSeasonRate]:
    """Create several rates for a room; nothing is written unless every item is valid."""

    if not items:
        raise ValidationError("At least one peak season rate is required.")

    room = get_live_room(room_id)
    for index, item in enumerate(items):
        _validate_item(item, f"Item {index}")

    with transaction.atomic():
        rates = [PeakSeasonRate.objects.create(room=room, **_rate_kwargs(item)) for item in items]

    logger.info(f"{len(rates)} peak season rates created for room {room.pk}")
    return rates


@transaction.atomic
def update_rate(rate_id: int, data: Mapping[str, Any]) -> PeakSeasonRate:
    """Apply a partial update; the merged record must still be valid."""

    rate = _get_live_rate(rate_id)
    merged = {field: getattr(rate, field) for field in RATE_FIELDS}
    merged.update({field: data[field] for field in RATE_FIELDS if field in data})
    merged["note"] = merged["note"] or ""
    _validate_item(merged, f"Peak season rate {rate_id}")

    changed = [field for field in RATE_FIELDS if field in data]
    for field in changed:
        setattr(rate, field, merged[field])
    if changed:
        rate.save(update_fields=[*changed, "updated_at"])
        logger.info(f"Peak season rate {rate.pk} updated: {', '.join(changed)}")
    return rate


def delete_rate(rate_id: int) -> None:
    rate = _get_live_rate(rate_id)
    rate.soft_delete()
    logger.info(f"Peak season rate {rate_id} deleted")


def resolve_facilities(facility_ids: Iterable[int]) -> list[Facility]:
    """Map ids to live facilities; any unknown id fails the whole list."""

    ids = list(dict.fromkeys(facility_ids))
    facilities = list(Facility.objects.alive().filter(pk__in=ids))
    missing = set(ids) - {facility.pk for facility in facilities}
    if missing:
        raise NotFoundError(f"Facilities not found: {sorted(missing)}.")
    return facilities


@transaction.atomic
def replace_room_facilities(room: Room, facility_ids: Iterable[int]) -> None:
    facilities = resolve_facilities(facility_ids)
    RoomFacility.objects.filter(room=room).delete()
    RoomFacility.objects.bulk_create([RoomFacility(room=room, facility=facility) for facility in facilities])


@transaction.atomic
def replace_property_facilities(property_obj: Property, facility_ids: Iterable[int]) -> None:
    facilities = resolve_facilities(facility_ids)
    PropertyFacility.objects.filter(property=property_obj).delete()
    PropertyFacility.objects.bulk_create(
        [PropertyFacility(property=property_obj, facility=facility) for facility in facilities]
    )


def ensure_unique_live_name(model, name: str, *, exclude_pk: int | None = None) -> None:  # type: ignore
    queryset = model.objects.alive().filter(name__iexact=name)
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    if queryset.exists():
        raise ConflictError(f"{model._meta.verbose_name} {name!r} already exists.")


@transaction.atomic
def delete_room(room_id: int) -> None:
    """Soft-delete a room unless it still has active bookings."""

    from apps.bookings.models import Booking  # Local import to prevent circular dependency

    room = get_live_room(room_id, for_update=True)
    has_active = (
        Booking.objects.alive()
        .filter(room=room, status__in=Booking.ACTIVE_STATUSES)
        .exists()
    )
    if has_active:
        raise ConflictError("Room has active bookings and cannot be deleted.")
    room.soft_delete()
    PeakSeasonRate.objects.filter(room=room).soft_delete()
    logger.info(f"Room {room_id} deleted")


@transaction.atomic
def delete_property(property_obj: Property) -> None:
    """Soft-delete a property with all its rooms unless a room still has active bookings."""

    from apps.bookings.models import Booking  # Local import to prevent circular dependency

    has_active = (
        Booking.objects.alive()
        .filter(property=property_obj, status__in=Booking.ACTIVE_STATUSES)
        .exists()
    )
    if has_active:
        raise ConflictError("Property has active bookings and cannot be deleted.")
    rooms = Room.objects.filter(property=property_obj)
    PeakSeasonRate.objects.filter(room__in=rooms).soft_delete()
    rooms.soft_delete()
    property_obj.soft_delete()
    logger.info(f"Property {property_obj.pk} deleted")
