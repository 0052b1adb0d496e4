"""Catalog domain models.

Properties are listed by admins and split into bookable rooms. Every
catalog row is soft-deleted, so bookings keep pointing at the room and
property they were made for. Peak-season rates override a room's base
nightly price for a date window.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxLengthValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.infrastructure.soft_delete import SoftDeleteModel

PERCENTAGE_ADJUSTMENT_MAX = 1000
PEAK_SEASON_NOTE_MAX_LENGTH = 200


class Location(SoftDeleteModel):
    """Address record a property points to."""

    name = models.CharField(max_length=255)
    address = models.CharField(max_length=500, blank=True)
    city = models.CharField(max_length=120)
    country = models.CharField(max_length=120, default="Indonesia")
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Location")
        verbose_name_plural = _("Locations")
        ordering = ["city", "name"]

    def __str__(self) -> str:
        return f"{self.name}, {self.city}"


class PropertyType(SoftDeleteModel):
    """Kind of accommodation (villa, hotel, guest house...)."""

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    class Meta:
        verbose_name = _("Property type")
        verbose_name_plural = _("Property types")
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["name"],
                condition=models.Q(deleted_at__isnull=True),
                name="property_type_unique_live_name",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Facility(SoftDeleteModel):
    """Facility that can be attached to properties and rooms."""

    name = models.CharField(max_length=100)
    icon = models.CharField(
        max_length=100,
        blank=True,
        help_text=_("Icon identifier used by the frontend."),
    )

    class Meta:
        verbose_name = _("Facility")
        verbose_name_plural = _("Facilities")
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["name"],
                condition=models.Q(deleted_at__isnull=True),
                name="facility_unique_live_name",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Property(SoftDeleteModel):
    """Listing managed by an admin."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True)
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="properties",
    )
    property_type = models.ForeignKey(
        PropertyType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="properties",
    )
    facilities = models.ManyToManyField(
        Facility,
        through="PropertyFacility",
        related_name="properties",
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "deleted_at"], name="property_owner_deleted_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base_slug = slugify(self.title)[:200] or "property"
            candidate = base_slug
            counter = 1
            while self.__class__.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
                counter += 1
                candidate = f"{base_slug}-{counter}"
            self.slug = candidate
        super().save(*args, **kwargs)


class Room(SoftDeleteModel):
    """Bookable unit of a property."""

    property = models.ForeignKey(
        Property,
        on_delete=models.PROTECT,
        related_name="rooms",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    max_guests = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    beds = models.PositiveSmallIntegerField(default=1)
    bathrooms = models.PositiveSmallIntegerField(default=1)
    base_price_per_night_idr = models.PositiveIntegerField(
        help_text=_("Base nightly price in whole rupiah."),
    )
    facilities = models.ManyToManyField(
        Facility,
        through="RoomFacility",
        related_name="rooms",
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["property_id", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_guests__gte=1),
                name="room_max_guests_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.property.title}: {self.name}"


class PropertyFacility(models.Model):
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="facility_links")
    facility = models.ForeignKey(Facility, on_delete=models.CASCADE, related_name="property_links")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["property", "facility"], name="property_facility_unique"),
        ]


class RoomFacility(models.Model):
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="facility_links")
    facility = models.ForeignKey(Facility, on_delete=models.CASCADE, related_name="room_links")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["room", "facility"], name="room_facility_unique"),
        ]


class PeakSeasonRate(SoftDeleteModel):
    """Date window in which a room is sold at a different nightly price."""

    class AdjustmentType(models.TextChoices):
        FIXED = "FIXED", _("Fixed price")
        PERCENTAGE = "PERCENTAGE", _("Percentage")

    room = models.ForeignKey(
        Room,
        on_delete=models.CASCADE,
        related_name="peak_season_rates",
    )
    start_date = models.DateField()
    end_date = models.DateField(help_text=_("Inclusive."))
    adjustment_type = models.CharField(max_length=20, choices=AdjustmentType.choices)
    adjustment_value = models.PositiveIntegerField()
    note = models.CharField(
        max_length=PEAK_SEASON_NOTE_MAX_LENGTH,
        blank=True,
        validators=[MaxLengthValidator(PEAK_SEASON_NOTE_MAX_LENGTH)],
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Peak season rate")
        verbose_name_plural = _("Peak season rates")
        ordering = ["start_date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="peak_season_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_date", "end_date"], name="peak_season_room_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.room}: {self.start_date} - {self.end_date}"

    def covers(self, day) -> bool:  # type: ignore
        return self.start_date <= day <= self.end_date
