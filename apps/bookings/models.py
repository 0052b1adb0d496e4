"""Booking domain models."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.exceptions import ConflictError
from shared.infrastructure.soft_delete import SoftDeleteModel

from .domain.events import BookingCancelled, BookingConfirmed, BookingExpired

DEFAULT_CANCEL_REASON = "Canceled by user"


class Booking(EventRecorder, SoftDeleteModel):
    """Reservation of one room for a stay [check_in_date, check_out_date)."""

    class Status(models.TextChoices):
        WAITING_PAYMENT = "WAITING_PAYMENT", _("Waiting for payment")
        WAITING_CONFIRMATION = "WAITING_CONFIRMATION", _("Waiting for confirmation")
        CONFIRMED = "CONFIRMED", _("Confirmed")
        CANCELED = "CANCELED", _("Canceled")
        EXPIRED = "EXPIRED", _("Expired")
        CHECKED_IN = "CHECKED_IN", _("Checked in")
        CHECKED_OUT = "CHECKED_OUT", _("Checked out")

    class PaymentMethod(models.TextChoices):
        BANK_TRANSFER = "BANK_TRANSFER", _("Bank transfer")
        PAYMENT_GATEWAY = "PAYMENT_GATEWAY", _("Payment gateway")

    # Statuses that do not hold the room
    RELEASED_STATUSES = (Status.CANCELED, Status.EXPIRED)
    AWAITING_PAYMENT_STATUSES = (Status.WAITING_PAYMENT, Status.WAITING_CONFIRMATION)
    ACTIVE_STATUSES = (Status.WAITING_PAYMENT, Status.WAITING_CONFIRMATION, Status.CONFIRMED)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    room = models.ForeignKey(
        "properties.Room",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    nights = models.PositiveSmallIntegerField()
    guests_count = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=32, choices=Status.choices)
    payment_method = models.CharField(max_length=32, choices=PaymentMethod.choices)
    nightly_subtotal_idr = models.PositiveBigIntegerField(default=0)
    cleaning_fee_idr = models.PositiveBigIntegerField(default=0)
    service_fee_idr = models.PositiveBigIntegerField(default=0)
    discount_idr = models.PositiveBigIntegerField(default=0)
    total_price_idr = models.PositiveBigIntegerField(default=0)
    payment_due_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("Unpaid bookings expire after this moment."),
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out_date__gt=models.F("check_in_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "check_in_date", "check_out_date"], name="booking_room_dates_idx"),
            models.Index(fields=["status", "payment_due_at"], name="booking_status_due_idx"),
            models.Index(fields=["user", "created_at"], name="booking_user_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} ({self.status})"

    def get_order_id(self) -> str:
        """Identifier sent to the payment gateway."""
        return str(self.pk)

    def confirm(self, *, payment_id: int, notification_id: int | None = None) -> None:
        """WAITING_* -> CONFIRMED"""
        if self.status not in self.AWAITING_PAYMENT_STATUSES:
            raise ConflictError(f"Booking {self.pk} cannot be confirmed from status {self.status}.")
        self.status = self.Status.CONFIRMED
        self.confirmed_at = timezone.now()
        self.add_event(
            BookingConfirmed(
                booking_id=self.pk,
                payment_id=payment_id,
                notification_id=notification_id,
            )
        )

    def cancel(self, reason: str | None = None, *, notification_id: int | None = None) -> None:
        if self.status == self.Status.CANCELED:
            raise ConflictError(f"Booking {self.pk} is already canceled.")
        if self.status in (self.Status.CHECKED_IN, self.Status.CHECKED_OUT):
            raise ConflictError(f"Booking {self.pk} cannot be canceled after check-in.")
        self.status = self.Status.CANCELED
        self.cancelled_at = timezone.now()
        self.cancel_reason = reason or DEFAULT_CANCEL_REASON
        self.add_event(
            BookingCancelled(
                booking_id=self.pk,
                reason=self.cancel_reason,
                notification_id=notification_id,
            )
        )

    def expire(self, reason: str = "", *, notification_id: int | None = None) -> None:
        """Unpaid booking runs out of time, or the gateway reports the only attempt expired."""
        if self.status not in self.AWAITING_PAYMENT_STATUSES:
            raise ConflictError(f"Booking {self.pk} cannot expire from status {self.status}.")
        self.status = self.Status.EXPIRED
        self.cancelled_at = timezone.now()
        self.cancel_reason = reason
        self.add_event(BookingExpired(booking_id=self.pk, notification_id=notification_id))


class NightlyRate(models.Model):
    """Price charged for one night of a booking, frozen at creation."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="nightly_rates")
    date = models.DateField()
    price_per_night_idr = models.PositiveBigIntegerField()
    peak_season_rate = models.ForeignKey(
        "properties.PeakSeasonRate",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        verbose_name = _("Nightly rate")
        verbose_name_plural = _("Nightly rates")
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(fields=["booking", "date"], name="nightly_rate_unique_date"),
        ]

    def __str__(self) -> str:
        return f"{self.booking_id} {self.date}: {self.price_per_night_idr}"
