"""E-mail notification records.

A record is queued inside the transaction that changes the booking and
delivered after commit, so a failed delivery never rolls back the
status change and is kept for inspection.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class EmailNotification(models.Model):
    """An e-mail sent to a guest about a booking."""

    class Type(models.TextChoices):
        BOOKING_CONFIRMED = "BOOKING_CONFIRMED", _("Booking confirmed (invoice)")
        BOOKING_CANCELED = "BOOKING_CANCELED", _("Booking canceled")
        BOOKING_EXPIRED = "BOOKING_EXPIRED", _("Booking expired")

    class Status(models.TextChoices):
        QUEUED = "QUEUED", _("Queued")
        SENT = "SENT", _("Sent")
        FAILED = "FAILED", _("Failed")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="email_notifications",
    )
    type = models.CharField(max_length=32, choices=Type.choices)
    recipient_email = models.EmailField()
    subject = models.CharField(max_length=255)
    payload = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.QUEUED)
    error = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("E-mail notification")
        verbose_name_plural = _("E-mail notifications")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.type} to {self.recipient_email} ({self.status})"

    def mark_sent(self) -> None:
        self.status = self.Status.SENT
        self.sent_at = timezone.now()
        self.error = ""
        self.save(update_fields=["status", "sent_at", "error"])

    def mark_failed(self, error: str) -> None:
        self.status = self.Status.FAILED
        self.error = error
        self.save(update_fields=["status", "error"])
