"""Payment models."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Payment(models.Model):
    """One payment attempt for a booking."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        SUCCESS = "SUCCESS", _("Success")
        FAILED = "FAILED", _("Failed")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount_idr = models.PositiveBigIntegerField()
    payment_status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_method = models.CharField(
        max_length=50,
        help_text=_("BANK_TRANSFER, PAYMENT_GATEWAY or the gateway's payment type once known."),
    )
    provider_tx_id = models.CharField(max_length=100, null=True, blank=True, unique=True)
    checkout_token = models.CharField(max_length=255, blank=True)
    checkout_redirect_url = models.URLField(max_length=500, blank=True)
    requested_at = models.DateTimeField(default=timezone.now)
    paid_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-requested_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=models.Q(payment_status="SUCCESS"),
                name="payment_single_success_per_booking",
            ),
        ]

    def __str__(self) -> str:
        return f"Payment {self.pk} for booking {self.booking_id} ({self.payment_status})"

    @property
    def is_successful(self) -> bool:
        return self.payment_status == self.Status.SUCCESS

    def mark_success(self, *, provider_tx_id: str | None = None, payment_method: str | None = None) -> None:
        self.payment_status = self.Status.SUCCESS
        if self.paid_at is None:
            self.paid_at = timezone.now()
        self.failed_at = None
        if provider_tx_id:
            self.provider_tx_id = provider_tx_id
        if payment_method:
            self.payment_method = payment_method

    def mark_failed(self, *, provider_tx_id: str | None = None, payment_method: str | None = None) -> None:
        self.payment_status = self.Status.FAILED
        self.failed_at = timezone.now()
        if provider_tx_id:
            self.provider_tx_id = provider_tx_id
        if payment_method:
            self.payment_method = payment_method


class PaymentTransaction(models.Model):
    """Log of interactions with the payment gateway (checkout, webhooks, polling)."""

    class Event(models.TextChoices):
        CHECKOUT = "checkout", _("Checkout created")
        NOTIFICATION = "notification", _("Gateway notification")
        STATUS_POLL = "status_poll", _("Status poll")
        MANUAL = "manual", _("Manual completion")

    payment = models.ForeignKey(
        Payment,
        on_delete=models.CASCADE,
        related_name="transactions",
    )
    event = models.CharField(max_length=20, choices=Event.choices)
    payload = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment transaction")
        verbose_name_plural = _("Payment transactions")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.event} for payment {self.payment_id}"
