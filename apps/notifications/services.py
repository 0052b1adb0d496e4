"""Notification services for booking e-mails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.html import escape, strip_tags  # type: ignore

from shared.domain.exceptions import NotificationError

from .models import EmailNotification

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)

PAYMENT_METHOD_LABELS = {
    "BANK_TRANSFER": "Bank transfer",
    "PAYMENT_GATEWAY": "Online payment",
}


def send_email_notification(recipient_email: str, subject: str, html_message: str) -> None:
    """Send one HTML e-mail with a plain-text alternative.

    Raises:
        NotificationError: if the mail backend fails
    """
    try:
        send_mail(
            subject=subject,
            message=strip_tags(html_message),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as e:
        raise NotificationError(f"Failed to send email to {recipient_email}: {e}") from e

    logger.info(f"Email sent successfully to {recipient_email}: {subject}")


def _format_idr(amount: int) -> str:
    return "Rp " + f"{amount:,}".replace(",", ".")


def build_invoice_payload(booking: "Booking") -> dict:
    """Snapshot of everything the invoice shows, stored with the notification."""

    user = booking.user
    location = booking.property.location
    payment = booking.payments.filter(payment_status="SUCCESS").first()
    paid_at = payment.paid_at if payment and payment.paid_at else None

    return {
        "booking_id": booking.pk,
        "customer_name": user.display_name,
        "customer_email": user.email,
        "property_title": booking.property.title,
        "location": f"{location.name}, {location.city}" if location else "",
        "room_name": booking.room.name if booking.room else "",
        "check_in_date": booking.check_in_date.isoformat(),
        "check_out_date": booking.check_out_date.isoformat(),
        "nights": booking.nights,
        "guests_count": booking.guests_count,
        "nightly_subtotal_idr": booking.nightly_subtotal_idr,
        "cleaning_fee_idr": booking.cleaning_fee_idr,
        "service_fee_idr": booking.service_fee_idr,
        "discount_idr": booking.discount_idr,
        "total_price_idr": booking.total_price_idr,
        "payment_method": (payment.payment_method if payment else booking.payment_method),
        "paid_at": timezone.localtime(paid_at).isoformat() if paid_at else None,
    }


def render_invoice(payload: dict) -> str:
    rows = [
        ("Booking", f"#{payload['booking_id']}"),
        ("Property", payload["property_title"]),
        ("Location", payload["location"]),
        ("Room", payload["room_name"]),
        ("Check-in", payload["check_in_date"]),
        ("Check-out", payload["check_out_date"]),
        ("Nights", payload["nights"]),
        ("Guests", payload["guests_count"]),
        ("Room subtotal", _format_idr(payload["nightly_subtotal_idr"])),
        ("Cleaning fee", _format_idr(payload["cleaning_fee_idr"])),
        ("Service fee", _format_idr(payload["service_fee_idr"])),
        ("Discount", _format_idr(payload["discount_idr"])),
        ("Total paid", _format_idr(payload["total_price_idr"])),
        ("Payment method", PAYMENT_METHOD_LABELS.get(payload["payment_method"], payload["payment_method"])),
        ("Paid at", payload["paid_at"] or "-"),
    ]
    items = "\n".join(
        f"            <li><strong>{label}:</strong> {escape(value)}</li>" for label, value in rows
    )
    return f"""
    <html>
    <body>
        <h2>Hello, {escape(payload['customer_name'])}!</h2>
        <p>Your booking is confirmed. Here is your invoice.</p>
        <ul>
{items}
        </ul>
    </body>
    </html>
    """


def render_cancellation(payload: dict) -> str:
    return f"""
    <html>
    <body>
        <h2>Hello, {escape(payload['customer_name'])}!</h2>
        <p>Your booking #{payload['booking_id']} at {escape(payload['property_title'])}
        ({payload['check_in_date']} - {payload['check_out_date']}) has been canceled.</p>
        <p>Reason: {escape(payload.get('cancel_reason') or '-')}</p>
    </body>
    </html>
    """


def render_expiry(payload: dict) -> str:
    return f"""
    <html>
    <body>
        <h2>Hello, {escape(payload['customer_name'])}!</h2>
        <p>The payment window for booking #{payload['booking_id']} at {escape(payload['property_title'])}
        ({payload['check_in_date']} - {payload['check_out_date']}) has closed and the room was released.</p>
        <p>Amount due was {_format_idr(payload['total_price_idr'])}. You are welcome to book again.</p>
    </body>
    </html>
    """


def queue_booking_email(
    booking: "Booking",
    notification_type: str,
    *,
    cancel_reason: str | None = None,
) -> EmailNotification:
    """Store an e-mail to be delivered once the surrounding transaction commits."""

    payload = build_invoice_payload(booking)
    if notification_type == EmailNotification.Type.BOOKING_CONFIRMED:
        subject = f"Invoice for booking #{booking.pk}"
    elif notification_type == EmailNotification.Type.BOOKING_EXPIRED:
        subject = f"Booking #{booking.pk} expired"
    else:
        payload["cancel_reason"] = cancel_reason or booking.cancel_reason
        subject = f"Booking #{booking.pk} canceled"

    return EmailNotification.objects.create(
        booking=booking,
        type=notification_type,
        recipient_email=booking.user.email,
        subject=subject,
        payload=payload,
    )


def _send(notification: EmailNotification, html_message: str) -> EmailNotification:
    try:
        send_email_notification(notification.recipient_email, notification.subject, html_message)
    except NotificationError as e:
        notification.mark_failed(str(e))
        raise

    notification.mark_sent()
    return notification


def send_invoice_email(notification: EmailNotification) -> EmailNotification:
    return _send(notification, render_invoice(notification.payload))


def send_cancellation_email(notification: EmailNotification) -> EmailNotification:
    return _send(notification, render_cancellation(notification.payload))


def send_expiry_email(notification: EmailNotification) -> EmailNotification:
    return _send(notification, render_expiry(notification.payload))


def deliver_email_notification(notification_id: int) -> EmailNotification:
    """Send a queued e-mail and record the outcome.

    Raises:
        NotificationError: after the record is marked FAILED
    """
    notification = EmailNotification.objects.select_related("booking").get(pk=notification_id)
    if notification.status == EmailNotification.Status.SENT:
        return notification

    if notification.type == EmailNotification.Type.BOOKING_CONFIRMED:
        return send_invoice_email(notification)
    if notification.type == EmailNotification.Type.BOOKING_EXPIRED:
        return send_expiry_email(notification)
    return send_cancellation_email(notification)
