"""Payment processing services.

Checkout sessions, gateway notifications (webhook and status polling)
and manual completion of bank transfers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from apps.bookings.models import Booking
from apps.notifications.models import EmailNotification
from apps.notifications.services import queue_booking_email
from apps.users.permissions import user_is_admin
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PaymentMismatchError,
    ValidationError,
)

from .gateway import CheckoutSession, GatewayNotification, MidtransGateway, get_gateway
from .models import Payment, PaymentTransaction

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = ("settlement",)
CLOSED_STATUSES = ("cancel", "deny", "expire")


@dataclass(frozen=True)
class GatewayOutcome:
    """What a gateway status means for the payment and its booking."""

    payment_status: str
    booking_status: str


def map_gateway_status(transaction_status: str, fraud_status: Optional[str] = None) -> GatewayOutcome:
    """
    Translate a Midtrans transaction status.

    ``booking_status`` is the target before idempotency rules apply; a
    CANCELED target becomes EXPIRED when the failed attempt was the only one.
    """
    transaction_status = (transaction_status or "").lower()
    fraud_status = (fraud_status or "").lower()

    if transaction_status == "capture":
        if fraud_status == "accept":
            return GatewayOutcome(Payment.Status.SUCCESS, Booking.Status.CONFIRMED)
        return GatewayOutcome(Payment.Status.FAILED, Booking.Status.WAITING_PAYMENT)
    if transaction_status in SUCCESS_STATUSES:
        return GatewayOutcome(Payment.Status.SUCCESS, Booking.Status.CONFIRMED)
    if transaction_status in CLOSED_STATUSES:
        return GatewayOutcome(Payment.Status.FAILED, Booking.Status.CANCELED)
    return GatewayOutcome(Payment.Status.PENDING, Booking.Status.WAITING_PAYMENT)


def log_transaction(payment: Payment, event: str, payload: Optional[dict], status: str = "") -> PaymentTransaction:
    return PaymentTransaction.objects.create(
        payment=payment,
        event=event,
        payload=payload or {},
        status=status,
    )


def start_checkout(payment: Payment, *, gateway: Optional[MidtransGateway] = None) -> CheckoutSession:
    """
    Open a gateway checkout session for a payment and store its token.

    Raises:
        UpstreamError: if the gateway cannot be reached or rejects the request
    """
    gateway = gateway or get_gateway()
    booking = payment.booking
    user = booking.user

    session = gateway.create_checkout(
        booking_id=booking.get_order_id(),
        amount_idr=payment.amount_idr,
        customer_name=user.display_name,
        customer_email=user.email,
    )

    payment.checkout_token = session.token
    payment.checkout_redirect_url = session.redirect_url
    payment.save(update_fields=["checkout_token", "checkout_redirect_url", "updated_at"])
    log_transaction(
        payment,
        PaymentTransaction.Event.CHECKOUT,
        {"token": session.token, "redirect_url": session.redirect_url},
        status="created",
    )

    logger.info(f"Checkout session created for booking {booking.pk}, payment {payment.pk}")
    return session


def _lock_booking(booking_id) -> Booking:  # type: ignore
    try:
        pk = int(booking_id)
    except (TypeError, ValueError):
        raise NotFoundError(f"Booking {booking_id} not found.")

    booking = Booking.objects.alive().select_for_update().filter(pk=pk).first()
    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found.")
    return booking


def _correlate_payment(booking: Booking, transaction_id: Optional[str]) -> Payment:
    """Payment with the gateway transaction id, else the booking's latest attempt."""

    if transaction_id:
        payment = Payment.objects.select_for_update().filter(provider_tx_id=transaction_id).first()
        if payment is not None:
            if payment.booking_id != booking.pk:
                raise ValidationError(
                    f"Transaction {transaction_id} belongs to booking {payment.booking_id}, "
                    f"not {booking.pk}."
                )
            return payment

    payment = booking.payments.select_for_update().order_by("-requested_at", "-id").first()
    if payment is None:
        raise NotFoundError(f"Booking {booking.pk} has no payments.")
    return payment


def _check_amount(payment: Payment, gross_amount: Optional[Decimal]) -> None:
    if gross_amount is None:
        logger.error(f"Payment {payment.pk} notification carries no gross_amount")
        raise PaymentMismatchError(
            "Gateway notification has no gross_amount.",
            details={"expected": payment.amount_idr, "received": None},
        )
    if gross_amount != Decimal(payment.amount_idr):
        logger.error(
            f"Payment {payment.pk} amount mismatch: gateway reported {gross_amount}, "
            f"expected {payment.amount_idr}"
        )
        raise PaymentMismatchError(
            f"Gateway amount {gross_amount} does not match payment amount {payment.amount_idr}.",
            details={"expected": payment.amount_idr, "received": str(gross_amount)},
        )


def _confirm_booking(uow: DjangoUnitOfWork, booking: Booking, payment: Payment) -> None:
    notification = queue_booking_email(booking, EmailNotification.Type.BOOKING_CONFIRMED)
    booking.confirm(payment_id=payment.pk, notification_id=notification.pk)
    booking.save()
    uow.collect_events(booking)
    logger.info(f"Booking {booking.pk} confirmed by payment {payment.pk}")


def _apply_success(
    uow: DjangoUnitOfWork,
    booking: Booking,
    payment: Payment,
    notification: GatewayNotification,
) -> None:
    if payment.is_successful:
        logger.info(f"Payment {payment.pk} already settled, notification ignored")
        if booking.status in Booking.AWAITING_PAYMENT_STATUSES:
            _confirm_booking(uow, booking, payment)
        return

    other_success = booking.payments.filter(payment_status=Payment.Status.SUCCESS).exclude(pk=payment.pk)
    if other_success.exists():
        logger.warning(
            f"Booking {booking.pk} is already paid, second settlement for payment {payment.pk} "
            f"needs a manual refund"
        )
        return

    payment.mark_success(
        provider_tx_id=notification.transaction_id,
        payment_method=notification.payment_type,
    )
    payment.save()
    logger.info(f"Payment {payment.pk} settled for booking {booking.pk}")

    if booking.status in Booking.AWAITING_PAYMENT_STATUSES:
        _confirm_booking(uow, booking, payment)
    elif booking.status in Booking.RELEASED_STATUSES:
        logger.warning(
            f"Payment {payment.pk} settled for {booking.status} booking {booking.pk}, "
            f"needs a manual refund"
        )


def _apply_failure(
    uow: DjangoUnitOfWork,
    booking: Booking,
    payment: Payment,
    notification: GatewayNotification,
    outcome: GatewayOutcome,
) -> None:
    if payment.is_successful:
        logger.warning(
            f"Ignoring {notification.transaction_status} for settled payment {payment.pk}"
        )
        return

    payment.mark_failed(
        provider_tx_id=notification.transaction_id,
        payment_method=notification.payment_type,
    )
    payment.save()
    logger.info(f"Payment {payment.pk} failed with {notification.transaction_status}")

    if booking.status not in Booking.AWAITING_PAYMENT_STATUSES:
        return

    if outcome.booking_status == Booking.Status.WAITING_PAYMENT:
        if booking.status != Booking.Status.WAITING_PAYMENT:
            booking.status = Booking.Status.WAITING_PAYMENT
            booking.save(update_fields=["status", "updated_at"])
        return

    only_attempt = booking.payments.count() == 1
    never_paid = not booking.payments.filter(payment_status=Payment.Status.SUCCESS).exists()
    reason = f"Payment {notification.transaction_status}"
    if only_attempt and never_paid:
        expiry_notice = queue_booking_email(booking, EmailNotification.Type.BOOKING_EXPIRED)
        booking.expire(reason=reason, notification_id=expiry_notice.pk)
    else:
        booking.cancel(reason=reason)
    booking.save()
    uow.collect_events(booking)
    logger.info(f"Booking {booking.pk} moved to {booking.status} after {notification.transaction_status}")


def _apply_pending(booking: Booking, payment: Payment, notification: GatewayNotification) -> None:
    if payment.payment_status != Payment.Status.PENDING:
        logger.info(
            f"Ignoring {notification.transaction_status} for {payment.payment_status} payment {payment.pk}"
        )
        return

    update_fields = ["updated_at"]
    if notification.transaction_id and not payment.provider_tx_id:
        payment.provider_tx_id = notification.transaction_id
        update_fields.append("provider_tx_id")
    if notification.payment_type:
        payment.payment_method = notification.payment_type
        update_fields.append("payment_method")
    payment.save(update_fields=update_fields)

    if booking.status == Booking.Status.WAITING_CONFIRMATION:
        booking.status = Booking.Status.WAITING_PAYMENT
        booking.save(update_fields=["status", "updated_at"])


def process_gateway_notification(
    notification: GatewayNotification,
    *,
    event: str = PaymentTransaction.Event.NOTIFICATION,
) -> Payment:
    """
    Apply a gateway notification to its payment and booking.

    Safe to call repeatedly with the same notification: a confirmed booking
    is never downgraded, a released booking is never reopened and a
    booking never gets a second SUCCESS payment.

    Raises:
        NotFoundError: unknown order or booking without payments
        PaymentMismatchError: gross amount differs from the payment amount
    """
    outcome = map_gateway_status(notification.transaction_status, notification.fraud_status)

    with DjangoUnitOfWork() as uow:
        booking = _lock_booking(notification.order_id)
        payment = _correlate_payment(booking, notification.transaction_id)
        _check_amount(payment, notification.gross_amount)

        log_transaction(
            payment,
            event,
            dict(notification.raw or {}),
            status=notification.transaction_status,
        )

        if outcome.payment_status == Payment.Status.SUCCESS:
            _apply_success(uow, booking, payment, notification)
        elif outcome.payment_status == Payment.Status.FAILED:
            _apply_failure(uow, booking, payment, notification, outcome)
        else:
            _apply_pending(booking, payment, notification)

    return payment


def complete_manual_payment(booking_id: int, admin) -> Booking:  # type: ignore
    """
    Mark a booking paid by bank transfer.

    An already confirmed booking is returned unchanged.

    Raises:
        AuthorizationError: caller is not an admin
        NotFoundError: no such booking
        ConflictError: booking is not waiting for payment
    """
    if not user_is_admin(admin):
        raise AuthorizationError("Only admins can complete payments manually.")

    with DjangoUnitOfWork() as uow:
        booking = _lock_booking(booking_id)

        if booking.status == Booking.Status.CONFIRMED:
            logger.info(f"Booking {booking.pk} is already confirmed, manual completion skipped")
            return booking
        if booking.status not in Booking.AWAITING_PAYMENT_STATUSES:
            raise ConflictError(f"Booking {booking.pk} cannot be completed from status {booking.status}.")

        payments = booking.payments.select_for_update()
        payment = (
            payments.filter(payment_status=Payment.Status.SUCCESS).first()
            or payments.order_by("-requested_at", "-id").first()
        )
        if payment is None:
            payment = Payment.objects.create(
                booking=booking,
                user=booking.user,
                amount_idr=booking.total_price_idr,
                payment_method=booking.payment_method,
            )

        payment.mark_success()
        payment.save()
        log_transaction(
            payment,
            PaymentTransaction.Event.MANUAL,
            {"admin_id": admin.pk},
            status=Payment.Status.SUCCESS,
        )
        logger.info(f"Payment {payment.pk} completed manually by admin {admin.pk}")

        _confirm_booking(uow, booking, payment)

    return booking


def refresh_payment_status(booking_id: int, user, *, gateway: Optional[MidtransGateway] = None) -> Booking:  # type: ignore
    """
    Poll the gateway for the booking's order and apply the answer.

    Raises:
        NotFoundError: no such booking
        AuthorizationError: caller does not own the booking
        UpstreamError: gateway lookup failed
    """
    booking = Booking.objects.alive().filter(pk=booking_id).first()
    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found.")
    if booking.user_id != user.pk:
        raise AuthorizationError("You can only refresh your own bookings.")

    gateway = gateway or get_gateway()
    notification = gateway.get_status(booking.get_order_id())
    process_gateway_notification(notification, event=PaymentTransaction.Event.STATUS_POLL)

    booking.refresh_from_db()
    return booking


def pending_payments(booking: Booking):
    return booking.payments.filter(payment_status=Payment.Status.PENDING)
