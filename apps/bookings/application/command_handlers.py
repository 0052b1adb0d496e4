"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Create a new booking with its nightly rates and first payment
- CancelBookingCommand: Cancel a booking on behalf of its owner
- RetryCheckoutCommand: Open a new gateway checkout session for an unpaid booking
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional
import logging

from django.conf import settings
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from shared.domain.value_objects import DateRange
from apps.bookings.models import DEFAULT_CANCEL_REASON, Booking, NightlyRate
from apps.bookings.pricing import price_booking
from apps.bookings.services import is_room_available
from apps.finances.gateway import CheckoutSession, MidtransGateway
from apps.finances.models import Payment
from apps.finances.services import start_checkout
from apps.notifications.models import EmailNotification
from apps.notifications.services import queue_booking_email
from apps.properties.models import Property
from apps.properties.services import get_live_room

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    This is the primary entry point for creating bookings.
    """
    user_id: int
    property_id: int
    room_id: int
    check_in: date
    check_out: date
    guests_count: int
    payment_method: str


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: int
    user_id: int
    reason: Optional[str] = None


@dataclass
class RetryCheckoutCommand:
    """Command to open a fresh checkout session for an unpaid booking"""
    booking_id: int
    user_id: int


@dataclass
class BookingCreationResult:
    """
    Created booking plus the outcome of the checkout request

    ``checkout_error`` carries the gateway failure message; the booking
    itself is committed either way.
    """
    booking: Booking
    checkout: Optional[CheckoutSession] = None
    checkout_error: Optional[str] = None


# ===== Command Handlers =====

def _payment_due_at(payment_method: str):
    if (
        payment_method == Booking.PaymentMethod.PAYMENT_GATEWAY
        and not getattr(settings, "BOOKING_PAYMENT_DUE_FOR_GATEWAY", True)
    ):
        return None
    hours = getattr(settings, "BOOKING_PAYMENT_DUE_HOURS", 24)
    return timezone.now() + timedelta(hours=hours)


class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Double booking prevention:
    1. Start database transaction (atomic)
    2. Lock the Room row (SELECT FOR UPDATE) so concurrent creations serialize
    3. Check availability against live, unreleased bookings
    4. Price the stay and persist Booking, NightlyRate rows and a PENDING Payment
    5. Commit, then publish events
    6. Gateway bookings ask for a checkout token after commit
    """

    def __init__(self, gateway: Optional[MidtransGateway] = None):
        self.gateway = gateway

    def handle(self, command: CreateBookingCommand) -> BookingCreationResult:
        """
        Handle booking creation

        Raises:
            ValidationError: bad dates, guests count or payment method
            NotFoundError: unknown property or room
            ConflictError: the room is taken for some of the nights
        """
        logger.info(
            f"Creating booking for room {command.room_id}, "
            f"user {command.user_id}, dates {command.check_in} - {command.check_out}"
        )

        dates = DateRange(command.check_in, command.check_out)
        if command.check_in < timezone.localdate():
            raise ValidationError("Check-in date cannot be in the past")
        if command.guests_count < 1:
            raise ValidationError("Guests count must be at least 1")
        if command.payment_method not in Booking.PaymentMethod.values:
            raise ValidationError(f"Unknown payment method {command.payment_method}")

        nights = len(dates)
        is_gateway = command.payment_method == Booking.PaymentMethod.PAYMENT_GATEWAY

        with DjangoUnitOfWork():
            property_obj = Property.objects.alive().filter(pk=command.property_id).first()
            if property_obj is None:
                raise NotFoundError(f"Property {command.property_id} not found")

            room = get_live_room(command.room_id, for_update=True)
            if room.property_id != property_obj.pk:
                raise ValidationError(
                    f"Room {room.pk} does not belong to property {property_obj.pk}"
                )
            if command.guests_count > room.max_guests:
                raise ValidationError(
                    f"Guests count ({command.guests_count}) exceeds room capacity "
                    f"({room.max_guests})"
                )

            if not is_room_available(room.pk, command.check_in, command.check_out):
                raise ConflictError(f"Room {room.pk} is not available for dates {dates}")

            breakdown = price_booking(room.pk, command.check_in, command.check_out, nights)

            booking = Booking.objects.create(
                user_id=command.user_id,
                property=property_obj,
                room=room,
                check_in_date=command.check_in,
                check_out_date=command.check_out,
                nights=nights,
                guests_count=command.guests_count,
                status=(
                    Booking.Status.WAITING_PAYMENT if is_gateway
                    else Booking.Status.WAITING_CONFIRMATION
                ),
                payment_method=command.payment_method,
                nightly_subtotal_idr=breakdown.nightly_subtotal_idr,
                cleaning_fee_idr=breakdown.cleaning_fee_idr,
                service_fee_idr=breakdown.service_fee_idr,
                discount_idr=breakdown.discount_idr,
                total_price_idr=breakdown.total_price_idr,
                payment_due_at=_payment_due_at(command.payment_method),
            )
            NightlyRate.objects.bulk_create([
                NightlyRate(
                    booking=booking,
                    date=night.date,
                    price_per_night_idr=night.price_per_night_idr,
                    peak_season_rate_id=night.peak_season_rate_id,
                )
                for night in breakdown.nightly_rates
            ])
            payment = Payment.objects.create(
                booking=booking,
                user_id=command.user_id,
                amount_idr=breakdown.total_price_idr,
                payment_method=command.payment_method,
            )

        logger.info(
            f"Booking {booking.pk} created ({booking.status}), "
            f"total {booking.total_price_idr} IDR"
        )

        result = BookingCreationResult(booking=booking)
        if is_gateway:
            try:
                result.checkout = start_checkout(payment, gateway=self.gateway)
            except UpstreamError as e:
                logger.error(
                    f"Checkout token for booking {booking.pk} was not created: {e}",
                    exc_info=True,
                )
                result.checkout_error = str(e)
        return result


class CancelBookingHandler:
    """Handler for CancelBooking command"""

    def handle(self, command: CancelBookingCommand) -> Booking:
        """
        Raises:
            NotFoundError: no such booking
            AuthorizationError: caller does not own the booking
            ConflictError: already canceled or the guest has checked in
        """
        with DjangoUnitOfWork() as uow:
            booking = (
                Booking.objects.alive()
                .select_for_update()
                .filter(pk=command.booking_id)
                .first()
            )
            if booking is None:
                raise NotFoundError(f"Booking {command.booking_id} not found")
            if booking.user_id != command.user_id:
                raise AuthorizationError("You can only cancel your own bookings")

            previous_status = booking.status
            reason = (command.reason or "").strip() or DEFAULT_CANCEL_REASON
            # Rolled back together with the booking if cancel() refuses
            notification = queue_booking_email(
                booking,
                EmailNotification.Type.BOOKING_CANCELED,
                cancel_reason=reason,
            )
            booking.cancel(reason, notification_id=notification.pk)
            booking.save()
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} canceled by user {command.user_id} (was {previous_status})")
        return booking


class RetryCheckoutHandler:
    """Handler for RetryCheckout command"""

    def __init__(self, gateway: Optional[MidtransGateway] = None):
        self.gateway = gateway

    def handle(self, command: RetryCheckoutCommand) -> CheckoutSession:
        """
        Raises:
            NotFoundError: no such booking
            AuthorizationError: caller does not own the booking
            ConflictError: booking is not waiting for an online payment
            UpstreamError: the gateway refused or could not be reached
        """
        booking = Booking.objects.alive().select_related("user").filter(pk=command.booking_id).first()
        if booking is None:
            raise NotFoundError(f"Booking {command.booking_id} not found")
        if booking.user_id != command.user_id:
            raise AuthorizationError("You can only pay for your own bookings")
        if booking.status != Booking.Status.WAITING_PAYMENT:
            raise ConflictError(f"Booking {booking.pk} is not waiting for payment ({booking.status})")
        if booking.payments.filter(payment_status=Payment.Status.SUCCESS).exists():
            raise ConflictError(f"Booking {booking.pk} is already paid")

        payment = (
            booking.payments.filter(payment_status=Payment.Status.PENDING)
            .order_by("-requested_at", "-id")
            .first()
        )
        if payment is None:
            payment = Payment.objects.create(
                booking=booking,
                user=booking.user,
                amount_idr=booking.total_price_idr,
                payment_method=Booking.PaymentMethod.PAYMENT_GATEWAY,
            )

        return start_checkout(payment, gateway=self.gateway)
