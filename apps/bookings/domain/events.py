"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: Payment settled, booking is CONFIRMED

    Triggers:
    - Send the invoice e-mail to the guest
    """
    booking_id: int
    payment_id: int
    notification_id: Optional[int] = None


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: Booking was canceled by the guest or by a failed payment

    Triggers:
    - Send the cancellation e-mail when the guest canceled
    """
    booking_id: int
    reason: str
    notification_id: Optional[int] = None


@dataclass
class BookingExpired(DomainEvent):
    """
    Event: Payment window passed or the gateway expired the only payment attempt

    Triggers:
    - Tell the guest the room was released
    """
    booking_id: int
    notification_id: Optional[int] = None
