"""Nightly price calculation with peak-season overrides and fees."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from django.conf import settings  # type: ignore

from apps.properties.models import PeakSeasonRate
from apps.properties.services import get_live_room
from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import DateRange, round_rupiah

logger = logging.getLogger(__name__)

PERCENTAGE_MODE_SUBSTITUTE = "substitute"
PERCENTAGE_MODE_MULTIPLIER = "multiplier"


@dataclass(frozen=True)
class NightPrice:
    date: date
    price_per_night_idr: int
    peak_season_rate_id: Optional[int] = None


@dataclass(frozen=True)
class PriceBreakdown:
    room_id: int
    check_in: date
    check_out: date
    nights: int
    nightly_rates: Sequence[NightPrice] = field(default_factory=tuple)
    nightly_subtotal_idr: int = 0
    cleaning_fee_idr: int = 0
    service_fee_idr: int = 0
    discount_idr: int = 0
    total_price_idr: int = 0

    def to_dict(self) -> dict:
        return {
            "room_id": self.room_id,
            "check_in_date": self.check_in.isoformat(),
            "check_out_date": self.check_out.isoformat(),
            "nights": self.nights,
            "nightly_rates": [
                {
                    "date": night.date.isoformat(),
                    "price_per_night_idr": night.price_per_night_idr,
                    "peak_season_rate_id": night.peak_season_rate_id,
                }
                for night in self.nightly_rates
            ],
            "nightly_subtotal_idr": self.nightly_subtotal_idr,
            "cleaning_fee_idr": self.cleaning_fee_idr,
            "service_fee_idr": self.service_fee_idr,
            "discount_idr": self.discount_idr,
            "total_price_idr": self.total_price_idr,
        }


def _fee_rate(name: str, default: str) -> Decimal:
    return Decimal(str(getattr(settings, name, default)))


def adjusted_price(base_price: int, rate: PeakSeasonRate) -> int:
    """Price of one night under a peak-season rate.

    FIXED replaces the base price with ``adjustment_value``. PERCENTAGE does
    the same by default; with ``PEAK_SEASON_PERCENTAGE_MODE = "multiplier"``
    it scales the base price by ``1 + value / 100`` instead.
    """

    if rate.adjustment_type == PeakSeasonRate.AdjustmentType.PERCENTAGE:
        mode = getattr(settings, "PEAK_SEASON_PERCENTAGE_MODE", PERCENTAGE_MODE_SUBSTITUTE)
        if mode == PERCENTAGE_MODE_MULTIPLIER:
            return round_rupiah(Decimal(base_price) * (Decimal(100) + rate.adjustment_value) / Decimal(100))
    return int(rate.adjustment_value)


def price_booking(room_id: int, check_in: date, check_out: date, nights: int) -> PriceBreakdown:
    """Price ``nights`` consecutive nights starting at ``check_in``."""

    if nights < 1:
        raise ValidationError("A stay must be at least one night.")

    room = get_live_room(room_id)
    stay = DateRange(check_in, check_in + timedelta(days=nights))
    last_night = stay.end_date - timedelta(days=1)
    rates = list(
        PeakSeasonRate.objects.alive()
        .filter(
            room=room,
            is_active=True,
            start_date__lte=last_night,
            end_date__gte=check_in,
        )
        .order_by("start_date", "id")
    )

    schedule = []
    for day in stay.nights():
        rate = next((candidate for candidate in rates if candidate.covers(day)), None)
        if rate is None:
            schedule.append(NightPrice(day, room.base_price_per_night_idr))
        else:
            schedule.append(NightPrice(day, adjusted_price(room.base_price_per_night_idr, rate), rate.pk))

    subtotal = sum(night.price_per_night_idr for night in schedule)
    cleaning_fee = round_rupiah(subtotal * _fee_rate("BOOKING_CLEANING_FEE_RATE", "0.05"))
    service_fee = round_rupiah(subtotal * _fee_rate("BOOKING_SERVICE_FEE_RATE", "0.03"))
    discount = 0

    return PriceBreakdown(
        room_id=room.pk,
        check_in=check_in,
        check_out=check_out,
        nights=nights,
        nightly_rates=tuple(schedule),
        nightly_subtotal_idr=subtotal,
        cleaning_fee_idr=cleaning_fee,
        service_fee_idr=service_fee,
        discount_idr=discount,
        total_price_idr=subtotal + cleaning_fee + service_fee - discount,
    )


def quote_price(room_id: int, check_in: date, check_out: date) -> PriceBreakdown:
    """Price a stay given only its dates."""

    stay = DateRange(check_in, check_out)
    return price_booking(room_id, check_in, check_out, len(stay))
