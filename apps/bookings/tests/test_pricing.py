"""Tests for the nightly pricing engine."""

from __future__ import annotations

from datetime import date

from django.test import TestCase, override_settings

from apps.bookings.pricing import price_booking, quote_price
from apps.properties.models import PeakSeasonRate
from apps.properties.tests.fixtures import create_admin, create_property, create_room
from shared.domain.exceptions import NotFoundError, ValidationError


class PriceBookingTests(TestCase):
    def setUp(self) -> None:
        self.room = create_room(create_property(create_admin()), base_price=750_000)

    def _rate(self, start: date, end: date, adjustment_type: str, value: int, **extra) -> PeakSeasonRate:
        return PeakSeasonRate.objects.create(
            room=self.room,
            start_date=start,
            end_date=end,
            adjustment_type=adjustment_type,
            adjustment_value=value,
            **extra,
        )

    def test_base_price_with_fees(self) -> None:
        breakdown = price_booking(self.room.pk, date(2030, 3, 1), date(2030, 3, 4), 3)

        self.assertEqual(breakdown.nightly_subtotal_idr, 2_250_000)
        self.assertEqual(breakdown.cleaning_fee_idr, 112_500)
        self.assertEqual(breakdown.service_fee_idr, 67_500)
        self.assertEqual(breakdown.discount_idr, 0)
        self.assertEqual(breakdown.total_price_idr, 2_430_000)
        self.assertEqual([night.price_per_night_idr for night in breakdown.nightly_rates], [750_000] * 3)

    def test_schedule_has_one_entry_per_night(self) -> None:
        breakdown = price_booking(self.room.pk, date(2030, 1, 30), date(2030, 2, 2), 3)

        self.assertEqual(
            [night.date for night in breakdown.nightly_rates],
            [date(2030, 1, 30), date(2030, 1, 31), date(2030, 2, 1)],
        )

    def test_total_is_sum_of_parts(self) -> None:
        self._rate(date(2030, 3, 2), date(2030, 3, 2), PeakSeasonRate.AdjustmentType.FIXED, 999_999)
        breakdown = price_booking(self.room.pk, date(2030, 3, 1), date(2030, 3, 4), 3)

        self.assertEqual(
            breakdown.nightly_subtotal_idr,
            sum(night.price_per_night_idr for night in breakdown.nightly_rates),
        )
        self.assertEqual(
            breakdown.total_price_idr,
            breakdown.nightly_subtotal_idr
            + breakdown.cleaning_fee_idr
            + breakdown.service_fee_idr
            - breakdown.discount_idr,
        )

    def test_fixed_rate_overrides_covered_nights(self) -> None:
        rate = self._rate(date(2030, 12, 24), date(2030, 12, 25), PeakSeasonRate.AdjustmentType.FIXED, 1_200_000)

        breakdown = price_booking(self.room.pk, date(2030, 12, 23), date(2030, 12, 27), 4)

        prices = [night.price_per_night_idr for night in breakdown.nightly_rates]
        self.assertEqual(prices, [750_000, 1_200_000, 1_200_000, 750_000])
        self.assertEqual(breakdown.nightly_rates[1].peak_season_rate_id, rate.pk)
        self.assertIsNone(breakdown.nightly_rates[0].peak_season_rate_id)

    def test_percentage_rate_substitutes_value_by_default(self) -> None:
        self._rate(date(2030, 8, 1), date(2030, 8, 31), PeakSeasonRate.AdjustmentType.PERCENTAGE, 20)

        breakdown = price_booking(self.room.pk, date(2030, 8, 10), date(2030, 8, 11), 1)

        self.assertEqual(breakdown.nightly_rates[0].price_per_night_idr, 20)

    @override_settings(PEAK_SEASON_PERCENTAGE_MODE="multiplier")
    def test_percentage_rate_as_multiplier(self) -> None:
        self._rate(date(2030, 8, 1), date(2030, 8, 31), PeakSeasonRate.AdjustmentType.PERCENTAGE, 20)

        breakdown = price_booking(self.room.pk, date(2030, 8, 10), date(2030, 8, 11), 1)

        self.assertEqual(breakdown.nightly_rates[0].price_per_night_idr, 900_000)

    def test_first_rate_by_start_date_wins(self) -> None:
        self._rate(date(2030, 12, 20), date(2030, 12, 31), PeakSeasonRate.AdjustmentType.FIXED, 1_000_000)
        self._rate(date(2030, 12, 24), date(2030, 12, 26), PeakSeasonRate.AdjustmentType.FIXED, 2_000_000)

        breakdown = price_booking(self.room.pk, date(2030, 12, 25), date(2030, 12, 26), 1)

        self.assertEqual(breakdown.nightly_rates[0].price_per_night_idr, 1_000_000)

    def test_inactive_and_deleted_rates_are_ignored(self) -> None:
        self._rate(
            date(2030, 12, 20),
            date(2030, 12, 31),
            PeakSeasonRate.AdjustmentType.FIXED,
            1_000_000,
            is_active=False,
        )
        deleted = self._rate(date(2030, 12, 20), date(2030, 12, 31), PeakSeasonRate.AdjustmentType.FIXED, 2_000_000)
        deleted.soft_delete()

        breakdown = price_booking(self.room.pk, date(2030, 12, 25), date(2030, 12, 26), 1)

        self.assertEqual(breakdown.nightly_rates[0].price_per_night_idr, 750_000)

    def test_fees_round_half_up(self) -> None:
        self.room.base_price_per_night_idr = 10_010
        self.room.save(update_fields=["base_price_per_night_idr"])

        breakdown = price_booking(self.room.pk, date(2030, 3, 1), date(2030, 3, 2), 1)

        # 10 010 * 0.05 = 500.5, 10 010 * 0.03 = 300.3
        self.assertEqual(breakdown.cleaning_fee_idr, 501)
        self.assertEqual(breakdown.service_fee_idr, 300)

    def test_unknown_room(self) -> None:
        with self.assertRaises(NotFoundError):
            price_booking(9999, date(2030, 3, 1), date(2030, 3, 2), 1)

    def test_quote_derives_nights(self) -> None:
        breakdown = quote_price(self.room.pk, date(2030, 3, 1), date(2030, 3, 4))
        self.assertEqual(breakdown.nights, 3)
        self.assertEqual(breakdown.total_price_idr, 2_430_000)

    def test_quote_rejects_inverted_dates(self) -> None:
        with self.assertRaises(ValidationError):
            quote_price(self.room.pk, date(2030, 3, 4), date(2030, 3, 1))
