"""Tests for shared value objects."""

from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import DateRange, round_rupiah


class DateRangeTests(SimpleTestCase):
    def test_nights(self):
        stay = DateRange(date(2030, 7, 10), date(2030, 7, 13))

        self.assertEqual(len(stay), 3)
        self.assertEqual(
            list(stay.nights()),
            [date(2030, 7, 10), date(2030, 7, 11), date(2030, 7, 12)],
        )

    def test_check_out_must_follow_check_in(self):
        with self.assertRaises(ValidationError):
            DateRange(date(2030, 7, 10), date(2030, 7, 10))
        with self.assertRaises(ValidationError):
            DateRange(date(2030, 7, 10), date(2030, 7, 9))


class RoundRupiahTests(SimpleTestCase):
    def test_halves_round_up(self):
        self.assertEqual(round_rupiah(Decimal("500.5")), 501)
        self.assertEqual(round_rupiah(Decimal("300.3")), 300)
        self.assertEqual(round_rupiah("112500.00"), 112500)

    def test_integers_pass_through(self):
        self.assertEqual(round_rupiah(2_430_000), 2_430_000)
