"""Tests for room availability checks."""

from __future__ import annotations

from datetime import date, timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.bookings.services import is_room_available, list_available_rooms
from apps.properties.tests.fixtures import create_admin, create_guest, create_property, create_room
from shared.domain.exceptions import NotFoundError, ValidationError

from .fixtures import create_booking


class RoomAvailabilityTests(TestCase):
    def setUp(self) -> None:
        self.admin = create_admin()
        self.guest = create_guest()
        self.property = create_property(self.admin)
        self.room = create_room(self.property)
        self.booking = create_booking(self.room, self.guest, date(2030, 7, 10), date(2030, 7, 15))

    def test_overlapping_stay_is_blocked(self) -> None:
        self.assertFalse(is_room_available(self.room.pk, date(2030, 7, 12), date(2030, 7, 20)))
        self.assertFalse(is_room_available(self.room.pk, date(2030, 7, 5), date(2030, 7, 11)))
        self.assertFalse(is_room_available(self.room.pk, date(2030, 7, 11), date(2030, 7, 12)))

    def test_back_to_back_stays_are_allowed(self) -> None:
        self.assertTrue(is_room_available(self.room.pk, date(2030, 7, 15), date(2030, 7, 18)))
        self.assertTrue(is_room_available(self.room.pk, date(2030, 7, 5), date(2030, 7, 10)))

    def test_released_bookings_do_not_block(self) -> None:
        for released in (Booking.Status.CANCELED, Booking.Status.EXPIRED):
            self.booking.status = released
            self.booking.save(update_fields=["status"])
            self.assertTrue(is_room_available(self.room.pk, date(2030, 7, 12), date(2030, 7, 20)))

    def test_confirmed_and_checked_in_bookings_block(self) -> None:
        for holding in (Booking.Status.CONFIRMED, Booking.Status.CHECKED_IN, Booking.Status.WAITING_CONFIRMATION):
            self.booking.status = holding
            self.booking.save(update_fields=["status"])
            self.assertFalse(is_room_available(self.room.pk, date(2030, 7, 12), date(2030, 7, 20)))

    def test_soft_deleted_booking_does_not_block(self) -> None:
        self.booking.soft_delete()
        self.assertTrue(is_room_available(self.room.pk, date(2030, 7, 12), date(2030, 7, 20)))

    def test_excluded_booking_is_ignored(self) -> None:
        self.assertTrue(
            is_room_available(
                self.room.pk,
                date(2030, 7, 12),
                date(2030, 7, 20),
                exclude_booking_id=self.booking.pk,
            )
        )

    def test_other_rooms_are_independent(self) -> None:
        other = create_room(self.property, name="Garden")
        self.assertTrue(is_room_available(other.pk, date(2030, 7, 12), date(2030, 7, 20)))


class ListAvailableRoomsTests(TestCase):
    def setUp(self) -> None:
        self.admin = create_admin()
        self.property = create_property(self.admin)
        self.deluxe = create_room(self.property, name="Deluxe", max_guests=2)
        self.suite = create_room(self.property, name="Suite", max_guests=4)
        self.check_in = timezone.localdate() + timedelta(days=10)
        self.check_out = self.check_in + timedelta(days=3)
        create_booking(self.deluxe, create_guest(), self.check_in, self.check_out)

    def test_flags_each_room(self) -> None:
        result = list_available_rooms(self.property.pk, self.check_in, self.check_out)
        flags = {item.room.name: item.is_available for item in result}
        self.assertEqual(flags, {"Deluxe": False, "Suite": True})

    def test_filters_by_guest_capacity(self) -> None:
        result = list_available_rooms(self.property.pk, self.check_in, self.check_out, guests_count=3)
        self.assertEqual([item.room.name for item in result], ["Suite"])

    def test_skips_deleted_rooms(self) -> None:
        self.suite.soft_delete()
        result = list_available_rooms(self.property.pk, self.check_in, self.check_out)
        self.assertEqual([item.room.name for item in result], ["Deluxe"])

    def test_rejects_past_check_in(self) -> None:
        yesterday = timezone.localdate() - timedelta(days=1)
        with self.assertRaises(ValidationError):
            list_available_rooms(self.property.pk, yesterday, self.check_out)

    def test_rejects_inverted_dates(self) -> None:
        with self.assertRaises(ValidationError):
            list_available_rooms(self.property.pk, self.check_out, self.check_in)

    def test_unknown_property(self) -> None:
        with self.assertRaises(NotFoundError):
            list_available_rooms(9999, self.check_in, self.check_out)


class AvailableRoomsAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = create_admin()
        self.property = create_property(self.admin)
        self.room = create_room(self.property)
        self.client.force_authenticate(create_guest())
        self.url = reverse("booking-available-rooms")

    def test_returns_rooms_with_flags(self) -> None:
        check_in = timezone.localdate() + timedelta(days=5)
        response = self.client.get(
            self.url,
            {
                "property_id": self.property.pk,
                "check_in_date": check_in.isoformat(),
                "check_out_date": (check_in + timedelta(days=2)).isoformat(),
            },
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(len(response.data["rooms"]), 1)
        self.assertTrue(response.data["rooms"][0]["is_available"])
        self.assertEqual(response.data["rooms"][0]["base_price_per_night_idr"], 750_000)

    def test_past_dates_are_rejected(self) -> None:
        response = self.client.get(
            self.url,
            {
                "property_id": self.property.pk,
                "check_in_date": "2000-01-01",
                "check_out_date": "2000-01-03",
            },
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
