"""API tests for the peak-season rate manager."""

from __future__ import annotations

from datetime import date

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.properties.models import PeakSeasonRate

from .fixtures import create_admin, create_guest, create_property, create_room


class PeakSeasonRateAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = create_admin()
        self.property = create_property(self.admin)
        self.room = create_room(self.property)
        self.list_url = reverse("peak-season-list", args=[self.room.pk])
        self.bulk_url = reverse("peak-season-bulk", args=[self.room.pk])
        self.client.force_authenticate(self.admin)

    def _rate(self, **overrides) -> dict:
        payload = {
            "start_date": "2030-12-20",
            "end_date": "2030-12-31",
            "adjustment_type": "FIXED",
            "adjustment_value": 1_200_000,
            "note": "Christmas",
        }
        payload.update(overrides)
        return payload

    def test_admin_creates_rate(self) -> None:
        response = self.client.post(self.list_url, self._rate(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["room"], self.room.pk)
        self.assertTrue(response.data["is_active"])
        self.assertEqual(PeakSeasonRate.objects.alive().count(), 1)

    def test_single_day_rate_is_valid(self) -> None:
        response = self.client.post(
            self.list_url,
            self._rate(start_date="2030-12-25", end_date="2030-12-25"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_rejects_inverted_dates(self) -> None:
        response = self.client.post(
            self.list_url,
            self._rate(start_date="2030-12-31", end_date="2030-12-20"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "validation_error")

    def test_rejects_percentage_above_limit(self) -> None:
        response = self.client.post(
            self.list_url,
            self._rate(adjustment_type="PERCENTAGE", adjustment_value=1001),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_create_is_all_or_nothing(self) -> None:
        payload = {
            "items": [
                self._rate(),
                self._rate(start_date="2031-01-05", end_date="2031-01-01"),
            ]
        }

        response = self.client.post(self.bulk_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Item 1", response.data["detail"])
        self.assertEqual(PeakSeasonRate.objects.count(), 0)

    def test_bulk_create_persists_every_item(self) -> None:
        payload = {
            "items": [
                self._rate(),
                self._rate(start_date="2031-06-01", end_date="2031-06-30", adjustment_type="PERCENTAGE",
                           adjustment_value=25),
            ]
        }

        response = self.client.post(self.bulk_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(len(response.data), 2)

    def test_update_validates_merged_values(self) -> None:
        rate = PeakSeasonRate.objects.create(
            room=self.room,
            start_date=date(2030, 12, 20),
            end_date=date(2030, 12, 31),
            adjustment_type=PeakSeasonRate.AdjustmentType.FIXED,
            adjustment_value=1_000_000,
        )
        url = reverse("peak-season-detail", args=[rate.pk])

        response = self.client.patch(url, {"start_date": "2031-01-15"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(url, {"adjustment_value": 1_500_000, "is_active": False}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        rate.refresh_from_db()
        self.assertEqual(rate.adjustment_value, 1_500_000)
        self.assertFalse(rate.is_active)

    def test_delete_is_soft_and_hides_rate(self) -> None:
        rate = PeakSeasonRate.objects.create(
            room=self.room,
            start_date=date(2030, 12, 20),
            end_date=date(2030, 12, 31),
            adjustment_type=PeakSeasonRate.AdjustmentType.FIXED,
            adjustment_value=1_000_000,
        )

        response = self.client.delete(reverse("peak-season-detail", args=[rate.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        rate.refresh_from_db()
        self.assertIsNotNone(rate.deleted_at)
        self.assertEqual(self.client.get(self.list_url).data, [])

        response = self.client.delete(reverse("peak-season-detail", args=[rate.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_hides_inactive_rates_by_default(self) -> None:
        PeakSeasonRate.objects.create(
            room=self.room,
            start_date=date(2030, 7, 1),
            end_date=date(2030, 7, 31),
            adjustment_type=PeakSeasonRate.AdjustmentType.FIXED,
            adjustment_value=900_000,
            is_active=False,
        )
        self.client.force_authenticate(None)

        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

        self.client.force_authenticate(self.admin)
        response = self.client.get(self.list_url, {"include_inactive": "true"})
        self.assertEqual(len(response.data), 1)

    def test_unknown_room_returns_not_found(self) -> None:
        response = self.client.post(reverse("peak-season-list", args=[9999]), self._rate(), format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_guest_cannot_create_rates(self) -> None:
        self.client.force_authenticate(create_guest())
        response = self.client.post(self.list_url, self._rate(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
