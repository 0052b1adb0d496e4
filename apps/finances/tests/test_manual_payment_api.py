"""API tests for admin completion of bank transfers and the payment log."""

from __future__ import annotations

from datetime import date

from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.bookings.tests.fixtures import create_booking
from apps.finances.models import Payment, PaymentTransaction
from apps.properties.tests.fixtures import create_admin, create_guest, create_property, create_room


class CompleteManualPaymentAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = create_admin()
        self.guest = create_guest()
        self.room = create_room(create_property(self.admin))
        self.booking = create_booking(
            self.room,
            self.guest,
            date(2030, 7, 10),
            date(2030, 7, 13),
            status=Booking.Status.WAITING_CONFIRMATION,
            payment_method=Booking.PaymentMethod.BANK_TRANSFER,
        )
        self.url = reverse("payment-complete", args=[self.booking.pk])

    def test_admin_completes_transfer(self) -> None:
        self.client.force_authenticate(self.admin)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CONFIRMED)

        payment = self.booking.payments.get()
        self.assertEqual(payment.payment_status, Payment.Status.SUCCESS)
        self.assertIsNotNone(payment.paid_at)
        manual = payment.transactions.get(event=PaymentTransaction.Event.MANUAL)
        self.assertEqual(manual.payload, {"admin_id": self.admin.pk})
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.guest.email])

    def test_repeat_returns_confirmed_booking(self) -> None:
        self.client.force_authenticate(self.admin)
        self.client.post(self.url)

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.payments.count(), 1)
        self.assertEqual(PaymentTransaction.objects.filter(event=PaymentTransaction.Event.MANUAL).count(), 1)

    def test_booking_without_payment_gets_one(self) -> None:
        booking = create_booking(
            self.room,
            self.guest,
            date(2030, 8, 1),
            date(2030, 8, 3),
            status=Booking.Status.WAITING_CONFIRMATION,
            payment_method=Booking.PaymentMethod.BANK_TRANSFER,
            with_payment=False,
        )
        self.client.force_authenticate(self.admin)

        response = self.client.post(reverse("payment-complete", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        payment = booking.payments.get()
        self.assertEqual(payment.amount_idr, booking.total_price_idr)
        self.assertEqual(payment.payment_status, Payment.Status.SUCCESS)

    def test_canceled_booking_cannot_be_completed(self) -> None:
        self.booking.cancel()
        self.booking.save()
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(self.booking.payments.get().payment_status, Payment.Status.PENDING)

    def test_guest_is_forbidden(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_booking(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(reverse("payment-complete", args=[999999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class PaymentListAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = create_admin()
        self.guest = create_guest()
        room = create_room(create_property(self.admin))
        self.booking = create_booking(room, self.guest, date(2030, 7, 10), date(2030, 7, 13))

    def test_admin_lists_payments(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("payment-list"), {"booking": self.booking.pk})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["amount_idr"], 2_430_000)

    def test_guest_cannot_list_payments(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("payment-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
