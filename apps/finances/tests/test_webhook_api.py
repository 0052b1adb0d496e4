"""API tests for the Midtrans notification endpoint."""

from __future__ import annotations

from datetime import date

from django.core import mail
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.bookings.tests.fixtures import create_booking
from apps.finances.gateway import MidtransGateway
from apps.finances.models import Payment, PaymentTransaction
from apps.notifications.models import EmailNotification
from apps.properties.tests.fixtures import create_admin, create_guest, create_property, create_room


class PaymentWebhookAPITests(APITestCase):
    def setUp(self) -> None:
        self.guest = create_guest()
        self.room = create_room(create_property(create_admin()))
        self.booking = create_booking(self.room, self.guest, date(2030, 7, 10), date(2030, 7, 13))
        self.payment = self.booking.payments.get()
        self.url = reverse("payment-webhook")

    def _notify(self, transaction_status: str, **extra):  # type: ignore
        payload = {
            "order_id": str(self.booking.pk),
            "transaction_status": transaction_status,
            "transaction_id": "tx-1",
            "gross_amount": "2430000.00",
            "status_code": "200",
            "payment_type": "bank_transfer",
        }
        payload.update(extra)
        return self.client.post(self.url, payload, format="json")

    def _refresh(self) -> None:
        self.booking.refresh_from_db()
        self.payment.refresh_from_db()

    def test_settlement_confirms_booking_and_sends_invoice(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self._notify("settlement")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["payment_status"], Payment.Status.SUCCESS)
        self.assertEqual(response.data["booking_status"], Booking.Status.CONFIRMED)

        self._refresh()
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)
        self.assertIsNotNone(self.booking.confirmed_at)
        self.assertEqual(self.payment.provider_tx_id, "tx-1")
        self.assertEqual(self.payment.payment_method, "bank_transfer")
        self.assertIsNotNone(self.payment.paid_at)

        notification = EmailNotification.objects.get(booking=self.booking)
        self.assertEqual(notification.type, EmailNotification.Type.BOOKING_CONFIRMED)
        self.assertEqual(notification.status, EmailNotification.Status.SENT)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("Rp 2.430.000", mail.outbox[0].body)

    def test_capture_accepted_confirms(self) -> None:
        response = self._notify("capture", fraud_status="accept", payment_type="credit_card")

        self.assertEqual(response.data["booking_status"], Booking.Status.CONFIRMED)

    def test_capture_challenged_fails_payment_only(self) -> None:
        response = self._notify("capture", fraud_status="challenge")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self._refresh()
        self.assertEqual(self.payment.payment_status, Payment.Status.FAILED)
        self.assertEqual(self.booking.status, Booking.Status.WAITING_PAYMENT)

    def test_pending_keeps_waiting(self) -> None:
        response = self._notify("pending")

        self.assertEqual(response.data["payment_status"], Payment.Status.PENDING)
        self.assertEqual(response.data["booking_status"], Booking.Status.WAITING_PAYMENT)
        self._refresh()
        self.assertEqual(self.payment.provider_tx_id, "tx-1")

    def test_expire_of_only_attempt_expires_booking(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self._notify("expire")

        self.assertEqual(response.data["payment_status"], Payment.Status.FAILED)
        self.assertEqual(response.data["booking_status"], Booking.Status.EXPIRED)
        notification = EmailNotification.objects.get(booking=self.booking)
        self.assertEqual(notification.type, EmailNotification.Type.BOOKING_EXPIRED)
        self.assertEqual(notification.status, EmailNotification.Status.SENT)
        self.assertEqual(mail.outbox[0].subject, f"Booking #{self.booking.pk} expired")

    def test_deny_after_retry_cancels_booking(self) -> None:
        self.payment.mark_failed()
        self.payment.save()
        Payment.objects.create(
            booking=self.booking,
            user=self.guest,
            amount_idr=self.booking.total_price_idr,
            payment_method=Booking.PaymentMethod.PAYMENT_GATEWAY,
        )

        response = self._notify("deny", transaction_id="tx-2")

        self.assertEqual(response.data["booking_status"], Booking.Status.CANCELED)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.cancel_reason, "Payment deny")

    def test_duplicate_settlement_is_idempotent(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            self._notify("settlement")
        with self.captureOnCommitCallbacks(execute=True):
            response = self._notify("settlement")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.booking.payments.filter(payment_status=Payment.Status.SUCCESS).count(), 1)
        self.assertEqual(EmailNotification.objects.filter(booking=self.booking).count(), 1)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(self.payment.transactions.filter(event=PaymentTransaction.Event.NOTIFICATION).count(), 2)

    def test_late_expire_does_not_downgrade(self) -> None:
        self._notify("settlement")

        response = self._notify("expire")

        self.assertEqual(response.data["payment_status"], Payment.Status.SUCCESS)
        self.assertEqual(response.data["booking_status"], Booking.Status.CONFIRMED)

    def test_second_settlement_on_other_attempt_is_ignored(self) -> None:
        self._notify("settlement")
        retry = Payment.objects.create(
            booking=self.booking,
            user=self.guest,
            amount_idr=self.booking.total_price_idr,
            payment_method=Booking.PaymentMethod.PAYMENT_GATEWAY,
        )

        response = self._notify("settlement", transaction_id="tx-2")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        retry.refresh_from_db()
        self.assertEqual(retry.payment_status, Payment.Status.PENDING)
        self.assertEqual(self.booking.payments.filter(payment_status=Payment.Status.SUCCESS).count(), 1)

    def test_settlement_does_not_reopen_canceled_booking(self) -> None:
        self.booking.cancel("Plans changed")
        self.booking.save()

        response = self._notify("settlement")

        self.assertEqual(response.data["payment_status"], Payment.Status.SUCCESS)
        self.assertEqual(response.data["booking_status"], Booking.Status.CANCELED)

    def test_amount_mismatch_changes_nothing(self) -> None:
        response = self._notify("settlement", gross_amount="100000.00")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self._refresh()
        self.assertEqual(self.payment.payment_status, Payment.Status.PENDING)
        self.assertEqual(self.booking.status, Booking.Status.WAITING_PAYMENT)
        self.assertFalse(self.payment.transactions.exists())

    def test_missing_amount_changes_nothing(self) -> None:
        response = self._notify("settlement", gross_amount=None)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIsNone(response.data["details"]["received"])
        self._refresh()
        self.assertEqual(self.payment.payment_status, Payment.Status.PENDING)
        self.assertEqual(self.booking.status, Booking.Status.WAITING_PAYMENT)
        self.assertFalse(self.payment.transactions.exists())
        self.assertFalse(EmailNotification.objects.exists())

    def test_transaction_of_another_booking_is_rejected(self) -> None:
        other = create_booking(self.room, self.guest, date(2030, 8, 1), date(2030, 8, 4))
        other_payment = other.payments.get()
        other_payment.provider_tx_id = "tx-other"
        other_payment.save()

        response = self._notify("settlement", transaction_id="tx-other")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_order(self) -> None:
        response = self._notify("settlement", order_id="999999")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_missing_fields(self) -> None:
        response = self.client.post(self.url, {"order_id": str(self.booking.pk)}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(MIDTRANS_SERVER_KEY="SB-Mid-server-test")
class SignedWebhookAPITests(APITestCase):
    def setUp(self) -> None:
        self.room = create_room(create_property(create_admin()))
        self.booking = create_booking(self.room, create_guest(), date(2030, 7, 10), date(2030, 7, 13))
        self.url = reverse("payment-webhook")
        self.payload = {
            "order_id": str(self.booking.pk),
            "transaction_status": "settlement",
            "transaction_id": "tx-1",
            "gross_amount": "2430000.00",
            "status_code": "200",
        }

    def test_valid_signature(self) -> None:
        gateway = MidtransGateway(server_key="SB-Mid-server-test")
        self.payload["signature_key"] = gateway.signature_for(
            self.payload["order_id"], self.payload["status_code"], self.payload["gross_amount"]
        )

        response = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking_status"], Booking.Status.CONFIRMED)

    def test_bad_signature(self) -> None:
        self.payload["signature_key"] = "0" * 128

        response = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.WAITING_PAYMENT)

    def test_missing_signature(self) -> None:
        response = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
