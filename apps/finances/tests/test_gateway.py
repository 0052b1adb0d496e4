"""Tests for the Midtrans adapter and status polling."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

import requests
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.bookings.tests.fixtures import create_booking
from apps.finances.gateway import GatewayNotification, MidtransGateway
from apps.finances.models import PaymentTransaction
from apps.finances.services import map_gateway_status, start_checkout
from apps.properties.tests.fixtures import create_admin, create_guest, create_property, create_room
from shared.domain.exceptions import AuthorizationError, UpstreamError, ValidationError


class MidtransGatewayTests(SimpleTestCase):
    def setUp(self) -> None:
        self.gateway = MidtransGateway(server_key="SB-Mid-server-test", finish_url="http://localhost:3000/booking/success")

    @mock.patch("apps.finances.gateway.requests.post")
    def test_create_checkout(self, post) -> None:
        post.return_value.json.return_value = {
            "token": "snap-token",
            "redirect_url": "https://app.sandbox.midtrans.com/snap/v2/vtweb/snap-token",
        }

        session = self.gateway.create_checkout("42", 2_430_000, "Budi", "guest@example.com")

        self.assertEqual(session.token, "snap-token")
        args, kwargs = post.call_args
        self.assertEqual(args[0], "https://app.sandbox.midtrans.com/snap/v1/transactions")
        self.assertEqual(kwargs["json"]["transaction_details"], {"order_id": "42", "gross_amount": 2_430_000})
        self.assertEqual(kwargs["auth"], ("SB-Mid-server-test", ""))
        self.assertIn("order_id=42", kwargs["json"]["callbacks"]["finish"])

    @mock.patch("apps.finances.gateway.requests.post")
    def test_create_checkout_network_error(self, post) -> None:
        post.side_effect = requests.exceptions.ConnectionError("connection refused")

        with self.assertRaises(UpstreamError):
            self.gateway.create_checkout("42", 2_430_000, "Budi", "guest@example.com")

    @mock.patch("apps.finances.gateway.requests.post")
    def test_create_checkout_without_token(self, post) -> None:
        post.return_value.json.return_value = {"error_messages": ["gross_amount is required"]}

        with self.assertRaises(UpstreamError):
            self.gateway.create_checkout("42", 2_430_000, "Budi", "guest@example.com")

    @mock.patch("apps.finances.gateway.requests.post")
    def test_emulated_checkout_makes_no_request(self, post) -> None:
        session = MidtransGateway().create_checkout("42", 2_430_000, "Budi", "guest@example.com")

        self.assertTrue(session.token.startswith("emulated-"))
        post.assert_not_called()

    def test_parse_notification(self) -> None:
        payload = {
            "order_id": "42",
            "transaction_status": "settlement",
            "transaction_id": "tx-1",
            "status_code": "200",
            "gross_amount": "2430000.00",
            "payment_type": "qris",
        }
        payload["signature_key"] = self.gateway.signature_for("42", "200", "2430000.00")

        notification = self.gateway.parse_notification(payload)

        self.assertEqual(notification.order_id, "42")
        self.assertEqual(notification.gross_amount, Decimal("2430000.00"))
        self.assertEqual(notification.payment_type, "qris")

    def test_parse_notification_bad_signature(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.gateway.parse_notification(
                {"order_id": "42", "transaction_status": "settlement", "signature_key": "bad"}
            )

    def test_parse_notification_bad_amount(self) -> None:
        with self.assertRaises(ValidationError):
            MidtransGateway().parse_notification(
                {"order_id": "42", "transaction_status": "settlement", "gross_amount": "a lot"}
            )

    @mock.patch("apps.finances.gateway.requests.get")
    def test_get_status(self, get) -> None:
        get.return_value.json.return_value = {
            "order_id": "42",
            "status_code": "200",
            "transaction_status": "settlement",
            "transaction_id": "tx-1",
            "gross_amount": "2430000.00",
        }

        notification = self.gateway.get_status("42")

        self.assertEqual(notification.transaction_status, "settlement")
        self.assertEqual(get.call_args[0][0], "https://api.sandbox.midtrans.com/v2/42/status")

    @mock.patch("apps.finances.gateway.requests.get")
    def test_get_status_unknown_order(self, get) -> None:
        get.return_value.json.return_value = {"status_code": "404", "status_message": "Transaction doesn't exist."}

        with self.assertRaises(UpstreamError):
            self.gateway.get_status("42")

    def test_get_status_needs_server_key(self) -> None:
        with self.assertRaises(UpstreamError):
            MidtransGateway().get_status("42")


class GatewayStatusMappingTests(SimpleTestCase):
    def test_mapping(self) -> None:
        cases = [
            (("capture", "accept"), ("SUCCESS", "CONFIRMED")),
            (("capture", "challenge"), ("FAILED", "WAITING_PAYMENT")),
            (("settlement", None), ("SUCCESS", "CONFIRMED")),
            (("cancel", None), ("FAILED", "CANCELED")),
            (("deny", None), ("FAILED", "CANCELED")),
            (("expire", None), ("FAILED", "CANCELED")),
            (("pending", None), ("PENDING", "WAITING_PAYMENT")),
            (("SETTLEMENT", None), ("SUCCESS", "CONFIRMED")),
        ]
        for (transaction_status, fraud_status), expected in cases:
            with self.subTest(transaction_status=transaction_status, fraud_status=fraud_status):
                outcome = map_gateway_status(transaction_status, fraud_status)
                self.assertEqual((outcome.payment_status, outcome.booking_status), expected)


class StartCheckoutTests(TestCase):
    def test_stores_token_and_logs(self) -> None:
        room = create_room(create_property(create_admin()))
        booking = create_booking(room, create_guest(), date(2030, 7, 10), date(2030, 7, 13))
        payment = booking.payments.get()

        session = start_checkout(payment, gateway=MidtransGateway())

        payment.refresh_from_db()
        self.assertEqual(payment.checkout_token, session.token)
        self.assertEqual(payment.checkout_redirect_url, session.redirect_url)
        self.assertEqual(payment.transactions.get().event, PaymentTransaction.Event.CHECKOUT)


class RefreshPaymentAPITests(APITestCase):
    def setUp(self) -> None:
        self.guest = create_guest()
        room = create_room(create_property(create_admin()))
        self.booking = create_booking(room, self.guest, date(2030, 7, 10), date(2030, 7, 13))
        self.url = reverse("booking-refresh-payment", args=[self.booking.pk])

    @mock.patch("apps.finances.services.get_gateway")
    def test_refresh_applies_gateway_status(self, get_gateway) -> None:
        get_gateway.return_value.get_status.return_value = GatewayNotification(
            order_id=str(self.booking.pk),
            transaction_status="settlement",
            transaction_id="tx-1",
            gross_amount=Decimal("2430000"),
            raw={"transaction_status": "settlement"},
        )
        self.client.force_authenticate(self.guest)

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CONFIRMED)
        payment = self.booking.payments.get()
        self.assertEqual(payment.transactions.get().event, PaymentTransaction.Event.STATUS_POLL)

    @mock.patch("apps.finances.services.get_gateway")
    def test_gateway_failure(self, get_gateway) -> None:
        get_gateway.return_value.get_status.side_effect = UpstreamError("Failed to fetch payment status")
        self.client.force_authenticate(self.guest)

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)

    def test_other_user_is_forbidden(self) -> None:
        self.client.force_authenticate(create_guest("other@example.com"))

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class RetryCheckoutAPITests(APITestCase):
    def setUp(self) -> None:
        self.guest = create_guest()
        room = create_room(create_property(create_admin()))
        self.booking = create_booking(room, self.guest, date(2030, 7, 10), date(2030, 7, 13))
        self.url = reverse("booking-checkout", args=[self.booking.pk])
        self.client.force_authenticate(self.guest)

    def test_reuses_pending_payment(self) -> None:
        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(self.booking.payments.count(), 1)
        self.assertEqual(self.booking.payments.get().checkout_token, response.data["token"])

    def test_failed_attempt_gets_a_new_payment(self) -> None:
        self.booking.payments.update(payment_status="FAILED")

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(self.booking.payments.count(), 2)

    def test_confirmed_booking(self) -> None:
        self.booking.status = Booking.Status.CONFIRMED
        self.booking.save(update_fields=["status"])

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
