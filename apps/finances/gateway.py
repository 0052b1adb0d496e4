"""
Midtrans payment gateway adapter.

Snap checkout sessions, notification parsing with signature check and
transaction status lookups. Without a configured server key the adapter
emulates Snap so the booking flow can be exercised locally.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

import requests
from django.conf import settings

from shared.domain.exceptions import AuthorizationError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

SANDBOX_SNAP_URL = "https://app.sandbox.midtrans.com/snap/v1/transactions"
PRODUCTION_SNAP_URL = "https://app.midtrans.com/snap/v1/transactions"
SANDBOX_API_URL = "https://api.sandbox.midtrans.com"
PRODUCTION_API_URL = "https://api.midtrans.com"

ENABLED_PAYMENTS = [
    "gopay",
    "shopeepay",
    "qris",
    "bca_va",
    "bni_va",
    "bri_va",
    "permata_va",
    "other_va",
]


@dataclass(frozen=True)
class CheckoutSession:
    token: str
    redirect_url: str


@dataclass(frozen=True)
class GatewayNotification:
    order_id: str
    transaction_status: str
    transaction_id: Optional[str] = None
    fraud_status: Optional[str] = None
    payment_type: Optional[str] = None
    gross_amount: Optional[Decimal] = None
    status_code: Optional[str] = None
    raw: Optional[Mapping[str, Any]] = None


def _parse_amount(value: Any) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid gross_amount {value!r}.")


class MidtransGateway:
    """Thin client over Snap and the Core API status endpoint."""

    def __init__(
        self,
        server_key: str = "",
        *,
        is_production: bool = False,
        timeout: float = 15,
        finish_url: str = "",
    ):
        self.server_key = server_key
        self.is_production = is_production
        self.timeout = timeout
        self.finish_url = finish_url

    @classmethod
    def from_settings(cls) -> "MidtransGateway":
        return cls(
            server_key=getattr(settings, "MIDTRANS_SERVER_KEY", ""),
            is_production=getattr(settings, "MIDTRANS_IS_PRODUCTION", False),
            timeout=getattr(settings, "MIDTRANS_TIMEOUT", 15),
            finish_url=f"{getattr(settings, 'FRONTEND_URL', '').rstrip('/')}/booking/success",
        )

    @property
    def is_emulated(self) -> bool:
        return not self.server_key

    @property
    def snap_url(self) -> str:
        return PRODUCTION_SNAP_URL if self.is_production else SANDBOX_SNAP_URL

    @property
    def api_url(self) -> str:
        return PRODUCTION_API_URL if self.is_production else SANDBOX_API_URL

    def _auth(self) -> tuple[str, str]:
        return (self.server_key, "")

    def create_checkout(
        self,
        booking_id: str,
        amount_idr: int,
        customer_name: str,
        customer_email: str,
    ) -> CheckoutSession:
        """Open a Snap session for the booking."""

        logger.info(f"Creating Midtrans checkout for booking {booking_id}, amount {amount_idr} IDR")

        if self.is_emulated:
            token = f"emulated-{uuid.uuid4().hex}"
            logger.warning("Midtrans server key is not configured, emulating Snap checkout")
            return CheckoutSession(
                token=token,
                redirect_url=f"{self.snap_url.replace('/snap/v1/transactions', '')}/snap/v2/vtweb/{token}",
            )

        payload = {
            "transaction_details": {"order_id": str(booking_id), "gross_amount": int(amount_idr)},
            "customer_details": {"first_name": customer_name, "email": customer_email},
            "enabled_payments": ENABLED_PAYMENTS,
        }
        if self.finish_url:
            payload["callbacks"] = {"finish": f"{self.finish_url}?order_id={booking_id}"}

        try:
            response = requests.post(
                self.snap_url,
                json=payload,
                auth=self._auth(),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Midtrans checkout request failed for booking {booking_id}: {e}")
            raise UpstreamError(f"Failed to create payment: {e}")
        except ValueError:
            raise UpstreamError("Midtrans returned a malformed checkout response.")

        token = body.get("token")
        redirect_url = body.get("redirect_url")
        if not token or not redirect_url:
            raise UpstreamError(f"Midtrans checkout response is missing token: {body}")
        return CheckoutSession(token=token, redirect_url=redirect_url)

    def signature_for(self, order_id: str, status_code: str, gross_amount: str) -> str:
        raw = f"{order_id}{status_code}{gross_amount}{self.server_key}"
        return hashlib.sha512(raw.encode()).hexdigest()

    def parse_notification(self, payload: Mapping[str, Any]) -> GatewayNotification:
        """Validate an HTTP notification body and turn it into a ``GatewayNotification``."""

        if not isinstance(payload, Mapping):
            raise ValidationError("Notification body must be a JSON object.")

        order_id = payload.get("order_id")
        transaction_status = payload.get("transaction_status")
        if not order_id or not transaction_status:
            raise ValidationError("Notification must contain order_id and transaction_status.")

        signature = payload.get("signature_key")
        if not self.is_emulated:
            if not signature:
                raise AuthorizationError("Notification signature is missing.")
            expected = self.signature_for(
                str(order_id),
                str(payload.get("status_code", "")),
                str(payload.get("gross_amount", "")),
            )
            if not hmac.compare_digest(expected, str(signature)):
                logger.warning(f"Rejected Midtrans notification with a bad signature for order {order_id}")
                raise AuthorizationError("Invalid notification signature.")

        return GatewayNotification(
            order_id=str(order_id),
            transaction_status=str(transaction_status),
            transaction_id=payload.get("transaction_id") or None,
            fraud_status=payload.get("fraud_status") or None,
            payment_type=payload.get("payment_type") or None,
            gross_amount=_parse_amount(payload.get("gross_amount")),
            status_code=str(payload["status_code"]) if payload.get("status_code") is not None else None,
            raw=dict(payload),
        )

    def get_status(self, order_id: str) -> GatewayNotification:
        """Ask the Core API for the current state of an order."""

        if self.is_emulated:
            raise UpstreamError("Midtrans server key is not configured, status lookup is unavailable.")

        try:
            response = requests.get(
                f"{self.api_url}/v2/{order_id}/status",
                auth=self._auth(),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Midtrans status request failed for order {order_id}: {e}")
            raise UpstreamError(f"Failed to fetch payment status: {e}")
        except ValueError:
            raise UpstreamError("Midtrans returned a malformed status response.")

        if str(body.get("status_code")) == "404" or not body.get("transaction_status"):
            raise UpstreamError(f"Midtrans has no transaction for order {order_id}.")

        # The status endpoint is authenticated, so its body is trusted without a signature
        return GatewayNotification(
            order_id=str(body.get("order_id") or order_id),
            transaction_status=str(body["transaction_status"]),
            transaction_id=body.get("transaction_id") or None,
            fraud_status=body.get("fraud_status") or None,
            payment_type=body.get("payment_type") or None,
            gross_amount=_parse_amount(body.get("gross_amount")),
            status_code=str(body.get("status_code")) if body.get("status_code") is not None else None,
            raw=body,
        )


def get_gateway() -> MidtransGateway:
    return MidtransGateway.from_settings()
