"""API views for payment processing.

The gateway webhook is public: Midtrans authenticates itself with the
``signature_key`` of the notification body, checked by the adapter.
Bank transfers are completed by an admin.
"""

from __future__ import annotations

import logging

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.serializers import BookingDetailSerializer
from apps.users.permissions import IsTenantAdmin

from .gateway import get_gateway
from .models import Payment
from .serializers import PaymentAdminSerializer
from .services import complete_manual_payment, process_gateway_notification

logger = logging.getLogger(__name__)


class PaymentWebhookView(APIView):
    """Midtrans HTTP notification endpoint."""

    authentication_classes: list = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):  # type: ignore
        notification = get_gateway().parse_notification(request.data)
        logger.info(
            f"Midtrans notification for order {notification.order_id}: "
            f"{notification.transaction_status}/{notification.fraud_status}"
        )

        payment = process_gateway_notification(notification)
        payment.refresh_from_db()

        return Response(
            {
                "status": "ok",
                "order_id": notification.order_id,
                "payment_status": payment.payment_status,
                "booking_status": payment.booking.status,
            },
            status=status.HTTP_200_OK,
        )


class CompleteManualPaymentView(APIView):
    """Admin marks a bank transfer as received."""

    permission_classes = [IsTenantAdmin]

    def post(self, request, booking_id: int):  # type: ignore
        booking = complete_manual_payment(booking_id, request.user)
        return Response(BookingDetailSerializer(booking).data, status=status.HTTP_200_OK)


class PaymentViewSet(viewsets.ReadOnlyModelViewSet):
    """Admin view of payments with their gateway log."""

    queryset = (
        Payment.objects.select_related("booking", "user")
        .prefetch_related("transactions")
        .order_by("-requested_at", "-id")
    )
    serializer_class = PaymentAdminSerializer
    permission_classes = [IsTenantAdmin]
    filterset_fields = ["booking", "payment_status"]
