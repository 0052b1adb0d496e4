"""API views for the booking domain."""

from __future__ import annotations

import logging

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.finances.services import refresh_payment_status

from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RetryCheckoutCommand,
    RetryCheckoutHandler,
)
from .application.queries import get_booking, list_user_bookings
from .pricing import quote_price
from .serializers import (
    AvailableRoomsQuerySerializer,
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingDetailSerializer,
    BookingSerializer,
    PriceQuoteSerializer,
    RoomAvailabilitySerializer,
)
from .services import list_available_rooms

logger = logging.getLogger(__name__)


def _checkout_data(session):  # type: ignore
    if session is None:
        return None
    return {"token": session.token, "redirect_url": session.redirect_url}


class BookingViewSet(viewsets.GenericViewSet):
    """Bookings of the authenticated guest."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "cancel":
            return BookingCancelSerializer
        if self.action == "available_rooms":
            return AvailableRoomsQuerySerializer
        if self.action == "calculate_price":
            return PriceQuoteSerializer
        if self.action == "list":
            return BookingSerializer
        return BookingDetailSerializer

    def list(self, request):  # type: ignore
        queryset = list_user_bookings(request.user)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True).data)
        return Response(BookingSerializer(queryset, many=True).data)

    def retrieve(self, request, pk=None):  # type: ignore
        booking = get_booking(pk, request.user)
        return Response(BookingDetailSerializer(booking).data)

    def create(self, request):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = CreateBookingHandler().handle(
            CreateBookingCommand(
                user_id=request.user.pk,
                property_id=data["property_id"],
                room_id=data["room_id"],
                check_in=data["check_in_date"],
                check_out=data["check_out_date"],
                guests_count=data["guests_count"],
                payment_method=data["payment_method"],
            )
        )

        booking = get_booking(result.booking.pk, request.user)
        payload = dict(BookingDetailSerializer(booking).data)
        payload["checkout"] = _checkout_data(result.checkout)
        payload["checkout_error"] = result.checkout_error
        return Response(payload, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = CancelBookingHandler().handle(
            CancelBookingCommand(
                booking_id=int(pk),
                user_id=request.user.pk,
                reason=serializer.validated_data.get("reason"),
            )
        )
        booking = get_booking(booking.pk, request.user)
        return Response(BookingDetailSerializer(booking).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def checkout(self, request, pk=None):  # type: ignore
        session = RetryCheckoutHandler().handle(
            RetryCheckoutCommand(booking_id=int(pk), user_id=request.user.pk)
        )
        return Response(_checkout_data(session), status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="refresh-payment")
    def refresh_payment(self, request, pk=None):  # type: ignore
        booking = refresh_payment_status(int(pk), request.user)
        booking = get_booking(booking.pk, request.user)
        return Response(BookingDetailSerializer(booking).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="available-rooms")
    def available_rooms(self, request):  # type: ignore
        query = AvailableRoomsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data

        rooms = list_available_rooms(
            data["property_id"],
            data["check_in_date"],
            data["check_out_date"],
            data.get("guests_count"),
        )
        return Response(
            {
                "property_id": data["property_id"],
                "check_in_date": data["check_in_date"],
                "check_out_date": data["check_out_date"],
                "rooms": RoomAvailabilitySerializer(rooms, many=True).data,
            }
        )

    @action(detail=False, methods=["post"], url_path="calculate-price")
    def calculate_price(self, request):  # type: ignore
        serializer = PriceQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        breakdown = quote_price(data["room_id"], data["check_in_date"], data["check_out_date"])
        return Response(breakdown.to_dict())
