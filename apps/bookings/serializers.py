"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.finances.serializers import PaymentSerializer
from apps.properties.serializers import FacilityShortSerializer

from .models import Booking, NightlyRate


class BookingCreateSerializer(serializers.Serializer):
    """Request body for a new booking."""

    property_id = serializers.IntegerField(min_value=1)
    room_id = serializers.IntegerField(min_value=1)
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    guests_count = serializers.IntegerField(min_value=1, default=1)
    payment_method = serializers.ChoiceField(choices=Booking.PaymentMethod.choices)

    def validate(self, attrs):  # type: ignore
        if attrs["check_in_date"] >= attrs["check_out_date"]:
            raise serializers.ValidationError("check_out_date must be after check_in_date.")
        return attrs


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)


class AvailableRoomsQuerySerializer(serializers.Serializer):
    property_id = serializers.IntegerField(min_value=1)
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    guests_count = serializers.IntegerField(min_value=1, required=False)


class PriceQuoteSerializer(serializers.Serializer):
    room_id = serializers.IntegerField(min_value=1)
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()


class RoomAvailabilitySerializer(serializers.Serializer):
    """A room of the property with its availability for the requested stay."""

    id = serializers.IntegerField(source="room.id")
    name = serializers.CharField(source="room.name")
    description = serializers.CharField(source="room.description")
    max_guests = serializers.IntegerField(source="room.max_guests")
    beds = serializers.IntegerField(source="room.beds")
    bathrooms = serializers.IntegerField(source="room.bathrooms")
    base_price_per_night_idr = serializers.IntegerField(source="room.base_price_per_night_idr")
    facilities = serializers.SerializerMethodField()
    is_available = serializers.BooleanField()

    def get_facilities(self, obj):  # type: ignore
        facilities = [facility for facility in obj.room.facilities.all() if facility.deleted_at is None]
        return FacilityShortSerializer(facilities, many=True).data


class NightlyRateSerializer(serializers.ModelSerializer):
    class Meta:
        model = NightlyRate
        fields = ["date", "price_per_night_idr", "peak_season_rate"]


class BookingPropertySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    title = serializers.CharField()
    location = serializers.SerializerMethodField()

    def get_location(self, obj):  # type: ignore
        location = obj.location
        if location is None:
            return None
        return {"id": location.pk, "name": location.name, "city": location.city}


class BookingRoomSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()


class BookingSerializer(serializers.ModelSerializer):
    """Booking as shown in lists, with its latest payment."""

    property = BookingPropertySerializer(read_only=True)
    room = BookingRoomSerializer(read_only=True, allow_null=True)
    latest_payment = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "user",
            "property",
            "room",
            "check_in_date",
            "check_out_date",
            "nights",
            "guests_count",
            "status",
            "payment_method",
            "nightly_subtotal_idr",
            "cleaning_fee_idr",
            "service_fee_idr",
            "discount_idr",
            "total_price_idr",
            "payment_due_at",
            "confirmed_at",
            "cancelled_at",
            "cancel_reason",
            "created_at",
            "latest_payment",
        ]
        read_only_fields = fields

    def get_latest_payment(self, obj):  # type: ignore
        payments = sorted(obj.payments.all(), key=lambda p: (p.requested_at, p.pk), reverse=True)
        if not payments:
            return None
        return PaymentSerializer(payments[0]).data


class BookingDetailSerializer(BookingSerializer):
    """Full booking: nightly schedule and every payment attempt."""

    nightly_rates = NightlyRateSerializer(many=True, read_only=True)
    payments = serializers.SerializerMethodField()

    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + ["nightly_rates", "payments", "updated_at"]
        read_only_fields = fields

    def get_payments(self, obj):  # type: ignore
        payments = sorted(obj.payments.all(), key=lambda p: (p.requested_at, p.pk), reverse=True)
        return PaymentSerializer(payments, many=True).data
