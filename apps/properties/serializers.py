"""Serializers for the catalog domain."""

from __future__ import annotations

import json
from typing import Any

from rest_framework import serializers  # type: ignore

from .models import (
    PEAK_SEASON_NOTE_MAX_LENGTH,
    Facility,
    Location,
    PeakSeasonRate,
    Property,
    PropertyType,
    Room,
)


class FacilityIdsField(serializers.ListField):
    """List of facility ids.

    Multipart forms send the list as a JSON string (``"[1, 2]"``) or as
    comma separated ids (``"1,2"``); both are accepted next to a real list.
    """

    child = serializers.IntegerField(min_value=1)

    def to_internal_value(self, data):  # type: ignore
        if isinstance(data, str):
            raw = data.strip()
            if not raw:
                data = []
            elif raw.startswith("["):
                try:
                    data = json.loads(raw)
                except ValueError:
                    raise serializers.ValidationError("Facility ids must be a list of integers.")
            else:
                data = [part for part in raw.replace(" ", "").split(",") if part]
        return super().to_internal_value(data)

    def get_value(self, dictionary):  # type: ignore
        # QueryDict.getlist would split a single JSON string into characters otherwise
        if hasattr(dictionary, "getlist") and self.field_name in dictionary:
            values = dictionary.getlist(self.field_name)
            if len(values) == 1:
                return values[0]
            return values
        return super().get_value(dictionary)


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = ["id", "name", "address", "city", "country", "latitude", "longitude", "created_at"]
        read_only_fields = ["created_at"]


class PropertyTypeSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=100)

    class Meta:
        model = PropertyType
        fields = ["id", "name", "description"]


class FacilitySerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=100)

    class Meta:
        model = Facility
        fields = ["id", "name", "icon"]


class FacilityShortSerializer(serializers.ModelSerializer):
    class Meta:
        model = Facility
        fields = ["id", "name", "icon"]


def _live_facilities(obj) -> list[dict[str, Any]]:  # type: ignore
    return FacilityShortSerializer(
        [facility for facility in obj.facilities.all() if facility.deleted_at is None],
        many=True,
    ).data


class RoomSerializer(serializers.ModelSerializer):
    property = serializers.PrimaryKeyRelatedField(read_only=True)
    facilities = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = [
            "id",
            "property",
            "name",
            "description",
            "max_guests",
            "beds",
            "bathrooms",
            "base_price_per_night_idr",
            "facilities",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_facilities(self, obj: Room) -> list[dict[str, Any]]:
        return _live_facilities(obj)


class RoomWriteSerializer(serializers.ModelSerializer):
    property = serializers.PrimaryKeyRelatedField(queryset=Property.objects.alive())
    facility_ids = FacilityIdsField(required=False, write_only=True)

    class Meta:
        model = Room
        fields = [
            "property",
            "name",
            "description",
            "max_guests",
            "beds",
            "bathrooms",
            "base_price_per_night_idr",
            "facility_ids",
        ]


class PropertySerializer(serializers.ModelSerializer):
    owner = serializers.ReadOnlyField(source="owner_id")
    location = LocationSerializer(read_only=True)
    property_type = PropertyTypeSerializer(read_only=True)
    facilities = serializers.SerializerMethodField()
    rooms = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            "id",
            "owner",
            "title",
            "slug",
            "description",
            "location",
            "property_type",
            "facilities",
            "rooms",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_facilities(self, obj: Property) -> list[dict[str, Any]]:
        return _live_facilities(obj)

    def get_rooms(self, obj: Property) -> list[dict[str, Any]]:
        rooms = [room for room in obj.rooms.all() if room.deleted_at is None]
        return RoomSerializer(rooms, many=True, context=self.context).data


class PropertyWriteSerializer(serializers.ModelSerializer):
    location = serializers.PrimaryKeyRelatedField(queryset=Location.objects.alive())
    property_type = serializers.PrimaryKeyRelatedField(
        queryset=PropertyType.objects.alive(),
        required=False,
        allow_null=True,
    )
    facility_ids = FacilityIdsField(required=False, write_only=True)

    class Meta:
        model = Property
        fields = ["title", "description", "location", "property_type", "facility_ids"]


class PeakSeasonRateSerializer(serializers.ModelSerializer):
    room = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = PeakSeasonRate
        fields = [
            "id",
            "room",
            "start_date",
            "end_date",
            "adjustment_type",
            "adjustment_value",
            "note",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PeakSeasonRateWriteSerializer(serializers.Serializer):
    """Shape check only; business rules live in the rate manager service."""

    start_date = serializers.DateField()
    end_date = serializers.DateField()
    adjustment_type = serializers.ChoiceField(choices=PeakSeasonRate.AdjustmentType.choices)
    adjustment_value = serializers.IntegerField()
    note = serializers.CharField(
        max_length=PEAK_SEASON_NOTE_MAX_LENGTH,
        required=False,
        allow_blank=True,
        allow_null=True,
    )
    is_active = serializers.BooleanField(required=False)


class PeakSeasonRateBulkSerializer(serializers.Serializer):
    items = PeakSeasonRateWriteSerializer(many=True, allow_empty=False)
