"""Catalog API views."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django.db.models import Prefetch  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsTenantAdmin, IsTenantAdminOrReadOnly, user_is_admin
from shared.domain.exceptions import NotFoundError

from . import services
from .filters import PropertyFilterSet, RoomFilterSet
from .models import Facility, Location, PeakSeasonRate, Property, PropertyType, Room
from .serializers import (
    FacilitySerializer,
    LocationSerializer,
    PeakSeasonRateBulkSerializer,
    PeakSeasonRateSerializer,
    PeakSeasonRateWriteSerializer,
    PropertySerializer,
    PropertyTypeSerializer,
    PropertyWriteSerializer,
    RoomSerializer,
    RoomWriteSerializer,
)


class IsPropertyOwnerOrStaff(permissions.BasePermission):
    """Writes on a property and its rooms are limited to its owner and platform staff."""

    def has_object_permission(self, request, view, obj):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        if isinstance(obj, Room):
            obj = obj.property
        elif isinstance(obj, PeakSeasonRate):
            obj = obj.room.property
        return obj.owner_id == user.id


class SoftDeleteViewSetMixin:
    """Hides soft-deleted rows and turns DELETE into a soft delete."""

    def get_queryset(self):  # type: ignore
        return super().get_queryset().alive()

    def perform_destroy(self, instance):  # type: ignore
        instance.soft_delete()


class LocationViewSet(SoftDeleteViewSetMixin, viewsets.ModelViewSet):
    queryset = Location.objects.all()
    serializer_class = LocationSerializer
    permission_classes = [IsTenantAdminOrReadOnly]


class UniqueNameViewSetMixin:
    """Facility and property type names are unique among live rows."""

    def perform_create(self, serializer):  # type: ignore
        services.ensure_unique_live_name(self.queryset.model, serializer.validated_data["name"])
        serializer.save()

    def perform_update(self, serializer):  # type: ignore
        name = serializer.validated_data.get("name")
        if name is not None:
            services.ensure_unique_live_name(self.queryset.model, name, exclude_pk=serializer.instance.pk)
        serializer.save()


class PropertyTypeViewSet(UniqueNameViewSetMixin, SoftDeleteViewSetMixin, viewsets.ModelViewSet):
    queryset = PropertyType.objects.all()
    serializer_class = PropertyTypeSerializer
    permission_classes = [IsTenantAdminOrReadOnly]


class FacilityViewSet(UniqueNameViewSetMixin, SoftDeleteViewSetMixin, viewsets.ModelViewSet):
    queryset = Facility.objects.all()
    serializer_class = FacilitySerializer
    permission_classes = [IsTenantAdminOrReadOnly]


class PropertyViewSet(SoftDeleteViewSetMixin, viewsets.ModelViewSet):
    """Public listing and admin management of properties."""

    queryset = Property.objects.select_related("owner", "location", "property_type").prefetch_related(
        "facilities",
        Prefetch("rooms", queryset=Room.objects.alive().prefetch_related("facilities")),
    )
    permission_classes = [IsTenantAdminOrReadOnly, IsPropertyOwnerOrStaff]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = ["created_at", "title"]

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer

    def _save(self, serializer, **extra):  # type: ignore
        facility_ids = serializer.validated_data.pop("facility_ids", None)
        with transaction.atomic():
            property_obj = serializer.save(**extra)
            if facility_ids is not None:
                services.replace_property_facilities(property_obj, facility_ids)
        return property_obj

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        property_obj = self._save(serializer, owner=request.user)
        read_serializer = PropertySerializer(self.get_queryset().get(pk=property_obj.pk))
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self._save(serializer)
        return Response(PropertySerializer(self.get_queryset().get(pk=instance.pk)).data)

    def perform_destroy(self, instance):  # type: ignore
        services.delete_property(instance)


class RoomViewSet(SoftDeleteViewSetMixin, viewsets.ModelViewSet):
    """Rooms of live properties."""

    queryset = Room.objects.select_related("property").prefetch_related("facilities").filter(
        property__deleted_at__isnull=True
    )
    permission_classes = [IsTenantAdminOrReadOnly, IsPropertyOwnerOrStaff]
    filter_backends = [DjangoFilterBackend]
    filterset_class = RoomFilterSet

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return RoomWriteSerializer
        return RoomSerializer

    def _save(self, serializer):  # type: ignore
        facility_ids = serializer.validated_data.pop("facility_ids", None)
        property_obj = serializer.validated_data.get("property")
        if property_obj is not None:
            self.check_object_permissions(self.request, property_obj)
        with transaction.atomic():
            room = serializer.save()
            if facility_ids is not None:
                services.replace_room_facilities(room, facility_ids)
        return room

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        room = self._save(serializer)
        return Response(RoomSerializer(self.get_queryset().get(pk=room.pk)).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self._save(serializer)
        return Response(RoomSerializer(self.get_queryset().get(pk=instance.pk)).data)

    def perform_destroy(self, instance):  # type: ignore
        services.delete_room(instance.pk)


class PeakSeasonRateViewSet(viewsets.ViewSet):
    """Peak-season rates of a room.

    - `list`/`create` and `bulk_create` are nested under a room
    - `partial_update`/`destroy` address a single rate
    """

    def get_permissions(self):  # type: ignore
        if self.action == "list":
            return [permissions.AllowAny()]
        return [IsTenantAdmin()]

    def _check_room_owner(self, room: Room) -> None:
        if not IsPropertyOwnerOrStaff().has_object_permission(self.request, self, room):
            self.permission_denied(self.request, message="You do not manage this room.")

    def list(self, request, room_id=None):  # type: ignore
        include_inactive = request.query_params.get("include_inactive") in {"1", "true", "True"}
        if include_inactive and not user_is_admin(request.user):
            include_inactive = False
        rates = services.list_rates(int(room_id), include_inactive=include_inactive)
        return Response(PeakSeasonRateSerializer(rates, many=True).data)

    def create(self, request, room_id=None):  # type: ignore
        self._check_room_owner(services.get_live_room(int(room_id)))
        serializer = PeakSeasonRateWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rate = services.create_rate(int(room_id), serializer.validated_data)
        return Response(PeakSeasonRateSerializer(rate).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="bulk")
    def bulk_create(self, request, room_id=None):  # type: ignore
        self._check_room_owner(services.get_live_room(int(room_id)))
        serializer = PeakSeasonRateBulkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rates = services.bulk_create_rates(int(room_id), serializer.validated_data["items"])
        return Response(PeakSeasonRateSerializer(rates, many=True).data, status=status.HTTP_201_CREATED)

    def _get_rate(self, pk) -> PeakSeasonRate:  # type: ignore
        rate = PeakSeasonRate.objects.alive().select_related("room__property").filter(pk=pk).first()
        if rate is None:
            raise NotFoundError(f"Peak season rate {pk} not found.")
        self._check_room_owner(rate.room)
        return rate

    def partial_update(self, request, pk=None):  # type: ignore
        self._get_rate(pk)
        serializer = PeakSeasonRateWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        rate = services.update_rate(int(pk), serializer.validated_data)
        return Response(PeakSeasonRateSerializer(rate).data)

    def destroy(self, request, pk=None):  # type: ignore
        self._get_rate(pk)
        services.delete_rate(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)
