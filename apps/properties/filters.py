"""FilterSet definitions for catalog listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Count, Q  # type: ignore

from .models import Property, Room


def _parse_ids(value) -> list[int]:  # type: ignore
    try:
        return [int(x) for x in str(value).replace(" ", "").split(",") if x]
    except ValueError:
        return []


class PropertyFilterSet(django_filters.FilterSet):
    """Filters for the public property list."""

    city = django_filters.CharFilter(field_name="location__city", lookup_expr="icontains")
    property_type = django_filters.NumberFilter(field_name="property_type_id", lookup_expr="exact")
    guests = django_filters.NumberFilter(method="filter_guests")
    # CSV of facility ids, requires all selected facilities
    facilities = django_filters.CharFilter(method="filter_facilities")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Property
        fields = ["city", "property_type"]

    def filter_guests(self, queryset, name, value):  # type: ignore
        return queryset.filter(
            rooms__deleted_at__isnull=True,
            rooms__max_guests__gte=value,
        ).distinct()

    def filter_facilities(self, queryset, name, value):  # type: ignore
        ids = _parse_ids(value)
        if not ids:
            return queryset
        return (
            queryset.filter(facilities__id__in=ids)
            .annotate(matched_facilities=Count("facilities", filter=Q(facilities__id__in=ids), distinct=True))
            .filter(matched_facilities=len(ids))
            .distinct()
        )

    def filter_search(self, queryset, name, value):  # type: ignore
        return queryset.filter(Q(title__icontains=value) | Q(description__icontains=value))


class RoomFilterSet(django_filters.FilterSet):
    property = django_filters.NumberFilter(field_name="property_id")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")
    price_min = django_filters.NumberFilter(field_name="base_price_per_night_idr", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="base_price_per_night_idr", lookup_expr="lte")

    class Meta:
        model = Room
        fields = ["property"]
