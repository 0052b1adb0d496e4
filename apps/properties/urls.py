"""URL routing for the catalog domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import (
    FacilityViewSet,
    LocationViewSet,
    PeakSeasonRateViewSet,
    PropertyTypeViewSet,
    PropertyViewSet,
    RoomViewSet,
)

router = DefaultRouter()
router.register(r"types", PropertyTypeViewSet, basename="property-type")
router.register(r"facilities", FacilityViewSet, basename="facility")
router.register(r"locations", LocationViewSet, basename="location")
router.register(r"rooms", RoomViewSet, basename="room")
router.register(r"", PropertyViewSet, basename="property")

peak_season_list = PeakSeasonRateViewSet.as_view({"get": "list", "post": "create"})
peak_season_bulk = PeakSeasonRateViewSet.as_view({"post": "bulk_create"})
peak_season_detail = PeakSeasonRateViewSet.as_view({"patch": "partial_update", "delete": "destroy"})

urlpatterns = [
    path(
        "rooms/<int:room_id>/peak-season/",
        peak_season_list,
        name="peak-season-list",
    ),
    path(
        "rooms/<int:room_id>/peak-season/bulk/",
        peak_season_bulk,
        name="peak-season-bulk",
    ),
    path(
        "peak-season/<int:pk>/",
        peak_season_detail,
        name="peak-season-detail",
    ),
    path("", include(router.urls)),
]
