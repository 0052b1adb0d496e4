"""URL declarations for the users app."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import CurrentUserView

urlpatterns = [
    path("me/", CurrentUserView.as_view(), name="user-me"),
]
