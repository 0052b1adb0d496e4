"""URL routing for the finance domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import CompleteManualPaymentView, PaymentViewSet, PaymentWebhookView

router = DefaultRouter()
router.register(r"", PaymentViewSet, basename="payment")

urlpatterns = [
    path("webhook/", PaymentWebhookView.as_view(), name="payment-webhook"),
    path("complete/<int:booking_id>/", CompleteManualPaymentView.as_view(), name="payment-complete"),
    path("", include(router.urls)),
]
