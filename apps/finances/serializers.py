"""Serializers for the finance domain (payments)."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Payment, PaymentTransaction


class PaymentTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentTransaction
        fields = ["id", "event", "payload", "status", "created_at"]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    """Payment attempt as shown inside a booking."""

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "amount_idr",
            "payment_status",
            "payment_method",
            "provider_tx_id",
            "checkout_token",
            "checkout_redirect_url",
            "requested_at",
            "paid_at",
            "failed_at",
        ]
        read_only_fields = fields


class PaymentAdminSerializer(PaymentSerializer):
    """Payment with its gateway log, for admins."""

    transactions = PaymentTransactionSerializer(many=True, read_only=True)

    class Meta(PaymentSerializer.Meta):
        fields = PaymentSerializer.Meta.fields + ["user", "transactions"]
        read_only_fields = fields
