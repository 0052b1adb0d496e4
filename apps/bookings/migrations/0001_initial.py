import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("properties", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("deleted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("check_in_date", models.DateField()),
                ("check_out_date", models.DateField()),
                ("nights", models.PositiveSmallIntegerField()),
                ("guests_count", models.PositiveSmallIntegerField(default=1)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("WAITING_PAYMENT", "Waiting for payment"),
                            ("WAITING_CONFIRMATION", "Waiting for confirmation"),
                            ("CONFIRMED", "Confirmed"),
                            ("CANCELED", "Canceled"),
                            ("EXPIRED", "Expired"),
                            ("CHECKED_IN", "Checked in"),
                            ("CHECKED_OUT", "Checked out"),
                        ],
                        max_length=32,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("BANK_TRANSFER", "Bank transfer"), ("PAYMENT_GATEWAY", "Payment gateway")],
                        max_length=32,
                    ),
                ),
                ("nightly_subtotal_idr", models.PositiveBigIntegerField(default=0)),
                ("cleaning_fee_idr", models.PositiveBigIntegerField(default=0)),
                ("service_fee_idr", models.PositiveBigIntegerField(default=0)),
                ("discount_idr", models.PositiveBigIntegerField(default=0)),
                ("total_price_idr", models.PositiveBigIntegerField(default=0)),
                (
                    "payment_due_at",
                    models.DateTimeField(
                        blank=True, help_text="Unpaid bookings expire after this moment.", null=True
                    ),
                ),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancel_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="properties.property",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings",
                        to="properties.room",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="NightlyRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("price_per_night_idr", models.PositiveBigIntegerField()),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nightly_rates",
                        to="bookings.booking",
                    ),
                ),
                (
                    "peak_season_rate",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="properties.peakseasonrate",
                    ),
                ),
            ],
            options={
                "verbose_name": "Nightly rate",
                "verbose_name_plural": "Nightly rates",
                "ordering": ["date"],
            },
        ),
        migrations.AddConstraint(
            model_name="booking",
            constraint=models.CheckConstraint(
                condition=models.Q(("check_out_date__gt", models.F("check_in_date"))),
                name="booking_valid_dates",
            ),
        ),
        migrations.AddIndex(
            model_name="booking",
            index=models.Index(fields=["room", "check_in_date", "check_out_date"], name="booking_room_dates_idx"),
        ),
        migrations.AddIndex(
            model_name="booking",
            index=models.Index(fields=["status", "payment_due_at"], name="booking_status_due_idx"),
        ),
        migrations.AddIndex(
            model_name="booking",
            index=models.Index(fields=["user", "created_at"], name="booking_user_created_idx"),
        ),
        migrations.AddConstraint(
            model_name="nightlyrate",
            constraint=models.UniqueConstraint(fields=("booking", "date"), name="nightly_rate_unique_date"),
        ),
    ]
