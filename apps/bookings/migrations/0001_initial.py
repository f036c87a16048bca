import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("properties", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("booking_number", models.CharField(editable=False, max_length=32, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("canceled", "Canceled"),
                            ("completed", "Completed"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("check_in", models.DateField()),
                ("check_out", models.DateField()),
                ("guests", models.JSONField(default=dict)),
                ("contact_information", models.JSONField(default=dict)),
                ("special_requests", models.TextField(blank=True)),
                ("pricing", models.JSONField(default=dict)),
                ("add_ons", models.JSONField(blank=True, default=list)),
                ("payment", models.JSONField(default=dict)),
                ("cancellation", models.JSONField(blank=True, null=True)),
                ("notes", models.JSONField(blank=True, default=dict)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to="properties.property",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(check_out__gt=models.F("check_in")),
                        name="booking_valid_dates",
                    )
                ],
                "indexes": [
                    models.Index(fields=["property", "check_in", "check_out"], name="booking_property_dates_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                    models.Index(fields=["user", "status"], name="booking_user_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReconciliationEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("history_append", "User booking history"),
                            ("refund_ledger", "Refund ledger record"),
                        ],
                        max_length=32,
                    ),
                ),
                ("payload", models.JSONField(default=dict)),
                ("attempts", models.PositiveSmallIntegerField(default=1)),
                ("last_error", models.TextField(blank=True)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reconciliation_entries",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reconciliation entry",
                "verbose_name_plural": "Reconciliation entries",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["resolved_at", "attempts"], name="reconciliation_open_idx"),
                ],
            },
        ),
    ]
