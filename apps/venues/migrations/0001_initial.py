import decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Hall",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("owner_id", models.BigIntegerField(db_index=True, help_text="User id of the hall owner.")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Hall",
                "verbose_name_plural": "Halls",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="HallStaff",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.BigIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "hall",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="staff",
                        to="venues.hall",
                    ),
                ),
            ],
            options={
                "verbose_name": "Hall staff member",
                "verbose_name_plural": "Hall staff",
                "constraints": [
                    models.UniqueConstraint(fields=("hall", "user_id"), name="hall_staff_unique_member"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Venue",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("capacity", models.PositiveIntegerField()),
                ("min_booking_duration_hours", models.PositiveSmallIntegerField(default=2)),
                (
                    "base_price_per_hour",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.00"))],
                    ),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "hall",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="venues",
                        to="venues.hall",
                    ),
                ),
            ],
            options={
                "verbose_name": "Venue",
                "verbose_name_plural": "Venues",
                "ordering": ["hall", "name"],
                "indexes": [models.Index(fields=["hall", "active"], name="venues_venu_hall_id_5b1f3c_idx")],
            },
        ),
        migrations.CreateModel(
            name="PricingOverride",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("effective_date", models.DateField()),
                ("slot_start", models.TimeField()),
                ("slot_end", models.TimeField()),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.00"))],
                    ),
                ),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pricing_overrides",
                        to="venues.venue",
                    ),
                ),
            ],
            options={
                "verbose_name": "Pricing override",
                "verbose_name_plural": "Pricing overrides",
                "ordering": ["effective_date", "slot_start"],
                "indexes": [
                    models.Index(fields=["venue", "effective_date"], name="venues_pric_venue_i_8c2d41_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("slot_end__gt", models.F("slot_start"))),
                        name="pricing_override_valid_slot",
                    ),
                ],
            },
        ),
    ]
