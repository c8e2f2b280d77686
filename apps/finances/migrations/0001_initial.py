import decimal
import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("reservations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Positive for charges, negative for refunds.",
                        max_digits=12,
                    ),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("FULL", "Full payment"),
                            ("INSTALLMENT_1", "First installment"),
                            ("INSTALLMENT_2", "Second installment"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("SUCCESS", "Settled"),
                            ("FAILED", "Failed"),
                            ("REFUNDED", "Refunded"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("external_reference", models.CharField(db_index=True, max_length=255)),
                ("failure_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="reservations.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger entry",
                "verbose_name_plural": "Ledger entries",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["reservation", "created_at"], name="finances_le_reserva_6d1e52_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount", decimal.Decimal("0.00")), _negated=True),
                        name="ledger_entry_nonzero_amount",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        fields=("external_reference",),
                        name="ledger_entry_unique_charge_reference",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SettledPaymentReference",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("reference", models.CharField(max_length=255, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="finances.ledgerentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Settled payment reference",
                "verbose_name_plural": "Settled payment references",
            },
        ),
    ]
