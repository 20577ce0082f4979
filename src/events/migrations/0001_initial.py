import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import events.models.ticket


def timestamped() -> list[tuple[str, models.Field]]:  # type: ignore[type-arg]
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
        ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                *timestamped(),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("start", models.DateTimeField(db_index=True)),
                ("end", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("published", "Published"),
                            ("cancelled", "Cancelled"),
                            ("completed", "Completed"),
                        ],
                        db_index=True,
                        default="draft",
                        max_length=16,
                    ),
                ),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="organized_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["start"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end__isnull", True), ("end__gte", models.F("start")), _connector="OR"),
                        name="event_end_after_start",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketType",
            fields=[
                *timestamped(),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("unit_price", models.PositiveBigIntegerField(help_text="Price per seat in whole currency units.")),
                ("total_seats", models.PositiveIntegerField()),
                ("seats_remaining", models.PositiveIntegerField()),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="ticket_types", to="events.event"
                    ),
                ),
            ],
            options={
                "ordering": ["event", "name"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "name"), name="unique_ticket_type_name_per_event"),
                    models.CheckConstraint(
                        condition=models.Q(("seats_remaining__gte", 0), ("seats_remaining__lte", models.F("total_seats"))),
                        name="ticket_type_seats_within_capacity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Voucher",
            fields=[
                *timestamped(),
                ("code", models.CharField(db_index=True, max_length=64)),
                (
                    "discount_type",
                    models.CharField(choices=[("percentage", "Percentage"), ("fixed", "Fixed amount")], max_length=16),
                ),
                ("discount_amount", models.PositiveBigIntegerField()),
                ("usage_limit", models.PositiveIntegerField()),
                ("used_count", models.PositiveIntegerField(default=0)),
                ("valid_from", models.DateTimeField()),
                ("valid_until", models.DateTimeField()),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="vouchers", to="events.event"
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "code"), name="unique_voucher_code_per_event"),
                    models.CheckConstraint(
                        condition=models.Q(("used_count__lte", models.F("usage_limit"))),
                        name="voucher_usage_within_limit",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("discount_type", "percentage"), _negated=True),
                            models.Q(("discount_amount__gte", 1), ("discount_amount__lte", 100)),
                            _connector="OR",
                        ),
                        name="voucher_percentage_in_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("valid_until__gt", models.F("valid_from"))),
                        name="voucher_window_ordered",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Coupon",
            fields=[
                *timestamped(),
                ("code", models.CharField(max_length=64, unique=True)),
                ("discount_amount", models.PositiveBigIntegerField()),
                ("expires_at", models.DateTimeField(db_index=True)),
                ("used_at", models.DateTimeField(blank=True, null=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="coupons",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["expires_at"],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                *timestamped(),
                ("quantity", models.PositiveIntegerField()),
                (
                    "attendees",
                    models.JSONField(blank=True, default=list, help_text="Attendee names and emails, one per seat."),
                ),
                ("unit_price", models.PositiveBigIntegerField()),
                ("subtotal", models.PositiveBigIntegerField()),
                ("voucher_discount", models.PositiveBigIntegerField(default=0)),
                ("coupon_discount", models.PositiveBigIntegerField(default=0)),
                ("points_used", models.PositiveBigIntegerField(default=0)),
                ("final_price", models.PositiveBigIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("waiting_payment", "Waiting for payment"),
                            ("waiting_confirmation", "Waiting for confirmation"),
                            ("done", "Done"),
                            ("rejected", "Rejected"),
                            ("expired", "Expired"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="waiting_payment",
                        max_length=32,
                    ),
                ),
                ("payment_proof", models.CharField(blank=True, max_length=512)),
                ("rejection_reason", models.TextField(blank=True)),
                ("expired_at", models.DateTimeField(db_index=True)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "buyer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="events.event"
                    ),
                ),
                (
                    "ticket_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="events.tickettype",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="events.voucher",
                    ),
                ),
                (
                    "coupon",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="events.coupon",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status", "expired_at"], name="transaction_status_expiry_idx")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gte", 1)), name="transaction_quantity_positive"),
                    models.CheckConstraint(
                        condition=models.Q(("subtotal", models.F("unit_price") * models.F("quantity"))),
                        name="transaction_subtotal_matches_quantity",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("final_price__lte", models.F("subtotal"))),
                        name="transaction_final_within_subtotal",
                    ),
                ],
            },
        ),
        migrations.AddField(
            model_name="coupon",
            name="used_by_transaction",
            field=models.OneToOneField(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="consumed_coupon",
                to="events.transaction",
            ),
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                *timestamped(),
                ("attendee_name", models.CharField(max_length=255)),
                ("attendee_email", models.EmailField(blank=True, max_length=254)),
                (
                    "qr_token",
                    models.CharField(
                        default=events.models.ticket.generate_qr_token, editable=False, max_length=128, unique=True
                    ),
                ),
                ("checked_in", models.BooleanField(db_index=True, default=False)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                (
                    "transaction",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="tickets", to="events.transaction"
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="PointsLedgerEntry",
            fields=[
                *timestamped(),
                ("amount", models.BigIntegerField()),
                (
                    "reason",
                    models.CharField(
                        choices=[("earned", "Earned"), ("used", "Used"), ("expired", "Expired")],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                ("remaining", models.PositiveBigIntegerField(default=0)),
                ("expires_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("description", models.CharField(blank=True, max_length=255)),
                (
                    "transaction",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="points_entries",
                        to="events.transaction",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="points_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name_plural": "points ledger entries",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("reason", "earned"), ("amount__gt", 0)),
                            models.Q(models.Q(("reason", "earned"), _negated=True), ("amount__lt", 0)),
                            _connector="OR",
                        ),
                        name="points_entry_sign_matches_reason",
                    )
                ],
            },
        ),
    ]
