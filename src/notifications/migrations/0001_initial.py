import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "notification_type",
                    models.CharField(
                        choices=[
                            ("transaction_created", "Transaction Created"),
                            ("transaction_confirmed", "Transaction Confirmed"),
                            ("transaction_rejected", "Transaction Rejected"),
                            ("transaction_expired", "Transaction Expired"),
                            ("transaction_cancelled", "Transaction Cancelled"),
                            ("payment_proof_submitted", "Payment Proof Submitted"),
                        ],
                        db_index=True,
                        max_length=50,
                    ),
                ),
                ("context", models.JSONField(blank=True, default=dict)),
                ("read_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "read_at"], name="notification_user_unread_idx")],
            },
        ),
    ]
