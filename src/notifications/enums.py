"""Enums for the notification system."""

from django.db.models import TextChoices


class NotificationType(TextChoices):
    """All notification types in the system."""

    # Buyer-facing
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_CONFIRMED = "transaction_confirmed"
    TRANSACTION_REJECTED = "transaction_rejected"
    TRANSACTION_EXPIRED = "transaction_expired"
    TRANSACTION_CANCELLED = "transaction_cancelled"

    # Organizer-facing
    PAYMENT_PROOF_SUBMITTED = "payment_proof_submitted"
