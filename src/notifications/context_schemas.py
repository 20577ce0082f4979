"""Context schemas for notifications using TypedDict for type safety.

Each notification type has a corresponding context schema that defines the
structure of the context data stored on the notification.
"""

import typing as t

from notifications.enums import NotificationType


class TransactionContext(t.TypedDict, total=False):
    """Fields shared by every transaction notification."""

    transaction_id: t.Required[str]
    event_id: t.Required[str]
    event_name: t.Required[str]
    ticket_type_name: t.Required[str]
    quantity: t.Required[int]
    final_price: t.Required[int]
    status: t.Required[str]


class TransactionCreatedContext(TransactionContext):
    expired_at: t.Required[str]  # ISO format


class PaymentProofSubmittedContext(TransactionContext):
    buyer_name: t.Required[str]


class TransactionConfirmedContext(TransactionContext):
    ticket_count: t.Required[int]


class TransactionRejectedContext(TransactionContext):
    reason: str


NOTIFICATION_CONTEXT_SCHEMAS: dict[NotificationType, type[TransactionContext]] = {
    NotificationType.TRANSACTION_CREATED: TransactionCreatedContext,
    NotificationType.PAYMENT_PROOF_SUBMITTED: PaymentProofSubmittedContext,
    NotificationType.TRANSACTION_CONFIRMED: TransactionConfirmedContext,
    NotificationType.TRANSACTION_REJECTED: TransactionRejectedContext,
    NotificationType.TRANSACTION_EXPIRED: TransactionContext,
    NotificationType.TRANSACTION_CANCELLED: TransactionContext,
}


def validate_notification_context(notification_type: NotificationType, context: dict[str, t.Any]) -> None:
    """Validate that context matches expected schema for notification type.

    Raises:
        ValueError: If context is invalid or notification type has no schema
    """
    schema = NOTIFICATION_CONTEXT_SCHEMAS.get(notification_type)
    if schema is None:
        raise ValueError(f"No schema defined for notification type: {notification_type}")

    # TypedDicts are only checked statically; at runtime we check required keys
    required_keys: frozenset[str] = getattr(schema, "__required_keys__", frozenset())
    missing_keys = required_keys - context.keys()

    if missing_keys:
        raise ValueError(f"Missing required context keys for {notification_type}: {missing_keys}")
