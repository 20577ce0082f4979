"""Transaction and ticket schemas."""

import typing as t
from uuid import UUID

from django.conf import settings
from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, EmailStr, Field

from common.schema import OneToOneFiftyString, StrippedString
from events.models import Ticket, Transaction
from events.service.transaction_service import Attendee, Cart


class AttendeeSchema(Schema):
    name: OneToOneFiftyString
    email: EmailStr | t.Literal[""] = ""


class TransactionCreateSchema(Schema):
    """A cart. Prices and discounts are computed server-side."""

    ticket_type_id: UUID
    quantity: int = Field(..., ge=1)
    voucher_code: StrippedString | None = Field(None, max_length=64)
    coupon_code: StrippedString | None = Field(None, max_length=64)
    points: int = Field(0, ge=0)
    attendees: list[AttendeeSchema] = Field(default_factory=list)

    def to_cart(self) -> Cart:
        return Cart(
            ticket_type_id=self.ticket_type_id,
            quantity=self.quantity,
            voucher_code=self.voucher_code or None,
            coupon_code=self.coupon_code or None,
            points=self.points,
            attendees=tuple(Attendee(name=a.name, email=a.email) for a in self.attendees),
        )


class PaymentProofSchema(Schema):
    payment_proof: str = Field(..., min_length=1, max_length=512, description="Reference to the uploaded proof.")


class RejectSchema(Schema):
    reason: str = Field("", max_length=1000)


class TransactionSchema(ModelSchema):
    event_id: UUID
    event_name: str
    ticket_type_id: UUID
    ticket_type_name: str
    buyer_id: UUID
    voucher_code: str | None = None
    coupon_code: str | None = None
    status: Transaction.Status
    seconds_remaining: int
    currency: str
    expired_at: AwareDatetime
    created_at: AwareDatetime

    class Meta:
        model = Transaction
        fields = [
            "id",
            "quantity",
            "unit_price",
            "subtotal",
            "voucher_discount",
            "coupon_discount",
            "points_used",
            "final_price",
            "payment_proof",
            "rejection_reason",
            "submitted_at",
            "confirmed_at",
            "rejected_at",
            "cancelled_at",
            "updated_at",
        ]

    @staticmethod
    def resolve_event_name(obj: Transaction) -> str:
        return obj.event.name

    @staticmethod
    def resolve_ticket_type_name(obj: Transaction) -> str:
        return obj.ticket_type.name

    @staticmethod
    def resolve_voucher_code(obj: Transaction) -> str | None:
        return obj.voucher.code if obj.voucher_id else None

    @staticmethod
    def resolve_coupon_code(obj: Transaction) -> str | None:
        return obj.coupon.code if obj.coupon_id else None

    @staticmethod
    def resolve_currency(obj: Transaction) -> str:
        return str(settings.DEFAULT_CURRENCY)

    @staticmethod
    def resolve_seconds_remaining(obj: Transaction) -> int:
        """Read-only countdown derived from the server-side deadline."""
        return obj.seconds_remaining


class TransactionFilterSchema(Schema):
    status: Transaction.Status | None = None


class TicketSchema(ModelSchema):
    transaction_id: UUID
    event_name: str
    ticket_type_name: str

    class Meta:
        model = Ticket
        fields = ["id", "attendee_name", "attendee_email", "qr_token", "checked_in", "checked_in_at"]

    @staticmethod
    def resolve_event_name(obj: Ticket) -> str:
        return obj.transaction.event.name

    @staticmethod
    def resolve_ticket_type_name(obj: Ticket) -> str:
        return obj.transaction.ticket_type.name


class OrganizerAttendeeSchema(ModelSchema):
    """A seat-level row for the organizer. The QR token stays with the buyer."""

    transaction_id: UUID
    event_id: UUID
    event_name: str
    ticket_type_name: str
    buyer_email: str

    class Meta:
        model = Ticket
        fields = ["id", "attendee_name", "attendee_email", "checked_in", "checked_in_at", "created_at"]

    @staticmethod
    def resolve_event_id(obj: Ticket) -> UUID:
        return obj.transaction.event_id

    @staticmethod
    def resolve_event_name(obj: Ticket) -> str:
        return obj.transaction.event.name

    @staticmethod
    def resolve_ticket_type_name(obj: Ticket) -> str:
        return obj.transaction.ticket_type.name

    @staticmethod
    def resolve_buyer_email(obj: Ticket) -> str:
        return obj.transaction.buyer.email


class CheckInTicketSchema(Schema):
    """What the gate sees; the QR token itself is never echoed back."""

    ticket_id: UUID
    attendee_name: str
    attendee_email: str
    event_id: UUID
    event_name: str
    ticket_type_name: str
    checked_in_at: AwareDatetime | None


class CheckInResultSchema(Schema):
    success: bool
    already_used: bool
    ticket: CheckInTicketSchema
