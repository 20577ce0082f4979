"""Points schemas."""

from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field

from events.models import PointsLedgerEntry


class PointsLedgerEntrySchema(ModelSchema):
    reason: PointsLedgerEntry.Reason
    transaction_id: UUID | None = None

    class Meta:
        model = PointsLedgerEntry
        fields = ["id", "amount", "remaining", "expires_at", "description", "created_at"]


class PointsSummarySchema(Schema):
    balance: int = Field(..., description="Unconsumed, unexpired earned points.")
    held: int = Field(..., description="Points reserved by pending transactions.")
    available: int = Field(..., description="Points a new transaction can redeem.")
    history: list[PointsLedgerEntrySchema]


class PointsGrantSchema(Schema):
    user_id: UUID
    amount: int = Field(..., ge=1)
    description: str = Field("", max_length=255)
    expires_at: AwareDatetime | None = None
