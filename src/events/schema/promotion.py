"""Voucher and coupon schemas."""

from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field, model_validator

from common.schema import OneToSixtyFourString
from events.models import Coupon, Voucher


class VoucherCreateSchema(Schema):
    code: OneToSixtyFourString
    discount_type: Voucher.DiscountType
    discount_amount: int = Field(..., ge=1)
    usage_limit: int = Field(..., ge=1)
    valid_from: AwareDatetime
    valid_until: AwareDatetime

    @model_validator(mode="after")
    def check_ranges(self) -> "VoucherCreateSchema":
        if self.valid_until <= self.valid_from:
            raise ValueError("valid_until must be after valid_from.")
        if self.discount_type == Voucher.DiscountType.PERCENTAGE and self.discount_amount > 100:
            raise ValueError("Percentage vouchers cannot exceed 100.")
        return self


class VoucherSchema(ModelSchema):
    event_id: UUID
    event_name: str
    discount_type: Voucher.DiscountType
    status: Voucher.VoucherStatus

    class Meta:
        model = Voucher
        fields = [
            "id",
            "code",
            "discount_amount",
            "usage_limit",
            "used_count",
            "valid_from",
            "valid_until",
            "created_at",
        ]

    @staticmethod
    def resolve_event_name(obj: Voucher) -> str:
        return obj.event.name

    @staticmethod
    def resolve_status(obj: Voucher) -> str:
        return obj.status_at()


class CouponSchema(ModelSchema):
    is_expiring_soon: bool

    class Meta:
        model = Coupon
        fields = ["id", "code", "discount_amount", "expires_at", "used_at", "created_at"]

    @staticmethod
    def resolve_is_expiring_soon(obj: Coupon) -> bool:
        return obj.is_expiring_soon


class CouponIssueSchema(Schema):
    user_id: UUID
    discount_amount: int = Field(..., ge=1)
    code: OneToSixtyFourString | None = None
    expires_at: AwareDatetime | None = None
