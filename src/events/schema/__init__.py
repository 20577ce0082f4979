from .points import PointsGrantSchema, PointsLedgerEntrySchema, PointsSummarySchema
from .promotion import CouponIssueSchema, CouponSchema, VoucherCreateSchema, VoucherSchema
from .transaction import (
    AttendeeSchema,
    CheckInResultSchema,
    CheckInTicketSchema,
    OrganizerAttendeeSchema,
    PaymentProofSchema,
    RejectSchema,
    TicketSchema,
    TransactionCreateSchema,
    TransactionFilterSchema,
    TransactionSchema,
)

__all__ = [
    "AttendeeSchema",
    "CheckInResultSchema",
    "CheckInTicketSchema",
    "CouponIssueSchema",
    "CouponSchema",
    "OrganizerAttendeeSchema",
    "PaymentProofSchema",
    "PointsGrantSchema",
    "PointsLedgerEntrySchema",
    "PointsSummarySchema",
    "RejectSchema",
    "TicketSchema",
    "TransactionCreateSchema",
    "TransactionFilterSchema",
    "TransactionSchema",
    "VoucherCreateSchema",
    "VoucherSchema",
]
