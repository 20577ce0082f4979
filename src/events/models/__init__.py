from .event import Event
from .points import PointsLedgerEntry
from .promotion import Coupon, Voucher
from .ticket import Ticket, TicketType
from .transaction import Transaction

__all__ = [
    "Coupon",
    "Event",
    "PointsLedgerEntry",
    "Ticket",
    "TicketType",
    "Transaction",
    "Voucher",
]
