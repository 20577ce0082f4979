"""Domain errors of the order lifecycle.

Every error carries a stable machine-readable code and the HTTP status the API
renders it with; see ``api.exception_handlers.handle_marketplace_error``.
"""

from enum import StrEnum

from ninja_extra import status


class ErrorCode(StrEnum):
    OUT_OF_STOCK = "OUT_OF_STOCK"
    INVALID_VOUCHER = "INVALID_VOUCHER"
    INVALID_COUPON = "INVALID_COUPON"
    INSUFFICIENT_POINTS = "INSUFFICIENT_POINTS"
    INVALID_STATE = "INVALID_STATE"
    EXPIRED = "EXPIRED"
    NOT_FOUND = "NOT_FOUND"
    NOT_READY = "NOT_READY"
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    EVENT_NOT_ON_SALE = "EVENT_NOT_ON_SALE"
    INVALID_CART = "INVALID_CART"


class MarketplaceError(Exception):
    """Base class for errors a caller can act on."""

    code: ErrorCode
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "The request could not be completed."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class OutOfStock(MarketplaceError):
    code = ErrorCode.OUT_OF_STOCK
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Not enough seats left for this ticket type."


class InvalidVoucher(MarketplaceError):
    code = ErrorCode.INVALID_VOUCHER
    default_detail = "The voucher cannot be applied to this purchase."


class InvalidCoupon(MarketplaceError):
    code = ErrorCode.INVALID_COUPON
    default_detail = "The coupon cannot be applied to this purchase."


class InsufficientPoints(MarketplaceError):
    code = ErrorCode.INSUFFICIENT_POINTS
    default_detail = "You do not have enough points."


class InvalidCart(MarketplaceError):
    code = ErrorCode.INVALID_CART
    default_detail = "The cart is not valid."


class EventNotOnSale(MarketplaceError):
    code = ErrorCode.EVENT_NOT_ON_SALE
    default_detail = "Tickets for this event are not on sale."


class InvalidState(MarketplaceError):
    code = ErrorCode.INVALID_STATE
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The transaction is not in a state that allows this action."


class Expired(MarketplaceError):
    code = ErrorCode.EXPIRED
    status_code = status.HTTP_410_GONE
    default_detail = "The payment window for this transaction has closed."


class NotFound(MarketplaceError):
    code = ErrorCode.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."


class NotReady(MarketplaceError):
    code = ErrorCode.NOT_READY
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Tickets are issued once the transaction is confirmed."


class TokenNotFound(MarketplaceError):
    code = ErrorCode.TOKEN_NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Unknown ticket."


class Forbidden(MarketplaceError):
    code = ErrorCode.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."
