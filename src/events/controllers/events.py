from uuid import UUID

from ninja_extra import api_controller, route, status

from common.authentication import BaseJWTAuth
from common.controllers import UserAwareController
from common.schema import ErrorResponse, ValidationErrorResponse
from common.throttling import WriteThrottle
from events import schema
from events.models import Transaction, Voucher
from events.service import promotion_service
from events.service.transaction_service import TransactionLifecycle


@api_controller("/events", auth=BaseJWTAuth(), tags=["Events"])
class EventCommerceController(UserAwareController):
    @route.post(
        "/{event_id}/transactions",
        url_name="create_transaction",
        response={
            201: schema.TransactionSchema,
            400: ErrorResponse,
            404: ErrorResponse,
            409: ErrorResponse,
        },
        throttle=WriteThrottle(),
    )
    def create_transaction(self, event_id: UUID, payload: schema.TransactionCreateSchema) -> tuple[int, Transaction]:
        """Reserve seats and open a payment window.

        Prices and discounts are computed server-side from the cart; vouchers,
        coupons and points are re-validated on every call.
        """
        txn = TransactionLifecycle().create(self.user(), event_id, payload.to_cart())
        return status.HTTP_201_CREATED, txn

    @route.post(
        "/{event_id}/vouchers",
        url_name="create_voucher",
        response={201: schema.VoucherSchema, 400: ValidationErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def create_voucher(self, event_id: UUID, payload: schema.VoucherCreateSchema) -> tuple[int, Voucher]:
        """Create a discount code for one of your events."""
        voucher = promotion_service.create_voucher(event_id, self.user(), **payload.model_dump())
        return status.HTTP_201_CREATED, voucher
