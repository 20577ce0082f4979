import typing as t

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, paginate

from common.authentication import BaseJWTAuth
from common.controllers import UserAwareController
from events import schema
from events.models import Coupon, Transaction
from events.service import points_service, promotion_service
from events.service.transaction_service import transactions_for_buyer


@api_controller("/me", auth=BaseJWTAuth(), tags=["Me"])
class MeController(UserAwareController):
    @route.get(
        "/transactions",
        url_name="my_transactions",
        response=PageNumberPaginationExtra.get_response_schema(schema.TransactionSchema),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def my_transactions(self) -> QuerySet[Transaction]:
        """Your purchases, newest first."""
        return transactions_for_buyer(self.user())

    @route.get("/points", url_name="my_points", response=schema.PointsSummarySchema)
    def my_points(self) -> dict[str, t.Any]:
        """Points balance and ledger history."""
        user = self.user()
        balance = points_service.spendable_balance(user)
        held = points_service.held_points(user)
        return {
            "balance": balance,
            "held": held,
            "available": max(0, balance - held),
            "history": list(points_service.history(user)),
        }

    @route.get("/coupons", url_name="my_coupons", response=list[schema.CouponSchema])
    def my_coupons(self) -> QuerySet[Coupon]:
        """Coupons you can still redeem."""
        return promotion_service.usable_coupons(self.user())
