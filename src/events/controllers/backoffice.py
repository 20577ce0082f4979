from django.shortcuts import get_object_or_404
from ninja_extra import ControllerBase, api_controller, route, status

from accounts.models import MarketplaceUser
from common.authentication import StaffJWTAuth
from common.throttling import WriteThrottle
from events import schema
from events.models import Coupon, PointsLedgerEntry
from events.service import points_service, promotion_service


@api_controller("/admin", auth=StaffJWTAuth(), tags=["Backoffice"], throttle=WriteThrottle())
class BackofficeController(ControllerBase):
    """Staff-only rewards management."""

    @route.post("/points", url_name="grant_points", response={201: schema.PointsLedgerEntrySchema})
    def grant_points(self, payload: schema.PointsGrantSchema) -> tuple[int, PointsLedgerEntry]:
        """Credit points to a user."""
        user = get_object_or_404(MarketplaceUser, pk=payload.user_id)
        entry = points_service.grant_points(
            user, payload.amount, description=payload.description, expires_at=payload.expires_at
        )
        return status.HTTP_201_CREATED, entry

    @route.post("/coupons", url_name="issue_coupon", response={201: schema.CouponSchema})
    def issue_coupon(self, payload: schema.CouponIssueSchema) -> tuple[int, Coupon]:
        """Issue a personal coupon to a user."""
        user = get_object_or_404(MarketplaceUser, pk=payload.user_id)
        coupon = promotion_service.issue_coupon(
            user, payload.discount_amount, code=payload.code, expires_at=payload.expires_at
        )
        return status.HTTP_201_CREATED, coupon
