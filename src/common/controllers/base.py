import typing as t

from ninja_extra import ControllerBase

from accounts.models import MarketplaceUser


class UserAwareController(ControllerBase):
    def user(self) -> MarketplaceUser:
        """Get the user for this request."""
        return t.cast(MarketplaceUser, self.context.request.user)  # type: ignore[union-attr]
