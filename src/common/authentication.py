"""Authentication classes for the boxoffice API."""

import typing as t

from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _
from ninja_extra import status
from ninja_extra.exceptions import APIException
from ninja_jwt.authentication import JWTAuth


class PermissionDenied(APIException):
    """Exception raised when user doesn't have required permissions."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Permission denied")


class BaseJWTAuth(JWTAuth):
    """JWT authentication with optional staff or superuser requirements.

    Plain ``BaseJWTAuth()`` only requires a valid bearer token; the keyword
    arguments tighten it for back-office endpoints such as point grants.
    """

    def __init__(self, *, is_superuser: bool = False, is_staff: bool = False) -> None:
        """Initialize the BaseJWTAuth authentication class.

        Args:
            is_superuser: Whether the user must be a Django superuser.
            is_staff: Whether the user must be a Django staff member.
        """
        self.is_superuser = is_superuser
        self.is_staff = is_staff
        super().__init__()

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate and verify user permissions.

        Raises:
            PermissionDenied: If user doesn't meet required criteria
        """
        user = super().authenticate(request, token)

        if user and not isinstance(user, AnonymousUser):
            if self.is_staff and not getattr(user, "is_staff", False):
                raise PermissionDenied(str(_("Staff access required.")))

            if self.is_superuser and not getattr(user, "is_superuser", False):
                raise PermissionDenied(str(_("Superuser access required.")))

        return user


class StaffJWTAuth(BaseJWTAuth):
    def __init__(self) -> None:
        """Require a staff member."""
        super().__init__(is_staff=True)
