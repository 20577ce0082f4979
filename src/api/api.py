from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI
from ninja_jwt.controller import NinjaJWTDefaultController

from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers.backoffice import BackofficeController
from events.controllers.check_in import CheckInController
from events.controllers.events import EventCommerceController
from events.controllers.me import MeController
from events.controllers.organizer import OrganizerController
from events.controllers.transactions import TransactionController
from events.exceptions import MarketplaceError
from notifications.controllers import NotificationController

from .exception_handlers import handle_django_validation_error, handle_general_exception, handle_marketplace_error

api = NinjaExtraAPI(
    title="Boxoffice API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Boxoffice API {settings.VERSION}",
    app_name=f"boxoffice-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], url_name="version", response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], url_name="healthcheck", response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    # Auth
    NinjaJWTDefaultController,
    # Order lifecycle
    EventCommerceController,
    TransactionController,
    MeController,
    OrganizerController,
    CheckInController,
    BackofficeController,
    # Notifications
    NotificationController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    MarketplaceError: handle_marketplace_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
