"""Exception handlers for the API."""

import typing as t
from copy import deepcopy

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import MarketplaceError

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Log an unexpected exception with request metadata and answer 500."""
    if request.method in ("POST", "PUT", "PATCH") and request.headers.get("Content-Type") == "application/json":
        try:
            json_payload = obfuscate(orjson.loads(request.body))
        except orjson.JSONDecodeError:  # pragma: no cover
            json_payload = None
    else:
        json_payload = None
    logger.exception(
        "internal_server_error",
        path=f"{request.method} {request.path}",
        request_headers=obfuscate(dict(request.headers)),
        query=obfuscate(request.GET.dict()),
        json_payload=json_payload,
    )
    data = {"detail": "Internal Server Error."}
    if settings.DEBUG:  # pragma: no cover
        data["error"] = repr(exc)
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a model validation error raised by full_clean."""
    logger.warning("validation_error", path=request.path)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(exc.messages)}  # type: ignore[union-attr]
    return Response(status=400, data={"errors": error_dict})


def handle_marketplace_error(request: HttpRequest, exc: MarketplaceError | t.Type[MarketplaceError]) -> Response:
    """Render a domain error as its stable code and a human-readable detail."""
    assert isinstance(exc, MarketplaceError)
    logger.info("marketplace_error", path=request.path, code=exc.code.value, status_code=exc.status_code)
    return Response(status=exc.status_code, data={"code": exc.code.value, "detail": exc.detail})


SENSITIVE_KEYS = {"password", "token", "refresh", "access", "authorization", "cookie", "payment_proof"}


def obfuscate(data: t.Any) -> t.Any:
    """Obfuscate sensitive data in payloads and headers."""
    if not isinstance(data, dict):
        return data
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
