"""Custom exception handling to enforce the API error envelope."""

import logging
from typing import Any

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from authentication.services import ConflictError

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Authentication credentials were not provided or are invalid."
FORBIDDEN_MESSAGE = "You do not have permission to perform this action on this resource."
NOT_FOUND_MESSAGE = "Not found."


def _normalize_errors(payload: Any) -> list[Any]:
    """Convert DRF's response.data into a list for the envelope."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and "detail" in payload:
        # Common DRF pattern: {"detail": "..."}
        return [payload["detail"]]
    return [payload]


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap errors in the `{ "data": null, "errors": [...] }` shape.

    - Username/email conflicts become 409 with their message.
    - Storage failures are logged and answered 503.
    - 401, 403 and 404 always carry one fixed message each, so a hidden
      article cannot be told apart from a missing one and an expired token
      cannot be told apart from a forged one.
    """

    if isinstance(exc, ConflictError):
        return Response(
            {"data": None, "errors": [str(exc)]},
            status=status.HTTP_409_CONFLICT,
        )

    # Treat database errors as a temporary service outage and still respect the
    # global envelope format instead of returning Django's HTML 500 page.
    if isinstance(exc, DatabaseError):
        logger.exception("Storage failure while handling %s", _view_name(context))
        return Response(
            {"data": None, "errors": ["Service temporarily unavailable."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = drf_exception_handler(exc, context)

    if response is None:
        return response

    # DRF answers 403 for NotAuthenticated when no authenticate_header is
    # available; the API contract is 401 for both.
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code >= 400:
        if response.status_code == status.HTTP_401_UNAUTHORIZED:
            errors = [UNAUTHORIZED_MESSAGE]
        elif response.status_code == status.HTTP_403_FORBIDDEN:
            errors = [FORBIDDEN_MESSAGE]
        elif response.status_code == status.HTTP_404_NOT_FOUND:
            errors = [NOT_FOUND_MESSAGE]
        else:
            errors = _normalize_errors(response.data)

        response.data = {"data": None, "errors": errors}

    return response


def _view_name(context: dict[str, Any]) -> str:
    view = context.get("view")
    return type(view).__name__ if view is not None else "request"
