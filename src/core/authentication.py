"""Bridge between JWTAuthMiddleware and DRF's request.user.

The middleware verifies the bearer token once per request and stores the
result on ``request.principal``. DRF's ``Request.user`` normally relies on its
own authentication classes, so this module provides a lightweight
authenticator that surfaces that principal instead of decoding the token a
second time.
"""

from typing import Any, Optional, Tuple

from rest_framework.authentication import BaseAuthentication

from authentication.principal import SessionPrincipal


class MiddlewarePrincipalAuthentication(BaseAuthentication):
    """Expose ``request._request.principal`` (set by middleware) to DRF.

    An absent or invalid token leaves the principal unset, so authentication
    is skipped and the request proceeds anonymously.
    """

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        # DRF's Request wraps the original Django HttpRequest as ``._request``.
        django_request = getattr(request, "_request", None)
        if django_request is None:
            return None

        principal = getattr(django_request, "principal", None)
        if not isinstance(principal, SessionPrincipal):
            return None

        return principal, None

    def authenticate_header(self, request) -> str:
        return 'Bearer realm="api"'


def get_principal(request) -> Optional[SessionPrincipal]:
    """Return the caller's SessionPrincipal, or None for anonymous requests."""

    user = getattr(request, "user", None)
    if isinstance(user, SessionPrincipal):
        return user
    principal = getattr(request, "principal", None)
    if isinstance(principal, SessionPrincipal):
        return principal
    return None


__all__ = ["MiddlewarePrincipalAuthentication", "get_principal"]
