"""Middleware resolving the bearer token into a request principal."""

import logging
from typing import Optional

from django.utils.deprecation import MiddlewareMixin

from authentication.principal import SessionPrincipal
from authentication.tokens import InvalidToken, TokenAuthenticator

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(MiddlewareMixin):
    """Verify the access token, if any, and attach ``request.principal``.

    A missing, malformed, forged or expired token leaves the request
    anonymous (``request.principal = None``). Endpoints that need an
    authenticated caller answer 401 themselves.
    """

    def process_request(self, request):  # type: ignore[override]
        """Set ``request.principal`` from the Bearer token if present."""
        request.principal = self._resolve(request.META.get("HTTP_AUTHORIZATION", ""))
        return None

    @staticmethod
    def _resolve(auth_header: str) -> Optional[SessionPrincipal]:
        if not auth_header or not auth_header.startswith("Bearer "):
            return None

        token = auth_header.split(" ", 1)[1].strip()
        if not token:
            return None

        try:
            return TokenAuthenticator().verify(token)
        except InvalidToken:
            logger.debug("Ignoring invalid bearer token; request continues anonymously")
            return None


__all__ = ["JWTAuthMiddleware"]
