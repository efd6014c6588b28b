"""App configuration for authentication components."""

import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class AuthenticationConfig(AppConfig):
    """Authentication app holds the custom User model, tokens, and accounts."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"

    def ready(self) -> None:
        """Register token checks and report a fallback signing secret."""
        from . import checks  # noqa: F401
        from .tokens import uses_fallback_secret

        if uses_fallback_secret(getattr(settings, "JWT_SECRET", None)):
            logger.warning("JWT_SECRET is too short; signing tokens with the fallback secret")
