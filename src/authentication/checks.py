"""System checks for session token configuration."""

from django.conf import settings
from django.core.checks import Warning, register

from .tokens import MIN_SECRET_LENGTH, uses_fallback_secret


@register()
def jwt_secret_is_long_enough(app_configs, **kwargs):
    """Warn when JWT_SECRET is too short and the built-in fallback signs tokens."""
    if not uses_fallback_secret(getattr(settings, "JWT_SECRET", None)):
        return []
    return [
        Warning(
            f"JWT_SECRET is shorter than {MIN_SECRET_LENGTH} characters; session "
            f"tokens are signed with the built-in fallback secret.",
            hint="Set JWT_SECRET to a random value of at least 32 characters.",
            id="authentication.W001",
        )
    ]
