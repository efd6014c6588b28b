"""App configuration for the access_control Django application."""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    """Holds the role enumeration, authoring rules, and article permission."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"

    def ready(self) -> None:
        """Register the role rules check when the app is loaded."""
        from . import checks  # noqa: F401
