"""System checks for the role rules table."""

from django.core.checks import Error, register

from .models import Role
from .services import AccessControlService


@register()
def every_role_has_rules(app_configs, **kwargs):
    """Ensure each Role has an entry in AccessControlService.RULES.

    A role without rules would silently deny every action, which is almost
    certainly a configuration mistake after adding a role.
    """
    errors: list[Error] = []

    for role in Role:
        if role not in AccessControlService.RULES:
            errors.append(
                Error(
                    f"Role {role.value} has no entry in AccessControlService.RULES.",
                    obj=AccessControlService,
                    id="access_control.E001",
                )
            )

    return errors
