"""Role- and ownership-based authoring decisions for articles.

Every decision takes the caller's ``SessionPrincipal`` (or ``None`` for an
anonymous caller) as an explicit argument and returns a plain boolean. The
HTTP layer decides whether a ``False`` becomes 401, 403 or 404.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .models import Role


class Action(str, Enum):
    """Mutating actions guarded by role rules."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class RoleRules:
    """Permission flags for one role, split into own vs all articles."""

    can_create: bool = False
    can_update_own: bool = False
    can_update_all: bool = False
    can_delete_own: bool = False
    can_delete_all: bool = False


_FULL_ACCESS = RoleRules(
    can_create=True,
    can_update_own=True,
    can_update_all=True,
    can_delete_own=True,
    can_delete_all=True,
)


class AccessControlService:
    """Pure decision functions over the role x action x ownership matrix."""

    RULES: Mapping[Role, RoleRules] = {
        Role.ADMIN: _FULL_ACCESS,
        Role.EDITOR: _FULL_ACCESS,
        Role.AUTHOR: RoleRules(can_create=True, can_update_own=True, can_delete_own=True),
        Role.READER: RoleRules(),
    }

    @classmethod
    def rules_for(cls, principal) -> Optional[RoleRules]:
        """Return the rules for the principal's role, or None when anonymous."""

        if principal is None or not getattr(principal, "is_authenticated", False):
            return None
        return cls.RULES.get(principal.role)

    @classmethod
    def decide(cls, action: Action, principal, owner_id: Any = None) -> bool:
        """Return True if ``principal`` may perform ``action``.

        ``owner_id`` is the article's author id; it is ignored for CREATE.
        """

        rules = cls.rules_for(principal)
        if rules is None:
            return False

        if action is Action.CREATE:
            return rules.can_create
        if action is Action.UPDATE:
            return rules.can_update_all or (rules.can_update_own and principal.owns(owner_id))
        if action is Action.DELETE:
            return rules.can_delete_all or (rules.can_delete_own and principal.owns(owner_id))
        return False

    @classmethod
    def can_create(cls, principal) -> bool:
        return cls.decide(Action.CREATE, principal)

    @classmethod
    def can_update(cls, principal, owner_id: Any) -> bool:
        return cls.decide(Action.UPDATE, principal, owner_id)

    @classmethod
    def can_delete(cls, principal, owner_id: Any) -> bool:
        return cls.decide(Action.DELETE, principal, owner_id)

    @classmethod
    def can_manage(cls, principal, owner_id: Any) -> bool:
        """Update-or-delete check, used to reveal drafts and scheduled articles."""

        return cls.can_update(principal, owner_id) or cls.can_delete(principal, owner_id)


__all__ = ["AccessControlService", "Action", "RoleRules"]
