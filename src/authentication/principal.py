"""Request-scoped identity rebuilt from a verified session token."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from access_control.models import Role


@dataclass(frozen=True)
class SessionPrincipal:
    """The verified caller behind a request.

    Built only from verified token claims and never persisted. DRF treats it
    as the authenticated ``request.user``.
    """

    user_id: int
    username: str
    role: Role
    issued_at: datetime
    expires_at: datetime

    is_authenticated = True
    is_anonymous = False

    @property
    def pk(self) -> int:
        return self.user_id

    def owns(self, owner_id: Any) -> bool:
        """Return True if ``owner_id`` is this principal's user id."""
        return owner_id is not None and owner_id == self.user_id

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.username} ({self.role})"


__all__ = ["SessionPrincipal"]
