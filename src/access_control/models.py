"""Closed role enumeration shared by users, tokens, and access decisions."""

from django.db import models


class Role(models.TextChoices):
    """A user's role. No custom roles exist beyond these four."""

    ADMIN = "ADMIN", "Admin"
    EDITOR = "EDITOR", "Editor"
    AUTHOR = "AUTHOR", "Author"
    READER = "READER", "Reader"


__all__ = ["Role"]
