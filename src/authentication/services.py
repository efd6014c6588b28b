"""Account operations: registration, credential checks, and profile updates."""

import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from access_control.models import Role
from .managers import UserManager

logger = logging.getLogger(__name__)

User = get_user_model()

USERNAME_TAKEN = "This username is already taken."
EMAIL_TAKEN = "This email address is already registered."


class ConflictError(Exception):
    """Raised when a username or email is already in use."""


class ProfileUpdateError(Exception):
    """Raised when a password change is missing or has a wrong current password."""


class AccountService:
    """Create users, check credentials, and apply profile changes.

    Uniqueness of username and email is enforced by database constraints. The
    pre-checks only produce a readable message; a duplicate that slips past
    them under concurrency is caught as ``IntegrityError`` and reported the
    same way.
    """

    @classmethod
    def register(cls, username: str, email: str, password: str, role: Optional[str] = None):
        """Create a user; raises ConflictError if username or email is taken."""

        username = username.strip()
        email = email.strip()
        cls._ensure_unique(username=username, email=email)
        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=username,
                    email=email,
                    password=password,
                    role=role or Role.READER,
                )
        except IntegrityError as exc:
            logger.info("Registration conflict for %s", username)
            raise ConflictError(cls._conflict_message(username=username, email=email)) from exc

        logger.info("Registered user %s (id=%s, role=%s)", user.username, user.pk, user.role)
        return user

    @staticmethod
    def authenticate(username: str, password: str):
        """Return the active user for these credentials, or None."""

        user = User.objects.filter(username=username).first()
        if user is None or not user.is_active:
            return None
        if not UserManager.verify_password(user, password):
            return None
        return user

    @classmethod
    def update_profile(
        cls,
        user,
        username: Optional[str] = None,
        email: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ):
        """Apply optional username/email/password changes to ``user``."""

        update_fields: list[str] = []

        if username and username.strip() and username.strip() != user.username:
            username = username.strip()
            cls._ensure_unique(username=username, exclude_pk=user.pk)
            user.username = username
            update_fields.append("username")

        if email and email.strip() and email.strip() != user.email:
            email = email.strip()
            cls._ensure_unique(email=email, exclude_pk=user.pk)
            user.email = email
            update_fields.append("email")

        if new_password:
            if not current_password:
                raise ProfileUpdateError("The current password is required to change the password.")
            if not UserManager.verify_password(user, current_password):
                raise ProfileUpdateError("The current password is incorrect.")
            user.set_password(new_password)
            update_fields.append("password_hash")

        if not update_fields:
            return user

        update_fields.append("updated_at")
        try:
            with transaction.atomic():
                user.save(update_fields=update_fields)
        except IntegrityError as exc:
            raise ConflictError(
                cls._conflict_message(username=user.username, email=user.email, exclude_pk=user.pk)
            ) from exc

        logger.info("Updated profile of user id=%s (%s)", user.pk, ", ".join(update_fields[:-1]))
        return user

    @classmethod
    def _ensure_unique(
        cls,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_pk=None,
    ) -> None:
        others = User.objects.all()
        if exclude_pk is not None:
            others = others.exclude(pk=exclude_pk)
        if username is not None and others.filter(username=username).exists():
            raise ConflictError(USERNAME_TAKEN)
        if email is not None and others.filter(email__iexact=email).exists():
            raise ConflictError(EMAIL_TAKEN)

    @staticmethod
    def _conflict_message(username: str, email: str, exclude_pk=None) -> str:
        others = User.objects.all()
        if exclude_pk is not None:
            others = others.exclude(pk=exclude_pk)
        if others.filter(email__iexact=email).exists() and not others.filter(username=username).exists():
            return EMAIL_TAKEN
        return USERNAME_TAKEN


__all__ = ["AccountService", "ConflictError", "ProfileUpdateError"]
