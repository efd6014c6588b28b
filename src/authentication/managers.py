"""Custom user manager handling bcrypt hashing and verification."""

import bcrypt
from django.contrib.auth.base_user import BaseUserManager

from access_control.models import Role

# bcrypt rejects passwords longer than this.
MAX_PASSWORD_BYTES = 72


def password_too_long(raw_password: str) -> bool:
    return len(raw_password.encode()) > MAX_PASSWORD_BYTES


class UserManager(BaseUserManager):
    """Manager to create users with bcrypt password hashes."""

    use_in_migrations = True

    def create_user(self, username: str, email: str, password: str | None = None, **extra_fields):
        """Create a user with a bcrypt-hashed password; role defaults to Reader."""
        if not username:
            raise ValueError("The Username must be set")
        if not email:
            raise ValueError("The Email must be set")
        if password is None:
            raise ValueError("Password must be provided")
        extra_fields.setdefault("role", Role.READER)
        user = self.model(username=username.strip(), email=self.normalize_email(email), **extra_fields)
        user.password_hash = self.hash_password(password)
        user.save(using=self._db)
        return user

    @staticmethod
    def hash_password(raw_password: str) -> str:
        """Hash a raw password using bcrypt and return the utf-8 string."""
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(raw_password.encode(), salt)
        return hashed.decode()

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        """Verify raw password against stored bcrypt hash."""

        if not user.password_hash or password_too_long(raw_password):
            return False
        return bcrypt.checkpw(raw_password.encode(), user.password_hash.encode("utf-8"))


__all__ = ["MAX_PASSWORD_BYTES", "UserManager", "password_too_long"]
