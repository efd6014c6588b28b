"""Shared helpers for tests (user and article creation, authenticated clients)."""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from access_control.models import Role
from articles.models import Article, join_tags
from authentication.managers import UserManager
from authentication.principal import SessionPrincipal
from authentication.tokens import TokenAuthenticator

User = get_user_model()


def create_user(username: str, password: str, role: Role = Role.READER, **extra):
    """Create a user with a bcrypt-hashed password for tests."""

    extra.setdefault("email", f"{username}@example.com")
    return User.objects.create(
        username=username,
        password_hash=UserManager.hash_password(password),
        role=role,
        **extra,
    )


def create_article(author, title: str = "Article", created_at: datetime | None = None, tags=(), **fields):
    """Create an article; ``created_at`` is forced after insert since it is auto-set."""

    article = Article.objects.create(author=author, title=title, tags=join_tags(tags), **fields)
    if created_at is not None:
        Article.objects.filter(pk=article.pk).update(created_at=created_at)
        article.refresh_from_db()
    return article


def make_principal(user_id: int, role: Role, username: str = "someone") -> SessionPrincipal:
    """Build a principal directly, bypassing token issuance."""

    issued = datetime(2026, 1, 1, tzinfo=dt_timezone.utc)
    return SessionPrincipal(
        user_id=user_id,
        username=username,
        role=role,
        issued_at=issued,
        expires_at=issued.replace(year=2027),
    )


def auth_client(user) -> APIClient:
    """Return an APIClient carrying a fresh bearer token for ``user``."""

    token = TokenAuthenticator().issue(user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client
