"""Publication state of articles and who may see them.

An article's state is never stored. It is derived from ``published_at`` and
the current time:

- DRAFT: ``published_at`` is unset.
- SCHEDULED: ``published_at`` is strictly after now.
- PUBLISHED: ``published_at`` is at or before now.

Published articles are visible to everyone. Drafts and scheduled articles are
visible only to callers allowed to update or delete that article; everyone
else must be told the article does not exist.
"""

from datetime import datetime
from typing import Optional

from django.db import models
from django.db.models import Q
from django.utils import timezone

from access_control.services import AccessControlService


class VisibilityState(models.TextChoices):
    DRAFT = "draft", "Draft"
    SCHEDULED = "scheduled", "Scheduled"
    PUBLISHED = "published", "Published"


def classify(published_at: Optional[datetime], now: Optional[datetime] = None) -> VisibilityState:
    """Return the VisibilityState for ``published_at`` at ``now``."""

    if published_at is None:
        return VisibilityState.DRAFT
    if published_at > (now or timezone.now()):
        return VisibilityState.SCHEDULED
    return VisibilityState.PUBLISHED


def published_filter(now: Optional[datetime] = None) -> Q:
    """ORM predicate matching exactly the articles ``classify`` calls PUBLISHED."""

    return Q(published_at__isnull=False, published_at__lte=now or timezone.now())


def is_visible_to(article, principal, now: Optional[datetime] = None) -> bool:
    """Return True if ``principal`` (None when anonymous) may read ``article``."""

    if classify(article.published_at, now) == VisibilityState.PUBLISHED:
        return True
    return AccessControlService.can_manage(principal, article.author_id)


__all__ = ["VisibilityState", "classify", "is_visible_to", "published_filter"]
