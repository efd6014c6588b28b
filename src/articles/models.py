"""Article model: ownership, publication schedule, and listing metadata."""

from typing import Iterable

from django.conf import settings
from django.db import models


def split_tags(raw: str | None) -> list[str]:
    """Parse a stored comma-separated tag string into a list."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def join_tags(tags: Iterable[str]) -> str:
    """Normalize tags into the stored form: trimmed, unique, order kept.

    Uniqueness ignores case, the first spelling wins.
    """
    kept: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        tag = tag.strip()
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            kept.append(tag)
    return ",".join(kept)


class Article(models.Model):
    """A piece of content owned by its author.

    ``published_at`` is the only publication field: visibility is always
    derived from it by ``articles.visibility.classify``.
    """

    title = models.CharField(max_length=500)
    content = models.TextField(blank=True, default="")
    # Ownership is fixed at creation; serializers expose only author_id.
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="articles")
    category = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    tags = models.CharField(max_length=500, blank=True, default="")
    published_at = models.DateTimeField(blank=True, null=True, db_index=True)
    view_count = models.PositiveBigIntegerField(default=0, db_index=True)
    featured = models.BooleanField(default=False, db_index=True)
    pinned = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title

    @property
    def tag_list(self) -> list[str]:
        return split_tags(self.tags)

    @property
    def visibility(self):
        """Current Draft/Scheduled/Published state."""
        from .visibility import classify

        return classify(self.published_at)


__all__ = ["Article", "join_tags", "split_tags"]
