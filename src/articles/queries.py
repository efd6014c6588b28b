"""Composable filters, ordering, and paging for article listings.

Each clause turns one optional parameter into a ``Q``. An absent parameter
yields the empty ``Q()``, which the ORM treats as "always true", so clauses can
be combined in any order and any subset without changing the meaning of the
others. All clauses are joined by ``conjunction``.
"""

import operator
from dataclasses import dataclass, field
from datetime import datetime
from functools import reduce
from typing import Iterable, Optional, Sequence

from django.db.models import Q, QuerySet
from django.utils import timezone

from .visibility import published_filter

DEFAULT_PAGE_SIZE = 20

# Accepted sort names (lower-cased) -> model field.
SORT_FIELDS = {
    "date": "created_at",
    "createdat": "created_at",
    "created_at": "created_at",
    "popularity": "view_count",
    "viewcount": "view_count",
    "view_count": "view_count",
    "title": "title",
}
DEFAULT_SORT_FIELD = "created_at"


def conjunction(*clauses: Optional[Q]) -> Q:
    """AND the given clauses together; None and empty clauses are no-ops."""

    return reduce(operator.and_, (clause for clause in clauses if clause is not None), Q())


def disjunction(clauses: Iterable[Q]) -> Q:
    """OR the given clauses; no clauses means no restriction."""

    clauses = list(clauses)
    if not clauses:
        return Q()
    return reduce(operator.or_, clauses)


def keyword_clause(keyword: Optional[str]) -> Q:
    if not keyword or not keyword.strip():
        return Q()
    keyword = keyword.strip()
    return Q(title__icontains=keyword) | Q(content__icontains=keyword)


def author_clause(author_id: Optional[int]) -> Q:
    if author_id is None:
        return Q()
    return Q(author_id=author_id)


def category_clause(category: Optional[str]) -> Q:
    if not category or not category.strip():
        return Q()
    return Q(category__iexact=category.strip())


def tags_clause(tags: Optional[Sequence[str]]) -> Q:
    """Match articles carrying any of ``tags`` (substring, case-insensitive)."""

    wanted = [tag.strip() for tag in tags or () if tag and tag.strip()]
    return disjunction(Q(tags__icontains=tag) for tag in wanted)


def created_range_clause(after: Optional[datetime], before: Optional[datetime]) -> Q:
    """Inclusive bounds on creation time; each bound is optional."""

    return conjunction(
        Q(created_at__gte=after) if after is not None else None,
        Q(created_at__lte=before) if before is not None else None,
    )


def published_clause(published_only: bool, now: datetime) -> Q:
    if not published_only:
        return Q()
    return published_filter(now)


def flag_clause(field_name: str, requested: Optional[bool]) -> Q:
    """Require ``field_name`` to be true when requested; otherwise no-op."""

    if not requested:
        return Q()
    return Q(**{field_name: True})


def resolve_ordering(sort: Optional[str], order: Optional[str]) -> tuple[str, ...]:
    """Map a sort name and direction to ORM ordering; unknown names use creation date."""

    sort_field = SORT_FIELDS.get((sort or "").strip().lower(), DEFAULT_SORT_FIELD)
    prefix = "" if (order or "").strip().lower() == "asc" else "-"
    # id breaks ties so pages do not overlap.
    return f"{prefix}{sort_field}", f"{prefix}id"


@dataclass(frozen=True)
class ArticleQuery:
    """Listing parameters; every filter is optional."""

    keyword: Optional[str] = None
    author_id: Optional[int] = None
    category: Optional[str] = None
    tags: Sequence[str] = field(default_factory=tuple)
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None
    published_only: bool = True
    featured: Optional[bool] = None
    pinned: Optional[bool] = None
    sort: Optional[str] = None
    order: Optional[str] = None
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class PageWindow:
    """Zero-based page index and page size."""

    page: int = 0
    size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return max(self.page, 0) * self.limit

    @property
    def limit(self) -> int:
        return max(self.size, 1)


@dataclass(frozen=True)
class Page:
    items: list
    window: PageWindow
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.window.limit - 1) // self.window.limit


@dataclass(frozen=True)
class QuerySpecification:
    """A built listing query: predicate, ordering, and page window."""

    predicate: Q
    ordering: tuple[str, ...]
    window: PageWindow

    def apply(self, queryset: QuerySet) -> QuerySet:
        """Filter and order ``queryset`` (no paging)."""
        return queryset.filter(self.predicate).order_by(*self.ordering)

    def page(self, queryset: QuerySet) -> Page:
        """Evaluate one page of ``queryset`` along with the total match count."""
        matching = self.apply(queryset)
        total = matching.count()
        start = self.window.offset
        items = list(matching[start:start + self.window.limit])
        return Page(items=items, window=self.window, total=total)


class QuerySpecificationBuilder:
    """Build a QuerySpecification from an ArticleQuery.

    ``now`` pins the clock used by the published-only clause; it defaults to
    the current time when the builder is created.
    """

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or timezone.now()

    def predicate(self, query: ArticleQuery) -> Q:
        return conjunction(
            keyword_clause(query.keyword),
            author_clause(query.author_id),
            category_clause(query.category),
            tags_clause(query.tags),
            created_range_clause(query.created_after, query.created_before),
            published_clause(query.published_only, self.now),
            flag_clause("featured", query.featured),
            flag_clause("pinned", query.pinned),
        )

    def build(self, query: ArticleQuery) -> QuerySpecification:
        return QuerySpecification(
            predicate=self.predicate(query),
            ordering=resolve_ordering(query.sort, query.order),
            window=PageWindow(page=query.page, size=query.size),
        )


__all__ = [
    "ArticleQuery",
    "Page",
    "PageWindow",
    "QuerySpecification",
    "QuerySpecificationBuilder",
    "conjunction",
    "resolve_ordering",
]
