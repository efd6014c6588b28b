"""Serializers for article payloads and listing parameters."""

from datetime import datetime, time

from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from .models import Article, join_tags, split_tags

MAX_SQL_OFFSET = 2**63 - 1


class TagListField(serializers.Field):
    """Tags as a list in JSON, stored as a normalised comma-separated string.

    Accepts either a list of strings or a comma-separated string on input.
    A list element may not itself contain a comma.
    """

    default_error_messages = {
        "invalid": "Expected a list of strings or a comma-separated string.",
        "comma": "Tag {tag!r} may not contain a comma.",
        "max_length": "Ensure the joined tags have no more than {max_length} characters.",
    }

    def to_representation(self, value):
        return split_tags(value)

    def to_internal_value(self, data):
        if isinstance(data, str):
            joined = join_tags(data.split(","))
        elif isinstance(data, (list, tuple)) and all(isinstance(tag, str) for tag in data):
            for tag in data:
                if "," in tag:
                    self.fail("comma", tag=tag)
            joined = join_tags(data)
        else:
            self.fail("invalid")

        max_length = Article._meta.get_field("tags").max_length
        if len(joined) > max_length:
            self.fail("max_length", max_length=max_length)
        return joined


class ArticleSerializer(serializers.ModelSerializer):
    author_id = serializers.IntegerField(read_only=True)
    tags = TagListField(required=False)
    status = serializers.CharField(source="visibility", read_only=True)

    class Meta:
        """Expose article fields while keeping ownership, counters and timestamps read-only."""
        model = Article
        fields = [
            "id",
            "title",
            "content",
            "author_id",
            "category",
            "tags",
            "published_at",
            "status",
            "view_count",
            "featured",
            "pinned",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "author_id", "view_count", "created_at", "updated_at"]


def _start_of_day(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def _end_of_day(day):
    return timezone.make_aware(datetime.combine(day, time.max))


class ArticleListParamsSerializer(serializers.Serializer):
    """Parse ``GET /articles/`` query parameters into ArticleQuery fields.

    Field names follow the public query-string names; ``source`` maps them onto
    ArticleQuery attribute names.
    """

    keyword = serializers.CharField(required=False, allow_blank=True)
    sort = serializers.CharField(required=False, allow_blank=True)
    order = serializers.CharField(required=False, allow_blank=True)
    authorId = serializers.IntegerField(source="author_id", required=False)
    category = serializers.CharField(required=False, allow_blank=True)
    tags = serializers.CharField(required=False, allow_blank=True)
    dateFrom = serializers.DateField(source="created_after", required=False)
    dateTo = serializers.DateField(source="created_before", required=False)
    publishedOnly = serializers.BooleanField(source="published_only", required=False, default=True)
    featured = serializers.BooleanField(required=False, default=False)
    pinned = serializers.BooleanField(required=False, default=False)
    page = serializers.IntegerField(required=False, min_value=0, default=0)
    size = serializers.IntegerField(required=False, min_value=1)

    def validate_tags(self, value):
        return tuple(tag.strip() for tag in value.split(",") if tag.strip())

    def validate_page(self, value):
        # page * size is the SQL OFFSET and must fit a signed 64-bit integer.
        max_page = MAX_SQL_OFFSET // settings.ARTICLES_MAX_PAGE_SIZE - 1
        if value > max_page:
            raise serializers.ValidationError(f"Ensure this value is less than or equal to {max_page}.")
        return value

    def validate_size(self, value):
        max_size = settings.ARTICLES_MAX_PAGE_SIZE
        if value > max_size:
            raise serializers.ValidationError(f"Ensure this value is less than or equal to {max_size}.")
        return value

    def validate(self, attrs):
        if attrs.get("created_after") is not None:
            attrs["created_after"] = _start_of_day(attrs["created_after"])
        if attrs.get("created_before") is not None:
            # dateTo covers the whole day.
            attrs["created_before"] = _end_of_day(attrs["created_before"])
        attrs.setdefault("size", settings.ARTICLES_PAGE_SIZE)
        return attrs


__all__ = ["ArticleListParamsSerializer", "ArticleSerializer", "TagListField"]
