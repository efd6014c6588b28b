"""Article endpoints: filtered listing, visibility-aware reads, and gated writes."""

import logging

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework.decorators import action
from rest_framework.exceptions import AuthenticationFailed, NotFound

from access_control.permissions import ArticlePermission
from core.authentication import get_principal
from core.response import BaseViewSet, api_response, page_payload
from .models import Article
from .queries import ArticleQuery, QuerySpecificationBuilder
from .serializers import ArticleListParamsSerializer, ArticleSerializer
from .visibility import is_visible_to

logger = logging.getLogger(__name__)

User = get_user_model()


class ArticleViewSet(BaseViewSet):
    serializer_class = ArticleSerializer
    permission_classes = [ArticlePermission]
    queryset = Article.objects.all()

    @extend_schema(parameters=[ArticleListParamsSerializer])
    def list(self, request, *args, **kwargs):
        """List articles matching the query-string filters, one page at a time.

        By default only published articles are listed. ``publishedOnly=false``
        lifts that restriction for listings only; single reads still apply
        visibility rules.
        """
        params = ArticleListParamsSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        query = ArticleQuery(**params.validated_data)

        spec = QuerySpecificationBuilder().build(query)
        page = spec.page(self.get_queryset())
        results = self.get_serializer(page.items, many=True).data
        return api_response(page_payload(results, page))

    def retrieve(self, request, *args, **kwargs):
        """Return one article, or 404 if it is hidden from the caller."""
        article = self.get_object()
        if not is_visible_to(article, get_principal(request)):
            raise NotFound()
        return api_response(self.get_serializer(article).data)

    def perform_create(self, serializer):
        """Attach the current user as author on create."""
        principal = get_principal(self.request)
        author = User.objects.filter(pk=principal.user_id, is_active=True).first()
        if author is None:
            raise AuthenticationFailed("User not found or inactive")
        article = serializer.save(author=author)
        logger.info("Article %s created by user id=%s", article.pk, author.pk)

    def perform_update(self, serializer):
        article = serializer.save()
        logger.info("Article %s updated by user id=%s", article.pk, get_principal(self.request).user_id)

    def perform_destroy(self, instance):
        article_id = instance.pk
        instance.delete()
        logger.info("Article %s deleted by user id=%s", article_id, get_principal(self.request).user_id)

    @action(detail=False, methods=["get"])
    def categories(self, request):
        """Distinct non-empty category names, sorted."""
        names = (
            Article.objects.exclude(category__isnull=True)
            .exclude(category="")
            .order_by("category")
            .values_list("category", flat=True)
            .distinct()
        )
        return api_response(list(names))


__all__ = ["ArticleViewSet"]
