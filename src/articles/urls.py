"""Routing for the Article viewset.

The trailing slash is optional so ``/articles`` and ``/articles/`` both resolve.
"""

from rest_framework.routers import SimpleRouter

from .views import ArticleViewSet

router = SimpleRouter(trailing_slash="/?")
router.register(r"articles", ArticleViewSet, basename="article")

urlpatterns = router.urls
