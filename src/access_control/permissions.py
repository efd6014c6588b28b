"""DRF permission mapping HTTP methods onto AccessControlService decisions."""

from rest_framework import permissions

from core.authentication import get_principal
from .services import AccessControlService


class ArticlePermission(permissions.BasePermission):
    """Gate article writes by role and ownership.

    Safe methods always pass here: whether a draft or scheduled article may be
    read is a visibility question answered by the view, which reports hidden
    articles as not found rather than forbidden.
    """

    message = "You do not have permission to perform this action on this resource."

    def has_permission(self, request, view) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True

        principal = get_principal(request)
        if principal is None:
            return False

        if request.method == "POST":
            return AccessControlService.can_create(principal)
        # Update and delete are decided per object.
        return request.method in ("PUT", "PATCH", "DELETE")

    def has_object_permission(self, request, view, obj) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True

        principal = get_principal(request)
        if request.method in ("PUT", "PATCH"):
            return AccessControlService.can_update(principal, obj.author_id)
        if request.method == "DELETE":
            return AccessControlService.can_delete(principal, obj.author_id)
        return False


__all__ = ["ArticlePermission"]
