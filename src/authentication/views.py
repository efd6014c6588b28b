"""Authentication endpoints: register, login, and the caller's profile."""

from typing import Any

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, ValidationError

from core.authentication import get_principal
from core.response import BaseAPIView, api_response
from .serializers import (
    AuthResponseSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserProfileSerializer,
)
from .services import AccountService, ProfileUpdateError
from .tokens import TokenAuthenticator

User = get_user_model()


class RegisterView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    @extend_schema(request=RegisterSerializer, responses={201: AuthResponseSerializer})
    def post(self, request):
        """Register a new user and return a session token for them."""
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = AccountService.register(**serializer.validated_data)
        token = TokenAuthenticator().issue(user)
        return api_response(AuthResponseSerializer.for_user(user, token), status=status.HTTP_201_CREATED)


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    @extend_schema(request=LoginSerializer, responses={200: AuthResponseSerializer})
    def post(self, request):
        """Check credentials and issue a session token."""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = AccountService.authenticate(**serializer.validated_data)
        if user is None:
            raise AuthenticationFailed("Invalid credentials")
        token = TokenAuthenticator().issue(user)
        return api_response(AuthResponseSerializer.for_user(user, token))


class MeView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    @extend_schema(responses={200: UserProfileSerializer})
    def get(self, request):
        """Return the current user's profile."""
        user = _get_current_user(request)
        return api_response(UserProfileSerializer(user).data)

    # noinspection PyMethodMayBeStatic
    @extend_schema(request=ProfileUpdateSerializer, responses={200: UserProfileSerializer})
    def patch(self, request):
        """Update username, email, or password for the current user."""
        user = _get_current_user(request)
        serializer = ProfileUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            AccountService.update_profile(user, **serializer.validated_data)
        except ProfileUpdateError as exc:
            raise ValidationError({"current_password": [str(exc)]}) from exc
        return api_response(UserProfileSerializer(user).data)

    @extend_schema(request=ProfileUpdateSerializer, responses={200: UserProfileSerializer})
    def put(self, request):
        """Alias of PATCH: every profile field is optional."""
        return self.patch(request)


def _get_current_user(request):
    """Load the user behind the request's principal, or raise 401."""
    principal = get_principal(request)
    if principal is None:
        raise NotAuthenticated("Authentication required")
    user = User.objects.filter(pk=principal.user_id).first()
    if user is None or not user.is_active:
        raise AuthenticationFailed("User not found or inactive")
    return user
