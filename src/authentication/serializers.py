"""Serializers for authentication flows (register, login, profile)."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from access_control.models import Role
from .managers import MAX_PASSWORD_BYTES, password_too_long

User = get_user_model()

PASSWORD_TOO_LONG = f"Ensure this field has no more than {MAX_PASSWORD_BYTES} bytes."


def _check_password_length(value: str) -> str:
    if password_too_long(value):
        raise serializers.ValidationError(PASSWORD_TOO_LONG)
    return value


class RegisterSerializer(serializers.Serializer):
    """Validate the registration payload; role defaults to Reader."""

    username = serializers.CharField(min_length=2, max_length=100)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)
    role = serializers.ChoiceField(choices=Role.choices, required=False, default=Role.READER)

    def validate_password(self, value):
        return _check_password_length(value)


class LoginSerializer(serializers.Serializer):
    """Username/password credentials."""

    username = serializers.CharField()
    password = serializers.CharField(write_only=True)


class AuthResponseSerializer(serializers.Serializer):
    """Token plus the identity it was issued for."""

    token = serializers.CharField()
    id = serializers.IntegerField()
    username = serializers.CharField()
    email = serializers.EmailField()
    role = serializers.CharField()

    @classmethod
    def for_user(cls, user, token: str) -> dict:
        return cls(
            {
                "token": token,
                "id": user.pk,
                "username": user.username,
                "email": user.email,
                "role": user.role,
            }
        ).data


class UserProfileSerializer(serializers.ModelSerializer):
    """Read-only profile payload including the number of articles authored."""

    article_count = serializers.SerializerMethodField()

    class Meta:
        """Expose identity fields, role, and authored article count."""
        model = User
        fields = ["id", "username", "email", "role", "article_count"]
        read_only_fields = fields

    def get_article_count(self, obj) -> int:
        return obj.articles.count()


class ProfileUpdateSerializer(serializers.Serializer):
    """Optional profile changes; a new password needs the current one."""

    username = serializers.CharField(min_length=2, max_length=100, required=False)
    email = serializers.EmailField(required=False)
    current_password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    new_password = serializers.CharField(write_only=True, required=False, min_length=6)

    def validate_new_password(self, value):
        return _check_password_length(value)
