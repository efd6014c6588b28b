"""Tests for authentication flows (register, login, profile read and update)."""

from __future__ import annotations

from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from access_control.models import Role
from authentication.services import EMAIL_TAKEN, USERNAME_TAKEN, AccountService
from authentication.tokens import TokenAuthenticator
from tests.utils import auth_client, create_article, create_user


class AuthFlowTests(TestCase):
    """End-to-end tests covering auth endpoints and the envelope they answer with."""

    @classmethod
    def setUpTestData(cls):
        """Seed a default active author with one article."""
        cls.password = "StrongPass123"
        cls.user = create_user("alice", cls.password, Role.AUTHOR)
        create_article(cls.user, title="First")

    def setUp(self):
        """Fresh DRF APIClient per test."""
        self.api_client: APIClient = APIClient()

    def _register(self, **overrides):
        payload = {"username": "newbie", "email": "newbie@example.com", "password": "secret1"}
        payload.update(overrides)
        return self.api_client.post("/auth/register/", payload, format="json")

    def test_register_success(self):
        response = self._register()
        body = response.json()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(body["errors"], [])
        data = body["data"]
        self.assertEqual(data["username"], "newbie")
        self.assertEqual(data["role"], Role.READER)

        principal = TokenAuthenticator().verify(data["token"])
        self.assertEqual(principal.user_id, data["id"])
        self.assertEqual(principal.role, Role.READER)

    def test_register_with_explicit_role(self):
        response = self._register(role="AUTHOR")
        self.assertEqual(response.json()["data"]["role"], Role.AUTHOR)

    def test_register_validation_errors(self):
        for overrides in ({"password": "123"}, {"email": "not-an-email"}, {"username": "x"}, {"role": "ROOT"}):
            with self.subTest(overrides=overrides):
                response = self._register(**overrides)
                self.assertEqual(response.status_code, 400)
                self.assertIsNone(response.json()["data"])

    def test_register_rejects_password_over_72_bytes(self):
        # 40 characters but 80 bytes in UTF-8.
        for password in ("x" * 100, "é" * 40):
            with self.subTest(length=len(password)):
                response = self._register(password=password)
                body = response.json()
                self.assertEqual(response.status_code, 400)
                self.assertIsNone(body["data"])
                self.assertEqual(body["errors"], [{"password": ["Ensure this field has no more than 72 bytes."]}])

    def test_register_accepts_password_of_exactly_72_bytes(self):
        response = self._register(password="p" * 72)
        self.assertEqual(response.status_code, 201)

    def test_register_duplicate_username_conflicts(self):
        response = self._register(username="alice")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["errors"], [USERNAME_TAKEN])

    def test_register_duplicate_email_conflicts(self):
        response = self._register(email="ALICE@example.com")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["errors"], [EMAIL_TAKEN])

    def test_register_race_reported_as_conflict(self):
        """A duplicate that passes the pre-check is caught by the unique constraint."""
        with mock.patch.object(AccountService, "_ensure_unique", return_value=None):
            response = self._register(username="alice", email="other@example.com")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["errors"], [USERNAME_TAKEN])

    def test_login_success_returns_token(self):
        response = self.api_client.post(
            "/auth/login/",
            {"username": "alice", "password": self.password},
            format="json",
        )
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["id"], self.user.id)
        self.assertEqual(data["role"], Role.AUTHOR)
        self.assertEqual(TokenAuthenticator().verify(data["token"]).username, "alice")

    def test_login_invalid_credentials_401(self):
        for payload in (
            {"username": "alice", "password": "wrong-password"},
            {"username": "nobody", "password": self.password},
        ):
            with self.subTest(payload=payload):
                response = self.api_client.post("/auth/login/", payload, format="json")
                body = response.json()
                self.assertEqual(response.status_code, 401)
                self.assertIsNone(body["data"])
                self.assertTrue(body["errors"])

    def test_login_with_overlong_password_401(self):
        response = self.api_client.post(
            "/auth/login/",
            {"username": "alice", "password": "y" * 100},
            format="json",
        )
        body = response.json()
        self.assertEqual(response.status_code, 401)
        self.assertIsNone(body["data"])

    def test_login_inactive_user_401(self):
        create_user("sleepy", "SleepyPass1", is_active=False)
        response = self.api_client.post(
            "/auth/login/",
            {"username": "sleepy", "password": "SleepyPass1"},
            format="json",
        )
        self.assertEqual(response.status_code, 401)

    def test_login_when_database_unavailable_returns_503_with_envelope(self):
        with mock.patch.object(AccountService, "authenticate", side_effect=DatabaseError("DB down")):
            response = self.api_client.post(
                "/auth/login/",
                {"username": "alice", "password": self.password},
                format="json",
            )

        body = response.json()
        self.assertEqual(response.status_code, 503)
        self.assertIsNone(body["data"])
        self.assertTrue(body["errors"])

    def test_me_requires_token(self):
        self.assertEqual(self.api_client.get("/auth/me/").status_code, 401)

        self.api_client.credentials(HTTP_AUTHORIZATION="Bearer garbage")
        self.assertEqual(self.api_client.get("/auth/me/").status_code, 401)

    def test_me_returns_profile(self):
        response = auth_client(self.user).get("/auth/me/")
        self.assertEqual(
            response.json()["data"],
            {
                "id": self.user.id,
                "username": "alice",
                "email": "alice@example.com",
                "role": Role.AUTHOR,
                "article_count": 1,
            },
        )

    def test_me_for_deactivated_user_401(self):
        client = auth_client(self.user)
        self.user.is_active = False
        self.user.save(update_fields=["is_active"])

        self.assertEqual(client.get("/auth/me/").status_code, 401)

    def test_update_username_and_email(self):
        response = auth_client(self.user).patch(
            "/auth/me/",
            {"username": "alice2", "email": "alice2@example.com"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["username"], "alice2")
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, "alice2@example.com")

    def test_update_keeping_own_username_is_allowed(self):
        response = auth_client(self.user).put("/auth/me/", {"username": "alice"}, format="json")
        self.assertEqual(response.status_code, 200)

    def test_update_to_taken_username_conflicts(self):
        create_user("bob", "BobPass123")
        response = auth_client(self.user).patch("/auth/me/", {"username": "bob"}, format="json")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["errors"], [USERNAME_TAKEN])

    def test_password_change_requires_current_password(self):
        client = auth_client(self.user)
        for payload in (
            {"new_password": "brand-new-pass"},
            {"new_password": "brand-new-pass", "current_password": "wrong"},
        ):
            with self.subTest(payload=payload):
                response = client.patch("/auth/me/", payload, format="json")
                self.assertEqual(response.status_code, 400)
                self.assertIsNone(response.json()["data"])

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password(self.password))

    def test_password_change_with_overlong_passwords_400(self):
        client = auth_client(self.user)
        for payload in (
            {"current_password": self.password, "new_password": "z" * 73},
            {"current_password": "c" * 100, "new_password": "brand-new-pass"},
        ):
            with self.subTest(payload=payload):
                response = client.patch("/auth/me/", payload, format="json")
                self.assertEqual(response.status_code, 400)

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password(self.password))

    def test_password_change_takes_effect_on_login(self):
        response = auth_client(self.user).patch(
            "/auth/me/",
            {"current_password": self.password, "new_password": "brand-new-pass"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)

        old = self.api_client.post("/auth/login/", {"username": "alice", "password": self.password}, format="json")
        new = self.api_client.post("/auth/login/", {"username": "alice", "password": "brand-new-pass"}, format="json")
        self.assertEqual(old.status_code, 401)
        self.assertEqual(new.status_code, 200)

    def test_schema_is_served(self):
        response = self.api_client.get("/api/schema/")
        self.assertEqual(response.status_code, 200)
