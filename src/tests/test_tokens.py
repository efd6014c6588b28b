"""Tests for session token issuance, verification, and key derivation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from django.core.checks import run_checks
from django.test import SimpleTestCase, override_settings

from access_control.models import Role
from authentication.models import User
from authentication.tokens import (
    FALLBACK_SECRET,
    InvalidToken,
    TokenAuthenticator,
    derive_signing_key,
)

SECRET = "a-signing-secret-that-is-long-enough-for-hs256"
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class TokenAuthenticatorTests(SimpleTestCase):
    """Round trip, expiry, tampering, and malformed tokens."""

    def setUp(self):
        self.authenticator = TokenAuthenticator(secret=SECRET, ttl=timedelta(hours=24))
        self.user = User(id=42, username="alice", email="alice@example.com", role=Role.AUTHOR)

    def test_round_trip_preserves_claims(self):
        """A token verified at issuance yields the claims it was issued with."""
        token = self.authenticator.issue(self.user, now=NOW)

        principal = self.authenticator.verify(token, now=NOW)

        self.assertEqual(principal.user_id, 42)
        self.assertEqual(principal.username, "alice")
        self.assertEqual(principal.role, Role.AUTHOR)
        self.assertEqual(principal.issued_at, NOW)
        self.assertEqual(principal.expires_at, NOW + timedelta(hours=24))

    def test_claims_use_public_names(self):
        token = self.authenticator.issue(self.user, now=NOW)
        claims = jwt.decode(token, options={"verify_signature": False})

        self.assertEqual(
            claims,
            {
                "sub": "alice",
                "userId": 42,
                "role": "AUTHOR",
                "iat": int(NOW.timestamp()),
                "exp": int((NOW + timedelta(hours=24)).timestamp()),
            },
        )

    def test_issue_truncates_to_whole_seconds(self):
        token = self.authenticator.issue(self.user, now=NOW.replace(microsecond=654321))
        self.assertEqual(self.authenticator.verify(token, now=NOW).issued_at, NOW)

    def test_valid_until_just_before_expiry(self):
        token = self.authenticator.issue(self.user, now=NOW)
        expiry = NOW + timedelta(hours=24)

        self.authenticator.verify(token, now=expiry - timedelta(seconds=1))
        with self.assertRaises(InvalidToken):
            self.authenticator.verify(token, now=expiry)

    def test_expired_token_fails(self):
        token = self.authenticator.issue(self.user, now=NOW)
        with self.assertRaises(InvalidToken):
            self.authenticator.verify(token, now=NOW + timedelta(days=2))

    def test_tampered_signature_fails(self):
        token = self.authenticator.issue(self.user, now=NOW)
        header, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

        with self.assertRaises(InvalidToken):
            self.authenticator.verify(f"{header}.{payload}.{flipped}", now=NOW)

    def test_tampered_payload_fails(self):
        """Escalating the role inside a token breaks its signature."""
        forged = jwt.encode(
            {
                "sub": "alice",
                "userId": 42,
                "role": "ADMIN",
                "iat": int(NOW.timestamp()),
                "exp": int((NOW + timedelta(hours=1)).timestamp()),
            },
            "some-other-secret-that-is-also-long-enough",
            algorithm="HS256",
        )
        with self.assertRaises(InvalidToken):
            self.authenticator.verify(forged, now=NOW)

    def test_malformed_tokens_fail(self):
        for token in ["", "not-a-token", "a.b.c", "Bearer xyz"]:
            with self.subTest(token=token):
                with self.assertRaises(InvalidToken):
                    self.authenticator.verify(token, now=NOW)

    def test_missing_or_bad_claims_fail(self):
        base = {
            "sub": "alice",
            "userId": 42,
            "role": "AUTHOR",
            "iat": int(NOW.timestamp()),
            "exp": int((NOW + timedelta(hours=1)).timestamp()),
        }
        variants = {
            "missing userId": {k: v for k, v in base.items() if k != "userId"},
            "missing exp": {k: v for k, v in base.items() if k != "exp"},
            "unknown role": {**base, "role": "SUPERUSER"},
            "non-integer userId": {**base, "userId": "42"},
        }
        for name, claims in variants.items():
            with self.subTest(name):
                token = jwt.encode(claims, SECRET, algorithm="HS256")
                with self.assertRaises(InvalidToken):
                    self.authenticator.verify(token, now=NOW)

    def test_failures_are_indistinguishable(self):
        """Expired, forged, and malformed tokens produce the same error message."""
        valid = self.authenticator.issue(self.user, now=NOW)
        head, body, sig = valid.split(".")
        forged = f"{head}.{body}.{sig[:10]}{'A' if sig[10] != 'A' else 'B'}{sig[11:]}"
        messages = set()
        for token, now in [(valid, NOW + timedelta(days=3)), (forged, NOW), ("garbage", NOW)]:
            with self.assertRaises(InvalidToken) as ctx:
                self.authenticator.verify(token, now=now)
            messages.add(str(ctx.exception))
        self.assertEqual(len(messages), 1)

    def test_other_secret_cannot_verify(self):
        token = self.authenticator.issue(self.user, now=NOW)
        other = TokenAuthenticator(secret="a-completely-different-but-long-secret!!", ttl=timedelta(hours=1))
        with self.assertRaises(InvalidToken):
            other.verify(token, now=NOW)


class SigningKeyFallbackTests(SimpleTestCase):
    """Short secrets are replaced by the shared fallback secret."""

    def test_long_secret_is_used_as_is(self):
        self.assertEqual(derive_signing_key(SECRET), SECRET.encode())

    def test_short_secret_uses_fallback(self):
        self.assertEqual(derive_signing_key("short"), FALLBACK_SECRET.encode())
        self.assertEqual(derive_signing_key(None), FALLBACK_SECRET.encode())

    def test_distinct_short_secrets_accept_each_others_tokens(self):
        """Two deployments with different short secrets share a signing key."""
        user = User(id=1, username="bob", email="bob@example.com", role=Role.READER)
        token = TokenAuthenticator(secret="first-short", ttl=timedelta(hours=1)).issue(user, now=NOW)

        principal = TokenAuthenticator(secret="second-short", ttl=timedelta(hours=1)).verify(token, now=NOW)

        self.assertEqual(principal.username, "bob")

    @override_settings(JWT_SECRET="too-short")
    def test_system_check_warns_about_fallback(self):
        ids = [message.id for message in run_checks()]
        self.assertIn("authentication.W001", ids)

    def test_system_check_silent_for_long_secret(self):
        ids = [message.id for message in run_checks()]
        self.assertNotIn("authentication.W001", ids)
