"""
Unit Tests - TokenIssuer and CredentialVerifier

Module: tests.test_authentication
Date: 2026-10-18
Version: 0.1.0-alpha

DESCRIPTION:
Tests for the authentication primitives:
- Access / refresh token issuance and verification
- Expiry, tampering and token type confusion
- Token uniqueness
- bcrypt and plain credential verification
"""

import logging
import unittest
from datetime import datetime, timedelta, timezone

import jwt

from auth_server.security.authentication import (
    BcryptCredentialVerifier,
    PlainCredentialVerifier,
    TokenClaimError,
    TokenExpiredError,
    TokenInvalidError,
    TokenIssuer,
    create_verifier,
)

logging.basicConfig(
    level=logging.WARNING,
    format="%(name)s - %(levelname)s - %(message)s"
)

ACCESS_SECRET = "test-access-secret-at-least-32-characters!!"
REFRESH_SECRET = "test-refresh-secret-at-least-32-characters!"


class TestTokenIssuer(unittest.TestCase):
    """Test suite for TokenIssuer"""

    def setUp(self):
        """Setup before each test"""
        self.issuer = TokenIssuer(ACCESS_SECRET, REFRESH_SECRET)

    def test_short_secret_rejected(self):
        """Test secrets shorter than 32 characters are rejected"""
        with self.assertRaises(ValueError):
            TokenIssuer("short", REFRESH_SECRET)
        with self.assertRaises(ValueError):
            TokenIssuer(ACCESS_SECRET, "short")

    def test_identical_secrets_rejected(self):
        """Test access and refresh secrets must differ"""
        with self.assertRaises(ValueError):
            TokenIssuer(ACCESS_SECRET, ACCESS_SECRET)

    def test_issue_access_lifetime(self):
        """Test access token expires 15 minutes after issuance"""
        issued = self.issuer.issue_access("user-123", "a@x.com")

        self.assertEqual(issued.token_type, "access")
        self.assertEqual(issued.expires_at - issued.issued_at, timedelta(minutes=15))
        self.assertEqual(issued.expires_in, 900)

        payload = self.issuer.decode_unverified(issued.token)
        self.assertEqual(payload["exp"] - payload["iat"], 900)
        self.assertEqual(payload["iat"], int(issued.issued_at.timestamp()))

    def test_issue_refresh_lifetime(self):
        """Test refresh token expires 7 days after issuance"""
        issued = self.issuer.issue_refresh("user-123", "a@x.com")

        self.assertEqual(issued.token_type, "refresh")
        self.assertEqual(issued.expires_at - issued.issued_at, timedelta(days=7))
        payload = self.issuer.decode_unverified(issued.token)
        self.assertEqual(payload["jti"], issued.token_id)

    def test_verify_access_claims(self):
        """Test verified claims carry user id and identity"""
        issued = self.issuer.issue_access("user-123", "a@x.com")
        claims = self.issuer.verify_access(issued.token)

        self.assertEqual(claims.sub, "user-123")
        self.assertEqual(claims.email, "a@x.com")
        self.assertEqual(claims.jti, issued.token_id)
        self.assertEqual(claims.exp, issued.expires_at)

    def test_verify_by_other_instance(self):
        """Test any instance holding the secret can verify"""
        issued = self.issuer.issue_access("user-123", "a@x.com")
        other = TokenIssuer(ACCESS_SECRET, REFRESH_SECRET)

        self.assertEqual(other.verify_access(issued.token).sub, "user-123")

    def test_verify_invalid_signature(self):
        """Test tampered token rejected"""
        issued = self.issuer.issue_access("user-123", "a@x.com")
        header, payload, signature = issued.token.split(".")
        bad_token = ".".join([header, payload, signature[::-1]])

        with self.assertRaises(TokenInvalidError):
            self.issuer.verify_access(bad_token)

    def test_verify_garbage(self):
        """Test malformed input rejected"""
        for bad in ("", "not-a-jwt", None):
            with self.assertRaises(TokenInvalidError):
                self.issuer.verify_access(bad)

    def test_verify_expired_token(self):
        """Test expired token rejected"""
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        old_issuer = TokenIssuer(ACCESS_SECRET, REFRESH_SECRET, clock=lambda: past)
        issued = old_issuer.issue_access("user-123", "a@x.com")

        with self.assertRaises(TokenExpiredError):
            self.issuer.verify_access(issued.token)

    def test_access_token_not_accepted_as_refresh(self):
        """Test token types cannot be swapped"""
        access = self.issuer.issue_access("user-123", "a@x.com")
        refresh = self.issuer.issue_refresh("user-123", "a@x.com")

        with self.assertRaises(TokenInvalidError):
            self.issuer.verify_refresh(access.token)
        with self.assertRaises(TokenInvalidError):
            self.issuer.verify_access(refresh.token)

    def test_wrong_token_type_claim(self):
        """Test token_type claim is enforced"""
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {
                "sub": "user-123",
                "email": "a@x.com",
                "jti": "jti-1",
                "iat": now,
                "exp": now + 60,
                "token_type": "refresh",
            },
            ACCESS_SECRET,
            algorithm="HS256",
        )

        with self.assertRaises(TokenClaimError):
            self.issuer.verify_access(token)

    def test_missing_claims(self):
        """Test missing required claims rejected"""
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"sub": "user-123", "iat": now, "exp": now + 60},
            ACCESS_SECRET,
            algorithm="HS256",
        )

        with self.assertRaises(TokenClaimError):
            self.issuer.verify_access(token)

    def test_tokens_never_share_signature(self):
        """Test two tokens for one identity have distinct signatures"""
        first = self.issuer.issue_access("user-123", "a@x.com")
        second = self.issuer.issue_access("user-123", "a@x.com")

        self.assertNotEqual(first.token_id, second.token_id)
        self.assertNotEqual(first.token.split(".")[2], second.token.split(".")[2])

    def test_issue_requires_identity(self):
        """Test user id and identity are mandatory"""
        with self.assertRaises(ValueError):
            self.issuer.issue_access("", "a@x.com")
        with self.assertRaises(ValueError):
            self.issuer.issue_refresh("user-123", "")


class TestCredentialVerifiers(unittest.TestCase):
    """Test suite for credential verifiers"""

    def test_bcrypt_roundtrip(self):
        """Test bcrypt prepare/verify"""
        verifier = BcryptCredentialVerifier(rounds=4)
        stored = verifier.prepare("secret1")

        self.assertTrue(stored.startswith(("$2a$", "$2b$", "$2y$")))
        self.assertNotIn("secret1", stored)
        self.assertTrue(verifier.verify("secret1", stored))
        self.assertFalse(verifier.verify("secret2", stored))

    def test_bcrypt_salted(self):
        """Test same secret hashes differently each time"""
        verifier = BcryptCredentialVerifier(rounds=4)
        self.assertNotEqual(verifier.prepare("secret1"), verifier.prepare("secret1"))

    def test_bcrypt_malformed_stored_value(self):
        """Test non-bcrypt stored value never matches"""
        verifier = BcryptCredentialVerifier(rounds=4)
        self.assertFalse(verifier.verify("secret1", "secret1"))

    def test_plain_verifier(self):
        """Test plain verifier stores verbatim and compares exactly"""
        verifier = PlainCredentialVerifier()
        stored = verifier.prepare("secret1")

        self.assertEqual(stored, "secret1")
        self.assertTrue(verifier.verify("secret1", stored))
        self.assertFalse(verifier.verify("Secret1", stored))
        self.assertFalse(verifier.verify("secret", stored))

    def test_unencodable_secret_never_matches(self):
        """Test lone surrogates are rejected instead of raising"""
        for verifier in (PlainCredentialVerifier(), BcryptCredentialVerifier(rounds=4)):
            with self.subTest(scheme=verifier.scheme):
                stored = verifier.prepare("secret1")
                self.assertFalse(verifier.verify("\ud800secret", stored))

    def test_create_verifier(self):
        """Test factory selects by scheme name"""
        self.assertIsInstance(create_verifier("bcrypt"), BcryptCredentialVerifier)
        self.assertIsInstance(create_verifier("plain"), PlainCredentialVerifier)
        with self.assertRaises(ValueError):
            create_verifier("md5")


if __name__ == "__main__":
    unittest.main(verbosity=2)
