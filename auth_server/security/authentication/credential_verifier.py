"""
Credential Verifier - Secret preparation and comparison

Module: security.authentication.credential_verifier
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial implementation
  - CredentialVerifier interface (prepare/verify)
  - BcryptCredentialVerifier: salted bcrypt hashes
  - PlainCredentialVerifier: verbatim storage, constant-time compare
  - Factory selecting a verifier by scheme name

SECURITY NOTES:
- bcrypt is the default scheme
- The plain scheme stores secrets verbatim; it only exists to read
  user collections written that way
- Callers only observe a boolean, whatever the scheme
"""

import hmac
from abc import ABC, abstractmethod

import bcrypt

from ...core.constants import (
    BCRYPT_ROUNDS,
    CREDENTIAL_SCHEME_BCRYPT,
    CREDENTIAL_SCHEME_PLAIN,
)


class CredentialVerifier(ABC):
    """Prepares secrets for storage and checks presented secrets"""

    scheme: str = ""

    @abstractmethod
    def prepare(self, secret: str) -> str:
        """
        Turn a plaintext secret into stored credential material

        Args:
            secret: Plaintext secret

        Returns:
            String to store in the user record
        """

    @abstractmethod
    def verify(self, presented: str, stored: str) -> bool:
        """
        Compare a presented secret with stored credential material

        Args:
            presented: Plaintext secret from the login request
            stored: Material produced by prepare()

        Returns:
            True if they match, False otherwise
        """


class BcryptCredentialVerifier(CredentialVerifier):
    """bcrypt salted hashes"""

    scheme = CREDENTIAL_SCHEME_BCRYPT

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def prepare(self, secret: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(secret.encode(), salt)
        return hashed.decode()

    def verify(self, presented: str, stored: str) -> bool:
        try:
            return bcrypt.checkpw(presented.encode(), stored.encode())
        except ValueError:
            # stored value is not a bcrypt hash
            return False


class PlainCredentialVerifier(CredentialVerifier):
    """Verbatim secrets (insecure, compatibility only)"""

    scheme = CREDENTIAL_SCHEME_PLAIN

    def prepare(self, secret: str) -> str:
        return secret

    def verify(self, presented: str, stored: str) -> bool:
        try:
            return hmac.compare_digest(presented.encode(), stored.encode())
        except ValueError:
            # lone surrogates cannot be encoded
            return False


def create_verifier(scheme: str) -> CredentialVerifier:
    """
    Build the verifier for a scheme name

    Raises:
        ValueError: If the scheme is unknown
    """
    if scheme == CREDENTIAL_SCHEME_BCRYPT:
        return BcryptCredentialVerifier()
    if scheme == CREDENTIAL_SCHEME_PLAIN:
        return PlainCredentialVerifier()
    raise ValueError(f"Unknown credential scheme: {scheme}")
