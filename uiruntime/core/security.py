"""
Security Utilities

Credential verification for the app-level auth actions.

Uses pwdlib (modern replacement for unmaintained passlib) for password hashing.
The auth handlers only see the abstract CredentialVerifier, so the
comparison scheme can change without touching the action contract.
"""

import logging
import secrets
from abc import ABC, abstractmethod

from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.bcrypt import BcryptHasher

from uiruntime.config import Settings, get_settings
from uiruntime.core.exceptions import CredentialRejectedError

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes; newer releases reject longer input
BCRYPT_MAX_BYTES = 72


class CredentialVerifier(ABC):
    """Capability for storing and checking user secrets."""

    @abstractmethod
    def hash(self, plain: str) -> str:
        """
        Return the value to store for a new secret.

        Raises:
            CredentialRejectedError: If the secret cannot be stored
        """

    @abstractmethod
    def verify(self, plain: str, stored: str) -> bool:
        """Check a submitted secret against a stored value."""


class PasswordHashVerifier(CredentialVerifier):
    """
    Salted bcrypt hashes via pwdlib.

    We explicitly use BcryptHasher to avoid requiring argon2 dependency.
    """

    def __init__(self):
        self._password_hash = PasswordHash((BcryptHasher(),))

    def hash(self, plain: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            plain: Plain text password to hash

        Returns:
            Hashed password string

        Raises:
            CredentialRejectedError: If the password exceeds bcrypt's 72-byte input
        """
        try:
            size = len(plain.encode("utf-8"))
        except UnicodeEncodeError as e:
            raise CredentialRejectedError(f"password is not valid UTF-8: {e.reason}") from e
        if size > BCRYPT_MAX_BYTES:
            raise CredentialRejectedError(f"password is longer than {BCRYPT_MAX_BYTES} bytes")
        return self._password_hash.hash(plain)

    def verify(self, plain: str, stored: str) -> bool:
        """
        Verify a plain password against a hashed password.

        Args:
            plain: The password to verify
            stored: The hashed password to compare against

        Returns:
            True if password matches, False otherwise (including stored
            values that are not a recognised hash)
        """
        if not isinstance(plain, str) or not isinstance(stored, str) or not plain or not stored:
            return False
        try:
            return self._password_hash.verify(plain, stored)
        except (UnknownHashError, ValueError):
            logger.warning("Stored credential is not a recognised hash; treating as mismatch")
            return False


class PlaintextVerifier(CredentialVerifier):
    """
    Constant-time comparison of plaintext values.

    Only for editor previews whose seeded records hold plaintext passwords.
    """

    def hash(self, plain: str) -> str:
        return plain

    def verify(self, plain: str, stored: str) -> bool:
        if not isinstance(plain, str) or not isinstance(stored, str):
            return False
        return secrets.compare_digest(plain.encode(), stored.encode())


def get_credential_verifier(settings: Settings | None = None) -> CredentialVerifier:
    """Build the verifier selected by settings.credential_scheme."""
    settings = settings or get_settings()
    if settings.credential_scheme == "plaintext":
        if settings.environment == "production":
            logger.warning("Plaintext credential comparison enabled in production")
        return PlaintextVerifier()
    return PasswordHashVerifier()
