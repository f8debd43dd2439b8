"""Password credential hashing and validation.

Hashes are werkzeug's self-describing ``method$salt$digest`` strings, so the
method and salt needed to re-check a candidate travel with the stored hash.
Only the ``password`` credential kind is supported; any other kind is
answered with ``False`` or a no-op rather than an error.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from .cache import user_handle
from .guard import ReadOnlyGuard

logger = logging.getLogger(__name__)

PASSWORD = "password"
DEFAULT_HASH_METHOD = "scrypt"
READ_ONLY_MESSAGE = "Storage is read-only"


@dataclass(frozen=True)
class UserCredential:
    """Credential input presented by the host."""
    type: str
    value: str

    @classmethod
    def password(cls, value: str) -> "UserCredential":
        return cls(type=PASSWORD, value=value)


def hash_password(password: str, method: str = DEFAULT_HASH_METHOD) -> str:
    """Hash a password with a fresh random salt."""
    return generate_password_hash(password, method=method)


def verify_password(password_hash: str, candidate: str) -> bool:
    """Re-hash ``candidate`` with the method and salt embedded in ``password_hash``.

    Returns:
        True if the digests match; False for a mismatch or an unparseable hash
    """
    try:
        return check_password_hash(password_hash, candidate)
    except ValueError:
        logger.warning("Stored password hash could not be parsed; validation refused")
        return False


class CredentialValidator:
    """Validate, update and disable the password credential of a user.

    ``user`` arguments accept a live adapter, a cached projection, or an
    already-wrapped handle. Reads prefer the cached projection's copy of the
    hash; writes always unwrap to the live adapter.

    Args:
        guard: Read-only guard of the owning provider
        hash_method: werkzeug hash method for new hashes
    """

    def __init__(self, guard: ReadOnlyGuard, hash_method: str = DEFAULT_HASH_METHOD):
        self.guard = guard
        self.hash_method = hash_method

    @staticmethod
    def is_supported(credential_type: Optional[str]) -> bool:
        return credential_type == PASSWORD

    def _accepts(self, credential: Any) -> bool:
        return isinstance(credential, UserCredential) and self.is_supported(credential.type)

    def password_hash(self, user) -> Optional[str]:
        return user_handle(user).password_hash()

    def validate(self, user, credential: Any) -> bool:
        if not self._accepts(credential):
            return False
        stored = self.password_hash(user)
        if stored is None:
            return False
        return verify_password(stored, credential.value)

    def update(self, user, credential: Any) -> bool:
        """Store a fresh hash of the credential value.

        Returns:
            False for unsupported input, True once the hash is written

        Raises:
            ReadOnlyException: If the provider is read-only
        """
        if not self._accepts(credential):
            return False
        self.guard.check(READ_ONLY_MESSAGE)
        adapter = user_handle(user).as_mutable()
        adapter.set_password_hash(hash_password(credential.value, self.hash_method))
        return True

    def disable(self, user, credential_type: str) -> None:
        if not self.is_supported(credential_type):
            return
        self.guard.check(READ_ONLY_MESSAGE)
        user_handle(user).as_mutable().set_password_hash(None)

    def is_configured(self, user, credential_type: str) -> bool:
        return self.is_supported(credential_type) and self.password_hash(user) is not None

    def disableable_types(self, user) -> List[str]:
        if self.password_hash(user) is not None:
            return [PASSWORD]
        return []
