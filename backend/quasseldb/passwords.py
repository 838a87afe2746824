"""
Password hashing for Quassel core accounts.

Two stored formats exist and both must keep verifying:

- hashversion 0: unsalted SHA-1 hex digest (legacy)
- hashversion 1: "<sha512(password + salt) hex>:<salt>"

New passwords are always written as version 1 unless SHA-512 is missing
from the runtime.
"""

import hashlib
import os
from dataclasses import dataclass
from typing import Union

from .exceptions import HashAlgorithmUnavailableError, UnknownHashVersionError

LEGACY_VERSION = 0
SALTED_VERSION = 1


def sha512_available() -> bool:
    return "sha512" in hashlib.algorithms_available


@dataclass(frozen=True)
class LegacyDigest:
    """hashversion 0"""

    version = LEGACY_VERSION

    def hash(self, password: str) -> str:
        return hashlib.sha1(password.encode("utf-8")).hexdigest()

    def verify(self, password: str, stored_hash: str) -> bool:
        return self.hash(password) == stored_hash


@dataclass(frozen=True)
class SaltedDigest:
    """hashversion 1, salt taken from the part after ':'"""

    salt: str
    version = SALTED_VERSION

    def hash(self, password: str) -> str:
        if not sha512_available():
            raise HashAlgorithmUnavailableError(
                "Hash algorithm 'sha512' is not available in this Python build"
            )
        digest = hashlib.sha512((password + self.salt).encode("utf-8")).hexdigest()
        return f"{digest}:{self.salt}"

    def verify(self, password: str, stored_hash: str) -> bool:
        return self.hash(password) == stored_hash


PasswordScheme = Union[LegacyDigest, SaltedDigest]


def scheme_for(stored_hash: str, hashversion) -> PasswordScheme:
    """Pick the scheme that produced stored_hash.

    Raises:
        UnknownHashVersionError: If hashversion is neither 0 nor 1
    """
    if hashversion == LEGACY_VERSION:
        return LegacyDigest()
    if hashversion == SALTED_VERSION:
        _, _, salt = (stored_hash or "").partition(":")
        return SaltedDigest(salt)
    raise UnknownHashVersionError(hashversion)


def candidate_hash(password: str, stored_hash: str, hashversion) -> str:
    """Hash password the same way stored_hash was hashed."""
    return scheme_for(stored_hash, hashversion).hash(password)


def new_salt() -> str:
    return hashlib.sha512(os.urandom(64)).hexdigest()


def make_password_hash(password: str) -> tuple[str, int]:
    """Hash a new password with the strongest available scheme.

    Returns:
        Tuple of (stored hash, hashversion)
    """
    if sha512_available():
        scheme = SaltedDigest(new_salt())
    else:
        scheme = LegacyDigest()
    return scheme.hash(password), scheme.version
