"""
quasseldb - Public API

Data access for a Quassel IRC core's persisted backlog: authentication
against core accounts, visible buffers, backlog search and account
administration.

Usage:
    from quasseldb import QuasselDB, SearchKind, BacklogType

Organization:
    - base.py: Declarative base, connection URLs and session scope
    - config.py: Connection settings from the environment
    - core.py: QuasselDB session facade
    - users.py: quasseluser/network operations
    - buffers.py: buffer operations
    - backlog.py: sender lookups, search and message windows
    - passwords.py: hash versions 0 and 1
"""

from .base import Base, build_database_url
from .config import DatabaseConfig
from .constants import ALL_TYPES, BacklogType, SearchKind
from .core import QuasselDB
from .exceptions import (
    HashAlgorithmUnavailableError,
    NotConnectedError,
    QuasselDBError,
    UnknownHashVersionError,
)
from .passwords import LegacyDigest, SaltedDigest

__all__ = [
    "QuasselDB",
    "DatabaseConfig",
    "Base",
    "build_database_url",
    "SearchKind",
    "BacklogType",
    "ALL_TYPES",
    "LegacyDigest",
    "SaltedDigest",
    "QuasselDBError",
    "NotConnectedError",
    "UnknownHashVersionError",
    "HashAlgorithmUnavailableError",
]
