"""Exceptions raised by quasseldb.

Not-found conditions never raise; they return False, None or an empty list.
"""


class QuasselDBError(Exception):
    """Base class for all quasseldb errors."""


class NotConnectedError(QuasselDBError):
    """A query was attempted before a successful connect()."""


class UnknownHashVersionError(QuasselDBError):
    """The stored hashversion is not one this library can verify.

    This is a configuration problem of the core database, not a wrong password.
    """

    def __init__(self, hashversion):
        self.hashversion = hashversion
        super().__init__(f"Unknown password hash version: {hashversion!r}")


class HashAlgorithmUnavailableError(QuasselDBError):
    """SHA-512 is required to verify a salted hash but is not available."""
