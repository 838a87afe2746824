"""
QuasselDB - Session Facade

Wraps one database engine and the identity of at most one authenticated
core user. All queries go through short-lived ORM sessions opened from
the engine; the only state kept between calls is the bound user_id and
that user's buffer list.

Typical use:

    db = QuasselDB()
    if db.connect(["localhost", "quassel", "secret", "quassel"]) is not True:
        ...  # connection failed, the return value is the driver's message
    if db.authenticate("alice", "password"):
        rows = db.search({SearchKind.STRING: "hello"}, [1, 2])

A QuasselDB instance must not be shared between threads: acting_as()
temporarily rebinds user_id.
"""

import math
import re
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import backlog, buffers, users
from .base import (
    POSTGRES,
    build_database_url,
    create_db_engine,
    make_session_factory,
    normalize_db_type,
    session_scope,
)
from .constants import ALL_TYPES
from .exceptions import NotConnectedError, UnknownHashVersionError
from .logging_config import get_logger
from .passwords import candidate_hash, make_password_hash

logger = get_logger(__name__)

USERNAME_PATTERN = re.compile(r"[A-Za-z0-9]+")

DEFAULT_PROXIMITY = 10


def _is_numeric(value) -> bool:
    """True for ints, floats and numeric strings (bools excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value.strip())
        except ValueError:
            return False
        return True
    return False


def _coerce_id(value) -> int | None:
    """Integer id from an int or an integral numeric string, else None."""
    if not _is_numeric(value):
        return None
    number = value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            number = float(value.strip())
    if isinstance(number, float):
        if not number.is_integer():
            return None
    return int(number)


def _values(items):
    return items.values() if isinstance(items, dict) else items


class QuasselDB:
    """Data access for a Quassel core's backlog on behalf of one user."""

    def __init__(self, echo: bool = False):
        self.user_id = None
        self.db_type = None
        self._echo = echo
        self._engine = None
        self._session_factory = None
        # networkid -> [(bufferid, buffername)]; only ever holds user_id's buffers
        self._buffers = None

    # ========================================================================
    # CONNECTION
    # ========================================================================

    def connect(self, credentials, db_type: str = POSTGRES, port: int = None):
        """Open the database.

        PostgreSQL: credentials = [host, username, password, database]
        SQLite:     credentials = ['/path/to/quassel-storage.sqlite']

        Returns:
            True on success. Anything else is the driver's error message,
            so the result must be checked with `is True`. The message may
            contain host names or credentials.
        """
        try:
            kind = normalize_db_type(db_type)
            url = build_database_url(credentials, kind, port)
        except ValueError as e:
            return str(e)

        safe_url = url.render_as_string(hide_password=True)
        try:
            engine = create_db_engine(url, echo=self._echo)
        except (SQLAlchemyError, ImportError) as e:
            logger.warning(
                f"Could not create engine for {safe_url}: {type(e).__name__}",
                extra={"db_type": kind},
            )
            return str(e)

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            engine.dispose()
            logger.warning(
                f"Connection to {safe_url} failed: {type(e).__name__}",
                extra={"db_type": kind},
            )
            return str(getattr(e, "orig", None) or e)

        self.close()
        self._engine = engine
        self._session_factory = make_session_factory(engine)
        self.db_type = kind
        logger.info(f"Connected to {safe_url}", extra={"db_type": kind})
        return True

    def connect_from_config(self, config):
        """connect() using a DatabaseConfig."""
        return self.connect(config.credentials(), config.db_type, config.port)

    def close(self) -> None:
        """Dispose of the engine. The bound identity is kept."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @contextmanager
    def _session(self):
        if self._session_factory is None:
            raise NotConnectedError("QuasselDB.connect() has not succeeded")
        with session_scope(self._session_factory) as session:
            yield session

    # ========================================================================
    # IDENTITY
    # ========================================================================

    def _bind_user(self, userid) -> None:
        if userid != self.user_id:
            self._buffers = None
        self.user_id = userid

    @contextmanager
    def acting_as(self, userid):
        """Bind userid for the duration of the block.

        The previous identity and its buffer cache are restored on every
        exit path, including exceptions.
        """
        previous_user, previous_buffers = self.user_id, self._buffers
        self._bind_user(userid)
        try:
            yield self
        finally:
            self.user_id, self._buffers = previous_user, previous_buffers

    def get_user_id(self, username) -> int | None:
        with self._session() as session:
            return users.get_user_id(session, username)

    def get_username(self, userid) -> str | None:
        with self._session() as session:
            return users.get_username(session, userid)

    def get_hash_data(self, userid) -> tuple[str, int] | None:
        with self._session() as session:
            return users.get_hash_data(session, userid)

    # ========================================================================
    # AUTHENTICATION
    # ========================================================================

    def authenticate(self, username, password, userid=None) -> bool:
        """Check a password and bind the user on success.

        A password of None is rejected before any lookup. On failure the
        currently bound user, if any, stays bound.

        Raises:
            UnknownHashVersionError: If the stored hashversion is unknown
        """
        if password is None:
            return False

        with self._session() as session:
            if userid is None:
                userid = users.get_user_id(session, username)
                if userid is None:
                    logger.info(f"Authentication failed: unknown user {username!r}")
                    return False
            hash_data = users.get_hash_data(session, userid)

        if not hash_data:
            return False
        stored_hash, hashversion = hash_data

        try:
            candidate = candidate_hash(password, stored_hash, hashversion)
        except UnknownHashVersionError:
            logger.error(
                f"Unknown hash version {hashversion!r} stored for userid {userid}",
                extra={"user_id": userid},
            )
            raise

        return self.authenticate_with_hash(userid, candidate, stored_hash)

    def authenticate_with_hash(self, userid, candidate: str, stored_hash: str = None) -> bool:
        """Compare an already computed hash with the stored one.

        stored_hash is fetched when not given; authenticate() passes it to
        avoid a second lookup.
        """
        if stored_hash is None:
            hash_data = self.get_hash_data(userid)
            if not hash_data:
                return False
            stored_hash = hash_data[0]

        if candidate != stored_hash:
            logger.info("Authentication failed: wrong password", extra={"user_id": userid})
            return False

        self._bind_user(userid)
        logger.debug("Authenticated", extra={"user_id": userid})
        return True

    # ========================================================================
    # BUFFERS
    # ========================================================================

    def get_buffers(self) -> dict:
        """Load (or reload) the bound user's buffers.

        Returns:
            Dict of networkid -> list of (bufferid, buffername)
        """
        if self.user_id is None:
            self._buffers = {}
        else:
            with self._session() as session:
                self._buffers = buffers.get_user_buffers(session, self.user_id)
        return {networkid: list(items) for networkid, items in self._buffers.items()}

    def is_visible_buffer(self, bufferid) -> bool:
        if self.user_id is None:
            return False
        if not self._buffers:
            self.get_buffers()

        wanted = _coerce_id(bufferid)
        if wanted is None:
            return False
        return any(
            cached == wanted
            for network in self._buffers.values()
            for cached, _ in network
        )

    def filter_visible_buffers(self, bufferids):
        """Keep visible buffers, preserving order (and keys for a dict)."""
        if isinstance(bufferids, dict):
            return {k: v for k, v in bufferids.items() if self.is_visible_buffer(v)}
        return [b for b in bufferids if self.is_visible_buffer(b)]

    @staticmethod
    def filter_numeric_values(values):
        """Keep numeric values, preserving order (and keys for a dict)."""
        if isinstance(values, dict):
            return {k: v for k, v in values.items() if _is_numeric(v)}
        return [v for v in values if _is_numeric(v)]

    # ========================================================================
    # SEARCH & RETRIEVAL
    # ========================================================================

    def search(self, criteria: dict, bufferids, types=ALL_TYPES) -> list:
        """Search the backlog of visible buffers.

        Args:
            criteria: Mapping of SearchKind -> value. STRING is a substring,
                SENDER a nick prefix, DATE a (start, end) pair of UNIX
                timestamps or datetimes in any order.
            bufferids: Requested buffers; invisible ones are dropped
            types: BacklogType values to include

        Returns:
            List of backlog row dicts. Empty when no criterion applies.
        """
        visible = [_coerce_id(b) for b in _values(self.filter_visible_buffers(bufferids))]
        typeids = [
            t
            for t in (_coerce_id(v) for v in _values(self.filter_numeric_values(types)))
            if t is not None
        ]

        with self._session() as session:
            conditions = backlog.build_search_conditions(session, criteria)
            if not conditions:
                return []
            results = backlog.search_backlog(session, visible, typeids, conditions)

        logger.debug(
            f"Search over {len(visible)} buffers returned {len(results)} rows",
            extra={"user_id": self.user_id},
        )
        return results

    def get_sender_ids(self, nick_prefix: str) -> list:
        with self._session() as session:
            return backlog.get_sender_ids(session, nick_prefix)

    def get_sender(self, senderid) -> str | None:
        with self._session() as session:
            return backlog.get_sender(session, senderid)

    def get_messages_near_id(self, messageid, bufferid, proximity=DEFAULT_PROXIMITY) -> list:
        """Messages around messageid in a visible buffer.

        Returns up to `proximity` messages at or before messageid followed by
        up to `proximity` messages after it, all in ascending order.
        """
        if not self.is_visible_buffer(bufferid):
            return []
        if not _is_numeric(proximity) or not 0 <= float(proximity) < math.inf:
            proximity = DEFAULT_PROXIMITY
        limit = int(float(proximity))
        bufferid = _coerce_id(bufferid)

        with self._session() as session:
            before = backlog.get_messages_before(session, bufferid, messageid, limit)
            after = backlog.get_messages_after(session, bufferid, messageid, limit)
        return before + after

    # ========================================================================
    # USER ADMINISTRATION
    # ========================================================================

    def change_password(self, new_password: str, old_password: str = None) -> bool:
        """Set a new password for the bound user.

        When old_password is given it must verify first. The bound identity
        is the same afterwards whether or not it does.
        """
        if self.user_id is None:
            return False

        if old_password is not None:
            with self.acting_as(self.user_id):
                verified = self.authenticate(None, old_password, self.user_id)
            if not verified:
                return False

        password_hash, hashversion = make_password_hash(new_password)
        with self._session() as session:
            updated = users.update_password(session, self.user_id, password_hash, hashversion)
            session.commit()

        logger.info(
            f"Password changed (hashversion {hashversion})",
            extra={"user_id": self.user_id},
        )
        return updated

    def create_user(self, username: str, password: str) -> bool:
        """Create a core user. Usernames must be non-empty and alphanumeric."""
        if not isinstance(username, str) or not USERNAME_PATTERN.fullmatch(username):
            return False

        with self._session() as session:
            if users.username_exists(session, username):
                return False
            userid = users.insert_placeholder_user(session, username)
            session.commit()

        with self.acting_as(userid):
            self.change_password(password)

        logger.info(f"Created user {username!r}", extra={"user_id": userid})
        return True

    def deactivate_user(self, username: str) -> bool:
        """Block login and auto-reconnect for a user without deleting anything.

        Reversed by activate_user().
        """
        with self._session() as session:
            userid = users.get_user_id(session, username)
            if userid is None:
                return False
            users.mark_user_deactivated(session, userid)
            session.commit()

        logger.info(f"Deactivated user {username!r}", extra={"user_id": userid})
        return True

    def activate_user(self, username: str) -> bool:
        """Restore the most recently deactivated account named username.

        The old password works again; networks stay without auto-reconnect.
        """
        if not username:
            return False

        with self._session() as session:
            if users.username_exists(session, username):
                return False
            user = users.find_deactivated_user(session, username)
            if user is None:
                return False
            users.restore_user(session, user, username)
            userid = user.userid
            session.commit()

        logger.info(f"Reactivated user {username!r}", extra={"user_id": userid})
        return True
