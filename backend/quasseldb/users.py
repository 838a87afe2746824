"""
Core Users - Database Operations

Lookups and updates on the quasseluser and network tables.
Every function takes an open SQLAlchemy session; committing is left to
the caller.
"""

import re
from datetime import date

from sqlalchemy import select, update

from .models import Network, QuasselUser

DEACTIVATED_PREFIX = "DEACTIVATED_"

# Value written by create_user() before the real hash is set
PLACEHOLDER_PASSWORD = "x"

# Suffix deactivated_username() appends after the original name
DEACTIVATION_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


# ============================================================================
# LOOKUPS
# ============================================================================


def get_user_id(session, username) -> int | None:
    """Get the userid for a username, or None."""
    if username is None:
        return None
    return session.execute(
        select(QuasselUser.userid).where(QuasselUser.username == username)
    ).scalar()


def get_username(session, userid) -> str | None:
    """Get the username for a userid, or None."""
    if userid is None:
        return None
    return session.execute(
        select(QuasselUser.username).where(QuasselUser.userid == userid)
    ).scalar()


def get_hash_data(session, userid) -> tuple[str, int] | None:
    """Get (password hash, hashversion) for a userid, or None."""
    if userid is None:
        return None
    row = session.execute(
        select(QuasselUser.password, QuasselUser.hashversion).where(
            QuasselUser.userid == userid
        )
    ).first()
    if not row:
        return None
    return row.password, row.hashversion


def username_exists(session, username: str) -> bool:
    return get_user_id(session, username) is not None


# ============================================================================
# UPDATES
# ============================================================================


def insert_placeholder_user(session, username: str) -> int:
    """Insert a user row that cannot log in yet and return its userid."""
    user = QuasselUser(
        username=username, password=PLACEHOLDER_PASSWORD, hashversion=0
    )
    session.add(user)
    session.flush()
    return user.userid


def update_password(session, userid, password_hash: str, hashversion: int) -> bool:
    """Store a new password hash. Returns True if a row was updated."""
    result = session.execute(
        update(QuasselUser)
        .where(QuasselUser.userid == userid)
        .values(password=password_hash, hashversion=hashversion)
    )
    return result.rowcount > 0


def deactivated_username(username: str, on: date = None) -> str:
    """DEACTIVATED_<username>_<YYYY-MM-DD>"""
    on = on or date.today()
    return f"{DEACTIVATED_PREFIX}{username}_{on.isoformat()}"


def mark_user_deactivated(session, userid, on: date = None) -> bool:
    """Prefix username and password with the deactivation marker.

    Also disables auto-reconnect on all of the user's networks and marks
    them disconnected. Nothing is deleted.
    """
    user = session.get(QuasselUser, userid)
    if not user:
        return False

    user.username = deactivated_username(user.username, on)
    user.password = f"{DEACTIVATED_PREFIX}{user.password}"

    session.execute(
        update(Network)
        .where(Network.userid == userid)
        .values(useautoreconnect=False, connected=False)
    )
    return True


def find_deactivated_user(session, username: str) -> QuasselUser | None:
    """Most recent deactivated row for username (latest date suffix first).

    Only rows named exactly DEACTIVATED_<username>_<YYYY-MM-DD> qualify, so
    a deactivated "bob_2" is never taken for "bob".
    """
    prefix = f"{DEACTIVATED_PREFIX}{username}_"
    candidates = session.execute(
        select(QuasselUser)
        .where(QuasselUser.username.startswith(prefix, autoescape=True))
        .order_by(QuasselUser.username.desc())
    ).scalars()
    for user in candidates:
        name = user.username
        if name.startswith(prefix) and DEACTIVATION_DATE.fullmatch(name[len(prefix):]):
            return user
    return None


def restore_user(session, user: QuasselUser, username: str) -> None:
    """Undo mark_user_deactivated() on a row returned by find_deactivated_user()."""
    password = user.password
    if password.startswith(DEACTIVATED_PREFIX):
        password = password[len(DEACTIVATED_PREFIX):]
    user.username = username
    user.password = password
