"""
Backlog - Database Operations

Sender lookups, backlog search and context windows around a message.

Buffer and type lists passed in here are bound as expanding IN parameters.
Callers are still expected to have reduced bufferids to the buffers visible
to the bound user.
"""

from datetime import datetime

from sqlalchemy import select

from .constants import SearchKind
from .models import Backlog, Sender

# ============================================================================
# SENDERS
# ============================================================================


def get_sender_ids(session, nick_prefix: str) -> list:
    """Get all senderids whose sender starts with nick_prefix.

    A nick maps to one senderid per user@host it was seen with, so
    this returns a list.
    """
    return list(
        session.execute(
            select(Sender.senderid)
            .where(Sender.sender.like(f"{nick_prefix}%"))
            .order_by(Sender.senderid)
        ).scalars()
    )


def get_sender(session, senderid) -> str | None:
    """Get the sender string for a senderid, or None."""
    return session.execute(
        select(Sender.sender).where(Sender.senderid == senderid)
    ).scalar()


# ============================================================================
# SEARCH
# ============================================================================


def to_datetime(value) -> datetime | None:
    """Convert a UNIX timestamp (or datetime) to a naive local datetime.

    Bounds are bound through the backlog.time column type, which stores
    milliseconds on SQLite.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        return None
    try:
        return datetime.fromtimestamp(float(value))
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def date_range(value) -> tuple[datetime, datetime] | None:
    """Normalize a (start, end) pair into an ascending datetime range."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    bounds = [to_datetime(v) for v in value]
    if None in bounds:
        return None
    start, end = sorted(bounds)
    return start, end


def build_search_conditions(session, criteria: dict) -> list:
    """Translate a criteria mapping into SQL conditions.

    Empty strings and malformed date ranges add nothing; unknown kinds are
    ignored. An empty result means no criterion was usable.
    """
    conditions = []
    for kind, value in (criteria or {}).items():
        if kind == SearchKind.STRING:
            if value is None or not str(value).strip():
                continue
            conditions.append(Backlog.message.like(f"%{value}%"))

        elif kind == SearchKind.SENDER:
            # No matching sender matches no rows, but still counts as a criterion
            senderids = get_sender_ids(session, value)
            conditions.append(Backlog.senderid.in_(senderids))

        elif kind == SearchKind.DATE:
            bounds = date_range(value)
            if bounds is None:
                continue
            conditions.append(Backlog.time.between(*bounds))

    return conditions


def search_backlog(session, bufferids, types, conditions) -> list:
    """Get backlog rows in bufferids with a type in types matching all conditions."""
    query = (
        select(Backlog)
        .where(Backlog.bufferid.in_(list(bufferids)))
        .where(Backlog.type.in_(list(types)))
        .where(*conditions)
        .order_by(Backlog.messageid)
    )
    return [entry.to_dict() for entry in session.execute(query).scalars()]


# ============================================================================
# CONTEXT WINDOW
# ============================================================================


def get_messages_before(session, bufferid, messageid, limit: int) -> list:
    """Up to limit rows with messageid <= pivot, oldest first."""
    rows = session.execute(
        select(Backlog)
        .where(Backlog.bufferid == bufferid, Backlog.messageid <= messageid)
        .order_by(Backlog.messageid.desc())
        .limit(limit)
    ).scalars()
    return [entry.to_dict() for entry in reversed(list(rows))]


def get_messages_after(session, bufferid, messageid, limit: int) -> list:
    """Up to limit rows with messageid > pivot, oldest first."""
    rows = session.execute(
        select(Backlog)
        .where(Backlog.bufferid == bufferid, Backlog.messageid > messageid)
        .order_by(Backlog.messageid.asc())
        .limit(limit)
    ).scalars()
    return [entry.to_dict() for entry in rows]
