"""
Buffers - Database Operations

Loads the buffers owned by a core user.
"""

from sqlalchemy import select

from .models import Buffer


def get_user_buffers(session, userid) -> dict:
    """Get a user's buffers grouped by network.

    Returns:
        Dict of networkid -> list of (bufferid, buffername), ordered by networkid

    Usage:
        for networkid, buffers in get_user_buffers(session, userid).items():
            for bufferid, buffername in buffers:
                ...
    """
    rows = session.execute(
        select(Buffer.networkid, Buffer.bufferid, Buffer.buffername)
        .where(Buffer.userid == userid)
        .order_by(Buffer.networkid, Buffer.bufferid)
    ).all()

    buffers = {}
    for networkid, bufferid, buffername in rows:
        buffers.setdefault(networkid, []).append((bufferid, buffername))
    return buffers
