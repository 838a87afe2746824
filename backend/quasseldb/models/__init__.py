# backend/quasseldb/models/__init__.py
"""SQLAlchemy models for the Quassel core tables."""

from .backlog import Backlog, Sender
from .buffer import Buffer
from .network import Network
from .user import QuasselUser

__all__ = [
    "QuasselUser",
    "Network",
    "Buffer",
    "Sender",
    "Backlog",
]
