# backend/quasseldb/base.py
"""
SQLAlchemy Base and Engine Configuration

Provides the declarative base for all models, the connection URL builder
and the session scope used by every query.

Quassel cores store their data either in PostgreSQL or in a single SQLite
file, so both backends are supported here.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import URL, create_engine
from sqlalchemy.exc import OperationalError, TimeoutError
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

POSTGRES = "pgsql"
SQLITE = "sqlite"

# Accepted spellings of the backend name, mapped to SQLAlchemy drivers
DB_DRIVERS = {
    "pgsql": "postgresql+psycopg2",
    "postgres": "postgresql+psycopg2",
    "postgresql": "postgresql+psycopg2",
    "sqlite": "sqlite",
}

# Declarative base for all models
Base = declarative_base()


def normalize_db_type(db_type: str) -> str:
    """Map a backend alias to POSTGRES or SQLITE.

    Raises:
        ValueError: If the backend is not supported
    """
    key = (db_type or "").lower()
    if key not in DB_DRIVERS:
        raise ValueError(f"Unsupported database type: {db_type!r}")
    return SQLITE if key == SQLITE else POSTGRES


def build_database_url(credentials, db_type: str = POSTGRES, port: int = None) -> URL:
    """Build a connection URL from positional credentials.

    PostgreSQL: credentials = [host, username, password, database]
    SQLite:     credentials = ['/path/to/quassel-storage.sqlite']

    Missing trailing elements are treated as absent. For SQLite only the
    first element is used. The database name is only emitted when given.
    """
    kind = normalize_db_type(db_type)
    values = list(credentials or []) + [None] * 4
    host, username, password, database = values[:4]

    if kind == SQLITE:
        if not host:
            raise ValueError("No SQLite database path given")
        # No host segment for file databases
        return URL.create(DB_DRIVERS[SQLITE], database=host)

    return URL.create(
        DB_DRIVERS[POSTGRES],
        username=username or None,
        password=password or None,
        host=host or None,
        port=int(port) if port else None,
        database=database or None,
    )


def create_db_engine(url: URL, echo: bool = False):
    """Create an engine for a Quassel database."""
    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before use
        echo=echo,
        hide_parameters=True,  # Keep bound values (password hashes) out of logs
    )


def make_session_factory(engine):
    """Session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(session_factory):
    """Open a short-lived SQLAlchemy session (context manager).

    The session checks out a connection on its first query, so pool and
    connection failures surface from the body of the block.
    """
    db = session_factory()
    try:
        yield db
    except TimeoutError:
        logger.error("Connection pool exhausted (all connections in use)")
        db.rollback()
        raise
    except OperationalError as e:
        logger.error(f"Database operational error: {type(e).__name__}")
        db.rollback()
        raise
    except Exception as e:
        logger.error(f"Session error: {type(e).__name__}")
        db.rollback()  # Explicit rollback on error
        raise
    finally:
        db.close()
