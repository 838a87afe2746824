"""Core test fixtures.

Every test gets its own SQLite file with the core tables created from the
declarative models and seeded with a small, known data set:

    alice (hashversion 1, password "alicepass")
        network 1: buffer 1 "#a", buffer 2 "#b"
        network 2: buffer 4 "#d"
    bob (hashversion 0, password "bobpass")
        network 3: buffer 3 "#c"
    carol (hashversion 7, cannot be verified)

Backlog:
    1-25   buffer 1, "line N" (5 and 6 say hello), BASE_TIME + N minutes
    26-28  buffer 2, BASE_TIME + 1 day
    29     buffer 3, BASE_TIME + 1 day
    30     buffer 4, BASE_TIME + 2 days
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import URL, create_engine
from sqlalchemy.orm import sessionmaker

from quasseldb import QuasselDB
from quasseldb.base import Base
from quasseldb.constants import BacklogType
from quasseldb.models import Backlog, Buffer, Network, QuasselUser, Sender
from quasseldb.passwords import LegacyDigest, SaltedDigest

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)

ALICE_PASSWORD = "alicepass"
BOB_PASSWORD = "bobpass"


def _backlog_rows():
    rows = []
    for i in range(1, 26):
        message = f"line {i}"
        sender, msg_type = 1, BacklogType.PLAIN
        if i == 5:
            message = "hello there"
        elif i == 6:
            message, sender, msg_type = "hello again", 3, BacklogType.ACTION
        rows.append((i, 1, msg_type, sender, message, BASE_TIME + timedelta(minutes=i)))

    day = BASE_TIME + timedelta(days=1)
    rows += [
        (26, 2, BacklogType.PLAIN, 2, "hello from b", day),
        (27, 2, BacklogType.JOIN, 3, "", day + timedelta(minutes=1)),
        (28, 2, BacklogType.PLAIN, 1, "bye", day + timedelta(minutes=2)),
        (29, 3, BacklogType.PLAIN, 3, "hello from bob", day + timedelta(minutes=3)),
        (30, 4, BacklogType.NOTICE, 4, "hello status", BASE_TIME + timedelta(days=2)),
    ]
    return rows


# ============================================================================
# TEST DATABASE SETUP
# ============================================================================


@pytest.fixture
def db_path(tmp_path):
    """Path of this test's SQLite database file."""
    return tmp_path / "quassel-storage.sqlite"


@pytest.fixture
def test_engine(db_path):
    """Engine for the test database with all core tables created.

    Yields:
        Engine: SQLAlchemy engine connected to the test database
    """
    engine = create_engine(URL.create("sqlite", database=str(db_path)))
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_session_local(test_engine):
    """Session factory bound to the test database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db_session(test_session_local):
    """Database session seeded with the data set described above.

    Yields:
        Session: SQLAlchemy session on the test database
    """
    session = test_session_local()

    session.add_all(
        [
            QuasselUser(
                userid=1,
                username="alice",
                password=SaltedDigest("abc123salt").hash(ALICE_PASSWORD),
                hashversion=1,
            ),
            QuasselUser(
                userid=2,
                username="bob",
                password=LegacyDigest().hash(BOB_PASSWORD),
                hashversion=0,
            ),
            QuasselUser(userid=3, username="carol", password="whatever", hashversion=7),
        ]
    )
    session.flush()

    session.add_all(
        [
            Network(networkid=1, userid=1, networkname="libera", connected=True),
            Network(networkid=2, userid=1, networkname="oftc", connected=True),
            Network(networkid=3, userid=2, networkname="libera", connected=True),
        ]
    )
    session.flush()

    session.add_all(
        [
            Buffer(bufferid=1, userid=1, networkid=1, buffername="#a", buffercname="#a"),
            Buffer(bufferid=2, userid=1, networkid=1, buffername="#b", buffercname="#b"),
            Buffer(bufferid=3, userid=2, networkid=3, buffername="#c", buffercname="#c"),
            Buffer(bufferid=4, userid=1, networkid=2, buffername="#d", buffercname="#d"),
        ]
    )
    session.add_all(
        [
            Sender(senderid=1, sender="alice!a@host1"),
            Sender(senderid=2, sender="alice!a@host2"),
            Sender(senderid=3, sender="bob!b@host"),
            Sender(senderid=4, sender="alicebot!x@services"),
        ]
    )
    session.flush()

    session.add_all(
        [
            Backlog(
                messageid=messageid,
                bufferid=bufferid,
                type=int(msg_type),
                senderid=senderid,
                message=message,
                time=time,
            )
            for messageid, bufferid, msg_type, senderid, message, time in _backlog_rows()
        ]
    )
    session.commit()

    yield session
    session.rollback()
    session.close()


# ============================================================================
# QUASSELDB FIXTURES
# ============================================================================


@pytest.fixture
def quassel(db_path, db_session):
    """Connected QuasselDB with no user bound."""
    db = QuasselDB()
    assert db.connect([str(db_path)], "sqlite") is True
    yield db
    db.close()


@pytest.fixture
def alice(quassel):
    """QuasselDB authenticated as alice (userid 1)."""
    assert quassel.authenticate("alice", ALICE_PASSWORD) is True
    return quassel
