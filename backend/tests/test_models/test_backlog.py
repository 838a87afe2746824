# tests/test_models/test_backlog.py
"""Tests for the core table models.

Uses the seeded test database from conftest.py.
"""

from quasseldb.models import Backlog, Buffer, Network, QuasselUser, Sender


def test_user_defaults(db_session):
    user = QuasselUser(username="frank", password="x")
    db_session.add(user)
    db_session.commit()

    assert user.userid is not None
    assert user.hashversion == 0
    assert user.authenticator == "Database"


def test_network_defaults(db_session):
    network = Network(userid=1, networkname="hackint")
    db_session.add(network)
    db_session.commit()

    assert network.useautoreconnect is True
    assert network.connected is False


def test_backlog_to_dict(db_session):
    entry = db_session.get(Backlog, 29)

    assert entry.to_dict()["message"] == "hello from bob"
    assert entry.to_dict()["bufferid"] == 3
    assert set(entry.to_dict()) == {
        "messageid",
        "time",
        "bufferid",
        "type",
        "flags",
        "senderid",
        "message",
    }


def test_reprs(db_session):
    assert repr(db_session.get(QuasselUser, 1)) == "<QuasselUser(userid=1, username=alice)>"
    assert repr(db_session.get(Buffer, 3)) == "<Buffer(bufferid=3, name=#c)>"
    assert repr(db_session.get(Sender, 3)) == "<Sender(senderid=3, sender=bob!b@host)>"
