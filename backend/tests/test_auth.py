"""Authentication tests.

Covers both stored hash versions, identity binding and the unknown
hash version error.
"""

import pytest

from conftest import ALICE_PASSWORD, BOB_PASSWORD
from quasseldb.exceptions import UnknownHashVersionError
from quasseldb.passwords import LegacyDigest


def test_authenticate_salted_hash(quassel):
    assert quassel.authenticate("alice", ALICE_PASSWORD) is True
    assert quassel.user_id == 1


def test_authenticate_legacy_hash(quassel):
    assert quassel.authenticate("bob", BOB_PASSWORD) is True
    assert quassel.user_id == 2


def test_authenticate_with_known_userid_skips_lookup(quassel):
    assert quassel.authenticate(None, BOB_PASSWORD, userid=2) is True
    assert quassel.user_id == 2


def test_wrong_password_is_rejected(quassel):
    assert quassel.authenticate("alice", "nope") is False
    assert quassel.user_id is None


def test_unknown_user_is_rejected(quassel):
    assert quassel.authenticate("mallory", "anything") is False
    assert quassel.user_id is None


def test_none_password_is_rejected(alice):
    assert alice.authenticate("bob", None) is False
    assert alice.authenticate(None, None, userid=2) is False
    assert alice.user_id == 1


def test_failed_authentication_keeps_bound_user(alice):
    """A failed attempt for another account must not log alice out."""
    assert alice.authenticate("bob", "wrong") is False
    assert alice.user_id == 1


def test_unknown_hash_version_raises(alice):
    with pytest.raises(UnknownHashVersionError):
        alice.authenticate("carol", "whatever")
    assert alice.user_id == 1


def test_authenticate_with_hash(quassel):
    candidate = LegacyDigest().hash(BOB_PASSWORD)

    assert quassel.authenticate_with_hash(2, "0" * 40) is False
    assert quassel.user_id is None
    assert quassel.authenticate_with_hash(2, candidate) is True
    assert quassel.user_id == 2


def test_authenticate_with_hash_unknown_user(quassel):
    assert quassel.authenticate_with_hash(99, "x") is False


def test_lookups(quassel):
    assert quassel.get_user_id("alice") == 1
    assert quassel.get_user_id("nobody") is None
    assert quassel.get_username(2) == "bob"
    assert quassel.get_username(99) is None
    assert quassel.get_hash_data(2) == (LegacyDigest().hash(BOB_PASSWORD), 0)
    assert quassel.get_hash_data(99) is None
