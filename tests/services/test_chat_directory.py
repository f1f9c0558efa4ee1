# tests/services/test_chat_directory.py
"""Tests for chat creation and pair lookup."""

import pytest

from penpal_relay.core.errors import InvalidArgumentError
from penpal_relay.models import Chat
from penpal_relay.schemas.chat import Participant
from penpal_relay.services.chat_directory import pair_key
from tests.conftest import START_MS, make_participants


def test_create_new_chat_defaults(directory, db_session) -> None:
    resolution = directory.create_or_get_chat(make_participants("bob", "alice"))

    assert resolution.created is True
    chat = resolution.chat
    assert chat.id
    assert chat.type == "penpal"
    assert chat.participant_uids == ["bob", "alice"]
    assert chat.participants == [
        {"uid": "bob", "display_name": "Bob"},
        {"uid": "alice", "display_name": "Alice"},
    ]
    assert chat.last_updated_ms == START_MS
    assert chat.has_last_message is False
    assert db_session.query(Chat).count() == 1


def test_create_is_idempotent_regardless_of_order(directory, db_session) -> None:
    first = directory.create_or_get_chat(make_participants("alice", "bob"))
    second = directory.create_or_get_chat(make_participants("bob", "alice"))
    third = directory.create_or_get_chat(make_participants("alice", "bob"), "onetime")

    assert second.created is False
    assert first.chat.id == second.chat.id == third.chat.id
    # The existing chat is returned unchanged, including its type.
    assert third.chat.type == "penpal"
    assert db_session.query(Chat).count() == 1


def test_distinct_pairs_get_distinct_chats(directory, db_session) -> None:
    ab = directory.create_or_get_chat(make_participants("alice", "bob")).chat
    ac = directory.create_or_get_chat(make_participants("alice", "carol")).chat
    bc = directory.create_or_get_chat(make_participants("carol", "bob")).chat

    assert len({ab.id, ac.id, bc.id}) == 3
    assert db_session.query(Chat).count() == 3


def test_onetime_type_is_recorded(directory) -> None:
    chat = directory.create_or_get_chat(make_participants("alice", "bob"), "onetime").chat
    assert chat.type == "onetime"


@pytest.mark.parametrize("uids", [(), ("alice",), ("alice", "bob", "carol")])
def test_exactly_two_participants_required(directory, uids) -> None:
    with pytest.raises(InvalidArgumentError, match="Exactly two participants"):
        directory.create_or_get_chat(make_participants(*uids))


def test_find_chat_misses_unknown_pair(directory) -> None:
    directory.create_or_get_chat(make_participants("alice", "bob"))

    assert directory.find_chat("alice", "dave") is None
    assert directory.find_chat("bob", "alice") is not None


def test_extra_descriptor_fields_are_dropped(directory) -> None:
    participants = [
        Participant.model_validate({"uid": "alice", "photo_url": "https://x/a.png", "role": "x"}),
        Participant(uid="bob"),
    ]
    chat = directory.create_or_get_chat(participants).chat

    assert chat.participants == [{"uid": "alice", "photo_url": "https://x/a.png"}, {"uid": "bob"}]


def test_pair_key_is_unordered() -> None:
    assert pair_key("b", "a") == pair_key("a", "b") == ("a", "b")
