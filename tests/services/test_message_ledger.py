# tests/services/test_message_ledger.py
"""Tests for the message write path and read-status updates."""

import pytest

from penpal_relay.core.errors import (
    DependencyFailureError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from penpal_relay.models import ChatMessage


def test_send_returns_plaintext_and_stores_ciphertext(ledger, penpal_chat, db_session, cipher, clock) -> None:
    sent = ledger.send_message(penpal_chat.id, "alice", "hi bob")

    assert sent.text == "hi bob"
    assert sent.chat_id == penpal_chat.id
    assert sent.chat_type == "penpal"
    assert sent.timestamp_ms == clock()

    stored = db_session.get(ChatMessage, sent.id)
    assert stored.text != "hi bob"
    assert cipher.decrypt(stored.text) == "hi bob"


def test_send_updates_chat_summary(ledger, penpal_chat, repo, clock) -> None:
    clock.advance(seconds=5)
    sent = ledger.send_message(penpal_chat.id, "alice", "hello")

    chat = repo.get_chat(penpal_chat.id)
    assert chat.last_message_sender_id == "alice"
    assert chat.last_message_status == "unread"
    assert chat.last_message_ms == sent.timestamp_ms
    assert chat.last_updated_ms == sent.timestamp_ms
    # The summary holds the same ciphertext as the message row.
    assert chat.last_message_text != "hello"


@pytest.mark.parametrize("text", [None, ""])
def test_text_is_required(ledger, penpal_chat, text) -> None:
    with pytest.raises(InvalidArgumentError):
        ledger.send_message(penpal_chat.id, "alice", text)


def test_send_to_missing_chat(ledger) -> None:
    with pytest.raises(NotFoundError):
        ledger.send_message("does-not-exist", "alice", "hi")


def test_onetime_chat_accepts_a_single_message(ledger, onetime_chat, db_session) -> None:
    sent = ledger.send_message(onetime_chat.id, "alice", "hi")
    assert sent.text == "hi"

    with pytest.raises(ForbiddenError):
        ledger.send_message(onetime_chat.id, "alice", "again")
    with pytest.raises(ForbiddenError):
        ledger.send_message(onetime_chat.id, "bob", "reply")

    assert db_session.query(ChatMessage).count() == 1


def test_penpal_chat_accepts_many_messages(ledger, penpal_chat, db_session, clock) -> None:
    for i in range(5):
        clock.advance(ms=1)
        ledger.send_message(penpal_chat.id, "alice" if i % 2 else "bob", f"message {i}")

    assert db_session.query(ChatMessage).count() == 5


def test_mark_read_flips_status_for_recipient(ledger, penpal_chat, repo) -> None:
    ledger.send_message(penpal_chat.id, "alice", "hi")

    assert ledger.mark_last_message_read(penpal_chat, "bob") is True
    assert repo.get_chat(penpal_chat.id).last_message_status == "read"


def test_mark_read_is_noop_for_sender(ledger, penpal_chat, repo) -> None:
    ledger.send_message(penpal_chat.id, "alice", "hi")

    assert ledger.mark_last_message_read(penpal_chat, "alice") is False
    assert repo.get_chat(penpal_chat.id).last_message_status == "unread"


def test_mark_read_is_noop_without_messages(ledger, penpal_chat, repo) -> None:
    assert ledger.mark_last_message_read(penpal_chat, "bob") is False
    assert repo.get_chat(penpal_chat.id).last_message_status is None


def test_mark_read_is_noop_when_already_read(ledger, penpal_chat, mocker) -> None:
    ledger.send_message(penpal_chat.id, "alice", "hi")
    ledger.mark_last_message_read(penpal_chat, "bob")

    spy = mocker.spy(ledger.repo, "set_last_message_read")
    assert ledger.mark_last_message_read(penpal_chat, "bob") is False
    spy.assert_not_called()


def test_mark_read_failure_is_swallowed(ledger, penpal_chat, repo, mocker) -> None:
    ledger.send_message(penpal_chat.id, "alice", "hi")
    mocker.patch.object(
        repo,
        "set_last_message_read",
        side_effect=DependencyFailureError("Failed to mark last message read"),
    )

    assert ledger.mark_last_message_read(penpal_chat, "bob") is False
