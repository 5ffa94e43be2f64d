"""Tests for conversation history storage."""

import pytest

from chat.conversation import ConversationMessage, Role, history_from_json, history_to_json
from chat.session import PostgresSessionStore


def test_load_missing_key_returns_empty_history(store):
    assert store.load("+15551234567") == []


def test_save_then_load_round_trips_history(store):
    history = []
    for i in range(7):
        if i % 2 == 0:
            history.append(ConversationMessage.from_user(f"question {i}"))
        else:
            history.append(ConversationMessage.from_assistant(f"answer {i}\n\nwith paragraphs"))

    store.save("+15551234567", history)
    loaded = store.load("+15551234567")

    assert len(loaded) == len(history)
    for original, restored in zip(history, loaded):
        assert restored.role == original.role
        assert restored.content == original.content


def test_save_overwrites_previous_history(store):
    store.save("+15551234567", [ConversationMessage.from_user("first")])
    store.save("+15551234567", [ConversationMessage.from_user("second")])

    assert store.load("+15551234567") == [ConversationMessage.from_user("second")]


def test_load_after_clear_returns_empty_history(store):
    store.save("+15551234567", [ConversationMessage.from_user("Hello")])
    store.clear("+15551234567")

    assert store.load("+15551234567") == []


def test_clear_missing_key_is_harmless(store):
    store.clear("+15550000000")
    assert store.load("+15550000000") == []


def test_histories_are_kept_per_sender(store):
    store.save("+15551111111", [ConversationMessage.from_user("one")])
    store.save("+15552222222", [ConversationMessage.from_user("two")])
    store.clear("+15551111111")

    assert store.load("+15551111111") == []
    assert store.load("+15552222222") == [ConversationMessage.from_user("two")]


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "null",
        "not json at all",
        '{"role": "user", "content": "hi"}',
        '[{"role": "user"}]',
        '[{"role": "system", "content": "hi"}]',
        '["hello"]',
    ],
)
def test_unreadable_stored_history_loads_as_empty(sessions, store, raw):
    sessions.set("+15551234567", raw)
    assert store.load("+15551234567") == []


def test_stored_format_is_ordered_role_content_records():
    history = [ConversationMessage.from_user("Hello"), ConversationMessage.from_assistant("Hi there!")]

    assert history_to_json(history) == (
        '[{"role": "user", "content": "Hello"}, {"role": "assistant", "content": "Hi there!"}]'
    )
    assert history_from_json(history_to_json(history))[1].role is Role.ASSISTANT


def test_messages_are_immutable():
    message = ConversationMessage.from_user("Hello")
    with pytest.raises(AttributeError):
        message.content = "changed"


def test_postgres_store_requires_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ValueError, match="DATABASE_URL"):
        PostgresSessionStore()
