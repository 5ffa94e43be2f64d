"""Conversation turns and history serialization."""

import json
from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationMessage:
    """One turn in a conversation."""

    role: Role
    content: str

    @classmethod
    def from_user(cls, content: str) -> "ConversationMessage":
        return cls(Role.USER, content)

    @classmethod
    def from_assistant(cls, content: str) -> "ConversationMessage":
        return cls(Role.ASSISTANT, content)

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, record: dict) -> "ConversationMessage":
        return cls(Role(record["role"]), record["content"])


# Oldest turn first
ConversationHistory = list[ConversationMessage]


def history_to_json(history: ConversationHistory) -> str:
    """Serialize a history as an ordered array of {role, content} records."""
    return json.dumps([message.to_dict() for message in history])


def history_from_json(raw: str | None) -> ConversationHistory:
    """
    Deserialize a stored history.

    Args:
        raw: JSON text as written by history_to_json, or None

    Returns:
        The history, or an empty list when nothing is stored

    Raises:
        ValueError: If the stored text is not a valid history
    """
    if raw is None or not raw.strip():
        return []

    try:
        records = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Stored history is not valid JSON: {e}") from e

    if records is None:
        return []
    if not isinstance(records, list):
        raise ValueError("Stored history is not a list of messages")

    try:
        return [ConversationMessage.from_dict(record) for record in records]
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Stored history has a malformed message: {e}") from e


def to_api_messages(history: ConversationHistory) -> list[dict]:
    """Convert a history into chat-completion request messages."""
    return [message.to_dict() for message in history]
