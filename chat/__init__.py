"""Chat module - SMS conversations with an LLM via Twilio."""

from .chunker import split_text_into_messages, MAX_SEGMENT_LENGTH
from .conversation import ConversationMessage, Role
from .session import ConversationStore, PostgresSessionStore, MemorySessionStore
from .webhook import (
    handle_incoming_sms,
    reply_with_completion,
    parse_twilio_request,
    InboundMessage,
    ReplyJob,
)
from . import messages

__all__ = [
    "split_text_into_messages",
    "MAX_SEGMENT_LENGTH",
    "ConversationMessage",
    "Role",
    "ConversationStore",
    "PostgresSessionStore",
    "MemorySessionStore",
    "handle_incoming_sms",
    "reply_with_completion",
    "parse_twilio_request",
    "InboundMessage",
    "ReplyJob",
    "messages",
]
