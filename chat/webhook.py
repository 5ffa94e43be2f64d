"""Twilio SMS webhook handling and the reply pipeline."""

import hashlib
import time
from dataclasses import dataclass
from urllib.parse import parse_qs

from chat import messages
from chat.chunker import MAX_SEGMENT_LENGTH, split_text_into_messages
from chat.conversation import ConversationHistory, ConversationMessage
from chat.session import ConversationStore
from llm.errors import CompletionError
from sms.delivery import SEND_DELAY_SECONDS, DeliveryReport, deliver_messages

RESET_COMMAND = "reset"

# Twilio expects a webhook answer within 10 seconds; replies are sent separately
EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?>\n<Response></Response>'


def parse_twilio_request(body: bytes) -> dict:
    """Parse incoming Twilio webhook request body."""
    parsed = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
    # parse_qs returns lists, extract single values
    return {k: v[0] if len(v) == 1 else v for k, v in parsed.items()}


def mask_phone(phone_number: str) -> str:
    """Phone number as it may appear in logs."""
    return f"...{phone_number[-4:]}" if phone_number else "unknown"


def anonymize_user_id(phone_number: str) -> str:
    """One-way hash of a sender's phone number, sent upstream instead of the number."""
    return hashlib.sha256(phone_number.encode("utf-8")).hexdigest().upper()


def is_reset_command(body: str) -> bool:
    return body.strip().lower() == RESET_COMMAND


@dataclass(frozen=True)
class InboundMessage:
    from_number: str
    to_number: str
    body: str

    @classmethod
    def from_twilio(cls, data: dict) -> "InboundMessage":
        return cls(
            from_number=data.get("From", ""),
            to_number=data.get("To", ""),
            body=(data.get("Body") or "").strip(),
        )


@dataclass
class ReplyJob:
    """Work left to do for a message after the webhook has been answered."""

    from_number: str
    to_number: str
    user_id: str
    history: ConversationHistory

    def to_dict(self) -> dict:
        return {
            "from_number": self.from_number,
            "to_number": self.to_number,
            "user_id": self.user_id,
            "history": [message.to_dict() for message in self.history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReplyJob":
        return cls(
            from_number=data["from_number"],
            to_number=data["to_number"],
            user_id=data["user_id"],
            history=[ConversationMessage.from_dict(m) for m in data["history"]],
        )


def handle_incoming_sms(
    message: InboundMessage,
    store: ConversationStore,
    sms_client,
    dispatch,
) -> str:
    """
    Handle an incoming SMS up to the point the webhook can be answered.

    A reset command clears the sender's history and confirms by SMS. Anything
    else is added to the sender's conversation and handed to dispatch as a
    ReplyJob, which generates and sends the reply without blocking the webhook.

    Args:
        message: Parsed inbound message
        store: Conversation history store
        sms_client: Client with send_message(to, from_, body)
        dispatch: Callable taking a ReplyJob and returning without waiting for it

    Returns:
        "reset" or "dispatched"
    """
    print(f"📱 Incoming message from {mask_phone(message.from_number)}")

    if is_reset_command(message.body):
        store.clear(message.from_number)
        sms_client.send_message(
            to=message.from_number,
            from_=message.to_number,
            body=messages.conversation_reset(),
        )
        print(f"🔄 Conversation reset for {mask_phone(message.from_number)}")
        return "reset"

    history = store.load(message.from_number)
    history.append(ConversationMessage.from_user(message.body))

    job = ReplyJob(
        from_number=message.from_number,
        to_number=message.to_number,
        user_id=anonymize_user_id(message.from_number),
        history=history,
    )
    dispatch(job)
    print(f"⏳ Reply queued ({len(history)} message(s) in conversation)")
    return "dispatched"


def reply_with_completion(
    job: ReplyJob,
    store: ConversationStore,
    completion_client,
    sms_client,
    max_length: int = MAX_SEGMENT_LENGTH,
    delay: float = SEND_DELAY_SECONDS,
    send_error_reply: bool = False,
    sleep=time.sleep,
) -> DeliveryReport:
    """
    Generate the reply for a queued message, save the conversation, and send it.

    History is only saved once the completion succeeds.

    Args:
        job: Queued reply job
        store: Conversation history store
        completion_client: Client with complete(history, user_id)
        sms_client: Client with send_message(to, from_, body)
        max_length: Maximum length of each outgoing SMS
        delay: Seconds between consecutive SMS sends
        send_error_reply: Tell the sender when no reply could be generated
        sleep: Sleep function used between sends

    Returns:
        DeliveryReport for the reply messages

    Raises:
        CompletionError: If no reply could be generated (logged first)
    """
    try:
        reply = completion_client.complete(job.history, job.user_id)
    except CompletionError as e:
        print(f"❌ Completion failed for {mask_phone(job.from_number)}: {e}")
        if send_error_reply:
            deliver_messages(
                sms_client,
                [messages.error_general()],
                to=job.from_number,
                from_=job.to_number,
                sleep=sleep,
            )
        raise

    history = list(job.history)
    history.append(ConversationMessage.from_assistant(reply))
    store.save(job.from_number, history)

    segments = split_text_into_messages(reply, max_length=max_length)
    print(f"💬 Reply is {len(reply)} chars, sending as {len(segments)} message(s)")

    report = deliver_messages(
        sms_client,
        segments,
        to=job.from_number,
        from_=job.to_number,
        delay=delay,
        sleep=sleep,
    )
    if not report.ok:
        print(f"⚠️ {len(report.failed)} of {len(segments)} message(s) failed to send")
    return report
