"""Ordered delivery of multi-part SMS replies."""

import time
from dataclasses import dataclass, field

from sms.twilio import DeliverySendError

# Twilio can't guarantee the order messages arrive in; that's up to the carrier.
# Spacing sends out gets them delivered in order most of the time.
SEND_DELAY_SECONDS = 1.0


@dataclass
class DeliveryReport:
    """Outcome of delivering a sequence of messages."""

    sent: list[str] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def deliver_messages(
    sms_client,
    messages: list[str],
    to: str,
    from_: str,
    delay: float = SEND_DELAY_SECONDS,
    sleep=time.sleep,
) -> DeliveryReport:
    """
    Send messages one at a time, in order, pausing between sends.

    Empty messages are skipped, since Twilio rejects an empty body. A failed
    send is recorded and delivery moves on to the next message. Nothing is
    retried.

    Args:
        sms_client: Client with send_message(to, from_, body) returning a message SID
        messages: Message texts in the order they should arrive
        to: Recipient phone number
        from_: Phone number to send from
        delay: Seconds to wait after each send before the next one
        sleep: Sleep function

    Returns:
        DeliveryReport with SIDs of sent messages and errors keyed by the index
        among the non-empty messages
    """
    report = DeliveryReport()

    non_empty = [body for body in messages if body]
    if len(non_empty) < len(messages):
        print(f"⚠️ Skipping {len(messages) - len(non_empty)} empty message(s)")
    messages = non_empty

    for idx, body in enumerate(messages):
        if idx > 0:
            sleep(delay)

        try:
            sid = sms_client.send_message(to=to, from_=from_, body=body)
            report.sent.append(sid)
            print(f"📤 Sent message {idx + 1}/{len(messages)} ({len(body)} chars)")
        except DeliverySendError as e:
            report.failed[idx] = str(e)
            print(f"✗ Failed to send message {idx + 1}/{len(messages)}: {e}")

    return report
