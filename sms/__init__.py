"""SMS module - sending replies through Twilio."""

from .twilio import TwilioClient, DeliverySendError
from .delivery import deliver_messages, DeliveryReport, SEND_DELAY_SECONDS

__all__ = [
    "TwilioClient",
    "DeliverySendError",
    "deliver_messages",
    "DeliveryReport",
    "SEND_DELAY_SECONDS",
]
