"""Twilio REST client for sending SMS messages."""

import os

import requests

TWILIO_API_URL = "https://api.twilio.com/2010-04-01"


class DeliverySendError(Exception):
    """A single message could not be handed to Twilio."""

    def __init__(self, message: str, code: int | None = None):
        self.code = code
        super().__init__(f"{code}: {message}" if code else message)


class TwilioClient:
    def __init__(self, account_sid: str | None = None, auth_token: str | None = None):
        """
        Initialize Twilio client with credentials.

        Args:
            account_sid: Twilio account SID. If not provided, reads from TWILIO_ACCOUNT_SID env var.
            auth_token: Twilio auth token. If not provided, reads from TWILIO_AUTH_TOKEN env var.
        """
        self.account_sid = account_sid or os.getenv("TWILIO_ACCOUNT_SID")
        self.auth_token = auth_token or os.getenv("TWILIO_AUTH_TOKEN")

        if not self.account_sid or not self.auth_token:
            raise ValueError(
                "Twilio credentials not provided. "
                "Set TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN environment variables "
                "or pass them as arguments."
            )

        self.messages_url = f"{TWILIO_API_URL}/Accounts/{self.account_sid}/Messages.json"
        self.session = requests.Session()
        self.session.auth = (self.account_sid, self.auth_token)

    def send_message(self, to: str, from_: str, body: str) -> str:
        """
        Send one SMS.

        Twilio queues the message and the carrier delivers it; there is no
        ordering guarantee between separate calls.

        Args:
            to: Recipient phone number
            from_: Twilio phone number to send from
            body: Message text

        Returns:
            The Twilio message SID

        Raises:
            DeliverySendError: If the request fails or Twilio rejects the message
        """
        try:
            response = self.session.post(
                self.messages_url,
                data={"To": to, "From": from_, "Body": body},
                timeout=30,
            )
        except requests.RequestException as e:
            raise DeliverySendError(f"Could not reach Twilio: {e}") from e

        if not response.ok:
            try:
                error = response.json()
            except ValueError:
                error = {}
            raise DeliverySendError(
                error.get("message") or f"Twilio returned HTTP {response.status_code}",
                code=error.get("code"),
            )

        return response.json().get("sid")
