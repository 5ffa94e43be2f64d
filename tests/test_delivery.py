"""Tests for ordered SMS delivery and the Twilio client."""

import pytest
import requests

from chat.chunker import split_text_into_messages
from sms.delivery import SEND_DELAY_SECONDS, deliver_messages
from sms.twilio import DeliverySendError, TwilioClient
from tests.conftest import FakeSmsClient


def test_sends_every_message_in_order(sms_client, sleep):
    report = deliver_messages(
        sms_client, ["one", "two", "three"], to="+15551234567", from_="+15557654321", sleep=sleep
    )

    assert [m["body"] for m in sms_client.sent] == ["one", "two", "three"]
    assert all(m["to"] == "+15551234567" for m in sms_client.sent)
    assert all(m["from"] == "+15557654321" for m in sms_client.sent)
    assert report.ok
    assert len(report.sent) == 3


def test_waits_one_second_between_sends(sms_client, sleep):
    deliver_messages(sms_client, ["one", "two", "three"], to="+1", from_="+2", sleep=sleep)

    assert SEND_DELAY_SECONDS == 1.0
    assert sleep.calls == [1.0, 1.0]


def test_single_message_does_not_wait(sms_client, sleep):
    deliver_messages(sms_client, ["only"], to="+1", from_="+2", sleep=sleep)
    assert sleep.calls == []


def test_failed_send_does_not_stop_delivery(sleep):
    sms_client = FakeSmsClient(fail_on={1})

    report = deliver_messages(sms_client, ["one", "two", "three"], to="+1", from_="+2", sleep=sleep)

    assert [m["body"] for m in sms_client.sent] == ["one", "two", "three"]
    assert not report.ok
    assert len(report.sent) == 2
    assert list(report.failed) == [1]
    assert "Carrier rejected message" in report.failed[1]


def test_empty_messages_are_not_sent(sms_client, sleep):
    report = deliver_messages(sms_client, ["one", "", "two", ""], to="+1", from_="+2", sleep=sleep)

    assert [m["body"] for m in sms_client.sent] == ["one", "two"]
    assert report.ok
    assert sleep.calls == [1.0]


def test_reply_with_blank_paragraphs_sends_no_empty_message(sms_client, sleep):
    """A run of blank lines near the limit splits into an empty segment, which is skipped."""
    text = "a" * 319 + "\n\n\n\n" + "b" * 319
    segments = split_text_into_messages(text, max_length=320)
    assert [len(segment) for segment in segments] == [319, 0, 319]

    report = deliver_messages(sms_client, segments, to="+1", from_="+2", sleep=sleep)

    assert [m["body"] for m in sms_client.sent] == ["a" * 319, "b" * 319]
    assert report.ok


class FakeResponse:
    def __init__(self, status_code: int, payload=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.payload = payload

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON body")
        return self.payload


def make_twilio_client(monkeypatch, response=None, error=None):
    client = TwilioClient(account_sid="AC123", auth_token="secret")
    calls = []

    def post(url, data=None, timeout=None):
        calls.append({"url": url, "data": data, "timeout": timeout})
        if error:
            raise error
        return response

    monkeypatch.setattr(client.session, "post", post)
    return client, calls


def test_twilio_send_posts_message(monkeypatch):
    client, calls = make_twilio_client(monkeypatch, FakeResponse(201, {"sid": "SM1", "status": "queued"}))

    sid = client.send_message(to="+15551234567", from_="+15557654321", body="Hi there!")

    assert sid == "SM1"
    assert calls[0]["url"] == "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"
    assert calls[0]["data"] == {"To": "+15551234567", "From": "+15557654321", "Body": "Hi there!"}
    assert client.session.auth == ("AC123", "secret")


def test_twilio_rejection_raises_with_code(monkeypatch):
    client, _ = make_twilio_client(
        monkeypatch,
        FakeResponse(400, {"code": 21211, "message": "The 'To' number is not a valid phone number."}),
    )

    with pytest.raises(DeliverySendError) as exc_info:
        client.send_message(to="bogus", from_="+15557654321", body="Hi")

    assert exc_info.value.code == 21211
    assert str(exc_info.value) == "21211: The 'To' number is not a valid phone number."


def test_twilio_error_without_json_body(monkeypatch):
    client, _ = make_twilio_client(monkeypatch, FakeResponse(503))

    with pytest.raises(DeliverySendError, match="Twilio returned HTTP 503"):
        client.send_message(to="+1", from_="+2", body="Hi")


def test_twilio_network_failure_raises(monkeypatch):
    client, _ = make_twilio_client(monkeypatch, error=requests.ConnectionError("timed out"))

    with pytest.raises(DeliverySendError, match="Could not reach Twilio"):
        client.send_message(to="+1", from_="+2", body="Hi")


def test_twilio_requires_credentials(monkeypatch):
    monkeypatch.delenv("TWILIO_ACCOUNT_SID", raising=False)
    monkeypatch.delenv("TWILIO_AUTH_TOKEN", raising=False)

    with pytest.raises(ValueError, match="TWILIO_ACCOUNT_SID"):
        TwilioClient()
