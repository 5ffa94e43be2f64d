"""Shared fakes for the SMS chat tests."""

from types import SimpleNamespace

import pytest

from chat.session import ConversationStore, MemorySessionStore
from llm.errors import CompletionError
from sms.twilio import DeliverySendError


class FakeSmsClient:
    """Records sent messages; fails the sends whose index is in fail_on."""

    def __init__(self, fail_on=()):
        self.sent = []
        self.fail_on = set(fail_on)

    def send_message(self, to: str, from_: str, body: str) -> str:
        idx = len(self.sent)
        self.sent.append({"to": to, "from": from_, "body": body})
        if idx in self.fail_on:
            raise DeliverySendError("Carrier rejected message", code=30007)
        return f"SM{idx:032d}"


class FakeCompletionClient:
    def __init__(self, reply: str = "Hi there!", error: CompletionError | None = None):
        self.reply = reply
        self.error = error
        self.calls = []

    def complete(self, history, user_id):
        self.calls.append({"history": list(history), "user_id": user_id})
        if self.error:
            raise self.error
        return self.reply


class FakeChatCompletions:
    """Stands in for OpenAI().chat.completions."""

    def __init__(self, content=None, error=None, choices=None):
        self.content = content
        self.error = error
        self.choices = choices
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        if self.choices is not None:
            return SimpleNamespace(choices=self.choices)
        message = SimpleNamespace(role="assistant", content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(index=0, message=message)])


def fake_openai(completions: FakeChatCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def sessions():
    return MemorySessionStore()


@pytest.fixture
def store(sessions):
    return ConversationStore(sessions)


@pytest.fixture
def sms_client():
    return FakeSmsClient()


@pytest.fixture
def sleep():
    return RecordingSleep()
