"""Chat completion client for generating SMS replies."""

import os

import openai
from openai import OpenAI

from chat.conversation import ConversationHistory, to_api_messages
from llm.errors import CompletionError

DEFAULT_MODEL = "gpt-4"


class CompletionClient:
    """Turns a conversation history into the model's next reply."""

    def __init__(self, model: str | None = None, client=None):
        """
        Initialize the completion client.

        Args:
            model: Model identifier. If not provided, reads OPENAI_MODEL env var,
                falling back to gpt-4.
            client: Preconfigured OpenAI client. If not provided, one is created
                from the OPENAI_API_KEY env var.
        """
        self.model = model or os.getenv("OPENAI_MODEL") or DEFAULT_MODEL

        if client is None:
            if not os.getenv("OPENAI_API_KEY"):
                raise ValueError(
                    "OpenAI credentials not provided. Set the OPENAI_API_KEY environment variable."
                )
            client = OpenAI()
        self.client = client

    def complete(self, history: ConversationHistory, user_id: str) -> str:
        """
        Generate the assistant's reply to a conversation.

        Args:
            history: Full conversation, oldest turn first
            user_id: Anonymized user id, passed to the provider for abuse tracking

        Returns:
            Reply text, trimmed of surrounding whitespace

        Raises:
            CompletionError: If the provider reports a failure or returns no reply
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=to_api_messages(history),
                user=user_id,
            )
        except openai.APIError as e:
            raise CompletionError.from_api_error(e) from e

        if not response.choices:
            raise CompletionError()

        content = response.choices[0].message.content
        if content is None:
            raise CompletionError()

        return content.strip()
