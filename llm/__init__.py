"""LLM module - chat completions for SMS replies."""

from .errors import CompletionError, format_completion_error
from .completion import CompletionClient

__all__ = ["CompletionClient", "CompletionError", "format_completion_error"]
