"""Errors raised by the completion client."""

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


def format_completion_error(code: str | None, message: str) -> str:
    """Combine a provider error code and message as "<code>: <message>"."""
    if code:
        return f"{code}: {message}"
    return message


class CompletionError(Exception):
    """The completion service failed or returned nothing usable."""

    def __init__(self, message: str = UNEXPECTED_ERROR_MESSAGE, code: str | None = None):
        self.code = code
        self.message = message
        super().__init__(format_completion_error(code, message))

    @classmethod
    def from_api_error(cls, error) -> "CompletionError":
        """Build from an openai SDK error, preferring the structured error body."""
        body = error.body if isinstance(error.body, dict) else {}
        # Some responses wrap the details in an "error" object
        if isinstance(body.get("error"), dict):
            body = body["error"]

        code = body.get("code") or getattr(error, "code", None)
        code = str(code) if code else None
        message = body.get("message") or getattr(error, "message", None)
        if not message:
            return cls(code=code)
        return cls(message, code=code)
