"""Fixed message templates for SMS conversations."""


def conversation_reset():
    """Confirmation sent after a reset command."""
    return "Your conversation is now reset."


def error_general():
    """Fallback reply when no answer could be generated."""
    return "Sorry, something went wrong and I couldn't answer that. Please try again, or reply RESET to start over."
