"""Split generated replies into SMS-sized messages."""

# 320 characters is Twilio's recommended length for best deliverability.
# A single Twilio message can carry up to 1600.
MAX_SEGMENT_LENGTH = 320

PARAGRAPH_SEPARATOR = "\n\n"


def split_text_into_messages(text: str, max_length: int = MAX_SEGMENT_LENGTH) -> list[str]:
    """
    Split text into messages along paragraph boundaries.

    Paragraphs are packed left to right. Before the next paragraph is added,
    the current message is flushed if the paragraph (plus separator) would push
    it past max_length. A single paragraph longer than max_length is never cut,
    so that message will exceed the limit.

    Args:
        text: Text to split
        max_length: Maximum length of each message

    Returns:
        Messages in paragraph order. Always at least one; empty text gives [""].
    """
    paragraphs = text.split(PARAGRAPH_SEPARATOR)

    messages = []
    current = ""
    for paragraph, next_paragraph in zip(paragraphs, paragraphs[1:]):
        current += paragraph

        if len(current) + len(PARAGRAPH_SEPARATOR) + len(next_paragraph) > max_length:
            messages.append(current)
            current = ""
        else:
            current += PARAGRAPH_SEPARATOR

    current += paragraphs[-1]
    messages.append(current)

    return messages
