"""
Input Sanitization Module

Cleans free text and identifiers taken from request payloads before they
reach the ledger. Values are stored as plain text; the JSON responses are
escaped by the client that renders them.
"""

import re

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_text(text, max_length=10000):
    """
    Sanitize free text (names, notes).

    Removes control characters and null bytes, collapses runs of whitespace
    and truncates to ``max_length``.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 10000)

    Returns:
        Sanitized string ('' for None)
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    # Control characters become spaces so words stay apart
    text = _CONTROL_CHARS.sub(' ', text)

    # Collapse multiple spaces
    text = re.sub(r'\s+', ' ', text).strip()

    # Truncate if too long
    if len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_identifier(value):
    """
    Sanitize an ingredient or menu id/name taken from a URL or payload.

    Returns None for missing or blank values so callers can let the services
    raise their own "required" error. Over-long values are left whole for
    the services to reject rather than truncated into a different key.
    """
    if value is None:
        return None
    cleaned = sanitize_text(value)
    return cleaned or None
