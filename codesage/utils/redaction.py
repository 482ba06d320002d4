"""
Helpers for keeping secrets and user code out of logs.

Provides:
- redact(): stable hash of a sensitive string, for correlation without exposure
- redact_api_key(): strip a key=... query parameter from URLs and error text
- preview(): short single-line preview of user-supplied text
"""

from __future__ import annotations

import re
from hashlib import sha256

_KEY_PARAM_REGEX = re.compile(r"([?&]key=)[^&\s'\"]+", re.IGNORECASE)


def redact(value: str | None) -> str:
    """
    Return a stable hash representation of a sensitive string.
    """
    if not value:
        return "hash:missing"
    digest = sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"hash:{digest}"


def redact_api_key(text: str) -> str:
    """
    Replace the value of any key= query parameter with a placeholder.

    Example:
        "POST https://host/x?key=AIza123 failed" ->
        "POST https://host/x?key=[REDACTED] failed"
    """
    if not text:
        return text
    return _KEY_PARAM_REGEX.sub(r"\1[REDACTED]", text)


def preview(text: str | None, max_length: int = 40) -> str:
    """Collapse whitespace and truncate text for log lines."""
    if not text:
        return "(empty)"
    collapsed = " ".join(text.split())
    if len(collapsed) <= max_length:
        return collapsed
    return collapsed[:max_length] + "..."
