"""
Credential Store Protocol

The review client reads one secret, the Gemini API key, from an external
settings store. Implementations decide where it lives.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CredentialStore(Protocol):
    """Protocol for persisting and retrieving the API key."""

    def get(self) -> str | None:
        """Return the stored key, or None when nothing is stored."""
        ...

    def set(self, value: str) -> None:
        """Persist a new key, replacing any previous value."""
        ...
