"""
Error kinds raised inside the CodeSage review client.

Only ConfigurationError is meant to reach callers of CodeReviewer. The other
two are raised by the transport and parsing layers and resolved into
fallback values by the facade.
"""

from __future__ import annotations


class CodeSageError(Exception):
    """Base class for all CodeSage errors."""


class ConfigurationError(CodeSageError):
    """Raised when the Gemini API key is absent or still the placeholder."""


class TransportError(CodeSageError):
    """Raised when the Gemini call fails or the API reports an error payload."""


class MalformedResponseError(CodeSageError):
    """Raised when a model reply holds no usable structured block."""
