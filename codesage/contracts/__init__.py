"""
Type contracts for CodeSage.

Protocols only, no logic. The review facade depends on these interfaces,
never on a concrete store, so callers can plug in whatever key-value
settings backend their application already has.
"""

from codesage.contracts.credentials import CredentialStore

__all__ = ["CredentialStore"]
