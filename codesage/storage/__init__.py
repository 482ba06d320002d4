"""Storage - reference credential store implementations"""

from codesage.storage.credentials import (
    EnvironmentCredentialStore,
    InMemoryCredentialStore,
    JsonFileCredentialStore,
)

__all__ = [
    "EnvironmentCredentialStore",
    "InMemoryCredentialStore",
    "JsonFileCredentialStore",
]
