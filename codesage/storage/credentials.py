"""Credential stores for the Gemini API key.

Three small implementations of codesage.contracts.CredentialStore:

- InMemoryCredentialStore: process-local, for tests and embedding
- EnvironmentCredentialStore: reads GEMINI_API_KEY (after loading .env)
- JsonFileCredentialStore: a JSON key-value settings file, one key per setting

None of them validates the key; the facade decides what counts as configured.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from codesage import config
from codesage.observability.logging import get_logger
from codesage.utils.redaction import redact

logger = get_logger(__name__)


class InMemoryCredentialStore:
    """Holds the key in memory for the lifetime of the object."""

    def __init__(self, value: str | None = None) -> None:
        self._value = value

    def get(self) -> str | None:
        return self._value

    def set(self, value: str) -> None:
        self._value = value


class EnvironmentCredentialStore:
    """
    Reads the key from an environment variable.

    set() only updates os.environ for the current process; it does not
    rewrite the .env file.
    """

    def __init__(self, var_name: str = config.API_KEY_ENV_VAR, load_env: bool = True) -> None:
        self.var_name = var_name
        if load_env:
            config.ensure_env_loaded()

    def get(self) -> str | None:
        return os.getenv(self.var_name)

    def set(self, value: str) -> None:
        os.environ[self.var_name] = value


class JsonFileCredentialStore:
    """
    Persists the key in a JSON settings file.

    Other settings in the same file are preserved on write. A missing or
    unreadable file reads as "no key stored".
    """

    def __init__(self, path: Path | str = config.CREDENTIALS_FILE, setting: str = config.API_KEY_SETTING) -> None:
        self.path = Path(path)
        self.setting = setting

    def _read_settings(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self) -> str | None:
        value = self._read_settings().get(self.setting)
        return value if isinstance(value, str) else None

    def set(self, value: str) -> None:
        settings = self._read_settings()
        settings[self.setting] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)
        logger.info("Stored API key %s in %s", redact(value), self.path)
