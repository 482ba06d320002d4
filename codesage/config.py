"""Centralized configuration for the CodeSage review client.

Typed constants with environment variable overrides. Defaults are safe so the
package imports without any env configuration; the API key itself is never
read here (see codesage.storage.credentials).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

_ENV_LOADED = False

# --- App ---
APP_NAME: str = "CodeSage"
APP_VERSION: str = "1.0.0"

# --- Gemini ---
GEMINI_API_BASE: str = os.getenv(
    "CODESAGE_GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL: str = os.getenv("CODESAGE_GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_API_URL: str = f"{GEMINI_API_BASE}/models/{GEMINI_MODEL}:generateContent"
GEMINI_TIMEOUT_SECONDS: float = float(os.getenv("CODESAGE_LLM_TIMEOUT", "30"))

# --- Credentials ---
API_KEY_PLACEHOLDER: str = "YOUR_GEMINI_API_KEY_HERE"
API_KEY_ENV_VAR: str = "GEMINI_API_KEY"
API_KEY_SETTING: str = "gemini_api_key"
CREDENTIALS_FILE: Path = Path(
    os.getenv("CODESAGE_CREDENTIALS_FILE", str(Path.home() / ".codesage" / "settings.json"))
)

# --- Review ---
DEFAULT_LANGUAGE: str = "python"
FIXED_CODE_MIN_RATIO: float = 0.5


def ensure_env_loaded(env_path: Path | None = None) -> None:
    """
    Load a .env file exactly once.

    Searches upward from the working directory when env_path is not given.

    Side Effects:
        - Populates os.environ from the .env file (existing values win)
    """
    global _ENV_LOADED
    if _ENV_LOADED:
        return

    if env_path is not None and env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()
    _ENV_LOADED = True
