"""
Pytest configuration for CodeSage tests

Provides a mocked Gemini endpoint (httpx.MockTransport) and resets the
in-memory telemetry between tests.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from codesage.llm.gemini import GeminiClient
from codesage.observability import telemetry
from codesage.review.reviewer import CodeReviewer
from codesage.storage.credentials import InMemoryCredentialStore

TEST_API_URL = "https://gemini.test/v1beta/models/test-model:generateContent"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def reset_telemetry():
    telemetry.reset()
    yield
    telemetry.reset()


@pytest.fixture
def gemini_reply() -> Callable[..., httpx.Response]:
    """Build a generateContent success response carrying `text`."""

    def _reply(text: str, status_code: int = 200) -> httpx.Response:
        body: dict[str, Any] = {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}
        return httpx.Response(status_code, json=body)

    return _reply


@pytest.fixture
def gemini_client() -> Callable[[Handler], GeminiClient]:
    def _make(handler: Handler) -> GeminiClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GeminiClient(api_url=TEST_API_URL, timeout=5.0, http_client=http)

    return _make


@pytest.fixture
def make_reviewer(gemini_client) -> Callable[..., CodeReviewer]:
    """CodeReviewer wired to a mock transport and an in-memory key."""

    def _make(handler: Handler, api_key: str | None = "test-key") -> CodeReviewer:
        return CodeReviewer(InMemoryCredentialStore(api_key), client=gemini_client(handler))

    return _make
