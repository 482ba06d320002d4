"""
Gemini transport - one POST to the generateContent REST endpoint.

The client is an explicit object carrying its endpoint and timeout; callers
construct it (or let CodeReviewer do so) and pass it where needed. It never
retries: a failed call surfaces once as TransportError.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx

from codesage import config
from codesage.errors import TransportError
from codesage.llm.request_builder import GenerateContentRequest
from codesage.observability.logging import get_logger
from codesage.observability.telemetry import record_outcome, time_block
from codesage.utils.redaction import redact, redact_api_key

logger = get_logger(__name__)


def extract_response_text(response: httpx.Response) -> str:
    """
    Pull the model text out of a generateContent response.

    Raises:
        TransportError: On an API error payload, a non-JSON body, an HTTP
            error status, or a body without candidates[0].content.parts[0].text
    """
    try:
        data: Any = response.json()
    except ValueError as e:
        raise TransportError(
            f"Gemini returned a non-JSON response (HTTP {response.status_code})"
        ) from e

    if isinstance(data, dict) and data.get("error"):
        error = data["error"]
        message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
        raise TransportError(f"Gemini API Error: {message}")

    if response.is_error:
        raise TransportError(f"Gemini returned HTTP {response.status_code}")

    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise TransportError("Gemini response has no candidate text") from e

    if not isinstance(text, str):
        raise TransportError("Gemini candidate text is not a string")
    return text


class GeminiClient:
    """
    Async client for the Gemini generateContent endpoint.

    An httpx.AsyncClient passed in is borrowed and left open; one created
    here is closed by aclose() or by leaving an `async with` block.
    """

    def __init__(
        self,
        api_url: str = config.GEMINI_API_URL,
        timeout: float = config.GEMINI_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_url = api_url
        self.timeout = timeout
        self._http = http_client
        self._owns_http = http_client is None

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
        return self._http

    async def generate(self, api_key: str, request: GenerateContentRequest) -> str:
        """
        Send one request and return the raw model text.

        Args:
            api_key: Gemini API key, sent as the `key` query parameter
            request: Prompt and generation config for one intent

        Returns:
            Text of the first candidate

        Raises:
            TransportError: On network failure or an unusable response

        Side Effects:
            - One HTTPS POST to the Gemini API
            - Records gemini.<intent>.latency timing
        """
        http = self._get_http()
        intent = request.intent.value
        logger.info("Calling Gemini for intent=%s key=%s", intent, redact(api_key))

        try:
            with time_block(f"gemini.{intent}.latency"):
                response = await http.post(
                    self.api_url,
                    params={"key": api_key},
                    json=request.to_payload(),
                    timeout=self.timeout,
                )
        except httpx.TimeoutException as e:
            record_outcome("gemini", intent, "timeout")
            raise TransportError(f"Gemini request timed out after {self.timeout:g}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            record_outcome("gemini", intent, "network_error")
            raise TransportError(f"Gemini request failed: {redact_api_key(str(e))}") from e

        text = extract_response_text(response)
        record_outcome("gemini", intent, "success")
        return text

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> GeminiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
