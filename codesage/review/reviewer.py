"""
CodeReviewer - one async entry point per review intent.

Every operation follows the same path: resolve the API key (failing fast
with ConfigurationError), build the request, make exactly one Gemini call,
then route the reply into its normalizer. Transport and parse failures are
resolved into deterministic fallbacks here and never reach the caller.

Example:
    reviewer = CodeReviewer(JsonFileCredentialStore())
    async with reviewer:
        record = await reviewer.analyze(source)
        plan = await reviewer.suggest_improvements(source, record)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any

from codesage import config
from codesage.contracts.credentials import CredentialStore
from codesage.errors import ConfigurationError, TransportError
from codesage.llm.gemini import GeminiClient
from codesage.llm.prompts import PromptLoader
from codesage.llm.request_builder import GenerateContentRequest, RequestBuilder
from codesage.observability.logging import get_logger
from codesage.observability.telemetry import counter, log_event, record_outcome
from codesage.review.code_extractor import basic_fix, extract_fixed_code
from codesage.review.insights import build_fallback_insights, coerce_history, normalize_insights
from codesage.review.models import AnalysisRecord, InsightsRecord, Issue, IssueType, ReviewSummary
from codesage.review.normalizer import build_fallback_analysis, coerce_analysis, normalize_analysis
from codesage.utils.redaction import redact

logger = get_logger(__name__)

MENTORSHIP_FALLBACK = "Keep practicing! Every coder improves with time and experience."

# Canned beginner explanations per issue type, used when Gemini is unreachable.
EXPLANATION_FALLBACKS: dict[str, dict[str, Any]] = {
    IssueType.STYLE.value: {
        "simple": "Code style is like handwriting rules - when everyone follows the same style, it's easier to read and understand!",
        "analogy": "Think of it like organizing your room. When everything has its place, it's easy to find what you need.",
        "tasks": [
            "Practice consistent indentation (4 spaces)",
            "Use descriptive variable names",
            "Add comments to explain complex parts",
        ],
    },
    IssueType.BUG.value: {
        "simple": "A bug is like a mistake in a recipe that makes your food taste wrong. In code, bugs make your program behave incorrectly.",
        "analogy": "Imagine building with LEGOs - if you put the wrong piece in the wrong spot, your creation might fall apart!",
        "tasks": [
            "Test your code with different inputs",
            "Add error checking for edge cases",
            "Use print statements to debug problems",
        ],
    },
    IssueType.SECURITY.value: {
        "simple": "Security is like locking your diary - you don't want strangers reading your secrets!",
        "analogy": "Think of your code like your house. You wouldn't leave the doors wide open with valuables inside.",
        "tasks": [
            "Never hardcode passwords or API keys",
            "Validate user input before using it",
            "Learn about environment variables",
        ],
    },
    IssueType.EFFICIENCY.value: {
        "simple": "Efficient code is like taking the shortest path home instead of walking in circles.",
        "analogy": "Imagine finding a book in a library. You could check every book one by one (slow), or use the catalog system (fast).",
        "tasks": [
            "Learn about Big O notation",
            "Practice using appropriate data structures",
            "Avoid nested loops when possible",
        ],
    },
    IssueType.READABILITY.value: {
        "simple": "Readable code is like writing a clear story that anyone can understand and enjoy.",
        "analogy": "Good code is like clear directions - instead of 'go there, then turn', say 'walk 2 blocks north, then turn right'.",
        "tasks": [
            "Use meaningful variable and function names",
            "Break long functions into smaller ones",
            "Add comments to explain the 'why' behind your code",
        ],
    },
}


def render_fallback_explanation(issue_type: str) -> str:
    """Markdown explanation for an issue type; unknown types use the Style entry."""
    entry = EXPLANATION_FALLBACKS.get(issue_type, EXPLANATION_FALLBACKS[IssueType.STYLE.value])
    tasks = "\n".join(f"{number}. {task}" for number, task in enumerate(entry["tasks"], start=1))
    return (
        f"**What it means:** {entry['simple']}\n\n"
        f"**Think of it this way:** {entry['analogy']}\n\n"
        f"**Try this:**\n{tasks}"
    )


class CodeReviewer:
    """
    Facade over the Gemini review intents.

    Holds no mutable state besides what the credential store holds; every
    call builds fresh records.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        client: GeminiClient | None = None,
        builder: RequestBuilder | None = None,
        language: str = config.DEFAULT_LANGUAGE,
    ) -> None:
        self.credentials = credentials
        self.client = client or GeminiClient()
        self._owns_client = client is None
        self.builder = builder or RequestBuilder(PromptLoader(), language=language)
        self.language = self.builder.language

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def set_api_key(self, api_key: str) -> None:
        """
        Store a new API key.

        Raises:
            ConfigurationError: If the key is blank or the placeholder
        """
        api_key = api_key.strip()
        if not api_key or api_key == config.API_KEY_PLACEHOLDER:
            raise ConfigurationError("Please enter a valid API key")
        self.credentials.set(api_key)
        logger.info("API key updated: %s", redact(api_key))

    def _require_api_key(self) -> str:
        api_key = (self.credentials.get() or "").strip()
        if not api_key or api_key == config.API_KEY_PLACEHOLDER:
            counter("review.config_error")
            raise ConfigurationError("Please set your Gemini API key first")
        return api_key

    async def _call(self, api_key: str, request: GenerateContentRequest) -> str | None:
        """Make the Gemini call; None means it failed and the caller should fall back."""
        try:
            return await self.client.generate(api_key, request)
        except TransportError as e:
            record_outcome("review", request.intent.value, "transport_error")
            logger.error("Gemini call failed for intent=%s: %s", request.intent.value, e)
            return None

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    async def analyze(self, code: str) -> AnalysisRecord:
        """
        Full review of one submission.

        Returns:
            A complete AnalysisRecord; heuristic when Gemini fails or replies badly

        Raises:
            ConfigurationError: If no API key is configured (before any call)
        """
        api_key = self._require_api_key()
        text = await self._call(api_key, self.builder.review(code))

        if text is None:
            record = build_fallback_analysis(code)
            record_outcome("review", "analyze", "fallback")
        else:
            record = normalize_analysis(text, source=code)
            record_outcome("review", "analyze", "success")

        log_event(
            "review.analyze.result",
            score=record.overall_score,
            quality=record.code_quality.value,
            issue_count=len(record.issues),
        )
        return record

    async def explain(self, issue: Issue | Mapping[str, Any]) -> str:
        """Beginner-friendly explanation of one issue, as markdown text."""
        api_key = self._require_api_key()
        text = await self._call(api_key, self.builder.explain(issue))

        if text is None:
            record_outcome("review", "explain", "fallback")
            issue_type = issue.type if isinstance(issue, Issue) else str(issue.get("type", ""))
            return render_fallback_explanation(issue_type)

        record_outcome("review", "explain", "success")
        return text

    async def suggest_improvements(self, code: str, analysis: AnalysisRecord | Mapping[str, Any]) -> str:
        """Personalized learning plan for the author of `code`, as markdown text."""
        api_key = self._require_api_key()
        record = coerce_analysis(analysis, code)
        text = await self._call(api_key, self.builder.suggest(code, record))

        if text is None:
            record_outcome("review", "suggest", "fallback")
            return self.builder.loader.load_prompt("improvement_fallback")

        record_outcome("review", "suggest", "success")
        return text

    async def generate_fixed_code(self, code: str, issues: Sequence[Issue | Mapping[str, Any]]) -> str:
        """Improved version of `code`; never empty."""
        api_key = self._require_api_key()
        text = await self._call(api_key, self.builder.fix(code, issues))

        if text is None:
            record_outcome("review", "fix", "fallback")
            return basic_fix(code, issues)

        return extract_fixed_code(text, code, issues, language=self.language)

    async def synthesize_insights(self, history: Sequence[ReviewSummary | Mapping[str, Any]]) -> InsightsRecord:
        """Trends across past reviews; computed from scores when Gemini fails."""
        api_key = self._require_api_key()
        entries = coerce_history(history)
        text = await self._call(api_key, self.builder.insights(entries))

        if text is None:
            record_outcome("review", "insights", "fallback")
            return build_fallback_insights(entries)

        return normalize_insights(text, entries)

    async def mentorship_advice(self, history: Sequence[ReviewSummary | Mapping[str, Any]]) -> str:
        """Free-text mentoring notes drawn from past reviews."""
        api_key = self._require_api_key()
        entries = coerce_history(history)
        text = await self._call(api_key, self.builder.mentorship(entries))

        if text is None:
            record_outcome("review", "mentorship", "fallback")
            return MENTORSHIP_FALLBACK

        record_outcome("review", "mentorship", "success")
        return text

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> CodeReviewer:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
