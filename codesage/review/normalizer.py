"""
Response Normalizer - turn a model reply into a complete AnalysisRecord.

Gemini is asked for a single JSON object but routinely wraps it in prose or
markdown fences, drops fields, or returns scores outside 1-10. Parsing is
split in two steps:

1. parse_analysis() extracts and validates the JSON block and returns a
   tagged ParseOutcome (ParsedAnalysis or ParseFailure) instead of raising.
2. normalize_analysis() routes a ParseFailure to build_fallback_analysis(),
   which scores the text heuristically.

normalize_analysis() never raises; callers always get a fully populated record.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from codesage.errors import MalformedResponseError
from codesage.observability.logging import get_logger
from codesage.observability.telemetry import record_outcome
from codesage.review.heuristics import heuristic_score
from codesage.review.models import AnalysisRecord, CodeQuality, Issue, IssueType, Severity
from codesage.utils.redaction import preview

logger = get_logger(__name__)

REQUIRED_ISSUE_FIELDS = ("type", "description", "problem", "fix")
MIN_SCORE = 1
MAX_SCORE = 10

DEFAULT_EXPLANATION = "No explanation provided."
DEFAULT_ANALOGY = "No analogy provided."
DEFAULT_LINE_NUMBERS = "Unknown"

FALLBACK_EXPLANATION = (
    "I had trouble analyzing your code in detail, but I can see some areas for "
    "improvement. Let me help you understand the main issues."
)
FALLBACK_ANALOGY = (
    "Think of code review like proofreading an essay - sometimes you need to look "
    "at it multiple times to catch all the mistakes."
)
FALLBACK_PRACTICE_TASKS = (
    "Review Python PEP8 style guidelines",
    "Test your code with different inputs",
    "Add comments to explain your logic",
)
FALLBACK_KEY_IMPROVEMENTS = (
    "Focus on code structure and organization",
    "Add proper error handling",
)

# Checked in order; the first set with a substring hit decides.
CRITICAL_KEYWORDS = (
    "crash", "security", "vulnerable", "injection", "breach", "exploit",
    "syntax error", "runtime error", "fatal", "exception", "error",
    "broken", "fail", "invalid", "undefined", "null", "none",
)
HIGH_KEYWORDS = (
    "logical error", "bug", "incorrect", "wrong", "mistake",
    "inefficient", "slow", "performance", "memory leak",
    "missing", "lack", "no error handling", "no validation",
)
MEDIUM_KEYWORDS = (
    "should", "recommend", "consider", "improve", "better",
    "inconsistent", "unclear", "confusing", "hard to read",
)

TYPE_SEVERITY = {
    IssueType.SECURITY.value: Severity.CRITICAL,
    IssueType.BUG.value: Severity.HIGH,
    IssueType.EFFICIENCY.value: Severity.MEDIUM,
    IssueType.STYLE.value: Severity.LOW,
    IssueType.READABILITY.value: Severity.LOW,
}


@dataclass(frozen=True)
class ParsedAnalysis:
    record: AnalysisRecord


@dataclass(frozen=True)
class ParseFailure:
    reason: str


ParseOutcome = ParsedAnalysis | ParseFailure


# ---------------------------------------------------------------------------
# JSON block extraction (shared with the insights normalizer)
# ---------------------------------------------------------------------------


def extract_json_block(text: str) -> str:
    """
    Return the text from the first "{" to the last "}" inclusive.

    This is one greedy cut, not a brace matcher: a reply holding two
    separate JSON objects yields both plus the prose between them, which
    then fails to parse.

    Raises:
        MalformedResponseError: If the text has no "{...}" span
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise MalformedResponseError("No valid JSON found in response")
    return text[start : end + 1]


def load_json_object(text: str) -> dict[str, Any]:
    """
    Extract and decode the JSON object embedded in a model reply.

    Raises:
        MalformedResponseError: If no block is found, it does not decode,
            or it decodes to something other than an object
    """
    block = extract_json_block(text)
    try:
        data = json.loads(block)
    except (ValueError, RecursionError) as e:
        # ValueError also covers integers past the digit limit; RecursionError deep nesting
        raise MalformedResponseError(f"Invalid JSON in response: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponseError("Response JSON is not an object")
    return data


# ---------------------------------------------------------------------------
# Field repair helpers
# ---------------------------------------------------------------------------


def _coerce_score(value: Any) -> int | None:
    """Round and clamp a truthy numeric score into [1, 10]; None if unusable."""
    if isinstance(value, bool) or not value:
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        value = float(value)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return max(MIN_SCORE, min(MAX_SCORE, int(round(value))))


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _as_line_numbers(value: Any) -> str:
    if isinstance(value, list):
        joined = ", ".join(_as_text(item) for item in value if _as_text(item))
        return joined or DEFAULT_LINE_NUMBERS
    return _as_text(value) or DEFAULT_LINE_NUMBERS


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [text for text in (_as_text(item) for item in value) if text]


def _code_quality(value: Any, score: int) -> CodeQuality:
    try:
        return CodeQuality(value)
    except ValueError:
        return CodeQuality.from_score(score)


def infer_severity(issue_type: str, description: str) -> str:
    """
    Severity for an issue that arrived without one.

    Description keywords win over the issue type; unknown types are Medium.
    """
    text = description.lower()

    if any(keyword in text for keyword in CRITICAL_KEYWORDS):
        return Severity.CRITICAL.value
    if any(keyword in text for keyword in HIGH_KEYWORDS):
        return Severity.HIGH.value
    if any(keyword in text for keyword in MEDIUM_KEYWORDS):
        return Severity.MEDIUM.value

    return TYPE_SEVERITY.get(issue_type, Severity.MEDIUM).value


def normalize_issue(raw: Any) -> Issue | None:
    """Backfill one raw issue, or return None if a required field is missing."""
    if not isinstance(raw, dict):
        return None

    fields = {name: _as_text(raw.get(name)) for name in REQUIRED_ISSUE_FIELDS}
    if not all(fields.values()):
        return None

    severity = _as_text(raw.get("severity")) or infer_severity(fields["type"], fields["description"])

    return Issue(
        type=fields["type"],
        severity=severity,
        description=fields["description"],
        problem=fields["problem"],
        fix=fields["fix"],
        line_numbers=_as_line_numbers(raw.get("lineNumbers")),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_analysis(data: Mapping[str, Any], source: str | None = None) -> ParseOutcome:
    """
    Check decoded analysis data against the schema and repair what can be repaired.

    Args:
        data: Decoded JSON object (camelCase keys)
        source: The submitted code; becomes fixedCode when the data has none

    Returns:
        ParsedAnalysis with a repaired record, or ParseFailure with a reason
    """
    score = _coerce_score(data.get("overallScore"))
    if score is None:
        return ParseFailure("Invalid analysis structure: overallScore missing or not numeric")

    raw_issues = data.get("issues")
    if not isinstance(raw_issues, list):
        return ParseFailure("Invalid analysis structure: issues missing or not a list")

    issues = [issue for issue in (normalize_issue(raw) for raw in raw_issues) if issue is not None]
    dropped = len(raw_issues) - len(issues)
    if dropped:
        logger.info("Dropped %d incomplete issue(s) from analysis response", dropped)

    fixed_code = _as_text(data.get("fixedCode")) or (source or "")

    try:
        record = AnalysisRecord(
            overall_score=score,
            code_quality=_code_quality(data.get("codeQuality"), score),
            issues=issues,
            explanation=_as_text(data.get("explanation")) or DEFAULT_EXPLANATION,
            analogy=_as_text(data.get("analogy")) or DEFAULT_ANALOGY,
            practice_tasks=_string_list(data.get("practiceTasks")),
            fixed_code=fixed_code,
            key_improvements=_string_list(data.get("keyImprovements")),
        )
    except ValidationError as e:
        return ParseFailure(f"Analysis failed schema validation: {e}")

    return ParsedAnalysis(record)


def parse_analysis(response_text: str, source: str | None = None) -> ParseOutcome:
    """Extract the JSON block from a model reply and validate it."""
    try:
        data = load_json_object(response_text)
    except MalformedResponseError as e:
        return ParseFailure(str(e))
    return validate_analysis(data, source)


def build_fallback_analysis(text: str) -> AnalysisRecord:
    """Deterministic record built from the heuristic scorer alone."""
    score, issues = heuristic_score(text)
    return AnalysisRecord(
        overall_score=score,
        code_quality=CodeQuality.FAIR,
        issues=issues,
        explanation=FALLBACK_EXPLANATION,
        analogy=FALLBACK_ANALOGY,
        practice_tasks=list(FALLBACK_PRACTICE_TASKS),
        fixed_code=text,
        key_improvements=list(FALLBACK_KEY_IMPROVEMENTS),
    )


def normalize_analysis(response_text: str | None, source: str | None = None) -> AnalysisRecord:
    """
    Convert a model reply into a complete AnalysisRecord. Never raises.

    Args:
        response_text: Raw text returned by the model
        source: The submitted code. When given, the fallback path scores it
            and echoes it as fixedCode; otherwise the reply text is used.

    Side Effects:
        - Increments review.normalizer.parsed / review.normalizer.parse_error
    """
    text = response_text or ""
    outcome = parse_analysis(text, source)

    if isinstance(outcome, ParsedAnalysis):
        record_outcome("review", "normalizer", "parsed")
        return outcome.record

    record_outcome("review", "normalizer", "parse_error")
    logger.warning("Failed to parse analysis response: %s", outcome.reason)
    logger.debug("Raw response: %s", preview(text, 300))
    return build_fallback_analysis(source if source is not None else text)


def coerce_analysis(analysis: AnalysisRecord | Mapping[str, Any], source: str) -> AnalysisRecord:
    """
    Accept an AnalysisRecord or its wire-format dict (e.g. from a client UI).

    A dict that fails validation is replaced by the heuristic record for source.
    """
    if isinstance(analysis, AnalysisRecord):
        return analysis

    outcome = validate_analysis(analysis, source) if isinstance(analysis, Mapping) else None
    if isinstance(outcome, ParsedAnalysis):
        return outcome.record

    reason = outcome.reason if outcome is not None else f"unsupported type {type(analysis).__name__}"
    logger.warning("Caller-supplied analysis is invalid (%s), using heuristic record", reason)
    return build_fallback_analysis(source)
