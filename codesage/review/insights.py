"""
Insights Normalizer - trends across a user's review history.

The model is asked for an InsightsRecord as JSON. When the reply cannot be
parsed or validated, the record is computed from the history itself so the
caller always gets the same four-part structure.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from codesage.errors import MalformedResponseError
from codesage.observability.logging import get_logger
from codesage.observability.telemetry import record_outcome
from codesage.review.models import (
    InsightNarrative,
    InsightPatterns,
    InsightRecommendations,
    InsightsRecord,
    InsightStats,
    ReviewSummary,
)
from codesage.review.normalizer import load_json_object

logger = get_logger(__name__)

SKILLS_IMPROVED_RATIO = 0.6
MAX_PROGRESS_PERCENT = 95


def coerce_history(history: Iterable[ReviewSummary | Mapping[str, Any]]) -> list[ReviewSummary]:
    """Validate history entries, skipping any without a usable score."""
    entries: list[ReviewSummary] = []
    for index, item in enumerate(history):
        if isinstance(item, ReviewSummary):
            entries.append(item)
            continue
        try:
            entries.append(ReviewSummary.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping history entry %d: %s", index, e.errors()[0]["msg"])
    return entries


def build_fallback_insights(history: Iterable[ReviewSummary | Mapping[str, Any]]) -> InsightsRecord:
    """Deterministic insights computed from scores alone."""
    entries = coerce_history(history)
    total_reviews = len(entries)
    average_score = sum(entry.score for entry in entries) / total_reviews if total_reviews else 0.0

    return InsightsRecord(
        stats=InsightStats(
            total_reviews=total_reviews,
            average_score=average_score,
            skills_improved=math.floor(total_reviews * SKILLS_IMPROVED_RATIO),
            progress=f"{min(MAX_PROGRESS_PERCENT, math.floor(average_score * 10))}%",
        ),
        patterns=InsightPatterns(
            strengths=["Consistent practice", "Code submission"],
            weaknesses=["Code style", "Error handling"],
            recurring_issues=["Style issues", "Bug fixes"],
        ),
        recommendations=InsightRecommendations(
            immediate_actions=[
                "Focus on PEP8 compliance",
                "Add comprehensive error handling",
                "Practice code refactoring",
            ],
            learning_goals=[
                "Master Python best practices",
                "Learn advanced debugging techniques",
                "Study design patterns",
            ],
            practice_suggestions=[
                "Review and refactor old code",
                "Write unit tests for existing code",
                "Participate in code reviews",
            ],
        ),
        insights=InsightNarrative(
            overall_progress=(
                f"You've made good progress with an average score of {average_score:.1f}. "
                "Keep practicing!"
            ),
            areas_for_improvement=[
                "Code organization and structure",
                "Error handling and edge cases",
                "Documentation and comments",
            ],
            encouragement=(
                "Your dedication to improving your code is commendable. "
                "Every review brings you closer to mastery!"
            ),
        ),
    )


def normalize_insights(
    response_text: str | None,
    history: Iterable[ReviewSummary | Mapping[str, Any]],
) -> InsightsRecord:
    """
    Parse an insights reply, or compute the record from history. Never raises.

    Side Effects:
        - Increments review.insights.parsed / review.insights.parse_error
    """
    try:
        data = load_json_object(response_text or "")
        record = InsightsRecord.model_validate(data)
    except (MalformedResponseError, ValidationError) as e:
        record_outcome("review", "insights", "parse_error")
        logger.warning("Failed to parse insights response: %s", e)
        return build_fallback_insights(history)

    record_outcome("review", "insights", "parsed")
    return record
