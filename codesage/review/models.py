"""
Canonical records returned by the review client (Pydantic v2).

Attributes are snake_case; the JSON wire names used by the model prompt and
by display code are camelCase aliases, so `model_dump(by_alias=True)` gives
back exactly the shape the prompts ask Gemini for. Records are frozen: each
call builds fresh ones and nothing mutates them afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class IssueType(str, Enum):
    STYLE = "Style"
    BUG = "Bug"
    SECURITY = "Security"
    EFFICIENCY = "Efficiency"
    READABILITY = "Readability"


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class CodeQuality(str, Enum):
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"
    EXCELLENT = "Excellent"

    @classmethod
    def from_score(cls, score: int) -> CodeQuality:
        if score >= 9:
            return cls.EXCELLENT
        if score >= 7:
            return cls.GOOD
        if score >= 4:
            return cls.FAIR
        return cls.POOR


class CamelModel(BaseModel):
    """Base model with camelCase aliases; accepts either naming on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using the camelCase wire names."""
        return self.model_dump(by_alias=True, mode="json")


class Issue(CamelModel):
    """One finding in a review. All fields are always populated."""

    type: str
    severity: str
    description: str
    problem: str
    fix: str
    line_numbers: str = "Unknown"


class AnalysisRecord(CamelModel):
    """Full review of one code submission."""

    overall_score: int = Field(ge=1, le=10)
    code_quality: CodeQuality
    issues: list[Issue] = Field(default_factory=list)
    explanation: str = "No explanation provided."
    analogy: str = "No analogy provided."
    practice_tasks: list[str] = Field(default_factory=list)
    fixed_code: str = ""
    key_improvements: list[str] = Field(default_factory=list)


class ReviewSummary(BaseModel):
    """
    One entry of a user's review history.

    Only `score` is required. Unknown keys are kept so the whole entry is
    echoed to the model when synthesizing insights.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    score: float = Field(allow_inf_nan=False)
    code_quality: str | None = None
    issue_count: int | None = None
    issue_types: list[str] = Field(default_factory=list)
    timestamp: str | None = None


class InsightStats(CamelModel):
    total_reviews: int
    average_score: float
    skills_improved: int
    progress: str

    @field_validator("progress", mode="before")
    @classmethod
    def _progress_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{value:g}%"
        return value


class InsightPatterns(CamelModel):
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recurring_issues: list[str] = Field(default_factory=list)


class InsightRecommendations(CamelModel):
    immediate_actions: list[str] = Field(default_factory=list)
    learning_goals: list[str] = Field(default_factory=list)
    practice_suggestions: list[str] = Field(default_factory=list)


class InsightNarrative(CamelModel):
    overall_progress: str
    areas_for_improvement: list[str] = Field(default_factory=list)
    encouragement: str


class InsightsRecord(CamelModel):
    """Trends across a user's review history."""

    stats: InsightStats
    patterns: InsightPatterns
    recommendations: InsightRecommendations
    insights: InsightNarrative
