"""
Request Builder - compose the generateContent body for each review intent.

Each intent pairs one prompt template with a fixed generation config:
evaluative and code-generating intents run cold (0.3) for consistency,
explanatory and motivational ones run warmer (0.7-0.8).

Building a request is pure; caller inputs are read, never modified.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from codesage import config
from codesage.llm.prompts import PromptLoader
from codesage.review.models import AnalysisRecord, CamelModel, Issue, ReviewSummary


class Intent(str, Enum):
    REVIEW = "review"
    EXPLAIN = "explain"
    SUGGEST = "suggest"
    FIX = "fix"
    INSIGHTS = "insights"
    MENTORSHIP = "mentorship"


class GenerationConfig(CamelModel):
    temperature: float
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 2048


# intent -> (template name, generation config)
INTENT_SETTINGS: dict[Intent, tuple[str, GenerationConfig]] = {
    Intent.REVIEW: ("analysis_prompt", GenerationConfig(temperature=0.3)),
    Intent.EXPLAIN: ("explanation_prompt", GenerationConfig(temperature=0.8)),
    Intent.SUGGEST: ("improvement_prompt", GenerationConfig(temperature=0.7)),
    Intent.FIX: ("fixed_code_prompt", GenerationConfig(temperature=0.3, max_output_tokens=4096)),
    Intent.INSIGHTS: ("insights_prompt", GenerationConfig(temperature=0.7)),
    Intent.MENTORSHIP: ("mentorship_prompt", GenerationConfig(temperature=0.7, max_output_tokens=1024)),
}


class GenerateContentRequest(BaseModel):
    """One outbound call: a single instruction plus its generation config."""

    model_config = ConfigDict(frozen=True)

    intent: Intent
    prompt: str
    generation_config: GenerationConfig

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the generateContent endpoint."""
        return {
            "contents": [{"parts": [{"text": self.prompt}]}],
            "generationConfig": self.generation_config.to_wire(),
        }


def _issue_fields(issue: Issue | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(issue, Issue):
        return issue.to_wire()
    return dict(issue)


def format_issue_details(issues: Sequence[Issue | Mapping[str, Any]]) -> str:
    """Render issues as the bullet list shared by the suggest and fix prompts."""
    blocks = []
    for issue in issues:
        fields = _issue_fields(issue)
        blocks.append(
            f"- {fields.get('type', 'Unknown')} ({fields.get('severity', 'Unknown')}): "
            f"{fields.get('description', '')}\n"
            f"  Problem: {fields.get('problem', '')}\n"
            f"  Fix: {fields.get('fix', '')}"
        )
    return "\n\n".join(blocks) if blocks else "- No specific issues were reported."


def format_history(history: Sequence[ReviewSummary | Mapping[str, Any]]) -> str:
    entries = [
        entry.model_dump(by_alias=True, exclude_none=True, mode="json")
        if isinstance(entry, ReviewSummary)
        else dict(entry)
        for entry in history
    ]
    return json.dumps(entries, indent=2, default=str)


class RequestBuilder:
    """Builds GenerateContentRequest objects from templates and caller data."""

    def __init__(self, loader: PromptLoader | None = None, language: str = config.DEFAULT_LANGUAGE):
        self.loader = loader or PromptLoader()
        self.language = language

    def _build(self, intent: Intent, **template_vars: Any) -> GenerateContentRequest:
        template_name, generation_config = INTENT_SETTINGS[intent]
        prompt = self.loader.render(
            template_name,
            language=self.language,
            language_title=self.language.title(),
            **template_vars,
        )
        return GenerateContentRequest(intent=intent, prompt=prompt, generation_config=generation_config)

    def review(self, code: str) -> GenerateContentRequest:
        return self._build(Intent.REVIEW, code=code)

    def explain(self, issue: Issue | Mapping[str, Any]) -> GenerateContentRequest:
        fields = _issue_fields(issue)
        return self._build(
            Intent.EXPLAIN,
            type=fields.get("type", ""),
            description=fields.get("description", ""),
            problem=fields.get("problem", ""),
            fix=fields.get("fix", ""),
        )

    def suggest(self, code: str, analysis: AnalysisRecord) -> GenerateContentRequest:
        return self._build(
            Intent.SUGGEST,
            code=code,
            overall_score=analysis.overall_score,
            code_quality=analysis.code_quality.value,
            issue_count=len(analysis.issues),
            issue_types=", ".join(issue.type for issue in analysis.issues) or "None",
            issue_details=format_issue_details(analysis.issues),
        )

    def fix(self, code: str, issues: Sequence[Issue | Mapping[str, Any]]) -> GenerateContentRequest:
        return self._build(Intent.FIX, code=code, issue_details=format_issue_details(issues))

    def insights(self, history: Sequence[ReviewSummary | Mapping[str, Any]]) -> GenerateContentRequest:
        return self._build(Intent.INSIGHTS, history=format_history(history))

    def mentorship(self, history: Sequence[ReviewSummary | Mapping[str, Any]]) -> GenerateContentRequest:
        return self._build(Intent.MENTORSHIP, history=format_history(history))
