"""Unit tests for per-intent request composition."""

from __future__ import annotations

import copy

import pytest

from codesage.llm.prompts import PromptLoader
from codesage.llm.request_builder import (
    INTENT_SETTINGS,
    Intent,
    RequestBuilder,
    format_history,
    format_issue_details,
)
from codesage.review.models import AnalysisRecord, CodeQuality, Issue, ReviewSummary


@pytest.fixture
def builder():
    return RequestBuilder(PromptLoader())


@pytest.fixture
def bug_issue():
    return Issue(
        type="Bug",
        severity="High",
        description="Off-by-one in loop",
        problem="The last element is skipped",
        fix="Use range(len(items))",
        line_numbers="4",
    )


class TestGenerationSettings:
    @pytest.mark.parametrize(
        "intent,temperature,max_tokens",
        [
            (Intent.REVIEW, 0.3, 2048),
            (Intent.EXPLAIN, 0.8, 2048),
            (Intent.SUGGEST, 0.7, 2048),
            (Intent.FIX, 0.3, 4096),
            (Intent.INSIGHTS, 0.7, 2048),
            (Intent.MENTORSHIP, 0.7, 1024),
        ],
    )
    def test_intent_table(self, intent, temperature, max_tokens):
        _, generation_config = INTENT_SETTINGS[intent]

        assert generation_config.temperature == temperature
        assert generation_config.max_output_tokens == max_tokens
        assert generation_config.top_k == 40
        assert generation_config.top_p == 0.95

    def test_every_template_exists(self):
        loader = PromptLoader()
        for template_name, _ in INTENT_SETTINGS.values():
            assert loader.load_prompt(template_name)


class TestPayload:
    def test_payload_shape(self, builder):
        payload = builder.review("x = 1").to_payload()

        assert payload["contents"][0]["parts"][0]["text"].count("x = 1") == 1
        assert payload["generationConfig"] == {
            "temperature": 0.3,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": 2048,
        }


class TestRequestBuilder:
    def test_review_embeds_code_in_fence(self, builder):
        request = builder.review("total = sum(values)")

        assert request.intent == Intent.REVIEW
        assert "```python\ntotal = sum(values)\n```" in request.prompt
        assert '"overallScore"' in request.prompt

    def test_code_with_braces_is_passed_verbatim(self, builder):
        code = "config = {'retries': 3}\nprint(f'{config}')"
        assert code in builder.review(code).prompt

    def test_language_is_configurable(self):
        request = RequestBuilder(language="javascript").review("let x = 1;")

        assert "```javascript" in request.prompt
        assert "Javascript code" in request.prompt

    def test_explain_uses_issue_fields(self, builder, bug_issue):
        request = builder.explain(bug_issue)

        assert request.intent == Intent.EXPLAIN
        assert request.generation_config.temperature == 0.8
        assert "Off-by-one in loop" in request.prompt
        assert "Use range(len(items))" in request.prompt

    def test_explain_accepts_wire_dict(self, builder):
        request = builder.explain({"type": "Style", "description": "Line too long", "problem": "p", "fix": "f"})
        assert "Line too long" in request.prompt

    def test_suggest_summarizes_analysis(self, builder, bug_issue):
        style_issue = bug_issue.model_copy(update={"type": "Style", "severity": "Low"})
        analysis = AnalysisRecord(overall_score=6, code_quality=CodeQuality.FAIR, issues=[bug_issue, style_issue])

        request = builder.suggest("for i in range(n): pass", analysis)

        assert request.intent == Intent.SUGGEST
        assert "Overall Score: 6/10" in request.prompt
        assert "Code Quality: Fair" in request.prompt
        assert "Issues Found: 2" in request.prompt
        assert "Key Areas for Improvement: Bug, Style" in request.prompt
        assert "- Bug (High): Off-by-one in loop" in request.prompt

    def test_fix_uses_larger_token_budget(self, builder, bug_issue):
        request = builder.fix("for i in range(n - 1): pass", [bug_issue])

        assert request.intent == Intent.FIX
        assert request.generation_config.max_output_tokens == 4096
        assert "Problem: The last element is skipped" in request.prompt

    def test_insights_serializes_history(self, builder):
        request = builder.insights([ReviewSummary(score=7, issue_types=["Bug"]), {"score": 5}])

        assert request.intent == Intent.INSIGHTS
        assert '"issueTypes"' in request.prompt
        assert '"score": 5' in request.prompt

    def test_mentorship_request(self, builder):
        request = builder.mentorship([{"score": 4}])

        assert request.intent == Intent.MENTORSHIP
        assert request.generation_config.max_output_tokens == 1024
        assert '"score": 4' in request.prompt

    def test_inputs_are_not_modified(self, builder):
        issues = [{"type": "Bug", "severity": "High", "description": "d", "problem": "p", "fix": "f"}]
        history = [{"score": 6, "issueTypes": ["Bug"]}]
        issues_before, history_before = copy.deepcopy(issues), copy.deepcopy(history)

        builder.fix("x = 1", issues)
        builder.insights(history)

        assert issues == issues_before
        assert history == history_before


class TestFormatting:
    def test_issue_details_without_issues(self):
        assert format_issue_details([]) == "- No specific issues were reported."

    def test_issue_details_block(self, bug_issue):
        assert format_issue_details([bug_issue]) == (
            "- Bug (High): Off-by-one in loop\n"
            "  Problem: The last element is skipped\n"
            "  Fix: Use range(len(items))"
        )

    def test_history_omits_unset_fields(self):
        assert format_history([ReviewSummary(score=8)]) == '[\n  {\n    "score": 8.0,\n    "issueTypes": []\n  }\n]'


class TestPromptLoader:
    def test_missing_template(self):
        with pytest.raises(FileNotFoundError):
            PromptLoader().load_prompt("no_such_prompt")

    def test_reload_reads_changed_file(self, tmp_path):
        (tmp_path / "greeting.txt").write_text("Hello {name}")
        loader = PromptLoader(tmp_path)
        assert loader.render("greeting", name="Ada") == "Hello Ada"

        (tmp_path / "greeting.txt").write_text("Hi {name}")
        assert loader.render("greeting", name="Ada") == "Hello Ada"

        loader.reload()
        assert loader.render("greeting", name="Ada") == "Hi Ada"
