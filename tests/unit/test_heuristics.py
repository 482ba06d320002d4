"""Unit tests for the line-based heuristic scorer."""

from __future__ import annotations

import pytest

from codesage.review.heuristics import code_complexity, heuristic_score


def _lines(line: str, count: int) -> str:
    return "\n".join([line] * count)


class TestCodeComplexity:
    def test_empty_text_is_one_line(self):
        assert code_complexity("") == 1

    def test_plain_lines_count_one_each(self):
        assert code_complexity("x = 1\ny = 2\nprint(x + y)") == 3

    def test_control_flow_lines_count_two(self):
        assert code_complexity("if x:\nfor i in y:\nwhile True:") == 6

    def test_definition_lines_count_three(self):
        assert code_complexity("def run():\nclass Job:") == 6

    def test_control_flow_checked_before_definition(self):
        """A line matching both sets is weighted as control flow."""
        assert code_complexity("def iffy():") == 2

    def test_keywords_match_as_substrings(self):
        assert code_complexity("name = 'elif'") == 2
        assert code_complexity("value = default") == 3


class TestHeuristicScore:
    def test_sixty_if_lines_score_three_with_efficiency_issue(self):
        score, issues = heuristic_score(_lines("if x > 0:", 60))

        assert score == 3
        assert len(issues) == 1
        assert issues[0].type == "Efficiency"
        assert issues[0].severity == "High"
        assert issues[0].line_numbers == "Multiple lines"

    def test_medium_complexity_scores_five_with_readability_issue(self):
        score, issues = heuristic_score(_lines("def f():", 11))

        assert score == 5
        assert [(i.type, i.severity) for i in issues] == [("Readability", "Medium")]

    def test_low_complexity_scores_seven_without_issues(self):
        assert heuristic_score("print('hello')") == (7, [])

    @pytest.mark.parametrize(
        "text,expected_score",
        [
            (_lines("x = 1", 20), 7),
            (_lines("x = 1", 21), 5),
            (_lines("if a:", 25), 5),
            (_lines("if a:", 25) + "\nx = 1", 3),
        ],
    )
    def test_threshold_boundaries(self, text, expected_score):
        score, _ = heuristic_score(text)
        assert score == expected_score

    def test_is_deterministic(self):
        text = _lines("while busy:", 15) + "\n" + _lines("def step():", 5)
        assert heuristic_score(text) == heuristic_score(text)
