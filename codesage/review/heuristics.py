"""
Heuristic scorer used when no structured review is available.

This is a line-count heuristic, not a static analyzer: keywords are matched
as plain substrings, so "elif" counts as a conditional and "format" as a
loop. Identical input always yields identical output.
"""

from __future__ import annotations

from codesage.review.models import Issue, IssueType, Severity

CONTROL_FLOW_KEYWORDS = ("if", "for", "while")
DEFINITION_KEYWORDS = ("def", "class")

HIGH_COMPLEXITY_THRESHOLD = 50
MEDIUM_COMPLEXITY_THRESHOLD = 20


def code_complexity(text: str) -> int:
    """Sum per-line weights: control flow 2, definitions 3, anything else 1."""
    complexity = 0
    for line in text.split("\n"):
        if any(keyword in line for keyword in CONTROL_FLOW_KEYWORDS):
            complexity += 2
        elif any(keyword in line for keyword in DEFINITION_KEYWORDS):
            complexity += 3
        else:
            complexity += 1
    return complexity


def heuristic_score(text: str) -> tuple[int, list[Issue]]:
    """
    Derive a score and at most one synthetic issue from raw text.

    Returns:
        (score, issues): (3, [Efficiency/High]) above 50,
        (5, [Readability/Medium]) above 20, otherwise (7, []).
    """
    complexity = code_complexity(text)

    if complexity > HIGH_COMPLEXITY_THRESHOLD:
        return 3, [
            Issue(
                type=IssueType.EFFICIENCY.value,
                severity=Severity.HIGH.value,
                description="High complexity code detected",
                problem="The code may have performance issues due to high complexity",
                fix="Consider refactoring the code to reduce complexity",
                line_numbers="Multiple lines",
            )
        ]

    if complexity > MEDIUM_COMPLEXITY_THRESHOLD:
        return 5, [
            Issue(
                type=IssueType.READABILITY.value,
                severity=Severity.MEDIUM.value,
                description="Code readability issues detected",
                problem="The code may be hard to understand due to poor formatting",
                fix="Review and apply consistent formatting following PEP8 guidelines",
                line_numbers="Multiple lines",
            )
        ]

    return 7, []
