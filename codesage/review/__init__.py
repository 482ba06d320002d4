"""
CodeSage review - canonical records, normalizers and the review facade.
"""

from __future__ import annotations


# Lazy exports: codesage.llm imports review.models, and the facade imports codesage.llm.
def __getattr__(name: str):
    if name in (
        "AnalysisRecord",
        "CodeQuality",
        "InsightsRecord",
        "Issue",
        "IssueType",
        "ReviewSummary",
        "Severity",
    ):
        from codesage.review import models

        return getattr(models, name)

    if name == "CodeReviewer":
        from codesage.review.reviewer import CodeReviewer

        return CodeReviewer

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "AnalysisRecord",
    "CodeQuality",
    "InsightsRecord",
    "Issue",
    "IssueType",
    "ReviewSummary",
    "Severity",
    "CodeReviewer",
]
