"""CodeSage - AI code review client for the Gemini API"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports so lightweight modules (heuristics, normalizer) load without httpx.
def __getattr__(name: str):
    if name == "CodeReviewer":
        from codesage.review.reviewer import CodeReviewer

        return CodeReviewer

    if name in ("AnalysisRecord", "InsightsRecord", "Issue"):
        from codesage.review import models

        return getattr(models, name)

    if name in ("CodeSageError", "ConfigurationError", "TransportError", "MalformedResponseError"):
        from codesage import errors

        return getattr(errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "CodeReviewer",
    "AnalysisRecord",
    "InsightsRecord",
    "Issue",
    "CodeSageError",
    "ConfigurationError",
    "TransportError",
    "MalformedResponseError",
]
