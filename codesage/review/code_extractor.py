"""
Code Extractor - pull the improved code out of a fixed-code reply.

The reply is expected to hold the full program in a fenced block tagged
with the target language. Anything shorter than half of the submitted code
is treated as truncated output and replaced by basic_fix().
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from codesage import config
from codesage.observability.logging import get_logger
from codesage.observability.telemetry import record_outcome
from codesage.review.models import Issue

logger = get_logger(__name__)

BASIC_FIX_HEADER = (
    "# Improved by CodeSage AI\n"
    "# Issues addressed: {issue_count}\n"
    "# Key improvements: PEP8 compliance, readability, and best practices\n\n"
)


def find_fenced_block(text: str, language: str = config.DEFAULT_LANGUAGE) -> str | None:
    """Return the body of the first ```<language> block, or None."""
    pattern = re.compile(rf"```{re.escape(language)}[ \t]*\r?\n(.*?)\r?\n[ \t]*```", re.DOTALL)
    match = pattern.search(text)
    return match.group(1) if match else None


def basic_fix(original_code: str, issues: Sequence[Issue | dict]) -> str:
    """
    Mechanical cleanup used when no usable code came back.

    Tabs become four spaces, trailing whitespace and statement terminators
    are stripped per line, and runs of blank lines collapse to one. A short
    header comment notes the number of issues the review reported.
    """
    lines = []
    for line in original_code.replace("\t", "    ").split("\n"):
        stripped = line.rstrip()
        while stripped.endswith(";"):
            stripped = stripped[:-1].rstrip()
        lines.append(stripped)

    improved = re.sub(r"\n{3,}", "\n\n", "\n".join(lines))
    return BASIC_FIX_HEADER.format(issue_count=len(issues)) + improved


def extract_fixed_code(
    response_text: str | None,
    original_code: str,
    issues: Sequence[Issue | dict],
    language: str = config.DEFAULT_LANGUAGE,
) -> str:
    """
    Return the improved code from a model reply, or basic_fix() of the original.

    Never raises and never returns an empty string.

    Side Effects:
        - Increments review.fix.extracted / review.fix.basic_fallback
    """
    block = find_fenced_block(response_text or "", language)
    extracted = block.strip() if block is not None else ""

    if not extracted:
        logger.warning("No %s code block found in fixed-code response", language)
    elif len(extracted) < len(original_code) * config.FIXED_CODE_MIN_RATIO:
        logger.warning(
            "Extracted code seems too short (%d chars vs %d original), using basic fix",
            len(extracted),
            len(original_code),
        )
    else:
        record_outcome("review", "fix", "extracted")
        return extracted

    record_outcome("review", "fix", "basic_fallback")
    return basic_fix(original_code, issues)
