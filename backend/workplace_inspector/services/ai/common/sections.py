"""Marker-based section extraction from free-text LLM replies.

Replies follow a plain-text layout of bracketed markers::

    [TAG]
    ...content...
    [OTHER_TAG]
    ...

A section runs from its marker up to the next marker that starts a line, or
to the end of the text. Missing markers yield an empty string; the parser
never raises on malformed input.
"""

from __future__ import annotations

import re
from functools import lru_cache

# Lookahead for the start of the next section (marker at the start of a line).
_NEXT_MARKER = r"(?=\n\s*\[[A-Z0-9_]+\]|\Z)"


@lru_cache(maxsize=64)
def _section_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(
        rf"\[{re.escape(tag)}\]\s*(.*?){_NEXT_MARKER}",
        re.IGNORECASE | re.DOTALL,
    )


def marker(tag: str) -> str:
    """Return the literal marker text for *tag*, e.g. ``[RISK_LEVEL]``."""
    return f"[{tag}]"


def extract_section(text: str | None, tag: str) -> str:
    """Return the trimmed content of section *tag* in *text*, or ``""``."""
    if not text:
        return ""
    match = _section_pattern(str(tag)).search(text)
    return match.group(1).strip() if match else ""


def extract_sections(text: str | None, tags: list[str] | tuple[str, ...]) -> dict[str, str]:
    return {tag: extract_section(text, tag) for tag in tags}
