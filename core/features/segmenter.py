"""Split a block of free text into candidate feature statements."""

import re
from typing import Iterable, List

MIN_FEATURE_LENGTH = 4

# "<digits>." used as a list marker, but not the point of a decimal number
NUMERIC_MARKER = r"(?<!\d)(?=\d+\.(?!\d))"
# Any "•" or "*"; a hyphen only at the start of a word, so "Wi-Fi" and "10-20" stay whole
BULLET_MARKER = r"(?=[•*])|(?<!\S)(?=-)"

LEADING_MARKER_RE = re.compile(r"^\s*(?:\d+\.(?!\d)|[•\-*])\s*")


def _split_pattern(keyword_hints: Iterable[str]) -> "re.Pattern":
    boundaries = [r"\r?\n", NUMERIC_MARKER, BULLET_MARKER]
    hints = sorted({hint for hint in keyword_hints if hint}, key=len, reverse=True)
    if hints:
        boundaries.append("(?=" + "|".join(re.escape(hint) for hint in hints) + ")")
    return re.compile("|".join(boundaries))


def strip_marker(segment: str) -> str:
    """Remove one leading numeric marker or bullet glyph and trim."""
    return LEADING_MARKER_RE.sub("", segment, count=1).strip()


def segment(text: str, keyword_hints: Iterable[str] = ()) -> List[str]:
    """Split ``text`` into trimmed feature strings.

    Splits happen before every line break, numeric marker ("1."), bullet
    glyph and, when given, every keyword hint. Delimiters are not consumed;
    they open the next segment and markers are stripped afterwards.
    Segments shorter than four characters are dropped.
    """
    if not text:
        return []

    segments = []
    for raw in _split_pattern(keyword_hints).split(text):
        cleaned = strip_marker(raw)
        if len(cleaned) >= MIN_FEATURE_LENGTH:
            segments.append(cleaned)
    return segments
