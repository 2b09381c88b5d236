"""Locate a labeled "product features" block inside rendered page text."""

import re
from typing import Iterable, Optional

from core.features.vocabulary import JOINERS, LabeledSection


def _compile(section: LabeledSection) -> "re.Pattern":
    terminators = "|".join(section.terminators)
    end = f"(?:{terminators}|$)" if terminators else "$"
    return re.compile(
        rf"(?:{section.anchor})[\s{JOINERS}]*:?(.*?){end}",
        re.IGNORECASE | re.DOTALL,
    )


def extract_labeled_span(text: str, labels: Iterable[LabeledSection]) -> Optional[str]:
    """Return the text following the first matching anchor, or None.

    Each label is tried in order: anchor phrase, optional colon, then
    everything up to the first terminator or the end of ``text``. A label
    whose capture is blank does not count as a match.
    """
    if not text:
        return None

    for section in labels:
        match = _compile(section).search(text)
        if match is None:
            continue
        span = match.group(1).strip()
        if span:
            return span
    return None
