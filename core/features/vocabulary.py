# Shared bilingual vocabulary for feature extraction.
# The segmenter, the labeled-section matcher and the noise filters all read
# from one Vocabulary so the WordPress and custom-site paths cannot drift apart.

import re
from dataclasses import dataclass, field
from typing import NamedTuple, Tuple

# Zero-width non-joiner / joiner show up between Persian word parts
JOINERS = "\u200c\u200d"

FEATURES_LABEL = "ویژگی های محصول"

# Administrative labels: brand, category, price, in stock, quantity,
# add to cart, support
PERSIAN_STOP_PHRASES: Tuple[str, ...] = (
    "برند",
    "دسته",
    "قیمت",
    "موجود",
    "تعداد",
    "افزودن",
    "پشتیبانی",
)
ENGLISH_STOP_PHRASES: Tuple[str, ...] = (
    "brand",
    "category",
    "price",
    "in stock",
    "quantity",
    "add to cart",
    "support",
)
STOP_PHRASES = PERSIAN_STOP_PHRASES + ENGLISH_STOP_PHRASES

# Motor, speed, blade, battery, charge, weight, dimensions, material, length,
# capacity, time, power, "equipped with", "fitted with", "suitable for"
KEYWORD_HINTS: Tuple[str, ...] = (
    "موتور",
    "سرعت",
    "تیغه",
    "باتری",
    "شارژ",
    "وزن",
    "ابعاد",
    "جنس",
    "طول",
    "ظرفیت",
    "زمان",
    "توان",
    "دارای",
    "مجهز",
    "مناسب",
)

# Section labels that sometimes survive segmentation as a line of their own
LABEL_PREFIXES: Tuple[str, ...] = ("ویژگی", "features")


class LabeledSection(NamedTuple):
    """A regex anchor that opens a feature block and the regexes that close it."""

    anchor: str
    terminators: Tuple[str, ...]


def joiner_tolerant(phrase: str) -> str:
    """Regex for ``phrase`` where any whitespace may also be a ZWNJ/ZWJ."""
    parts = [re.escape(part) for part in phrase.split()]
    return f"[\\s{JOINERS}]*".join(parts)


BLANK_LINES = r"\n[ \t]*\n[ \t]*\n"

PERSIAN_FEATURES = LabeledSection(
    anchor=joiner_tolerant(FEATURES_LABEL),
    terminators=(BLANK_LINES,) + tuple(re.escape(p) for p in PERSIAN_STOP_PHRASES),
)

ENGLISH_FEATURES = LabeledSection(
    anchor=r"\bfeatures?\b",
    terminators=(BLANK_LINES,)
    + tuple(r"\b" + re.escape(p) + r"\b" for p in ENGLISH_STOP_PHRASES),
)


@dataclass(frozen=True)
class Vocabulary:
    """The phrase tables feature extraction runs against."""

    stop_phrases: Tuple[str, ...] = STOP_PHRASES
    keyword_hints: Tuple[str, ...] = KEYWORD_HINTS
    label_prefixes: Tuple[str, ...] = LABEL_PREFIXES
    sections: Tuple[LabeledSection, ...] = field(
        default=(PERSIAN_FEATURES, ENGLISH_FEATURES)
    )

    def is_stop_phrase(self, text: str) -> bool:
        lowered = text.strip().lower()
        return any(lowered.startswith(phrase) for phrase in self.stop_phrases)

    def is_label(self, text: str) -> bool:
        lowered = text.strip().lower()
        return any(lowered.startswith(prefix) for prefix in self.label_prefixes)

    def starts_with_hint(self, text: str) -> bool:
        stripped = text.strip()
        return any(stripped.startswith(hint) for hint in self.keyword_hints)


DEFAULT_VOCABULARY = Vocabulary()
