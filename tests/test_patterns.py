import pytest

from core.features.patterns import extract_labeled_span
from core.features.vocabulary import (
    ENGLISH_FEATURES,
    PERSIAN_FEATURES,
    LabeledSection,
    Vocabulary,
)

LABELS = (PERSIAN_FEATURES, ENGLISH_FEATURES)


class TestExtractLabeledSpan:
    def test_persian_label_up_to_blank_lines(self):
        text = "ویژگی های محصول: موتور قوی سرعت بالا\n\n\nتوضیحات بیشتر"
        assert extract_labeled_span(text, LABELS) == "موتور قوی سرعت بالا"

    def test_persian_label_with_zero_width_joiner(self):
        text = "ویژگی\u200cهای محصول: تیغه استیل"
        assert extract_labeled_span(text, LABELS) == "تیغه استیل"

    def test_stops_at_administrative_phrase(self):
        text = "ویژگی های محصول: موتور قوی دسته بندی: لوازم"
        assert extract_labeled_span(text, LABELS) == "موتور قوی"

    def test_english_label(self):
        text = "Features: quiet motor, long battery\n\n\nReviews"
        assert extract_labeled_span(text, LABELS) == "quiet motor, long battery"

    def test_english_label_stops_at_price(self):
        text = "Product features\n1. Quiet motor\n2. Ceramic blade\nPrice: $20"
        assert extract_labeled_span(text, LABELS) == "1. Quiet motor\n2. Ceramic blade"

    def test_runs_to_end_without_terminator(self):
        assert extract_labeled_span("Features: waterproof body", LABELS) == "waterproof body"

    @pytest.mark.parametrize("text", ["", None, "no label in here", "Features:   \n\n\n"])
    def test_no_span(self, text):
        assert extract_labeled_span(text, LABELS) is None

    def test_first_label_wins(self):
        text = "Features: english part\n\n\nویژگی های محصول: persian part"
        assert extract_labeled_span(text, LABELS) == "persian part"

    def test_custom_section(self):
        section = LabeledSection(anchor=r"highlights", terminators=(r"\bend\b",))
        vocabulary = Vocabulary(sections=(section,))
        text = "Highlights: light and quiet end of list"
        assert extract_labeled_span(text, vocabulary.sections) == "light and quiet"
