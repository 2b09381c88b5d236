import pytest
from bs4 import BeautifulSoup
from pydantic import ValidationError

from core.errors import MalformedMarkupError
from core.features.pipeline import (
    DescriptionListFallbackStrategy,
    FeaturePipeline,
    FeatureStrategy,
    ShortDescriptionTextStrategy,
    extract_features,
    normalize_features,
)
from core.features.vocabulary import DEFAULT_VOCABULARY
from core.mapping.attributes import map_to_platform_product
from core.models import FeatureSource, PageExtract


def container_from(html: str):
    return BeautifulSoup(f'<div class="product">{html}</div>', "html.parser").div


class StaticStrategy(FeatureStrategy):
    source = FeatureSource.DEDICATED_LIST

    def __init__(self, result):
        super().__init__()
        self.result = result
        self.calls = 0

    def try_extract(self, page, container):
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class TestScenarios:
    def test_dedicated_list(self):
        container = container_from(
            '<div class="product-features"><ul>'
            "<li>Battery 2000mAh</li><li>Weight 150g</li>"
            "</ul></div>"
        )
        result = FeaturePipeline().run(PageExtract(), container)
        assert result.features == ["Battery 2000mAh", "Weight 150g"]
        assert result.source == FeatureSource.DEDICATED_LIST

    def test_labeled_text_pattern(self):
        page = PageExtract(
            visible_text="ویژگی های محصول: موتور قوی سرعت بالا باتری ۲۰۰۰mAh\n\n\nدسته: لوازم"
        )
        result = FeaturePipeline().run(page, container_from("<p>x</p>"))
        assert result.source == FeatureSource.LABELED_TEXT_PATTERN
        assert result.features == ["موتور قوی", "سرعت بالا", "باتری ۲۰۰۰mAh"]
        for feature in result.features:
            assert not DEFAULT_VOCABULARY.is_stop_phrase(feature)

    def test_short_description_direct_segmentation(self):
        page = PageExtract(short_description_text="1. Fast charging 2. Waterproof")
        result = FeaturePipeline().run(page, None)
        assert result.features == ["Fast charging", "Waterproof"]
        assert result.source == FeatureSource.SHORT_DESCRIPTION_TEXT

    def test_no_features(self):
        result = FeaturePipeline().run(PageExtract(), container_from("<span>nothing</span>"))
        assert result.features == []
        assert result.source is None

        base = {"name": "Trimmer", "type": "simple", "status": "draft"}
        mapped = map_to_platform_product(base, result.features)
        assert mapped is base
        assert "attributes" not in mapped
        assert "meta_data" not in mapped


class TestCascade:
    def test_description_markup(self):
        page = PageExtract(description_html="<ul><li>Ceramic blade</li><li>USB charging</li></ul>")
        result = FeaturePipeline().run(page, container_from("<p>x</p>"))
        assert result.source == FeatureSource.DESCRIPTION_LIST_MARKUP
        assert result.features == ["Ceramic blade", "USB charging"]

    def test_short_description_markup_when_description_is_empty(self):
        page = PageExtract(short_description_html="<ul><li>Ceramic blade</li></ul>")
        result = FeaturePipeline().run(page, None)
        assert result.source == FeatureSource.DESCRIPTION_LIST_MARKUP
        assert result.features == ["Ceramic blade"]

    def test_features_container_broad_pass(self):
        container = container_from(
            '<table class="woocommerce-product-attributes">'
            "<tr><th>Weight</th><td>150 g</td></tr>"
            "<tr><th>Color</th><td>Black</td></tr></table>"
        )
        result = FeaturePipeline().run(PageExtract(), container)
        assert result.source == FeatureSource.FEATURES_CONTAINER
        assert result.features == ["Weight 150 g", "Color Black"]

    def test_first_success_short_circuits(self):
        container = container_from(
            '<div class="product-features"><ul><li>Dedicated entry</li></ul></div>'
        )
        page = PageExtract(
            visible_text="Features: something else",
            description_html="<ul><li>Description entry</li></ul>",
        )
        result = FeaturePipeline().run(page, container)
        assert result.features == ["Dedicated entry"]

    def test_later_strategies_not_called_after_success(self):
        first = StaticStrategy(["Quiet motor"])
        second = StaticStrategy(["Never used"])
        result = FeaturePipeline(strategies=[first, second]).run(PageExtract())
        assert result.features == ["Quiet motor"]
        assert second.calls == 0

    def test_results_are_never_merged(self):
        first = StaticStrategy([])
        second = StaticStrategy(["Only this one"])
        result = FeaturePipeline(strategies=[first, second]).run(PageExtract())
        assert result.features == ["Only this one"]
        assert first.calls == 1

    def test_failing_strategy_is_skipped(self):
        broken = StaticStrategy(MalformedMarkupError("bad markup"))
        working = StaticStrategy(["Quiet motor"])
        result = FeaturePipeline(strategies=[broken, working]).run(PageExtract())
        assert result.features == ["Quiet motor"]

    @pytest.mark.parametrize("error", [
        AttributeError("'NoneType' object has no attribute 'get_text'"),
        IndexError("list index out of range"),
        TypeError("expected string or bytes-like object"),
        ValueError("unexpected markup"),
    ])
    def test_unexpected_markup_error_is_skipped(self, error):
        broken = StaticStrategy(error)
        working = StaticStrategy(["Quiet motor"])
        result = FeaturePipeline(strategies=[broken, working]).run(PageExtract())
        assert result.features == ["Quiet motor"]
        assert broken.calls == 1

    def test_candidates_that_normalize_away_are_a_miss(self):
        first = StaticStrategy(["abc", "  ", "Brand: Acme"])
        second = StaticStrategy(["Stainless blade"])
        result = FeaturePipeline(strategies=[first, second]).run(PageExtract())
        assert result.features == ["Stainless blade"]

    def test_extract_features_returns_list(self):
        page = PageExtract(short_description_text="• Quiet motor • Washable head")
        assert extract_features(page) == ["Quiet motor", "Washable head"]


class TestPageExtract:
    def test_is_frozen(self):
        page = PageExtract(name="Trimmer")
        with pytest.raises(ValidationError):
            page.name = "Other"
        assert page.name == "Trimmer"


class TestNormalizeFeatures:
    def test_dedup_preserves_first_occurrence(self):
        assert normalize_features(["Waterproof", "Quiet motor", "Waterproof"]) == [
            "Waterproof",
            "Quiet motor",
        ]

    @pytest.mark.parametrize("candidate", ["", "   ", "abc", "Price: 100", "برند: فیلیپس", "In stock"])
    def test_drops_noise(self, candidate):
        assert normalize_features([candidate]) == []

    def test_trims(self):
        assert normalize_features(["  Quiet motor \n"]) == ["Quiet motor"]


class TestShortDescriptionText:
    def test_prefers_labeled_span(self):
        page = PageExtract(short_description_text="Intro text\nFeatures: Quiet motor\nLong battery life")
        features = ShortDescriptionTextStrategy().try_extract(page, None)
        assert features == ["Quiet motor", "Long battery life"]

    def test_drops_label_lines(self):
        page = PageExtract(short_description_text="ویژگی ها\nتیغه استیل ضد زنگ")
        features = ShortDescriptionTextStrategy().try_extract(page, None)
        assert features == ["تیغه استیل ضد زنگ"]


class TestDescriptionListFallback:
    def test_list_items(self):
        page = PageExtract(description_html="<ol><li>Quiet motor</li></ol><ul><li>Ceramic blade</li></ul>")
        features = DescriptionListFallbackStrategy().try_extract(page, None)
        assert features == ["Quiet motor", "Ceramic blade"]

    def test_marked_or_hinted_paragraphs(self):
        page = PageExtract(
            description_html=(
                "<p>Welcome to our shop</p>"
                "<p>1. Quiet motor</p>"
                "<p>• Ceramic blade</p>"
                "<p>وزن سبک و قابل حمل</p>"
            )
        )
        features = DescriptionListFallbackStrategy().try_extract(page, None)
        assert features == ["1. Quiet motor", "• Ceramic blade", "وزن سبک و قابل حمل"]

    def test_empty_description(self):
        assert DescriptionListFallbackStrategy().try_extract(PageExtract(), None) == []
