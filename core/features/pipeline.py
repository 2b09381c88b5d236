"""Feature extraction cascade.

Strategies run in a fixed order, from dedicated specification markup down to
free-text segmentation of the short description. The first strategy that
returns anything wins; results are never merged across strategies.
"""

import abc
import logging
from typing import List, NamedTuple, Optional, Sequence

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from core.errors import MalformedMarkupError
from core.features.markup import (
    BROAD_ITEM_SELECTORS,
    FEATURE_CONTAINER_SELECTORS,
    ITEM_SELECTORS,
    SelectorDescriptor,
    extract_from_element,
    extract_from_markup,
    parse_fragment,
    select_first,
)
from core.features.patterns import extract_labeled_span
from core.features.segmenter import LEADING_MARKER_RE, segment
from core.features.vocabulary import DEFAULT_VOCABULARY, Vocabulary
from core.models import FeatureSource, PageExtract

logger = logging.getLogger("features.pipeline")

# Raised by a strategy that meets markup it cannot walk; the cascade moves on
STRATEGY_ERRORS = (
    MalformedMarkupError,
    SelectorSyntaxError,
    AttributeError,
    LookupError,
    TypeError,
    ValueError,
)

LIST_ITEM_SELECTORS: Sequence[SelectorDescriptor] = (
    SelectorDescriptor("ordered-item", "ol li"),
    SelectorDescriptor("unordered-item", "ul li"),
)


class FeatureResult(NamedTuple):
    features: List[str]
    source: Optional[FeatureSource]


def normalize_features(candidates: Sequence[str], vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> List[str]:
    """Trim, drop short and administrative entries, de-duplicate in order."""
    seen = set()
    features = []
    for candidate in candidates:
        text = (candidate or "").strip()
        if len(text) <= 3 or vocabulary.is_stop_phrase(text) or text in seen:
            continue
        seen.add(text)
        features.append(text)
    return features


def find_features_container(container: Optional[Tag]) -> Optional[Tag]:
    """Locate the region of ``container`` dedicated to specifications."""
    if container is None:
        return None
    return select_first(container, FEATURE_CONTAINER_SELECTORS)


class FeatureStrategy(abc.ABC):
    """One step of the cascade."""

    source: FeatureSource

    def __init__(self, vocabulary: Vocabulary = DEFAULT_VOCABULARY):
        self.vocabulary = vocabulary

    @abc.abstractmethod
    def try_extract(self, page: PageExtract, container: Optional[Tag]) -> List[str]:
        """Return candidate features, or an empty list on a miss."""
        raise NotImplementedError("Feature strategies must implement try_extract()")

    def segment_span(self, text: str) -> List[str]:
        """Labeled span of ``text`` split with keyword hints, labels removed."""
        span = extract_labeled_span(text, self.vocabulary.sections)
        if not span:
            return []
        return self.drop_labels(segment(span, self.vocabulary.keyword_hints))

    def drop_labels(self, segments: List[str]) -> List[str]:
        return [
            s
            for s in segments
            if not self.vocabulary.is_label(s) and not self.vocabulary.is_stop_phrase(s)
        ]


class DedicatedListStrategy(FeatureStrategy):
    source = FeatureSource.DEDICATED_LIST

    def try_extract(self, page, container):
        region = find_features_container(container)
        if region is None:
            return []
        return extract_from_element(region, ITEM_SELECTORS, self.vocabulary)


class LabeledTextPatternStrategy(FeatureStrategy):
    source = FeatureSource.LABELED_TEXT_PATTERN

    def try_extract(self, page, container):
        return self.segment_span(page.visible_text)


class DescriptionListMarkupStrategy(FeatureStrategy):
    source = FeatureSource.DESCRIPTION_LIST_MARKUP

    def try_extract(self, page, container):
        fragment = page.description_html or page.short_description_html
        return extract_from_markup(fragment, ITEM_SELECTORS, self.vocabulary)


class FeaturesContainerStrategy(FeatureStrategy):
    """Broader second pass over the region found by DedicatedListStrategy."""

    source = FeatureSource.FEATURES_CONTAINER

    def try_extract(self, page, container):
        region = find_features_container(container)
        if region is None:
            return []
        return extract_from_element(region, BROAD_ITEM_SELECTORS, self.vocabulary)


class ShortDescriptionTextStrategy(FeatureStrategy):
    source = FeatureSource.SHORT_DESCRIPTION_TEXT

    def try_extract(self, page, container):
        text = page.short_description_text
        if not text or not text.strip():
            return []
        features = self.segment_span(text)
        if features:
            return features
        return self.drop_labels(segment(text, self.vocabulary.keyword_hints))


class DescriptionListFallbackStrategy(FeatureStrategy):
    source = FeatureSource.DESCRIPTION_LIST_FALLBACK

    def try_extract(self, page, container):
        if not page.description_html or not page.description_html.strip():
            return []
        root = parse_fragment(page.description_html)

        features = extract_from_element(root, LIST_ITEM_SELECTORS, self.vocabulary)
        if features:
            return features

        for paragraph in extract_from_element(
            root, (SelectorDescriptor("paragraph", "p"),), self.vocabulary
        ):
            if LEADING_MARKER_RE.match(paragraph) or self.vocabulary.starts_with_hint(paragraph):
                features.append(paragraph)
        return features


DEFAULT_STRATEGIES = (
    DedicatedListStrategy,
    LabeledTextPatternStrategy,
    DescriptionListMarkupStrategy,
    FeaturesContainerStrategy,
    ShortDescriptionTextStrategy,
    DescriptionListFallbackStrategy,
)


class FeaturePipeline:
    """Run the strategies in order and normalize the first non-empty result."""

    def __init__(
        self,
        strategies: Optional[Sequence[FeatureStrategy]] = None,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    ):
        self.vocabulary = vocabulary
        if strategies is None:
            strategies = [strategy(vocabulary) for strategy in DEFAULT_STRATEGIES]
        self.strategies = list(strategies)

    def run(self, page: PageExtract, container: Optional[Tag] = None) -> FeatureResult:
        for strategy in self.strategies:
            try:
                candidates = strategy.try_extract(page, container)
            except STRATEGY_ERRORS as e:
                logger.warning("Skipping %s strategy: %s", strategy.source.value, e)
                continue

            features = normalize_features(candidates, self.vocabulary)
            if features:
                logger.info(
                    "Extracted %d features with %s strategy",
                    len(features),
                    strategy.source.value,
                )
                return FeatureResult(features, strategy.source)
            logger.debug("No features from %s strategy", strategy.source.value)

        logger.info("No product features found")
        return FeatureResult([], None)


def extract_features(
    page: PageExtract,
    container: Optional[Tag] = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> List[str]:
    """Feature list for ``page``; empty when no strategy finds anything."""
    return FeaturePipeline(vocabulary=vocabulary).run(page, container).features
