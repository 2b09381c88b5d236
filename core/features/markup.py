"""Collect feature strings from list-like HTML markup.

Selector lists are ordered tuples of ``SelectorDescriptor`` so that the
"first match wins" order is plain configuration. ``select_first`` is the one
function that evaluates them against a parsed tree.
"""

import logging
from typing import Iterable, List, NamedTuple, Optional, Sequence

from bs4 import BeautifulSoup, ParserRejectedMarkup, Tag

from core.errors import MalformedMarkupError
from core.features.vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger("features.markup")

# Fragments are parsed with html.parser: lxml wraps bare text in <p>,
# which would turn a plain-text fragment into a "paragraph" feature.
FRAGMENT_PARSER = "html.parser"


class SelectorDescriptor(NamedTuple):
    """A named CSS selector; ``name`` is only used in log output."""

    name: str
    css: str


# Elements that hold one feature each
ITEM_SELECTORS: Sequence[SelectorDescriptor] = (
    SelectorDescriptor("list-item", "li"),
    SelectorDescriptor("definition-term", "dt"),
    SelectorDescriptor("definition-detail", "dd"),
    SelectorDescriptor("paragraph", "p"),
    SelectorDescriptor("feature-item", ".feature-item"),
    SelectorDescriptor("feature-class", '[class*="feature"]'),
)

# Second pass over a dedicated container: attribute tables and theme blocks
BROAD_ITEM_SELECTORS: Sequence[SelectorDescriptor] = tuple(ITEM_SELECTORS) + (
    SelectorDescriptor("table-row", "tr"),
    SelectorDescriptor("desc-block", ".desc-pro"),
    SelectorDescriptor("spec-class", '[class*="spec"]'),
    SelectorDescriptor("attribute-class", '[class*="attribute"]'),
)

# Regions dedicated to specifications, most specific first
FEATURE_CONTAINER_SELECTORS: Sequence[SelectorDescriptor] = (
    SelectorDescriptor("product-features", ".product-features"),
    SelectorDescriptor("features", ".features"),
    SelectorDescriptor("specifications", ".specifications"),
    SelectorDescriptor("specs", ".specs"),
    SelectorDescriptor("woocommerce-attributes", ".woocommerce-product-attributes"),
    SelectorDescriptor("product-attributes", ".product-attributes"),
    SelectorDescriptor("feature-class", '[class*="feature"]'),
    SelectorDescriptor("spec-class", '[class*="spec"]'),
    SelectorDescriptor("desc-block", ".desc-pro"),
)

# Sections that belong to other products on the same page
EXCLUDED_SECTION_SELECTORS: Sequence[str] = (
    ".related-products",
    ".related",
    ".upsells",
    ".cross-sells",
    ".products",
    ".product-list",
    ".similar-products",
    '[class*="related"]',
    '[class*="upsell"]',
    '[class*="cross-sell"]',
    '[class*="similar"]',
)


def group(selectors: Iterable[SelectorDescriptor]) -> str:
    """Join descriptors into one selector group matched in document order."""
    return ", ".join(descriptor.css for descriptor in selectors)


def is_in_excluded_section(element: Tag, excluded: Iterable[str] = EXCLUDED_SECTION_SELECTORS) -> bool:
    for selector in excluded:
        if element.css.closest(selector) is not None:
            return True
    return False


def select_first(
    root: Tag,
    selectors: Iterable[SelectorDescriptor],
    excluded: Iterable[str] = EXCLUDED_SECTION_SELECTORS,
) -> Optional[Tag]:
    """Return the first element matched by the first descriptor that matches.

    Descriptors are tried in order; within one descriptor, document order
    decides. Elements inside an excluded section are skipped.
    """
    excluded = tuple(excluded)
    for descriptor in selectors:
        for element in root.select(descriptor.css):
            if not is_in_excluded_section(element, excluded):
                logger.debug("Selector %s matched <%s>", descriptor.name, element.name)
                return element
    return None


def element_text(element: Tag) -> str:
    return " ".join(element.get_text(" ").split())


def parse_fragment(html_fragment: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html_fragment or "", FRAGMENT_PARSER)
    except ParserRejectedMarkup as e:
        raise MalformedMarkupError(f"Could not parse HTML fragment: {e}") from e


def extract_from_element(
    root: Tag,
    selectors: Iterable[SelectorDescriptor] = ITEM_SELECTORS,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> List[str]:
    """Text of every matching element under ``root``, in document order.

    An element that wraps other matching elements is skipped in favour of
    its children. Entries of three characters or fewer and administrative
    labels are dropped. Duplicates are kept.
    """
    matched = root.select(group(selectors))
    matched_ids = {id(element) for element in matched}

    features = []
    for element in matched:
        if any(id(child) in matched_ids for child in element.find_all(True)):
            continue
        text = element_text(element)
        if len(text) <= 3 or vocabulary.is_stop_phrase(text):
            continue
        features.append(text)
    return features


def extract_from_markup(
    html_fragment: str,
    selectors: Iterable[SelectorDescriptor] = ITEM_SELECTORS,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> List[str]:
    """Parse ``html_fragment`` and run :func:`extract_from_element` on it."""
    if not html_fragment or not html_fragment.strip():
        return []
    return extract_from_element(parse_fragment(html_fragment), selectors, vocabulary)
