import re
from typing import List, Optional, Sequence
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from core.features.markup import EXCLUDED_SECTION_SELECTORS, SelectorDescriptor, is_in_excluded_section, select_first
from core.features.pipeline import FeaturePipeline
from core.models import ImageRef, PageExtract, ScrapedProduct, TermRef
from core.scrapers.text import inner_text
from core.scrapers.web_scraper_base import DIGITS, WebScraperBase

S = SelectorDescriptor

IMAGE_SOURCE_ATTRIBUTES = ("data-large_image", "data-src", "data-lazy-src", "data-original", "src")
IMAGE_URL_HINTS = ("product", "woocommerce", "wp-content/uploads")
IMAGE_URL_BLOCKLIST = ("logo", "icon", "banner", "avatar", "related", "similar", "placeholder")
MIN_IMAGE_SIDE = 100

SKU_LABEL_RE = re.compile(r"^(?:sku|شناسه(?:\s*محصول)?)\s*[:：]?\s*", re.IGNORECASE)


class ProductPageScraper(WebScraperBase):
    """Selector-driven product page scraper.

    Subclasses describe a storefront family with the selector tables below;
    the extraction steps are shared. Each table is an ordered tuple of
    SelectorDescriptor evaluated by ``select_first``.
    """

    SITE_NAME = "product"

    # Region the product lives in; empty means the whole <body>
    CONTAINER_SELECTORS: Sequence[SelectorDescriptor] = ()
    FALLBACK_CONTAINER_SELECTORS: Sequence[SelectorDescriptor] = ()
    # Sections belonging to other products
    EXCLUDED_SECTIONS: Sequence[str] = EXCLUDED_SECTION_SELECTORS

    NAME_SELECTORS: Sequence[SelectorDescriptor] = (
        S("heading", "h1"),
        S("title-class", '.product-title, .product-name, [class*="title"], [class*="name"]'),
    )
    PRICE_SELECTORS: Sequence[SelectorDescriptor] = ()
    SALE_PRICE_SELECTORS: Sequence[SelectorDescriptor] = ()
    DESCRIPTION_SELECTORS: Sequence[SelectorDescriptor] = ()
    SHORT_DESCRIPTION_SELECTORS: Sequence[SelectorDescriptor] = ()
    SKU_SELECTORS: Sequence[SelectorDescriptor] = ()
    GALLERY_SELECTORS: Sequence[SelectorDescriptor] = ()
    CATEGORY_SELECTORS: Optional[str] = None
    TAG_SELECTORS: Optional[str] = None

    # Text fallbacks scanned when the selectors find nothing
    PRICE_TEXT_RE: Optional["re.Pattern"] = None
    SKU_TEXT_PATTERNS: Sequence["re.Pattern"] = ()
    CATEGORY_TEXT_PATTERNS: Sequence["re.Pattern"] = ()

    ALLOW_DECIMAL_PRICE = False
    SHORT_DESCRIPTION_AS_HTML = False
    MAX_CATEGORIES = 3

    def __init__(self, url: str, base_url: str = "", soup: Optional[BeautifulSoup] = None,
                 session: Optional[requests.Session] = None,
                 pipeline: Optional[FeaturePipeline] = None):
        super().__init__(self.SITE_NAME, url, session=session)
        self.base_url = base_url
        self.soup = soup
        self.pipeline = pipeline or FeaturePipeline()

    def scrape(self) -> ScrapedProduct:
        soup = self.soup if self.soup is not None else self.get_page()
        container = self.find_container(soup)
        self.logger.info("Extracting data from %s site...", self.name)

        description_html = self.extract_html(container, self.DESCRIPTION_SELECTORS)
        short_element = self.first(container, self.SHORT_DESCRIPTION_SELECTORS)
        short_html = short_element.decode_contents().strip() if short_element else ""
        short_text = inner_text(short_element) if short_element else ""

        name = self.extract_text(container, self.NAME_SELECTORS)
        regular_price = self.extract_regular_price(container)
        sale_price = self.extract_sale_price(container)
        if sale_price == regular_price:
            sale_price = ""

        page = PageExtract(
            name=name,
            description_html=description_html,
            short_description_text=short_text,
            short_description_html=short_html,
            visible_text=inner_text(container),
        )
        result = self.pipeline.run(page, container)

        product = ScrapedProduct(
            name=name,
            regular_price=regular_price,
            sale_price=sale_price,
            sku=self.extract_sku(soup, container),
            description=description_html,
            short_description=(short_html or short_text) if self.SHORT_DESCRIPTION_AS_HTML else short_text,
            images=self.extract_images(soup, container),
            categories=self.extract_categories(container),
            tags=self.extract_terms(container, self.TAG_SELECTORS),
            features=result.features,
            feature_source=result.source,
            url=self.url,
        )
        self.log_summary(product)
        return product

    # -- lookup helpers ---------------------------------------------------

    def find_container(self, soup: BeautifulSoup) -> Tag:
        """Scope extraction to the product region of the page."""
        for selectors in (self.CONTAINER_SELECTORS, self.FALLBACK_CONTAINER_SELECTORS):
            if selectors:
                container = select_first(soup, selectors, excluded=())
                if container is not None:
                    return container
        return soup.body or soup

    def first(self, root: Tag, selectors: Sequence[SelectorDescriptor]) -> Optional[Tag]:
        if not selectors:
            return None
        return select_first(root, selectors, self.EXCLUDED_SECTIONS)

    def excluded(self, element: Tag) -> bool:
        return bool(self.EXCLUDED_SECTIONS) and is_in_excluded_section(element, self.EXCLUDED_SECTIONS)

    def extract_text(self, root: Tag, selectors: Sequence[SelectorDescriptor]) -> str:
        element = self.first(root, selectors)
        return " ".join(element.get_text(" ").split()) if element else ""

    def extract_html(self, root: Tag, selectors: Sequence[SelectorDescriptor]) -> str:
        element = self.first(root, selectors)
        return element.decode_contents().strip() if element else ""

    # -- fields -----------------------------------------------------------

    def extract_regular_price(self, container: Tag) -> str:
        element = self.first(container, self.PRICE_SELECTORS)
        if element is None and self.PRICE_TEXT_RE is not None:
            element = self.find_price_by_text(container)
        if element is None:
            return ""
        return self.extract_price(element.get_text(" "), allow_decimal=self.ALLOW_DECIMAL_PRICE)

    def find_price_by_text(self, container: Tag) -> Optional[Tag]:
        """First leaf element whose text looks like an amount with a currency."""
        for element in container.find_all(True):
            if element.find(True) is not None:
                continue
            text = element.get_text().strip().translate(DIGITS)
            if self.PRICE_TEXT_RE.search(text) and not self.excluded(element):
                return element
        return None

    def extract_sale_price(self, container: Tag) -> str:
        element = self.first(container, self.SALE_PRICE_SELECTORS)
        if element is None:
            return ""
        return self.extract_price(element.get_text(" "), allow_decimal=self.ALLOW_DECIMAL_PRICE)

    def extract_sku(self, soup: BeautifulSoup, container: Tag) -> str:
        element = self.first(container, self.SKU_SELECTORS)
        if element is not None:
            sku = element.get("data-sku") or element.get_text(" ")
            sku = SKU_LABEL_RE.sub("", " ".join(str(sku).split()))
            if sku and sku.upper() != "N/A":
                return sku

        page_text = inner_text(soup.body or soup)
        for pattern in self.SKU_TEXT_PATTERNS:
            match = pattern.search(page_text)
            if match:
                return match.group(1).strip()
        return ""

    def image_source(self, img: Tag) -> str:
        for attribute in IMAGE_SOURCE_ATTRIBUTES:
            value = (img.get(attribute) or "").strip()
            if value and not value.startswith("data:"):
                return value
        return ""

    def extract_images(self, soup: BeautifulSoup, container: Tag) -> List[ImageRef]:
        """Main gallery images only, as absolute URLs without duplicates."""
        gallery = self.first(container, self.GALLERY_SELECTORS) or container
        page_url = self.base_url or self.url

        images: List[ImageRef] = []
        seen = set()
        for img in gallery.find_all("img"):
            if self.excluded(img):
                continue
            src = self.image_source(img)
            if not src:
                continue
            if not (self.is_large(img) or any(hint in src for hint in IMAGE_URL_HINTS)):
                continue

            src = urljoin(page_url, src)
            if src in seen or any(word in src.lower() for word in IMAGE_URL_BLOCKLIST):
                continue
            seen.add(src)
            images.append(ImageRef(src=src))
        return images

    @staticmethod
    def is_large(img: Tag) -> bool:
        try:
            return int(img.get("width", 0)) > MIN_IMAGE_SIDE and int(img.get("height", 0)) > MIN_IMAGE_SIDE
        except (TypeError, ValueError):
            return False

    def extract_terms(self, container: Tag, selectors: Optional[str], limit: Optional[int] = None) -> List[TermRef]:
        if not selectors:
            return []
        terms: List[TermRef] = []
        for link in container.select(selectors):
            if limit is not None and len(terms) >= limit:
                break
            if self.excluded(link):
                continue
            name = " ".join(link.get_text(" ").split())
            if name and all(term.name != name for term in terms):
                terms.append(TermRef(name=name))
        return terms

    def extract_categories(self, container: Tag) -> List[TermRef]:
        categories = self.extract_terms(container, self.CATEGORY_SELECTORS, self.MAX_CATEGORIES)
        if categories or not self.CATEGORY_TEXT_PATTERNS:
            return categories

        # "دسته‌بندی‌ها: حجم زن, ماشین اصلاح"
        text = inner_text(container)
        for pattern in self.CATEGORY_TEXT_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            for name in re.split(r"[,،]", match.group(1)):
                name = name.strip()
                if name and all(c.name != name for c in categories):
                    categories.append(TermRef(name=name))
                if len(categories) >= self.MAX_CATEGORIES:
                    break
            break
        return categories

    def log_summary(self, product: ScrapedProduct):
        self.logger.info("Extraction completed:")
        self.logger.info("- Name: %s", product.name or "(not found)")
        self.logger.info("- Price: %s", product.regular_price or "(not found)")
        self.logger.info("- Sale Price: %s", product.sale_price or "(not found)")
        self.logger.info("- SKU: %s", product.sku or "(not found)")
        self.logger.info("- Description: %s", "Found" if product.description else "(not found)")
        self.logger.info("- Images: %d, Categories: %d, Tags: %d",
                         len(product.images), len(product.categories), len(product.tags))
        self.logger.info("- Features: %d %s", len(product.features),
                         ", ".join(product.features[:3]) if product.features else "")
