import re

from core.features.markup import SelectorDescriptor as S
from core.scrapers.product_page import ProductPageScraper


class WordPressScraper(ProductPageScraper):
    """Scraper for WordPress/WooCommerce product pages.

    Everything is scoped to the main product container, and anything inside
    related, upsell or cross-sell sections is ignored so that prices and
    images of other products never leak in.
    """

    SITE_NAME = "wordpress"

    CONTAINER_SELECTORS = (
        S("product-container",
          '.product, .woocommerce-product, .product-details, .product-summary, '
          '.product-info, [class*="product-detail"], [class*="product-main"], '
          '.single-product, [itemtype*="Product"]'),
    )
    FALLBACK_CONTAINER_SELECTORS = (
        S("main-content", 'main, .main-content, .content, [role="main"]'),
    )

    # A struck-through amount is the regular price of a product on sale
    PRICE_SELECTORS = (
        S("struck-price", "del .woocommerce-Price-amount, del .amount"),
        S("price",
          '.price, .woocommerce-Price-amount, .amount, [class*="price"], [data-price], '
          '.product-price, .current-price, .price-wrapper, [itemprop="price"]'),
    )
    SALE_PRICE_SELECTORS = (
        S("inserted-price", "ins .woocommerce-Price-amount, ins .amount"),
        S("sale-class", ".sale-price, .price-sale, .discount-price"),
    )
    # e.g. "8,680,000 تومان"
    PRICE_TEXT_RE = re.compile(r"\d[\d,]*\s*(?:تومان|ریال)|\d[\d,]*\s*\$|USD", re.IGNORECASE)

    DESCRIPTION_SELECTORS = (
        S("description-tab", "#tab-description, .woocommerce-Tabs-panel--description"),
        S("description",
          '.description, .product-desc, .product-details, [class*="description"], '
          '[class*="details"], #description, [itemprop="description"]'),
    )
    SHORT_DESCRIPTION_SELECTORS = (
        S("woocommerce-short-description", ".woocommerce-product-details__short-description"),
        S("excerpt", '.excerpt, .short-desc, [class*="excerpt"], .summary, [class*="summary"]'),
    )
    SHORT_DESCRIPTION_AS_HTML = True

    SKU_SELECTORS = (
        S("sku", '.product_meta .sku, .sku, [itemprop="sku"], .sku-value'),
        S("data-sku", "[data-sku]"),
        S("sku-class", '[class*="sku"]'),
    )

    GALLERY_SELECTORS = (
        S("gallery",
          '.woocommerce-product-gallery, .product-images, .product-gallery, '
          '.product-photos, [class*="gallery"], [class*="images"]'),
    )

    CATEGORY_SELECTORS = (
        'a[href*="product-category"], a[href*="category"], .posted_in a, '
        '.product-categories a, [class*="category"] a'
    )
    CATEGORY_TEXT_PATTERNS = (
        re.compile(r"دسته[\s\u200c]*بندی[\s\u200c]*(?:ها)?\s*[:\s]+([^\n]+)"),
        re.compile(r"categor(?:y|ies)\s*[:\s]+([^\n]+)", re.IGNORECASE),
    )
    TAG_SELECTORS = 'a[href*="tag"], .tagged_as a, .product-tags a, [class*="tag"] a'
