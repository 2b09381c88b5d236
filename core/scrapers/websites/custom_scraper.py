import re

from core.features.markup import SelectorDescriptor as S
from core.scrapers.product_page import ProductPageScraper


class CustomSiteScraper(ProductPageScraper):
    """Scraper for custom-coded (non-WordPress) storefronts.

    These shops have no common theme markup, so selectors run against the
    whole document and product IDs are read from the page text when no SKU
    element exists.
    """

    SITE_NAME = "custom"
    EXCLUDED_SECTIONS = ()

    PRICE_SELECTORS = (
        S("price", '.price, .product-price, [data-price], [class*="price"]'),
    )
    SALE_PRICE_SELECTORS = (
        S("sale-price", '.sale-price, .price-sale, .discount-price, [class*="sale"]'),
    )
    ALLOW_DECIMAL_PRICE = True

    DESCRIPTION_SELECTORS = (
        S("description",
          '.product-description, .product-details, .product-content, .desc-pro, '
          '[class*="description"], [class*="details"]'),
    )
    SHORT_DESCRIPTION_SELECTORS = (
        S("excerpt", '.product-excerpt, .product-summary, .short-desc, [class*="excerpt"]'),
    )

    SKU_SELECTORS = (
        S("sku", '[data-sku], [itemprop="sku"], .sku-value, [class*="sku"], [class*="product-id"]'),
    )
    # "شناسه محصول: 270341" (product ID)
    SKU_TEXT_PATTERNS = (
        re.compile(r"شناسه\s*محصول\s*:\s*(\d+)"),
        re.compile(r"product[_\s-]?id[:\s]*(\d+)", re.IGNORECASE),
    )

    GALLERY_SELECTORS = (
        S("gallery", '.product-gallery, .product-images, [class*="gallery"], [class*="slider"]'),
    )
