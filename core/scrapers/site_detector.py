import logging
from bs4 import BeautifulSoup

logger = logging.getLogger("scraper.detector")

WORDPRESS = "wordpress"
CUSTOM = "custom"

WORDPRESS_MARKERS = (
    '.woocommerce, .woocommerce-product, [class*="woocommerce"]',
    'link[href*="wp-content"]',
    'script[src*="wp-content"]',
    'script[src*="woocommerce"]',
)


def is_wordpress_site(soup: BeautifulSoup) -> bool:
    """Detect a WordPress/WooCommerce storefront from its markup."""
    for selector in WORDPRESS_MARKERS:
        if soup.select_one(selector) is not None:
            logger.debug("WordPress marker found: %s", selector)
            return True

    body = soup.body or soup
    markup = str(body)
    return "woocommerce" in markup or "wp-content" in markup


def detect_site_type(soup: BeautifulSoup) -> str:
    if is_wordpress_site(soup):
        logger.info("WordPress/WooCommerce site detected")
        return WORDPRESS
    logger.info("Custom-coded site detected")
    return CUSTOM
