import requests
from bs4 import BeautifulSoup
from typing import Dict, Optional
import time
import logging
import re

from config.settings import get_settings
from core.errors import ScraperError
from core.models import ScrapedProduct
from core.scrapers.base import BaseScraper

# Persian and Arabic-Indic digits to ASCII
DIGITS = str.maketrans("۰۱۲۳۴۵۶۷۸۹٠١٢٣٤٥٦٧٨٩", "01234567890123456789")
THOUSANDS_SEPARATORS = (",", "٬", "،")


class WebScraperBase(BaseScraper):
    """Base class for scrapers that fetch real pages over HTTP.

    Adds a shared requests session with browser-like headers, page fetching
    with BeautifulSoup parsing, and price text clean-up.
    """

    def __init__(self, name: str, url: str, user_agent: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        """Initialize the web scraper.

        Args:
            name: Identifier of the storefront family
            url: Product page URL
            user_agent: Optional custom user agent string
            session: Optional session to reuse, e.g. one that already
                fetched the page during site detection
        """
        super().__init__(name, url)
        settings = get_settings()
        self.user_agent = user_agent or settings.USER_AGENT
        self.timeout = settings.REQUEST_TIMEOUT
        self.delay = settings.REQUEST_DELAY
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml",
            "Accept-Language": "fa-IR,fa;q=0.9,en-US;q=0.8,en;q=0.7",
        })
        self.logger = logging.getLogger(f"scraper.{name}")

    def get_page(self, url: str = None, params: Dict = None) -> BeautifulSoup:
        """Fetch a page and parse it with BeautifulSoup.

        Args:
            url: URL to fetch, defaults to the scraper's product URL
            params: Optional query parameters

        Returns:
            BeautifulSoup object for HTML parsing

        Raises:
            ScraperError: If the request fails or times out
        """
        target_url = url or self.url
        self.logger.info("Fetching %s", target_url)

        if self.delay > 0:
            time.sleep(self.delay)

        try:
            response = self.session.get(target_url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            self.logger.error("Timeout fetching %s: %s", target_url, str(e))
            raise ScraperError(
                f"Scraping timeout: The page took too long to load. URL: {target_url}"
            ) from e
        except requests.exceptions.RequestException as e:
            self.logger.error("Error fetching %s: %s", target_url, str(e))
            raise ScraperError(f"Could not fetch {target_url}: {e}") from e

        return BeautifulSoup(response.text, "lxml")

    def extract_price(self, price_text: str, allow_decimal: bool = False) -> str:
        """Extract a price from text as a plain digit string.

        Args:
            price_text: String containing a price (e.g., "8,680,000 تومان")
            allow_decimal: Keep a decimal point (custom storefronts use one)

        Returns:
            The price without thousands separators, or "" when none is found
        """
        normalized = (price_text or "").translate(DIGITS)
        pattern = r"\d[\d.,٬]*" if allow_decimal else r"\d[\d,٬]*"
        match = re.search(pattern, normalized)
        if not match:
            if price_text and price_text.strip():
                self.logger.warning("Could not parse price: %s", price_text.strip())
            return ""

        price = match.group(0)
        for separator in THOUSANDS_SEPARATORS:
            price = price.replace(separator, "")
        return price.rstrip(".")

    def scrape(self) -> ScrapedProduct:
        """
        This should be implemented by subclasses to scrape specific storefronts.
        """
        raise NotImplementedError("WebScraperBase.scrape() must be implemented by subclasses")
