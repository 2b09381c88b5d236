from typing import Dict, Type
from core.models import ScrapedProduct
from core.scrapers.product_page import ProductPageScraper
from core.scrapers.site_detector import CUSTOM, WORDPRESS, detect_site_type
from core.scrapers.web_scraper_base import WebScraperBase
from core.scrapers.websites.custom_scraper import CustomSiteScraper
from core.scrapers.websites.wordpress_scraper import WordPressScraper


class ScraperFactory:
    """Factory for creating the right scraper for a storefront family.

    The page is fetched once; its markup decides between the WordPress and
    the custom-site scraper, which then reuses the parsed page.
    """

    # Map of site types to scraper classes
    SCRAPERS: Dict[str, Type[ProductPageScraper]] = {
        WORDPRESS: WordPressScraper,
        CUSTOM: CustomSiteScraper,
    }

    @classmethod
    def create_scraper(cls, site_type: str, url: str, **kwargs) -> ProductPageScraper:
        """Create and return a scraper for the specified site type.

        Args:
            site_type: Key of SCRAPERS; unknown types get the custom scraper
            url: Product page URL
            **kwargs: Passed to the scraper (base_url, soup, session, pipeline)
        """
        scraper_class = cls.SCRAPERS.get(site_type, CustomSiteScraper)
        return scraper_class(url, **kwargs)

    @classmethod
    def for_url(cls, url: str, base_url: str = "") -> ProductPageScraper:
        """Fetch ``url``, detect its storefront family and build its scraper.

        Raises:
            ScraperError: if the page cannot be fetched.
        """
        fetcher = WebScraperBase("fetch", url)
        soup = fetcher.get_page()
        site_type = detect_site_type(soup)
        return cls.create_scraper(
            site_type, url, base_url=base_url, soup=soup, session=fetcher.session
        )


def scrape_product(url: str, base_url: str = "") -> ScrapedProduct:
    """Scrape one product page of either storefront family."""
    return ScraperFactory.for_url(url, base_url).scrape()
