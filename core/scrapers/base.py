# This file defines the abstract base class for all product page scrapers
# Every scraper turns one product URL into a ScrapedProduct

import abc
from core.models import ScrapedProduct


class BaseScraper(abc.ABC):
    """Base class for product page scrapers.

    Storefront families (WordPress/WooCommerce, custom-coded shops) differ in
    where they keep names, prices and feature lists, but all of them must
    hand the uploader the same ScrapedProduct shape. New storefront families
    are added by implementing this interface and registering the class with
    the ScraperFactory.
    """

    def __init__(self, name: str, url: str):
        """Initialize the scraper with a name and URL.

        Args:
            name: Identifier of the storefront family (e.g. "wordpress").
                  Used in logger names and in the CLI summary.
            url: The product page to scrape.
        """
        self.name = name
        self.url = url

    @abc.abstractmethod
    def scrape(self) -> ScrapedProduct:
        """Scrape the product page and return its data.

        All fields of the returned product are optional: a page without a
        sale price or a feature list yields empty values, not an error.

        Raises:
            ScraperError: if the page cannot be fetched.
        """
        raise NotImplementedError("Concrete scraper classes must implement scrape() method")
