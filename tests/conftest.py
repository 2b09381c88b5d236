"""Shared fixtures for the product porter test suite."""
import pytest
from bs4 import BeautifulSoup
from unittest.mock import MagicMock

from config.settings import Settings
from core.models import ImageRef, ScrapedProduct, TermRef


@pytest.fixture
def make_soup():
    """Parse an HTML string the way page scrapers do."""
    def _make(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")
    return _make


@pytest.fixture
def settings():
    """Settings with test credentials, independent of the local .env."""
    s = Settings()
    s.WOOCOMMERCE_URL = "https://shop.example.com"
    s.WOOCOMMERCE_CONSUMER_KEY = "ck_test"
    s.WOOCOMMERCE_CONSUMER_SECRET = "cs_test"
    s.WP_API_USER = "editor"
    s.WP_API_APP_PASSWORD = "app pass word"
    s.FEATURE_SUMMARY_LIMIT = 5
    s.DESCRIPTION_MAX_LENGTH = 700
    s.SHORT_DESCRIPTION_MAX_LENGTH = 200
    return s


@pytest.fixture
def mock_client():
    """Stand-in for WooCommerceClient with get/post/put mocks."""
    client = MagicMock()
    client.get.return_value = []
    return client


@pytest.fixture
def scraped_product():
    return ScrapedProduct(
        name="ماشین اصلاح مدل X",
        regular_price="8680000",
        sale_price="7990000",
        sku="RX-100",
        description="<p>Quality trimmer</p>",
        short_description="Compact trimmer",
        images=[ImageRef(src="https://store.example.com/wp-content/uploads/x.jpg")],
        categories=[TermRef(name="ماشین اصلاح"), TermRef(name="آرایشی")],
        tags=[TermRef(name="trimmer")],
        features=["Battery 2000mAh", "Weight 150g"],
        url="https://store.example.com/product/x",
    )
