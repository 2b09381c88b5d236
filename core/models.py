from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class FeatureSource(str, Enum):
    """Which extraction strategy produced a feature list."""

    DEDICATED_LIST = "dedicated-list"
    LABELED_TEXT_PATTERN = "labeled-text-pattern"
    DESCRIPTION_LIST_MARKUP = "description-list-markup"
    FEATURES_CONTAINER = "features-container"
    SHORT_DESCRIPTION_TEXT = "short-description-text"
    DESCRIPTION_LIST_FALLBACK = "description-list-fallback"


class PageExtract(BaseModel):
    """Text and markup scraped from one product page.

    Every field may be empty; the feature pipeline treats absence as a miss.
    """

    name: str = ""
    description_html: str = ""
    short_description_text: str = ""
    short_description_html: str = ""
    visible_text: str = Field(
        default="", description="Rendered text of the scoped product region"
    )

    model_config = ConfigDict(frozen=True)


class ImageRef(BaseModel):
    src: str


class TermRef(BaseModel):
    """A category or tag by display name."""

    name: str


class ScrapedProduct(BaseModel):
    """Everything a page scraper collected for one product."""

    name: str = ""
    regular_price: str = ""
    sale_price: str = ""
    sku: str = ""
    description: str = ""
    short_description: str = ""
    images: List[ImageRef] = Field(default_factory=list)
    categories: List[TermRef] = Field(default_factory=list)
    tags: List[TermRef] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    feature_source: Optional[FeatureSource] = None
    url: Optional[str] = None
