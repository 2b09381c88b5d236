"""Turn scraped product data into a WooCommerce product payload."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from core.errors import MappingPreconditionError
from core.features.vocabulary import FEATURES_LABEL
from core.models import ScrapedProduct

logger = logging.getLogger("mapping.attributes")

PRODUCT_TYPE = "simple"
PRODUCT_STATUS = "draft"
DEFAULT_NAME = "Untitled Product"

FEATURES_META_KEY = "dina_product_features"
# A short description containing this already lists the features
FEATURES_MARKER = "ویژگی"
SUMMARY_SEPARATOR = "، "
DEFAULT_SUMMARY_LIMIT = 5


def escape_feature(feature: str) -> str:
    return feature.replace("<", "&lt;").replace(">", "&gt;")


def build_feature_attribute(features: Sequence[str]) -> Dict[str, Any]:
    """One custom attribute carrying every feature as an option."""
    return {
        "name": FEATURES_LABEL,
        "options": list(features),
        "visible": True,
        "variation": False,
    }


def build_feature_meta(features: Sequence[str]) -> Dict[str, Any]:
    return {
        "key": FEATURES_META_KEY,
        "value": [{"ftitle": feature, "fdesc": ""} for feature in features],
    }


def render_features_html(features: Sequence[str]) -> str:
    items = "".join(f"<li>{escape_feature(feature)}</li>" for feature in features)
    return f"<h3>{FEATURES_LABEL}:</h3><ul>{items}</ul>"


def map_to_platform_product(
    base: Dict[str, Any],
    features: Sequence[str],
    summary_limit: int = DEFAULT_SUMMARY_LIMIT,
) -> Dict[str, Any]:
    """Attach ``features`` to a product payload.

    Returns ``base`` itself when there are no features. Otherwise returns a
    new payload with the features as an attribute, as meta data, as an HTML
    list ahead of the description and, unless the short description already
    mentions them, as a summary of the first ``summary_limit`` features.

    Raises:
        MappingPreconditionError: if ``base`` has no product name.
    """
    if not base.get("name"):
        raise MappingPreconditionError("Product payload has no name; the scraper output is broken")

    if not features:
        return base

    features = list(features)
    product = dict(base)

    product["attributes"] = list(base.get("attributes") or []) + [build_feature_attribute(features)]
    product["meta_data"] = list(base.get("meta_data") or []) + [build_feature_meta(features)]

    features_html = render_features_html(features)
    description = base.get("description") or ""
    product["description"] = f"{features_html}<br><br>{description}" if description else features_html

    short_description = base.get("short_description") or ""
    if FEATURES_MARKER not in short_description:
        summary = SUMMARY_SEPARATOR.join(features[:summary_limit])
        product["short_description"] = (
            f"{summary} - {short_description}" if short_description else summary
        )

    logger.debug("Mapped %d features onto product %r", len(features), product["name"])
    return product


def build_base_product(
    scraped: ScrapedProduct,
    category_ids: Optional[List[int]] = None,
    sku: Optional[str] = None,
    description_max_length: int = 700,
    short_description_max_length: int = 200,
) -> Dict[str, Any]:
    """Map scraped fields onto a draft simple product.

    Empty fields are left out rather than sent as empty strings. Descriptions
    over the length limits are dropped.
    """
    product: Dict[str, Any] = {
        "name": scraped.name or DEFAULT_NAME,
        "type": PRODUCT_TYPE,
        "status": PRODUCT_STATUS,
    }

    if scraped.regular_price and scraped.regular_price != "0":
        product["regular_price"] = scraped.regular_price

    if scraped.description:
        if len(scraped.description) > description_max_length:
            logger.warning("Description is too long (%d chars), leaving it out", len(scraped.description))
        else:
            product["description"] = scraped.description

    if scraped.short_description:
        if len(scraped.short_description) > short_description_max_length:
            logger.warning(
                "Short description is too long (%d chars), leaving it out",
                len(scraped.short_description),
            )
        else:
            product["short_description"] = scraped.short_description

    if sku:
        product["sku"] = sku

    if scraped.images:
        product["images"] = [{"src": image.src} for image in scraped.images]

    if category_ids:
        product["categories"] = [{"id": category_id} for category_id in category_ids]

    if scraped.sale_price:
        product["sale_price"] = scraped.sale_price

    return product
