"""Create scraped products on a WooCommerce store."""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from config.settings import Settings, get_settings
from core.errors import PlatformAPIError
from core.mapping.attributes import build_base_product, map_to_platform_product
from core.models import ScrapedProduct, TermRef
from core.platform.client import WooCommerceClient

SKU_CONFLICT_CODE = "product_invalid_sku"


class SubmissionState(str, Enum):
    BUILT = "built"
    SUBMITTED = "submitted"
    CONFLICT_DETECTED = "conflict_detected"
    RESUBMITTED = "resubmitted"
    ACCEPTED = "accepted"
    FAILED = "failed"


def without_sku(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``payload`` with the ``sku`` field removed."""
    return {key: value for key, value in payload.items() if key != "sku"}


def is_sku_conflict(error: PlatformAPIError) -> bool:
    """True for a 400 response rejecting the product's SKU."""
    if error.status_code != 400:
        return False
    return error.code == SKU_CONFLICT_CODE or "SKU" in error.detail


class ProductSubmission:
    """Create one product, retrying once without its SKU on a SKU conflict.

    ``history`` records every state the submission passed through, ending in
    ACCEPTED or FAILED.
    """

    def __init__(self, client: WooCommerceClient, payload: Dict[str, Any]):
        self.client = client
        self.payload = payload
        self.state = SubmissionState.BUILT
        self.history = [SubmissionState.BUILT]
        self.logger = logging.getLogger("platform.submission")

    def _transition(self, state: SubmissionState):
        self.logger.debug("Submission %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def submit(self) -> Dict[str, Any]:
        """POST the payload and return the created product.

        Raises:
            PlatformAPIError: the first error when the product could not be
                created, including when the retry without SKU also fails.
        """
        self._transition(SubmissionState.SUBMITTED)
        try:
            created = self.client.post("products", self.payload)
        except PlatformAPIError as first_error:
            if not (is_sku_conflict(first_error) and "sku" in self.payload):
                self._transition(SubmissionState.FAILED)
                raise

            self._transition(SubmissionState.CONFLICT_DETECTED)
            self.logger.warning("SKU conflict detected. Retrying without SKU...")
            self.payload = without_sku(self.payload)
            self._transition(SubmissionState.RESUBMITTED)
            try:
                created = self.client.post("products", self.payload)
            except PlatformAPIError as retry_error:
                self.logger.debug("Retry without SKU failed: %s", retry_error)
                self._transition(SubmissionState.FAILED)
                raise first_error from None
            self.logger.info("Product created successfully without SKU")

        if not isinstance(created, dict) or not created.get("id"):
            self._transition(SubmissionState.FAILED)
            raise PlatformAPIError("Invalid response from WooCommerce API", payload=created)

        self._transition(SubmissionState.ACCEPTED)
        return created


def describe_platform_error(error: PlatformAPIError) -> PlatformAPIError:
    """Re-word a platform error for humans, keeping its status and payload."""
    status = error.status_code
    if status in (401, 403):
        message = "WooCommerce authentication failed. Please check your API credentials."
    elif status == 400:
        message = f"Invalid product data: {error.detail or error.payload}"
    elif status == 404:
        message = "WooCommerce API endpoint not found. Check your site URL."
    elif status is None:
        message = error.message
    else:
        message = f"WooCommerce API error ({status}): {error.payload}"
    return PlatformAPIError(message, status_code=status, payload=error.payload)


def assemble_payload(
    scraped: ScrapedProduct,
    category_ids: Sequence[int],
    sku: Optional[str],
    settings: Settings,
) -> Dict[str, Any]:
    """Product payload with features mapped in; makes no API calls."""
    base = build_base_product(
        scraped,
        category_ids=category_ids,
        sku=sku,
        description_max_length=settings.DESCRIPTION_MAX_LENGTH,
        short_description_max_length=settings.SHORT_DESCRIPTION_MAX_LENGTH,
    )
    return map_to_platform_product(
        base, scraped.features, summary_limit=settings.FEATURE_SUMMARY_LIMIT
    )


class ProductUploader:
    """Build the product payload, create it, and merge its meta data."""

    def __init__(self, client: WooCommerceClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()
        self.logger = logging.getLogger("platform.uploader")

    def find_category_id(self, name: str) -> Optional[int]:
        """ID of the existing category called ``name``; categories are never created."""
        try:
            results = self.client.get("products/categories", {"search": name, "per_page": 100})
        except PlatformAPIError as e:
            self.logger.error("Error checking category %s: %s", name, e)
            return None

        for category in results if isinstance(results, list) else []:
            if isinstance(category, dict) and str(category.get("name", "")).lower() == name.lower():
                self.logger.info("Found existing category: %s (ID: %s)", name, category["id"])
                return category["id"]

        self.logger.info("Category not found (skipping): %s", name)
        return None

    def resolve_categories(self, categories: Sequence[TermRef]) -> List[int]:
        """Look up the first scraped category only."""
        if not categories:
            return []
        category_id = self.find_category_id(categories[0].name)
        return [category_id] if category_id else []

    def resolve_sku(self, sku: str) -> Optional[str]:
        """``sku`` unless another product already uses it."""
        if not sku:
            return None
        try:
            existing = self.client.get("products", {"sku": sku, "per_page": 1})
        except PlatformAPIError as e:
            self.logger.warning("Could not check SKU existence, adding anyway: %s", e)
            return sku

        if existing:
            self.logger.warning('SKU "%s" already exists. Skipping SKU to avoid duplicate.', sku)
            return None
        return sku

    def build_payload(self, scraped: ScrapedProduct) -> Dict[str, Any]:
        category_ids = self.resolve_categories(scraped.categories)
        sku = self.resolve_sku(scraped.sku)
        if not scraped.features:
            self.logger.warning("No features found in product data")
        return assemble_payload(scraped, category_ids, sku, self.settings)

    def update_product_meta(self, product_id: int, meta_data: List[Dict[str, Any]]) -> bool:
        """Merge ``meta_data`` into the product's current meta by key.

        Failures are logged and reported as False; the product already exists.
        """
        try:
            self.logger.info("Updating meta data for product %s...", product_id)
            current = self.client.get(f"products/{product_id}")
            if not isinstance(current, dict):
                raise PlatformAPIError("Unexpected product body from WooCommerce API", payload=current)
            merged = list(current.get("meta_data") or [])
            for entry in meta_data:
                index = next((i for i, m in enumerate(merged) if m.get("key") == entry["key"]), None)
                if index is None:
                    merged.append(entry)
                else:
                    merged[index] = entry
            self.client.put(f"products/{product_id}", {"meta_data": merged})
        except PlatformAPIError as e:
            self.logger.error("Error updating meta data: %s", e)
            return False

        self.logger.info("Meta data updated successfully for product %s", product_id)
        return True

    def upload(self, scraped: ScrapedProduct) -> int:
        """Create ``scraped`` as a draft product and return its ID.

        Raises:
            PlatformAPIError: with a human-readable message when the platform
                rejects the product.
        """
        payload = self.build_payload(scraped)
        self.logger.info(
            "Uploading product %r (price: %s, images: %d, categories: %d, sku: %s, features: %d)",
            payload["name"],
            payload.get("regular_price", "(not set)"),
            len(payload.get("images", [])),
            len(payload.get("categories", [])),
            payload.get("sku", "(not set)"),
            len(scraped.features),
        )

        submission = ProductSubmission(self.client, payload)
        try:
            created = submission.submit()
        except PlatformAPIError as e:
            raise describe_platform_error(e) from e

        product_id = created["id"]
        self.logger.info("Product successfully created with ID: %s", product_id)
        self.logger.info("Product URL: %s", created.get("permalink") or "N/A")

        if submission.payload.get("meta_data"):
            self.update_product_meta(product_id, submission.payload["meta_data"])
        return product_id
