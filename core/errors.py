"""Exception hierarchy for scraping, feature mapping and platform upload errors."""

from typing import Any, Optional


class ProductPorterError(Exception):
    """Base exception for all product porter errors."""

    def __init__(self, message: str, *args, **kwargs):
        """Initialize error with message."""
        self.message = message
        super().__init__(message, *args, **kwargs)


class ScraperError(ProductPorterError):
    """Raised when a product page cannot be fetched or recognised."""
    pass


class MalformedMarkupError(ProductPorterError):
    """Raised when an HTML fragment cannot be parsed."""
    pass


class MappingPreconditionError(ProductPorterError):
    """Raised when a product payload is missing fields the mapper requires.

    This is a contract violation by the caller, not missing data.
    """
    pass


class PlatformConfigError(ProductPorterError):
    """Raised when WooCommerce or WordPress credentials are not configured."""
    pass


class PlatformAPIError(ProductPorterError):
    """Raised when the commerce platform answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def code(self) -> str:
        """Machine-readable error code from the platform body, if any."""
        if isinstance(self.payload, dict):
            return str(self.payload.get("code") or "")
        return ""

    @property
    def detail(self) -> str:
        """Human-readable error message from the platform body, if any."""
        if isinstance(self.payload, dict):
            return str(self.payload.get("message") or "")
        return ""


class ImageProcessingError(ProductPorterError):
    """Raised when a product image cannot be downloaded or uploaded."""
    pass
