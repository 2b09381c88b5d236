import logging
from typing import Any, Dict, Optional

import requests

from config.settings import Settings, get_settings
from core.errors import PlatformAPIError, PlatformConfigError


class WooCommerceClient:
    """Minimal WooCommerce REST API client.

    Authenticates with the consumer key/secret in the query string, which
    works on hosts that strip the Authorization header.
    """

    def __init__(
        self,
        url: str,
        consumer_key: str,
        consumer_secret: str,
        version: str = "wc/v3",
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        if not url or not consumer_key or not consumer_secret:
            raise PlatformConfigError(
                "Missing WooCommerce configuration. Please check your .env file."
            )
        self.base_url = f"{url.rstrip('/')}/wp-json/{version}"
        self.auth_params = {
            "consumer_key": consumer_key,
            "consumer_secret": consumer_secret,
        }
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logging.getLogger("platform.client")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "WooCommerceClient":
        settings = settings or get_settings()
        return cls(
            url=settings.WOOCOMMERCE_URL,
            consumer_key=settings.WOOCOMMERCE_CONSUMER_KEY,
            consumer_secret=settings.WOOCOMMERCE_CONSUMER_SECRET,
            version=settings.WOOCOMMERCE_API_VERSION,
            timeout=settings.REQUEST_TIMEOUT,
        )

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            PlatformAPIError: for any non-2xx response, carrying the status
                code and the decoded error body; for a network failure or a
                success body that is not JSON, with no status code.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        query = dict(self.auth_params)
        if params:
            query.update(params)

        self.logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, params=query, json=json, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.logger.error("%s %s failed: %s", method, url, e)
            raise PlatformAPIError(f"Network error talking to WooCommerce: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            if response.ok:
                raise PlatformAPIError(
                    f"Invalid JSON response from WooCommerce API ({response.status_code})",
                    payload=response.text,
                )
            payload = response.text

        if not response.ok:
            message = payload.get("message") if isinstance(payload, dict) else None
            raise PlatformAPIError(
                message or f"WooCommerce API error ({response.status_code})",
                status_code=response.status_code,
                payload=payload,
            )
        return payload

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, data: Dict[str, Any]) -> Any:
        return self.request("POST", endpoint, json=data)

    def put(self, endpoint: str, data: Dict[str, Any]) -> Any:
        return self.request("PUT", endpoint, json=data)
