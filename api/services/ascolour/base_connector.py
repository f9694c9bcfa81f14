import logging
import requests
from typing import Any, Dict, Optional
from urllib.parse import quote

from core.config import Settings, settings as default_settings
from utils.exceptions import AsColourAPIError

logger = logging.getLogger(__name__)


class AsColourConnector:
    """Base connector handling REST communication with the AS Colour catalog API"""

    def __init__(self, config: Optional[Settings] = None, session: Optional[requests.Session] = None):
        config = config or default_settings
        self.base_url = config.ascolour_base_url
        self.timeout = config.UPSTREAM_TIMEOUT
        self.headers = config.get_ascolour_headers()
        self.session = session or requests.Session()

    def execute_request(self, path: str, method: str = "GET", **kwargs) -> Any:
        """
        Call the AS Colour API and return the decoded body.

        JSON bodies are decoded, anything else comes back as text.

        Raises:
            AsColourAPIError: on a non-2xx status or a transport failure
        """
        url = f"{self.base_url}{path}"
        headers = {**self.headers, **kwargs.pop("headers", {})}

        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                timeout=self.timeout,
                **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise AsColourAPIError(f"AS Colour API request failed: {str(e)}") from e

        if not response.ok:
            raise AsColourAPIError(
                f"AS Colour API error: {response.status_code} {response.reason}",
                status=response.status_code,
                details=response.text or "",
            )

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError as e:
                raise AsColourAPIError(
                    f"AS Colour API returned invalid JSON: {str(e)}",
                    details=response.text or "",
                ) from e
        return response.text

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_products(self) -> Any:
        return self.execute_request("/catalog/products/")

    def get_product(self, style_code: str) -> Any:
        return self.execute_request(f"/catalog/products/{quote(style_code, safe='')}")

    def get_product_variants(self, style_code: str) -> Any:
        return self.execute_request(f"/catalog/products/{quote(style_code, safe='')}/variants")

    def get_product_images(self, style_code: str) -> Any:
        return self.execute_request(f"/catalog/products/{quote(style_code, safe='')}/images")

    def get_colours(self) -> Any:
        return self.execute_request("/catalog/colours")

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def get_inventory_items(self, sku_filter: str) -> Dict[str, Any]:
        """Inventory lookup by SKU wildcard (STYLE-COLOR or STYLE-*), wrapped for the client."""
        encoded = quote(str(sku_filter), safe="!*'()")
        data = self.execute_request(f"/inventory/items/?skuFilter={encoded}")
        return {"data": data, "success": True}
