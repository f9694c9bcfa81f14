"""
Client for the curation proxy (/api/*).

Every request goes through fetch_with_retry, which retries rate-limited (429)
responses and network failures with exponential backoff. List endpoints
degrade to an empty list on failure; product details propagate the error.
"""

import logging
import time
import requests
from typing import Any, Callable, Dict, Iterable, List, Optional
from urllib.parse import quote

from core.config import DEFAULT_API_BASE_URL
from utils.constants import MAX_RETRIES
from utils.exceptions import ApiClientError
from utils.schema.catalog_schema import (
    ApiEnvelope,
    Colour,
    InventoryItem,
    Product,
    ProductImage,
    ProductVariant,
)

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def _encode_segment(value: str) -> str:
    return quote(str(value), safe="!*'()")


def build_colour_map(colours: Iterable[Colour]) -> Dict[str, Colour]:
    """Uppercase colour name -> colour (hex, optional hex2 for two-tone swatches)."""
    colour_map = {}
    for colour in colours:
        if colour.colour and colour.hex:
            colour_map[colour.colour.upper()] = colour
    return colour_map


class CatalogApiClient:
    """
    Typed wrappers around the proxy endpoints.

    Args:
        base_url: proxy base URL; trailing slash is stripped
        session: requests session used as the transport
        sleep: called with seconds to wait between retries
        max_retries: total attempts per request
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: int = MAX_RETRIES,
        timeout: Optional[float] = None
    ):
        self.base_url = (base_url or DEFAULT_API_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.sleep = sleep
        self.max_retries = max_retries
        self.timeout = timeout

    @classmethod
    def from_settings(cls, config=None, **kwargs) -> "CatalogApiClient":
        if config is None:
            from core.config import settings as config
        return cls(base_url=config.API_BASE_URL, **kwargs)

    def resolve_api_url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    @staticmethod
    def _retry_after_seconds(response: requests.Response) -> Optional[float]:
        retry_after = response.headers.get("Retry-After")
        if not retry_after:
            return None
        try:
            return float(int(float(retry_after.strip())))
        except (ValueError, OverflowError):
            return None

    def fetch_with_retry(self, path: str, method: str = "GET", **kwargs) -> requests.Response:
        """
        Issue a request, retrying 429s and network failures.

        Non-429 error statuses are returned as-is; callers inspect `response.ok`.

        Raises:
            requests.exceptions.RequestException: the last network error once retries are exhausted
            ApiClientError: when every attempt was rate limited
        """
        url = self.resolve_api_url(path)
        if self.timeout is not None:
            kwargs.setdefault("timeout", self.timeout)
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                response = self.session.request(method, url, **kwargs)
            except requests.exceptions.RequestException as e:
                last_error = e
                logger.warning(f"Request to {path} failed (attempt {attempt + 1}/{self.max_retries}): {e}")
                if attempt < self.max_retries - 1:
                    self.sleep(2 ** attempt)
                continue

            if response.status_code == 429:
                retry_after = self._retry_after_seconds(response)
                wait_time = retry_after if retry_after is not None else 2 ** attempt
                logger.info(
                    f"Rate limited. Waiting {wait_time * 1000:.0f}ms before retry {attempt + 1}/{self.max_retries}"
                )
                self.sleep(wait_time)
                continue

            return response

        if last_error is not None:
            raise last_error
        raise ApiClientError("Failed to fetch after retries", status=429)

    def _get_json(self, path: str) -> Any:
        response = self.fetch_with_retry(path, headers=JSON_HEADERS)
        if not response.ok:
            raise ApiClientError(
                f"API error: {response.status_code} {response.reason}",
                status=response.status_code
            )
        return response.json()

    def _get_list(self, path: str, model, label: str) -> List[Any]:
        """GET an enveloped list; any failure is logged and yields []."""
        try:
            envelope = ApiEnvelope.model_validate(self._get_json(path))
            items = envelope.data or []
            if not isinstance(items, list):
                raise ApiClientError(f"Expected a list in data, got {type(items).__name__}")
            return [model.model_validate(item) for item in items]
        except (requests.exceptions.RequestException, ApiClientError, ValueError) as e:
            logger.error(f"Error fetching {label}: {e}")
            return []

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def fetch_products(self) -> List[Product]:
        return self._get_list("/api/products", Product, "products")

    def fetch_product_images(self, style_code: str) -> List[ProductImage]:
        return self._get_list(
            f"/api/products/{_encode_segment(style_code)}/images",
            ProductImage,
            f"images for {style_code}"
        )

    def fetch_product_variants(self, style_code: str) -> List[ProductVariant]:
        return self._get_list(
            f"/api/products/{_encode_segment(style_code)}/variants",
            ProductVariant,
            f"variants for {style_code}"
        )

    def fetch_colours(self) -> List[Colour]:
        return self._get_list("/api/colours", Colour, "colours")

    def fetch_inventory_items(self, sku_filter: str) -> List[InventoryItem]:
        return self._get_list(
            f"/api/inventory/items?skuFilter={_encode_segment(sku_filter)}",
            InventoryItem,
            f"inventory items for {sku_filter}"
        )

    def fetch_product_details(self, style_code: str) -> Optional[Product]:
        """
        Product detail; the proxy returns the product itself, not an envelope.

        Returns:
            The product, or None when the payload carries no styleCode

        Raises:
            ApiClientError: on HTTP failure or an error field in the payload
            requests.exceptions.RequestException: when retries are exhausted
        """
        try:
            result = self._get_json(f"/api/products/{_encode_segment(style_code)}")
        except (requests.exceptions.RequestException, ApiClientError) as e:
            logger.error(f"Error fetching product details for {style_code}: {e}")
            raise

        if isinstance(result, dict) and result.get("error"):
            logger.error(f"Error fetching product details for {style_code}: {result['error']}")
            raise ApiClientError(str(result["error"]))

        if not isinstance(result, dict) or not result.get("styleCode"):
            return None
        return Product.model_validate(result)

    def get_product_sizes(self, style_code: str, color: Optional[str] = None) -> List[str]:
        """
        Sizes in stock for a style, optionally narrowed to one colour.

        Uses the SKU wildcard "5001-WHITE" or "5001-*".
        """
        sku_filter = f"{style_code}-{color}" if color else f"{style_code}-*"
        items = self.fetch_inventory_items(sku_filter)
        return sorted({item.size for item in items if item.size})

    # ------------------------------------------------------------------
    # Image generation
    # ------------------------------------------------------------------

    def generate_image(
        self,
        prompt: str,
        user_prompt: str,
        costume_image: bytes,
        selected_colors: Optional[List[str]] = None,
        head_image: Optional[bytes] = None,
        logo_image: Optional[bytes] = None,
        image_type: Optional[str] = None
    ) -> requests.Response:
        """POST the composite request as multipart; the caller interprets the response."""
        data: List[tuple] = [("prompt", prompt), ("user_prompt", user_prompt)]
        if image_type:
            data.append(("image_type", image_type))
        for color in selected_colors or []:
            data.append(("selectedColors", color))

        files = [("costume_image", ("costume_image.jpg", costume_image, "image/jpeg"))]
        if head_image is not None:
            files.append(("head_image", ("head_image.jpg", head_image, "image/jpeg")))
        if logo_image is not None:
            files.append(("logo_image", ("logo_image.jpg", logo_image, "image/jpeg")))

        return self.fetch_with_retry("/api/generate-image", method="POST", data=data, files=files)
