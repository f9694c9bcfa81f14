"""
Lazy product image loading with a session cache.

Fetches run in small batches with a fixed pause between batches to stay
under upstream rate limits. Style codes already cached or in flight are
never requested twice.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from utils.constants import (
    CATEGORY_IMAGE_BATCH_SIZE,
    CATEGORY_IMAGE_FETCH_LIMIT,
    DELAY_BETWEEN_BATCHES,
    PAGE_IMAGE_BATCH_SIZE,
    PAGE_IMAGE_FETCH_LIMIT,
    PRIMARY_IMAGE_TYPES,
)
from utils.schema.catalog_schema import Product, ProductImage

logger = logging.getLogger(__name__)


def primary_image(images: Sequence[ProductImage]) -> Optional[ProductImage]:
    """MAIN, then FRONT, then the first image with a thumbnail, then the first image."""
    for image_type in PRIMARY_IMAGE_TYPES:
        for image in images:
            if image.imageType == image_type:
                return image
    for image in images:
        if image.urlThumbnail:
            return image
    return images[0] if images else None


class ImagePrefetcher:
    """
    Args:
        fetch_images: style code -> images (e.g. CatalogApiClient.fetch_product_images)
        sleep: called with the delay between batches
        delay_between_batches: seconds to pause between batches
    """

    def __init__(
        self,
        fetch_images: Callable[[str], List[ProductImage]],
        sleep: Callable[[float], None] = time.sleep,
        delay_between_batches: float = DELAY_BETWEEN_BATCHES
    ):
        self.fetch_images = fetch_images
        self.sleep = sleep
        self.delay_between_batches = delay_between_batches
        self.cache: Dict[str, List[ProductImage]] = {}
        self.in_flight: set = set()
        self._lock = threading.Lock()

    def get_images(self, style_code: str) -> List[ProductImage]:
        return self.cache.get(style_code, [])

    def _claim(self, style_codes: Iterable[str], limit: int) -> List[str]:
        """Reserve up to `limit` codes that are neither cached nor in flight."""
        with self._lock:
            claimed = []
            for code in style_codes:
                if len(claimed) >= limit:
                    break
                if code in self.cache or code in self.in_flight or code in claimed:
                    continue
                claimed.append(code)
            self.in_flight.update(claimed)
            return claimed

    def _fetch_one(self, style_code: str) -> List[ProductImage]:
        try:
            images = self.fetch_images(style_code)
            logger.info(f"Fetched {len(images)} images for {style_code}")
            return images
        except Exception as e:
            logger.error(f"Error fetching images for {style_code}: {e}")
            return []

    def _fetch_in_batches(self, style_codes: List[str], batch_size: int) -> Dict[str, List[ProductImage]]:
        results: Dict[str, List[ProductImage]] = {}
        try:
            with ThreadPoolExecutor(max_workers=batch_size) as executor:
                for start in range(0, len(style_codes), batch_size):
                    batch = style_codes[start:start + batch_size]
                    for code, images in zip(batch, executor.map(self._fetch_one, batch)):
                        results[code] = images

                    if start + batch_size < len(style_codes):
                        self.sleep(self.delay_between_batches)

            with self._lock:
                for code, images in results.items():
                    if images:
                        self.cache[code] = images
        finally:
            with self._lock:
                self.in_flight.difference_update(style_codes)

        return results

    def prefetch_page(self, products: Sequence[Product]) -> Dict[str, List[ProductImage]]:
        """Load images for the products on the current page only."""
        style_codes = self._claim((p.styleCode for p in products), PAGE_IMAGE_FETCH_LIMIT)
        if not style_codes:
            return {}
        return self._fetch_in_batches(style_codes, PAGE_IMAGE_BATCH_SIZE)

    def prefetch_category_representatives(self, products: Sequence[Product]) -> Dict[str, List[ProductImage]]:
        """Load one product's images per category, for category cards."""
        representatives: Dict[str, str] = {}
        with self._lock:
            for product in products:
                if not product.productType or product.productType in representatives:
                    continue
                if product.styleCode in self.cache or product.styleCode in self.in_flight:
                    continue
                representatives[product.productType] = product.styleCode

        style_codes = self._claim(representatives.values(), CATEGORY_IMAGE_FETCH_LIMIT)
        if not style_codes:
            return {}
        return self._fetch_in_batches(style_codes, CATEGORY_IMAGE_BATCH_SIZE)
