"""
Tests for batched image prefetching.
"""

import threading

from conftest import product
from services.curation.image_prefetch import ImagePrefetcher, primary_image
from utils.schema.catalog_schema import ProductImage


class RecordingFetcher:
    """Stands in for CatalogApiClient.fetch_product_images"""

    def __init__(self, empty=(), failing=()):
        self.calls = []
        self.empty = set(empty)
        self.failing = set(failing)
        self._lock = threading.Lock()

    def __call__(self, style_code):
        with self._lock:
            self.calls.append(style_code)
        if style_code in self.failing:
            raise RuntimeError("boom")
        if style_code in self.empty:
            return []
        return [ProductImage(styleCode=style_code, imageType="MAIN", urlThumbnail=f"https://img.test/{style_code}.jpg")]


def page_of(count, product_type="T-Shirts"):
    return [product(f"{5000 + i}", productType=product_type) for i in range(count)]


class TestPrefetchPage:

    def test_fetches_in_batches_with_pause_between(self):
        fetcher = RecordingFetcher()
        sleeps = []
        prefetcher = ImagePrefetcher(fetcher, sleep=sleeps.append)

        results = prefetcher.prefetch_page(page_of(7))

        assert len(results) == 7
        assert sorted(fetcher.calls) == [f"{5000 + i}" for i in range(7)]
        # 7 codes in batches of 3 -> 3 batches -> 2 pauses
        assert sleeps == [1.0, 1.0]

    def test_at_most_fifteen_per_call(self):
        fetcher = RecordingFetcher()
        prefetcher = ImagePrefetcher(fetcher, sleep=lambda s: None)

        prefetcher.prefetch_page(page_of(16))

        assert len(fetcher.calls) == 15

    def test_cached_codes_are_not_fetched_again(self):
        fetcher = RecordingFetcher()
        prefetcher = ImagePrefetcher(fetcher, sleep=lambda s: None)
        products = page_of(2)

        prefetcher.prefetch_page(products)
        assert prefetcher.prefetch_page(products) == {}

        assert len(fetcher.calls) == 2
        assert prefetcher.get_images("5000")[0].urlThumbnail == "https://img.test/5000.jpg"

    def test_in_flight_codes_are_skipped(self):
        fetcher = RecordingFetcher()
        prefetcher = ImagePrefetcher(fetcher, sleep=lambda s: None)
        prefetcher.in_flight.add("5000")

        prefetcher.prefetch_page(page_of(2))

        assert fetcher.calls == ["5001"]

    def test_empty_and_failed_results_are_retried_later(self):
        fetcher = RecordingFetcher(empty={"5000"}, failing={"5001"})
        prefetcher = ImagePrefetcher(fetcher, sleep=lambda s: None)

        results = prefetcher.prefetch_page(page_of(2))

        assert results == {"5000": [], "5001": []}
        assert prefetcher.cache == {}
        assert prefetcher.in_flight == set()

        prefetcher.prefetch_page(page_of(2))
        assert len(fetcher.calls) == 4

    def test_duplicate_codes_fetched_once(self):
        fetcher = RecordingFetcher()
        prefetcher = ImagePrefetcher(fetcher, sleep=lambda s: None)

        prefetcher.prefetch_page([product("5001"), product("5001")])

        assert fetcher.calls == ["5001"]


class TestCategoryRepresentatives:

    def test_one_product_per_category(self):
        fetcher = RecordingFetcher()
        sleeps = []
        prefetcher = ImagePrefetcher(fetcher, sleep=sleeps.append)
        products = [
            product("A1", productType="T-Shirts"),
            product("A2", productType="T-Shirts"),
            product("B1", productType="Bags"),
            product("C1", productType="Socks"),
            product("X1"),
        ]

        prefetcher.prefetch_category_representatives(products)

        assert sorted(fetcher.calls) == ["A1", "B1", "C1"]
        # 3 codes in batches of 2 -> one pause
        assert sleeps == [1.0]

    def test_at_most_ten_categories(self):
        fetcher = RecordingFetcher()
        prefetcher = ImagePrefetcher(fetcher, sleep=lambda s: None)
        products = [product(f"S{i}", productType=f"Type {i}") for i in range(12)]

        prefetcher.prefetch_category_representatives(products)

        assert len(fetcher.calls) == 10

    def test_category_with_cached_representative_is_skipped_in_favour_of_another(self):
        fetcher = RecordingFetcher()
        prefetcher = ImagePrefetcher(fetcher, sleep=lambda s: None)
        prefetcher.cache["A1"] = [ProductImage(imageType="MAIN")]

        prefetcher.prefetch_category_representatives([
            product("A1", productType="T-Shirts"),
            product("A2", productType="T-Shirts"),
        ])

        assert fetcher.calls == ["A2"]


class TestPrimaryImage:

    def test_prefers_main_then_front(self):
        images = [
            ProductImage(imageType="BACK", urlThumbnail="back"),
            ProductImage(imageType="FRONT", urlThumbnail="front"),
            ProductImage(imageType="MAIN", urlThumbnail="main"),
        ]
        assert primary_image(images).urlThumbnail == "main"
        assert primary_image(images[:2]).urlThumbnail == "front"

    def test_falls_back_to_first_with_thumbnail(self):
        images = [ProductImage(imageType="SIDE"), ProductImage(imageType="BACK", urlThumbnail="back")]
        assert primary_image(images).urlThumbnail == "back"
        assert primary_image(images[:1]).imageType == "SIDE"

    def test_no_images(self):
        assert primary_image([]) is None
