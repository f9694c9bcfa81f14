"""
Filter/selection engine for the product grid.

Holds the multi-dimensional filter state and derives the visible, paginated
product list for the active mode:

- admin: full catalog, category ∩ collection ∩ weight ∩ search, gender last
- creator: published products only, gender category, category, search

Any change to a filter dimension or the mode puts the grid back on page 1.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from utils.constants import (
    ADMIN_MODE,
    ALL_GENDERS,
    CREATOR_MODE,
    GENDER_OPTIONS,
    ITEMS_PER_PAGE,
    PRODUCT_CATEGORIES,
    UNISEX,
    USER_MODES,
)
from utils.schema.catalog_schema import Product


def normalize_gender(gender: Optional[str]) -> str:
    """A product with no gender recorded counts as Unisex."""
    return gender if gender and gender.strip() else UNISEX


def matches_gender_selection(product: Product, gender: Optional[str]) -> bool:
    """
    Gender predicate.

    - None / "All": everything
    - "Unisex": Unisex products only
    - any other gender: that gender, plus Unisex products
    """
    if not gender or gender == ALL_GENDERS:
        return True

    product_gender = normalize_gender(product.gender)

    if gender == UNISEX:
        return product_gender == UNISEX

    if product_gender == UNISEX:
        return True

    return product_gender == gender


def matches_search(product: Product, query: str) -> bool:
    if not query:
        return True
    query = query.lower()
    return query in (product.styleName or "").lower() or query in product.styleCode.lower()


def category_counts(
    products: Iterable[Product],
    include_empty: bool = False,
    categories: Iterable[str] = PRODUCT_CATEGORIES
) -> Dict[str, int]:
    """
    Count products per known category, in display order.

    Categories with no products are left out unless include_empty is set.
    """
    counts: Dict[str, int] = {}
    for product in products:
        if product.productType:
            counts[product.productType] = counts.get(product.productType, 0) + 1

    return {
        name: counts.get(name, 0)
        for name in categories
        if include_empty or counts.get(name, 0) > 0
    }


@dataclass
class FilterState:
    categories: Set[str] = field(default_factory=set)
    collections: Set[str] = field(default_factory=set)
    weights: Set[str] = field(default_factory=set)
    gender: Optional[str] = None
    creator_gender_category: Optional[str] = None
    search: str = ""
    page: int = 1


class ProductFilterEngine:
    """Derives visible products from the catalog, the published set and filter state"""

    def __init__(
        self,
        products: Optional[Iterable[Product]] = None,
        published_style_codes: Optional[Iterable[str]] = None,
        mode: str = ADMIN_MODE,
        page_size: int = ITEMS_PER_PAGE
    ):
        if mode not in USER_MODES:
            raise ValueError(f"Unknown user mode: {mode}")
        self.products: List[Product] = list(products or [])
        self.published_style_codes: Set[str] = set(published_style_codes or [])
        self.mode = mode
        self.page_size = page_size
        self.state = FilterState()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_products(self, products: Iterable[Product]) -> None:
        self.products = list(products)

    def set_published_style_codes(self, style_codes: Iterable[str]) -> None:
        self.published_style_codes = set(style_codes)

    def _reset_page(self) -> None:
        self.state.page = 1

    def set_mode(self, mode: str) -> None:
        if mode not in USER_MODES:
            raise ValueError(f"Unknown user mode: {mode}")
        if mode != self.mode:
            self.mode = mode
            if mode == CREATOR_MODE:
                self.state.categories = set()
        self._reset_page()

    def toggle_mode(self) -> str:
        """Switch admin <-> creator and clear gender and category selections."""
        new_mode = CREATOR_MODE if self.mode == ADMIN_MODE else ADMIN_MODE
        self.state.creator_gender_category = None
        self.state.gender = None
        self.state.categories = set()
        self.set_mode(new_mode)
        return new_mode

    def toggle_category(self, category: str) -> None:
        self.state.categories ^= {category}
        self._reset_page()

    def set_categories(self, categories: Iterable[str]) -> None:
        self.state.categories = set(categories)
        self._reset_page()

    def toggle_collection(self, collection: str) -> None:
        self.state.collections ^= {collection}
        self._reset_page()

    def set_collections(self, collections: Iterable[str]) -> None:
        self.state.collections = set(collections)
        self._reset_page()

    def toggle_weight(self, weight: str) -> None:
        self.state.weights ^= {weight}
        self._reset_page()

    def set_weights(self, weights: Iterable[str]) -> None:
        self.state.weights = set(weights)
        self._reset_page()

    def set_gender(self, gender: Optional[str]) -> None:
        """Admin-mode exclusive gender filter; None or "All" means no filter."""
        self.state.gender = None if gender == ALL_GENDERS else gender
        self._reset_page()

    def set_creator_gender_category(self, gender: Optional[str]) -> None:
        """Creator-mode gender category; changing it clears the category selection."""
        self.state.creator_gender_category = None if gender == ALL_GENDERS else gender
        if self.mode == CREATOR_MODE:
            self.state.categories = set()
        self._reset_page()

    def set_search(self, query: str) -> None:
        self.state.search = query or ""
        self._reset_page()

    def clear_filters(self) -> None:
        self.state = FilterState()

    def set_page(self, page: int) -> int:
        """Move to a page, clamped to the available range. Returns the page selected."""
        self.state.page = min(max(int(page), 1), max(self.total_pages(), 1))
        return self.state.page

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def published_products(self) -> List[Product]:
        return [p for p in self.products if p.styleCode in self.published_style_codes]

    def category_products(self) -> List[Product]:
        """Products the category options are computed from for the active mode."""
        if self.mode == ADMIN_MODE:
            return [p for p in self.products if matches_gender_selection(p, self.state.gender)]

        source = self.published_products()
        if self.state.creator_gender_category:
            source = [p for p in source if matches_gender_selection(p, self.state.creator_gender_category)]
        return source

    def prune_stale_categories(self) -> Set[str]:
        """
        Drop selected categories that no visible product belongs to any more.

        Returns:
            The categories that were removed
        """
        if not self.state.categories:
            return set()

        available = {p.productType for p in self.category_products() if p.productType}
        stale = self.state.categories - available
        if stale:
            self.state.categories = self.state.categories - stale
            self._reset_page()
        return stale

    def _admin_products_without_gender(self) -> List[Product]:
        state = self.state
        filtered = self.products

        if state.categories:
            filtered = [p for p in filtered if p.productType and p.productType in state.categories]

        if state.collections:
            filtered = [p for p in filtered if p.coreRange and p.coreRange in state.collections]

        if state.weights:
            filtered = [p for p in filtered if p.productWeight and p.productWeight in state.weights]

        if state.search:
            filtered = [p for p in filtered if matches_search(p, state.search)]

        return filtered

    def _creator_products(self) -> List[Product]:
        state = self.state
        filtered = self.published_products()

        if state.creator_gender_category:
            filtered = [p for p in filtered if matches_gender_selection(p, state.creator_gender_category)]

        if state.categories:
            filtered = [p for p in filtered if p.productType and p.productType in state.categories]

        if state.search:
            filtered = [p for p in filtered if matches_search(p, state.search)]

        return filtered

    def filtered_products(self) -> List[Product]:
        self.prune_stale_categories()

        if self.mode == CREATOR_MODE:
            return self._creator_products()

        return [
            p for p in self._admin_products_without_gender()
            if matches_gender_selection(p, self.state.gender)
        ]

    def total_pages(self) -> int:
        return math.ceil(len(self.filtered_products()) / self.page_size)

    def paginated_products(self) -> List[Product]:
        filtered = self.filtered_products()
        start = (self.state.page - 1) * self.page_size
        return filtered[start:start + self.page_size]

    def category_counts(self, include_empty: bool = False) -> Dict[str, int]:
        return category_counts(self.category_products(), include_empty=include_empty)

    def creator_gender_stats(self) -> List[Dict[str, object]]:
        """[{gender, count}] for "All" and each gender option over the published set."""
        published = self.published_products()
        stats = [{"gender": ALL_GENDERS, "count": len(published)}]
        for gender in GENDER_OPTIONS:
            count = sum(1 for p in published if matches_gender_selection(p, gender))
            stats.append({"gender": gender, "count": count})
        return stats

    def collections(self) -> List[str]:
        return sorted({p.coreRange for p in self.products if p.coreRange})
