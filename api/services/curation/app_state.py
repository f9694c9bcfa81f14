"""
Application state shared by the curation views.

Replaces the process-wide globals (mode flag, working set, published set)
with one explicit object built around an injected store. The object keeps
itself current by re-reading the store whenever a matching event fires.
"""

import logging
from typing import Callable, Iterable, List, Optional

from services.curation.event_bus import CurationEvent, EventBus
from services.curation.filter_engine import ProductFilterEngine
from services.curation.storage import CurationStore, utc_now_iso
from utils.constants import ADMIN_MODE, CREATOR_MODE
from utils.schema.catalog_schema import Product, ProductVariant
from utils.schema.curation_schema import PublishedProduct, SavedProduct

logger = logging.getLogger(__name__)


class AppState:

    def __init__(self, store: CurationStore, filter_engine: Optional[ProductFilterEngine] = None):
        self.store = store
        self.event_bus: EventBus = store.event_bus
        self.filter_engine = filter_engine or ProductFilterEngine()
        self.mode: str = ADMIN_MODE
        self.saved_products: List[SavedProduct] = []
        self.published_products: List[PublishedProduct] = []
        self._unsubscribers: List[Callable[[], None]] = [
            self.event_bus.subscribe(CurationEvent.MODE_CHANGED, self._on_mode_changed),
            self.event_bus.subscribe(CurationEvent.PRODUCTS_SAVED, self._on_products_saved),
            self.event_bus.subscribe(CurationEvent.PRODUCTS_PUBLISHED, self._on_products_published),
        ]
        self.reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Reload everything from the store and reset the filters."""
        self.saved_products = self.store.get_saved_products()
        self.published_products = self.store.get_published_products()
        self.filter_engine.clear_filters()
        self.filter_engine.set_published_style_codes(p.styleCode for p in self.published_products)
        self._apply_mode(self.store.get_user_mode())

    def refresh(self) -> None:
        """Re-read the store, e.g. when another tab wrote to it."""
        self._on_products_saved()
        self._on_products_published()
        self._on_mode_changed()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _apply_mode(self, mode: str) -> None:
        self.mode = mode
        self.filter_engine.set_mode(mode)

    def _on_mode_changed(self, *_):
        mode = self.store.get_user_mode()
        if mode != self.mode:
            self._apply_mode(mode)

    def _on_products_saved(self, *_):
        self.saved_products = self.store.get_saved_products()

    def _on_products_published(self, *_):
        self.published_products = self.store.get_published_products()
        self.filter_engine.set_published_style_codes(p.styleCode for p in self.published_products)

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    def toggle_mode(self) -> str:
        new_mode = self.filter_engine.toggle_mode()
        self.mode = new_mode
        self.store.set_user_mode(new_mode)
        return new_mode

    # ------------------------------------------------------------------
    # Admin working set
    # ------------------------------------------------------------------

    def save_selection(self, product: Product, colors: Iterable[str]) -> SavedProduct:
        """
        Save (or overwrite) the colours chosen for a product.

        Raises:
            ValueError: if no colour is selected
        """
        colors = list(dict.fromkeys(colors))
        if not colors:
            raise ValueError("Please select at least one color")

        saved = SavedProduct(
            styleCode=product.styleCode,
            styleName=product.styleName,
            productType=product.productType or "",
            selectedColors=colors,
            timestamp=utc_now_iso(),
        )
        self.store.save_product(saved)
        return saved

    def remove_selection(self, style_code: str) -> None:
        self.store.remove_product(style_code)

    def clear_selection(self) -> None:
        """Clear All: empties the working set and every filter."""
        self.store.clear_all_products()
        self.filter_engine.clear_filters()

    def publish_selection(self) -> int:
        """
        Publish the working set, then clear it.

        Returns:
            Number of products published

        Raises:
            ValueError: when nothing with colours is saved
        """
        saved = self.store.get_saved_products()
        total_colors = sum(len(p.selectedColors) for p in saved)
        if not saved or total_colors == 0:
            raise ValueError("No products selected. Select products and colors before publishing.")

        self.store.publish_products(saved)
        self.store.clear_all_products()
        logger.info(f"Published {len(saved)} product(s)")
        return len(saved)

    # ------------------------------------------------------------------
    # Colours
    # ------------------------------------------------------------------

    def published_entry(self, style_code: str) -> Optional[PublishedProduct]:
        for product in self.published_products:
            if product.styleCode == style_code:
                return product
        return None

    def available_colors(self, style_code: str, variants: Iterable[ProductVariant]) -> List[str]:
        """
        Colours offered on the product page.

        Admin sees every variant colour; creator only the colours published
        for the style (nothing when the style is not published).
        """
        variant_colors = sorted({v.colour for v in variants if v.colour})
        if self.mode != CREATOR_MODE:
            return variant_colors

        entry = self.published_entry(style_code)
        if entry is None:
            return []
        allowed = set(entry.selectedColors)
        return [colour for colour in variant_colors if colour in allowed]

    def creator_colors(self, style_code: str) -> List[str]:
        """Published colours for a style, in the order they were published."""
        entry = self.published_entry(style_code)
        return list(entry.selectedColors) if entry else []

    def initial_selected_colors(self, style_code: str) -> List[str]:
        """Pre-selection when opening a product: saved colours (admin) or the workflow's (creator)."""
        if self.mode == CREATOR_MODE:
            workflow = self.store.get_creator_workflow()
            if workflow and workflow.selectedProduct.styleCode == style_code:
                allowed = set(self.creator_colors(style_code))
                return [c for c in workflow.selectedColors if c in allowed]
            return []

        for product in self.saved_products:
            if product.styleCode == style_code:
                return list(product.selectedColors)
        return []
