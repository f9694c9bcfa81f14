"""
Local persistence store for curation state.

Each slot (working set, published set, user mode, creator workflow, generated
image history) is a JSON value kept under a namespaced key in a pluggable
key-value backend. Mutations notify other views through the event bus.
Reads never raise: malformed data is logged and treated as absent.
"""

import json
import logging
import os
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from services.curation.event_bus import CurationEvent, EventBus
from utils.constants import (
    ADMIN_MODE,
    CREATOR_WORKFLOW_KEY,
    GENERATED_IMAGES_KEY,
    MODE_KEY,
    PUBLISHED_KEY,
    STORAGE_KEY,
    USER_MODES,
)
from utils.schema.curation_schema import (
    CreatorWorkflowData,
    GeneratedImageEntry,
    PublishedProduct,
    SavedProduct,
)

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_image_id() -> str:
    """<epoch millis>-<6 base36 chars>"""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{int(time.time() * 1000)}-{suffix}"


# ============================================================================
# BACKENDS
# ============================================================================

class StorageBackend:
    """Minimal string key-value interface, shaped like browser localStorage"""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class InMemoryStorage(StorageBackend):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items.keys())


class JsonFileStorage(StorageBackend):
    """All keys kept in a single JSON document on disk"""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            content = f.read()
        return json.loads(content) if content.strip() else {}

    def _dump(self, items: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(items, f)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._dump(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._dump(items)


# ============================================================================
# STORE
# ============================================================================

class CurationStore:
    """
    Named slots over a storage backend.

    With no backend (storage unavailable) every read returns its default and
    every write is a no-op.
    """

    def __init__(self, backend: Optional[StorageBackend] = None, event_bus: Optional[EventBus] = None):
        self.backend = backend
        self.event_bus = event_bus or EventBus()

    @property
    def available(self) -> bool:
        return self.backend is not None

    def _read_json(self, key: str, label: str) -> Any:
        try:
            stored = self.backend.get_item(key)
            return json.loads(stored) if stored else None
        except (ValueError, TypeError, OSError) as e:
            logger.error(f"Error reading {label}: {e}")
            return None

    def _read_list(self, key: str, model, label: str) -> List[Any]:
        if not self.available:
            return []
        raw = self._read_json(key, label)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.error(f"Error reading {label}: expected a list, got {type(raw).__name__}")
            return []
        items = []
        for index, item in enumerate(raw):
            try:
                items.append(model.model_validate(item))
            except ValidationError as e:
                logger.error(f"Skipping invalid record {index} in {label}: {e}")
        return items

    def _write_list(self, key: str, items: Iterable[Any]) -> None:
        self.backend.set_item(key, json.dumps([item.model_dump(exclude_none=True) for item in items]))

    def _notify(self, event: CurationEvent) -> None:
        self.event_bus.publish(event)

    # ------------------------------------------------------------------
    # Working set (saved products)
    # ------------------------------------------------------------------

    def get_saved_products(self) -> List[SavedProduct]:
        return self._read_list(STORAGE_KEY, SavedProduct, "saved products")

    def save_product(self, product: SavedProduct) -> None:
        """Insert or replace the entry with the same style code."""
        if not self.available:
            return

        try:
            saved = self.get_saved_products()
            for index, existing in enumerate(saved):
                if existing.styleCode == product.styleCode:
                    saved[index] = product
                    break
            else:
                saved.append(product)

            self._write_list(STORAGE_KEY, saved)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving product {product.styleCode}: {e}")
            return

        self._notify(CurationEvent.PRODUCTS_SAVED)

    def remove_product(self, style_code: str) -> None:
        if not self.available:
            return

        try:
            saved = [p for p in self.get_saved_products() if p.styleCode != style_code]
            self._write_list(STORAGE_KEY, saved)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error removing product {style_code}: {e}")
            return

        self._notify(CurationEvent.PRODUCTS_SAVED)

    def clear_all_products(self) -> None:
        if not self.available:
            return

        try:
            self.backend.remove_item(STORAGE_KEY)
        except OSError as e:
            logger.error(f"Error clearing products: {e}")
            return

        self._notify(CurationEvent.PRODUCTS_SAVED)

    # ------------------------------------------------------------------
    # Published set
    # ------------------------------------------------------------------

    def get_published_products(self) -> List[PublishedProduct]:
        return self._read_list(PUBLISHED_KEY, PublishedProduct, "published products")

    def publish_products(self, products: Iterable[SavedProduct]) -> None:
        """
        Merge products into the published set by style code.

        Entries for other style codes are kept; a style code already
        published is overwritten with the new colours and timestamp.
        """
        if not self.available:
            return

        try:
            published_at = utc_now_iso()
            merged = self.get_published_products()
            positions = {p.styleCode: index for index, p in enumerate(merged)}

            for product in products:
                entry = PublishedProduct(
                    **product.model_dump(exclude={"published", "publishedAt"}),
                    published=True,
                    publishedAt=published_at,
                )
                if entry.styleCode in positions:
                    merged[positions[entry.styleCode]] = entry
                else:
                    positions[entry.styleCode] = len(merged)
                    merged.append(entry)

            self._write_list(PUBLISHED_KEY, merged)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error publishing products: {e}")
            return

        self._notify(CurationEvent.PRODUCTS_PUBLISHED)

    def clear_published_products(self) -> None:
        if not self.available:
            return

        try:
            self.backend.remove_item(PUBLISHED_KEY)
        except OSError as e:
            logger.error(f"Error clearing published products: {e}")
            return

        self._notify(CurationEvent.PRODUCTS_PUBLISHED)

    # ------------------------------------------------------------------
    # User mode
    # ------------------------------------------------------------------

    def set_user_mode(self, mode: str) -> None:
        if not self.available:
            return
        if mode not in USER_MODES:
            raise ValueError(f"Unknown user mode: {mode}")

        try:
            self.backend.set_item(MODE_KEY, mode)
        except OSError as e:
            logger.error(f"Error setting user mode: {e}")
            return

        self._notify(CurationEvent.MODE_CHANGED)

    def get_user_mode(self) -> str:
        if not self.available:
            return ADMIN_MODE

        try:
            mode = self.backend.get_item(MODE_KEY)
        except OSError as e:
            logger.error(f"Error reading user mode: {e}")
            return ADMIN_MODE

        return mode if mode in USER_MODES else ADMIN_MODE

    # ------------------------------------------------------------------
    # Creator workflow
    # ------------------------------------------------------------------

    def save_creator_workflow(self, data: CreatorWorkflowData) -> None:
        """Overwrite the in-progress workflow. No notification is sent."""
        if not self.available:
            return

        try:
            self.backend.set_item(CREATOR_WORKFLOW_KEY, data.model_dump_json(exclude_none=True))
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving creator workflow: {e}")

    def get_creator_workflow(self) -> Optional[CreatorWorkflowData]:
        if not self.available:
            return None

        raw = self._read_json(CREATOR_WORKFLOW_KEY, "creator workflow")
        if raw is None:
            return None
        try:
            return CreatorWorkflowData.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Error reading creator workflow: {e}")
            return None

    def clear_creator_workflow(self) -> None:
        if not self.available:
            return

        try:
            self.backend.remove_item(CREATOR_WORKFLOW_KEY)
        except OSError as e:
            logger.error(f"Error clearing creator workflow: {e}")

    # ------------------------------------------------------------------
    # Generated image history
    # ------------------------------------------------------------------

    def get_generated_images(self) -> List[GeneratedImageEntry]:
        return self._read_list(GENERATED_IMAGES_KEY, GeneratedImageEntry, "generated images")

    def save_generated_image(self, entry: Dict[str, Any]) -> Optional[GeneratedImageEntry]:
        """
        Append a history record (newest first).

        Args:
            entry: record fields without id / createdAt

        Returns:
            The stored record, or None when storage is unavailable or the write failed
        """
        if not self.available:
            return None

        try:
            record = GeneratedImageEntry(
                id=new_image_id(),
                createdAt=utc_now_iso(),
                **entry
            )
            images = self.get_generated_images()
            images.insert(0, record)
            self._write_list(GENERATED_IMAGES_KEY, images)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving generated image: {e}")
            return None

        self._notify(CurationEvent.GENERATED_IMAGES_UPDATED)
        return record

    def clear_generated_images(self) -> None:
        if not self.available:
            return

        try:
            self.backend.remove_item(GENERATED_IMAGES_KEY)
        except OSError as e:
            logger.error(f"Error clearing generated images: {e}")
            return

        self._notify(CurationEvent.GENERATED_IMAGES_UPDATED)
