"""
Curation Client Module
Catalog browsing, selection, publishing and creator-mode image generation
on top of the curation proxy
"""

from .api_client import CatalogApiClient, build_colour_map
from .app_state import AppState
from .creator_workflow import CreatorWorkflow, parse_generation_response
from .event_bus import CurationEvent, EventBus
from .filter_engine import (
    ProductFilterEngine,
    category_counts,
    matches_gender_selection,
    normalize_gender,
)
from .image_prefetch import ImagePrefetcher, primary_image
from .storage import CurationStore, InMemoryStorage, JsonFileStorage, StorageBackend

__all__ = [
    # Client
    "CatalogApiClient",
    "build_colour_map",
    # State
    "AppState",
    "CurationStore",
    "StorageBackend",
    "InMemoryStorage",
    "JsonFileStorage",
    "EventBus",
    "CurationEvent",
    # Filtering
    "ProductFilterEngine",
    "category_counts",
    "matches_gender_selection",
    "normalize_gender",
    # Images
    "ImagePrefetcher",
    "primary_image",
    "CreatorWorkflow",
    "parse_generation_response",
]
