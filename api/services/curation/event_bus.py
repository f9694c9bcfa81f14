"""
Same-process publish/subscribe channel used to tell open views that a
storage slot changed. Consumers re-read the matching slot on receipt.
"""

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class CurationEvent(str, Enum):
    MODE_CHANGED = "modeChanged"
    PRODUCTS_SAVED = "productsSaved"
    PRODUCTS_PUBLISHED = "productsPublished"
    GENERATED_IMAGES_UPDATED = "generatedImagesUpdated"


Handler = Callable[[CurationEvent, Any], None]


class EventBus:
    """Publish/subscribe channel scoped to the application's lifetime"""

    def __init__(self):
        self._handlers: Dict[CurationEvent, List[Handler]] = defaultdict(list)

    def subscribe(self, event: CurationEvent, handler: Handler) -> Callable[[], None]:
        """
        Register a handler for an event.

        Returns:
            A callable that removes the handler again
        """
        event = CurationEvent(event)
        self._handlers[event].append(handler)

        def unsubscribe():
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def publish(self, event: CurationEvent, payload: Any = None) -> None:
        event = CurationEvent(event)
        # Copy so handlers may unsubscribe while being notified
        for handler in list(self._handlers[event]):
            try:
                handler(event, payload)
            except Exception as e:
                logger.error(f"Handler for {event.value} failed: {e}", exc_info=True)

    def subscriber_count(self, event: CurationEvent) -> int:
        return len(self._handlers[CurationEvent(event)])
