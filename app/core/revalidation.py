"""
View invalidation.

Services publish a ViewInvalidated event after every mutation that changes
visible state. The presentation layer subscribes to the bus and drops any
rendered output cached for the affected path, so the next request re-fetches.
"""
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, List, Optional, Tuple

from app.core.config import settings

logger = logging.getLogger(__name__)

FEED_PATH = "/"

def post_path(post_id: str) -> str:
    return f"/post/{post_id}"

@dataclass(frozen=True)
class ViewInvalidated:
    path: str

class InvalidationBus:
    """Fan-out of invalidation events to registered consumers"""

    def __init__(self):
        self._subscribers: List[Callable[[ViewInvalidated], None]] = []

    def subscribe(self, callback: Callable[[ViewInvalidated], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[ViewInvalidated], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, event: ViewInvalidated) -> None:
        logger.debug(f"Invalidating view {event.path}")
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                # Store write is already committed at this point
                logger.error(f"Invalidation consumer failed for {event.path}: {e}")

class RenderCache:
    """
    LRU cache of rendered views keyed by (path, viewer).

    Invalidating a path evicts the entries of every viewer for that path;
    invalidating the feed path evicts everything. Shared by the request
    threadpool, so every access holds the lock.
    """

    def __init__(self, max_size: int = settings.RENDER_CACHE_SIZE):
        self.max_size = max_size
        self._entries: "OrderedDict[Tuple[str, Hashable], Any]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, path: str, viewer_id: Optional[str]) -> Optional[Any]:
        key = (path, viewer_id)
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def set(self, path: str, viewer_id: Optional[str], value: Any) -> None:
        key = (path, viewer_id)
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def invalidate(self, event: ViewInvalidated) -> None:
        with self._lock:
            if event.path == FEED_PATH:
                self._entries.clear()
                return
            for key in [k for k in self._entries if k[0] == event.path]:
                del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

# Process-wide instances used by the API layer
invalidation_bus = InvalidationBus()
render_cache = RenderCache()
invalidation_bus.subscribe(render_cache.invalidate)
