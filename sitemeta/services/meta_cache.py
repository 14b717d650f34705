import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from sitemeta.models import MetadataRecord

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    record: MetadataRecord
    expires_at: float


class MetaCache:
    """
    Process-local TTL cache of resolved metadata keyed by normalized URL.

    Expiry is lazy: an entry past its deadline is dropped by the next ``get``
    for that key. ``clock`` returns seconds and can be replaced in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[MetadataRecord]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                logger.debug(f"Cache entry expired for {key}")
                return None
            return entry.record

    def set(self, key: str, record: MetadataRecord, ttl_ms: int) -> None:
        expires_at = self._clock() + ttl_ms / 1000.0
        with self._lock:
            self._entries[key] = CacheEntry(record=record, expires_at=expires_at)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Metadata cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
