"""Session-scoped memo of detected patterns."""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from vellum.models import DetectedPatterns

logger = logging.getLogger(__name__)


def text_hash(text: str) -> str:
    """SHA-256 hash of document text for cache invalidation."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass
class _Entry:
    patterns: DetectedPatterns
    stored_at: float


class PatternCache:
    """Stores DetectedPatterns keyed by (document id, content hash).

    Entries expire ``ttl`` seconds after they are stored. A changed document
    text produces a different hash and therefore a miss.
    """

    def __init__(self, ttl: float = 3600.0, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the cache.

        Args:
            ttl: Entry lifetime in seconds
            clock: Monotonic time source
        """
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[Tuple[str, str], _Entry] = {}
        self.hits = 0
        self.misses = 0

    def get(self, document_id: str, text: str) -> Optional[DetectedPatterns]:
        key = (document_id, text_hash(text))
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if self._clock() - entry.stored_at >= self._ttl:
            del self._entries[key]
            self.misses += 1
            logger.debug(f"Pattern cache entry expired for {document_id}")
            return None
        self.hits += 1
        return entry.patterns

    def put(self, document_id: str, text: str, patterns: DetectedPatterns) -> None:
        content_hash = text_hash(text)
        patterns.content_hash = content_hash
        self._entries[(document_id, content_hash)] = _Entry(patterns, self._clock())

    def get_or_detect(
        self,
        document_id: str,
        text: str,
        detect: Callable[[], DetectedPatterns],
    ) -> DetectedPatterns:
        """Return cached patterns, calling ``detect`` on a miss.

        Exceptions from ``detect`` propagate and nothing is stored.
        """
        cached = self.get(document_id, text)
        if cached is not None:
            return cached
        patterns = detect()
        self.put(document_id, text, patterns)
        return patterns

    def invalidate(self, document_id: str) -> int:
        """Drop every entry for a document; returns the number removed."""
        keys = [key for key in self._entries if key[0] == document_id]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
