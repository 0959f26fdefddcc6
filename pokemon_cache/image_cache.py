"""Two-tier cache of resolved Pokemon image URLs.

Reads check the in-process fast tier first and fall back to the durable tier,
promoting live durable entries back into memory. Writes go to the fast tier
and are mirrored to the durable tier on a best-effort basis.

Expiry is lazy: an expired entry is only removed when a read finds it. The
fast tier is bounded, and when full the oldest inserted entry is evicted
first (FIFO). Reads do not refresh an entry's position.
"""

import logging
import threading
import time
from typing import Callable

from pydantic import ValidationError

from pokemon_cache.keys import IMAGE_KEY_PREFIX, image_storage_key, normalize_key
from pokemon_cache.models.cache_models import CacheEntry
from pokemon_cache.models.settings_models import DEFAULT_EXPIRATION, MAX_CACHE_SIZE
from pokemon_cache.storage import DurableStore, NullStore, StorageError

logger = logging.getLogger(__name__)

# Marker for "use the configured default expiration"
USE_DEFAULT = object()


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class ImageResolutionCache:
    """Bounded, expiring map from normalized Pokemon keys to image URLs.

    Attributes:
        store: Durable store mirroring the fast tier.
        max_size: Maximum number of entries held in the fast tier.
        default_expiration: Lifetime in minutes applied when a caller does not
            pass one; 0 stores entries permanently.
    """

    def __init__(
        self,
        store: DurableStore | None = None,
        max_size: int = MAX_CACHE_SIZE,
        default_expiration: float = DEFAULT_EXPIRATION,
        clock: Callable[[], int] = now_ms,
        lock=None,
    ):
        """Initialize an empty cache.

        Args:
            store: Durable tier. Defaults to a NullStore.
            max_size: Fast-tier capacity.
            default_expiration: Default entry lifetime in minutes.
            clock: Callable returning the current time in epoch milliseconds.
            lock: Lock shared with other cache components. A private
                re-entrant lock is created if omitted.
        """
        self.store = store if store is not None else NullStore()
        self.max_size = max_size
        self.default_expiration = default_expiration
        self._clock = clock
        self._lock = lock if lock is not None else threading.RLock()
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key) -> bool:
        with self._lock:
            entry = self._entries.get(normalize_key(key))
            return entry is not None and not entry.is_expired(self._clock())

    def keys(self) -> list[str]:
        """Return fast-tier keys in insertion order, oldest first."""
        with self._lock:
            return list(self._entries)

    def _insert(self, cache_key: str, entry: CacheEntry) -> None:
        if len(self._entries) >= self.max_size:
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]
            logger.debug(f"Evicted oldest image cache entry {oldest_key!r}")
        self._entries[cache_key] = entry

    def get_image_from_cache(self, key) -> str | None:
        """Look up a cached image URL, memory first, then durable storage.

        Args:
            key: Pokemon name or ID.

        Returns:
            The cached URL, or None if no live entry exists in either tier.
        """
        cache_key = normalize_key(key)
        now = self._clock()

        with self._lock:
            entry = self._entries.get(cache_key)
            if entry is not None:
                if not entry.is_expired(now):
                    return entry.url
                del self._entries[cache_key]
                logger.debug(f"Expired image cache entry {cache_key!r}")

            if not self.store.available:
                return None

            storage_key = image_storage_key(cache_key)
            try:
                raw = self.store.get(storage_key)
                if raw is None:
                    return None

                stored = CacheEntry.model_validate_json(raw)
                if stored.is_expired(now):
                    self.store.remove(storage_key)
                    return None
            except ValidationError as e:
                logger.warning(f"Ignoring malformed stored image for {cache_key!r}: {e}")
                return None
            except StorageError as e:
                logger.warning(f"Error retrieving image from session storage: {e}")
                return None

            self._insert(cache_key, stored)
            return stored.url

    def cache_image(self, key, image_url, expiration_minutes=USE_DEFAULT) -> None:
        """Store an image URL in memory and mirror it to durable storage.

        Args:
            key: Pokemon name or ID.
            image_url: Resolved image URL.
            expiration_minutes: Lifetime in minutes. A falsy value (0 or None)
                stores the entry permanently. Defaults to the configured
                expiration.
        """
        if not key or not image_url:
            return

        if expiration_minutes is USE_DEFAULT:
            expiration_minutes = self.default_expiration

        cache_key = normalize_key(key)
        expires = (
            self._clock() + int(expiration_minutes * 60 * 1000)
            if expiration_minutes
            else None
        )
        entry = CacheEntry(url=image_url, expires=expires)

        with self._lock:
            self._insert(cache_key, entry)

            if not self.store.available:
                return
            try:
                self.store.set(image_storage_key(cache_key), entry.model_dump_json())
            except StorageError as e:
                logger.warning(f"Failed to cache image in session storage: {e}")

    def clear(self) -> None:
        """Empty the fast tier and remove every stored image entry."""
        with self._lock:
            self._entries.clear()
            if not self.store.available:
                return
            try:
                for storage_key in self.store.keys():
                    if storage_key.startswith(IMAGE_KEY_PREFIX):
                        self.store.remove(storage_key)
            except StorageError as e:
                logger.warning(f"Error clearing session storage cache: {e}")
