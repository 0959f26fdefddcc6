"""Registry of custom Pokemon names.

Custom Pokemon are entities that are not part of the canonical numbered
dataset. Remembering them lets callers skip canonical lookups that are bound
to fail. The registry keeps a set of normalized names in memory and mirrors
it to the durable tier as a JSON array under ``pokemon_custom_names``.
"""

import logging
import threading

from pydantic import TypeAdapter, ValidationError

from pokemon_cache.keys import CUSTOM_NAMES_KEY, normalize_key
from pokemon_cache.storage import DurableStore, NullStore, StorageError

logger = logging.getLogger(__name__)

_NAMES_ADAPTER = TypeAdapter(list[str])


class CustomEntityRegistry:
    """Set of normalized custom Pokemon names with a durable snapshot.

    Attributes:
        store: Durable store holding the names snapshot.
    """

    def __init__(self, store: DurableStore | None = None, lock=None):
        """Initialize an empty registry.

        Args:
            store: Durable store for the snapshot. Defaults to a NullStore.
            lock: Lock shared with other cache components. A private
                re-entrant lock is created if omitted.
        """
        self.store = store if store is not None else NullStore()
        self._lock = lock if lock is not None else threading.RLock()
        self._names: set[str] = set()

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name) -> bool:
        return self.is_custom_name(name)

    def names(self) -> list[str]:
        """Return the registered names in sorted order."""
        with self._lock:
            return sorted(self._names)

    def _read_snapshot(self) -> list[str]:
        """Read the durable names snapshot.

        Returns:
            Stored names, or an empty list if the snapshot is missing or malformed.

        Raises:
            StorageError: If the store itself fails.
        """
        raw = self.store.get(CUSTOM_NAMES_KEY)
        if raw is None:
            return []
        try:
            return _NAMES_ADAPTER.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed custom Pokemon snapshot: {e}")
            return []

    def register_custom(self, name) -> None:
        """Mark a name as custom.

        The first registration of a name is logged and appended to the durable
        snapshot. Registering a known name again does nothing.

        Args:
            name: Pokemon name in any case, possibly padded with whitespace.
        """
        if not name:
            return

        key = normalize_key(name)
        if not key:
            return

        with self._lock:
            if key in self._names:
                return

            logger.info(f"Registering {name} as a custom Pokemon")
            self._names.add(key)

            if not self.store.available:
                return

            try:
                stored = self._read_snapshot()
                if key not in stored:
                    stored.append(key)
                    self.store.set(
                        CUSTOM_NAMES_KEY, _NAMES_ADAPTER.dump_json(stored).decode()
                    )
            except StorageError as e:
                logger.warning(f"Failed to save custom Pokemon to session storage: {e}")

    def is_custom_name(self, name) -> bool:
        """Check whether a name has been registered as custom.

        Args:
            name: Pokemon name in any case, possibly padded with whitespace.

        Returns:
            True if the normalized name is registered.
        """
        if not name:
            return False
        with self._lock:
            return normalize_key(name) in self._names

    def load_stored_custom_pokemon(self) -> int:
        """Merge the durable snapshot into the in-memory set.

        A missing, malformed or unreadable snapshot leaves the set unchanged.

        Returns:
            Number of names read from the snapshot.
        """
        if not self.store.available:
            return 0

        with self._lock:
            try:
                stored = self._read_snapshot()
            except StorageError as e:
                logger.warning(
                    f"Failed to load custom Pokemon from session storage: {e}"
                )
                return 0

            for name in stored:
                key = normalize_key(name)
                if key:
                    self._names.add(key)

        logger.info(f"Loaded {len(stored)} custom Pokemon from session storage")
        return len(stored)

    def clear(self) -> None:
        """Forget every registered name and drop the durable snapshot."""
        with self._lock:
            self._names.clear()
            if not self.store.available:
                return
            try:
                self.store.remove(CUSTOM_NAMES_KEY)
            except StorageError as e:
                logger.warning(f"Failed to clear custom Pokemon snapshot: {e}")
