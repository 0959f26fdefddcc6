"""Pokemon cache service shared by every caller in the process.

PokemonCache bundles the image resolution cache and the custom Pokemon
registry behind one object with a single lock and a single durable store.
Construct it once, call init() to hydrate it from the durable tier, and hand
the instance to whatever needs it. get_default_cache() provides a lazily
created process-wide instance for callers that do not inject their own.

Example:
    >>> from pokemon_cache import PokemonCache, MemoryStore
    >>> cache = PokemonCache(store=MemoryStore()).init()
    >>> cache.cache_image("Pikachu", "https://example.com/25.png")
    >>> cache.get_image_from_cache(" pikachu ")
    'https://example.com/25.png'
"""

import logging
import threading
from typing import Callable

from pokemon_cache.image_cache import USE_DEFAULT, ImageResolutionCache, now_ms
from pokemon_cache import keys
from pokemon_cache.models.settings_models import CacheSettings
from pokemon_cache.registry import CustomEntityRegistry
from pokemon_cache.storage import DurableStore, NullStore

logger = logging.getLogger(__name__)

# Fallback images when Pokemon data is unavailable
POKE_BALL_IMAGE = (
    "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/items/poke-ball.png"
)
UNKNOWN_POKEMON_IMAGE = (
    "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/0.png"
)


class PokemonCache:
    """Image URL cache plus custom Pokemon registry over one durable store.

    Attributes:
        settings: Size, expiry and classification limits.
        store: Durable, session-scoped store, or a NullStore.
        images: The image resolution cache.
        registry: The custom Pokemon registry.
    """

    def __init__(
        self,
        store: DurableStore | None = None,
        settings: CacheSettings | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        """Create the service. Call init() before use to hydrate it.

        Args:
            store: Durable tier. Defaults to a NullStore (memory only).
            settings: Cache limits. Defaults to CacheSettings().
            clock: Callable returning the current time in epoch milliseconds.
        """
        self.settings = settings if settings is not None else CacheSettings()
        self.store = store if store is not None else NullStore()

        lock = threading.RLock()
        self.images = ImageResolutionCache(
            store=self.store,
            max_size=self.settings.max_cache_size,
            default_expiration=self.settings.default_expiration,
            clock=clock,
            lock=lock,
        )
        self.registry = CustomEntityRegistry(store=self.store, lock=lock)
        self._lock = lock

    @property
    def has_durable_tier(self) -> bool:
        """Whether cache writes are mirrored to a persistent session store."""
        return self.store.available

    def init(self) -> "PokemonCache":
        """Hydrate the registry from the durable tier, if there is one.

        Safe to call repeatedly; each call re-merges the stored snapshot.

        Returns:
            This cache, for chaining.
        """
        if self.has_durable_tier:
            self.registry.load_stored_custom_pokemon()
        return self

    @staticmethod
    def get_cache_key(name_or_id) -> str:
        """Standardize a name or ID into a cache key.

        Args:
            name_or_id: Pokemon name or numeric ID.

        Returns:
            The lower-cased, trimmed key used by both tiers.
        """
        return keys.normalize_key(name_or_id)

    def is_custom_id(self, identifier) -> bool:
        """Check whether an ID lies outside the canonical dataset.

        Args:
            identifier: String or numeric ID, possibly None.

        Returns:
            True for placeholder IDs and IDs above the configured ceiling.
        """
        return keys.is_custom_id(identifier, ceiling=self.settings.custom_id_ceiling)

    def register_custom(self, name) -> None:
        """Mark a name as custom so canonical lookups can be skipped.

        Args:
            name: Pokemon name in any case.
        """
        self.registry.register_custom(name)

    def is_custom_name(self, name) -> bool:
        """Check whether a name has been registered as custom.

        Args:
            name: Pokemon name in any case.

        Returns:
            True if the normalized name is registered.
        """
        return self.registry.is_custom_name(name)

    def load_stored_custom_pokemon(self) -> int:
        """Merge custom names from the durable snapshot into memory.

        Returns:
            Number of names read from the snapshot.
        """
        return self.registry.load_stored_custom_pokemon()

    def get_image_from_cache(self, key) -> str | None:
        """Look up a cached image URL, memory first, then durable storage.

        Args:
            key: Pokemon name or ID.

        Returns:
            The cached URL, or None on a miss.
        """
        return self.images.get_image_from_cache(key)

    def cache_image(self, key, image_url, expiration_minutes=USE_DEFAULT) -> None:
        """Store an image URL in both tiers.

        Args:
            key: Pokemon name or ID.
            image_url: Resolved image URL.
            expiration_minutes: Lifetime in minutes; a falsy value never
                expires. Defaults to the configured expiration.
        """
        self.images.cache_image(key, image_url, expiration_minutes)

    def resolve_image(
        self,
        key,
        resolver: Callable[[str], str | None],
        fallback: str | None = POKE_BALL_IMAGE,
        expiration_minutes=USE_DEFAULT,
    ) -> str | None:
        """Return a cached image URL, resolving and caching it on a miss.

        Args:
            key: Pokemon name or ID.
            resolver: Called with the normalized key to look up the URL,
                typically against the remote API.
            fallback: URL returned when the key is empty or resolution fails.
            expiration_minutes: Lifetime for a newly resolved entry.

        Returns:
            The cached or freshly resolved URL, or the fallback.
        """
        if not key:
            return fallback

        cache_key = keys.normalize_key(key)
        if not cache_key:
            return fallback

        cached = self.images.get_image_from_cache(cache_key)
        if cached is not None:
            return cached

        try:
            image_url = resolver(cache_key)
        except Exception as e:
            logger.error(f"Failed to get image for Pokemon {key}: {e}")
            return fallback

        if not image_url:
            logger.warning(f"No image found for Pokemon {key}")
            return fallback

        self.images.cache_image(cache_key, image_url, expiration_minutes)
        return image_url

    def clear_all(self) -> None:
        """Clear cached images and custom names from memory and durable storage.

        Durable keys that do not belong to the cache are left untouched.
        """
        with self._lock:
            self.images.clear()
            self.registry.clear()
        logger.info("Pokemon cache cleared")


_default_cache: PokemonCache | None = None
_default_lock = threading.Lock()


def get_default_cache() -> PokemonCache:
    """Return the process-wide cache, creating and initializing it on first use.

    The default instance has no durable tier and uses settings from the
    environment.
    """
    global _default_cache
    with _default_lock:
        if _default_cache is None:
            _default_cache = PokemonCache(settings=CacheSettings.from_env()).init()
        return _default_cache


def set_default_cache(cache: PokemonCache) -> None:
    """Install an already constructed cache as the process-wide instance."""
    global _default_cache
    with _default_lock:
        _default_cache = cache


def reset_default_cache() -> None:
    """Drop the process-wide instance so the next call creates a new one."""
    global _default_cache
    with _default_lock:
        _default_cache = None
