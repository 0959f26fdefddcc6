"""Two-tier cache for Pokemon image URLs and custom Pokemon names.

This package caches resolved Pokemon image URLs and remembers which Pokemon
are custom (outside the canonical numbered dataset). It consists of:

1. Key normalization and custom-ID classification (keys)
2. Durable, session-scoped storage backends (storage)
3. The image resolution cache with expiry and FIFO eviction (image_cache)
4. The custom Pokemon registry (registry)
5. The PokemonCache service tying them together (service)

Example:
    Typical use from a data-fetching layer:

    >>> from pokemon_cache import PokemonCache, get_or_create_session_store
    >>>
    >>> cache = PokemonCache(store=get_or_create_session_store("abc123")).init()
    >>> if not cache.is_custom_id(pokemon_id):
    ...     url = cache.resolve_image(name, fetch_official_artwork)
"""

from pokemon_cache.keys import normalize_key, is_custom_id
from pokemon_cache.models import CacheEntry, CacheSettings
from pokemon_cache.storage import (
    CacheError,
    StorageError,
    QuotaExceededError,
    DurableStore,
    NullStore,
    MemoryStore,
    FileSessionStore,
    get_or_create_session_store,
    cleanup_session,
    cleanup_all_sessions,
)
from pokemon_cache.image_cache import ImageResolutionCache
from pokemon_cache.registry import CustomEntityRegistry
from pokemon_cache.service import (
    PokemonCache,
    POKE_BALL_IMAGE,
    UNKNOWN_POKEMON_IMAGE,
    get_default_cache,
    set_default_cache,
    reset_default_cache,
)
