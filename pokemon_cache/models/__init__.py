"""Data models for the Pokemon image cache.

- CacheEntry: a resolved image URL and its expiry, shared by both cache tiers
- CacheSettings: size, expiry and classification limits

Both are Pydantic models, so durable-tier payloads are validated on the way
back in and configuration errors surface at construction time.
"""

from pokemon_cache.models.cache_models import CacheEntry
from pokemon_cache.models.settings_models import (
    CacheSettings,
    MAX_CACHE_SIZE,
    DEFAULT_EXPIRATION,
    CUSTOM_ID_CEILING,
)
