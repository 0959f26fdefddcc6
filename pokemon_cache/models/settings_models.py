"""Configuration model for the Pokemon image cache.

Defaults match the limits the cache has always used: one hundred in-memory
entries, a sixty minute expiry and a canonical ID range that ends at 2000.
Each value can be overridden through the environment.
"""

import os

from pydantic import BaseModel, Field

MAX_CACHE_SIZE = 100
DEFAULT_EXPIRATION = 60
CUSTOM_ID_CEILING = 2000

ENV_MAX_SIZE = "POKEMON_CACHE_MAX_SIZE"
ENV_DEFAULT_EXPIRATION = "POKEMON_CACHE_DEFAULT_EXPIRATION"
ENV_CUSTOM_ID_CEILING = "POKEMON_CACHE_CUSTOM_ID_CEILING"


class CacheSettings(BaseModel):
    """Tunable limits for the image cache and custom-ID classification.

    Attributes:
        max_cache_size: Maximum number of entries in the fast tier (default 100).
        default_expiration: Entry lifetime in minutes; 0 stores entries
            permanently (default 60).
        custom_id_ceiling: Highest numeric ID in the canonical dataset
            (default 2000).
    """

    max_cache_size: int = Field(
        MAX_CACHE_SIZE, ge=1, description="Maximum entries in the fast tier"
    )
    default_expiration: float = Field(
        DEFAULT_EXPIRATION, ge=0, description="Default entry lifetime in minutes"
    )
    custom_id_ceiling: int = Field(
        CUSTOM_ID_CEILING, ge=0, description="Highest canonical numeric ID"
    )

    @classmethod
    def from_env(cls) -> "CacheSettings":
        """Build settings from environment variables, falling back to defaults.

        Returns:
            CacheSettings populated from POKEMON_CACHE_* variables.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        overrides = {}
        for field_name, env_name in (
            ("max_cache_size", ENV_MAX_SIZE),
            ("default_expiration", ENV_DEFAULT_EXPIRATION),
            ("custom_id_ceiling", ENV_CUSTOM_ID_CEILING),
        ):
            value = os.environ.get(env_name)
            if value is not None and value.strip():
                overrides[field_name] = value.strip()
        return cls(**overrides)
