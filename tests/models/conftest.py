import pytest
from pokemon_cache.models import CacheEntry


@pytest.fixture
def permanent_entry():
    return CacheEntry(url="https://example.com/25.png")


@pytest.fixture
def expiring_entry():
    return CacheEntry(url="https://example.com/25.png", expires=1_000)
