import pytest

from pokemon_cache import (
    DurableStore,
    MemoryStore,
    PokemonCache,
    StorageError,
    cleanup_all_sessions,
    reset_default_cache,
)

START_MS = 1_700_000_000_000


class FakeClock:
    """Manually advanced clock returning epoch milliseconds."""

    def __init__(self, now=START_MS):
        self.now = now

    def __call__(self):
        return self.now

    def advance_minutes(self, minutes):
        self.now += int(minutes * 60 * 1000)


class FailingStore(DurableStore):
    """Durable store whose every operation fails."""

    def get(self, key):
        raise StorageError("storage unavailable")

    def set(self, key, value):
        raise StorageError("quota exceeded")

    def remove(self, key):
        raise StorageError("storage unavailable")

    def keys(self):
        raise StorageError("storage unavailable")


@pytest.fixture(autouse=True)
def clean_globals():
    """Reset the process-wide cache and session registry around each test."""
    reset_default_cache()
    cleanup_all_sessions()
    yield
    reset_default_cache()
    cleanup_all_sessions()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def cache(memory_store, clock):
    # Cache backed by an in-memory session store and a controllable clock
    return PokemonCache(store=memory_store, clock=clock).init()


@pytest.fixture
def memory_only_cache(clock):
    return PokemonCache(clock=clock).init()
