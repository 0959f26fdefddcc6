"""Durable, session-scoped storage backends for the Pokemon cache.

The cache talks to its durable tier only through the DurableStore interface,
a flat string-to-string store with get/set/remove. Three backends exist:

- NullStore: no persistence at all; the cache runs on its fast tier only
- MemoryStore: an in-process dictionary that lives as long as the session object
- FileSessionStore: one JSON document per session on disk, written atomically

Backends report failures by raising StorageError. The cache treats the
durable tier as best-effort and never lets these errors reach its callers.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_CACHE_DIR = "POKEMON_CACHE_DIR"
STORAGE_FILENAME = "storage.json"


class CacheError(Exception):
    """Base exception for Pokemon cache errors."""

    pass


class StorageError(CacheError):
    """Exception raised when a durable store cannot be read or written."""

    pass


class QuotaExceededError(StorageError):
    """Exception raised when a write would exceed the store's byte quota."""

    pass


class DurableStore(ABC):
    """Interface for a flat, string-keyed, session-scoped store."""

    @property
    def available(self) -> bool:
        """Whether writes to this store persist beyond the call."""
        return True

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Missing keys are ignored."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return every key currently in the store."""


class NullStore(DurableStore):
    """Store used where no session persistence exists. Every call is a no-op."""

    @property
    def available(self) -> bool:
        return False

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str) -> None:
        pass

    def remove(self, key: str) -> None:
        pass

    def keys(self) -> list[str]:
        return []


def _check_quota(data: dict[str, str], key: str, value: str, quota: int | None):
    """Raise QuotaExceededError if storing key=value would exceed the quota."""
    if quota is None:
        return
    used = sum(len(k) + len(v) for k, v in data.items() if k != key)
    if used + len(key) + len(value) > quota:
        raise QuotaExceededError(
            f"Writing {key!r} would exceed the storage quota of {quota} bytes"
        )


class MemoryStore(DurableStore):
    """Dictionary-backed store that lives as long as the object.

    Attributes:
        quota_bytes: Optional limit on the combined length of keys and values.
    """

    def __init__(self, initial: dict[str, str] | None = None, quota_bytes=None):
        self._data: dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(self._data, key, value, self.quota_bytes)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileSessionStore(DurableStore):
    """Session store kept as a single JSON document on disk.

    Each session gets its own directory under the cache base directory. The
    whole document is rewritten on every change, through a temporary file and
    an atomic rename, so readers never observe a partial write. Every
    operation re-reads the document, so stores sharing a session directory
    see each other's writes.

    Attributes:
        session_dir: Path to the session's directory.
        path: Path to the session's JSON document.
        quota_bytes: Optional limit on the combined length of keys and values.
    """

    def __init__(
        self,
        session_id: str | None = None,
        base_dir: str | None = None,
        quota_bytes: int | None = None,
    ):
        """Initialize the store for a session.

        Args:
            session_id: Optional session identifier. If None, a fresh unique
                directory is created.
            base_dir: Parent directory. Defaults to $POKEMON_CACHE_DIR or the
                system temp directory.
            quota_bytes: Optional limit on the combined length of keys and values.
        """
        base_dir = base_dir or os.environ.get(ENV_CACHE_DIR, tempfile.gettempdir())

        if session_id:
            self.session_dir = Path(base_dir) / f"pokemon-cache-{session_id}"
        else:
            self.session_dir = Path(
                tempfile.mkdtemp(prefix="pokemon-cache-", dir=base_dir)
            )

        self.session_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.session_dir / STORAGE_FILENAME
        self.quota_bytes = quota_bytes

    def _load(self) -> dict[str, str]:
        # Always read from disk; other stores may share this session directory
        if not self.path.exists():
            return {}

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read session storage {self.path}: {e}") from e

        if not isinstance(document, dict) or not all(
            isinstance(v, str) for v in document.values()
        ):
            raise StorageError(f"Session storage {self.path} is not a string mapping")

        return document

    def _flush(self, data: dict[str, str]) -> None:
        try:
            self.session_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.session_dir, suffix=".tmp", delete=False
            ) as tmp:
                json.dump(data, tmp)
            os.replace(tmp.name, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write session storage {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        _check_quota(data, key, value, self.quota_bytes)
        data[key] = value
        self._flush(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key not in data:
            return
        del data[key]
        self._flush(data)

    def keys(self) -> list[str]:
        return list(self._load())

    def destroy(self) -> None:
        """Remove the session document and directory.

        Safe to call multiple times.
        """
        if self.session_dir.exists():
            for file_path in [self.path, *self.session_dir.glob("*.tmp")]:
                if file_path.exists():
                    try:
                        file_path.unlink()
                    except OSError:
                        pass  # File might be in use

        if self.session_dir.exists():
            try:
                self.session_dir.rmdir()
            except OSError:
                pass  # Directory might not be empty


# In-memory registry of session stores by session ID
_session_stores: dict[str, FileSessionStore] = {}


def get_or_create_session_store(
    session_id: str, base_dir: str | None = None
) -> FileSessionStore:
    """Return the store for a session, creating it on first use.

    Args:
        session_id: Unique session identifier.
        base_dir: Optional parent directory for a newly created store.

    Returns:
        The same FileSessionStore instance for the same session ID.
    """
    store = _session_stores.get(session_id)
    if store is None:
        store = FileSessionStore(session_id=session_id, base_dir=base_dir)
        _session_stores[session_id] = store
    return store


def cleanup_session(session_id: str) -> None:
    """Destroy a session's store and forget it. Unknown sessions are ignored.

    Args:
        session_id: Unique session identifier to clean up.
    """
    store = _session_stores.pop(session_id, None)
    if store is not None:
        store.destroy()
        logger.debug(f"Cleaned up session storage for {session_id}")


def cleanup_all_sessions() -> None:
    """Destroy every registered session store."""
    for session_id in list(_session_stores):
        cleanup_session(session_id)
