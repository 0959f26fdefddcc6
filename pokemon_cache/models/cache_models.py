"""Core cache models for the Pokemon image cache."""

from pydantic import BaseModel, ConfigDict, Field


class CacheEntry(BaseModel):
    """A resolved image URL with an optional absolute expiry.

    The same shape is used in the fast tier and, serialized as JSON, in the
    durable tier. Entries are immutable; re-caching a key replaces the whole
    entry.

    Attributes:
        url: Resolved image location.
        expires: Expiry as milliseconds since the epoch, or None to never expire.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="Resolved image URL")
    # Entries written by other clients may carry fractional milliseconds
    expires: int | float | None = Field(
        None, description="Absolute expiry in epoch milliseconds"
    )

    def is_expired(self, now_ms: float) -> bool:
        """Check whether the entry has expired at the given time.

        Args:
            now_ms: Current time in milliseconds since the epoch.

        Returns:
            True if the entry carries an expiry that is not in the future.
        """
        return self.expires is not None and self.expires <= now_ms
