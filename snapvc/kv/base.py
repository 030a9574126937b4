"""Abstract KV store interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterable


class KVStore(ABC):
    """Key-value store operating on bytes only.

    Blobs, staged file bytes and the pickled repository snapshot all
    live in stores of this shape. Serialization happens above this layer.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get bytes value for key, or None if not found."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Set bytes value for key."""

    @abstractmethod
    def set_many(self, items: dict[str, bytes]) -> None:
        """Set multiple key-value pairs."""

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Iterate over all keys."""

    @abstractmethod
    def __contains__(self, key: str) -> bool:
        """Check if key exists in store."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all items from the store."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """Group the writes made inside the block into one unit.

        If the block raises, none of its writes are kept.
        """
