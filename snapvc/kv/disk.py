"""Disk-backed KV store using diskcache."""

from contextlib import AbstractContextManager
from pathlib import Path
from typing import Iterable, cast

from .base import KVStore


class Disk(KVStore):
    """KV store backed by diskcache (SQLite + files).

    Eviction is disabled: the version store only grows.
    """

    def __init__(self, directory: str | Path) -> None:
        from diskcache import Cache as DiskCache

        self.store = DiskCache(str(directory), size_limit=0, eviction_policy="none")

    def get(self, key: str) -> bytes | None:
        return cast(bytes | None, self.store.get(key))

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        self.store[key] = value

    def set_many(self, items: dict[str, bytes]) -> None:
        for key, value in items.items():
            if not isinstance(value, bytes):
                raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
        with self.store.transact():
            for key, value in items.items():
                self.store[key] = value

    def keys(self) -> Iterable[str]:
        for key in self.store.iterkeys():
            yield str(key)

    def __contains__(self, key: str) -> bool:
        return key in self.store

    def remove(self, key: str) -> None:
        self.store.delete(key)

    def clear(self) -> None:
        self.store.clear()

    def transaction(self) -> AbstractContextManager:
        return self.store.transact()

    def close(self) -> None:
        self.store.close()
