"""In-memory KV store."""

from contextlib import contextmanager
from typing import Iterable, Iterator

from .base import KVStore


class Memory(KVStore):
    """A memory-backed KV store. Used for tests and scratch repositories."""

    def __init__(self) -> None:
        self.memory: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.memory.get(key)

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        self.memory[key] = value

    def set_many(self, items: dict[str, bytes]) -> None:
        for key, value in items.items():
            if not isinstance(value, bytes):
                raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
        self.memory.update(items)

    def keys(self) -> Iterable[str]:
        return list(self.memory)

    def __contains__(self, key: str) -> bool:
        return key in self.memory

    def remove(self, key: str) -> None:
        self.memory.pop(key, None)

    def clear(self) -> None:
        self.memory.clear()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Restore the previous contents if the block raises."""
        saved = dict(self.memory)
        try:
            yield
        except BaseException:
            self.memory = saved
            raise
