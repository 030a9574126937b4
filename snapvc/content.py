"""Content-addressed blob storage."""

import hashlib
import logging
import os

from .errors import NotFound
from .kv.base import KVStore
from .kv.memory import Memory

logger = logging.getLogger(__name__)


def blob_id(filename: str, data: bytes) -> str:
    """Compute the id of one version of one file.

    The filename is hashed together with the content, so identical bytes
    stored under two names produce two different blobs.
    """
    h = hashlib.sha1()
    h.update(filename.encode())
    h.update(data)
    return h.hexdigest()


def extension(filename: str) -> str:
    """The file extension including the dot, or ``""``."""
    return os.path.splitext(filename)[1]


class ContentStore:
    """Blob storage keyed by ``(blob id, extension)``.

    Blobs are never evicted or overwritten with different bytes.
    """

    def __init__(self, store: KVStore | None = None) -> None:
        if store is None:
            store = Memory()
        self.store = store

    @staticmethod
    def _location(blob: str, filename: str) -> str:
        return blob + extension(filename)

    def put(self, filename: str, data: bytes) -> str:
        """Store a file version and return its blob id. Idempotent."""
        blob = blob_id(filename, data)
        if not self.has(blob, filename):
            self.store.set(self._location(blob, filename), data)
            logger.debug("Stored blob %s (%d bytes)", blob, len(data))
        return blob

    def get(self, blob: str, filename: str) -> bytes:
        """Read a file version back.

        Raises:
            NotFound: If no blob with that id was stored for that extension.
        """
        data = self.store.get(self._location(blob, filename))
        if data is None:
            raise NotFound(blob, f"No blob {blob} for {filename}.")
        return data

    def has(self, blob: str, filename: str) -> bool:
        return self._location(blob, filename) in self.store
