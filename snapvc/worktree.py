"""The working directory: the flat set of user files next to the control dir."""

import logging
from pathlib import Path

from .content import blob_id

logger = logging.getLogger(__name__)


class WorkingTree:
    """Reads and writes plain files in one directory.

    Only regular files directly inside ``root`` are considered; the
    control directory and other subdirectories are ignored.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path(self, filename: str) -> Path:
        return self.root / filename

    def exists(self, filename: str) -> bool:
        return self.path(filename).is_file()

    def read(self, filename: str) -> bytes | None:
        """File bytes, or None if the file is absent."""
        path = self.path(filename)
        if not path.is_file():
            return None
        return path.read_bytes()

    def write(self, filename: str, data: bytes) -> None:
        self.path(filename).write_bytes(data)
        logger.debug("Wrote %s (%d bytes)", filename, len(data))

    def delete(self, filename: str) -> None:
        self.path(filename).unlink(missing_ok=True)
        logger.debug("Deleted %s", filename)

    def files(self) -> list[str]:
        """Names of all regular files, sorted."""
        return sorted(p.name for p in self.root.iterdir() if p.is_file())

    def blob_id(self, filename: str) -> str | None:
        """Blob id the file would get if added now, or None if absent."""
        data = self.read(filename)
        if data is None:
            return None
        return blob_id(filename, data)
