"""Staging area: changes pending for the next commit."""

from typing import Iterable, Mapping

from .errors import NothingToRemove


class StagingArea:
    """Pending additions (with their bytes) and pending removals.

    A filename is never both staged for addition and staged for removal.
    """

    def __init__(
        self,
        additions: Mapping[str, bytes] | None = None,
        removals: Iterable[str] = (),
    ) -> None:
        self._additions: dict[str, bytes] = dict(additions or {})
        self._removals: set[str] = set(removals)
        self._removals.difference_update(self._additions)

    # -- Read operations --

    def get(self, filename: str) -> bytes | None:
        """Staged bytes for a filename, or None."""
        return self._additions.get(filename)

    def is_staged(self, filename: str) -> bool:
        return filename in self._additions

    def is_removed(self, filename: str) -> bool:
        return filename in self._removals

    @property
    def additions(self) -> dict[str, bytes]:
        return dict(self._additions)

    @property
    def removals(self) -> set[str]:
        return set(self._removals)

    def staged_files(self) -> list[str]:
        return sorted(self._additions)

    def removed_files(self) -> list[str]:
        return sorted(self._removals)

    def is_empty(self) -> bool:
        """Whether there is nothing to commit."""
        return not self._additions and not self._removals

    # -- Write operations --

    def stage_add(self, filename: str, data: bytes) -> None:
        """Stage bytes for the next commit, cancelling a pending removal."""
        self._removals.discard(filename)
        self._additions[filename] = data

    def unstage(self, filename: str) -> None:
        """Forget any staged addition or removal of a filename."""
        self._additions.pop(filename, None)
        self._removals.discard(filename)

    def stage_remove(self, filename: str, manifest: Mapping[str, str]) -> bool:
        """Stage a removal.

        Args:
            filename: File to remove.
            manifest: The head commit's manifest.

        Returns:
            True if the file is tracked by head (the caller deletes the
            working copy), False if it was only staged for addition and
            has simply been un-staged.

        Raises:
            NothingToRemove: If the file is neither tracked nor staged.
        """
        if filename in manifest:
            self._additions.pop(filename, None)
            self._removals.add(filename)
            return True
        if filename in self._additions:
            del self._additions[filename]
            return False
        raise NothingToRemove()

    def clear(self) -> None:
        """Discard all staged changes."""
        self._additions.clear()
        self._removals.clear()
