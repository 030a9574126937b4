"""The commit graph: every commit ever made, keyed by id."""

import logging
from datetime import datetime
from typing import Iterable, Iterator, Mapping

from .commit import ROOT_PARENT, Commit
from .errors import AmbiguousId, EmptyMessage, IntegrityError, NotFound

logger = logging.getLogger(__name__)

ID_LENGTH = 40


class CommitGraph:
    """Append-only mapping from commit id to ``Commit``.

    Every commit records exactly one parent, so the graph is a tree
    rooted at the initial commit.
    """

    def __init__(self, commits: Iterable[Commit] = ()) -> None:
        self._commits: dict[str, Commit] = {}
        for commit in commits:
            self._commits[commit.id] = commit

    def __contains__(self, commit_id: str) -> bool:
        return commit_id in self._commits

    def __len__(self) -> int:
        return len(self._commits)

    # -- Writes --

    def create(
        self,
        parent: str,
        message: str,
        timestamp: datetime,
        manifest: Mapping[str, str],
    ) -> Commit:
        """Create a commit and add it to the graph.

        Raises:
            EmptyMessage: If the message is blank.
            NotFound: If ``parent`` is neither ``""`` nor a known commit.
        """
        if not message.strip():
            raise EmptyMessage()
        if parent != ROOT_PARENT and parent not in self._commits:
            raise NotFound(parent)
        commit = Commit.build(parent, message, timestamp, manifest)
        self._commits[commit.id] = commit
        logger.debug("Created commit %s (parent %s)", commit.id, parent or "-")
        return commit

    # -- Reads --

    def get(self, commit_id: str) -> Commit:
        try:
            return self._commits[commit_id]
        except KeyError:
            raise NotFound(commit_id) from None

    def resolve(self, id_or_prefix: str) -> str:
        """Expand a full id or unambiguous prefix to a commit id.

        Raises:
            NotFound: If nothing matches.
            AmbiguousId: If the prefix matches several commits.
        """
        if len(id_or_prefix) >= ID_LENGTH:
            if id_or_prefix in self._commits:
                return id_or_prefix
            raise NotFound(id_or_prefix)
        if not id_or_prefix:
            raise NotFound(id_or_prefix)
        matches = [cid for cid in self._commits if cid.startswith(id_or_prefix)]
        if not matches:
            raise NotFound(id_or_prefix)
        if len(matches) > 1:
            raise AmbiguousId(id_or_prefix, matches)
        return matches[0]

    def history_from(self, commit_id: str) -> Iterator[Commit]:
        """Yield the commit chain from ``commit_id`` back to the root."""
        current = self.get(commit_id)
        while True:
            yield current
            if current.is_root:
                return
            current = self.get(current.parent)

    def ancestor_ids(self, commit_id: str) -> Iterator[str]:
        """Ids along the parent chain, ``commit_id`` first."""
        for commit in self.history_from(commit_id):
            yield commit.id

    def all(self) -> list[Commit]:
        """Every commit, in no particular order."""
        return list(self._commits.values())

    def find_by_message(self, text: str) -> list[str]:
        """Ids of commits whose message equals ``text`` exactly."""
        return [c.id for c in self._commits.values() if c.message == text]

    def verify(self) -> None:
        """Re-hash every commit.

        Raises:
            IntegrityError: If a commit does not hash to its key, or a
                parent link points outside the graph.
        """
        for key, commit in self._commits.items():
            if key != commit.id or not commit.verify():
                raise IntegrityError(f"Commit {key} does not match its contents")
            if not commit.is_root and commit.parent not in self._commits:
                raise IntegrityError(
                    f"Commit {key} has unknown parent {commit.parent}"
                )
