"""The repository aggregate: every user-facing operation lives here."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, Mapping

from .branches import BranchMap
from .commit import ROOT_PARENT, Commit
from .config import DEFAULT_BRANCH, INITIAL_MESSAGE
from .content import ContentStore
from .errors import (
    AlreadyOnBranch,
    EmptyMessage,
    FileDoesNotExist,
    FileNotInCommit,
    NoCommitWithMessage,
    NoSuchBranch,
    NothingToCommit,
    UntrackedFileConflict,
)
from .graph import CommitGraph
from .merge import MergeEngine, MergeResult
from .staging import StagingArea
from .worktree import WorkingTree

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class Status:
    """Snapshot of branches, staging and working-tree drift.

    ``modified`` holds ``(filename, "modified" | "deleted")`` pairs.
    """

    branches: tuple[str, ...]
    current: str
    staged: tuple[str, ...]
    removed: tuple[str, ...]
    modified: tuple[tuple[str, str], ...]
    untracked: tuple[str, ...]


class Repository:
    """Commit graph, branches and staging area over one working tree.

    A single exclusively-owned value: it is loaded once per invocation,
    mutated in memory and saved once (see ``snapvc.persistence``). Blobs
    are written to the content store as commits are made.
    """

    def __init__(
        self,
        graph: CommitGraph,
        branches: BranchMap,
        staging: StagingArea,
        content: ContentStore,
        worktree: WorkingTree,
        *,
        clock: Clock | None = None,
    ) -> None:
        self.graph = graph
        self.branches = branches
        self.staging = staging
        self.content = content
        self.worktree = worktree
        self.clock = clock or local_now

    @classmethod
    def initialize(
        cls,
        worktree: WorkingTree,
        content: ContentStore | None = None,
        *,
        clock: Clock | None = None,
        branch: str = DEFAULT_BRANCH,
    ) -> "Repository":
        """Create a repository holding only the root commit."""
        clock = clock or local_now
        graph = CommitGraph()
        root = graph.create(ROOT_PARENT, INITIAL_MESSAGE, clock(), {})
        return cls(
            graph,
            BranchMap({branch: root.id}, branch),
            StagingArea(),
            content or ContentStore(),
            worktree,
            clock=clock,
        )

    @property
    def head_commit(self) -> Commit:
        return self.graph.get(self.branches.head)

    # -- Staging --

    def add(self, filename: str) -> None:
        """Stage the working copy of a file.

        A file identical to the head's version is un-staged instead,
        which also cancels a pending removal.

        Raises:
            FileDoesNotExist: If the working copy is missing.
        """
        data = self.worktree.read(filename)
        if data is None:
            raise FileDoesNotExist(filename)
        tracked = self.head_commit.manifest.get(filename)
        if tracked is not None and tracked == self.worktree.blob_id(filename):
            self.staging.unstage(filename)
            return
        self.staging.stage_add(filename, data)

    def rm(self, filename: str) -> None:
        """Un-stage a file, or stage its removal and delete the working copy.

        Raises:
            NothingToRemove: If the file is neither staged nor tracked.
        """
        if self.staging.stage_remove(filename, self.head_commit.manifest):
            self.worktree.delete(filename)

    def commit(self, message: str, *, allow_empty: bool = False) -> Commit:
        """Record the staged changes as a new commit on the current branch.

        Raises:
            EmptyMessage: If the message is blank.
            NothingToCommit: If nothing is staged and ``allow_empty`` is False.
        """
        if not message.strip():
            raise EmptyMessage()
        if self.staging.is_empty() and not allow_empty:
            raise NothingToCommit()

        head = self.head_commit
        manifest = dict(head.manifest)
        for filename in self.staging.removals:
            manifest.pop(filename, None)
        for filename, data in self.staging.additions.items():
            manifest[filename] = self.content.put(filename, data)

        commit = self.graph.create(head.id, message, self.clock(), manifest)
        self.branches.set_head(self.branches.current, commit.id)
        self.staging.clear()
        logger.debug("Committed %s on %s", commit.id, self.branches.current)
        return commit

    # -- History --

    def log(self) -> Iterator[Commit]:
        """Commits from head back to the root."""
        return self.graph.history_from(self.branches.head)

    def global_log(self) -> list[Commit]:
        return self.graph.all()

    def find(self, message: str) -> list[str]:
        """Ids of commits with exactly this message.

        Raises:
            NoCommitWithMessage: If there are none.
        """
        found = self.graph.find_by_message(message)
        if not found:
            raise NoCommitWithMessage()
        return found

    def status(self) -> Status:
        head = self.head_commit.manifest
        present = set(self.worktree.files())
        modified: dict[str, str] = {}

        for filename, blob in head.items():
            if self.staging.is_staged(filename) or self.staging.is_removed(filename):
                continue
            if filename not in present:
                modified[filename] = "deleted"
            elif self.worktree.blob_id(filename) != blob:
                modified[filename] = "modified"

        for filename, data in self.staging.additions.items():
            if filename not in present:
                modified[filename] = "deleted"
            elif self.worktree.read(filename) != data:
                modified[filename] = "modified"

        untracked = [
            name
            for name in present
            if not self.staging.is_staged(name)
            and (name not in head or self.staging.is_removed(name))
        ]
        return Status(
            branches=tuple(self.branches.names()),
            current=self.branches.current,
            staged=tuple(self.staging.staged_files()),
            removed=tuple(self.staging.removed_files()),
            modified=tuple(sorted(modified.items())),
            untracked=tuple(sorted(untracked)),
        )

    # -- Branches --

    def branch(self, name: str) -> None:
        self.branches.create(name, self.branches.head)

    def rm_branch(self, name: str) -> None:
        self.branches.remove(name)

    # -- Checkout / reset --

    def check_untracked(
        self, current: Mapping[str, str], target: Mapping[str, str]
    ) -> None:
        """Refuse to overwrite untracked files that differ from the target.

        Raises:
            UntrackedFileConflict: If a working file is tracked by the
                target but not by the current commit and its content
                differs from the target's version.
        """
        in_the_way = {
            name
            for name in self.worktree.files()
            if name in target
            and name not in current
            and self.worktree.blob_id(name) != target[name]
        }
        if in_the_way:
            raise UntrackedFileConflict(in_the_way)

    def restore(self, current: Mapping[str, str], target: Commit) -> None:
        """Make the working tree match ``target``.

        Files tracked by ``current`` but not by the target are deleted;
        every file of the target is written back.
        """
        for name in self.worktree.files():
            if name in current and name not in target.manifest:
                self.worktree.delete(name)
        for name, blob in target.manifest.items():
            self.worktree.write(name, self.content.get(blob, name))

    def checkout_branch(self, name: str) -> None:
        """Switch to a branch, replacing the tracked files.

        Raises:
            NoSuchBranch: If the branch does not exist.
            AlreadyOnBranch: If it is the current branch.
            UntrackedFileConflict: If an untracked file would be overwritten.
        """
        if name not in self.branches:
            raise NoSuchBranch("No such branch exists.")
        target = self.graph.get(self.branches.get(name))
        if name == self.branches.current:
            raise AlreadyOnBranch()
        current = self.head_commit.manifest
        self.check_untracked(current, target.manifest)
        self.restore(current, target)
        self.branches.switch_to(name)
        self.staging.clear()
        logger.debug("Checked out branch %s at %s", name, target.id)

    def checkout_file(self, filename: str, commit: str | None = None) -> None:
        """Overwrite a working file with its version from a commit (default head).

        Raises:
            NotFound: If the commit id matches nothing.
            AmbiguousId: If the prefix matches several commits.
            FileNotInCommit: If the commit does not track the file.
        """
        commit_id = self.branches.head if commit is None else self.graph.resolve(commit)
        manifest = self.graph.get(commit_id).manifest
        if filename not in manifest:
            raise FileNotInCommit()
        self.worktree.write(filename, self.content.get(manifest[filename], filename))

    def reset(self, commit: str) -> None:
        """Check out an arbitrary commit and move the current branch to it.

        Raises:
            NotFound: If the commit id matches nothing.
            AmbiguousId: If the prefix matches several commits.
            UntrackedFileConflict: If an untracked file would be overwritten.
        """
        target = self.graph.get(self.graph.resolve(commit))
        current = self.head_commit.manifest
        self.check_untracked(current, target.manifest)
        self.restore(current, target)
        self.branches.set_head(self.branches.current, target.id)
        self.staging.clear()
        logger.debug("Reset %s to %s", self.branches.current, target.id)

    # -- Merge --

    def merge(self, branch: str) -> MergeResult:
        """Merge another branch into the current one. See ``MergeEngine.merge``."""
        return MergeEngine(self).merge(branch)
