"""Loading and saving the repository between invocations.

The whole repository is read once when a command starts and written once
when it finishes. There is no locking: a repository has exactly one
writer at a time, and two processes working on the same directory
concurrently can lose each other's changes.
"""

import logging
import pickle
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Literal

from .branches import BranchMap
from .config import STAGE_PREFIX, STATE_DIR, STATE_KEY, VERSIONS_DIR, control_dir
from .content import ContentStore
from .errors import AlreadyInitialized, IntegrityError, NotInitialized
from .graph import CommitGraph
from .kv.base import KVStore
from .kv.memory import Memory
from .repository import Clock, Repository
from .staging import StagingArea
from .worktree import WorkingTree

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass
class Storage:
    """The two stores that make up a control directory.

    ``versions`` holds blobs. ``state`` holds the pickled snapshot under
    ``STATE_KEY`` and the raw bytes of each staged file under
    ``STAGE_PREFIX + filename``, so one transaction covers both.
    """

    versions: KVStore
    state: KVStore

    @classmethod
    def memory(cls) -> "Storage":
        return cls(Memory(), Memory())

    @classmethod
    def disk(cls, path: str | Path) -> "Storage":
        from .kv.disk import Disk

        path = Path(path)
        return cls(Disk(path / VERSIONS_DIR), Disk(path / STATE_DIR))

    @property
    def initialized(self) -> bool:
        return STATE_KEY in self.state

    def staged_keys(self) -> list[str]:
        return [key for key in self.state.keys() if key.startswith(STAGE_PREFIX)]

    def close(self) -> None:
        for kv in (self.versions, self.state):
            close = getattr(kv, "close", None)
            if close is not None:
                close()


def open_storage(
    kind: Literal["memory", "disk"] = "disk",
    *,
    path: str | Path | None = None,
) -> Storage:
    """Create a Storage with sensible defaults.

    Args:
        kind: ``"disk"`` (default) or ``"memory"``.
        path: Required when ``kind="disk"``. The control directory.
    """
    if kind == "memory":
        return Storage.memory()
    if kind == "disk":
        if path is None:
            raise ValueError("path is required when kind='disk'")
        return Storage.disk(path)
    raise ValueError(f"Unknown kind: {kind!r}")


def initialize(
    storage: Storage, worktree: WorkingTree, *, clock: Clock | None = None
) -> Repository:
    """Create and save a fresh repository.

    Raises:
        AlreadyInitialized: If the storage already holds a repository.
    """
    if storage.initialized:
        raise AlreadyInitialized()
    repo = Repository.initialize(worktree, ContentStore(storage.versions), clock=clock)
    save(repo, storage)
    logger.debug("Initialized repository in %s", worktree.root)
    return repo


def load(
    storage: Storage, worktree: WorkingTree, *, clock: Clock | None = None
) -> Repository:
    """Rebuild the repository from storage.

    Raises:
        NotInitialized: If the storage holds no repository.
        IntegrityError: If the snapshot is unreadable or inconsistent.
    """
    raw = storage.state.get(STATE_KEY)
    if raw is None:
        raise NotInitialized()
    try:
        snapshot = pickle.loads(raw)
        version = snapshot["version"]
        commits = snapshot["commits"]
        branches = snapshot["branches"]
        current = snapshot["current"]
        removals = snapshot["removals"]
    except Exception as e:
        raise IntegrityError(f"Unreadable repository snapshot: {e}") from e
    if version != SNAPSHOT_VERSION:
        raise IntegrityError(f"Unsupported snapshot version {version!r}")

    graph = CommitGraph(commits)
    graph.verify()
    for name, head in branches.items():
        if head not in graph:
            raise IntegrityError(f"Branch {name} points at unknown commit {head}")
    try:
        branch_map = BranchMap(branches, current)
    except ValueError as e:
        raise IntegrityError(str(e)) from e

    additions = {}
    for key in storage.staged_keys():
        value = storage.state.get(key)
        if value is not None:
            additions[key[len(STAGE_PREFIX):]] = value
    return Repository(
        graph,
        branch_map,
        StagingArea(additions, removals),
        ContentStore(storage.versions),
        worktree,
        clock=clock,
    )


def save(repo: Repository, storage: Storage) -> None:
    """Write the staged bytes and the snapshot back in one transaction.

    If any write fails, the previously saved state is left as it was.
    """
    snapshot = {
        "version": SNAPSHOT_VERSION,
        "commits": repo.graph.all(),
        "branches": repo.branches.as_dict(),
        "current": repo.branches.current,
        "removals": sorted(repo.staging.removals),
    }
    items = {
        STAGE_PREFIX + filename: data
        for filename, data in repo.staging.additions.items()
    }
    items[STATE_KEY] = pickle.dumps(snapshot)
    with storage.state.transaction():
        for key in storage.staged_keys():
            if key not in items:
                storage.state.remove(key)
        storage.state.set_many(items)
    logger.debug(
        "Saved %d commits, %d staged, %d removals",
        len(repo.graph),
        len(repo.staging.additions),
        len(repo.staging.removals),
    )


@contextmanager
def open_repository(
    root: str | Path,
    *,
    create: bool = False,
    clock: Clock | None = None,
) -> Iterator[Repository]:
    """Load the repository of a working directory for one command.

    The repository is saved when the block exits normally; if it raises,
    nothing is written.

    Args:
        root: The working directory.
        create: Initialize a new repository instead of loading one.
        clock: Timestamp source for new commits.

    Raises:
        NotInitialized: If ``create`` is False and there is no repository.
        AlreadyInitialized: If ``create`` is True and there is one.
    """
    control = control_dir(root)
    worktree = WorkingTree(root)
    if create:
        if control.exists():
            raise AlreadyInitialized()
    elif not control.is_dir():
        raise NotInitialized()

    storage = Storage.disk(control)
    try:
        if create:
            repo = initialize(storage, worktree, clock=clock)
        else:
            repo = load(storage, worktree, clock=clock)
        yield repo
        save(repo, storage)
    finally:
        storage.close()
