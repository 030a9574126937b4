"""snapvc: a minimal content-addressed version-control engine."""

from .branches import BranchMap
from .commit import Commit
from .content import ContentStore, blob_id
from .errors import (
    AlreadyInitialized,
    AlreadyOnBranch,
    AmbiguousId,
    BranchExists,
    CannotRemoveCurrent,
    EmptyMessage,
    FileDoesNotExist,
    FileNotInCommit,
    IntegrityError,
    MergeWithSelf,
    NoCommitWithMessage,
    NoSuchBranch,
    NotFound,
    NothingToCommit,
    NothingToRemove,
    NotInitialized,
    SnapvcError,
    UncommittedChanges,
    UntrackedFileConflict,
)
from .graph import CommitGraph
from .kv.base import KVStore
from .merge import Action, MergeEngine, MergeResult
from .persistence import Storage, open_repository, open_storage
from .repository import Repository, Status
from .staging import StagingArea
from .worktree import WorkingTree

__all__ = [
    "Action",
    "AlreadyInitialized",
    "AlreadyOnBranch",
    "AmbiguousId",
    "BranchExists",
    "BranchMap",
    "CannotRemoveCurrent",
    "Commit",
    "CommitGraph",
    "ContentStore",
    "EmptyMessage",
    "FileDoesNotExist",
    "FileNotInCommit",
    "IntegrityError",
    "KVStore",
    "MergeEngine",
    "MergeResult",
    "MergeWithSelf",
    "NoCommitWithMessage",
    "NoSuchBranch",
    "NotFound",
    "NotInitialized",
    "NothingToCommit",
    "NothingToRemove",
    "Repository",
    "SnapvcError",
    "StagingArea",
    "Status",
    "Storage",
    "UncommittedChanges",
    "UntrackedFileConflict",
    "WorkingTree",
    "blob_id",
    "open_repository",
    "open_storage",
]
