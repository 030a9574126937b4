"""Split-point search and three-way file reconciliation."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

from .errors import IntegrityError, MergeWithSelf, UncommittedChanges

if TYPE_CHECKING:
    from .graph import CommitGraph
    from .repository import Repository

logger = logging.getLogger(__name__)

CONFLICT_START = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_END = b">>>>>>>\n"


class Action(enum.Enum):
    """What a merge does with one file."""

    KEEP = "keep"
    CHECKOUT = "checkout"
    REMOVE = "remove"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class MergeResult:
    """Result of a merge operation."""

    merged: bool
    commit: str | None
    strategy: str  # "no_op", "fast_forward", "three_way"
    conflicts: tuple[str, ...] = ()
    checked_out: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.merged

    @property
    def conflict(self) -> bool:
        return bool(self.conflicts)


def find_split_point(graph: CommitGraph, current_head: str, given_head: str) -> str:
    """Find the nearest common ancestor of two commits.

    Walks the current chain outward one commit at a time and, for each,
    scans the whole given chain; the first match is the split point.
    Only parent links are followed, so a branch produced by an earlier
    merge is seen through its first parent alone.

    Raises:
        IntegrityError: If the chains share no commit.
    """
    given_chain = list(graph.ancestor_ids(given_head))
    for candidate in graph.ancestor_ids(current_head):
        for ancestor in given_chain:
            if candidate == ancestor:
                return candidate
    raise IntegrityError(
        f"No common ancestor between {current_head} and {given_head}"
    )


def classify(split: str | None, current: str | None, given: str | None) -> Action:
    """Decide the fate of one file from its blob ids at the three commits.

    ``None`` means the file is absent from that commit.
    """
    if current == given:
        return Action.KEEP
    if split == current:
        # Only the given side changed it.
        return Action.REMOVE if given is None else Action.CHECKOUT
    if split == given:
        # Only the current side changed it.
        return Action.KEEP
    return Action.CONFLICT


def plan_merge(
    split: Mapping[str, str],
    current: Mapping[str, str],
    given: Mapping[str, str],
) -> dict[str, Action]:
    """Classify every file in the union of the three manifests."""
    names = set(split) | set(current) | set(given)
    return {
        name: classify(split.get(name), current.get(name), given.get(name))
        for name in sorted(names)
    }


def conflict_text(current: bytes, given: bytes | None) -> bytes:
    """Both versions of a conflicted file between conflict markers.

    The given section is left empty when the file is absent on that side.
    """
    parts = [CONFLICT_START, current, CONFLICT_SEPARATOR]
    if given is not None:
        parts.append(given)
    parts.append(CONFLICT_END)
    return b"".join(parts)


class MergeEngine:
    """Merges another branch into the current one of a repository."""

    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def merge(self, branch: str) -> MergeResult:
        """Merge ``branch`` into the current branch.

        Returns:
            A MergeResult. ``strategy`` is ``"no_op"`` when the given
            branch is already contained in the current one,
            ``"fast_forward"`` when the current branch only had to move,
            and ``"three_way"`` otherwise. A three-way merge with
            conflicts is falsy, carries the conflicted filenames and
            makes no commit.

        Raises:
            NoSuchBranch: If the branch does not exist.
            MergeWithSelf: If it is the current branch.
            UncommittedChanges: If anything is staged.
            UntrackedFileConflict: If an untracked file would be overwritten.
        """
        repo = self.repo
        given_head = repo.branches.get(branch)
        current_branch = repo.branches.current
        if branch == current_branch:
            raise MergeWithSelf()
        if not repo.staging.is_empty():
            raise UncommittedChanges()

        current = repo.head_commit
        given = repo.graph.get(given_head)
        repo.check_untracked(current.manifest, given.manifest)

        split_id = find_split_point(repo.graph, current.id, given.id)
        if split_id == given.id:
            logger.debug("Merge of %s is a no-op (ancestor %s)", branch, split_id)
            return MergeResult(merged=True, commit=current.id, strategy="no_op")
        if split_id == current.id:
            repo.restore(current.manifest, given)
            repo.branches.set_head(current_branch, given.id)
            logger.debug("Fast-forwarded %s to %s", current_branch, given.id)
            return MergeResult(merged=True, commit=given.id, strategy="fast_forward")

        split = repo.graph.get(split_id)
        plan = plan_merge(split.manifest, current.manifest, given.manifest)
        checked_out: list[str] = []
        removed: list[str] = []
        conflicts: list[str] = []

        for filename, action in plan.items():
            if action is Action.CHECKOUT:
                data = repo.content.get(given.manifest[filename], filename)
                repo.worktree.write(filename, data)
                repo.staging.stage_add(filename, data)
                checked_out.append(filename)
            elif action is Action.REMOVE:
                repo.staging.stage_remove(filename, current.manifest)
                repo.worktree.delete(filename)
                removed.append(filename)
            elif action is Action.CONFLICT:
                ours = (
                    repo.content.get(current.manifest[filename], filename)
                    if filename in current.manifest
                    else b""
                )
                theirs = (
                    repo.content.get(given.manifest[filename], filename)
                    if filename in given.manifest
                    else None
                )
                merged = conflict_text(ours, theirs)
                repo.worktree.write(filename, merged)
                repo.staging.stage_add(filename, merged)
                conflicts.append(filename)

        if conflicts:
            logger.info(
                "Merge of %s into %s conflicted on %s",
                branch,
                current_branch,
                ", ".join(conflicts),
            )
            return MergeResult(
                merged=False,
                commit=None,
                strategy="three_way",
                conflicts=tuple(conflicts),
                checked_out=tuple(checked_out),
                removed=tuple(removed),
            )

        commit = repo.commit(
            f"Merged {current_branch} with {branch}.", allow_empty=True
        )
        logger.debug("Merged %s into %s as %s", branch, current_branch, commit.id)
        return MergeResult(
            merged=True,
            commit=commit.id,
            strategy="three_way",
            checked_out=tuple(checked_out),
            removed=tuple(removed),
        )
