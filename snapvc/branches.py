"""Branch pointers."""

from typing import Mapping

from .errors import AlreadyOnBranch, BranchExists, CannotRemoveCurrent, NoSuchBranch


class BranchMap:
    """Branch name -> head commit id, plus the current branch.

    ``head`` is always the commit of the current branch.
    """

    def __init__(self, branches: Mapping[str, str], current: str) -> None:
        if current not in branches:
            raise ValueError(f"Current branch {current!r} is not a branch")
        self._branches: dict[str, str] = dict(branches)
        self._current = current

    @property
    def current(self) -> str:
        return self._current

    @property
    def head(self) -> str:
        return self._branches[self._current]

    def get(self, name: str) -> str:
        """Head commit of a branch.

        Raises:
            NoSuchBranch: If the branch does not exist.
        """
        try:
            return self._branches[name]
        except KeyError:
            raise NoSuchBranch() from None

    def names(self) -> list[str]:
        return sorted(self._branches)

    def as_dict(self) -> dict[str, str]:
        return dict(self._branches)

    def __contains__(self, name: str) -> bool:
        return name in self._branches

    def create(self, name: str, at: str) -> None:
        if name in self._branches:
            raise BranchExists()
        self._branches[name] = at

    def remove(self, name: str) -> None:
        if name == self._current:
            raise CannotRemoveCurrent()
        if name not in self._branches:
            raise NoSuchBranch()
        del self._branches[name]

    def set_head(self, name: str, commit_id: str) -> None:
        if name not in self._branches:
            raise NoSuchBranch()
        self._branches[name] = commit_id

    def switch_to(self, name: str) -> None:
        if name not in self._branches:
            raise NoSuchBranch()
        if name == self._current:
            raise AlreadyOnBranch()
        self._current = name
