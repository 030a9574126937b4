from datetime import datetime, timedelta, timezone

import pytest

from snapvc import ContentStore, Repository, WorkingTree


class TickingClock:
    """Clock that advances one second per reading."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def worktree(tmp_path):
    return WorkingTree(tmp_path)


@pytest.fixture
def repo(worktree, clock):
    return Repository.initialize(worktree, ContentStore(), clock=clock)
