"""Tests for loading and saving repositories."""

import pickle

import pytest

from snapvc import (
    AlreadyInitialized,
    IntegrityError,
    NotInitialized,
    Storage,
    WorkingTree,
    open_repository,
    open_storage,
)
from snapvc.config import STATE_KEY, control_dir
from snapvc.persistence import initialize, load, save


class TestOpenStorage:
    def test_memory(self):
        assert isinstance(open_storage("memory"), Storage)

    def test_disk_requires_path(self):
        with pytest.raises(ValueError, match="path is required"):
            open_storage("disk")

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown kind"):
            open_storage("redis")  # type: ignore[arg-type]


class TestMemoryRoundTrip:
    def test_initialize_twice(self, tmp_path, clock):
        storage = Storage.memory()
        initialize(storage, WorkingTree(tmp_path), clock=clock)
        with pytest.raises(AlreadyInitialized):
            initialize(storage, WorkingTree(tmp_path), clock=clock)

    def test_load_uninitialized(self, tmp_path):
        with pytest.raises(NotInitialized):
            load(Storage.memory(), WorkingTree(tmp_path))

    def test_state_survives(self, tmp_path, clock):
        storage = Storage.memory()
        worktree = WorkingTree(tmp_path)
        repo = initialize(storage, worktree, clock=clock)
        worktree.write("a.txt", b"a")
        repo.add("a.txt")
        c = repo.commit("one")
        repo.branch("dev")
        worktree.write("b.txt", b"b")
        repo.add("b.txt")
        repo.rm("a.txt")
        save(repo, storage)

        again = load(storage, worktree, clock=clock)
        assert again.branches.head == c.id
        assert again.branches.names() == ["dev", "master"]
        assert again.staging.additions == {"b.txt": b"b"}
        assert again.staging.removals == {"a.txt"}
        assert {x.id for x in again.global_log()} == {x.id for x in repo.global_log()}
        assert again.content.get(c.manifest["a.txt"], "a.txt") == b"a"

    def test_save_replaces_stage(self, tmp_path, clock):
        storage = Storage.memory()
        worktree = WorkingTree(tmp_path)
        repo = initialize(storage, worktree, clock=clock)
        worktree.write("a.txt", b"a")
        repo.add("a.txt")
        save(repo, storage)
        assert storage.staged_keys() == ["stage/a.txt"]
        repo.commit("one")
        save(repo, storage)
        assert storage.staged_keys() == []
        assert list(storage.state.keys()) == [STATE_KEY]

    def test_corrupt_snapshot(self, tmp_path, clock):
        storage = Storage.memory()
        initialize(storage, WorkingTree(tmp_path), clock=clock)
        storage.state.set(STATE_KEY, b"garbage")
        with pytest.raises(IntegrityError, match="Unreadable"):
            load(storage, WorkingTree(tmp_path))

    def test_tampered_commit(self, tmp_path, clock):
        storage = Storage.memory()
        initialize(storage, WorkingTree(tmp_path), clock=clock)
        snapshot = pickle.loads(storage.state.get(STATE_KEY))
        snapshot["branches"]["master"] = "f" * 40
        storage.state.set(STATE_KEY, pickle.dumps(snapshot))
        with pytest.raises(IntegrityError, match="unknown commit"):
            load(storage, WorkingTree(tmp_path))


class TestOpenRepository:
    def test_not_initialized(self, tmp_path):
        with pytest.raises(NotInitialized):
            with open_repository(tmp_path):
                pass
        assert not control_dir(tmp_path).exists()

    def test_create_and_reopen(self, tmp_path, clock):
        with open_repository(tmp_path, create=True, clock=clock) as repo:
            repo.worktree.write("a.txt", b"a")
            repo.add("a.txt")
        assert control_dir(tmp_path).is_dir()

        with open_repository(tmp_path, clock=clock) as repo:
            assert repo.staging.get("a.txt") == b"a"
            c = repo.commit("one")

        with open_repository(tmp_path) as repo:
            assert repo.branches.head == c.id
            assert repo.staging.is_empty()

    def test_create_twice(self, tmp_path):
        with open_repository(tmp_path, create=True):
            pass
        with pytest.raises(AlreadyInitialized):
            with open_repository(tmp_path, create=True):
                pass

    def test_failed_block_is_not_saved(self, tmp_path):
        with open_repository(tmp_path, create=True):
            pass
        with pytest.raises(RuntimeError):
            with open_repository(tmp_path) as repo:
                repo.branch("dev")
                raise RuntimeError("boom")
        with open_repository(tmp_path) as repo:
            assert repo.branches.names() == ["master"]

    def test_control_dir_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SNAPVC_DIR", ".other")
        with open_repository(tmp_path, create=True):
            pass
        assert (tmp_path / ".other").is_dir()


def failing_write(items):
    raise OSError("disk full")


class TestSaveIsAtomic:
    def stage_then_commit(self, storage, tmp_path, clock):
        """Save with ``a.txt`` staged, then commit it in memory."""
        worktree = WorkingTree(tmp_path)
        repo = initialize(storage, worktree, clock=clock)
        worktree.write("a.txt", b"a")
        repo.add("a.txt")
        save(repo, storage)
        repo = load(storage, worktree, clock=clock)
        repo.commit("c1")
        return repo, worktree

    def check_previous_state(self, storage, worktree):
        again = load(storage, worktree)
        assert again.head_commit.message == "initial commit"
        assert again.staging.staged_files() == ["a.txt"]
        assert again.staging.get("a.txt") == b"a"

    def test_failed_save_keeps_previous_state_in_memory(self, tmp_path, clock, monkeypatch):
        storage = Storage.memory()
        repo, worktree = self.stage_then_commit(storage, tmp_path, clock)
        monkeypatch.setattr(storage.state, "set_many", failing_write)
        with pytest.raises(OSError):
            save(repo, storage)
        monkeypatch.undo()
        self.check_previous_state(storage, worktree)

    def test_failed_save_keeps_previous_state_on_disk(self, tmp_path, clock, monkeypatch):
        storage = Storage.disk(tmp_path / ".ctl")
        try:
            repo, worktree = self.stage_then_commit(storage, tmp_path, clock)
            monkeypatch.setattr(storage.state, "set_many", failing_write)
            with pytest.raises(OSError):
                save(repo, storage)
            monkeypatch.undo()
            self.check_previous_state(storage, worktree)
        finally:
            storage.close()
