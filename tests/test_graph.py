"""Tests for commits and the CommitGraph."""

import pickle
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from snapvc import AmbiguousId, Commit, CommitGraph, EmptyMessage, IntegrityError, NotFound

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def chain(graph: CommitGraph, *messages: str) -> list[Commit]:
    commits = []
    parent = ""
    for i, message in enumerate(messages):
        c = graph.create(parent, message, T0.replace(second=i), {f"f{i}.txt": f"{i:040d}"})
        commits.append(c)
        parent = c.id
    return commits


class TestCommit:
    def test_id_is_deterministic(self):
        a = Commit.build("", "msg", T0, {"a.txt": "1" * 40})
        b = Commit.build("", "msg", T0, {"a.txt": "1" * 40})
        assert a.id == b.id
        assert len(a.id) == 40

    def test_id_depends_on_every_input(self):
        base = Commit.build("", "msg", T0, {"a.txt": "1"})
        assert Commit.build("p", "msg", T0, {"a.txt": "1"}).id != base.id
        assert Commit.build("", "other", T0, {"a.txt": "1"}).id != base.id
        assert Commit.build("", "msg", T0.replace(second=1), {"a.txt": "1"}).id != base.id
        assert Commit.build("", "msg", T0, {"a.txt": "2"}).id != base.id

    def test_manifest_order_does_not_matter(self):
        a = Commit.build("", "m", T0, {"a": "1", "b": "2"})
        b = Commit.build("", "m", T0, {"b": "2", "a": "1"})
        assert a.id == b.id

    def test_manifest_is_read_only(self):
        c = Commit.build("", "m", T0, {"a": "1"})
        with pytest.raises(TypeError):
            c.manifest["b"] = "2"  # type: ignore[index]

    def test_verify(self):
        c = Commit.build("", "m", T0, {"a": "1"})
        assert c.verify()
        assert not replace(c, message="tampered").verify()

    def test_pickle_round_trip(self):
        c = Commit.build("", "m", T0, {"a": "1"})
        restored = pickle.loads(pickle.dumps(c))
        assert restored == c
        assert restored.verify()
        assert dict(restored.manifest) == {"a": "1"}


class TestCommitGraphCreate:
    def test_create_inserts(self):
        graph = CommitGraph()
        root = graph.create("", "initial commit", T0, {})
        assert root.id in graph
        assert graph.get(root.id) is root
        assert root.is_root

    def test_blank_message(self):
        graph = CommitGraph()
        with pytest.raises(EmptyMessage):
            graph.create("", "   ", T0, {})

    def test_unknown_parent(self):
        graph = CommitGraph()
        with pytest.raises(NotFound):
            graph.create("f" * 40, "m", T0, {})

    def test_every_commit_self_verifies(self):
        graph = CommitGraph()
        chain(graph, "a", "b", "c")
        for c in graph.all():
            assert Commit.build(c.parent, c.message, c.timestamp, c.manifest).id == c.id
        graph.verify()


class TestCommitGraphResolve:
    def test_full_id(self):
        graph = CommitGraph()
        (root,) = chain(graph, "a")
        assert graph.resolve(root.id) == root.id

    def test_missing_full_id(self):
        graph = CommitGraph()
        chain(graph, "a")
        with pytest.raises(NotFound):
            graph.resolve("0" * 40)

    def test_unique_prefix(self):
        graph = CommitGraph()
        commits = chain(graph, "a", "b", "c")
        target = commits[1]
        others = {c.id[:6] for c in commits if c is not target}
        assert target.id[:6] not in others
        assert graph.resolve(target.id[:6]) == target.id

    def test_ambiguous_prefix(self):
        first = Commit("ab" + "0" * 38, "", "one", T0, {})
        second = Commit("ab" + "1" * 38, "", "two", T0, {})
        graph = CommitGraph([first, second])
        with pytest.raises(AmbiguousId) as info:
            graph.resolve("ab")
        assert info.value.candidates == sorted([first.id, second.id])
        assert graph.resolve("ab0") == first.id

    def test_unknown_prefix(self):
        graph = CommitGraph()
        chain(graph, "a")
        with pytest.raises(NotFound):
            graph.resolve("zzzzzz")
        with pytest.raises(NotFound):
            graph.resolve("")


class TestCommitGraphTraversal:
    def test_history_most_recent_first(self):
        graph = CommitGraph()
        a, b, c = chain(graph, "a", "b", "c")
        assert [x.id for x in graph.history_from(c.id)] == [c.id, b.id, a.id]

    def test_history_is_restartable(self):
        graph = CommitGraph()
        _, _, c = chain(graph, "a", "b", "c")
        assert list(graph.history_from(c.id)) == list(graph.history_from(c.id))

    def test_history_unknown(self):
        graph = CommitGraph()
        with pytest.raises(NotFound):
            list(graph.history_from("nope"))

    def test_all(self):
        graph = CommitGraph()
        commits = chain(graph, "a", "b")
        assert {c.id for c in graph.all()} == {c.id for c in commits}
        assert len(graph) == 2

    def test_find_by_message(self):
        graph = CommitGraph()
        a, b, c = chain(graph, "same", "other", "same")
        assert sorted(graph.find_by_message("same")) == sorted([a.id, c.id])
        assert graph.find_by_message("sam") == []


class TestCommitGraphVerify:
    def test_tampered_commit(self):
        c = Commit.build("", "m", T0, {})
        graph = CommitGraph([replace(c, message="changed")])
        with pytest.raises(IntegrityError):
            graph.verify()

    def test_dangling_parent(self):
        c = Commit.build("f" * 40, "m", T0, {})
        graph = CommitGraph([c])
        with pytest.raises(IntegrityError, match="unknown parent"):
            graph.verify()
