"""Tests for the Memory KV store."""

import pytest

from snapvc.kv.memory import Memory


class TestMemoryBasic:
    def test_set_get(self):
        m = Memory()
        m.set("k", b"v")
        assert m.get("k") == b"v"

    def test_get_missing(self):
        m = Memory()
        assert m.get("nope") is None

    def test_contains(self):
        m = Memory()
        m.set("k", b"v")
        assert "k" in m
        assert "nope" not in m

    def test_set_many(self):
        m = Memory()
        m.set_many({"a": b"1", "b.txt": b"2"})
        assert set(m.keys()) == {"a", "b.txt"}
        assert m.get("b.txt") == b"2"

    def test_type_error_on_non_bytes(self):
        m = Memory()
        with pytest.raises(TypeError, match="Expected bytes"):
            m.set("k", "not bytes")  # type: ignore

    def test_remove_missing(self):
        m = Memory()
        m.remove("nope")  # should not raise

    def test_clear_inside_transaction(self):
        m = Memory()
        m.set_many({"a": b"1", "b": b"2"})
        with m.transaction():
            m.clear()
            m.set("c", b"3")
        assert list(m.keys()) == ["c"]

    def test_transaction_rolls_back_on_error(self):
        m = Memory()
        m.set("a", b"1")
        with pytest.raises(OSError):
            with m.transaction():
                m.remove("a")
                m.set("b", b"2")
                raise OSError("disk full")
        assert list(m.keys()) == ["a"]
        assert m.get("a") == b"1"
