"""Tests for the staging index."""

from kvlet.kv.memory import Memory
from kvlet.staging import StagingIndex


class TestStagingIndex:
    def test_empty(self):
        s = StagingIndex(Memory())
        assert s.is_empty
        assert s.additions() == {}
        assert s.removals() == {}

    def test_stage_addition(self):
        s = StagingIndex(Memory())
        s.stage_addition("a.txt", "blob1")
        assert not s.is_empty
        assert s.additions() == {"a.txt": "blob1"}
        assert s.is_staged_for_addition("a.txt")

    def test_readd_replaces_blob(self):
        s = StagingIndex(Memory())
        s.stage_addition("a.txt", "blob1")
        s.stage_addition("a.txt", "blob2")
        assert s.additions() == {"a.txt": "blob2"}

    def test_addition_clears_removal(self):
        s = StagingIndex(Memory())
        s.stage_removal("a.txt", "blob1")
        s.stage_addition("a.txt", "blob2")
        assert s.removals() == {}
        assert s.additions() == {"a.txt": "blob2"}

    def test_removal_clears_addition(self):
        s = StagingIndex(Memory())
        s.stage_addition("a.txt", "blob2")
        s.stage_removal("a.txt", "blob1")
        assert s.additions() == {}
        assert s.removals() == {"a.txt": "blob1"}
        assert s.is_staged_for_removal("a.txt")

    def test_clear(self):
        store = Memory()
        store.set("unrelated", b"x")
        s = StagingIndex(store)
        s.stage_addition("a", "1")
        s.stage_removal("b", "2")
        s.clear()
        assert s.is_empty
        assert store.get("unrelated") == b"x"

    def test_apply(self):
        s = StagingIndex(Memory())
        s.stage_addition("new", "n1")
        s.stage_addition("changed", "c2")
        s.stage_removal("gone", "g1")
        tracked = {"kept": "k1", "changed": "c1", "gone": "g1"}
        assert s.apply(tracked) == {"kept": "k1", "changed": "c2", "new": "n1"}
        assert tracked == {"kept": "k1", "changed": "c1", "gone": "g1"}

    def test_persisted_in_store(self):
        store = Memory()
        StagingIndex(store).stage_addition("a", "1")
        assert StagingIndex(store).additions() == {"a": "1"}
