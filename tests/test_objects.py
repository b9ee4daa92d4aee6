"""Tests for blobs, commits and the object store."""

import pickle

import pytest

from kvlet import AmbiguousCommitId, Blob, Commit, CommitNotFound, NotFound, ObjectStore
from kvlet.kv.memory import Memory
from kvlet.objects import BLOB_KEY, COMMIT_KEY


@pytest.fixture
def objects():
    return ObjectStore(Memory())


class TestBlobIdentity:
    def test_same_name_and_contents(self):
        assert Blob("a.txt", b"x").id == Blob("a.txt", b"x").id

    def test_name_is_part_of_identity(self):
        assert Blob("a.txt", b"x").id != Blob("b.txt", b"x").id

    def test_contents_are_part_of_identity(self):
        assert Blob("a.txt", b"x").id != Blob("a.txt", b"y").id

    def test_id_is_40_hex(self):
        blob_id = Blob("a.txt", b"x").id
        assert len(blob_id) == 40
        int(blob_id, 16)


class TestBlobStore:
    def test_put_and_get(self, objects):
        blob_id = objects.put_blob("a.txt", b"hello")
        assert objects.blob_exists(blob_id)
        assert objects.get_blob_contents(blob_id) == b"hello"
        assert objects.get_blob(blob_id) == Blob("a.txt", b"hello")

    def test_put_is_idempotent(self, objects):
        first = objects.put_blob("a.txt", b"hello")
        second = objects.put_blob("a.txt", b"hello")
        assert first == second
        assert objects.store.scan(BLOB_KEY % "") == [first]

    def test_same_bytes_different_names_are_two_blobs(self, objects):
        objects.put_blob("a.txt", b"hello")
        objects.put_blob("b.txt", b"hello")
        assert len(objects.store.scan(BLOB_KEY % "")) == 2

    def test_missing_blob(self, objects):
        assert not objects.blob_exists("0" * 40)
        with pytest.raises(NotFound):
            objects.get_blob_contents("0" * 40)


class TestCommitIdentity:
    def test_deterministic(self):
        a = Commit("msg", 100.0, "p" * 40, tracked={"f": "b" * 40})
        b = Commit("msg", 100.0, "p" * 40, tracked={"f": "b" * 40})
        assert a.id == b.id

    @pytest.mark.parametrize(
        "field, value",
        [
            ("message", "other"),
            ("timestamp", 101.0),
            ("parent1", "q" * 40),
            ("tracked", {"f": "c" * 40}),
        ],
    )
    def test_each_field_changes_id(self, field, value):
        base = dict(message="msg", timestamp=100.0, parent1="p" * 40, tracked={"f": "b" * 40})
        changed = dict(base, **{field: value})
        assert Commit(**base).id != Commit(**changed).id

    def test_tracked_order_does_not_matter(self):
        a = Commit("m", 1.0, tracked={"x": "1", "y": "2"})
        b = Commit("m", 1.0, tracked={"y": "2", "x": "1"})
        assert a.id == b.id

    def test_parent2_changes_id(self):
        c = Commit("m", 1.0, "p" * 40)
        merged = c.with_parent2("q" * 40)
        assert merged.id != c.id
        assert merged.is_merge
        assert merged.parents == ("p" * 40, "q" * 40)

    def test_root_has_no_parents(self):
        assert Commit("initial commit", 0.0).parents == ()

    def test_ids_ignore_default_pickle_protocol(self, monkeypatch):
        blob = Blob("f.txt", b"data")
        commit = Commit("m", 1.0, "p" * 40, tracked={"f.txt": blob.id})
        before = (blob.id, commit.id)

        real_dumps = pickle.dumps
        monkeypatch.setattr(
            pickle, "dumps", lambda obj, protocol=5, **kw: real_dumps(obj, protocol, **kw)
        )
        assert (blob.id, commit.id) == before


class TestCommitStore:
    def test_put_and_load(self, objects):
        commit = Commit("m", 5.0, tracked={"f": "1"})
        commit_id = objects.put_commit(commit)
        assert commit_id == commit.id
        assert objects.commit_exists(commit_id)
        assert objects.load_commit(commit_id) == commit

    def test_put_twice_same_id(self, objects):
        commit = Commit("m", 5.0)
        assert objects.put_commit(commit) == objects.put_commit(commit)
        assert objects.commit_ids() == [commit.id]

    def test_merge_commit_round_trips_parent2(self, objects):
        commit = Commit("m", 5.0, "a" * 40).with_parent2("b" * 40)
        loaded = objects.load_commit(objects.put_commit(commit))
        assert loaded.parent2 == "b" * 40
        assert loaded.id == commit.id

    def test_prefix_lookup(self, objects):
        commit_id = objects.put_commit(Commit("m", 5.0))
        assert objects.get_commit(commit_id[:6]).id == commit_id
        assert objects.get_commit(commit_id).id == commit_id

    def test_unknown_id(self, objects):
        objects.put_commit(Commit("m", 5.0))
        with pytest.raises(CommitNotFound):
            objects.get_commit("not-a-commit")
        with pytest.raises(CommitNotFound):
            objects.get_commit("")

    def test_ambiguous_prefix(self, objects):
        record = objects.store.get(COMMIT_KEY % objects.put_commit(Commit("x", 1.0)))
        objects.store.set(COMMIT_KEY % "zz111", record)
        objects.store.set(COMMIT_KEY % "zz222", record)
        with pytest.raises(AmbiguousCommitId) as exc_info:
            objects.get_commit("zz")
        assert exc_info.value.matches == ["zz111", "zz222"]

    def test_exact_match_beats_longer_ids(self, objects):
        record = objects.store.get(COMMIT_KEY % objects.put_commit(Commit("x", 1.0)))
        objects.store.set(COMMIT_KEY % "zzz", record)
        objects.store.set(COMMIT_KEY % "zzzdef", record)
        assert objects.resolve_commit_id("zzz") == "zzz"

    def test_loaded_commit_keeps_its_key(self, objects):
        record = objects.store.get(COMMIT_KEY % objects.put_commit(Commit("x", 1.0)))
        objects.store.set(COMMIT_KEY % "zz999", record)
        loaded = objects.load_commit("zz999")
        assert loaded.id == "zz999"
        assert loaded.short_id == "zz999"
        assert loaded.with_parent2("b" * 40).id != "zz999"
