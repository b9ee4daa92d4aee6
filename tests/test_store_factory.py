"""Tests for the kvlet.store() and open_repository() factories."""

import pytest

from kvlet import NotInitialized, Repository, open_repository, store
from kvlet.kv.disk import Disk
from kvlet.kv.memory import Memory


class TestStoreFactory:
    def test_default_returns_memory(self):
        assert isinstance(store(), Memory)

    def test_disk(self, tmp_path):
        s = store(storage="disk", path=tmp_path / "db")
        assert isinstance(s, Disk)
        s.close()

    def test_invalid_storage(self):
        with pytest.raises(ValueError, match="Unknown storage"):
            store(storage="redis")  # type: ignore

    def test_disk_requires_path(self):
        with pytest.raises(ValueError, match="path is required"):
            store(storage="disk")


class TestOpenRepository:
    def test_memory_repository(self, tmp_path):
        repo = open_repository(tmp_path, storage="memory")
        assert isinstance(repo, Repository)
        assert isinstance(repo.store, Memory)
        assert not repo.initialized

    def test_disk_repository_persists(self, tmp_path):
        repo = open_repository(tmp_path)
        assert isinstance(repo.store, Disk)
        head = repo.init()
        (tmp_path / "a.txt").write_bytes(b"1")
        repo.add("a.txt")
        repo.store.close()

        reopened = open_repository(tmp_path)
        assert reopened.initialized
        assert reopened.current_branch() == "main"
        assert reopened.status().staged == ["a.txt"]
        assert reopened.head_commit().id == head
        reopened.store.close()

    def test_repo_dir_is_not_a_working_file(self, tmp_path):
        repo = open_repository(tmp_path, repo_dir=".meta")
        repo.init()
        assert (tmp_path / ".meta").is_dir()
        assert repo.tree.names() == []
        repo.store.close()

    def test_without_create_needs_existing_repo_dir(self, tmp_path):
        with pytest.raises(NotInitialized):
            open_repository(tmp_path, create=False)
        assert not (tmp_path / ".kvlet").exists()

        open_repository(tmp_path).store.close()
        repo = open_repository(tmp_path, create=False)
        assert not repo.initialized
        repo.store.close()
