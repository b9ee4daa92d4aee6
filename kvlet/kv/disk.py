"""Disk-backed KV store using diskcache."""

from typing import Iterable, Mapping, cast

from .base import KVStore, require_bytes

ONE_GB = 1024 * 1024 * 1024


class Disk(KVStore):
    """KV store backed by a diskcache directory (SQLite + files).

    Repository records are permanent, so the cache runs with eviction
    disabled. Batched writes and removals share one transaction.
    """

    def __init__(self, directory: str, size_limit: int = ONE_GB) -> None:
        from diskcache import Cache

        self.directory = directory
        self.cache = Cache(directory, size_limit=size_limit, eviction_policy="none")

    def get(self, key: str) -> bytes | None:
        return cast(bytes | None, self.cache.get(key))

    def set(self, key: str, value: bytes) -> None:
        self.cache.set(key, require_bytes(key, value))

    def get_many(self, *args: str) -> Mapping[str, bytes]:
        found = {}
        for key in args:
            value = self.get(key)
            if value is not None:
                found[key] = value
        return found

    def set_many(self, **kwargs: bytes) -> None:
        batch = {key: require_bytes(key, value) for key, value in kwargs.items()}
        with self.cache.transact():
            for key, value in batch.items():
                self.cache.set(key, value)

    def keys(self) -> Iterable[str]:
        return [str(key) for key in self.cache.iterkeys()]

    def __contains__(self, key: str) -> bool:
        return key in self.cache

    def remove(self, key: str) -> None:
        self.cache.delete(key)

    def remove_many(self, *keys: str) -> None:
        with self.cache.transact():
            for key in keys:
                self.cache.delete(key)

    def clear(self) -> None:
        self.cache.clear()

    def close(self) -> None:
        self.cache.close()
