"""Dict-backed KV store, for tests and throwaway repositories."""

from typing import Iterable, Mapping

from .base import KVStore, require_bytes


class Memory(KVStore):
    """Keeps every record in a plain dict; nothing survives the process."""

    def __init__(self) -> None:
        self.records: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.records.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.records[key] = require_bytes(key, value)

    def get_many(self, *args: str) -> Mapping[str, bytes]:
        found = {}
        for key in args:
            if key in self.records:
                found[key] = self.records[key]
        return found

    def set_many(self, **kwargs: bytes) -> None:
        batch = {key: require_bytes(key, value) for key, value in kwargs.items()}
        self.records.update(batch)

    def keys(self) -> Iterable[str]:
        return list(self.records)

    def __contains__(self, key: str) -> bool:
        return key in self.records

    def remove(self, key: str) -> None:
        self.records.pop(key, None)

    def remove_many(self, *keys: str) -> None:
        for key in keys:
            self.remove(key)

    def clear(self) -> None:
        self.records.clear()

    def scan(self, prefix: str) -> list[str]:
        return sorted(k[len(prefix):] for k in self.records if k.startswith(prefix))
