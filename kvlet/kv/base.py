"""Abstract KV store interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping


def require_bytes(key: str, value: bytes) -> bytes:
    if not isinstance(value, bytes):
        raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
    return value


class KVStore(ABC):
    """Key-value store operating on bytes only.

    Objects, staging entries and refs all live in one flat namespace,
    told apart by key prefix. Record encoding is handled by the layers
    that own those prefixes.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get bytes value for key, or None if not found."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Set bytes value for key."""

    @abstractmethod
    def get_many(self, *args: str) -> Mapping[str, bytes]:
        """Get multiple keys, returning only keys that exist."""

    @abstractmethod
    def set_many(self, **kwargs: bytes) -> None:
        """Set multiple key-value pairs as one batch.

        Every value is validated before anything is written.
        """

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Iterate over all keys."""

    @abstractmethod
    def __contains__(self, key: str) -> bool:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key if present."""

    @abstractmethod
    def remove_many(self, *keys: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    def scan(self, prefix: str) -> list[str]:
        """Return the suffixes of all keys starting with ``prefix``, sorted."""
        return sorted(
            key[len(prefix):]
            for key in list(self.keys())
            if isinstance(key, str) and key.startswith(prefix)
        )

    def close(self) -> None:
        """Release any resources held by the backend."""
