"""Staging index: pending additions and removals between commits."""

import pickle

from loguru import logger

from .kv.base import KVStore

STAGED_ADDITION = "__stage_add__%s"
STAGED_REMOVAL = "__stage_rm__%s"


class StagingIndex:
    """Pending changes persisted in the KV store.

    Additions map a file name to the blob id that will be tracked.
    Removals map a file name to the blob id it is dropping. Staging a
    name on one side always clears it from the other.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    # -- Read operations --

    def additions(self) -> dict[str, str]:
        """Staged additions, name -> blob id."""
        names = self.store.scan(STAGED_ADDITION % "")
        raw = self.store.get_many(*(STAGED_ADDITION % n for n in names))
        return {n: pickle.loads(raw[STAGED_ADDITION % n]) for n in names}

    def removals(self) -> dict[str, str]:
        """Staged removals, name -> removed blob id."""
        names = self.store.scan(STAGED_REMOVAL % "")
        raw = self.store.get_many(*(STAGED_REMOVAL % n for n in names))
        return {n: pickle.loads(raw[STAGED_REMOVAL % n]) for n in names}

    def is_staged_for_addition(self, name: str) -> bool:
        return (STAGED_ADDITION % name) in self.store

    def is_staged_for_removal(self, name: str) -> bool:
        return (STAGED_REMOVAL % name) in self.store

    @property
    def is_empty(self) -> bool:
        return not self.store.scan(STAGED_ADDITION % "") and not self.store.scan(
            STAGED_REMOVAL % ""
        )

    # -- Write operations --

    def stage_addition(self, name: str, blob_id: str) -> None:
        self.store.remove(STAGED_REMOVAL % name)
        self.store.set(STAGED_ADDITION % name, pickle.dumps(blob_id))

    def stage_removal(self, name: str, blob_id: str) -> None:
        self.store.remove(STAGED_ADDITION % name)
        self.store.set(STAGED_REMOVAL % name, pickle.dumps(blob_id))

    def unstage_addition(self, name: str) -> None:
        self.store.remove(STAGED_ADDITION % name)

    def unstage_removal(self, name: str) -> None:
        self.store.remove(STAGED_REMOVAL % name)

    def clear(self) -> None:
        keys = [STAGED_ADDITION % n for n in self.store.scan(STAGED_ADDITION % "")]
        keys += [STAGED_REMOVAL % n for n in self.store.scan(STAGED_REMOVAL % "")]
        if keys:
            self.store.remove_many(*keys)
        logger.debug("Cleared staging index ({} entries)", len(keys))

    def apply(self, tracked: dict[str, str]) -> dict[str, str]:
        """Fold the staged changes over a tracked map, returning a new map."""
        result = dict(tracked)
        result.update(self.additions())
        for name in self.removals():
            result.pop(name, None)
        return result
