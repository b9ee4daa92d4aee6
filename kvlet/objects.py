"""Content-addressed object store for blobs and commits."""

import hashlib
import pickle
from dataclasses import dataclass, field, replace

from loguru import logger

from .errors import AmbiguousCommitId, CommitNotFound, NotFound
from .kv.base import KVStore

BLOB_KEY = "__blob__%s"
COMMIT_KEY = "__commit__%s"

SHORT_ID_LENGTH = 7

# Ids must not change with the interpreter's default pickle protocol.
HASH_PROTOCOL = 4


def _encode(value) -> bytes:
    return pickle.dumps(value, protocol=HASH_PROTOCOL)


def _blob_hash(name: str, contents: bytes) -> str:
    """Compute the id of a blob.

    The file name is part of the hash, so equal bytes stored under two
    names are two distinct blobs.
    """
    h = hashlib.sha1()
    h.update(_encode(name))
    h.update(contents)
    return h.hexdigest()


def _commit_hash(
    message: str,
    timestamp: float,
    parent1: str | None,
    parent2: str | None,
    tracked: dict[str, str],
) -> str:
    h = hashlib.sha1()
    h.update(_encode(message))
    h.update(_encode(timestamp))
    h.update(_encode(parent1 or ""))
    h.update(_encode(sorted(tracked.items())))
    if parent2 is not None:
        h.update(_encode(parent2))
    return h.hexdigest()


@dataclass(frozen=True)
class Blob:
    """Snapshot of one file: its name and bytes."""

    name: str
    contents: bytes

    @property
    def id(self) -> str:
        return _blob_hash(self.name, self.contents)


@dataclass(frozen=True)
class Commit:
    """Immutable snapshot of the tracked files.

    ``parent1`` is the mainline parent, ``parent2`` is only set on merge
    commits. ``tracked`` maps file names to blob ids.
    """

    message: str
    timestamp: float
    parent1: str | None = None
    parent2: str | None = None
    tracked: dict[str, str] = field(default_factory=dict)
    # Set on commits read back from the store: the key they were saved under.
    stored_id: str | None = field(default=None, compare=False, repr=False)

    @property
    def id(self) -> str:
        if self.stored_id is not None:
            return self.stored_id
        return _commit_hash(
            self.message, self.timestamp, self.parent1, self.parent2, self.tracked
        )

    @property
    def short_id(self) -> str:
        return self.id[:SHORT_ID_LENGTH]

    @property
    def parents(self) -> tuple[str, ...]:
        return tuple(p for p in (self.parent1, self.parent2) if p is not None)

    @property
    def is_merge(self) -> bool:
        return self.parent2 is not None

    def tracks(self, name: str) -> bool:
        return name in self.tracked

    def blob_for(self, name: str) -> str | None:
        """Blob id tracked under ``name``, or None if untracked."""
        return self.tracked.get(name)

    def with_parent2(self, parent2: str) -> "Commit":
        """Return a copy with the merged-in parent attached."""
        return replace(self, parent2=parent2, stored_id=None)


class ObjectStore:
    """Write-once storage of blobs and commits over a KV store.

    Objects are keyed by their content hash and never rewritten or
    deleted once stored.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    # -- Blobs --

    def put_blob(self, name: str, contents: bytes) -> str:
        """Store a blob if it is not already present. Returns its id."""
        blob = Blob(name, contents)
        blob_id = blob.id
        key = BLOB_KEY % blob_id
        if key not in self.store:
            self.store.set(key, pickle.dumps((blob.name, blob.contents)))
            logger.debug("Stored blob {} for {}", blob_id, name)
        return blob_id

    def get_blob(self, blob_id: str) -> Blob:
        raw = self.store.get(BLOB_KEY % blob_id)
        if raw is None:
            raise NotFound(f"No blob with id {blob_id} exists.")
        name, contents = pickle.loads(raw)
        return Blob(name, contents)

    def get_blob_contents(self, blob_id: str) -> bytes:
        return self.get_blob(blob_id).contents

    def blob_exists(self, blob_id: str) -> bool:
        return (BLOB_KEY % blob_id) in self.store

    # -- Commits --

    def put_commit(self, commit: Commit) -> str:
        """Store a commit under the id derived from its final state."""
        commit_id = commit.id
        record = {
            "message": commit.message,
            "timestamp": commit.timestamp,
            "parent1": commit.parent1,
            "parent2": commit.parent2,
            "tracked": dict(commit.tracked),
        }
        self.store.set(COMMIT_KEY % commit_id, pickle.dumps(record))
        logger.debug("Stored commit {} ({!r})", commit_id, commit.message)
        return commit_id

    def load_commit(self, commit_id: str) -> Commit:
        """Load a commit by its full id."""
        raw = self.store.get(COMMIT_KEY % commit_id)
        if raw is None:
            raise CommitNotFound()
        return Commit(**pickle.loads(raw), stored_id=commit_id)

    def resolve_commit_id(self, id_or_prefix: str) -> str:
        """Expand an abbreviated commit id to the full stored id.

        An exact match always wins. Otherwise the prefix must match
        exactly one stored commit.

        Raises:
            CommitNotFound: Nothing matches.
            AmbiguousCommitId: More than one commit matches.
        """
        if not id_or_prefix:
            raise CommitNotFound()
        if self.commit_exists(id_or_prefix):
            return id_or_prefix
        matches = [c for c in self.commit_ids() if c.startswith(id_or_prefix)]
        if not matches:
            raise CommitNotFound()
        if len(matches) > 1:
            raise AmbiguousCommitId(id_or_prefix, matches)
        return matches[0]

    def get_commit(self, id_or_prefix: str) -> Commit:
        return self.load_commit(self.resolve_commit_id(id_or_prefix))

    def commit_exists(self, commit_id: str) -> bool:
        return (COMMIT_KEY % commit_id) in self.store

    def commit_ids(self) -> list[str]:
        """All stored commit ids, sorted."""
        return self.store.scan(COMMIT_KEY % "")
