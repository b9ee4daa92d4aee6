"""kvlet: a small version-control engine over a key-value store."""

from .errors import (AlreadyInitialized, AlreadyOnBranch, AmbiguousCommitId, BranchExists,
                     BranchNotFound, CannotRemoveCurrentBranch, CommitNotFound,
                     EmptyCommitMessage, FileNotFound, FileNotInCommit, KvletError,
                     MergeWithSelf, NotFound, NotInitialized, NothingToCommit, NothingToRemove,
                     SplitPointError, UncommittedChanges, UntrackedFileInTheWay)
from .kv.base import KVStore
from .merge import MergeResult
from .objects import Blob, Commit, ObjectStore
from .repository import Repository, Status
from .store import open_repository, store

__all__ = [
    "AlreadyInitialized",
    "AlreadyOnBranch",
    "AmbiguousCommitId",
    "Blob",
    "BranchExists",
    "BranchNotFound",
    "CannotRemoveCurrentBranch",
    "Commit",
    "CommitNotFound",
    "EmptyCommitMessage",
    "FileNotFound",
    "FileNotInCommit",
    "KVStore",
    "KvletError",
    "MergeResult",
    "MergeWithSelf",
    "NotFound",
    "NotInitialized",
    "NothingToCommit",
    "NothingToRemove",
    "ObjectStore",
    "Repository",
    "SplitPointError",
    "Status",
    "UncommittedChanges",
    "UntrackedFileInTheWay",
    "open_repository",
    "store",
]
