"""Repository: the command surface over one working tree and one KV store."""

import time
from dataclasses import dataclass, field
from functools import wraps
from pathlib import Path
from typing import Callable, Iterator

from loguru import logger

from . import checkout as _checkout
from . import merge as _merge
from .errors import (AlreadyInitialized, AlreadyOnBranch, BranchExists, BranchNotFound,
                     CannotRemoveCurrentBranch, EmptyCommitMessage, FileNotFound, NotFound,
                     NotInitialized, NothingToCommit, NothingToRemove)
from .graph import first_parent_history
from .kv.base import KVStore
from .kv.memory import Memory
from .merge import MergeResult
from .objects import Blob, Commit, ObjectStore
from .refs import DEFAULT_BRANCH, BranchRegistry
from .staging import StagingIndex
from .worktree import WorkingTree

INITIAL_MESSAGE = "initial commit"
NO_MATCH_MESSAGE = "Found no commit with that message."


@dataclass(frozen=True)
class Status:
    """Snapshot of branches, staging and working-tree state."""

    branches: list[str]
    current_branch: str
    staged: list[str]
    removed: list[str]
    modified: dict[str, str] = field(default_factory=dict)  # name -> "modified" | "deleted"
    untracked: list[str] = field(default_factory=list)


def requires_repo(func):
    """Refuse to run ``func`` until ``init()`` has created the repository."""

    @wraps(func)
    def wrapper(self: "Repository", *args, **kwargs):
        if not self.refs.initialized:
            raise NotInitialized()
        return func(self, *args, **kwargs)

    return wrapper


class Repository:
    """A version-controlled working tree.

    All state lives in the KV store and is read fresh by each
    operation; nothing is cached on the instance between calls. Every
    operation either completes or raises a ``KvletError`` before
    writing anything.

    Args:
        work_dir: Directory holding the tracked plain files.
        store: Backend for objects, staging and refs (default: memory).
        clock: Source of commit timestamps.
    """

    def __init__(
        self,
        work_dir: str | Path,
        store: KVStore | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if store is None:
            store = Memory()
        self.store = store
        self.clock = clock
        self.tree = WorkingTree(work_dir)
        self.objects = ObjectStore(store)
        self.staging = StagingIndex(store)
        self.refs = BranchRegistry(store)

    @property
    def initialized(self) -> bool:
        return self.refs.initialized

    # -- Setup --

    def init(self) -> str:
        """Create the initial commit and the default branch."""
        if self.refs.initialized:
            raise AlreadyInitialized()
        commit_id = self.objects.put_commit(Commit(INITIAL_MESSAGE, self.clock()))
        self.refs.initialize(commit_id, DEFAULT_BRANCH)
        logger.debug("Initialized repository at {} ({})", self.tree.root, commit_id)
        return commit_id

    # -- Read helpers --

    @requires_repo
    def head_commit(self) -> Commit:
        return self.objects.load_commit(self.refs.head())

    @requires_repo
    def current_branch(self) -> str:
        return self.refs.current_branch()

    # -- Staging --

    @requires_repo
    def add(self, name: str) -> str | None:
        """Stage the working copy of ``name``.

        Returns the staged blob id, or None when the file matches the
        version HEAD already tracks (any pending removal is dropped).
        """
        if not self.tree.exists(name):
            raise FileNotFound()
        contents = self.tree.read(name)
        head = self.head_commit()
        self.staging.unstage_removal(name)
        if Blob(name, contents).id == head.blob_for(name):
            self.staging.unstage_addition(name)
            return None
        blob_id = self.objects.put_blob(name, contents)
        self.staging.stage_addition(name, blob_id)
        logger.debug("Staged {} as {}", name, blob_id)
        return blob_id

    @requires_repo
    def remove(self, name: str) -> None:
        """Unstage ``name`` and, if HEAD tracks it, stage its removal.

        A tracked file is also deleted from the working tree.
        """
        head = self.head_commit()
        blob_id = head.blob_for(name)
        staged = self.staging.is_staged_for_addition(name)
        if not staged and blob_id is None:
            raise NothingToRemove()
        if staged:
            self.staging.unstage_addition(name)
        if blob_id is not None:
            self.staging.stage_removal(name, blob_id)
            self.tree.delete(name)
            logger.debug("Staged removal of {}", name)

    # -- Commits --

    @requires_repo
    def commit(self, message: str, *, parent2: str | None = None) -> str:
        """Record the staged changes on top of HEAD.

        Args:
            message: Commit message; must be non-empty.
            parent2: Merged-in parent, set only for merge commits.

        Returns:
            The new commit id. HEAD and the current branch point at it.
        """
        if not message:
            raise EmptyCommitMessage()
        if self.staging.is_empty:
            raise NothingToCommit()

        parent = self.head_commit()
        commit = Commit(
            message=message,
            timestamp=self.clock(),
            parent1=parent.id,
            tracked=self.staging.apply(parent.tracked),
        )
        if parent2 is not None:
            commit = commit.with_parent2(parent2)

        commit_id = self.objects.put_commit(commit)
        self.staging.clear()
        self.refs.advance(commit_id)
        return commit_id

    # -- History --

    @requires_repo
    def log(self) -> Iterator[Commit]:
        """Commits from HEAD to the root along the mainline, newest first."""
        return first_parent_history(self.objects, self.refs.head())

    @requires_repo
    def global_log(self) -> list[Commit]:
        """Every stored commit, in id order."""
        return [self.objects.load_commit(c) for c in self.objects.commit_ids()]

    @requires_repo
    def find(self, message: str) -> list[str]:
        """Ids of all commits whose message is exactly ``message``."""
        matches = [c.id for c in self.global_log() if c.message == message]
        if not matches:
            raise NotFound(NO_MATCH_MESSAGE)
        return matches

    @requires_repo
    def status(self) -> Status:
        head = self.head_commit()
        additions = self.staging.additions()
        removals = self.staging.removals()
        on_disk = set(self.tree.names())

        modified: dict[str, str] = {}
        for name, blob_id in head.tracked.items():
            if name in removals or name in additions:
                continue
            if name not in on_disk:
                modified[name] = "deleted"
            elif Blob(name, self.tree.read(name)).id != blob_id:
                modified[name] = "modified"
        for name, blob_id in additions.items():
            if name not in on_disk:
                modified[name] = "deleted"
            elif Blob(name, self.tree.read(name)).id != blob_id:
                modified[name] = "modified"

        untracked = sorted(
            name
            for name in on_disk
            if name not in additions and (not head.tracks(name) or name in removals)
        )
        return Status(
            branches=self.refs.branches(),
            current_branch=self.refs.current_branch(),
            staged=sorted(additions),
            removed=sorted(removals),
            modified=dict(sorted(modified.items())),
            untracked=untracked,
        )

    # -- Checkout --

    @requires_repo
    def checkout_file(self, name: str) -> None:
        """Restore ``name`` from HEAD into the working tree."""
        _checkout.checkout_file(self, name, self.head_commit())

    @requires_repo
    def checkout_file_at(self, commit_id: str, name: str) -> None:
        """Restore ``name`` from the (possibly abbreviated) ``commit_id``."""
        _checkout.checkout_file(self, name, self.objects.get_commit(commit_id))

    @requires_repo
    def checkout_branch(self, name: str) -> None:
        """Switch to branch ``name``, replacing the working tree."""
        if name == self.refs.current_branch():
            raise AlreadyOnBranch()
        if not self.refs.exists(name):
            raise BranchNotFound("No such branch exists.")
        _checkout.checkout_commit(self, self.objects.load_commit(self.refs.tip(name)))
        self.refs.switch_branch(name)

    @requires_repo
    def reset(self, commit_id: str) -> str:
        """Check out ``commit_id`` and move the current branch to it."""
        destination = self.objects.get_commit(commit_id)
        _checkout.checkout_commit(self, destination)
        self.refs.advance(destination.id)
        return destination.id

    # -- Branches --

    @requires_repo
    def branch(self, name: str) -> None:
        """Create branch ``name`` at HEAD."""
        if not name:
            raise ValueError("Branch name is required")
        if self.refs.exists(name):
            raise BranchExists()
        self.refs.set_branch(name, self.refs.head())

    @requires_repo
    def remove_branch(self, name: str) -> None:
        """Delete the pointer ``name``; its commits are kept."""
        if not self.refs.exists(name):
            raise BranchNotFound()
        if name == self.refs.current_branch():
            raise CannotRemoveCurrentBranch()
        self.refs.delete_branch(name)

    @requires_repo
    def merge(self, branch: str) -> MergeResult:
        """Merge ``branch`` into the current branch. See ``kvlet.merge.merge``."""
        return _merge.merge(self, branch)
