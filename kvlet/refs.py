"""Branch pointers, HEAD and the current branch name."""

import pickle

from loguru import logger

from .errors import BranchNotFound, NotInitialized
from .kv.base import KVStore

BRANCH_HEAD = "__branch_head__%s"
HEAD = "__head__"
CURRENT_BRANCH = "__current_branch__"

DEFAULT_BRANCH = "main"


class BranchRegistry:
    """Named commit pointers stored in the KV store."""

    def __init__(self, store: KVStore) -> None:
        self.store = store

    @property
    def initialized(self) -> bool:
        return HEAD in self.store

    def head(self) -> str:
        """The commit id HEAD points at."""
        head_bytes = self.store.get(HEAD)
        if head_bytes is None:
            raise NotInitialized()
        return pickle.loads(head_bytes)

    def current_branch(self) -> str:
        branch_bytes = self.store.get(CURRENT_BRANCH)
        if branch_bytes is None:
            raise NotInitialized()
        return pickle.loads(branch_bytes)

    def branches(self) -> list[str]:
        """List all branch names, sorted."""
        return [b for b in self.store.scan(BRANCH_HEAD % "") if b]

    def exists(self, name: str) -> bool:
        return (BRANCH_HEAD % name) in self.store

    def tip(self, name: str) -> str:
        """The commit id branch ``name`` points at."""
        tip_bytes = self.store.get(BRANCH_HEAD % name)
        if tip_bytes is None:
            raise BranchNotFound()
        return pickle.loads(tip_bytes)

    def set_branch(self, name: str, commit_id: str) -> None:
        self.store.set(BRANCH_HEAD % name, pickle.dumps(commit_id))

    def delete_branch(self, name: str) -> None:
        self.store.remove(BRANCH_HEAD % name)

    def move_head(self, commit_id: str) -> None:
        self.store.set(HEAD, pickle.dumps(commit_id))
        logger.debug("HEAD -> {}", commit_id)

    def switch_branch(self, name: str) -> None:
        self.store.set(CURRENT_BRANCH, pickle.dumps(name))
        logger.debug("Current branch -> {}", name)

    def advance(self, commit_id: str) -> None:
        """Move HEAD and the current branch to ``commit_id`` together."""
        branch = self.current_branch()
        self.store.set_many(
            **{
                HEAD: pickle.dumps(commit_id),
                BRANCH_HEAD % branch: pickle.dumps(commit_id),
            }
        )
        logger.debug("{} and HEAD -> {}", branch, commit_id)

    def initialize(self, commit_id: str, branch: str = DEFAULT_BRANCH) -> None:
        self.store.set_many(
            **{
                HEAD: pickle.dumps(commit_id),
                CURRENT_BRANCH: pickle.dumps(branch),
                BRANCH_HEAD % branch: pickle.dumps(commit_id),
            }
        )
