"""Backend factory and repository construction."""

import time
from pathlib import Path
from typing import Callable, Literal

from .errors import NotInitialized
from .kv.base import KVStore
from .kv.disk import ONE_GB
from .repository import Repository

DEFAULT_REPO_DIR = ".kvlet"


def store(
    storage: Literal["memory", "disk"] = "memory",
    *,
    path: str | Path | None = None,
    size_limit: int = ONE_GB,
) -> KVStore:
    """Create a KV backend.

    Args:
        storage: ``"memory"`` (default) or ``"disk"``.
        path: Required when ``storage="disk"``. Directory for the
            diskcache database.
        size_limit: Size limit for the disk backend.

    Returns:
        A ``KVStore`` instance.
    """
    if storage == "memory":
        from .kv.memory import Memory

        return Memory()
    if storage == "disk":
        if path is None:
            raise ValueError("path is required when storage='disk'")
        from .kv.disk import Disk

        return Disk(str(path), size_limit=size_limit)
    raise ValueError(f"Unknown storage: {storage!r}")


def open_repository(
    work_dir: str | Path = ".",
    storage: Literal["memory", "disk"] = "disk",
    *,
    repo_dir: str = DEFAULT_REPO_DIR,
    clock: Callable[[], float] = time.time,
    create: bool = True,
) -> Repository:
    """Open the repository rooted at ``work_dir``.

    With disk storage the objects, staging index and refs live in
    ``work_dir / repo_dir``. The repository may still need ``init()``.

    Raises:
        NotInitialized: ``create`` is false and ``repo_dir`` does not exist.
    """
    work_dir = Path(work_dir)
    if storage == "disk" and not create and not (work_dir / repo_dir).is_dir():
        raise NotInitialized()
    backend = store(storage, path=work_dir / repo_dir if storage == "disk" else None)
    return Repository(work_dir, backend, clock=clock)
