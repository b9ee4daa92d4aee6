"""Traversals over the commit DAG.

A commit has at most two parent edges: ``parent1`` (mainline) and
``parent2`` (merged-in). History listing follows only the mainline;
ancestry queries follow both edges. The two walks are kept as separate
functions so one is never used where the other is meant.
"""

from collections import deque
from typing import Iterator

from .objects import Commit, ObjectStore


def first_parent_history(objects: ObjectStore, commit_id: str) -> Iterator[Commit]:
    """Yield commits from ``commit_id`` to the root along ``parent1``.

    The start commit is included. Each call returns a fresh iterator,
    so the walk can be restarted.
    """
    current: str | None = commit_id
    while current is not None:
        commit = objects.load_commit(current)
        yield commit
        current = commit.parent1


def all_ancestors(objects: ObjectStore, commit_id: str) -> Iterator[str]:
    """Yield the ids of ``commit_id`` and every commit reachable from it.

    BFS over both parent edges; each commit is yielded once.
    """
    visited: set[str] = set()
    queue: deque[str] = deque([commit_id])
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        yield current
        for p in objects.load_commit(current).parents:
            if p not in visited:
                queue.append(p)
