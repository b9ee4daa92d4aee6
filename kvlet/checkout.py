"""Working-tree sync: materialize files and whole commits."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .errors import FileNotInCommit, UntrackedFileInTheWay
from .objects import Commit

if TYPE_CHECKING:
    from .repository import Repository


def untracked_files(repo: Repository) -> set[str]:
    """Working-tree files that HEAD's commit does not track."""
    head = repo.head_commit()
    return {name for name in repo.tree.names() if not head.tracks(name)}


def blocking_untracked(repo: Repository, destination: Commit) -> set[str]:
    """Untracked files that writing ``destination`` would overwrite."""
    return {name for name in untracked_files(repo) if destination.tracks(name)}


def checkout_file(repo: Repository, name: str, commit: Commit) -> None:
    """Overwrite the working copy of ``name`` with its version in ``commit``.

    Staging is left untouched.
    """
    blob_id = commit.blob_for(name)
    if blob_id is None:
        raise FileNotInCommit()
    repo.tree.write(name, repo.objects.get_blob_contents(blob_id))
    logger.debug("Checked out {} from {}", name, commit.short_id)


def checkout_commit(repo: Repository, destination: Commit) -> None:
    """Replace the working tree with ``destination`` and move HEAD to it.

    Refuses before touching anything if an untracked file would be
    overwritten. Otherwise every plain file is deleted, the
    destination's files are written, HEAD moves and staging is cleared.
    """
    blocked = blocking_untracked(repo, destination)
    if blocked:
        raise UntrackedFileInTheWay(blocked)

    contents = {
        name: repo.objects.get_blob_contents(blob_id)
        for name, blob_id in destination.tracked.items()
    }
    for name in repo.tree.names():
        repo.tree.delete(name)
    for name, data in sorted(contents.items()):
        repo.tree.write(name, data)

    repo.refs.move_head(destination.id)
    repo.staging.clear()
    logger.debug(
        "Checked out commit {} ({} files)", destination.short_id, len(contents)
    )
