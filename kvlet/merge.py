"""Three-way merge between two branch tips."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from .checkout import blocking_untracked
from .errors import (BranchNotFound, MergeWithSelf, SplitPointError, UncommittedChanges,
                     UntrackedFileInTheWay)
from .graph import all_ancestors, first_parent_history
from .objects import Commit, ObjectStore

if TYPE_CHECKING:
    from .repository import Repository

CONFLICT_START = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_END = b">>>>>>>\n"

ANCESTOR_MESSAGE = "Given branch is an ancestor of the current branch."
FAST_FORWARD_MESSAGE = "Current branch fast-forwarded."
CONFLICT_MESSAGE = "Encountered a merge conflict."


class Action(Enum):
    """What a merge does to one file."""

    TAKE_GIVEN = "take_given"
    KEEP_CURRENT = "keep_current"
    REMOVE = "remove"
    CONFLICT = "conflict"


RULE_ACTIONS: dict[int, Action] = {
    1: Action.TAKE_GIVEN,  # added only in given
    2: Action.KEEP_CURRENT,  # added only in current
    3: Action.TAKE_GIVEN,  # modified only in given
    4: Action.KEEP_CURRENT,  # modified only in current
    5: Action.REMOVE,  # removed in given, untouched in current
    6: Action.KEEP_CURRENT,  # removed in current, untouched in given
    7: Action.KEEP_CURRENT,  # same result on both sides
    8: Action.CONFLICT,
}


@dataclass(frozen=True)
class MergeResult:
    """Result of a merge operation."""

    strategy: str  # "no_op", "fast_forward", "three_way"
    commit: str
    conflicts: tuple[str, ...]
    message: str | None

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


def find_split_point(objects: ObjectStore, current: Commit, given: Commit) -> Commit:
    """Find the merge base for ``current`` (A) and ``given`` (B).

    Collects every ancestor of A over both parent edges, then walks B
    along its mainline and returns the first commit in that set. B's
    merged-in parent is preferred when it is itself an ancestor of A.

    The result is a common ancestor, not necessarily the lowest one
    when either side has more than one level of merges behind it.

    Raises:
        SplitPointError: The tips share no ancestor.
    """
    if current.id == given.id:
        return current

    ancestors = set(all_ancestors(objects, current.id))
    if current.parent2 is not None:
        ancestors.add(current.parent2)

    if given.parent2 is not None and given.parent2 in ancestors:
        return objects.load_commit(given.parent2)

    for commit in first_parent_history(objects, given.id):
        if commit.id in ancestors:
            return commit

    raise SplitPointError(current.id, given.id)


def classify(split: str | None, current: str | None, given: str | None) -> int:
    """Pick the decision rule for one file from its three blob ids.

    ``None`` means the file is not tracked on that side. Rules are
    tried in order and the first match wins.
    """
    in_split = split is not None
    in_current = current is not None
    in_given = given is not None
    split_current_diff = split != current
    split_given_diff = split != given
    given_current_diff = given != current

    if not in_split and not in_current and in_given:
        return 1
    if not in_split and in_current and not in_given:
        return 2
    if in_split and in_current and in_given and not split_current_diff and split_given_diff:
        return 3
    if in_split and in_current and in_given and not split_given_diff and split_current_diff:
        return 4
    if in_split and not split_current_diff and not in_given:
        return 5
    if in_split and not split_given_diff and not in_current:
        return 6
    if not given_current_diff:
        return 7
    return 8


def conflict_contents(current: bytes | None, given: bytes | None) -> bytes:
    """Frame both sides of a conflicting file with markers."""
    return (
        CONFLICT_START
        + (current or b"")
        + CONFLICT_SEPARATOR
        + (given or b"")
        + CONFLICT_END
    )


def merge(repo: Repository, branch: str) -> MergeResult:
    """Merge ``branch`` into the current branch.

    Guards run first and refuse the merge without side effects. If the
    given branch is already contained in the current one nothing
    happens; if the current branch is contained in the given one it is
    a branch checkout. Otherwise every file is resolved through the
    decision table and the result is committed with both tips as
    parents. Conflicted files are committed with markers and reported
    in the result.
    """
    current_branch = repo.refs.current_branch()
    if not repo.staging.is_empty:
        raise UncommittedChanges()
    if branch == current_branch:
        raise MergeWithSelf()
    if not repo.refs.exists(branch):
        raise BranchNotFound()

    objects = repo.objects
    current = repo.head_commit()
    given = objects.load_commit(repo.refs.tip(branch))

    blocked = blocking_untracked(repo, given)
    if blocked:
        raise UntrackedFileInTheWay(blocked)

    split = find_split_point(objects, current, given)
    logger.debug(
        "Split point of {} and {}: {}", current.short_id, given.short_id, split.short_id
    )

    if split.id == given.id:
        logger.info(ANCESTOR_MESSAGE)
        return MergeResult("no_op", current.id, (), ANCESTOR_MESSAGE)

    if split.id == current.id:
        repo.checkout_branch(branch)
        logger.info(FAST_FORWARD_MESSAGE)
        return MergeResult("fast_forward", given.id, (), FAST_FORWARD_MESSAGE)

    conflicts: list[str] = []
    names = set(split.tracked) | set(current.tracked) | set(given.tracked)
    for name in sorted(names):
        current_blob = current.blob_for(name)
        given_blob = given.blob_for(name)
        rule = classify(split.blob_for(name), current_blob, given_blob)
        action = RULE_ACTIONS[rule]
        logger.debug("Merge rule {} for {}: {}", rule, name, action.value)

        if action is Action.TAKE_GIVEN:
            repo.tree.write(name, objects.get_blob_contents(given_blob))
            repo.add(name)
        elif action is Action.REMOVE:
            repo.remove(name)
        elif action is Action.CONFLICT:
            repo.tree.write(
                name,
                conflict_contents(
                    objects.get_blob_contents(current_blob) if current_blob else None,
                    objects.get_blob_contents(given_blob) if given_blob else None,
                ),
            )
            repo.add(name)
            conflicts.append(name)

    commit_id = repo.commit(
        f"Merged {branch} into {current_branch}.", parent2=given.id
    )
    if conflicts:
        logger.info(CONFLICT_MESSAGE)
        return MergeResult("three_way", commit_id, tuple(conflicts), CONFLICT_MESSAGE)
    return MergeResult("three_way", commit_id, (), None)
