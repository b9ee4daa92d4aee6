"""kvlet error types.

``KvletError`` and its subclasses are user/precondition failures: the
operation was refused before any state was written and the message is
meant for the user. ``SplitPointError`` is an internal invariant
violation and deliberately sits outside that hierarchy.
"""


class KvletError(Exception):
    """Base class for operations refused on user input or repository state."""

    message = "Operation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    @property
    def msg(self) -> str:
        return str(self.args[0])


class NotInitialized(KvletError):
    message = "Not in an initialized kvlet directory."


class AlreadyInitialized(KvletError):
    message = "A kvlet version-control system already exists in the current directory."


class NotFound(KvletError):
    """Raised when a named object, file, commit or branch is absent."""

    message = "Not found."


class FileNotFound(NotFound):
    message = "File does not exist."


class FileNotInCommit(NotFound):
    message = "File does not exist in that commit."


class CommitNotFound(NotFound):
    message = "No commit with that id exists."


class BranchNotFound(NotFound):
    message = "A branch with that name does not exist."


class AmbiguousCommitId(KvletError):
    """Raised when an abbreviated commit id matches more than one commit.

    Attributes:
        prefix: The abbreviated id that was looked up.
        matches: The sorted full ids it matched.
    """

    def __init__(self, prefix: str, matches: list[str]) -> None:
        self.prefix = prefix
        self.matches = sorted(matches)
        super().__init__(
            f"Commit id {prefix!r} is ambiguous; it matches {len(self.matches)} commits."
        )


class BranchExists(KvletError):
    message = "A branch with that name already exists."


class NothingToCommit(KvletError):
    message = "No changes added to the commit."


class EmptyCommitMessage(KvletError):
    message = "Please enter a commit message."


class NothingToRemove(KvletError):
    message = "No reason to remove the file."


class CannotRemoveCurrentBranch(KvletError):
    message = "Cannot remove the current branch."


class AlreadyOnBranch(KvletError):
    message = "No need to checkout the current branch."


class UncommittedChanges(KvletError):
    message = "You have uncommitted changes."


class MergeWithSelf(KvletError):
    message = "Cannot merge a branch with itself."


class UntrackedFileInTheWay(KvletError):
    """Raised when a checkout or merge would overwrite untracked files.

    Attributes:
        names: The untracked working-tree files that block the operation.
    """

    message = "There is an untracked file in the way; delete it, or add and commit it first."

    def __init__(self, names: set[str] | None = None) -> None:
        self.names = frozenset(names or ())
        super().__init__()


class SplitPointError(RuntimeError):
    """Raised when two commit tips share no ancestor.

    Commits are only ever created on top of an existing commit, so this
    means the stored history is corrupt or disconnected.
    """

    def __init__(self, current: str, given: str) -> None:
        self.current = current
        self.given = given
        super().__init__(f"No split point found between {current} and {given}")
