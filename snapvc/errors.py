"""snapvc error types.

Every ``SnapvcError`` is a reportable failure: its message is the single
line shown to the user and nothing has been mutated when it is raised.
``IntegrityError`` is not one of them; it aborts the invocation.
"""


class SnapvcError(Exception):
    """Base class for failures reported to the user."""

    default_message = "snapvc error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NotInitialized(SnapvcError):
    default_message = "Not in an initialized snapvc directory."


class AlreadyInitialized(SnapvcError):
    default_message = (
        "A snapvc version-control system already exists in the current directory."
    )


class FileDoesNotExist(SnapvcError):
    """Raised when a working-directory file named by the user is missing.

    Attributes:
        filename: The missing file.
    """

    default_message = "File does not exist."

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__()


class EmptyMessage(SnapvcError):
    default_message = "Please enter a commit message."


class NothingToCommit(SnapvcError):
    default_message = "No changes added to the commit."


class NothingToRemove(SnapvcError):
    default_message = "No reason to remove the file."


class NotFound(SnapvcError):
    """Raised when a commit id, prefix or blob id matches nothing."""

    default_message = "No commit with that id exists."

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message)


class AmbiguousId(SnapvcError):
    """Raised when a commit id prefix matches more than one commit.

    Attributes:
        prefix: The prefix that was given.
        candidates: The matching commit ids, sorted.
    """

    default_message = "Commit id prefix is ambiguous."

    def __init__(self, prefix: str, candidates: list[str]) -> None:
        self.prefix = prefix
        self.candidates = sorted(candidates)
        super().__init__(
            f"Commit id prefix {prefix!r} is ambiguous "
            f"({len(self.candidates)} matches)."
        )


class FileNotInCommit(SnapvcError):
    default_message = "File does not exist in that commit."


class NoCommitWithMessage(SnapvcError):
    default_message = "Found no commit with that message."


class BranchExists(SnapvcError):
    default_message = "A branch with that name already exists."


class NoSuchBranch(SnapvcError):
    default_message = "A branch with that name does not exist."


class CannotRemoveCurrent(SnapvcError):
    default_message = "Cannot remove the current branch."


class AlreadyOnBranch(SnapvcError):
    default_message = "No need to checkout the current branch."


class MergeWithSelf(SnapvcError):
    default_message = "Cannot merge a branch with itself."


class UncommittedChanges(SnapvcError):
    default_message = "You have uncommitted changes."


class UntrackedFileConflict(SnapvcError):
    """Raised when a checkout would overwrite an untracked working file.

    Attributes:
        filenames: The files in the way, sorted.
    """

    default_message = (
        "There is an untracked file in the way; delete it or add it first."
    )

    def __init__(self, filenames: set[str]) -> None:
        self.filenames = sorted(filenames)
        super().__init__()


class IntegrityError(Exception):
    """Raised when persisted state is corrupt or a commit fails verification.

    Unrecoverable: the command layer lets it propagate.
    """
