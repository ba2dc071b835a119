"""Custom error hierarchy for gwt.

Every failure the engine can report has its own class so callers (the CLI in
particular) can map each kind to an exit status without parsing messages.
"""

from __future__ import annotations

from typing import Sequence


class GwtError(RuntimeError):
    """Base error for the CLI."""

    exit_code = 1


class ConfigError(GwtError):
    """Raised when required configuration is missing or invalid."""

    exit_code = 2


class NotAGitRepository(GwtError):
    """Raised when the working directory is not inside a git repository."""

    exit_code = 2


class GitCommandError(GwtError):
    """Raised when an underlying git command fails."""

    def __init__(
        self,
        command: list[str],
        returncode: int,
        *,
        stdout: str | None = None,
        stderr: str | None = None,
    ):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        message = f"git command failed (exit {returncode}): {' '.join(command)}"
        details = "\n".join(
            section
            for section in (self.stdout.strip(), self.stderr.strip())
            if section
        )
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)


class AlreadyExists(GwtError):
    """Raised when a worktree directory is already present on disk."""


class NotFound(GwtError):
    """Raised when no worktree is registered at the expected location."""

    exit_code = 3


class BranchNotFound(NotFound):
    """Raised when a branch exists neither in a worktree nor as a ref."""


class DirectoryMissing(NotFound):
    """Raised when the registry points at a directory that no longer exists."""


class NoDefaultBranch(GwtError):
    """Raised when neither main, master nor origin/HEAD can be resolved."""


class BranchSelectionCancelled(GwtError):
    """Raised when interactive selection returns nothing."""

    exit_code = 130


class InvalidID(GwtError):
    """Raised when a pull request identifier is not a number."""

    exit_code = 2


class ExternalLookupFailed(GwtError):
    """Raised when the code-review host cannot resolve a pull request."""


class PartialBatchFailure(GwtError):
    """Raised after a prune run in which some removals failed."""

    def __init__(self, removed: int, failed: Sequence[str]):
        self.removed = removed
        self.failed = list(failed)
        super().__init__(
            f"removed {removed} worktree(s); failed to remove {len(self.failed)}: "
            + ", ".join(self.failed)
        )

    @property
    def count(self) -> int:
        return len(self.failed)


__all__ = [
    "GwtError",
    "ConfigError",
    "NotAGitRepository",
    "GitCommandError",
    "AlreadyExists",
    "NotFound",
    "BranchNotFound",
    "DirectoryMissing",
    "NoDefaultBranch",
    "BranchSelectionCancelled",
    "InvalidID",
    "ExternalLookupFailed",
    "PartialBatchFailure",
]
