"""Shared dataclasses used throughout the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .exceptions import PartialBatchFailure


@dataclass(frozen=True)
class ProjectIdentity:
    """Canonical host/owner/name key derived from the origin remote."""

    host: str
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return "/".join(part for part in (self.host, self.owner, self.name) if part)


@dataclass(slots=True)
class WorktreeEntry:
    path: Path
    branch: str | None
    head: str | None = None
    is_bare: bool = False
    is_locked: bool = False
    is_prunable: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_detached(self) -> bool:
        return self.branch is None and not self.is_bare

    @property
    def status(self) -> str:
        if self.is_locked:
            return "locked"
        if self.is_prunable:
            return "prunable"
        return "active"


@dataclass(slots=True)
class BranchRef:
    """Resolved state of a branch, computed on demand and never stored."""

    name: str
    exists_locally: bool
    exists_on_remote: bool
    tracking_ref: str | None = None
    is_merged: bool = False


@dataclass(frozen=True)
class NavigateTo:
    """The branch already has a worktree; the caller should move to it."""

    path: Path


@dataclass(frozen=True)
class SwitchedInPlace:
    """No worktree bound the branch, so the current worktree switched to it."""

    branch: str
    path: Path


LocateResult = Union[NavigateTo, SwitchedInPlace]


@dataclass(frozen=True)
class PruneCandidate:
    branch: str
    path: Path
    reason: str


@dataclass(slots=True)
class PruneSummary:
    default_branch: str
    candidates: list[PruneCandidate] = field(default_factory=list)
    removed: int = 0
    failures: list[str] = field(default_factory=list)
    cancelled: bool = False

    def raise_for_failures(self) -> None:
        if self.failures:
            raise PartialBatchFailure(self.removed, self.failures)


__all__ = [
    "ProjectIdentity",
    "WorktreeEntry",
    "BranchRef",
    "NavigateTo",
    "SwitchedInPlace",
    "LocateResult",
    "PruneCandidate",
    "PruneSummary",
]
