"""Core business logic for worktree operations.

Existence checks here are separate queries against live git and filesystem
state with no locking, so two concurrent invocations on the same branch can
race between check and act.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import GwtConfig
from .exceptions import (
    AlreadyExists,
    BranchNotFound,
    BranchSelectionCancelled,
    DirectoryMissing,
    NoDefaultBranch,
    NotFound,
)
from .fs import base_path, cleanup_empty_dirs, ensure_directory, same_path, worktree_path
from .git import GitBackend
from .identity import resolve_identity
from .interactive import Selector
from .models import LocateResult, NavigateTo, ProjectIdentity, SwitchedInPlace, WorktreeEntry

logger = logging.getLogger(__name__)

DEFAULT_BRANCHES = ("main", "master")


class WorktreeManager:
    def __init__(
        self,
        config: GwtConfig,
        git: GitBackend,
        selector: Selector | None = None,
    ):
        self.config = config
        self.git = git
        self.selector = selector

    # identity and paths

    def identity(self) -> ProjectIdentity:
        main = self.git.main_worktree()
        return resolve_identity(self.git.remote_url(), main.name)

    @property
    def base_directory(self) -> Path:
        return base_path(self.config.root, self.identity())

    def paths_for(self, branch: str) -> tuple[Path, Path]:
        identity = self.identity()
        return base_path(self.config.root, identity), worktree_path(self.config.root, identity, branch)

    # queries

    def list_worktrees(self) -> list[WorktreeEntry]:
        return self.git.list_worktrees()

    def find_by_branch(self, branch: str) -> WorktreeEntry | None:
        for entry in self.git.list_worktrees():
            if entry.branch == branch:
                return entry
        return None

    def is_registered(self, path: Path) -> bool:
        return any(same_path(entry.path, path) for entry in self.git.list_worktrees())

    def default_branch_worktree(self) -> Path | None:
        """Worktree bound to ``main``, else ``master``, whose directory exists."""

        entries = self.git.list_worktrees()
        for name in DEFAULT_BRANCHES:
            for entry in entries:
                if entry.branch == name and entry.path.is_dir():
                    return entry.path
        return None

    # operations

    def add(self, branch: str | None = None) -> Path:
        """Create a worktree for ``branch`` and return its path."""

        if not branch:
            branch = self._select("add", self.git.list_branches(include_remote=True))
        base, target = self.paths_for(branch)
        if target.exists():
            raise AlreadyExists(f"worktree directory already exists: {target}")
        ensure_directory(base)
        logger.info("Creating worktree for branch '%s'...", branch)
        self.materialize(target, branch)
        logger.debug("Worktree created: %s", target)
        return target

    def materialize(self, target: Path, branch: str) -> bool:
        """Bind ``target`` to ``branch``; returns False when nothing could be reused.

        A local branch is reused as-is, a branch on the remote gets a local
        tracking branch, anything else becomes a new branch with no upstream.
        """

        if self.git.local_branch_exists(branch):
            logger.debug("Using existing local branch '%s'", branch)
            self.git.worktree_add_existing(target, branch)
            return True
        if self.git.remote_branch_exists(branch):
            logger.debug("Tracking remote branch '%s/%s'", self.git.remote, branch)
            self.git.worktree_add_tracking(target, branch)
            return True
        logger.debug("Creating new branch '%s'", branch)
        self.git.worktree_add_new(target, branch)
        return False

    def remove(self, branch: str | None = None, *, force: bool = False) -> Path | None:
        """Remove the worktree for ``branch``.

        Returns the directory the caller must move to when it is standing in
        the worktree being removed, otherwise ``None``.
        """

        if not branch:
            branch = self._select("remove", self._worktree_branches())
        base, target = self.paths_for(branch)
        if not self.is_registered(target):
            raise NotFound(f"worktree not found: {target}")

        relocation: Path | None = None
        if same_path(self.git.current_directory(), target):
            relocation = self.default_branch_worktree()
            if relocation is None:
                raise NoDefaultBranch(
                    "cannot remove current worktree: no default branch found to switch to"
                )
            logger.info("Moving to default branch before removing current worktree: %s", relocation)

        self.retire(target, base, force=force)
        return relocation

    def retire(self, target: Path, base: Path, *, force: bool = False) -> None:
        logger.info("Removing worktree: %s", target)
        self.git.worktree_remove(target, force=force)
        cleanup_empty_dirs(target.parent, stop=base)
        logger.debug("Worktree removed: %s", target)

    def locate(self, branch: str | None = None) -> LocateResult:
        """Find the worktree for ``branch`` or switch the current one to it."""

        if not branch:
            branch = self._select("move", self.git.list_branches(include_remote=False))
        entry = self.find_by_branch(branch)
        if entry is not None:
            if not entry.path.is_dir():
                raise DirectoryMissing(f"worktree directory not found: {entry.path}")
            return NavigateTo(entry.path)

        if self.git.local_branch_exists(branch) or self.git.remote_branch_exists(branch):
            logger.info("Worktree not found for branch '%s'. Switching to branch instead...", branch)
            self.git.switch(branch)
            return SwitchedInPlace(branch=branch, path=self.git.current_directory())
        raise BranchNotFound(f"branch '{branch}' does not exist")

    # helpers

    def _worktree_branches(self) -> list[str]:
        return [entry.branch for entry in self.git.list_worktrees() if entry.branch]

    def _select(self, action: str, candidates: list[str]) -> str:
        if not candidates:
            raise BranchNotFound("no branches found")
        if self.selector is None:
            raise BranchSelectionCancelled("no branch given and interactive selection is unavailable")
        selected = self.selector.select(action, candidates)
        if not selected:
            raise BranchSelectionCancelled("no branch selected")
        return selected


__all__ = ["WorktreeManager", "DEFAULT_BRANCHES"]
