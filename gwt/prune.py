"""Find and remove worktrees whose branches are merged or gone upstream."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from .exceptions import GitCommandError, NoDefaultBranch
from .models import BranchRef, PruneCandidate, PruneSummary
from .worktrees import DEFAULT_BRANCHES, WorktreeManager

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[Sequence[PruneCandidate]], bool]


class Reconciler:
    def __init__(self, manager: WorktreeManager):
        self.manager = manager
        self.git = manager.git

    def resolve_default_branch(self) -> str:
        for name in DEFAULT_BRANCHES:
            if self.git.local_branch_exists(name):
                return name
        remote_default = self.git.remote_default_branch()
        if not remote_default:
            raise NoDefaultBranch("cannot determine default branch")
        return remote_default

    def find_candidates(self, default_branch: str) -> list[PruneCandidate]:
        """Classify every worktree branch; merged OR upstream-deleted is an orphan."""

        merged = self.git.merged_branches(default_branch)
        protected = {*DEFAULT_BRANCHES, default_branch}
        candidates: list[PruneCandidate] = []
        entries = self.git.list_worktrees()
        # The primary checkout is listed first and can never be removed as a worktree.
        for entry in entries[1:]:
            branch = entry.branch
            if entry.is_bare or not branch or branch in protected:
                continue
            reason = orphan_reason(self.branch_state(branch, merged), default_branch)
            if reason:
                logger.info("Found orphaned worktree: %s (%s)", branch, reason)
                candidates.append(PruneCandidate(branch=branch, path=entry.path, reason=reason))
        return candidates

    def branch_state(self, branch: str, merged: set[str]) -> BranchRef:
        return BranchRef(
            name=branch,
            exists_locally=self.git.local_branch_exists(branch),
            exists_on_remote=self.git.remote_branch_exists(branch),
            tracking_ref=self.git.upstream(branch),
            is_merged=branch in merged,
        )

    def reconcile(self, confirm: ConfirmCallback) -> PruneSummary:
        logger.info("Fetching remote changes and pruning...")
        self.git.fetch(prune=True)
        default_branch = self.resolve_default_branch()
        summary = PruneSummary(default_branch=default_branch)
        summary.candidates = self.find_candidates(default_branch)
        if not summary.candidates:
            logger.info("No orphaned worktrees found")
            return summary
        if not confirm(summary.candidates):
            logger.debug("Cancelled")
            summary.cancelled = True
            return summary

        base = self.manager.base_directory
        for candidate in summary.candidates:
            if not candidate.path.is_dir():
                logger.warning("Skipping %s: directory not found: %s", candidate.branch, candidate.path)
                continue
            try:
                self.manager.retire(candidate.path, base)
            except GitCommandError as exc:
                logger.error("Failed to remove worktree: %s (%s)", candidate.branch, exc.stderr.strip() or exc)
                summary.failures.append(candidate.branch)
                continue
            summary.removed += 1
        logger.debug("Removed %d worktree(s)", summary.removed)
        return summary


def orphan_reason(ref: BranchRef, default_branch: str) -> str | None:
    if ref.is_merged:
        return f"merged into {default_branch}"
    # Branches that never had an upstream may be deliberate local-only work.
    if not ref.exists_on_remote and ref.tracking_ref:
        return "remote branch deleted"
    return None


__all__ = ["Reconciler", "ConfirmCallback", "orphan_reason"]
