"""Check out a GitHub pull request into its own worktree."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .exceptions import InvalidID
from .fs import ensure_directory
from .github import ReviewHost
from .worktrees import WorktreeManager

logger = logging.getLogger(__name__)

_PR_ID_RE = re.compile(r"^[0-9]+$")


def parse_pr_id(change_id: str | None) -> int:
    value = (change_id or "").strip()
    if not value:
        raise InvalidID("PR ID is required. Usage: gwt pr-checkout <PR_ID>")
    if not _PR_ID_RE.match(value):
        raise InvalidID("PR ID must be a number")
    return int(value)


class PullRequestCheckout:
    def __init__(self, manager: WorktreeManager, host: ReviewHost):
        self.manager = manager
        self.host = host

    def checkout(self, change_id: str) -> Path:
        number = parse_pr_id(change_id)
        logger.info("Fetching PR #%d information...", number)
        branch = self.host.pr_branch(number)
        logger.info("PR #%d branch: %s", number, branch)

        base, target = self.manager.paths_for(branch)
        if target.exists():
            logger.info("Worktree already exists for branch '%s', moving to it...", branch)
            return target

        ensure_directory(base)
        logger.info("Fetching latest changes...")
        self.manager.git.fetch()

        logger.info("Creating worktree for PR #%d (branch: %s)...", number, branch)
        if not self.manager.materialize(target, branch):
            # Fork PRs have no branch on origin; let the host populate the new branch.
            logger.info("Branch not found in origin, checking out from PR...")
            self.host.checkout(number, cwd=target)
        logger.info("PR #%d checked out to worktree: %s", number, target)
        return target


__all__ = ["PullRequestCheckout", "parse_pr_id"]
