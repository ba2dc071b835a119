"""Typed wrapper around the git CLI.

`GitBackend` is the only place that knows how git formats its output. The
policy code in `worktrees`, `prune` and `pr` works with `WorktreeEntry`
records and booleans, which keeps it testable with an in-memory fake.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from .exceptions import GitCommandError, NotAGitRepository
from .models import WorktreeEntry

logger = logging.getLogger(__name__)

REMOTE = "origin"
HEADS_PREFIX = "refs/heads/"


def run_git(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command and optionally raise on failure."""

    command = ["git", *args]
    logger.debug("Running command: %s", " ".join(command))
    result = subprocess.run(
        command,
        cwd=str(cwd) if cwd else None,
        text=True,
        capture_output=True,
    )
    if check and result.returncode != 0:
        raise GitCommandError(command, result.returncode, stdout=result.stdout, stderr=result.stderr)
    return result


class GitBackend:
    """Structured access to one repository, rooted at ``cwd``."""

    def __init__(self, cwd: Path | None = None, remote: str = REMOTE):
        self.cwd = cwd
        self.remote = remote

    def _git(self, *args: str, check: bool = True, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
        return run_git(args, cwd=cwd or self.cwd, check=check)

    def _succeeds(self, *args: str) -> bool:
        return self._git(*args, check=False).returncode == 0

    # repository

    def ensure_repository(self) -> None:
        if not self._succeeds("rev-parse", "--git-dir"):
            raise NotAGitRepository("not in a git repository")

    def current_directory(self) -> Path:
        return self.cwd or Path.cwd()

    def main_worktree(self) -> Path:
        """Path of the primary checkout; git always lists it first."""

        entries = self.list_worktrees()
        if not entries:
            raise NotAGitRepository("git reported no worktrees for this repository")
        return entries[0].path

    def remote_url(self) -> str | None:
        result = self._git(
            "config", "--get", f"remote.{self.remote}.url",
            check=False,
            cwd=self.main_worktree(),
        )
        url = result.stdout.strip()
        return url or None

    # worktree registry

    def list_worktrees(self) -> list[WorktreeEntry]:
        output = self._git("worktree", "list", "--porcelain")
        return parse_worktree_porcelain(output.stdout)

    def worktree_add_existing(self, target: Path, branch: str) -> None:
        self._git("worktree", "add", str(target), branch)

    def worktree_add_tracking(self, target: Path, branch: str) -> None:
        self._git("worktree", "add", str(target), "-b", branch, f"{self.remote}/{branch}")

    def worktree_add_new(self, target: Path, branch: str) -> None:
        self._git("worktree", "add", str(target), "-b", branch)

    def worktree_remove(self, target: Path, *, force: bool = False) -> None:
        args = ["worktree", "remove"]
        if force:
            args.append("--force")
        args.append(str(target))
        self._git(*args)

    # branches

    def local_branch_exists(self, branch: str) -> bool:
        return self._succeeds("show-ref", "--verify", "--quiet", f"{HEADS_PREFIX}{branch}")

    def remote_branch_exists(self, branch: str) -> bool:
        return self._succeeds("show-ref", "--verify", "--quiet", f"refs/remotes/{self.remote}/{branch}")

    def list_branches(self, *, include_remote: bool = True) -> list[str]:
        args = ["branch", "--format=%(refname:short)"]
        if include_remote:
            args.insert(1, "-a")
        output = self._git(*args)
        return normalize_branch_listing(output.stdout.splitlines(), remote=self.remote)

    def upstream(self, branch: str) -> str | None:
        result = self._git(
            "for-each-ref", "--format=%(upstream:short)", f"{HEADS_PREFIX}{branch}",
            check=False,
        )
        value = result.stdout.strip()
        return value or None

    def merged_branches(self, target: str) -> set[str]:
        output = self._git("branch", "--merged", target, "--format=%(refname:short)")
        return {line.strip() for line in output.stdout.splitlines() if line.strip()}

    def remote_default_branch(self) -> str | None:
        result = self._git("symbolic-ref", f"refs/remotes/{self.remote}/HEAD", check=False)
        if result.returncode != 0:
            return None
        prefix = f"refs/remotes/{self.remote}/"
        ref = result.stdout.strip()
        if not ref.startswith(prefix):
            return None
        return ref[len(prefix):] or None

    def fetch(self, *, prune: bool = False) -> None:
        if prune:
            self._git("fetch", "--prune")
        else:
            self._git("fetch", self.remote)

    def switch(self, branch: str) -> None:
        self._git("switch", branch)


def parse_worktree_porcelain(text: str) -> list[WorktreeEntry]:
    entries: list[WorktreeEntry] = []
    current: dict[str, str | bool] = {}
    for line in text.splitlines() + [""]:
        if not line.strip():
            if current.get("worktree"):
                branch_value = current.get("branch")
                entries.append(
                    WorktreeEntry(
                        path=Path(str(current["worktree"])),
                        branch=_sanitize_branch(str(branch_value)) if branch_value else None,
                        head=str(current["HEAD"]) if current.get("HEAD") else None,
                        is_bare=bool(current.get("bare")),
                        is_locked=bool(current.get("locked")),
                        is_prunable=bool(current.get("prunable")),
                    )
                )
            current = {}
            continue
        key, _, value = line.partition(" ")
        if key in {"bare", "detached", "locked", "prunable"}:
            current[key] = True
        else:
            current[key] = value.strip()
    return entries


def normalize_branch_listing(lines: Sequence[str], *, remote: str = REMOTE) -> list[str]:
    """Strip the remote prefix, drop HEAD pointers and de-duplicate."""

    names: set[str] = set()
    remote_prefix = f"{remote}/"
    for raw in lines:
        line = raw.strip()
        if not line or line == "HEAD" or line == remote or "->" in line:
            continue
        if line.startswith("remotes/"):
            line = line[len("remotes/"):]
        if line.startswith(remote_prefix):
            line = line[len(remote_prefix):]
        if line == "HEAD":
            continue
        names.add(line)
    return sorted(names)


def _sanitize_branch(value: str) -> str:
    stripped = value.strip()
    if stripped.startswith(HEADS_PREFIX):
        return stripped[len(HEADS_PREFIX):]
    return stripped


__all__ = ["run_git", "GitBackend", "parse_worktree_porcelain", "normalize_branch_listing"]
