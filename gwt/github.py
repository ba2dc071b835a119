"""GitHub CLI adapter used to resolve pull requests to branches."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from .exceptions import ExternalLookupFailed

logger = logging.getLogger(__name__)

GH_INSTALL_URL = "https://cli.github.com"


class ReviewHost(Protocol):
    """A code-review host that knows which branch backs a change request."""

    def pr_branch(self, number: int) -> str:
        ...

    def checkout(self, number: int, cwd: Path) -> None:
        ...


class GitHubCli:
    """`ReviewHost` implementation backed by the ``gh`` binary."""

    def __init__(self, binary: str = "gh"):
        self.binary = binary

    def _run(self, args: Sequence[str], *, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
        if shutil.which(self.binary) is None:
            raise ExternalLookupFailed(
                f"GitHub CLI ({self.binary}) is required for pr-checkout. Install it from {GH_INSTALL_URL}"
            )
        command = [self.binary, *args]
        logger.debug("Running command: %s", " ".join(command))
        return subprocess.run(
            command,
            cwd=str(cwd) if cwd else None,
            text=True,
            capture_output=True,
        )

    def pr_branch(self, number: int) -> str:
        result = self._run(
            ["pr", "view", str(number), "--json", "number,headRefName,headRepository,headRepositoryOwner"]
        )
        if result.returncode != 0:
            details = (result.stderr or result.stdout or "").strip()
            raise ExternalLookupFailed(f"failed to fetch PR #{number}: {details}")
        return parse_head_ref(result.stdout, number)

    def checkout(self, number: int, cwd: Path) -> None:
        result = self._run(["pr", "checkout", str(number)], cwd=cwd)
        if result.returncode != 0:
            details = (result.stderr or result.stdout or "").strip()
            raise ExternalLookupFailed(f"gh pr checkout {number} failed: {details}")


def parse_head_ref(payload: str, number: int) -> str:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ExternalLookupFailed(f"unexpected response for PR #{number}") from exc
    branch = data.get("headRefName") if isinstance(data, dict) else None
    if not branch or branch == "null":
        raise ExternalLookupFailed(f"could not determine branch name for PR #{number}")
    return str(branch)


__all__ = ["ReviewHost", "GitHubCli", "parse_head_ref"]
