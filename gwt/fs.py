"""Filesystem helpers for gwt."""

from __future__ import annotations

import os
from pathlib import Path

from .config import expand_root
from .models import ProjectIdentity


def base_path(root: str | Path, identity: ProjectIdentity) -> Path:
    """Directory holding every worktree of one project."""

    resolved_root = expand_root(str(root))
    return resolved_root / identity.slug


def worktree_path(root: str | Path, identity: ProjectIdentity, branch: str) -> Path:
    return base_path(root, identity) / branch


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def same_path(left: Path, right: Path) -> bool:
    return os.path.realpath(left) == os.path.realpath(right)


def cleanup_empty_dirs(path: Path, stop: Path) -> None:
    """Remove empty parents of ``path`` up to, but excluding, ``stop``."""

    resolved_path = path.resolve()
    resolved_stop = stop.resolve()
    if resolved_path == resolved_stop or resolved_stop not in resolved_path.parents:
        return
    current = resolved_path
    while current != resolved_stop:
        if current.exists():
            try:
                current.rmdir()
            except OSError:
                break
        current = current.parent


__all__ = ["base_path", "worktree_path", "ensure_directory", "same_path", "cleanup_empty_dirs"]
