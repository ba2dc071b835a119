"""Load runtime configuration from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .exceptions import ConfigError

ROOT_ENV = "GWT_ROOT_DIR"
DEBUG_ENV = "GWT_DEBUG"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GwtConfig:
    """Validated settings passed into the engine at construction."""

    root: Path
    debug: bool = False


def load_config(
    root_override: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> GwtConfig:
    env = os.environ if environ is None else environ
    raw_root = str(root_override) if root_override else env.get(ROOT_ENV, "")
    root = expand_root(raw_root)
    debug = env.get(DEBUG_ENV, "").strip().lower() in _TRUTHY
    return GwtConfig(root=root, debug=debug)


def expand_root(raw: str) -> Path:
    """Expand a leading ``~`` and reject an empty root."""

    raw = raw.strip()
    if not raw:
        raise ConfigError(
            f"{ROOT_ENV} is not set. Please set it to your desired root directory:\n"
            f"  export {ROOT_ENV}=$HOME/.gwt"
        )
    return Path(raw).expanduser()


__all__ = ["GwtConfig", "load_config", "expand_root", "ROOT_ENV", "DEBUG_ENV"]
