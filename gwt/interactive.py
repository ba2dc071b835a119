"""Interactive prompt helpers built on InquirerPy."""

from __future__ import annotations

import sys
from typing import Iterable, Protocol, Sequence

from InquirerPy import inquirer
from InquirerPy.base.control import Choice

from .exceptions import BranchSelectionCancelled, ConfigError


class Selector(Protocol):
    """Pick zero or one value from an ordered list of candidates."""

    def select(self, prompt: str, candidates: Sequence[str]) -> str | None:
        ...


def _ensure_tty() -> None:
    if not sys.stdin.isatty():
        raise ConfigError(
            "Interactive mode requires a TTY. Pass the branch name to run non-interactively."
        )


class FuzzySelector:
    """`Selector` backed by an InquirerPy fuzzy prompt."""

    def select(self, prompt: str, candidates: Sequence[str]) -> str | None:
        _ensure_tty()
        choices = build_choices(candidates)
        if not choices:
            return None
        try:
            selected = inquirer.fuzzy(
                message=f"Select branch to {prompt}:",
                choices=choices,
                mandatory=False,
            ).execute()
        except KeyboardInterrupt as exc:  # pragma: no cover - user cancel
            raise BranchSelectionCancelled("no branch selected") from exc
        return str(selected) if selected else None


def confirm(message: str, default: bool = False) -> bool:
    _ensure_tty()
    try:
        return bool(inquirer.confirm(message=message, default=default).execute())
    except KeyboardInterrupt:  # pragma: no cover - user cancel
        return False


def build_choices(options: Iterable[str]) -> list[Choice]:
    result: list[Choice] = []
    seen: set[str] = set()
    for item in options:
        if not item or item in seen:
            continue
        seen.add(item)
        result.append(Choice(value=item, name=item))
    return result


__all__ = ["Selector", "FuzzySelector", "confirm", "build_choices"]
