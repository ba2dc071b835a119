"""Typer CLI entrypoint for gwt.

Commands that end in a directory the user should move to print that path as
the last line of stdout (or write it to ``--cd-file``). Everything else goes
to stderr so the shell wrapper from ``gwt init`` can capture the path.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import GwtConfig, load_config
from .exceptions import GwtError
from .git import GitBackend
from .github import GitHubCli
from .interactive import FuzzySelector, confirm
from .models import PruneCandidate, SwitchedInPlace
from .pr import PullRequestCheckout
from .prune import Reconciler
from .worktrees import WorktreeManager

app = typer.Typer(
    help="Git Worktree Manager: keep one directory per branch under $GWT_ROOT_DIR.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

SUPPORTED_SHELLS = ("zsh", "bash")

SHELL_WRAPPER = """\
# gwt shell integration: eval "$(gwt init {shell})"
gwt() {{
    local cd_file exit_code target
    cd_file="$(mktemp -t gwt.XXXXXX)" || return 1
    command gwt --cd-file "$cd_file" "$@"
    exit_code=$?
    target="$(cat "$cd_file")"
    rm -f "$cd_file"
    if [ "$exit_code" -eq 0 ] && [ -n "$target" ] && [ -d "$target" ]; then
        echo "Moving to worktree: $target" >&2
        builtin cd "$target"
    fi
    return $exit_code
}}
"""


@dataclass(slots=True)
class AppState:
    console: Console
    root_override: Optional[Path] = None
    cd_file: Optional[Path] = None
    verbose: bool = False


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", force=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gwt version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        help="Root directory for storing worktrees (overrides $GWT_ROOT_DIR).",
        file_okay=False,
        dir_okay=True,
    ),
    cd_file: Optional[Path] = typer.Option(
        None,
        "--cd-file",
        help="Write the directory to move to into this file instead of stdout.",
        hidden=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the gwt version and exit.",
    ),
) -> None:
    _ = version  # handled via callback
    ctx.obj = AppState(
        console=Console(stderr=True),
        root_override=root,
        cd_file=cd_file,
        verbose=verbose,
    )


def _require_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):  # pragma: no cover
        raise typer.Exit(1)
    return state


def _load(state: AppState) -> GwtConfig:
    config = load_config(state.root_override)
    configure_logging(state.verbose or config.debug)
    return config


def _build_manager(state: AppState, *, interactive: bool = True) -> WorktreeManager:
    config = _load(state)
    git = GitBackend()
    git.ensure_repository()
    selector = FuzzySelector() if interactive else None
    return WorktreeManager(config, git, selector=selector)


def _emit_path(state: AppState, path: Path) -> None:
    if state.cd_file is not None:
        state.cd_file.write_text(f"{path}\n")
        return
    typer.echo(str(path))


def _fail(exc: GwtError) -> NoReturn:
    typer.secho(f"gwt: {exc}", err=True, fg=typer.colors.RED)
    raise typer.Exit(exc.exit_code)


@app.command(help="Create a new worktree and move to it.")
def add(
    ctx: typer.Context,
    branch: Optional[str] = typer.Argument(None, help="Branch to check out or create."),
) -> None:
    state = _require_state(ctx)
    try:
        target = _build_manager(state).add(branch)
    except GwtError as exc:
        _fail(exc)
    state.console.print(f"[green]✓ Worktree created: {target}[/green]")
    _emit_path(state, target)


@app.command(help="Remove the worktree of a branch.")
def remove(
    ctx: typer.Context,
    branch: Optional[str] = typer.Argument(None, help="Branch whose worktree should be removed."),
    force: bool = typer.Option(False, "--force", "-f", help="Force removal even if the worktree is dirty."),
) -> None:
    state = _require_state(ctx)
    try:
        relocation = _build_manager(state).remove(branch, force=force)
    except GwtError as exc:
        _fail(exc)
    state.console.print("[green]✓ Worktree removed[/green]")
    if relocation is not None:
        _emit_path(state, relocation)


@app.command(help="Move to the worktree of a branch.")
def move(
    ctx: typer.Context,
    branch: Optional[str] = typer.Argument(None, help="Branch to move to."),
) -> None:
    state = _require_state(ctx)
    try:
        result = _build_manager(state).locate(branch)
    except GwtError as exc:
        _fail(exc)
    if isinstance(result, SwitchedInPlace):
        state.console.print(f"Switched current worktree to branch '{result.branch}'")
    _emit_path(state, result.path)


@app.command(name="list", help="List all worktrees.")
def list_(
    ctx: typer.Context,
    json_: bool = typer.Option(False, "--json", help="Output JSON instead of a table."),
) -> None:
    state = _require_state(ctx)
    try:
        manager = _build_manager(state, interactive=False)
        entries = manager.list_worktrees()
        base_dir = manager.base_directory
    except GwtError as exc:
        _fail(exc)
    if json_:
        payload = [
            {
                "name": entry.name,
                "branch": entry.branch,
                "path": str(entry.path),
                "status": entry.status,
            }
            for entry in entries
        ]
        typer.echo(json.dumps(payload, indent=2))
        return
    table = Table(title="Git worktrees", show_lines=False)
    table.add_column("Branch", no_wrap=True)
    table.add_column("Path")
    table.add_column("Status", no_wrap=True)
    for entry in entries:
        table.add_row(entry.branch or "(detached)", str(entry.path), entry.status)
    console = Console()
    console.print(table)
    console.print(f"Base directory: {base_dir}")


@app.command(name="pr-checkout", help="Check out a pull request into a new worktree.")
def pr_checkout(
    ctx: typer.Context,
    pr_id: Optional[str] = typer.Argument(None, help="Pull request number."),
) -> None:
    state = _require_state(ctx)
    try:
        manager = _build_manager(state, interactive=False)
        target = PullRequestCheckout(manager, GitHubCli()).checkout(pr_id or "")
    except GwtError as exc:
        _fail(exc)
    _emit_path(state, target)


@app.command(help="Remove worktrees whose branches are merged or deleted on the remote.")
def prune(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    state = _require_state(ctx)

    def _confirm(candidates: Sequence[PruneCandidate]) -> bool:
        state.console.print("\nThe following worktrees will be removed:")
        for candidate in candidates:
            state.console.print(f"  - {candidate.branch} [dim]({candidate.reason})[/dim]")
        state.console.print("")
        return yes or confirm("Proceed with removal?", default=False)

    try:
        manager = _build_manager(state, interactive=False)
        summary = Reconciler(manager).reconcile(_confirm)
        if summary.cancelled:
            state.console.print("Cancelled")
            return
        state.console.print(f"[green]✓ Removed {summary.removed} worktree(s)[/green]")
        summary.raise_for_failures()
    except GwtError as exc:
        _fail(exc)


@app.command(help="Show version information.")
def version() -> None:
    typer.echo(f"gwt version {__version__}")
    typer.echo("Git Worktree Manager")


@app.command(help="Print the shell function that moves you into worktrees.")
def init(
    shell: str = typer.Argument("zsh", help="Shell to generate integration for (zsh or bash)."),
) -> None:
    if shell not in SUPPORTED_SHELLS:
        typer.secho(
            f"gwt: unsupported shell '{shell}'. Choose one of: {', '.join(SUPPORTED_SHELLS)}",
            err=True,
            fg=typer.colors.RED,
        )
        raise typer.Exit(2)
    typer.echo(SHELL_WRAPPER.format(shell=shell), nl=False)


app.command(name="rm", hidden=True, help="Alias for remove.")(remove)
app.command(name="mv", hidden=True, help="Alias for move.")(move)
app.command(name="cd", hidden=True, help="Alias for move.")(move)
app.command(name="ls", hidden=True, help="Alias for list.")(list_)


__all__ = ["app", "configure_logging"]


if __name__ == "__main__":
    app()
