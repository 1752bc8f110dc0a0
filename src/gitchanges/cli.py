"""gitchanges CLI — Typer application with diff, contains, match, check, first-commit, init."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from gitchanges import __version__
from gitchanges.config.loader import ConfigError, load_config
from gitchanges.config.schema import OUTPUT_FORMATS, GitChangesConfig
from gitchanges.git.adapter import (
    GitDiffError,
    GitError,
    diff_sync,
    first_commit_sync,
    get_repo_root,
)
from gitchanges.git.diff_parser import DiffParseError
from gitchanges.git.models import Diff, StatusLike, coerce_status

app = typer.Typer(
    name="gitchanges",
    help="Which files changed between two refs, and how.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)
logger = logging.getLogger("gitchanges")

# Options shared by every diff-backed command.
_CwdOpt = typer.Option(None, "--cwd", "-C", help="Run git in this directory")
_ConfigOpt = typer.Option(None, "--config", "-c", help="Path to .gitchanges.toml")
_BaseOpt = typer.Option(None, "--base", help="Base ref (default: compare the work tree)")
_HeadOpt = typer.Option(None, "--head", help="Head ref")
_PathspecOpt = typer.Option(None, "--pathspec", help="Limit git's comparison to these paths")
_StatusOpt = typer.Option(None, "--status", "-s", help="Status code or name (repeatable)")
_FallbackOpt = typer.Option(
    False, "--fallback-first-commit",
    help="If the base ref does not exist, diff from the first commit instead",
)
_DebugOpt = typer.Option(False, "--debug", help="Log git commands")


@dataclass
class _DiffRun:
    diff: Diff
    config: GitChangesConfig
    base: Optional[str]
    head: Optional[str]


def _setup_logging(debug: bool) -> None:
    if not debug:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(label: str, exc: object) -> typer.Exit:
    console.print(f"[bold red]{label}:[/bold red] {exc}")
    return typer.Exit(code=2)


def _resolve_repo_root(cwd: Optional[Path]) -> Path:
    """Find the git repo root, exit 2 on failure."""
    try:
        return get_repo_root(cwd)
    except GitError as exc:
        raise _fail("Error", exc) from exc


def _load(repo_root: Path, config: Optional[str]) -> GitChangesConfig:
    try:
        return load_config(repo_root, config)
    except ConfigError as exc:
        raise _fail("Config error", exc) from exc


def _parse_statuses(values: Optional[List[str]]) -> List[StatusLike]:
    try:
        return [coerce_status(v) for v in values or []]
    except ValueError as exc:
        raise _fail("Invalid status", exc) from exc


def _run_diff(
    cwd: Optional[Path],
    config: Optional[str],
    base: Optional[str],
    head: Optional[str],
    pathspec: Optional[List[str]],
    fallback: bool,
) -> _DiffRun:
    """Load config, apply CLI overrides and run the diff. Exits 2 on error."""
    repo_root = _resolve_repo_root(cwd)
    cfg = _load(repo_root, config)

    base = base or cfg.diff.base
    head = head or cfg.diff.head
    paths = list(pathspec or cfg.diff.paths)
    timeout = cfg.diff.timeout_or_none
    workdir = cwd or repo_root

    try:
        try:
            diff = diff_sync(workdir, base=base, head=head, paths=paths, timeout=timeout)
        except GitDiffError as exc:
            if not (fallback or cfg.diff.fallback_to_first_commit):
                raise
            base = first_commit_sync(workdir, ref=head, timeout=timeout)
            logger.info("%s; diffing from first commit %s", exc, base)
            console.print(f"[yellow]⚠[/yellow]  {exc}; diffing from first commit {base}")
            diff = diff_sync(workdir, base=base, head=head, paths=paths, timeout=timeout)
    except GitDiffError as exc:
        raise _fail("Unknown ref", exc.ref) from exc
    except GitError as exc:
        raise _fail("Git error", exc) from exc
    except DiffParseError as exc:
        raise _fail("Parse error", exc) from exc

    return _DiffRun(diff=diff, config=cfg, base=base, head=head)


def _resolve_format(format: Optional[str], cfg: GitChangesConfig) -> str:
    fmt = format or cfg.output.format
    if fmt not in OUTPUT_FORMATS:
        console.print(f"[bold red]Invalid format:[/bold red] {fmt}")
        raise typer.Exit(code=2)
    return fmt


def _emit(data: dict, fmt: str, output: Optional[str]) -> None:
    """Print a JSON/YAML document and optionally write it to *output*."""
    from gitchanges.output import json_report, yaml_report

    text = yaml_report.render(data) if fmt == "yaml" else json_report.render(data)
    if fmt != "terminal":
        print(text)
    if output:
        Path(output).write_text(text, encoding="utf-8")


# ── diff ──────────────────────────────────────────────────────────────────────


@app.command()
def diff(
    patterns: Optional[List[str]] = typer.Argument(None, help="Glob patterns to keep"),
    status: Optional[List[str]] = _StatusOpt,
    base: Optional[str] = _BaseOpt,
    head: Optional[str] = _HeadOpt,
    pathspec: Optional[List[str]] = _PathspecOpt,
    cwd: Optional[Path] = _CwdOpt,
    config: Optional[str] = _ConfigOpt,
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | yaml"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write report to file"),
    fallback: bool = _FallbackOpt,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = _DebugOpt,
) -> None:
    """List changed files, optionally filtered by glob and status."""
    from gitchanges.output import json_report, terminal

    _setup_logging(debug)
    statuses = _parse_statuses(status)
    run = _run_diff(cwd, config, base, head, pathspec, fallback)
    fmt = _resolve_format(format, run.config)

    result = run.diff.filter(patterns or None, statuses or None)

    if verbose or debug:
        console.print(f"[dim]Base: {run.base or 'work tree'}  Head: {run.head or 'work tree'}[/dim]")
        console.print(f"[dim]Entries: {run.diff.size()} total, {result.size()} selected[/dim]")

    if fmt == "terminal":
        terminal.render(
            result,
            base=run.base,
            head=run.head,
            show_summary=run.config.output.show_summary,
            console=Console(),
        )
    _emit(json_report.to_dict(result, base=run.base, head=run.head), fmt, output)


# ── contains ──────────────────────────────────────────────────────────────────


@app.command()
def contains(
    patterns: Optional[List[str]] = typer.Argument(None, help="Glob patterns"),
    status: Optional[List[str]] = _StatusOpt,
    base: Optional[str] = _BaseOpt,
    head: Optional[str] = _HeadOpt,
    pathspec: Optional[List[str]] = _PathspecOpt,
    cwd: Optional[Path] = _CwdOpt,
    config: Optional[str] = _ConfigOpt,
    fallback: bool = _FallbackOpt,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print the matching count"),
    debug: bool = _DebugOpt,
) -> None:
    """Exit 0 if any change matches the globs and statuses, 1 otherwise."""
    _setup_logging(debug)
    statuses = _parse_statuses(status)
    run = _run_diff(cwd, config, base, head, pathspec, fallback)

    found = run.diff.filter(patterns or None, statuses or None)
    if verbose:
        console.print(f"{found.size()} matching change(s)")
    raise typer.Exit(code=0 if found.size() else 1)


# ── match ─────────────────────────────────────────────────────────────────────


@app.command()
def match(
    patterns: List[str] = typer.Argument(..., help="Path or glob selector"),
    base: Optional[str] = _BaseOpt,
    head: Optional[str] = _HeadOpt,
    pathspec: Optional[List[str]] = _PathspecOpt,
    cwd: Optional[Path] = _CwdOpt,
    config: Optional[str] = _ConfigOpt,
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | yaml"),
    fallback: bool = _FallbackOpt,
    debug: bool = _DebugOpt,
) -> None:
    """Show which status kinds occur among paths matching the selector."""
    from gitchanges.output import json_report, terminal

    _setup_logging(debug)
    run = _run_diff(cwd, config, base, head, pathspec, fallback)
    fmt = _resolve_format(format, run.config)

    result = run.diff.match(patterns)
    if fmt == "terminal":
        terminal.render_match(patterns, result, console=Console())
    _emit(json_report.match_to_dict(patterns, result), fmt, None)


# ── check ─────────────────────────────────────────────────────────────────────


@app.command()
def check(
    trigger: Optional[str] = typer.Option(None, "--trigger", "-t", help="Only evaluate this trigger"),
    base: Optional[str] = _BaseOpt,
    head: Optional[str] = _HeadOpt,
    pathspec: Optional[List[str]] = _PathspecOpt,
    cwd: Optional[Path] = _CwdOpt,
    config: Optional[str] = _ConfigOpt,
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json | yaml"),
    fallback: bool = _FallbackOpt,
    debug: bool = _DebugOpt,
) -> None:
    """Evaluate the triggers configured in .gitchanges.toml."""
    from gitchanges.output import json_report, terminal
    from gitchanges.triggers import evaluate

    _setup_logging(debug)
    run = _run_diff(cwd, config, base, head, pathspec, fallback)
    fmt = _resolve_format(format, run.config)

    selected = list(run.config.triggers.values())
    if trigger is not None:
        if trigger not in run.config.triggers:
            console.print(f"[bold red]Unknown trigger:[/bold red] {trigger}")
            raise typer.Exit(code=2)
        selected = [run.config.triggers[trigger]]

    results = evaluate(run.diff, selected)
    if fmt == "terminal":
        terminal.render_triggers(results, console=Console())
    _emit(json_report.triggers_to_dict(results), fmt, None)

    if trigger is not None and not results[0].fired:
        raise typer.Exit(code=1)


# ── first-commit ──────────────────────────────────────────────────────────────


@app.command("first-commit")
def first_commit(
    ref: Optional[str] = typer.Option(None, "--ref", help="Ref whose history to search (default HEAD)"),
    cwd: Optional[Path] = _CwdOpt,
    debug: bool = _DebugOpt,
) -> None:
    """Print the SHA of the repository's first commit."""
    _setup_logging(debug)
    try:
        sha = first_commit_sync(cwd, ref=ref)
    except GitDiffError as exc:
        raise _fail("Unknown ref", exc.ref) from exc
    except GitError as exc:
        raise _fail("Git error", exc) from exc
    print(sha)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    cwd: Optional[Path] = _CwdOpt,
) -> None:
    """Generate a starter .gitchanges.toml in the repo root."""
    from gitchanges.config.defaults import DEFAULT_TOML
    from gitchanges.config.loader import CONFIG_FILENAME

    repo_root = _resolve_repo_root(cwd)
    config_path = repo_root / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"gitchanges {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """gitchanges — which files changed between two refs, and how."""
