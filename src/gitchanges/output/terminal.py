"""Rich terminal reporter — colour, status pills, summary."""

from __future__ import annotations

from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from gitchanges.git.models import Diff, Match, Status, StatusLike, status_label
from gitchanges.output.json_report import summary
from gitchanges.triggers import TriggerResult

_STATUS_STYLE = {
    "added": "bold black on green",
    "modified": "bold black on yellow",
    "deleted": "bold white on red",
    "renamed": "bold black on bright_cyan",
    "changed": "bold black on bright_blue",
    "unknown": "bold white on magenta",
}


def _status_pill(status: StatusLike) -> Text:
    label = status_label(status)
    style = _STATUS_STYLE.get(label, "bold")
    return Text(f" {str(status)} ", style=style)


def render(
    diff: Diff,
    *,
    base: Optional[str] = None,
    head: Optional[str] = None,
    show_summary: bool = True,
    console: Optional[Console] = None,
) -> None:
    """Print the change-list as a table."""
    console = console or Console()

    if not diff.size():
        console.print("[dim]No changes.[/dim]")
        return

    title = "Changes"
    if base or head:
        title = f"Changes {base or 'work tree'} → {head or 'work tree'}"
    table = Table(title=title, title_style="bold", border_style="dim")
    table.add_column("Status", justify="center", width=8)
    table.add_column("Path", style="cyan")

    for path, status in diff:
        table.add_row(_status_pill(status), Text(path))

    console.print(table)

    if show_summary:
        _print_summary(console, diff)


def render_match(patterns: List[str], match: Match, *, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(f"[bold]Match:[/bold] {escape(', '.join(patterns))}")
    for status in Status:
        name = status.name.lower()
        hit = getattr(match, name)
        mark = "[green]✓[/green]" if hit else "[dim]·[/dim]"
        console.print(f"  {mark} {name}")


def render_triggers(results: List[TriggerResult], *, console: Optional[Console] = None) -> None:
    console = console or Console()
    if not results:
        console.print("[dim]No triggers configured.[/dim]")
        return
    for r in results:
        if r.fired:
            console.print(f"[green]●[/green] [bold]{escape(r.name)}[/bold] fired ({r.changes.size()} changes)")
            for path, status in r.changes:
                console.print(f"    {str(status)}  {escape(path)}")
        else:
            console.print(f"[dim]○ {escape(r.name)}[/dim]")


def _print_summary(console: Console, diff: Diff) -> None:
    counts = summary(diff)
    console.print()
    console.print(f"[dim]Total:[/dim]     {diff.size()}")
    for name, count in counts.items():
        if count:
            console.print(f"[dim]{name.capitalize() + ':':<10}[/dim] {count}")
