"""Terminal rendering of plans, reports and status."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.syncer import SyncPlan
from ..core.types import ApplyReport, ChangeSet, EnvironmentStatus

PREVIEW_LIMIT = 50


def preview(value: str) -> str:
    """Shorten long values for display."""
    if len(value) > PREVIEW_LIMIT:
        return value[: PREVIEW_LIMIT - 3] + "..."
    return value


def _section(console: Console, style: str, title: str, lines: Iterable[str]) -> None:
    console.print(f"\n[{style}]{title}[/]")
    for line in lines:
        console.print(f"  {line}")


def render_changes(
    console: Console, changes: ChangeSet, values: Optional[Mapping[str, str]] = None
) -> None:
    """Print a change set, with value previews when ``values`` is given."""

    def fmt(style: str, key: str) -> str:
        if values is None:
            return f"[{style}]{escape(key)}[/]"
        return f"[{style}]{escape(key)}[/] = [dim]{escape(preview(values[key]))}[/]"

    if changes.to_add:
        _section(console, "green", f"+ Will add {len(changes.to_add)} variables:",
                 (fmt("green", k) for k in changes.to_add))
    if changes.to_update:
        _section(console, "yellow", f"~ Will update {len(changes.to_update)} variables:",
                 (fmt("yellow", k) for k in changes.to_update))
    if changes.to_remove:
        _section(console, "red", f"- Will remove {len(changes.to_remove)} variables:",
                 (f"[red]{escape(k)}[/]" for k in changes.to_remove))
    if changes.protected:
        _section(console, "blue",
                 f"Protected variables ({len(changes.protected)}, won't be removed):",
                 (f"[blue]{escape(k)}[/]" for k in changes.protected))


def render_plan(console: Console, plan: SyncPlan, show_values: bool = True) -> None:
    console.print(f"[dim]Local file: {escape(str(plan.file))}[/]")
    console.print(f"[dim]Remote target: {escape(plan.target)}[/]")
    if plan.excluded:
        console.print(
            f"[dim]Excluded {len(plan.excluded)} variables: "
            f"{escape(', '.join(plan.excluded))}[/]"
        )
    render_changes(console, plan.changes, plan.local if show_values else None)


def render_report(console: Console, report: ApplyReport) -> None:
    """Print per-key outcomes followed by an applied/failed summary."""
    for outcome in report.outcomes:
        if outcome.success:
            console.print(f"  [green]✔[/] {outcome.op} {escape(outcome.key)}")
            continue
        console.print(f"  [red]✖[/] {outcome.op} {escape(outcome.key)}")
        if outcome.error:
            console.print(f"    [dim]Error: {escape(outcome.error)}[/]")
        if outcome.hint:
            console.print(f"    [dim]Tip: {escape(outcome.hint)}[/]")
    style = "green" if report.ok else "yellow"
    console.print(
        f"\n[{style}]Applied {len(report.applied)}, failed {len(report.failed)}[/]"
    )


def render_status(console: Console, statuses: Mapping[str, EnvironmentStatus]) -> None:
    table = Table(title="Sync status")
    table.add_column("Environment")
    table.add_column("File")
    table.add_column("Target")
    table.add_column("State")
    for status in statuses.values():
        if status.missing:
            state = "[yellow]local file not found[/]"
        elif status.in_sync:
            state = f"[green]in sync ({status.local_count} variables)[/]"
        else:
            ch = status.changes
            state = (
                f"[yellow]{ch.total} changes needed[/] "
                f"[dim](add {len(ch.to_add)}, update {len(ch.to_update)}, "
                f"remove {len(ch.to_remove)})[/]"
            )
        table.add_row(
            escape(status.environment), escape(status.file), escape(status.target), state
        )
    console.print(table)


class ConsoleConfirmation:
    """Confirmation sink that shows the summary and asks y/N."""

    def __init__(self, console: Console, show_summary: bool = True):
        self.console = console
        self.show_summary = show_summary

    def __call__(self, changes: ChangeSet) -> bool:
        if self.show_summary:
            self.console.print("\n[cyan]Change summary:[/]")
            render_changes(self.console, changes)
        if changes.is_empty:
            self.console.print("\n[green]No changes needed - everything is in sync[/]")
            return False
        return typer.confirm(
            f"\nDo you want to proceed with these {changes.total} changes?", default=False
        )
