from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .. import __version__
from ..core.config_loader import ConfigLoader
from ..core.errors import SecretSyncError
from ..core.syncer import Syncer
from ..platforms import get_platform
from .display import ConsoleConfirmation, render_plan, render_report, render_status

app = typer.Typer(help="Sync local env files with a deployment platform's variables.")
console = Console()
err_console = Console(stderr=True)

PLATFORM_OPTION = typer.Option(None, "--platform", "-p", help="Platform (vercel, github).")


def _version(value: bool) -> None:
    if value:
        typer.echo(f"secret-sync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to secret-sync.yaml (searches parents if omitted)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
    version: bool = typer.Option(
        None, "--version", callback=_version, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    ctx.obj = {"config": config}


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]✖ {escape(message)}[/]")
    raise typer.Exit(1)


def _syncer(
    ctx: typer.Context,
    platform: Optional[str],
    render: bool = False,
    show_values: Optional[bool] = None,
) -> Syncer:
    cfg = ConfigLoader(ctx.obj["config"]).resolve()
    if cfg.source:
        console.print(f"[dim]Loaded config from {escape(cfg.source)}[/]")
    name = (platform or cfg.platform).lower()
    options = {
        "sort_keys": cfg.options.sort_keys,
        "add_header": cfg.options.add_header,
        **cfg.options_for(name),
    }
    provider = get_platform(name, **options)
    ctx.call_on_close(provider.close)
    show = cfg.options.show_diffs if show_values is None else show_values

    def on_plan(plan) -> None:
        render_plan(console, plan, show_values=show)

    return Syncer(
        cfg,
        provider,
        confirm=ConsoleConfirmation(console, show_summary=not render),
        on_plan=on_plan if render else None,
    )


@app.command()
def init(
    ctx: typer.Context,
    platform: str = typer.Option("vercel", "--platform", "-p"),
):
    """Create a secret-sync.yaml in the current directory."""
    path = ctx.obj["config"] or Path("secret-sync.yaml")
    try:
        ConfigLoader.write_template(path, platform)
    except SecretSyncError as e:
        _fail(str(e))
    console.print(f"[green]✔ Created config file: {escape(str(path))}[/]")
    console.print("\n[cyan]Next steps:[/]")
    console.print(f"[dim]1. Edit {escape(str(path))} to customize settings[/]")
    console.print("[dim]2. Run 'secret-sync status' to check current state[/]")
    console.print("[dim]3. Run 'secret-sync push development' to sync your variables[/]")


@app.command()
def push(
    ctx: typer.Context,
    environment: str = typer.Argument(..., help="Target environment (development, preview, production)"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Env file to push."),
    platform: Optional[str] = PLATFORM_OPTION,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompts."),
):
    """Push environment variables from local to remote."""
    console.print(f"[bold]Pushing to {escape(environment)} environment...[/]")
    try:
        result = _syncer(ctx, platform, render=True).push(environment, file=file, yes=yes)
    except SecretSyncError as e:
        _fail(f"Push failed: {e}")
    if result.cancelled:
        console.print("[yellow]Push cancelled[/]")
        return
    if result.plan.changes.is_empty:
        console.print("[green]✔ No changes needed - everything is in sync[/]")
        return
    render_report(console, result.report)
    if not result.report.ok:
        raise typer.Exit(1)
    console.print(f"[green]✔ Successfully pushed to {escape(environment)}![/]")


@app.command()
def pull(
    ctx: typer.Context,
    environment: str = typer.Argument(..., help="Source environment (development, preview, production)"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Output env file."),
    platform: Optional[str] = PLATFORM_OPTION,
):
    """Pull environment variables from remote to local."""
    console.print(f"[bold]Pulling from {escape(environment)} environment...[/]")
    try:
        outcome = _syncer(ctx, platform).pull(environment, file=file)
    except SecretSyncError as e:
        _fail(f"Pull failed: {e}")
    if not outcome.success:
        _fail(f"Pull failed: {outcome.error}")
    console.print(f"[green]✔ Pulled {escape(environment)} variables to {escape(outcome.key)}[/]")


@app.command()
def status(
    ctx: typer.Context,
    environment: Optional[str] = typer.Argument(None, help="Environment to check (default: all)"),
    platform: Optional[str] = PLATFORM_OPTION,
):
    """Show sync status for one or all environments."""
    try:
        statuses = _syncer(ctx, platform).status(environment)
    except SecretSyncError as e:
        _fail(f"Status check failed: {e}")
    render_status(console, statuses)


@app.command()
def diff(
    ctx: typer.Context,
    environment: str = typer.Argument(..., help="Environment to compare"),
    platform: Optional[str] = PLATFORM_OPTION,
):
    """Show detailed differences between local and remote."""
    console.print(f"[bold]Comparing {escape(environment)} environment...[/]")
    try:
        _syncer(ctx, platform, render=True, show_values=True).diff(environment)
    except SecretSyncError as e:
        _fail(f"Diff failed: {e}")


if __name__ == "__main__":
    app()
