"""CLI entry point for permtree.

Invoked as::

    permtree [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m permtree.cli.main

Commands
--------
- actions   List the actions granted by a set (or the whole schema)
- check     Check actions against a named permission set
- combine   Union, intersect or subtract two named sets
- contains  Test whether one named set contains another
- validate  Load a workspace file and report its sets
- version   Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from permtree.config.workspace import DEFAULT_WORKSPACE, Workspace, WorkspaceLoader
from permtree.errors import PermissionTreeError
from permtree.manager.permission_set import PermissionSet
from permtree.tree.permission_tree import MergePolicy

console = Console()
err_console = Console(stderr=True)


def _config_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--config",
        "-c",
        "config_path",
        default=str(DEFAULT_WORKSPACE),
        show_default=True,
        type=click.Path(),
        help="Path to the workspace file.",
    )(func)


def _load_workspace(config_path: str) -> Workspace:
    try:
        return WorkspaceLoader().load(Path(config_path))
    except (FileNotFoundError, PermissionTreeError) as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
        sys.exit(1)


def _get_set(workspace: Workspace, name: str) -> PermissionSet:
    try:
        return workspace.get_set(name)
    except KeyError as exc:
        err_console.print(f"[red]Error:[/red] {escape(exc.args[0])}", highlight=False)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="permtree")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """permtree: hierarchical permission sets and their algebra."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from permtree import __version__

    console.print(
        Panel(
            f"[bold]permtree[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Hierarchical permission sets with union, intersection and difference.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# actions
# ---------------------------------------------------------------------------


@cli.command(name="actions")
@_config_option
@click.option("--set", "-s", "set_name", default=None, help="Named set to list. Defaults to the schema.")
def actions_command(config_path: str, set_name: str | None) -> None:
    """List the actions granted by a named set or by the whole schema."""
    workspace = _load_workspace(config_path)
    perm = _get_set(workspace, set_name) if set_name else workspace.manager.get_universe()

    table = Table(title=f"Actions in '{perm.name}'", box=box.SIMPLE)
    table.add_column("Action", style="cyan")
    for action in perm:
        table.add_row(action)
    console.print(table)
    console.print(f"  Total actions: [cyan]{len(perm)}[/cyan]")


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command(name="check")
@_config_option
@click.option("--set", "-s", "set_name", required=True, help="Named set to check against.")
@click.argument("actions", nargs=-1, required=True)
def check_command(config_path: str, set_name: str, actions: tuple[str, ...]) -> None:
    """Check whether a named set grants each ACTION."""
    workspace = _load_workspace(config_path)
    perm = _get_set(workspace, set_name)

    table = Table(title=f"Permission Check: '{set_name}'", box=box.SIMPLE)
    table.add_column("Action", style="cyan")
    table.add_column("Result")
    table.add_column("Note", style="dim")

    all_allowed = True
    for action in actions:
        allowed = perm.contains_action(action)
        all_allowed = all_allowed and allowed
        note = "" if workspace.manager.knows_action(action) else "not in schema"
        table.add_row(
            action,
            "[green]ALLOWED[/green]" if allowed else "[red]DENIED[/red]",
            note,
        )

    console.print(table)
    sys.exit(0 if all_allowed else 1)


# ---------------------------------------------------------------------------
# combine
# ---------------------------------------------------------------------------


@cli.command(name="combine")
@_config_option
@click.argument("operation", type=click.Choice([p.value for p in MergePolicy]))
@click.argument("left")
@click.argument("right")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["json", "yaml", "actions"]),
    default="json",
    show_default=True,
    help="Output format.",
)
def combine_command(
    config_path: str, operation: str, left: str, right: str, output_format: str
) -> None:
    """Combine the LEFT and RIGHT named sets with OPERATION."""
    workspace = _load_workspace(config_path)
    left_set = _get_set(workspace, left)
    right_set = _get_set(workspace, right)

    match MergePolicy(operation):
        case MergePolicy.UNION:
            result = left_set.union(right_set)
        case MergePolicy.INTERSECTION:
            result = left_set.intersection(right_set)
        case MergePolicy.DIFFERENCE:
            result = left_set.difference(right_set)

    if output_format == "json":
        click.echo(result.to_json(indent=2))
    elif output_format == "yaml":
        click.echo(result.to_yaml(), nl=False)
    else:
        for action in result:
            click.echo(action)


# ---------------------------------------------------------------------------
# contains
# ---------------------------------------------------------------------------


@cli.command(name="contains")
@_config_option
@click.argument("left")
@click.argument("right")
def contains_command(config_path: str, left: str, right: str) -> None:
    """Exit 0 if the LEFT set grants every action of the RIGHT set."""
    workspace = _load_workspace(config_path)
    left_set = _get_set(workspace, left)
    right_set = _get_set(workspace, right)

    if left_set.contains(right_set):
        console.print(
            Panel(f"[green]'{left}' CONTAINS '{right}'[/green]", border_style="green")
        )
        sys.exit(0)

    console.print(
        Panel(f"[red]'{left}' DOES NOT CONTAIN '{right}'[/red]", border_style="red")
    )
    missing = right_set.difference(left_set)
    table = Table(title="Missing Actions", box=box.SIMPLE)
    table.add_column("Action", style="magenta")
    for action in missing:
        table.add_row(action)
    console.print(table)
    sys.exit(1)


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@_config_option
def validate_command(config_path: str) -> None:
    """Load a workspace file and report on every named set."""
    workspace = _load_workspace(config_path)
    manager = workspace.manager

    table = Table(title="Permission Sets", box=box.SIMPLE)
    table.add_column("Set", style="cyan")
    table.add_column("Actions", justify="right")
    table.add_column("Coverage", justify="right")
    universe_size = len(manager.actions) or 1
    for name, perm in sorted(workspace.sets.items()):
        count = len(perm)
        table.add_row(name, str(count), f"{count / universe_size * 100.0:.1f}%")

    console.print(
        Panel(
            f"[green]VALID[/green]  {len(manager.actions)} schema actions, "
            f"{len(workspace.sets)} permission sets",
            title="Workspace",
            border_style="blue",
        )
    )
    console.print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
