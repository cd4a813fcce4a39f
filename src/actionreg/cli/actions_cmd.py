"""Action listing command for the actionreg CLI.

Imports the given modules (which register actions, plugins and stores as
an import side effect), then lists every action visible from the process
default registry. Listing initializes all registered plugins first, so
plugin-contributed actions appear too.
"""

import asyncio
import importlib

import click
from rich.console import Console
from rich.table import Table

from actionreg.registry import Action, get_registry, list_actions

console = Console()


def import_modules(modules: tuple[str, ...]) -> None:
    """Import each module so its registrations run."""
    for module_name in modules:
        importlib.import_module(module_name)


def build_actions_table(actions: dict[str, Action], verbose: bool = False) -> Table:
    """Render actions as a rich table sorted by registry key."""
    table = Table(show_header=True, header_style="bold", expand=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Name")
    if verbose:
        table.add_column("Description", style="dim")

    for key in sorted(actions):
        action = actions[key]
        row = [key, key.split("/")[1], action.name]
        if verbose:
            metadata = getattr(action, "metadata", None)
            row.append((metadata.description if metadata else None) or "")
        table.add_row(*row)

    return table


def display_actions(verbose: bool = False) -> bool:
    """Print every action of the default registry; returns False on failure."""
    try:
        actions = asyncio.run(list_actions())
    except Exception as e:
        console.print(f"[bold red]Error listing actions: {e}[/bold red]")
        return False

    stats = get_registry().get_stats()
    console.print()
    console.print("[bold]Registry Summary[/bold]")
    console.print(f"  • Actions: {len(actions)}")
    console.print(f"  • Plugins: {stats['plugins']}")
    console.print(f"  • Trace stores: {stats['trace_stores']}")
    console.print(f"  • Flow state stores: {stats['flow_state_stores']}")
    console.print(f"  • Schemas: {stats['schemas']}")
    console.print()

    if actions:
        console.print(build_actions_table(actions, verbose))
    else:
        console.print("[dim]No actions registered[/dim]")
    return True


@click.command()
@click.option(
    "--module",
    "-m",
    "modules",
    multiple=True,
    help="Module to import before listing (repeatable)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show action descriptions")
def actions(modules, verbose):
    """List all registered actions."""
    import_modules(modules)
    if not display_actions(verbose):
        raise SystemExit(1)
