"""Reflection server command for the actionreg CLI."""

import click

from actionreg.cli.actions_cmd import import_modules


@click.command()
@click.option("--host", default=None, help="Host to bind to (default: reflection.host)")
@click.option("--port", type=int, default=None, help="Port to bind to (default: reflection.port)")
@click.option(
    "--module",
    "-m",
    "modules",
    multiple=True,
    help="Module to import before serving (repeatable)",
)
def reflection(host, port, modules):
    """Serve the reflection API in the foreground."""
    from actionreg.interfaces.reflection.server import run_reflection_api

    import_modules(modules)
    run_reflection_api(host=host, port=port)
