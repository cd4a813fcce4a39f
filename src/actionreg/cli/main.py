"""Main CLI entry point for actionreg.

Commands are imported lazily, so ``actionreg --help`` does not pull in
FastAPI or uvicorn.
"""

import sys

import click

from actionreg import __version__


class LazyGroup(click.Group):
    """Click group that lazily loads subcommands only when invoked."""

    commands_by_name = {
        "actions": "actionreg.cli.actions_cmd",
        "reflection": "actionreg.cli.reflection_cmd",
    }

    def get_command(self, ctx, cmd_name):
        """Lazily import and return the command when it's invoked."""
        if cmd_name not in self.commands_by_name:
            return None

        import importlib

        mod = importlib.import_module(self.commands_by_name[cmd_name])
        # Convention: command function named after the command
        return getattr(mod, cmd_name)

    def list_commands(self, ctx):
        """Return list of available commands (for --help)."""
        return list(self.commands_by_name)


@click.group(cls=LazyGroup)
@click.version_option(version=__version__, prog_name="actionreg")
def cli():
    """actionreg - inspect and serve the action registry.

    Examples:

    \b
      actionreg actions -m my_app.plugins     List actions registered by my_app.plugins
      actionreg reflection -m my_app.plugins  Serve the reflection API
    """


def main():
    """Entry point for the actionreg CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nGoodbye!", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
