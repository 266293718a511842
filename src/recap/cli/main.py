"""Click CLI entry point for recap."""

from __future__ import annotations

import click

from recap._version import __version__


@click.group()
@click.version_option(version=__version__, prog_name="recap")
def cli():
    """recap - capture record graphs and restore them later.

    Browse, inspect and flush the capture documents stored on disk.
    """
    pass


# Import and register subcommands
from recap.cli.show_cmd import show  # noqa: E402
from recap.cli.list_cmd import list_cmd  # noqa: E402
from recap.cli.flush_cmd import flush  # noqa: E402

cli.add_command(show)
cli.add_command(list_cmd)
cli.add_command(flush)


if __name__ == "__main__":
    cli()
