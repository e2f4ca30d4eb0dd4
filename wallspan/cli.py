"""
wallspan

Span beautiful Unsplash photos across all of your displays as one desktop wallpaper, or give
every display a photo of its own.

This module defines the entry point to the wallspan CLI. It defines a 'wallspan' command group
which handles global options and stores a WallspanContext on the click context. Subcommands
are discovered in the subcommands directory and attached in main().
"""

from pathlib import Path

import click

from wallspan.cli_utils.console import setup_logging
from wallspan.cli_utils.console import silence
from wallspan.cli_utils.decorators import WallspanContext
from wallspan.cli_utils.utils import attach_commands
from wallspan.cli_utils.utils import import_commands


@click.group()
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="WALLSPAN_CONFIG_DIR",
    help="Directory holding config.json (default: ~/.config/wallspan).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Log every step of each operation to stderr.",
)
@click.option(
    "--quiet",
    is_flag=True,
    default=False,
    help="Silence all output printed to stdout or the terminal.",
)
@click.version_option(package_name="wallspan")
@click.pass_context
def cli(ctx: click.Context, config_dir, verbose, quiet):
    """
    wallspan

    Span one Unsplash photo across every connected display, or give each display its own.

    \b
    ====================
    Quickstart
    ====================

    Store your Unsplash access key (https://unsplash.com/developers):

    \b
        $ wallspan config --key <access key>

    Change your wallpaper right now:

    \b
        $ wallspan next

    Rotate every 30 minutes, with your own search terms:

    \b
        $ wallspan config --term "aurora" --term "mountain lake"
        $ wallspan every 1800

    Browse candidates before applying one:

    \b
        $ wallspan browse

    For detailed help text add --help to the specified command, e.g.

    \b
        $ wallspan next --help
    """

    if quiet:
        silence()

    setup_logging(verbose=verbose)

    if ctx.obj is None:
        ctx.obj = WallspanContext(config_dir=config_dir)
    elif config_dir is not None:
        ctx.obj.config_dir = config_dir

    ctx.call_on_close(ctx.obj.close)


def main():

    commands = import_commands()
    attach_commands(cli, commands)
    cli()


if __name__ == "__main__":
    main()
