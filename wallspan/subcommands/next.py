"""
wallspan next

This module defines the 'next' subcommand, which fetches a new photo from Unsplash and makes
it the desktop wallpaper right away.
"""

import click

from wallspan.cli_utils.console import confirm_success
from wallspan.cli_utils.console import describe
from wallspan.cli_utils.console import warn
from wallspan.cli_utils.decorators import catch_errors
from wallspan.cli_utils.decorators import pass_session


@click.command(name="next")
@click.option(
    "--mode",
    type=click.Choice(["span", "individual"]),
    help="Span one photo across all displays or fetch one per display (default: from config).",
)
@click.option(
    "--query",
    "-q",
    help="Search term for this photo. Defaults to a random term from your config.",
)
@catch_errors
@pass_session
def cli(session, mode, query):
    """
    Set a new wallpaper from Unsplash.
    """

    describe(":earth_asia-emoji: 'next' fetching a new photo ...")

    if not session.next_wallpaper(mode=mode, query=query):
        warn("another wallpaper update is already in progress")
        return

    if session.last_error:
        warn(session.last_error)

    confirm_success(":white_check_mark-emoji: 'next' updated wallpaper")
    describe(f":camera-emoji: {session.current_credit}", style="credit")
