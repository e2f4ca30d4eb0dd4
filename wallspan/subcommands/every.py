"""
wallspan every

Rotate the wallpaper on a fixed interval until interrupted with Ctrl-C.
"""

from time import sleep

import click

from wallspan.cli_utils.console import confirm_success
from wallspan.cli_utils.console import describe
from wallspan.cli_utils.console import fail
from wallspan.cli_utils.decorators import catch_errors
from wallspan.cli_utils.decorators import pass_session
from wallspan.errors import WallspanError


@click.command(name="every")
@click.argument("interval", type=click.IntRange(min=1), required=False)
@click.option(
    "--times",
    type=click.IntRange(min=1),
    help="Stop after this many rotations instead of running until interrupted.",
)
@click.option("--mode", type=click.Choice(["span", "individual"]), help="Override the configured mode.")
@catch_errors
@pass_session
def cli(session, interval, times, mode):
    """
    Change the wallpaper every INTERVAL seconds (default: from config).

    A failed rotation is reported and the next one is attempted on schedule.
    """

    interval = interval or session.config.ROTATION_INTERVAL
    count = 0

    try:
        while True:
            try:
                session.next_wallpaper(mode=mode)
                confirm_success(f":white_check_mark-emoji: 'every' updated wallpaper. {session.current_credit}")
            except WallspanError:
                # the session keeps the message in last_error; keep rotating
                fail(session.last_error)

            count += 1
            if times is not None and count >= times:
                break

            describe(f"sleeping {interval}s...")
            sleep(interval)

    except KeyboardInterrupt:
        describe("stopped auto-rotate")
