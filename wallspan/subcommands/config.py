"""
wallspan config

View or change the wallspan configuration stored in config.json: the Unsplash access key,
search terms, rotation interval, spanning mode and desktop backend.
"""

import click

from wallspan.cli_utils.console import confirm_success
from wallspan.cli_utils.console import console
from wallspan.cli_utils.console import warn
from wallspan.cli_utils.decorators import catch_errors
from wallspan.cli_utils.decorators import pass_wallspan
from wallspan.config import MODES
from wallspan.wallpaper_handler import DESKTOPS
from wallspan.wallpaper_handler import SCALING_MODES


@click.command(name="config")
@click.option("--key", help="Unsplash access key.")
@click.option(
    "--term",
    "-t",
    "terms",
    multiple=True,
    help="Search term. Can use multiple times; replaces the current list, e.g. -t nebula -t 'city lights'",
)
@click.option("--interval", type=click.IntRange(min=1), help="Seconds between rotations for 'every'.")
@click.option("--mode", type=click.Choice(MODES), help="Span one photo or use one photo per display.")
@click.option("--backend", type=click.Choice(list(DESKTOPS)), help="Desktop integration used to apply wallpapers.")
@click.option("--scaling", type=click.Choice(SCALING_MODES), help="How the desktop fits images to displays.")
@pass_wallspan
@catch_errors
def cli(obj, key, terms, interval, mode, backend, scaling):
    """
    Show or update configuration. With no options, print the current settings.
    """

    changes = {
        "UNSPLASH_ACCESS_KEY": key,
        "SEARCH_TERMS": list(terms) if terms else None,
        "ROTATION_INTERVAL": interval,
        "MODE": mode,
        "DESKTOP_BACKEND": backend,
        "SCALING_MODE": scaling,
    }
    changes = {name: value for name, value in changes.items() if value is not None}

    if changes:
        obj.config = obj.config.update(**changes)
        confirm_success(f":floppy_disk-emoji: 'config' saved {', '.join(sorted(changes))}")

    config = obj.config

    console.print(f"config dir:     {config.WALLSPAN_CONFIG_DIR}")
    console.print(f"scratch dir:    {config.WALLSPAN_SCRATCH_DIR}")
    console.print(f"access key:     {'set' if config.access_key else 'not set'}")
    console.print(f"mode:           {config.MODE}")
    console.print(f"backend:        {config.DESKTOP_BACKEND} ({config.SCALING_MODE})")
    console.print(f"interval:       {config.ROTATION_INTERVAL}s")
    console.print("search terms:   " + "; ".join(config.SEARCH_TERMS), markup=False)

    if not config.access_key:
        warn("Set an Unsplash access key with 'wallspan config --key <key>'")
