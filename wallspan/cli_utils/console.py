"""
wallspan console utilities

This module provides application-wide access to a Rich Console object for
handling writing to stdout and stderr, plus the logging setup. Library modules
log through the standard logging module; the CLI routes those records through
a rich handler on the error console so they share the theme.
"""

import logging
from io import StringIO

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

wallspan_theme = Theme(
    {"warning": "orange_red1", "fail": "bold red", "confirm": "bold", "describe": "", "credit": "italic"}
)

console = Console(theme=wallspan_theme)
error_console = Console(theme=wallspan_theme, stderr=True)


"""
Formatting helpers
"""


def warn(msg: str):
    """
    Format msg and print to stderr.
    """

    error_console.print(f":exclamation_mark-emoji: [bold]warning: [/] {msg}", style="warning")


def describe(msg: str, **kwargs):
    """
    Format descriptive msg and print to stdout.
    """

    console.print(f"{msg}", style="describe", **kwargs)


def confirm_success(msg: str, **kwargs):
    """
    Format confirmation msg and print to stdout. Accept any additional kwargs that console.print from
    rich module exposes.
    """

    console.print(f"{msg}", style="confirm", **kwargs)


def fail(msg: str):
    """
    Format failure msg and print to stderr.
    """

    error_console.print(f":x-emoji: failed. {msg}", style="fail")


def silence():
    """Send everything printed through the consoles to a junk stream (--quiet)."""

    console.file = StringIO()
    error_console.file = StringIO()


def setup_logging(verbose: bool = False):
    """
    Attach a rich handler to the 'wallspan' logger. Only warnings and errors are shown
    unless verbose, in which case the debug trail of every operation is printed too.
    """

    logger = logging.getLogger("wallspan")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    logger.addHandler(RichHandler(console=error_console, show_path=verbose, markup=False))
    return logger
