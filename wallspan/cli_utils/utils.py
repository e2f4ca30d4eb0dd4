"""
wallspan CLI Utilities

This module contains utilities for working across Click subcommands: importing subcommands
from the subcommands directory and attaching them to the 'wallspan' group.
"""

import sys
import inspect
import importlib.util

from pathlib import Path
from collections.abc import Iterable

import click

from wallspan.cli_utils.console import warn

SUBCOMMANDS_DIR = Path(__file__).parent.parent / "subcommands"


def import_commands(module_paths: Iterable = None) -> list[click.Command]:
    """
    Retrieve a set of click Commands from module_paths. Default directory is the built in subcommands
    directory for commands that come pre-installed with wallspan.

    A valid wallspan command module should define a "cli" function that is wrapped as
    a click Command object. This function will be exposed as a command to the end user.
    Set the 'name' keyword argument in the @click.command decorator to set the
    name of the command intended for the end user.
    """

    if module_paths is None:
        module_paths = sorted(SUBCOMMANDS_DIR.glob("*.py"))

    commands = []

    for path in module_paths:
        name = inspect.getmodulename(path)
        if name == "__init__":
            continue

        module_name = f"wallspan.subcommands.{name}"

        if module_name in sys.modules:
            module = sys.modules[module_name]

        else:
            # Recipe for loading and executing modules from given filepath
            # comes from importlib docs:
            # https://docs.python.org/3/library/importlib.html#importing-a-source-file-directly
            spec = importlib.util.spec_from_file_location(module_name, path)
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)

        try:
            commands.append(getattr(module, "cli"))

        except AttributeError:
            warn(f"Cannot add command {name}: no 'cli' function found.")

    return commands


def attach_commands(group: click.Group, commands: list[click.Command]):
    """
    Attach each command in a list of click Command objects to a provided group. Useful when
    retrieving a dynamic list of subcommands with import_commands().
    """

    for command in commands:
        group.add_command(command)
