"""
wallspan Decorators

Use these decorators to turn plain command functions into wallspan subcommands without
repeating the same boilerplate in each of them:

    @click.command(name="sparkle")
    @catch_errors
    @pass_session
    def cli(session):
        '''Make the wallpaper sparkle'''

        session.next_wallpaper()

pass_session fetches the WallspanSession that the 'wallspan' group stored on the click
context and passes it as the first argument. catch_errors formats any wallspan error with
the "fail" console template and exits with a non-zero status.
"""

import sys
from functools import wraps

import click

from wallspan.cli_utils.console import fail
from wallspan.config import WallspanConfig
from wallspan.config import init
from wallspan.errors import WallspanError
from wallspan.session import WallspanSession


def pass_session(func):
    """
    Inject the session created by the 'wallspan' group. The session is built lazily on
    first use so commands that don't need one (e.g. 'config') never enumerate displays
    or open a thread pool.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        session = ctx.find_object(WallspanContext).session()
        return func(session, *args, **kwargs)

    return wrapper


class WallspanContext:
    """
    Object stored on click.Context.obj by the 'wallspan' group. Loads the config and
    builds the session on first use and remembers both for the rest of the invocation.
    """

    def __init__(self, config_dir=None, session_factory=None):
        self.config_dir = config_dir
        self._session_factory = session_factory or WallspanSession
        self._config = None
        self._session = None

    @property
    def config(self) -> WallspanConfig:
        if self._config is None:
            self._config = init(self.config_dir)

        return self._config

    @config.setter
    def config(self, value: WallspanConfig):
        self._config = value

    def session(self) -> WallspanSession:
        if self._session is None:
            self._session = self._session_factory(self.config)

        return self._session

    def close(self):
        if self._session is not None:
            self._session.close()


def catch_errors(func):
    """
    Catch and format errors with the "fail" console template and gracefully
    exit the application with an error code.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except WallspanError as error:
            fail(str(error))
            sys.exit(1)

    return wrapper


# inject the WallspanContext itself, for commands that work on config rather than a session
pass_wallspan = click.make_pass_decorator(WallspanContext)
