"""
wallspan browse

Interactive preview of candidate photos. Photos are fetched one at a time into the preview
history, which can be walked back and forth like a browser history before applying one.
Stepping forward from the newest photo fetches another; fetching after stepping back
replaces everything that came after the current photo.
"""

import click

from wallspan.cli_utils.console import confirm_success
from wallspan.cli_utils.console import describe
from wallspan.cli_utils.console import fail
from wallspan.cli_utils.console import warn
from wallspan.cli_utils.decorators import catch_errors
from wallspan.cli_utils.decorators import pass_session
from wallspan.errors import WallspanError

ACTIONS = {
    "n": "next",
    "b": "back",
    "o": "open",
    "a": "apply",
    "q": "quit",
}


def show(session, entry):
    """Print the preview under the cursor and where it sits in the history."""

    position = session.history.cursor + 1
    width, height = entry.thumbnail.size
    describe(
        f":framed_picture-emoji: [{position}/{len(session.history)}] {entry.photo.credit} "
        f"({entry.photo.photo_id}, preview {width}x{height})"
    )


@click.command(name="browse")
@click.option("--query", "-q", help="Search term for fetched photos. Defaults to random terms from your config.")
@click.option("--mode", type=click.Choice(["span", "individual"]), help="Override the configured mode when applying.")
@catch_errors
@pass_session
def cli(session, query, mode):
    """
    Preview photos and pick one to apply.
    """

    prompt = ", ".join(f"[{key}]{name[1:]}" for key, name in ACTIONS.items())

    entry = session.history.current() or session.fetch_preview(query)
    show(session, entry)

    while True:
        action = click.prompt(prompt, type=click.Choice(list(ACTIONS)), default="n", show_choices=False)

        if action == "q":
            break

        try:
            if action == "n":
                entry = session.preview_forward(query)

            elif action == "b":
                previous = session.preview_back()
                if previous is None:
                    warn("already at the oldest preview")
                    continue
                entry = previous

            elif action == "o":
                click.launch(entry.photo.attribution_url)
                continue

            elif action == "a":
                session.apply_preview(mode=mode)
                if session.last_error:
                    warn(session.last_error)
                confirm_success(f":white_check_mark-emoji: 'browse' applied {entry.photo.credit}")
                continue

        except WallspanError as error:
            fail(str(error))
            continue

        show(session, entry)
