"""
wallspan displays

Print the connected displays as wallspan sees them, along with the virtual desktop they form
and the photo framing that will be requested for it.
"""

import click
from rich.table import Table

from wallspan.cli_utils.console import console
from wallspan.cli_utils.console import describe
from wallspan.cli_utils.decorators import catch_errors
from wallspan.cli_utils.decorators import pass_session
from wallspan.geometry import canvas_size
from wallspan.geometry import classify_aspect
from wallspan.geometry import compute_bounds
from wallspan.geometry import crop_rect


@click.command(name="displays")
@catch_errors
@pass_session
def cli(session):
    """
    Show connected displays and the virtual desktop they span.
    """

    displays = session.snapshot_displays()
    bounds = compute_bounds(displays)
    multiplier = session.config.RENDER_MULTIPLIER

    table = Table(title="Displays")
    for column in ("#", "id", "position", "size", "density", "native px", "canvas crop"):
        table.add_column(column)

    for index, display in enumerate(displays):
        table.add_row(
            str(index),
            display.identifier,
            f"{display.x:g},{display.y:g}",
            f"{display.width:g}x{display.height:g}",
            f"{display.density:g}",
            "x".join(str(n) for n in display.native_size),
            str(crop_rect(display, bounds, multiplier, session.origin)),
        )

    console.print(table)

    canvas_w, canvas_h = canvas_size(bounds, multiplier)
    describe(
        f"virtual desktop ({bounds.min_x:g}, {bounds.min_y:g}) to ({bounds.max_x:g}, {bounds.max_y:g}), "
        f"canvas {canvas_w}x{canvas_h}, requesting {classify_aspect(bounds).value} photos"
    )
