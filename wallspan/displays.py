"""
Display Enumerator

Report connected displays as DisplayInfo snapshots using screeninfo, which queries
Xinerama/XRandR on X11, the Win32 API on Windows and AppKit on macOS.
https://github.com/rr-/screeninfo

screeninfo reports every monitor in pixels with y=0 at the top of the virtual desktop,
growing downward, so displays from this module use Origin.TOP_LEFT and a density of 1.0
(one desktop unit is one native pixel).
"""

import logging

from screeninfo import ScreenInfoError
from screeninfo import get_monitors

from wallspan.geometry import DisplayInfo
from wallspan.geometry import Origin

logger = logging.getLogger(__name__)

ORIGIN = Origin.TOP_LEFT


def list_displays() -> list[DisplayInfo]:
    """
    Take one snapshot of the connected displays, in the enumerator's order. Return an
    empty list if no display can be enumerated; the caller decides whether that is fatal.
    """

    try:
        monitors = get_monitors()

    except ScreenInfoError as error:
        logger.warning("could not enumerate displays: %s", error)
        return []

    displays = []

    for index, monitor in enumerate(monitors):
        displays.append(
            DisplayInfo(
                identifier=monitor.name or str(index),
                x=monitor.x,
                y=monitor.y,
                width=monitor.width,
                height=monitor.height,
            )
        )

    logger.debug("enumerated displays: %s", displays)
    return displays
