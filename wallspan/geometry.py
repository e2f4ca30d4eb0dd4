"""
wallspan Geometry

Virtual desktop math for spanning one image across several displays.

Displays are reported by the display enumerator as rectangles placed in a shared
virtual desktop coordinate space (logical points, not pixels) plus a density factor
that relates points to native pixels. From those rectangles we derive:

- the bounding box of the whole desktop (VirtualDesktopBounds)
- the aspect class used to ask the photo source for a suitably framed photo
- each display's crop rectangle inside the rendered canvas

The vertical convention matters. Canvas rows are stored top-down, but not every
enumerator agrees on which way y grows: X11, Wayland, Windows (and therefore screeninfo)
place y=0 at the top and grow downward, Cocoa places y=0 at the bottom and grows upward.
crop_rect() takes the convention explicitly as an Origin and flips only for BOTTOM_LEFT.
Getting this wrong produces a mis-offset slice with no error, so it is never inferred.
"""

from enum import Enum
from dataclasses import dataclass
from collections.abc import Iterable

from wallspan.errors import NoDisplaysError

# ratio thresholds for AspectClass
LANDSCAPE_THRESHOLD = 1.2
PORTRAIT_THRESHOLD = 0.833


class AspectClass(Enum):
    """
    Framing requested from the photo source. Values match the Unsplash 'orientation'
    query parameter.
    """

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    NEAR_SQUARE = "squarish"


class Origin(Enum):
    """Where y=0 lies in the display enumerator's coordinate space."""

    TOP_LEFT = "top-left"
    BOTTOM_LEFT = "bottom-left"


@dataclass(frozen=True)
class DisplayInfo:
    """
    Immutable snapshot of one display: identifier, position and size in virtual desktop
    units, and the density factor (native pixels per unit).
    """

    identifier: str
    x: float
    y: float
    width: float
    height: float
    density: float = 1.0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Display {self.identifier} has a non-positive size: {self.width}x{self.height}")
        if self.density < 1.0:
            raise ValueError(f"Display {self.identifier} has a density below 1.0: {self.density}")

    @property
    def native_size(self) -> tuple[int, int]:
        """Size of the display in native pixels."""

        return int(self.width * self.density), int(self.height * self.density)


@dataclass(frozen=True)
class VirtualDesktopBounds:
    """Union rectangle of every display in the virtual desktop."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, display: DisplayInfo) -> bool:
        return (
            self.min_x <= display.x
            and self.min_y <= display.y
            and display.x + display.width <= self.max_x
            and display.y + display.height <= self.max_y
        )


def compute_bounds(displays: Iterable[DisplayInfo]) -> VirtualDesktopBounds:
    """
    Return the bounding box of all displays. Raise NoDisplaysError for an empty
    display list since the bounds of nothing are undefined.
    """

    displays = list(displays)

    if not displays:
        raise NoDisplaysError()

    return VirtualDesktopBounds(
        min_x=min(d.x for d in displays),
        min_y=min(d.y for d in displays),
        max_x=max(d.x + d.width for d in displays),
        max_y=max(d.y + d.height for d in displays),
    )


def classify_aspect(bounds: VirtualDesktopBounds) -> AspectClass:
    """Classify the desktop shape by its width/height ratio."""

    ratio = bounds.width / bounds.height

    if ratio > LANDSCAPE_THRESHOLD:
        return AspectClass.LANDSCAPE
    elif ratio < PORTRAIT_THRESHOLD:
        return AspectClass.PORTRAIT
    else:
        return AspectClass.NEAR_SQUARE


def canvas_size(bounds: VirtualDesktopBounds, multiplier: float) -> tuple[int, int]:
    """Pixel size of the composite canvas, rounded down."""

    return int(bounds.width * multiplier), int(bounds.height * multiplier)


def crop_rect(
    display: DisplayInfo,
    bounds: VirtualDesktopBounds,
    multiplier: float,
    origin: Origin = Origin.TOP_LEFT,
) -> tuple[int, int, int, int]:
    """
    Return the (x, y, w, h) rectangle, in canvas pixels, covering the footprint of
    display within the composite canvas.

    For BOTTOM_LEFT coordinates the display's distance from the bottom edge of the
    desktop is converted into a distance from the top edge of the canvas:

        y = (bounds.height - (display.y - bounds.min_y) - display.height) * multiplier

    For TOP_LEFT coordinates both spaces already grow downward and no flip is applied.
    """

    x = (display.x - bounds.min_x) * multiplier

    if origin is Origin.BOTTOM_LEFT:
        y = (bounds.height - (display.y - bounds.min_y) - display.height) * multiplier
    else:
        y = (display.y - bounds.min_y) * multiplier

    return int(x), int(y), int(display.width * multiplier), int(display.height * multiplier)
