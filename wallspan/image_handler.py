"""
Image Handler

Utilities for downloading images and compositing them into per-display wallpapers.

Downloading images: supports only plain GET requests for image resources specified by URL,
with no expectation of authentication. Talking to the photo API (searching, picking a
random photo, building image URLs) is the job of the unsplash handler.

Compositing: one source image is either spanned across all displays ("span mode") or
passed through to each display on its own ("individual mode"). Spanning renders a canvas
the size of the virtual desktop times RENDER_MULTIPLIER, aspect-fills the source onto it
(scale to cover, overflow cropped evenly on both sides), then cuts each display's
footprint out of the canvas and resamples it to the display's native pixel size.

Images are never modified in place. Every transform returns a new PIL image.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from wallspan.errors import DecodeFailedError
from wallspan.errors import EncodeFailedError
from wallspan.errors import HTTPStatusError
from wallspan.errors import NetworkError
from wallspan.errors import NoDataError
from wallspan.errors import NoDisplaysError
from wallspan.geometry import DisplayInfo
from wallspan.geometry import Origin
from wallspan.geometry import canvas_size
from wallspan.geometry import compute_bounds
from wallspan.geometry import crop_rect

logger = logging.getLogger(__name__)

# render at 2x the virtual desktop size so high density displays get real pixels
RENDER_MULTIPLIER = 2.0

JPEG_QUALITY = 92

RESAMPLE = Image.Resampling.LANCZOS


@dataclass
class DisplaySlice:
    """
    Encoded wallpaper for one display. 'index' is the display's position in the enumeration
    the slice was rendered for. 'crop' is the rectangle cut from the composite canvas, or
    None when no canvas was involved (single display or individual mode).
    """

    index: int
    display: DisplayInfo
    crop: Optional[tuple[int, int, int, int]]
    size: tuple[int, int]
    data: bytes


@dataclass
class SliceFailure:
    """A display that did not get a slice, and why."""

    index: int
    display: DisplayInfo
    reason: str


@dataclass
class SpanResult:
    """
    Output of a compositing pass. Slices are in display enumeration order. Displays that
    were skipped are listed in 'failures' so callers can report them instead of silently
    leaving a display on its old wallpaper.
    """

    slices: list = field(default_factory=list)
    failures: list = field(default_factory=list)

    def __iter__(self):
        return iter(self.slices)

    def __len__(self):
        return len(self.slices)

    @property
    def complete(self) -> bool:
        return not self.failures


def download_image(url: str, timeout: float = 60) -> bytes:
    """
    Download the image at url and return the raw bytes. This is an API agnostic function
    that does not take an API key for a particular service.

    requests follows redirects (status codes 3XX) on our behalf, which matters since photo
    URLs often redirect to a CDN. Raise NetworkError when the request can't be completed,
    HTTPStatusError for a bad response and NoDataError for an empty body.
    """

    try:
        r = requests.get(url, timeout=timeout)

    except requests.exceptions.RequestException as error:
        raise NetworkError(f"Download error: could not reach {url}: {error}")

    # successful request but received a bad response from the server.
    try:
        r.raise_for_status()
    except requests.exceptions.HTTPError:
        raise HTTPStatusError(r.status_code, r.text)

    if not r.content:
        raise NoDataError(f"Download error: {url} returned an empty body.")

    return r.content


def decode_image(data: bytes) -> Image.Image:
    """
    Decode raw bytes into an RGB PIL image. PIL only reads the header on open, so
    load() is called to force a full decode and surface truncated files here rather than
    halfway through compositing.
    """

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return image.convert("RGB")

    except UnidentifiedImageError:
        raise DecodeFailedError("Failed to process image: data does not appear to be an image.")

    except (OSError, ValueError, Image.DecompressionBombError) as error:
        raise DecodeFailedError(f"Failed to process image: {error}")


def encode_jpeg(image: Image.Image, quality: int = JPEG_QUALITY) -> bytes:
    """Encode image as JPEG bytes. Raise ValueError or OSError from PIL on failure."""

    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def aspect_fill(image: Image.Image, target_w: int, target_h: int) -> Image.Image:
    """
    Scale image uniformly so it covers target_w x target_h in both dimensions, then crop
    the overflow evenly from both sides. This is scale-to-cover, not letterboxing.
    """

    src_w, src_h = image.size
    scale = max(target_w / src_w, target_h / src_h)

    # float error must never leave the scaled image a pixel short of the canvas
    scaled_w = max(target_w, round(src_w * scale))
    scaled_h = max(target_h, round(src_h * scale))

    offset_x = (scaled_w - target_w) // 2
    offset_y = (scaled_h - target_h) // 2

    logger.debug(
        "aspect fill %sx%s -> %sx%s (scale %.4f, offset %s,%s)",
        src_w, src_h, scaled_w, scaled_h, scale, offset_x, offset_y,
    )

    scaled = image.resize((scaled_w, scaled_h), resample=RESAMPLE)
    return scaled.crop((offset_x, offset_y, offset_x + target_w, offset_y + target_h))


def span_across_displays(
    source: Image.Image,
    displays: list,
    multiplier: float = RENDER_MULTIPLIER,
    origin: Origin = Origin.TOP_LEFT,
    quality: int = JPEG_QUALITY,
    strict: bool = False,
) -> SpanResult:
    """
    Produce one encoded wallpaper per display from a single source image.

    With a single display the source is encoded as-is: there is nothing to span across,
    so no canvas is built and no second resample pass is made.

    With several displays the source is aspect-filled onto a canvas covering the virtual
    desktop at 'multiplier' times its size, and each display's footprint is cropped out in
    enumeration order. A crop whose pixel size differs from the display's native size is
    resampled to native size.

    A slice that cannot be produced (crop entirely outside the canvas, or an encode
    failure) is skipped and recorded in SpanResult.failures, so the remaining displays
    still get their wallpaper. Pass strict=True to raise EncodeFailedError instead.
    """

    displays = list(displays)

    if not displays:
        raise NoDisplaysError()

    result = SpanResult()

    if len(displays) == 1:
        display = displays[0]
        _add_slice(result, 0, display, None, source, quality, strict)
        return result

    bounds = compute_bounds(displays)
    canvas_w, canvas_h = canvas_size(bounds, multiplier)
    logger.debug("virtual desktop %s, canvas %sx%s", bounds, canvas_w, canvas_h)

    canvas = aspect_fill(source, canvas_w, canvas_h)

    for index, display in enumerate(displays):
        x, y, w, h = crop_rect(display, bounds, multiplier, origin)

        if x >= canvas_w or y >= canvas_h or x + w <= 0 or y + h <= 0:
            _skip(result, index, display, f"crop {(x, y, w, h)} lies outside the {canvas_w}x{canvas_h} canvas", strict)
            continue

        cropped = canvas.crop((x, y, x + w, y + h))

        native = display.native_size
        if cropped.size != native:
            cropped = cropped.resize(native, resample=RESAMPLE)

        _add_slice(result, index, display, (x, y, w, h), cropped, quality, strict)

    return result


def pass_through(images: list, displays: list, quality: int = JPEG_QUALITY, strict: bool = False) -> SpanResult:
    """
    Individual mode: pair each display with its own image, unscaled, in display order.
    images[i] belongs to displays[i]; a missing (None) image is recorded as a failure.
    """

    displays = list(displays)

    if not displays:
        raise NoDisplaysError()

    result = SpanResult()

    for index, display in enumerate(displays):
        image = images[index] if index < len(images) else None

        if image is None:
            _skip(result, index, display, "no image was fetched for this display", strict)
            continue

        _add_slice(result, index, display, None, image, quality, strict)

    return result


def _add_slice(result: SpanResult, index: int, display, crop, image, quality, strict):

    try:
        data = encode_jpeg(image, quality=quality)

    except (OSError, ValueError) as error:
        _skip(result, index, display, f"encode failed: {error}", strict)
        return

    result.slices.append(DisplaySlice(index=index, display=display, crop=crop, size=image.size, data=data))


def _skip(result: SpanResult, index: int, display, reason: str, strict: bool):

    if strict:
        raise EncodeFailedError(display, reason)

    logger.warning("skipping display %s: %s", display.identifier, reason)
    result.failures.append(SliceFailure(index=index, display=display, reason=reason))
