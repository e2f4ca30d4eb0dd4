"""
Tests for image_handler.py

Validate that image downloading, decoding and the span compositor behave as expected.

Test images are generated with Pillow in conftest.py, with solid colored halves, so the
content of a slice can be checked by sampling a single pixel instead of comparing against
reference files.

*** MOCKING REQUEST CALLS ***

requests.get is patched so no network call is made. The mocked response is a MagicMock
configured per test with the content, status code or raise_for_status side effect it
needs. As in the rest of the suite, @patch decorators sit closest to the function and the
mock_ parameters come before pytest fixtures in the signature.
"""

import unittest.mock

import pytest
from PIL import Image
from requests import HTTPError
from requests.exceptions import ConnectionError, Timeout

from wallspan.conftest import BLUE
from wallspan.conftest import RED
from wallspan.conftest import dominant
from wallspan.conftest import to_jpeg
from wallspan.conftest import two_tone
from wallspan.geometry import DisplayInfo
from wallspan.geometry import Origin

# following entities are tested in this module:
from wallspan.image_handler import aspect_fill
from wallspan.image_handler import decode_image
from wallspan.image_handler import download_image
from wallspan.image_handler import encode_jpeg
from wallspan.image_handler import pass_through
from wallspan.image_handler import span_across_displays
from wallspan.errors import DecodeFailedError
from wallspan.errors import EncodeFailedError
from wallspan.errors import HTTPStatusError
from wallspan.errors import NetworkError
from wallspan.errors import NoDataError
from wallspan.errors import NoDisplaysError


@pytest.fixture
def pair() -> list:
    """Two small displays side by side so compositing stays fast."""

    return [DisplayInfo("a", 0, 0, 100, 100), DisplayInfo("b", 100, 0, 100, 100)]


@unittest.mock.patch("wallspan.image_handler.requests.get", autospec=True)
def test_download_image_success(mock_get):

    data = to_jpeg(Image.new("RGB", (10, 10), RED))
    mock_get.return_value = unittest.mock.MagicMock(status_code=200, content=data)

    assert download_image("https://images.unsplash.com/photo-1", timeout=5) == data
    mock_get.assert_called_once_with("https://images.unsplash.com/photo-1", timeout=5)


@pytest.mark.parametrize("error", [ConnectionError, Timeout])
@unittest.mock.patch("wallspan.image_handler.requests.get", autospec=True)
def test_download_image_network_error(mock_get, error):

    mock_get.side_effect = error()

    with pytest.raises(NetworkError):
        download_image("https://images.unsplash.com/photo-1")


@unittest.mock.patch("wallspan.image_handler.requests.get", autospec=True)
def test_download_image_bad_status(mock_get):

    response = unittest.mock.MagicMock(status_code=404, text="Not Found")
    response.raise_for_status.side_effect = HTTPError()
    mock_get.return_value = response

    with pytest.raises(HTTPStatusError) as excinfo:
        download_image("https://images.unsplash.com/photo-1")

    assert excinfo.value.code == 404
    assert "Not Found" in str(excinfo.value)


@unittest.mock.patch("wallspan.image_handler.requests.get", autospec=True)
def test_download_image_empty_body(mock_get):

    mock_get.return_value = unittest.mock.MagicMock(status_code=200, content=b"")

    with pytest.raises(NoDataError):
        download_image("https://images.unsplash.com/photo-1")


def test_decode_image():

    image = decode_image(to_jpeg(Image.new("RGB", (40, 30), RED)))

    assert image.size == (40, 30)
    assert image.mode == "RGB"


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"this is not an image",
        b"<html><body>rate limited</body></html>",
    ],
)
def test_decode_image_invalid(data):

    with pytest.raises(DecodeFailedError):
        decode_image(data)


def test_decode_image_truncated():

    data = to_jpeg(two_tone((200, 200)))

    with pytest.raises(DecodeFailedError):
        decode_image(data[: len(data) // 2])


def test_decode_image_too_large(monkeypatch):
    """An image far above Pillow's pixel limit is refused like any other undecodable data."""

    data = to_jpeg(Image.new("RGB", (40, 30), RED))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

    with pytest.raises(DecodeFailedError):
        decode_image(data)


def test_encode_jpeg_converts_mode():

    data = encode_jpeg(Image.new("RGBA", (20, 20), (255, 0, 0, 128)), quality=80)

    assert decode_image(data).size == (20, 20)


@pytest.mark.parametrize(
    "source, target",
    [
        ((400, 100), (200, 100)),
        ((100, 400), (100, 200)),
        ((300, 200), (600, 400)),
        ((123, 457), (320, 180)),
    ],
)
def test_aspect_fill_size(source, target):

    assert aspect_fill(Image.new("RGB", source), *target).size == target


def test_aspect_fill_crops_evenly():
    """
    Wide source, square target: the left and right thirds are cropped away equally, so
    a source with a green middle third comes out entirely green.
    """

    source = Image.new("RGB", (300, 100), RED)
    source.paste((0, 255, 0), (100, 0, 200, 100))

    filled = aspect_fill(source, 100, 100)

    assert filled.getpixel((5, 50))[1] > 200
    assert filled.getpixel((95, 50))[1] > 200


def test_aspect_fill_does_not_modify_source():

    source = Image.new("RGB", (300, 100), RED)
    aspect_fill(source, 100, 100)

    assert source.size == (300, 100)


def test_span_no_displays():

    with pytest.raises(NoDisplaysError):
        span_across_displays(Image.new("RGB", (10, 10)), [])


@unittest.mock.patch("wallspan.image_handler.aspect_fill", autospec=True)
def test_span_single_display_skips_canvas(mock_fill, single_display):
    """A single display gets the source encoded as-is, with no resize pass."""

    source = Image.new("RGB", (3000, 2000), RED)

    result = span_across_displays(source, single_display)

    mock_fill.assert_not_called()
    assert len(result) == 1
    assert result.slices[0].crop is None
    assert result.slices[0].size == (3000, 2000)
    assert result.complete


def test_span_mixed_density(side_by_side):
    """
    A 3840x2160 photo across two 1920x1080 displays, the second at double density:
    the canvas is 7680x2160 and the second crop is already the display's native size.
    """

    source = Image.new("RGB", (3840, 2160), RED)

    result = span_across_displays(source, side_by_side, multiplier=2.0)

    assert [s.display for s in result] == side_by_side
    assert result.slices[0].crop == (0, 0, 3840, 2160)
    assert result.slices[1].crop == (3840, 0, 3840, 2160)
    assert result.slices[0].size == (1920, 1080)
    assert result.slices[1].size == (3840, 2160)


def test_span_content_side_by_side(pair):
    """Left half of the photo lands on the left display, right half on the right."""

    source = two_tone((400, 200), vertical=False)

    left, right = span_across_displays(source, pair)

    assert dominant(left.data) == RED
    assert dominant(right.data) == BLUE


@pytest.mark.parametrize(
    "origin, upper_color, lower_color",
    [
        (Origin.TOP_LEFT, RED, BLUE),
        (Origin.BOTTOM_LEFT, BLUE, RED),
    ],
)
def test_span_content_stacked(stacked, origin, upper_color, lower_color):
    """
    The display with the smaller y is on top when y grows downward and at the bottom
    when y grows upward; it must get the matching half of a red-over-blue photo.
    """

    source = two_tone((100, 200))

    upper, lower = span_across_displays(source, stacked, origin=origin)

    assert upper.size == lower.size == (100, 100)
    assert dominant(upper.data) == upper_color
    assert dominant(lower.data) == lower_color


@unittest.mock.patch("wallspan.image_handler.crop_rect", autospec=True)
def test_span_skips_crop_outside_canvas(mock_crop, pair):

    mock_crop.side_effect = [(0, 0, 200, 200), (5000, 0, 200, 200)]

    result = span_across_displays(Image.new("RGB", (400, 200)), pair)

    assert [s.display.identifier for s in result] == ["a"]
    assert not result.complete
    assert result.failures[0].display.identifier == "b"
    assert result.failures[0].index == 1
    assert "outside" in result.failures[0].reason


@unittest.mock.patch("wallspan.image_handler.crop_rect", autospec=True)
def test_span_strict_raises(mock_crop, pair):

    mock_crop.side_effect = [(0, 0, 200, 200), (5000, 0, 200, 200)]

    with pytest.raises(EncodeFailedError) as excinfo:
        span_across_displays(Image.new("RGB", (400, 200)), pair, strict=True)

    assert excinfo.value.display.identifier == "b"


@unittest.mock.patch("wallspan.image_handler.encode_jpeg", autospec=True)
def test_span_encode_failure_skips_display(mock_encode, pair):

    mock_encode.side_effect = [b"jpeg", OSError("disk full")]

    result = span_across_displays(Image.new("RGB", (400, 200)), pair)

    assert len(result) == 1
    assert result.slices[0].data == b"jpeg"
    assert "disk full" in result.failures[0].reason


def test_pass_through_keeps_display_order(pair):

    images = [Image.new("RGB", (64, 48), RED), Image.new("RGB", (32, 24), BLUE)]

    result = pass_through(images, pair)

    assert [s.display for s in result] == pair
    assert [s.index for s in result] == [0, 1]
    assert [s.size for s in result] == [(64, 48), (32, 24)]
    assert all(s.crop is None for s in result)
    assert dominant(result.slices[1].data) == BLUE


def test_pass_through_missing_image(pair):

    result = pass_through([Image.new("RGB", (10, 10)), None], pair)

    assert len(result) == 1
    assert result.failures[0].display.identifier == "b"


def test_pass_through_no_displays():

    with pytest.raises(NoDisplaysError):
        pass_through([], [])
