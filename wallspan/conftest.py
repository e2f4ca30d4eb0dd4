"""
conftest.py

Test configuration for wallspan tests.

Defines Pytest fixtures for supplying test data to tests across the entire
test suite. Fixtures used within only a single module are defined
directly in that module. Images are generated with Pillow on the fly rather than
read from disk so that every test knows exactly which pixel is which.
"""

import io

import pytest
from PIL import Image

from wallspan.config import WallspanConfig
from wallspan.geometry import DisplayInfo
from wallspan.unsplash_handler import UnsplashPhoto

RED = (255, 0, 0)
BLUE = (0, 0, 255)
GREEN = (0, 255, 0)


def two_tone(size, first=RED, second=BLUE, vertical=True) -> Image.Image:
    """
    Image split in two halves: top/bottom when vertical, left/right otherwise.
    """

    width, height = size
    image = Image.new("RGB", size, first)

    if vertical:
        image.paste(second, (0, height // 2, width, height))
    else:
        image.paste(second, (width // 2, 0, width, height))

    return image


def to_jpeg(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG")
    return buffer.getvalue()


def dominant(data: bytes, point=None):
    """Decode JPEG bytes and return which of RED/BLUE/GREEN the pixel at point is closest to."""

    with Image.open(io.BytesIO(data)) as image:
        image = image.convert("RGB")
        if point is None:
            point = (image.width // 2, image.height // 2)
        pixel = image.getpixel(point)

    return min((RED, BLUE, GREEN), key=lambda color: sum((a - b) ** 2 for a, b in zip(pixel, color)))


class FakeSource:
    """Photo source returning canned photos and recording every request."""

    def __init__(self, photos=None, error=None):
        self.photos = list(photos or [])
        self.error = error
        self.calls = []

    def fetch_one(self, query=None, aspect_class=None):
        self.calls.append((query, aspect_class))

        if self.error is not None:
            raise self.error

        index = len(self.calls) - 1
        if index < len(self.photos):
            return self.photos[index]

        return make_photo(f"photo{index}")


class FakeDesktop:
    """Desktop integration recording every wallpaper it was asked to set."""

    name = "fake"

    def __init__(self, per_display=True):
        self.per_display = per_display
        self.applied = []

    def set_wallpaper(self, file_path, display_id=None, scaling_mode="zoom"):
        assert file_path.exists()
        self.applied.append((file_path, display_id, scaling_mode))


def make_photo(photo_id="abc123", name="Ansel Adams") -> UnsplashPhoto:
    return UnsplashPhoto(
        photo_id=photo_id,
        raw_url=f"https://images.unsplash.com/{photo_id}?ixid=xyz",
        thumbnail_url=f"https://images.unsplash.com/{photo_id}?w=400",
        attribution_name=name,
        attribution_url=f"https://unsplash.com/@{name.lower().replace(' ', '')}",
    )


@pytest.fixture
def photo() -> UnsplashPhoto:
    return make_photo()


@pytest.fixture
def single_display() -> list:
    return [DisplayInfo("eDP-1", 0, 0, 1920, 1080)]


@pytest.fixture
def side_by_side() -> list:
    """Two 1080p displays next to each other, the right one at double density."""

    return [
        DisplayInfo("left", 0, 0, 1920, 1080, 1.0),
        DisplayInfo("right", 1920, 0, 1920, 1080, 2.0),
    ]


@pytest.fixture
def stacked() -> list:
    """Two equal displays, 'upper' placed at y=0 and 'lower' at y=100."""

    return [
        DisplayInfo("upper", 0, 0, 100, 100),
        DisplayInfo("lower", 0, 100, 100, 100),
    ]


@pytest.fixture
def config(tmp_path) -> WallspanConfig:
    return WallspanConfig(
        WALLSPAN_CONFIG_DIR=tmp_path / "config",
        WALLSPAN_SCRATCH_DIR=tmp_path / "scratch",
        UNSPLASH_ACCESS_KEY="test-key",
    )
