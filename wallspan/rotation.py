"""
wallspan Rotation Files

Manage the rendered wallpaper files of the current rotation in the scratch directory.

Each rotation gets a fresh short tag and its files are named

    wallpaper_<tag>_<displayIndex>.jpg

Desktop environments cache wallpapers by path, so reusing one filename per display would
leave some desktops showing the stale image. A new name per rotation avoids that, at the
cost of having to delete the previous rotation's files ourselves. That happens at the
start of the next rotation: at most one generation of files is on disk at a time, apart
from the brief overlap between begin_rotation() and the new files being written.

Single writer only. Concurrent rotations are prevented by the session's busy flag, not
by any filesystem locking here.
"""

import logging
from pathlib import Path
from typing import Optional
from uuid import uuid4

from wallspan.errors import IOFailureError

logger = logging.getLogger(__name__)

FILE_PREFIX = "wallpaper"
FILE_SUFFIX = ".jpg"


class RotationFiles:
    """Tagged wallpaper file set living in scratch_dir."""

    def __init__(self, scratch_dir: Path):
        self.scratch_dir = Path(scratch_dir).expanduser()
        self._tag: Optional[str] = None

    @property
    def tag(self) -> Optional[str]:
        return self._tag

    def begin_rotation(self, carry_over=()) -> str:
        """
        Start a new rotation: generate a new tag, delete the previous tag's files and
        record the new tag as current. Returns the new tag.

        Indices in carry_over keep the previous rotation's file: it is moved to the new
        tag's name instead of being deleted, for displays that get no new image this time.

        When no rotation has happened yet in this process, leftover files from an earlier
        run are removed instead so they don't pile up across restarts. Cleanup is best
        effort: failures to delete are logged, never raised.
        """

        old_tag = self._tag
        self._tag = uuid4().hex[:8]

        try:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise IOFailureError(f"Could not create scratch directory {self.scratch_dir}: {error}")

        if old_tag is not None:
            for index in sorted(carry_over):
                previous = self._path(old_tag, index)
                try:
                    previous.replace(self.path_for(index))
                    logger.debug("kept wallpaper %s for display %d", previous, index)
                except OSError as error:
                    raise IOFailureError(f"Could not keep previous wallpaper {previous}: {error}")

        if old_tag is None:
            stale = self.scratch_dir.glob(f"{FILE_PREFIX}_*{FILE_SUFFIX}")
        else:
            stale = (file for file in self.scratch_dir.iterdir() if old_tag in file.name)

        for file in list(stale):
            try:
                file.unlink()
                logger.debug("removed old wallpaper %s", file)
            except OSError as error:
                logger.warning("could not remove old wallpaper %s: %s", file, error)

        return self._tag

    def _path(self, tag: str, index: int) -> Path:
        return self.scratch_dir / f"{FILE_PREFIX}_{tag}_{index}{FILE_SUFFIX}"

    def path_for(self, index: int) -> Path:
        """Path of the wallpaper for the display at index in the current rotation."""

        if self._tag is None:
            raise IOFailureError("No rotation in progress. Call begin_rotation() first.")

        return self._path(self._tag, index)

    def has_file(self, index: int) -> bool:
        """Whether the current rotation has a file on disk for the display at index."""

        return self._tag is not None and self._path(self._tag, index).is_file()

    def write(self, index: int, data: bytes) -> Path:
        """Write encoded image data for the display at index and return its path."""

        path = self.path_for(index)

        try:
            path.write_bytes(data)
        except OSError as error:
            raise IOFailureError(f"Could not save wallpaper to {path}: {error}")

        return path

    def current_files(self) -> list:
        """Files on disk belonging to the current rotation, sorted by name."""

        if self._tag is None or not self.scratch_dir.exists():
            return []

        return sorted(file for file in self.scratch_dir.iterdir() if self._tag in file.name)
