"""
wallspan Session

WallspanSession is the context object tying the photo source, the display enumerator,
the compositor, the rotation files and the desktop integration together. It owns the
state that lives for as long as the program runs: the preview history, the busy flag,
the last error message and the credit line of the current wallpaper.

Threading model: the thread that calls into the session is the control thread. Network
requests, decoding and compositing are submitted to a thread pool and the control thread
blocks on their futures; only once results are back does it touch shared state. The
history, busy flag, last error and credit are therefore only ever mutated from one
thread. Only individual mode has more than one job in flight at once (one download per
display); every other step is a single job the control thread waits for. A call made from
another thread while an operation is in flight sees the busy flag and returns at once.

One operation at a time: while an operation is in flight, the busy flag is set and new
requests are no-ops (they return False or None) rather than being queued. There is no
cancellation; an operation runs to completion or failure.
"""

import logging
from concurrent.futures import FIRST_EXCEPTION
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import wait
from contextlib import contextmanager
from typing import Optional

from wallspan import displays as display_enumerator
from wallspan.config import WallspanConfig
from wallspan.errors import NoDisplaysError
from wallspan.errors import RenderFailedError
from wallspan.errors import WallspanError
from wallspan.geometry import canvas_size
from wallspan.geometry import classify_aspect
from wallspan.geometry import compute_bounds
from wallspan.history import PreviewEntry
from wallspan.history import PreviewHistory
from wallspan.image_handler import SpanResult
from wallspan.image_handler import decode_image
from wallspan.image_handler import download_image
from wallspan.image_handler import pass_through
from wallspan.image_handler import span_across_displays
from wallspan.rotation import RotationFiles
from wallspan.unsplash_handler import UnsplashSource
from wallspan.wallpaper_handler import get_desktop

logger = logging.getLogger(__name__)

MAX_WORKERS = 4


class WallspanSession:
    """
    Orchestrates wallpaper rotations and the preview history for one running program.
    Collaborators default to the real implementations built from config and can be
    swapped out (tests pass fakes).
    """

    def __init__(
        self,
        config: WallspanConfig,
        source=None,
        desktop=None,
        list_displays=None,
        origin=None,
        files: RotationFiles = None,
        history: PreviewHistory = None,
        max_workers: int = MAX_WORKERS,
    ):
        self.config = config

        if source is None:
            source = UnsplashSource(
                access_key=config.access_key,
                search_terms=config.SEARCH_TERMS,
                timeout=config.REQUEST_TIMEOUT,
            )
        self.source = source
        self.desktop = desktop if desktop is not None else get_desktop(config.DESKTOP_BACKEND)
        self.list_displays = list_displays if list_displays is not None else display_enumerator.list_displays
        self.origin = origin if origin is not None else display_enumerator.ORIGIN
        self.files = files if files is not None else RotationFiles(config.WALLSPAN_SCRATCH_DIR)

        # an empty history is falsy, so test against None
        self.history = history if history is not None else PreviewHistory(capacity=config.HISTORY_CAPACITY)

        self.busy = False
        self.last_error: Optional[str] = None
        self.current_credit: Optional[str] = None

        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="wallspan")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self._executor.shutdown(wait=True)

    @contextmanager
    def _operation(self, name: str):
        """
        Mark the session busy for the duration of an operation. A failure is recorded as
        last_error and re-raised; the busy flag is always cleared.
        """

        self.busy = True
        logger.debug("%s started", name)

        try:
            yield

        except WallspanError as error:
            self.last_error = f"Error: {error}"
            logger.error("%s failed: %s", name, error)
            raise

        finally:
            self.busy = False

    def snapshot_displays(self) -> list:
        """One consistent enumeration of the displays for the current operation."""

        displays = list(self.list_displays())

        if not displays:
            raise NoDisplaysError()

        return displays

    def next_wallpaper(self, mode: str = None, query: str = None) -> bool:
        """
        Fetch a new photo (or one per display in individual mode), render it and make it the
        wallpaper. Returns False without doing anything if another operation is in flight.
        """

        if self.busy:
            logger.info("next wallpaper ignored: another operation is in progress")
            return False

        mode = mode or self.config.MODE

        with self._operation("next wallpaper"):
            displays = self.snapshot_displays()

            if mode == "individual":
                photos, result = self._fetch_individual(displays, query)
            else:
                photo = self.source_fetch(query, displays)
                photos = [photo]
                result = self._submit(self._render_span, photo, displays)

            self._apply(result, displays)
            self._finish(result, photos)

        return True

    def fetch_preview(self, query: str = None) -> Optional[PreviewEntry]:
        """
        Fetch a new candidate photo and its thumbnail and append it to the preview history.
        Returns the new entry, or None if another operation is in flight.
        """

        if self.busy:
            logger.info("preview fetch ignored: another operation is in progress")
            return None

        with self._operation("preview fetch"):
            displays = self.snapshot_displays()
            photo = self.source_fetch(query, displays)
            thumbnail = self._submit(self._download_and_decode, photo.thumbnail_url)

            entry = PreviewEntry(photo=photo, thumbnail=thumbnail)
            self.history.append(entry)

        self.last_error = None
        return entry

    def preview_back(self) -> Optional[PreviewEntry]:
        """Step back in the preview history. None when already at the oldest entry."""

        return self.history.move_back()

    def preview_forward(self, query: str = None) -> Optional[PreviewEntry]:
        """
        Step forward in the preview history, fetching a new entry when already at the
        newest one. None only if the session is busy.
        """

        entry = self.history.move_forward()

        if entry is None:
            entry = self.fetch_preview(query)

        return entry

    def apply_preview(self, mode: str = None) -> bool:
        """
        Make the photo under the preview cursor the wallpaper. Returns False if there is no
        preview yet or another operation is in flight.
        """

        entry = self.history.current()

        if entry is None or self.busy:
            return False

        mode = mode or self.config.MODE

        with self._operation("apply preview"):
            displays = self.snapshot_displays()

            if mode == "individual":
                width = max(max(display.native_size) for display in displays)
                image = self._submit(self._download_and_decode, entry.photo.full_image_url(width))
                result = self._submit(
                    pass_through, [image] * len(displays), displays, quality=self.config.JPEG_QUALITY
                )
            else:
                result = self._submit(self._render_span, entry.photo, displays)

            self._apply(result, displays)
            self._finish(result, [entry.photo])

        return True

    def source_fetch(self, query, displays):
        """Ask the photo source for a photo framed for the whole desktop."""

        aspect = classify_aspect(compute_bounds(displays))
        return self._submit(self.source.fetch_one, query, aspect)

    def _submit(self, func, *args, **kwargs):
        """
        Run func on the worker pool and block until its result is back. The caller stays
        on the control thread, so this adds no concurrency by itself.
        """

        return self._executor.submit(func, *args, **kwargs).result()

    def _download_and_decode(self, url: str):
        return decode_image(download_image(url, timeout=self.config.REQUEST_TIMEOUT))

    def _render_span(self, photo, displays) -> SpanResult:
        """Worker side of span mode: download, decode and composite."""

        canvas_w, canvas_h = canvas_size(compute_bounds(displays), self.config.RENDER_MULTIPLIER)
        source = self._download_and_decode(photo.full_image_url(max(canvas_w, canvas_h)))

        return span_across_displays(
            source,
            displays,
            multiplier=self.config.RENDER_MULTIPLIER,
            origin=self.origin,
            quality=self.config.JPEG_QUALITY,
        )

    def _fetch_for_display(self, query, display):
        """Worker side of individual mode: one photo framed for a single display."""

        aspect = classify_aspect(compute_bounds([display]))
        photo = self.source.fetch_one(query, aspect)
        image = self._download_and_decode(photo.full_image_url(max(display.native_size)))
        return photo, image

    def _fetch_individual(self, displays, query):
        """
        Fetch one photo per display in parallel. Results are collected by display index
        and only used once every download has finished, or the first one has failed, then
        reassembled in display order regardless of completion order.
        """

        futures = {
            self._executor.submit(self._fetch_for_display, query, display): index
            for index, display in enumerate(displays)
        }

        done, pending = wait(futures, return_when=FIRST_EXCEPTION)

        for future in done:
            if future.exception() is not None:
                for other in pending:
                    other.cancel()
                raise future.exception()

        results = {futures[future]: future.result() for future in futures}

        photos = [results[index][0] for index in range(len(displays))]
        images = [results[index][1] for index in range(len(displays))]

        result = self._submit(pass_through, images, displays, quality=self.config.JPEG_QUALITY)
        return photos, result

    def _apply(self, result: SpanResult, displays: list):
        """
        Write the rendered slices as a new rotation and hand them to the desktop. Files are
        all written before any of them is applied.

        A skipped display keeps the file it showed in the previous rotation. When a display
        the desktop needs has neither a new slice nor an earlier file, RenderFailedError is
        raised before anything on disk or on screen changes.
        """

        if not result.slices:
            raise RenderFailedError(result.failures)

        rendered = {display_slice.index for display_slice in result}
        failures = {failure.index: failure for failure in result.failures}

        if self.desktop.per_display:
            targets = list(range(len(displays)))
            kept = [index for index in targets if index not in rendered]
            missing = [failures[index] for index in kept if not self.files.has_file(index)]
        else:
            targets, kept = [0], []
            missing = [] if 0 in rendered else [failures[0]]

            if len(displays) > 1:
                logger.warning(
                    "the %s backend shows one image on every display; only display %s is applied",
                    self.desktop.name,
                    displays[0].identifier,
                )

        if missing:
            raise RenderFailedError(missing)

        self.files.begin_rotation(carry_over=kept)

        for display_slice in result:
            self.files.write(display_slice.index, display_slice.data)

        if hasattr(self.desktop, "reset"):
            self.desktop.reset()

        # feh pairs images with screens by argument position, so every display is set in order
        for index in targets:
            self.desktop.set_wallpaper(self.files.path_for(index), displays[index].identifier, self.config.SCALING_MODE)

    def _finish(self, result: SpanResult, photos: list):
        """Record credit and surface displays that were skipped."""

        names = []
        for photo in photos:
            if photo.attribution_name not in names:
                names.append(photo.attribution_name)

        self.current_credit = f"Photo by {', '.join(names)} on Unsplash"

        if result.complete:
            self.last_error = None
        else:
            skipped = "; ".join(f"{failure.display.identifier}: {failure.reason}" for failure in result.failures)
            self.last_error = f"Error: some displays were not updated ({skipped})"
