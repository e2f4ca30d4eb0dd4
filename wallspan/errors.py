"""
wallspan Errors

Shared error taxonomy for wallspan. Every error raised by the compositor, the photo
source, the rotation file manager and the desktop integration derives from WallspanError,
so the CLI (and any other caller) can report failures with a single except clause while
still being able to tell the cases apart when it matters.

The preview history never raises; its operations are total over its bounded state.
"""


class WallspanError(Exception):
    """Base class for all wallspan errors."""

    pass


class NoDisplaysError(WallspanError):
    """Raised when an operation needs at least one display and none were enumerated."""

    def __init__(self, msg: str = "No displays detected."):
        super().__init__(msg)


class DecodeFailedError(WallspanError):
    """
    Raised when downloaded or loaded bytes cannot be decoded into an image. Wraps the
    PIL UnidentifiedImageError (and friends) for clearer messaging.
    """

    pass


class EncodeFailedError(WallspanError):
    """
    Raised when a display slice could not be produced or encoded. The compositor records
    these per display and only raises them when asked to be strict.
    """

    def __init__(self, display, reason: str):
        self.display = display
        self.reason = reason
        super().__init__(f"Could not render wallpaper for display {display.identifier}: {reason}")


class RenderFailedError(WallspanError):
    """
    Raised when a rotation can't be applied because slices the desktop needs are missing,
    e.g. every display was skipped. Nothing on disk or on screen is changed.
    """

    def __init__(self, failures):
        self.failures = list(failures)
        detail = "; ".join(f"{failure.display.identifier}: {failure.reason}" for failure in self.failures)
        super().__init__(f"Wallpaper not changed ({detail or 'nothing was rendered'})")


class IOFailureError(WallspanError):
    """Raised when writing or deleting a rendered wallpaper file fails."""

    pass


class PhotoSourceError(WallspanError):
    """Base class for failures while asking the photo source for a photo."""

    pass


class NoQueryError(PhotoSourceError):
    def __init__(self, msg: str = "No search terms configured."):
        super().__init__(msg)


class NoAuthError(PhotoSourceError):
    def __init__(self, msg: str = "No Unsplash access key. Run 'wallspan config --key <key>' to set one."):
        super().__init__(msg)


class HTTPStatusError(PhotoSourceError):
    """Raised when the server answers with an unexpected status code."""

    def __init__(self, code: int, body: str = ""):
        self.code = code
        self.body = body
        super().__init__(f"Unsplash API error ({code}): {body or 'No response body'}")


class ParseFailureError(PhotoSourceError):
    def __init__(self, msg: str = "Failed to parse Unsplash response."):
        super().__init__(msg)


class NoDataError(PhotoSourceError):
    def __init__(self, msg: str = "No data received from Unsplash."):
        super().__init__(msg)


class NetworkError(PhotoSourceError):
    """Raised when a request could not be completed at all (DNS, refused connection, timeout)."""

    pass
