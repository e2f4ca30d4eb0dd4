"""
Wallpaper Handler

This module makes a rendered image file the visible wallpaper of a display. Two desktop
backends are supported, both driven through their command line tools so that no
expensive bindings are needed:

- GNOME, through gsettings and the org.gnome.desktop.background schema. GNOME keeps one
  picture for every display, so this backend cannot give displays different images.
  https://github.com/GNOME/gsettings-desktop-schemas/blob/master/schemas/org.gnome.desktop.background.gschema.xml.in

- feh, for X11 window managers. 'feh --bg-fill a.jpg b.jpg' puts a.jpg on the first
  Xinerama screen and b.jpg on the second, so this backend supports one image per display.

subprocess.CalledProcessError is raised by subprocess.run if a non-zero exit status is
returned, and FileNotFoundError if the tool is not installed. Both are reported as
WallpaperUpdateError.
"""

import logging
import subprocess
from collections import OrderedDict
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from wallspan.errors import WallspanError

logger = logging.getLogger(__name__)

SCALING_MODES = ("zoom", "scaled", "stretched", "centered")

GNOME_PICTURE_OPTIONS = {
    "zoom": "zoom",
    "scaled": "scaled",
    "stretched": "stretched",
    "centered": "centered",
}

FEH_OPTIONS = {
    "zoom": "--bg-fill",
    "scaled": "--bg-max",
    "stretched": "--bg-scale",
    "centered": "--bg-center",
}


class WallpaperUpdateError(WallspanError):
    """
    Raised when an attempt to update the desktop background fails.
    """

    pass


def validate_wallpaper(img_path) -> Path:
    """
    Check that img_path points to an existing image file and return it as an absolute Path.
    Desktop settings are read directly by the desktop with no path validation on their
    side, so a bad path would silently show an empty background instead of failing.
    """

    try:
        wallpaper_location = Path(str(img_path).removeprefix("file://")).expanduser().resolve()
    except TypeError:
        raise WallpaperUpdateError(f"Invalid parameter: {img_path} is not a valid Pathlike object.")

    # subsequent operations will fail if path does not exist or is not a file, so catch this.
    if str(img_path) == "" or not wallpaper_location.is_file():
        raise WallpaperUpdateError(f"Invalid path provided for image location: {img_path} does not exist.")

    try:
        with Image.open(wallpaper_location) as image:
            image.verify()

    except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError):
        raise WallpaperUpdateError(f"Invalid image type provided. {wallpaper_location.name} is not a valid image.")

    return wallpaper_location


def _run(command: list, action: str) -> subprocess.CompletedProcess:

    logger.debug("running %s", command)

    try:
        return subprocess.run(
            command,
            check=True,
            text=True,
            stdin=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdout=subprocess.PIPE,
        )

    except subprocess.CalledProcessError as error:
        raise WallpaperUpdateError(f"Could not {action}: {error.stderr or error}")

    except FileNotFoundError as error:
        raise WallpaperUpdateError(f"Could not {action}: {command[0]} is not installed ({error})")


def _check_scaling(scaling_mode: str):

    if scaling_mode not in SCALING_MODES:
        raise WallpaperUpdateError(f"Unknown scaling mode '{scaling_mode}'. Choose one of {', '.join(SCALING_MODES)}.")


class GnomeDesktop:
    """GNOME desktop background through gsettings. One picture shared by all displays."""

    name = "gnome"
    per_display = False
    schema = "org.gnome.desktop.background"

    def __init__(self, gsettings: str = "gsettings"):
        self.gsettings = gsettings

    def _set(self, key: str, value: str):

        # ordered dict is used here for clarity and to preserve sequence for command arguments.
        set_desktop_background = OrderedDict(
            [
                ("cmd", self.gsettings),
                ("subcmd", "set"),
                ("schema", self.schema),
                ("key", key),
                ("value", value),
            ]
        )

        _run(list(set_desktop_background.values()), action="set desktop background")

    def set_wallpaper(self, file_path, display_id: str = None, scaling_mode: str = "zoom"):
        """
        Update the background image to file_path. display_id is accepted for interface
        compatibility but GNOME applies the picture to every display.
        """

        _check_scaling(scaling_mode)
        wallpaper_location = validate_wallpaper(file_path)
        uri = wallpaper_location.as_uri()

        self._set("picture-uri", uri)
        # GNOME 42+ picks picture-uri-dark when the dark style is active
        self._set("picture-uri-dark", uri)
        self._set("picture-options", GNOME_PICTURE_OPTIONS[scaling_mode])

        logger.info("gnome wallpaper set to %s", wallpaper_location)

    def get_current_wallpaper(self) -> Path:
        """
        Retrieve the current wallpaper from the GNOME background settings.
        """

        process = _run([self.gsettings, "get", self.schema, "picture-uri"], action="retrieve current background")

        # gsettings prints the value quoted, e.g. 'file:///home/me/picture.jpg'
        return Path(process.stdout.strip().removeprefix("'").removesuffix("'").removeprefix("file://"))


class FehDesktop:
    """
    feh backend for X11. feh takes the images of all screens in one invocation, so the
    assignment of each display is remembered and the full set is applied on every call.
    Once the last display of a rotation is set, every screen shows its own image.
    """

    name = "feh"
    per_display = True

    def __init__(self, feh: str = "feh"):
        self.feh = feh
        self.assignments = OrderedDict()

    def set_wallpaper(self, file_path, display_id: str = None, scaling_mode: str = "zoom"):

        _check_scaling(scaling_mode)
        wallpaper_location = validate_wallpaper(file_path)

        self.assignments[display_id] = wallpaper_location

        command = [self.feh, "--no-fehbg", FEH_OPTIONS[scaling_mode]]
        command.extend(str(path) for path in self.assignments.values())

        _run(command, action="set desktop background")
        logger.info("feh wallpaper for display %s set to %s", display_id, wallpaper_location)

    def reset(self):
        """Forget display assignments, e.g. when the set of displays changed."""

        self.assignments.clear()


DESKTOPS = {
    GnomeDesktop.name: GnomeDesktop,
    FehDesktop.name: FehDesktop,
}


def get_desktop(name: str):
    """Return a desktop integration instance for backend name."""

    try:
        return DESKTOPS[name]()
    except KeyError:
        raise WallpaperUpdateError(f"Unknown desktop backend '{name}'. Choose one of {', '.join(DESKTOPS)}.")
