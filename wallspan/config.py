"""
wallspan Configuration Management

This file handles utilities related to generating and loading variables from a configuration file.
WallspanConfig should be loaded at startup, before any attempt at command processing is done. Raise a
WallspanConfigError for any issues that arise in processing or retrieving these configuration variables.

The configuration file is "config.json" and is saved at ~/.config/wallspan/config.json as per modern
Linux app development conventions, or wherever the WALLSPAN_CONFIG_DIR environment variable points.
Rendered wallpapers go to a scratch directory under the user's data directory
(~/.local/share/wallspan by default).

There is no module level config object: the CLI loads one and hands it to the session that needs it.
"""

import json
import os
from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from pathlib import Path, PurePath

from wallspan.errors import WallspanError
from wallspan.history import HISTORY_CAPACITY
from wallspan.image_handler import JPEG_QUALITY
from wallspan.image_handler import RENDER_MULTIPLIER
from wallspan.wallpaper_handler import DESKTOPS
from wallspan.wallpaper_handler import SCALING_MODES

MODES = ("span", "individual")

DEFAULT_SEARCH_TERMS = [
    "bridge night city lights",
    "nebula astrophotography",
    "night bridge long exposure",
    "galaxy nebula stars",
    "suspension bridge night",
    "milky way astrophotography",
    "bridge cityscape night",
    "deep space nebula hubble",
]


class WallspanConfigError(WallspanError):
    """Raise when an issue occurs with handling wallspan configuration."""

    pass


class PathEncoder(json.JSONEncoder):
    """
    custom encoder adds support for serializing pathlib objects as strings
    """

    def default(self, o):
        if isinstance(o, PurePath):
            return str(o)

        else:
            return json.JSONEncoder.default(self, o)


def default_config_dir() -> Path:
    return Path(os.environ.get("WALLSPAN_CONFIG_DIR", "~/.config/wallspan")).expanduser().resolve()


def default_scratch_dir() -> Path:
    base = os.environ.get("XDG_DATA_HOME", "~/.local/share")
    return (Path(base) / "wallspan").expanduser().resolve()


@dataclass
class WallspanConfig:
    """
    Dataclass to represent configuration variables for wallspan.

    The pattern applied is to instantiate a WallspanConfig by supplying variadic keyword arguments from
    a deserialized json object. That way application code can reference the identifiers in the
    dataclass without ever touching brittle dictionary keys. For simplicity the json object is fully
    flat; SEARCH_TERMS is the only list.
    """

    WALLSPAN_CONFIG_DIR: Path = field(default_factory=default_config_dir)
    WALLSPAN_SCRATCH_DIR: Path = field(default_factory=default_scratch_dir)
    UNSPLASH_ACCESS_KEY: str = ""
    SEARCH_TERMS: list = field(default_factory=lambda: list(DEFAULT_SEARCH_TERMS))
    ROTATION_INTERVAL: int = 1800
    MODE: str = "span"
    DESKTOP_BACKEND: str = "gnome"
    SCALING_MODE: str = "zoom"
    RENDER_MULTIPLIER: float = RENDER_MULTIPLIER
    HISTORY_CAPACITY: int = HISTORY_CAPACITY
    JPEG_QUALITY: int = JPEG_QUALITY
    REQUEST_TIMEOUT: float = 60

    def __post_init__(self):
        """
        Handle the case where a new WallspanConfig is created from JSON, which cannot
        deserialize a str into a Path, and reject values the rest of wallspan can't use.

        __post_init__ is called automatically by the generated __init__ method.
        """

        self.WALLSPAN_CONFIG_DIR = Path(self.WALLSPAN_CONFIG_DIR).expanduser()
        self.WALLSPAN_SCRATCH_DIR = Path(self.WALLSPAN_SCRATCH_DIR).expanduser()

        if self.MODE not in MODES:
            raise WallspanConfigError(f"MODE must be one of {', '.join(MODES)}, got '{self.MODE}'.")

        if self.DESKTOP_BACKEND not in DESKTOPS:
            raise WallspanConfigError(
                f"DESKTOP_BACKEND must be one of {', '.join(DESKTOPS)}, got '{self.DESKTOP_BACKEND}'."
            )

        if self.SCALING_MODE not in SCALING_MODES:
            raise WallspanConfigError(
                f"SCALING_MODE must be one of {', '.join(SCALING_MODES)}, got '{self.SCALING_MODE}'."
            )

        if not isinstance(self.SEARCH_TERMS, list):
            raise WallspanConfigError("SEARCH_TERMS must be a list of strings.")

        if self.ROTATION_INTERVAL <= 0:
            raise WallspanConfigError("ROTATION_INTERVAL must be a positive number of seconds.")

        if self.RENDER_MULTIPLIER <= 0:
            raise WallspanConfigError("RENDER_MULTIPLIER must be positive.")

        if self.HISTORY_CAPACITY < 1:
            raise WallspanConfigError("HISTORY_CAPACITY must be at least 1.")

        if not 1 <= self.JPEG_QUALITY <= 100:
            raise WallspanConfigError("JPEG_QUALITY must be between 1 and 100.")

    @property
    def access_key(self) -> str:
        """The Unsplash access key. The UNSPLASH_ACCESS_KEY environment variable wins over the file."""

        return os.environ.get("UNSPLASH_ACCESS_KEY") or self.UNSPLASH_ACCESS_KEY

    def generate_config_json(self) -> Path:
        """
        Write the WallspanConfig to file, serializing to JSON. Returns filepath of written
        config.json file located at WALLSPAN_CONFIG_DIR.

        Warning: will overwrite any existing config file for wallspan.
        """

        try:
            to_json = json.dumps(asdict(self), sort_keys=True, indent=4, cls=PathEncoder)

        except TypeError as error:
            raise WallspanConfigError(f"There was an error trying to serialize config data to JSON: {error}")

        dest_file = self.WALLSPAN_CONFIG_DIR / "config.json"

        try:
            self.WALLSPAN_CONFIG_DIR.mkdir(parents=True, exist_ok=True)

            with open(dest_file, "w") as file:
                file.write(to_json)

        except OSError as error:
            raise WallspanConfigError(f"There was an error saving the configuration file: {error}.")

        return dest_file

    def update(self, **changes) -> "WallspanConfig":
        """
        Return a new, validated config with changes applied and persist it. The current
        object is left untouched if validation fails.
        """

        known = {f.name for f in fields(self)}
        unknown = set(changes) - known

        if unknown:
            raise WallspanConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        updated = WallspanConfig(**{**asdict(self), **changes})
        updated.generate_config_json()
        return updated


def init(config_dir: Path = None) -> WallspanConfig:
    """Load the wallspan config, creating a default config file if there isn't a usable one."""

    try:
        config: WallspanConfig = load_config(config_dir)

    except FileNotFoundError:

        config: WallspanConfig = WallspanConfig()
        if config_dir is not None:
            config.WALLSPAN_CONFIG_DIR = Path(config_dir).expanduser()
        config.generate_config_json()

    return config


def load_config(config_dir: Path = None) -> WallspanConfig:
    """
    Load config.json from config_dir, the WALLSPAN_CONFIG_DIR environment variable or
    ~/.config/wallspan and instantiate variables as a WallspanConfig dataclass.

    Raise FileNotFoundError if there is no config file yet, and WallspanConfigError if the
    file exists but can't be used.
    """

    config_dir = Path(config_dir).expanduser() if config_dir is not None else default_config_dir()
    config_src = config_dir / "config.json"

    try:
        with config_src.open("r") as file:
            from_json = json.loads(file.read())

    except json.JSONDecodeError as error:
        raise WallspanConfigError(f"There was an issue reading the config at {config_src}: {error}")

    except FileNotFoundError:
        raise

    except OSError as error:
        raise WallspanConfigError(f"There was an issue opening the config at {config_src}: {error}")

    if not isinstance(from_json, dict):
        raise WallspanConfigError(f"The config at {config_src} is not a JSON object.")

    from_json["WALLSPAN_CONFIG_DIR"] = config_dir

    try:
        return WallspanConfig(**from_json)

    except TypeError as error:
        raise WallspanConfigError(f"The config at {config_src} contains unknown settings: {error}")
