"""
Unsplash API Handler

This module is the photo source for wallspan. It asks the Unsplash API for a random photo
matching a search query and framing (landscape, portrait or squarish) and returns the URLs
and attribution needed to download, preview and credit it.

The API requires a developer account and corresponding access key, however it is
otherwise free to use. See https://unsplash.com/documentation#get-a-random-photo

Downloading the image bytes themselves is left to image_handler.download_image, which
keeps this file limited to talking to the API and constructing well-formed URLs.
"""

import json
import logging
import random
from dataclasses import dataclass
from functools import wraps
from urllib.parse import urlencode

import requests

from wallspan.errors import HTTPStatusError
from wallspan.errors import NetworkError
from wallspan.errors import NoAuthError
from wallspan.errors import NoDataError
from wallspan.errors import NoQueryError
from wallspan.errors import ParseFailureError
from wallspan.geometry import AspectClass

logger = logging.getLogger(__name__)


def base_url(func):
    """
    Use this decorator to inject the base url into each endpoint builder. That way should
    the url change in the future it can be done in one place.
    """

    base_url = "https://api.unsplash.com"

    @wraps(func)
    def wrapper(*args, **kwargs):
        return func(base_url=base_url, *args, **kwargs)

    return wrapper


def url_path(url_path: str):
    """
    Use this decorator to inject the correct path component for the intended endpoint.
    """

    def wrapper(func):
        @wraps(func)
        def inner(*args, **kwargs):
            return func(url_path=url_path, *args, **kwargs)

        return inner

    return wrapper


def make_unsplash_url(path_components: list[str]) -> str:
    return "/".join(path_components).removesuffix("/")


@base_url
@url_path("photos/random")
def random_photo_endpoint(*args, **kwargs) -> str:
    """Endpoint returning the JSON description of one random photo."""

    return make_unsplash_url(path_components=[kwargs.get("base_url"), kwargs.get("url_path")])


@dataclass(frozen=True)
class UnsplashPhoto:
    """
    Metadata for one photo. raw_url is the unsized image URL from the API; use
    full_image_url() to request it at a specific width.
    """

    photo_id: str
    raw_url: str
    thumbnail_url: str
    attribution_name: str
    attribution_url: str

    def full_image_url(self, width: int, quality: int = 100) -> str:
        """
        Image URL resized by Unsplash to 'width' pixels at the given JPEG quality.
        Raw URLs already carry a query string (ixid etc.) so parameters are appended.
        """

        params = urlencode({"w": int(width), "q": int(quality), "fm": "jpg"})
        separator = "&" if "?" in self.raw_url else "?"
        return f"{self.raw_url}{separator}{params}"

    @property
    def credit(self) -> str:
        return f"Photo by {self.attribution_name} on Unsplash"


class UnsplashSource:
    """
    Unsplash photo source. The access key and fallback search terms are given at
    construction; each fetch_one() is a single GET against the random photo endpoint.
    """

    def __init__(self, access_key: str, search_terms: list = None, timeout: float = 60):
        self.access_key = access_key
        self.search_terms = list(search_terms or [])
        self.timeout = timeout

    def pick_query(self) -> str:
        """Pick one of the configured search terms at random."""

        terms = [term.strip() for term in self.search_terms if term and term.strip()]

        if not terms:
            raise NoQueryError()

        return random.choice(terms)

    def fetch_one(self, query: str = None, aspect_class: AspectClass = AspectClass.LANDSCAPE) -> UnsplashPhoto:
        """
        Request one random photo for query (or a random configured search term) framed
        for aspect_class. Raise a PhotoSourceError subclass describing what went wrong.
        """

        if not self.access_key:
            raise NoAuthError()

        if query is None or not query.strip():
            query = self.pick_query()

        params = {
            "query": query,
            "orientation": aspect_class.value,
            "content_filter": "high",
        }
        headers = {
            "Authorization": f"Client-ID {self.access_key}",
            "Accept-Version": "v1",
        }

        logger.info("fetching random photo for %r (%s)", query, aspect_class.value)

        try:
            r = requests.get(random_photo_endpoint(), params=params, headers=headers, timeout=self.timeout)

        except requests.exceptions.RequestException as error:
            raise NetworkError(f"Could not reach Unsplash: {error}")

        if r.status_code != 200:
            raise HTTPStatusError(r.status_code, r.text)

        if not r.content:
            raise NoDataError()

        return parse_photo(r.content)


def parse_photo(content: bytes) -> UnsplashPhoto:
    """
    Build an UnsplashPhoto from the JSON body of a photo response. Raise ParseFailureError
    if the body is not JSON or misses any of the fields we depend on.
    """

    try:
        data = json.loads(content)

        return UnsplashPhoto(
            photo_id=_require_str(data["id"]),
            raw_url=_require_str(data["urls"]["raw"]),
            thumbnail_url=_require_str(data["urls"].get("small") or data["urls"]["thumb"]),
            attribution_name=_require_str(data["user"]["name"]),
            attribution_url=_require_str(data["user"]["links"]["html"]),
        )

    except (ValueError, KeyError, TypeError) as error:
        raise ParseFailureError(f"Failed to parse Unsplash response: {error!r}")


def _require_str(value) -> str:

    if not isinstance(value, str) or not value:
        raise TypeError(f"expected a non-empty string, got {value!r}")

    return value
