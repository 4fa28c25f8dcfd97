"""Reading GPX text from local files or http(s) URLs."""

import logging
import re

import requests

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
REQUEST_TIMEOUT_SECONDS = 30


class TrackSourceError(Exception):
    """Raised when a remote GPX document cannot be fetched."""


def is_url(path: str) -> bool:
    """Check if the given path is an http(s) URL."""
    return bool(URL_PATTERN.match(path))


def fetch_track_text(url: str) -> bytes:
    """Download a GPX document.

    Raises:
        TrackSourceError: If the request fails or returns an error status.
    """
    try:
        response = requests.get(url, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Failed to download %s: %s", url, e)
        raise TrackSourceError(f"Failed to download GPX from {url}: {e}") from e
    return response.content


def read_track_text(path_or_url: str) -> bytes:
    """Return raw GPX bytes from a file path or URL.

    Raises:
        FileNotFoundError: If a local file does not exist.
        TrackSourceError: If a URL cannot be fetched.
    """
    if is_url(path_or_url):
        return fetch_track_text(path_or_url)
    with open(path_or_url, "rb") as f:
        return f.read()
