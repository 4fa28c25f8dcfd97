"""GPX track extraction.

Parsing is lenient at the point level: a ``trkpt`` whose coordinates cannot
be read is skipped and distance keeps accumulating from the last accepted
point. A document without usable points parses to an empty track;
:func:`load_track` is the stricter entry point for callers that need points.
"""

import logging
import math
import xml.etree.ElementTree as ET

from velogiro.distance import haversine_distance
from velogiro.models import ParsedTrack, TrackPoint

logger = logging.getLogger(__name__)


class ParseError(ValueError):
    """Raised for malformed GPX markup or a track without usable points."""


def _parse_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _extract_name(root: ET.Element) -> str | None:
    """Return the route name, preferring metadata over the first track."""
    for path in (".//{*}metadata/{*}name", ".//{*}trk/{*}name"):
        node = root.find(path)
        if node is not None and node.text and node.text.strip():
            return node.text.strip()
    return None


def parse_gpx_text(text: str | bytes) -> ParsedTrack:
    """Parse GPX markup into track points with cumulative distance.

    Raises:
        ParseError: If the text is not well-formed XML.
    """
    try:
        root = ET.fromstring(text)
    except (ET.ParseError, ValueError) as e:
        raise ParseError("Invalid GPX file.") from e

    points: list[TrackPoint] = []
    distance_km = 0.0
    previous: TrackPoint | None = None
    skipped = 0

    for node in root.iterfind(".//{*}trkpt"):
        lat = _parse_float(node.get("lat"))
        lon = _parse_float(node.get("lon"))
        if lat is None or lon is None:
            skipped += 1
            continue

        ele_node = node.find(".//{*}ele")
        elevation = _parse_float(ele_node.text if ele_node is not None else None)

        if previous is not None:
            distance_km += haversine_distance(previous.lat, previous.lon, lat, lon) / 1000

        previous = TrackPoint(
            lat=lat,
            lon=lon,
            elevation=elevation if elevation is not None else 0.0,
            distance_km=distance_km,
        )
        points.append(previous)

    if skipped:
        logger.debug("Skipped %d track points with unreadable coordinates", skipped)

    return ParsedTrack(points=points, name=_extract_name(root))


def parse_gpx(filepath: str) -> ParsedTrack:
    """Parse a GPX file from disk."""
    with open(filepath, "rb") as f:
        return parse_gpx_text(f.read())


def load_track(text: str | bytes, fallback_name: str | None = None) -> ParsedTrack:
    """Parse GPX markup for display, rejecting tracks without points.

    Raises:
        ParseError: If the markup is invalid or yields no track points.
    """
    parsed = parse_gpx_text(text)
    if not parsed.points:
        raise ParseError("The GPX file does not contain any track points.")
    return ParsedTrack(points=parsed.points, name=parsed.name or fallback_name)
