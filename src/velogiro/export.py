"""Export a track with estimated arrival times as GPX."""

from datetime import datetime, timedelta

import gpxpy.gpx

from velogiro.models import RideEstimate, TrackPoint


def point_offsets(points: list[TrackPoint], estimate: RideEstimate) -> list[float]:
    """Estimated seconds from the start at which each track point is reached.

    The estimate must come from the same points: the timeline holds one entry
    per segment with forward distance, and points at the end of a skipped
    segment share the time of the point before them.

    Raises:
        ValueError: If the timeline does not match the points.
    """
    moving_segments = sum(
        1 for a, b in zip(points, points[1:]) if b.distance_km - a.distance_km > 0
    )
    if moving_segments != len(estimate.timeline) - 1:
        raise ValueError("Ride estimate was not computed from these track points")

    offsets = [0.0] if points else []
    index = 0
    for previous, current in zip(points, points[1:]):
        if current.distance_km - previous.distance_km > 0:
            index += 1
        offsets.append(estimate.timeline[index].cumulative_time_seconds)
    return offsets


def build_timed_gpx(
    points: list[TrackPoint],
    estimate: RideEstimate,
    start_time: datetime,
    name: str | None = None,
) -> str:
    """Write the track as GPX 1.1 with a <time> on every point.

    Raises:
        ValueError: If start_time has no timezone or the estimate does not
            belong to the points.
    """
    if start_time.tzinfo is None:
        raise ValueError("start_time must be timezone-aware")

    offsets = point_offsets(points, estimate)

    gpx = gpxpy.gpx.GPX()
    gpx.name = name
    gpx.creator = "velogiro"
    track = gpxpy.gpx.GPXTrack(name=name)
    segment = gpxpy.gpx.GPXTrackSegment()
    track.segments.append(segment)
    gpx.tracks.append(track)

    for point, offset in zip(points, offsets):
        segment.points.append(
            gpxpy.gpx.GPXTrackPoint(
                latitude=point.lat,
                longitude=point.lon,
                elevation=point.elevation,
                time=start_time + timedelta(seconds=offset),
            )
        )

    return gpx.to_xml(version="1.1")
