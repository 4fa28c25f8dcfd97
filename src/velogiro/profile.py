"""Elevation profile geometry and axis ticks for a fixed-height graph.

All coordinates are in graph units: x runs from 0 to the graph width along
the route distance, y from the top padding (highest point) down to the graph
height (lowest point).
"""

import math

from velogiro.estimator import distance_at_time
from velogiro.formatters import format_axis_time_label
from velogiro.models import AxisTick, RideEstimate, TimeTick, TrackPoint, TrackProfile

GRAPH_HEIGHT = 400
GRAPH_WIDTH = 1000
GRAPH_PADDING_TOP = 28
MIN_GRAPH_WIDTH = 320

DISTANCE_STEP_KM = 10
ELEVATION_STEP_M = 100
TIME_TICK_INTERVAL_SECONDS = 30 * 60

NICE_MULTIPLIERS = (1, 2, 5, 10)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _format_width(width: float) -> str:
    return str(int(width)) if width == int(width) else str(width)


def calculate_step(value_range: float, approx_step: float) -> float:
    """Choose a round tick spacing (1, 2, 5 or 10 times a power of ten).

    Aims for about value_range / approx_step ticks, never fewer than three.
    """
    if value_range <= 0:
        return approx_step

    approx_count = max(1, _round_half_up(value_range / approx_step))
    target_count = max(3, approx_count)
    raw_step = value_range / target_count
    power = 10 ** math.floor(math.log10(raw_step))
    normalized = raw_step / power
    multiplier = next((m for m in NICE_MULTIPLIERS if normalized <= m), 10)
    return multiplier * power


def create_axis_ticks(value_range: float, approx_step: float) -> list[float]:
    """Tick values at multiples of the nice step, strictly inside (0, value_range)."""
    if value_range <= 0:
        return []

    step = calculate_step(value_range, approx_step)
    ticks = []
    i = 1
    while i * step < value_range:
        ticks.append(round(i * step, 4))
        i += 1
    return ticks


def build_track_profile(points: list[TrackPoint], width: float = GRAPH_WIDTH) -> TrackProfile | None:
    """Project track points into graph coordinates with SVG path descriptors.

    Returns None for an empty track. Width is raised to MIN_GRAPH_WIDTH; a
    non-finite width is replaced by GRAPH_WIDTH.
    """
    if not points:
        return None

    if not math.isfinite(width):
        width = GRAPH_WIDTH
    width = max(width, MIN_GRAPH_WIDTH)
    total_distance_km = points[-1].distance_km
    elevations = [p.elevation for p in points]
    min_elevation = min(elevations)
    max_elevation = max(elevations)
    elevation_range = max(max_elevation - min_elevation, 1)
    usable_height = GRAPH_HEIGHT - GRAPH_PADDING_TOP

    def x_for(distance_km: float) -> float:
        return (distance_km / total_distance_km) * width if total_distance_km else 0.0

    def y_for(elevation: float) -> float:
        normalized = (elevation - min_elevation) / elevation_range
        return GRAPH_PADDING_TOP + (1 - normalized) * usable_height

    coords = [f"{x_for(p.distance_km):.2f} {y_for(p.elevation):.2f}" for p in points]
    line_path = "M " + " L ".join(coords)
    fill_path = f"M 0 {GRAPH_HEIGHT} L {' L '.join(coords)} L {_format_width(width)} {GRAPH_HEIGHT} Z"

    distance_ticks = [
        AxisTick(value=value, position=x_for(value))
        for value in create_axis_ticks(total_distance_km, DISTANCE_STEP_KM)
    ]
    elevation_ticks = []
    for offset in create_axis_ticks(elevation_range, ELEVATION_STEP_M):
        value = min_elevation + offset
        elevation_ticks.append(AxisTick(value=value, position=y_for(value)))

    return TrackProfile(
        total_distance_km=total_distance_km,
        min_elevation=min_elevation,
        max_elevation=max_elevation,
        graph_width=width,
        graph_height=GRAPH_HEIGHT,
        padding_top=GRAPH_PADDING_TOP,
        line_path=line_path,
        fill_path=fill_path,
        distance_ticks=distance_ticks,
        elevation_ticks=elevation_ticks,
    )


def build_time_ticks(profile: TrackProfile | None, estimate: RideEstimate | None) -> list[TimeTick]:
    """Place ride-time ticks every 30 minutes plus one at the finish.

    Each tick sits where the rider is expected to be at that time, found by
    interpolating the estimate's timeline.
    """
    if profile is None or estimate is None:
        return []

    total_time = estimate.total_time_seconds
    total_distance = estimate.total_distance_meters
    if not math.isfinite(total_time) or total_time <= 0:
        return []

    def make_tick(seconds: float, ratio: float) -> TimeTick:
        return TimeTick(
            time_seconds=seconds,
            label=format_axis_time_label(seconds),
            position=ratio * profile.graph_width,
            percent=ratio * 100,
        )

    ticks = []
    intervals = math.floor(total_time / TIME_TICK_INTERVAL_SECONDS)
    for i in range(1, intervals + 1):
        seconds = i * TIME_TICK_INTERVAL_SECONDS
        if total_distance:
            ratio = min(distance_at_time(estimate.timeline, seconds) / total_distance, 1)
        else:
            ratio = min(seconds / total_time, 1)
        ticks.append(make_tick(seconds, ratio))

    if not ticks or ticks[-1].time_seconds < total_time:
        ratio = min(distance_at_time(estimate.timeline, total_time) / total_distance, 1) if total_distance else 1
        ticks.append(make_tick(total_time, ratio))

    return ticks


def clamp_label_position(position: float, width: float, margin: float = 12) -> float:
    """Keep a tick label at least `margin` units inside the graph edges."""
    if position < margin:
        return margin
    if position > width - margin:
        return width - margin
    return position


def label_anchor(position: float, width: float, margin: float = 24) -> str:
    """SVG text-anchor for a tick label so labels near the edges stay visible."""
    if position < margin:
        return "start"
    if position > width - margin:
        return "end"
    return "middle"
