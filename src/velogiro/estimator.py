import logging
import math

from velogiro.models import RideEstimate, RiderConfig, TimelinePoint, TrackPoint
from velogiro.physics import G, MIN_CDA, MIN_CRR, solve_speed_for_power

logger = logging.getLogger(__name__)

MIN_EFFICIENCY = 0.5
MAX_EFFICIENCY = 0.99


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _is_computable(config: RiderConfig) -> bool:
    values = (
        config.bike_weight_kg,
        config.rider_weight_kg,
        config.avg_watts,
        config.crr,
        config.cda,
        config.efficiency,
    )
    return all(value > 0 for value in values)


def estimate_ride(points: list[TrackPoint], config: RiderConfig) -> RideEstimate | None:
    """Estimate ride time over a track at the rider's average power.

    Each segment is ridden at the steady-state speed where wheel power
    balances gravity, rolling resistance and aerodynamic drag. Segments with
    no forward distance (duplicate or out-of-order points) are skipped.

    Returns None when no estimate can be made yet: fewer than two points, a
    non-positive configuration value, or no usable ride time.
    """
    if len(points) < 2:
        return None
    if not _is_computable(config):
        return None

    total_mass = config.total_mass_kg
    wheel_power = config.avg_watts * _clamp(config.efficiency, MIN_EFFICIENCY, MAX_EFFICIENCY)
    rolling_force = total_mass * G * max(config.crr, MIN_CRR)
    drag_area = max(config.cda, MIN_CDA)

    total_time = 0.0
    total_distance = 0.0
    timeline = [TimelinePoint(cumulative_time_seconds=0.0, cumulative_distance_meters=0.0)]

    for previous, current in zip(points, points[1:]):
        delta_distance = (current.distance_km - previous.distance_km) * 1000
        if not delta_distance > 0:
            continue

        grade = (current.elevation - previous.elevation) / delta_distance
        gravity_force = total_mass * G * grade
        speed = solve_speed_for_power(wheel_power, gravity_force, rolling_force, drag_area)

        total_time += delta_distance / speed
        total_distance += delta_distance
        timeline.append(
            TimelinePoint(cumulative_time_seconds=total_time, cumulative_distance_meters=total_distance)
        )

    if not math.isfinite(total_time) or total_time <= 0:
        return None

    average_speed_kph = (total_distance / 1000) / (total_time / 3600)
    logger.debug(
        "Estimated %.0f m in %.0f s (%.1f km/h) over %d segments",
        total_distance, total_time, average_speed_kph, len(timeline) - 1,
    )

    return RideEstimate(
        total_time_seconds=total_time,
        average_speed_kph=average_speed_kph,
        total_distance_meters=total_distance,
        timeline=timeline,
    )


def distance_at_time(timeline: list[TimelinePoint], seconds: float) -> float:
    """Distance (m) covered after the given ride time, interpolated linearly.

    Returns 0 before the start and the final distance past the end.
    """
    if not timeline or seconds <= 0:
        return 0.0

    for previous, current in zip(timeline, timeline[1:]):
        if seconds <= current.cumulative_time_seconds:
            time_delta = current.cumulative_time_seconds - previous.cumulative_time_seconds
            if time_delta <= 0:
                return current.cumulative_distance_meters
            ratio = (seconds - previous.cumulative_time_seconds) / time_delta
            distance_delta = current.cumulative_distance_meters - previous.cumulative_distance_meters
            return previous.cumulative_distance_meters + ratio * distance_delta

    return timeline[-1].cumulative_distance_meters
