import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from velogiro import __version__
from velogiro.config import get_defaults, load_config
from velogiro.estimator import estimate_ride
from velogiro.models import RiderConfig
from velogiro.parser import ParseError, load_track
from velogiro.presets import BIKE_PRESETS, POWER_DISTRIBUTIONS, rider_type_label, target_watts
from velogiro.profile import build_time_ticks, build_track_profile
from velogiro.settings import JsonFileStore, apply_bike_type, default_config, load_settings, save_settings, update_field
from velogiro.sources import TrackSourceError, read_track_text

logger = logging.getLogger(__name__)

# CLI option -> RiderConfig field
NUMERIC_OPTIONS = {
    "bike_weight": "bike_weight_kg",
    "rider_weight": "rider_weight_kg",
    "power": "avg_watts",
    "crr": "crr",
    "cda": "cda",
    "efficiency": "efficiency",
}


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser.

    Rider options default to None so that omitted values come from the
    last-used settings.
    """
    parser = argparse.ArgumentParser(
        prog="velogiro",
        description="Estimate ride time for a GPX track with a physics-based cycling model.",
    )
    parser.add_argument("track", help="Path or http(s) URL of a GPX file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--bike-type",
        choices=sorted(BIKE_PRESETS),
        help="Bike type; sets crr, cda and efficiency from its preset",
    )
    parser.add_argument("--bike-weight", type=float, help="Bike weight in kg")
    parser.add_argument("--rider-weight", type=float, help="Rider weight in kg")
    parser.add_argument("--power", type=float, help="Average power output in watts")
    parser.add_argument(
        "--power-class",
        choices=[d.id for d in POWER_DISTRIBUTIONS],
        help="Pick average power from a rider class instead of --power",
    )
    parser.add_argument("--crr", type=float, help="Rolling resistance coefficient")
    parser.add_argument("--cda", type=float, help="Drag coefficient * frontal area in m²")
    parser.add_argument("--efficiency", type=float, help="Drivetrain efficiency (0.5-0.99)")
    parser.add_argument("--width", type=float, default=None, help="Graph width for tick placement")
    parser.add_argument("--chart", metavar="PNG", help="Write an elevation profile chart to this file")
    parser.add_argument("--export-gpx", metavar="GPX", help="Write the track with estimated times to this file")
    parser.add_argument(
        "--start-time",
        type=datetime.fromisoformat,
        default=None,
        help="Ride start as ISO 8601 for --export-gpx (default: now, UTC when no offset is given)",
    )
    parser.add_argument("--settings", metavar="PATH", help="Settings file for last-used rider values")
    parser.add_argument("--no-save", action="store_true", help="Do not remember the rider settings")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def resolve_rider_config(args: argparse.Namespace, saved: RiderConfig) -> RiderConfig:
    """Apply command line overrides on top of the saved configuration."""
    rider = saved
    if args.bike_type:
        rider = apply_bike_type(rider, args.bike_type)
    for option, field in NUMERIC_OPTIONS.items():
        value = getattr(args, option)
        if value is not None:
            rider = update_field(rider, field, value)
    if args.power_class:
        rider = update_field(rider, "avg_watts", target_watts(args.power_class))
    return rider


def print_report(name: str | None, rider: RiderConfig, profile, estimate, time_ticks) -> None:
    print("=== Velogiro Ride Estimate ===")
    if name:
        print(f"Track:          {name}")
    print(
        f"Config: bike={rider.bike_type} bike_weight={rider.bike_weight_kg}kg "
        f"rider_weight={rider.rider_weight_kg}kg power={rider.avg_watts:g}W "
        f"crr={rider.crr} cda={rider.cda} efficiency={rider.efficiency}"
    )
    print(f"Rider Type:     {rider_type_label(rider.avg_watts)}")
    print(f"Distance:       {profile.total_distance_km:.2f} km")
    print(f"Elevation:      {profile.min_elevation:.0f}-{profile.max_elevation:.0f} m")

    if estimate is None:
        print("Est. Time:      n/a (needs 2+ points and positive rider values)")
        return

    print(f"Est. Time:      {estimate.formatted}")
    print(f"Avg Speed:      {estimate.average_speed_kph:.1f} km/h")
    if time_ticks:
        marks = ", ".join(
            f"{tick.label} @ {tick.percent / 100 * profile.total_distance_km:.1f} km" for tick in time_ticks
        )
        print(f"Time Marks:     {marks}")


def main(argv: list[str] | None = None) -> None:
    config = load_config()
    defaults = get_defaults(config)
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = JsonFileStore(args.settings or defaults["settings_path"])
    fallback = default_config(
        defaults["bike_type"],
        bike_weight_kg=defaults["bike_weight_kg"],
        rider_weight_kg=defaults["rider_weight_kg"],
        avg_watts=defaults["avg_watts"],
    )
    rider = resolve_rider_config(args, load_settings(store, fallback))

    try:
        text = read_track_text(args.track)
    except FileNotFoundError:
        print(f"Error: File not found: {args.track}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except TrackSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        track = load_track(text, fallback_name=Path(args.track).stem or None)
    except ParseError as e:
        print(f"Error parsing GPX file: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.no_save:
        save_settings(store, rider)

    width = args.width if args.width is not None else defaults["graph_width"]
    profile = build_track_profile(track.points, width)
    estimate = estimate_ride(track.points, rider)
    time_ticks = build_time_ticks(profile, estimate)

    print_report(track.name, rider, profile, estimate, time_ticks)

    if args.chart:
        from velogiro.charts import render_profile_png

        Path(args.chart).write_bytes(render_profile_png(track.points, profile, time_ticks, title=track.name))
        logger.info("Wrote chart to %s", args.chart)

    if args.export_gpx:
        if estimate is None:
            print("Error: Cannot export times without a ride estimate.", file=sys.stderr)
            sys.exit(1)
        from velogiro.export import build_timed_gpx

        start_time = args.start_time or datetime.now(timezone.utc).replace(microsecond=0)
        if start_time.tzinfo is None:
            start_time = start_time.replace(tzinfo=timezone.utc)
        Path(args.export_gpx).write_text(build_timed_gpx(track.points, estimate, start_time, name=track.name))
        logger.info("Wrote timed GPX to %s", args.export_gpx)
