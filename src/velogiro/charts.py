"""Elevation profile chart generation."""

import io

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for server
import matplotlib.pyplot as plt

from velogiro.models import TimeTick, TrackPoint, TrackProfile

FILL_COLOR = '#FF6B35'
TIME_TICK_COLOR = '#2D3047'


def set_fixed_margins(fig, fig_width: float, fig_height: float) -> None:
    """Set fixed margins in inches so the plot area does not depend on labels."""
    left_margin_in = 0.7
    right_margin_in = 0.3
    bottom_margin_in = 0.55
    top_margin_in = 0.6

    left = left_margin_in / fig_width
    right = 1 - right_margin_in / fig_width
    bottom = bottom_margin_in / fig_height
    top = 1 - top_margin_in / fig_height

    fig.subplots_adjust(left=left, right=right, bottom=bottom, top=top)


def render_profile_png(
    points: list[TrackPoint],
    profile: TrackProfile,
    time_ticks: list[TimeTick] | None = None,
    title: str | None = None,
    aspect_ratio: float = 3.5,
) -> bytes:
    """Render the elevation profile against distance.

    Distance and elevation ticks come from the profile so the chart matches
    the SVG graph; ride-time ticks are drawn along the top edge at the
    distance reached at that time.

    Returns PNG image as bytes.
    """
    distances = [p.distance_km for p in points]
    elevations = [p.elevation for p in points]
    elevation_range = max(profile.max_elevation - profile.min_elevation, 1)
    y_min = profile.min_elevation
    y_max = profile.min_elevation + elevation_range * 1.08

    fig_height = 4
    fig_width = fig_height * aspect_ratio
    fig, ax = plt.subplots(figsize=(fig_width, fig_height), facecolor='white')

    ax.fill_between(distances, y_min, elevations, color=FILL_COLOR, alpha=0.35, linewidth=0)
    ax.plot(distances, elevations, color=FILL_COLOR, linewidth=1.2)

    ax.set_xlim(0, profile.total_distance_km or 1)
    ax.set_ylim(y_min, y_max)
    ax.set_xticks([tick.value for tick in profile.distance_ticks])
    ax.set_yticks([tick.value for tick in profile.elevation_ticks])
    ax.set_xlabel('Distance (km)', fontsize=10)
    ax.set_ylabel('Elevation (m)', fontsize=10)
    ax.spines['right'].set_visible(False)
    ax.grid(axis='y', alpha=0.3, linestyle='-', linewidth=0.5)

    if time_ticks and profile.total_distance_km:
        ax_time = ax.twiny()
        ax_time.set_xlim(ax.get_xlim())
        ax_time.set_xticks([tick.percent / 100 * profile.total_distance_km for tick in time_ticks])
        ax_time.set_xticklabels([tick.label for tick in time_ticks], fontsize=8, color=TIME_TICK_COLOR)
        ax_time.spines['right'].set_visible(False)
        for tick in time_ticks:
            ax.axvline(tick.percent / 100 * profile.total_distance_km,
                       color=TIME_TICK_COLOR, alpha=0.2, linewidth=0.8, linestyle='--')

    if title:
        fig.suptitle(title, fontsize=11)

    set_fixed_margins(fig, fig_width, fig_height)

    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=100, facecolor='white', edgecolor='none')
    plt.close(fig)
    buf.seek(0)
    return buf.getvalue()
