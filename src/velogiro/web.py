"""Simple web interface for velogiro."""

import io
import logging
import os

from flask import Flask, jsonify, render_template_string, request, send_file

from velogiro import __version_date__, get_git_hash
from velogiro.config import get_defaults
from velogiro.estimator import estimate_ride
from velogiro.formatters import format_distance
from velogiro.models import RiderConfig
from velogiro.parser import ParseError, load_track
from velogiro.presets import (
    BIKE_PRESETS,
    CUSTOM,
    POWER_DISTRIBUTIONS,
    distribution_id_for_watts,
    rider_type_label,
    target_watts,
)
from velogiro.profile import build_time_ticks, build_track_profile, clamp_label_position, label_anchor
from velogiro.settings import (
    NUMERIC_FIELDS,
    JsonFileStore,
    apply_bike_type,
    default_config,
    load_settings,
    save_settings,
    update_field,
)

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = 20 * 1024 * 1024


HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{% if name %}{{ name }} | {% endif %}Velogiro Track Assistant</title>
    <style>
        :root { --primary: #FF6B35; --accent: #2D3047; --text-muted: #666; }
        body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
               max-width: 1040px; margin: 0 auto; padding: 16px; color: #333; }
        form { display: grid; grid-template-columns: repeat(auto-fill, minmax(180px, 1fr)); gap: 12px; }
        label { display: flex; flex-direction: column; font-size: 0.85em; color: var(--text-muted); }
        button { background: var(--primary); color: white; border: 0; padding: 10px; border-radius: 6px; }
        .error { color: #cc0000; margin: 12px 0; }
        .empty { color: var(--text-muted); margin: 12px 0; }
        .summary { display: flex; gap: 32px; margin: 16px 0; font-size: 1.2em; }
        .summary span { display: block; font-size: 0.7em; color: var(--text-muted); }
        svg text { font-size: 12px; fill: var(--accent); }
        footer { margin-top: 24px; font-size: 0.75em; color: var(--text-muted); }
    </style>
</head>
<body>
    <h1>Velogiro Track Assistant</h1>
    <form method="post" enctype="multipart/form-data">
        <label>GPX file <input type="file" name="gpx_file" accept=".gpx,application/gpx+xml"></label>
        <label>Bike type
            <select name="bike_type">
            {% for key, preset in bike_presets.items() %}
                <option value="{{ key }}" {% if key == rider.bike_type %}selected{% endif %}>{{ preset.label }}</option>
            {% endfor %}
            </select>
        </label>
        <label>Rider class
            <select name="power_class">
                <option value="custom" {% if power_class == 'custom' %}selected{% endif %}>Custom</option>
            {% for d in power_distributions %}
                <option value="{{ d.id }}" {% if d.id == power_class %}selected{% endif %}>{{ d.label }} ({{ d.range }})</option>
            {% endfor %}
            </select>
        </label>
        <label>Bike weight (kg) <input type="number" step="any" name="bike_weight_kg" value="{{ rider.bike_weight_kg }}"></label>
        <label>Rider weight (kg) <input type="number" step="any" name="rider_weight_kg" value="{{ rider.rider_weight_kg }}"></label>
        <label>Average power (W) <input type="number" step="any" name="avg_watts" value="{{ rider.avg_watts }}"></label>
        <label>Crr <input type="number" step="any" name="crr" value="{{ rider.crr }}"></label>
        <label>CdA (m²) <input type="number" step="any" name="cda" value="{{ rider.cda }}"></label>
        <label>Efficiency <input type="number" step="any" name="efficiency" value="{{ rider.efficiency }}"></label>
        <button type="submit">Estimate</button>
    </form>

    {% if error %}<div class="error">{{ error }}</div>{% endif %}

    {% if profile %}
    <h2>{{ name or 'Track' }}</h2>
    {% if estimate %}
    <div class="summary">
        <div><span>Ride time</span>{{ estimate.formatted }}</div>
        <div><span>Average speed</span>{{ '%.1f'|format(estimate.average_speed_kph) }} km/h</div>
        <div><span>Distance</span>{{ '%.1f'|format(profile.total_distance_km) }} km</div>
        <div><span>Rider</span>{{ rider_type }}</div>
    </div>
    {% else %}
    <div class="empty">Enter positive rider values to see a time estimate.</div>
    {% endif %}
    <svg id="profile" viewBox="0 0 {{ profile.graph_width }} {{ profile.graph_height + 24 }}" width="100%">
        <path d="{{ profile.fill_path }}" fill="#FF6B35" fill-opacity="0.3"></path>
        <path d="{{ profile.line_path }}" fill="none" stroke="#FF6B35" stroke-width="2"></path>
        {% for tick in profile.elevation_ticks %}
        <line x1="0" x2="{{ profile.graph_width }}" y1="{{ tick.position }}" y2="{{ tick.position }}" stroke="#ddd"></line>
        <text x="4" y="{{ tick.position - 4 }}">{{ '%.0f'|format(tick.value) }} m</text>
        {% endfor %}
        {% for tick in profile.distance_ticks %}
        <line x1="{{ tick.position }}" x2="{{ tick.position }}" y1="{{ profile.graph_height }}" y2="{{ profile.graph_height + 6 }}" stroke="#999"></line>
        <text x="{{ clamp_label_position(tick.position, profile.graph_width) }}" y="{{ profile.graph_height + 20 }}"
              text-anchor="{{ label_anchor(tick.position, profile.graph_width) }}">{{ format_distance(tick.value) }}</text>
        {% endfor %}
        {% for tick in time_ticks %}
        <line class="time-tick" x1="{{ tick.position }}" x2="{{ tick.position }}" y1="{{ profile.padding_top - 8 }}" y2="{{ profile.graph_height }}"
              stroke="#2D3047" stroke-dasharray="4 4" stroke-opacity="0.4"></line>
        <text x="{{ clamp_label_position(tick.position, profile.graph_width) }}" y="14"
              text-anchor="{{ label_anchor(tick.position, profile.graph_width) }}">{{ tick.label }}</text>
        {% endfor %}
    </svg>
    {% elif not error %}
    <div class="empty">Upload a GPX file to see its elevation profile.</div>
    {% endif %}

    <footer>Version {{ version_date }} ({{ git_hash }})</footer>
</body>
</html>
"""


def get_store():
    """Settings store for last-used rider values; overridable via app config."""
    store = app.config.get("SETTINGS_STORE")
    if store is None:
        store = JsonFileStore(get_defaults()["settings_path"])
    return store


def get_saved_rider() -> RiderConfig:
    defaults = get_defaults()
    fallback = default_config(
        defaults["bike_type"],
        bike_weight_kg=defaults["bike_weight_kg"],
        rider_weight_kg=defaults["rider_weight_kg"],
        avg_watts=defaults["avg_watts"],
    )
    return load_settings(get_store(), fallback)


def rider_from_form(form, saved: RiderConfig) -> RiderConfig:
    """Build the rider configuration from submitted form values.

    Changing the bike type resets crr, cda and efficiency to the new preset.
    """
    rider = saved
    bike_type = form.get("bike_type")
    type_changed = bool(bike_type) and bike_type != saved.bike_type
    if type_changed:
        rider = apply_bike_type(rider, bike_type)

    preset_fields = ("crr", "cda", "efficiency")
    for field in NUMERIC_FIELDS:
        if field not in form or (type_changed and field in preset_fields):
            continue
        rider = update_field(rider, field, form.get(field, "").strip())

    # The select is pre-filled with the saved rider's class; only a changed
    # selection overrides the submitted power.
    power_class = form.get("power_class", CUSTOM)
    watts = target_watts(power_class) if power_class != CUSTOM else None
    if watts is not None and power_class != distribution_id_for_watts(saved.avg_watts):
        rider = update_field(rider, "avg_watts", watts)
    return rider


def _read_upload() -> tuple[bytes, str | None]:
    upload = request.files.get("gpx_file")
    if upload is None or not upload.filename:
        raise ParseError("Please choose a GPX file.")
    fallback_name = os.path.splitext(os.path.basename(upload.filename))[0] or None
    return upload.read(), fallback_name


def _graph_width() -> float:
    try:
        return float(request.values.get("width", get_defaults()["graph_width"]))
    except (TypeError, ValueError):
        return float(get_defaults()["graph_width"])


def analyze_upload(rider: RiderConfig) -> dict:
    """Parse the uploaded track and compute profile, estimate and time ticks.

    Raises:
        ParseError: If no file was uploaded or it has no usable track points.
    """
    text, fallback_name = _read_upload()
    track = load_track(text, fallback_name=fallback_name)
    profile = build_track_profile(track.points, _graph_width())
    estimate = estimate_ride(track.points, rider)
    return {
        "track": track,
        "name": track.name,
        "profile": profile,
        "estimate": estimate,
        "time_ticks": build_time_ticks(profile, estimate),
    }


@app.route("/", methods=["GET", "POST"])
def index():
    rider = get_saved_rider()
    error = None
    result = {}

    if request.method == "POST":
        rider = rider_from_form(request.form, rider)
        save_settings(get_store(), rider)
        try:
            result = analyze_upload(rider)
        except ParseError as e:
            error = str(e)

    return render_template_string(
        HTML_TEMPLATE,
        rider=rider,
        rider_type=rider_type_label(rider.avg_watts),
        power_class=distribution_id_for_watts(rider.avg_watts),
        bike_presets=BIKE_PRESETS,
        power_distributions=POWER_DISTRIBUTIONS,
        name=result.get("name"),
        profile=result.get("profile"),
        estimate=result.get("estimate"),
        time_ticks=result.get("time_ticks", []),
        error=error,
        clamp_label_position=clamp_label_position,
        label_anchor=label_anchor,
        format_distance=format_distance,
        version_date=__version_date__,
        git_hash=get_git_hash(),
    )


@app.route("/api/estimate", methods=["POST"])
def api_estimate():
    """Return profile, estimate and time ticks for an uploaded track as JSON."""
    rider = rider_from_form(request.form, get_saved_rider())
    try:
        result = analyze_upload(rider)
    except ParseError as e:
        return jsonify({"error": str(e)}), 400

    estimate = result["estimate"]
    return jsonify({
        "name": result["name"],
        "rider": rider.to_dict(),
        "rider_type": rider_type_label(rider.avg_watts),
        "profile": result["profile"].to_dict(),
        "estimate": estimate.to_dict() if estimate else None,
        "time_ticks": [
            {"time_seconds": t.time_seconds, "label": t.label, "position": t.position, "percent": t.percent}
            for t in result["time_ticks"]
        ],
    })


@app.route("/elevation-profile.png", methods=["POST"])
def elevation_profile():
    """Serve the elevation profile chart for an uploaded track."""
    from velogiro.charts import render_profile_png

    rider = rider_from_form(request.form, get_saved_rider())
    try:
        result = analyze_upload(rider)
    except ParseError as e:
        return jsonify({"error": str(e)}), 400

    img_bytes = render_profile_png(
        result["track"].points, result["profile"], result["time_ticks"], title=result["name"]
    )
    return send_file(io.BytesIO(img_bytes), mimetype='image/png')


def main():
    """Run the web server."""
    logging.basicConfig(level=logging.INFO)
    port = int(os.environ.get("PORT", 5050))
    print("Starting Velogiro web server...")
    print(f"Open http://localhost:{port} in your browser")
    app.run(host="0.0.0.0", port=port, debug=True)


if __name__ == "__main__":
    main()
