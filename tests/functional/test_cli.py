import json
import os
import re
import subprocess
import sys
from datetime import datetime, timezone

import gpxpy
import pytest

SAMPLE_GPX_PATH = os.path.join(
    os.path.dirname(__file__), "data", "sample_ride.gpx"
)


@pytest.fixture
def run_cli(tmp_path):
    settings_path = tmp_path / "settings.json"

    def _run(*args):
        return subprocess.run(
            [sys.executable, "-m", "velogiro", "--settings", str(settings_path), *args],
            capture_output=True,
            text=True,
            cwd=tmp_path,
        )

    _run.settings_path = settings_path
    return _run


class TestCli:
    def test_run_with_sample_file(self, run_cli):
        result = run_cli(SAMPLE_GPX_PATH)
        assert result.returncode == 0
        output = result.stdout
        assert "=== Velogiro Ride Estimate ===" in output
        assert "Track:          Sample Ride" in output
        assert "Rider Type:" in output
        assert re.search(r"Distance:\s+19\.0\d km", output)
        assert "Elevation:      250-380 m" in output
        assert re.search(r"Est\. Time:\s+\d+h \d{2}m|Est\. Time:\s+\d+m \d{2}s", output)
        assert re.search(r"Avg Speed:\s+\d+\.\d km/h", output)
        assert "Time Marks:     30m @" in output

    def test_more_power_is_faster(self, run_cli):
        def avg_speed(output):
            return float(re.search(r"Avg Speed:\s+([\d.]+) km/h", output).group(1))

        slow = run_cli("--no-save", "--power", "120", SAMPLE_GPX_PATH)
        fast = run_cli("--no-save", "--power", "300", SAMPLE_GPX_PATH)
        assert avg_speed(fast.stdout) > avg_speed(slow.stdout)

    def test_bike_type_preset(self, run_cli):
        result = run_cli("--bike-type", "race", SAMPLE_GPX_PATH)
        assert result.returncode == 0
        assert "bike=race" in result.stdout
        assert "crr=0.004 cda=0.3 efficiency=0.97" in result.stdout

    def test_power_class(self, run_cli):
        result = run_cli("--power-class", "recreational", SAMPLE_GPX_PATH)
        assert result.returncode == 0
        assert "power=150W" in result.stdout
        assert "Rider Type:     Recreational cyclist" in result.stdout

    def test_settings_remembered(self, run_cli):
        run_cli("--rider-weight", "82", "--power", "230", SAMPLE_GPX_PATH)
        saved = json.loads(run_cli.settings_path.read_text())
        assert saved["velogiro-bike-form"]["rider_weight_kg"] == 82.0

        result = run_cli(SAMPLE_GPX_PATH)
        assert "rider_weight=82.0kg power=230W" in result.stdout

    def test_no_save(self, run_cli):
        result = run_cli("--no-save", SAMPLE_GPX_PATH)
        assert result.returncode == 0
        assert not run_cli.settings_path.exists()

    def test_incomplete_rider_has_no_estimate(self, run_cli):
        result = run_cli("--no-save", "--power", "0", SAMPLE_GPX_PATH)
        assert result.returncode == 0
        assert "Est. Time:      n/a" in result.stdout
        assert "Avg Speed:" not in result.stdout

    def test_writes_chart(self, run_cli, tmp_path):
        chart_path = tmp_path / "profile.png"
        result = run_cli("--no-save", "--chart", str(chart_path), SAMPLE_GPX_PATH)
        assert result.returncode == 0
        assert chart_path.read_bytes().startswith(b"\x89PNG")

    def test_exports_timed_gpx(self, run_cli, tmp_path):
        export_path = tmp_path / "timed.gpx"
        result = run_cli(
            "--no-save",
            "--export-gpx",
            str(export_path),
            "--start-time",
            "2024-06-15T08:00:00+02:00",
            SAMPLE_GPX_PATH,
        )
        assert result.returncode == 0
        with export_path.open() as f:
            gpx = gpxpy.parse(f)
        points = gpx.tracks[0].segments[0].points
        assert len(points) == 20
        assert points[0].time == datetime(2024, 6, 15, 6, 0, tzinfo=timezone.utc)
        assert points[-1].time > points[0].time

    def test_export_without_estimate_fails(self, run_cli, tmp_path):
        export_path = tmp_path / "timed.gpx"
        result = run_cli("--no-save", "--power", "0", "--export-gpx", str(export_path), SAMPLE_GPX_PATH)
        assert result.returncode == 1
        assert "Cannot export times" in result.stderr
        assert not export_path.exists()

    def test_nonexistent_file(self, run_cli):
        result = run_cli("/nonexistent/file.gpx")
        assert result.returncode == 1
        assert "Error: File not found: /nonexistent/file.gpx" in result.stderr

    def test_directory_instead_of_file(self, run_cli, tmp_path):
        track_dir = tmp_path / "rides"
        track_dir.mkdir()
        result = run_cli("--no-save", str(track_dir))
        assert result.returncode == 1
        assert result.stderr.startswith("Error: ")
        assert "Traceback" not in result.stderr

    def test_invalid_gpx(self, run_cli, tmp_path):
        bad = tmp_path / "bad.gpx"
        bad.write_text("this is not xml <")
        result = run_cli(str(bad))
        assert result.returncode == 1
        assert "Error parsing GPX file: Invalid GPX file." in result.stderr
        assert not run_cli.settings_path.exists()

    def test_gpx_without_points(self, run_cli, tmp_path):
        empty = tmp_path / "empty.gpx"
        empty.write_text('<gpx xmlns="http://www.topografix.com/GPX/1/1"><trk><trkseg/></trk></gpx>')
        result = run_cli(str(empty))
        assert result.returncode == 1
        assert "does not contain any track points" in result.stderr

    def test_no_arguments(self):
        result = subprocess.run(
            [sys.executable, "-m", "velogiro"],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0
        assert "usage" in result.stderr.lower()
