from datetime import datetime, timezone

import gpxpy
import pytest

from velogiro.estimator import estimate_ride
from velogiro.export import build_timed_gpx, point_offsets
from velogiro.models import TrackPoint

START = datetime(2024, 6, 15, 8, 0, 0, tzinfo=timezone.utc)


class TestPointOffsets:
    def test_one_offset_per_point(self, flat_track_points, rider_config):
        estimate = estimate_ride(flat_track_points, rider_config)
        offsets = point_offsets(flat_track_points, estimate)
        assert offsets == [p.cumulative_time_seconds for p in estimate.timeline]

    def test_stationary_point_shares_time(self, rider_config):
        points = [
            TrackPoint(lat=0, lon=0, elevation=0.0, distance_km=0.0),
            TrackPoint(lat=0, lon=0, elevation=0.0, distance_km=1.0),
            TrackPoint(lat=0, lon=0, elevation=0.0, distance_km=1.0),
            TrackPoint(lat=0, lon=0, elevation=0.0, distance_km=2.0),
        ]
        estimate = estimate_ride(points, rider_config)
        offsets = point_offsets(points, estimate)
        assert len(offsets) == 4
        assert offsets[1] == offsets[2]
        assert offsets[3] == estimate.total_time_seconds

    def test_mismatched_estimate(self, flat_track_points, climb_track_points, rider_config):
        estimate = estimate_ride(climb_track_points, rider_config)
        with pytest.raises(ValueError, match="not computed from these track points"):
            point_offsets(flat_track_points, estimate)


class TestBuildTimedGpx:
    def test_points_have_times(self, climb_track_points, rider_config):
        estimate = estimate_ride(climb_track_points, rider_config)
        xml = build_timed_gpx(climb_track_points, estimate, START, name="Hill")

        gpx = gpxpy.parse(xml)
        assert gpx.name == "Hill"
        points = gpx.tracks[0].segments[0].points
        assert len(points) == 3
        assert points[0].time == START
        elapsed = (points[-1].time - START).total_seconds()
        assert elapsed == pytest.approx(estimate.total_time_seconds, abs=1)
        assert [p.elevation for p in points] == [100.0, 150.0, 200.0]

    def test_coordinates_preserved(self, climb_track_points, rider_config):
        estimate = estimate_ride(climb_track_points, rider_config)
        gpx = gpxpy.parse(build_timed_gpx(climb_track_points, estimate, START))
        point = gpx.tracks[0].segments[0].points[1]
        assert point.latitude == pytest.approx(46.509)
        assert point.longitude == pytest.approx(7.0)

    def test_times_increase(self, flat_track_points, rider_config):
        estimate = estimate_ride(flat_track_points, rider_config)
        gpx = gpxpy.parse(build_timed_gpx(flat_track_points, estimate, START))
        times = [p.time for p in gpx.tracks[0].segments[0].points]
        assert times == sorted(times)
        assert len(set(times)) == len(times)

    def test_naive_start_time_rejected(self, flat_track_points, rider_config):
        estimate = estimate_ride(flat_track_points, rider_config)
        with pytest.raises(ValueError, match="timezone-aware"):
            build_timed_gpx(flat_track_points, estimate, datetime(2024, 6, 15, 8, 0))
