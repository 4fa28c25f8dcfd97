import pytest

from velogiro.models import RiderConfig, TrackPoint
from velogiro.settings import MemoryStore


@pytest.fixture
def rider_config():
    return RiderConfig()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def make_gpx():
    """Build GPX markup from (lat, lon, elevation) tuples; elevation may be None."""

    def _make_gpx(coords, name=None, track_name=None):
        metadata = f"<metadata><name>{name}</name></metadata>" if name else ""
        trk_name = f"<name>{track_name}</name>" if track_name else ""
        points = []
        for lat, lon, ele in coords:
            ele_tag = f"<ele>{ele}</ele>" if ele is not None else ""
            points.append(f'<trkpt lat="{lat}" lon="{lon}">{ele_tag}</trkpt>')
        return (
            '<?xml version="1.0"?>'
            '<gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">'
            f"{metadata}<trk>{trk_name}<trkseg>{''.join(points)}</trkseg></trk></gpx>"
        )

    return _make_gpx


@pytest.fixture
def flat_track_points():
    """Five flat points, 1 km apart."""
    return [
        TrackPoint(lat=46.5 + i * 0.009, lon=7.0, elevation=100.0, distance_km=float(i))
        for i in range(5)
    ]


@pytest.fixture
def climb_track_points():
    """Three points climbing 50 m per km."""
    return [
        TrackPoint(lat=46.5, lon=7.0, elevation=100.0, distance_km=0.0),
        TrackPoint(lat=46.509, lon=7.0, elevation=150.0, distance_km=1.0),
        TrackPoint(lat=46.518, lon=7.0, elevation=200.0, distance_km=2.0),
    ]
