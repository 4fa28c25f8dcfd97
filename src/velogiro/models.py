from dataclasses import asdict, dataclass, field

from velogiro.formatters import format_duration


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lon: float
    elevation: float  # meters, 0 when the GPX point has none
    distance_km: float  # cumulative distance from the first point


@dataclass
class ParsedTrack:
    points: list[TrackPoint]
    name: str | None = None


@dataclass(frozen=True)
class RiderConfig:
    bike_type: str = "gravel"
    bike_weight_kg: float = 8.0
    rider_weight_kg: float = 70.0
    avg_watts: float = 200.0
    crr: float = 0.006  # rolling resistance coefficient
    cda: float = 0.36  # m² (drag coefficient * frontal area)
    efficiency: float = 0.96  # drivetrain efficiency

    @property
    def total_mass_kg(self) -> float:
        return self.bike_weight_kg + self.rider_weight_kg

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TimelinePoint:
    cumulative_time_seconds: float
    cumulative_distance_meters: float


@dataclass
class RideEstimate:
    total_time_seconds: float
    average_speed_kph: float
    total_distance_meters: float
    timeline: list[TimelinePoint] = field(default_factory=list)

    @property
    def formatted(self) -> str:
        return format_duration(self.total_time_seconds)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_time_seconds": self.total_time_seconds,
            "formatted": self.formatted,
            "average_speed_kph": self.average_speed_kph,
            "total_distance_meters": self.total_distance_meters,
            "timeline": [asdict(p) for p in self.timeline],
        }


@dataclass(frozen=True)
class AxisTick:
    value: float
    position: float


@dataclass(frozen=True)
class TimeTick:
    time_seconds: float
    label: str
    position: float  # graph units from the left edge
    percent: float  # position as percentage of graph width


@dataclass
class TrackProfile:
    total_distance_km: float
    min_elevation: float
    max_elevation: float
    graph_width: float
    graph_height: float
    padding_top: float
    line_path: str
    fill_path: str
    distance_ticks: list[AxisTick] = field(default_factory=list)
    elevation_ticks: list[AxisTick] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
