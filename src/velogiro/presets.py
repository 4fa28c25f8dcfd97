"""Bike presets and rider power classes."""

from dataclasses import dataclass

DEFAULT_BIKE_TYPE = "gravel"
CUSTOM = "custom"


@dataclass(frozen=True)
class BikePreset:
    label: str
    crr: float
    cda: float  # m²
    efficiency: float


BIKE_PRESETS: dict[str, BikePreset] = {
    "mountain": BikePreset(label="Mountain", crr=0.009, cda=0.47, efficiency=0.94),
    "gravel": BikePreset(label="Gravel", crr=0.006, cda=0.36, efficiency=0.96),
    "race": BikePreset(label="Race", crr=0.004, cda=0.3, efficiency=0.97),
    "trekking": BikePreset(label="Trekking / Commuter", crr=0.007, cda=0.4, efficiency=0.95),
}


def get_bike_preset(bike_type: str) -> BikePreset:
    """Return the preset for a bike type, falling back to gravel."""
    return BIKE_PRESETS.get(bike_type, BIKE_PRESETS[DEFAULT_BIKE_TYPE])


@dataclass(frozen=True)
class PowerDistribution:
    id: str
    label: str
    range: str
    min: float
    max: float | None = None


POWER_DISTRIBUTIONS = [
    PowerDistribution(id="sedentary", label='"no sports" adult', range="50–80 W", min=50, max=79),
    PowerDistribution(id="commuter", label="Untrained commuter", range="80–120 W", min=80, max=119),
    PowerDistribution(id="recreational", label="Recreational cyclist", range="120–180 W", min=120, max=179),
    PowerDistribution(id="amateur", label="Trained amateur", range="180–280 W", min=180, max=279),
    PowerDistribution(id="pro", label="Pro", range="280+ W", min=280),
]


def distribution_id_for_watts(watts: float) -> str:
    """Return the id of the first power class containing `watts`, or 'custom'."""
    for distribution in POWER_DISTRIBUTIONS:
        if watts >= distribution.min and (distribution.max is None or watts <= distribution.max):
            return distribution.id
    return CUSTOM


def get_power_distribution(distribution_id: str) -> PowerDistribution | None:
    return next((d for d in POWER_DISTRIBUTIONS if d.id == distribution_id), None)


def rider_type_label(watts: float) -> str:
    distribution = get_power_distribution(distribution_id_for_watts(watts))
    return distribution.label if distribution else "Custom rider"


def target_watts(distribution_id: str) -> int | None:
    """Representative power for a class: the range midpoint, or its minimum when open-ended."""
    distribution = get_power_distribution(distribution_id)
    if distribution is None:
        return None
    if distribution.max is not None:
        return int((distribution.min + distribution.max) / 2 + 0.5)
    return int(distribution.min + 0.5)
