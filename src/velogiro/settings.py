"""Persistence of the last-used rider configuration.

Storage is an injected capability with ``load()`` and ``save()``; anything
that goes wrong while reading falls back to defaults and anything that goes
wrong while writing is logged and ignored, so the in-memory configuration
always stays authoritative.
"""

import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Protocol

from velogiro.models import RiderConfig
from velogiro.presets import BIKE_PRESETS, DEFAULT_BIKE_TYPE, get_bike_preset

logger = logging.getLogger(__name__)

STORAGE_KEY = "velogiro-bike-form"

NUMERIC_FIELDS = ("bike_weight_kg", "rider_weight_kg", "avg_watts", "crr", "cda", "efficiency")


class SettingsStore(Protocol):
    def load(self) -> dict | None: ...

    def save(self, data: dict) -> None: ...


class MemoryStore:
    """Settings store kept in process memory."""

    def __init__(self, data: dict | None = None):
        self.data = dict(data) if data is not None else None

    def load(self) -> dict | None:
        return dict(self.data) if self.data is not None else None

    def save(self, data: dict) -> None:
        self.data = dict(data)


class JsonFileStore:
    """Settings store backed by a JSON object file, one entry per key."""

    def __init__(self, path: str | Path, key: str = STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open() as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> dict | None:
        entry = self._read_all().get(self.key)
        return entry if isinstance(entry, dict) else None

    def save(self, data: dict) -> None:
        contents = self._read_all()
        contents[self.key] = data
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w") as f:
            json.dump(contents, f, indent=2)


def default_config(
    bike_type: str = DEFAULT_BIKE_TYPE,
    bike_weight_kg: float = 8.0,
    rider_weight_kg: float = 70.0,
    avg_watts: float = 200.0,
) -> RiderConfig:
    """Build a configuration with the preset coefficients for a bike type."""
    if bike_type not in BIKE_PRESETS:
        bike_type = DEFAULT_BIKE_TYPE
    preset = get_bike_preset(bike_type)
    return RiderConfig(
        bike_type=bike_type,
        bike_weight_kg=bike_weight_kg,
        rider_weight_kg=rider_weight_kg,
        avg_watts=avg_watts,
        crr=preset.crr,
        cda=preset.cda,
        efficiency=preset.efficiency,
    )


def apply_bike_type(config: RiderConfig, bike_type: str) -> RiderConfig:
    """Switch bike type, replacing crr, cda and efficiency with the preset's."""
    if bike_type not in BIKE_PRESETS:
        bike_type = DEFAULT_BIKE_TYPE
    preset = get_bike_preset(bike_type)
    return replace(config, bike_type=bike_type, crr=preset.crr, cda=preset.cda, efficiency=preset.efficiency)


def _ensure_number(value, fallback: float) -> float:
    if isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return fallback
        if math.isfinite(parsed):
            return parsed
    return fallback


def load_settings(store: SettingsStore, fallback: RiderConfig | None = None) -> RiderConfig:
    """Load the last-used configuration, filling gaps from defaults.

    Missing or corrupt entries yield `fallback` (the gravel default when not
    given). A stored entry with unreadable fields keeps the readable ones and
    takes the rest from the defaults for its bike type.
    """
    if fallback is None:
        fallback = default_config()

    try:
        raw = store.load()
    except (OSError, ValueError) as e:
        logger.warning("Could not read saved settings: %s", e)
        return fallback
    if not isinstance(raw, dict):
        return fallback

    bike_type = raw.get("bike_type")
    base = apply_bike_type(fallback, bike_type if isinstance(bike_type, str) else fallback.bike_type)
    values = {name: _ensure_number(raw.get(name), getattr(base, name)) for name in NUMERIC_FIELDS}
    return replace(base, **values)


def save_settings(store: SettingsStore, config: RiderConfig) -> bool:
    """Persist the configuration. Returns False if storage failed."""
    try:
        store.save(config.to_dict())
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Could not save settings: %s", e)
        return False
    return True


def update_field(config: RiderConfig, name: str, value) -> RiderConfig:
    """Return a copy with one numeric field replaced.

    Text that does not parse as a number is stored as 0, which makes the
    configuration incomplete until the field is corrected.
    """
    if name not in NUMERIC_FIELDS:
        raise ValueError(f"Unknown numeric field: {name}")
    return replace(config, **{name: _ensure_number(value, 0.0)})
