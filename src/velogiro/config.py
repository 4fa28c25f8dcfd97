"""Application configuration from JSON files."""

import json
from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "velogiro"
CONFIG_PATH = CONFIG_DIR / "velogiro.json"
LOCAL_CONFIG_PATH = Path("velogiro.json")

# Built-in fallbacks for values not set in a config file
DEFAULTS = {
    "bike_type": "gravel",
    "bike_weight_kg": 8.0,
    "rider_weight_kg": 70.0,
    "avg_watts": 200.0,
    "graph_width": 1000,
    "settings_path": str(CONFIG_DIR / "settings.json"),
}


def load_config() -> dict:
    """Load configuration from config files.

    Merges config from global and local files:
    1. ~/.config/velogiro/velogiro.json (global, loaded first)
    2. ./velogiro.json (local, overrides global)

    Returns:
        Dict with merged config values, empty dict if no files exist.
    """
    config = {}
    for config_path in [CONFIG_PATH, LOCAL_CONFIG_PATH]:
        if config_path.exists():
            try:
                with config_path.open() as f:
                    data = json.load(f)
            except (json.JSONDecodeError, OSError):
                continue
            if isinstance(data, dict):
                config.update(data)
    return config


def get_defaults(config: dict | None = None) -> dict:
    """Get default values from config file, falling back to DEFAULTS."""
    if config is None:
        config = load_config()
    return {key: config.get(key, fallback) for key, fallback in DEFAULTS.items()}
