"""User preference cache - units, activity and last location in a JSON file."""
import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from safety import Activity
from units import Units

DEFAULT_PREFS_PATH = Path(os.path.expanduser("~")) / ".paceweather" / "preferences.json"


@dataclass
class Preferences:
    """Settings remembered between runs."""
    city: str
    lat: float
    lon: float
    units: Units = Units.METRIC
    activity: Activity = Activity.RUNNING


class PreferenceStore:
    """Loads and saves Preferences as JSON."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else DEFAULT_PREFS_PATH

    def load(self, defaults: Preferences) -> Preferences:
        """
        Load preferences, filling anything missing or invalid from defaults.

        A missing or unreadable file is not an error: the defaults are returned.
        """
        if not self.path.exists():
            logging.debug(f"No preferences file at {self.path}, using defaults")
            return defaults

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logging.warning(f"Could not read preferences from {self.path}: {e}")
            return defaults

        if not isinstance(raw, dict):
            logging.warning(f"Ignoring malformed preferences file {self.path}")
            return defaults

        try:
            units = Units(raw.get("units", defaults.units))
        except ValueError:
            units = defaults.units
        try:
            activity = Activity(raw.get("activity", defaults.activity))
        except ValueError:
            activity = defaults.activity

        try:
            lat = float(raw["lat"])
            lon = float(raw["lon"])
        except (KeyError, ValueError, TypeError):
            lat, lon = defaults.lat, defaults.lon

        city = raw.get("city")
        if not isinstance(city, str) or not city:
            city = defaults.city

        prefs = Preferences(city=city, lat=lat, lon=lon, units=units, activity=activity)
        logging.debug(f"Loaded preferences: {prefs}")
        return prefs

    def save(self, prefs: Preferences) -> None:
        """Persist preferences; failures are logged, never raised."""
        data = asdict(prefs)
        data["units"] = Units(prefs.units).value
        data["activity"] = Activity(prefs.activity).value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            logging.debug(f"Saved preferences to {self.path}")
        except OSError as e:
            logging.warning(f"Could not save preferences to {self.path}: {e}")
