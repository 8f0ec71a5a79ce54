"""Unit conversion and display formatting."""
from datetime import datetime
from enum import Enum


class Units(str, Enum):
    """Display units: metric = C, km/h; imperial = F, mph."""
    METRIC = "metric"
    IMPERIAL = "imperial"


KMH_PER_MPH = 1.60934


def c_to_f(celsius: float) -> float:
    """Convert Celsius to Fahrenheit."""
    return celsius * 9 / 5 + 32


def kmh_to_mph(kmh: float) -> float:
    """Convert km/h to mph."""
    return kmh / KMH_PER_MPH


def format_temp(temp_c: float, units: Units) -> str:
    if units == Units.IMPERIAL:
        return f"{round(c_to_f(temp_c))}°F"
    return f"{round(temp_c)}°C"


def format_wind(kmh: float, units: Units) -> str:
    if units == Units.IMPERIAL:
        return f"{round(kmh_to_mph(kmh))} mph"
    return f"{round(kmh)} km/h"


def hour_label(iso: str) -> str:
    """
    12-hour clock label for a local ISO timestamp.

    Args:
        iso: Timestamp such as "2024-05-01T14:00"

    Returns:
        Label such as "2PM" (midnight is "12AM")
    """
    hour = datetime.fromisoformat(iso).hour
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}{suffix}"


# WMO weather interpretation code groups (https://open-meteo.com/en/docs)
_CODE_GROUPS = [
    ((0,), "☀️", "Clear"),
    ((1, 2), "🌤️", "Partly cloudy"),
    ((3,), "☁️", "Overcast"),
    ((45, 48), "🌫️", "Fog"),
    ((51, 53, 55, 61, 63, 65, 80, 81, 82), "🌧️", "Rain"),
    ((66, 67, 71, 73, 75, 85, 86), "🌨️", "Snow"),
    ((95, 96, 99), "⛈️", "Storm"),
]


def weather_symbol(code: int) -> str:
    """Emoji for a WMO weather code."""
    for codes, symbol, _ in _CODE_GROUPS:
        if code in codes:
            return symbol
    return "🌡️"


def condition_text(code: int) -> str:
    """Short condition text for a WMO weather code."""
    for codes, _, text in _CODE_GROUPS:
        if code in codes:
            return text
    return "Unknown"
