"""Weather domain model - pure data structures independent of any API."""
import time
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from safety import Activity, Reading


@dataclass
class GeoLocation:
    """A resolved place."""
    lat: float
    lon: float
    name: str
    country: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.country:
            return f"{self.name}, {self.country}"
        return self.name


@dataclass
class CurrentConditions:
    """Current conditions, already in Celsius and km/h."""
    temp_c: float
    wind_kmh: float
    weather_code: int  # WMO weather interpretation code
    aqi: Optional[float] = None  # US AQI, None when unavailable


@dataclass
class HourPoint:
    """One hourly forecast point."""
    time: str  # local ISO timestamp as returned by the provider, e.g. "2024-05-01T14:00"
    temp_c: float
    precip_mm: float
    precip_prob: float  # 0-100
    wind_kmh: float
    weather_code: int
    aqi: Optional[float] = None

    def to_reading(self, activity: Activity) -> Reading:
        return Reading(
            activity=Activity(activity),
            temp_c=self.temp_c,
            wind_kmh=self.wind_kmh,
            precip_mm=self.precip_mm,
            precip_prob=self.precip_prob,
            aqi=self.aqi,
        )


@dataclass
class AirQualityData:
    """Air quality for a location; every field may be empty."""
    current_aqi: Optional[float] = None
    per_hour: Dict[str, float] = field(default_factory=dict)
    note: str = ""


@dataclass
class ForecastPack:
    """Everything the dashboard shows for one location."""
    current: Optional[CurrentConditions]
    next_12h: List[HourPoint]
    fetched_at: float = field(default_factory=time.time)
    air_quality_note: str = ""

    def current_reading(self, activity: Activity) -> Optional[Reading]:
        """
        Build the reading for the "Now" slot.

        Current conditions carry no precipitation, so the first forecast
        hour's amount and probability stand in for it.

        Returns:
            Reading, or None when current conditions are unknown
        """
        if self.current is None:
            return None
        first_hour = self.next_12h[0] if self.next_12h else None
        return Reading(
            activity=Activity(activity),
            temp_c=self.current.temp_c,
            wind_kmh=self.current.wind_kmh,
            precip_mm=first_hour.precip_mm if first_hour else 0.0,
            precip_prob=first_hour.precip_prob if first_hour else 0.0,
            aqi=self.current.aqi,
        )

    def with_air_quality(self, air_quality: AirQualityData) -> "ForecastPack":
        """Return a copy with AQI blended into current conditions and each hour."""
        hours = [
            replace(hour, aqi=air_quality.per_hour.get(hour.time))
            for hour in self.next_12h
        ]
        current = None
        if self.current is not None:
            current = replace(self.current, aqi=air_quality.current_aqi)
        return ForecastPack(
            current=current,
            next_12h=hours,
            fetched_at=self.fetched_at,
            air_quality_note=air_quality.note,
        )

    def is_stale(self, max_age_seconds: int = 900) -> bool:
        """Check if this data is older than max_age_seconds."""
        return time.time() - self.fetched_at > max_age_seconds
