"""Outdoor activity safety rating - pure functions, no I/O."""
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional


class Activity(str, Enum):
    """Activities the rating is tuned for."""
    RUNNING = "running"
    CYCLING = "cycling"


class Level(str, Enum):
    """Three-level advisory, ordered from best to worst."""
    IDEAL = "ideal"
    CAUTION = "caution"
    NOT_RECOMMENDED = "not-recommended"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    Level.IDEAL: 0,
    Level.CAUTION: 1,
    Level.NOT_RECOMMENDED: 2,
}

# Score cut-offs for classify()
IDEAL_MAX_SCORE = 2
CAUTION_MAX_SCORE = 4


@dataclass(frozen=True)
class Reading:
    """
    One point-in-time set of conditions to rate.

    Values must already be normalized to Celsius and km/h. ``aqi`` is the
    US AQI, or None when no air-quality data could be obtained.
    """
    activity: Activity
    temp_c: float
    wind_kmh: float
    precip_mm: float
    precip_prob: float
    aqi: Optional[float] = None


class SubScores(NamedTuple):
    """Per-factor breakdown of a score (air_quality is None when AQI is absent)."""
    temperature: int
    wind: int
    precipitation: int
    air_quality: Optional[int]

    @property
    def total(self) -> int:
        total = self.temperature + self.wind + self.precipitation
        if self.air_quality is not None:
            total += self.air_quality
        return total


def temperature_score(activity: Activity, temp_c: float) -> int:
    """
    Score temperature for an activity.

    Running: 0 in [7, 18], 1 in (18, 26] or [-5, 7), else 2.
    Cycling: 0 in [10, 24], 1 in (24, 30] or [0, 10), else 2.
    """
    if activity == Activity.RUNNING:
        if 7 <= temp_c <= 18:
            return 0
        if 18 < temp_c <= 26 or -5 <= temp_c < 7:
            return 1
        return 2

    if 10 <= temp_c <= 24:
        return 0
    if 24 < temp_c <= 30 or 0 <= temp_c < 10:
        return 1
    return 2


def wind_score(activity: Activity, wind_kmh: float) -> int:
    """Score wind speed (km/h); cyclists tolerate less wind than runners."""
    if activity == Activity.RUNNING:
        if wind_kmh <= 25:
            return 0
        if wind_kmh <= 39:
            return 1
        return 2

    if wind_kmh <= 20:
        return 0
    if wind_kmh <= 32:
        return 1
    return 2


def precipitation_score(precip_mm: float, precip_prob: float) -> int:
    """Score precipitation; the same rule applies to every activity."""
    if precip_mm >= 3:
        return 2
    if precip_mm >= 1 or precip_prob >= 50:
        return 1
    return 0


def air_quality_score(aqi: Optional[float]) -> int:
    """Score US AQI. A missing index contributes nothing."""
    if aqi is None:
        return 0
    if aqi <= 50:
        return 0
    if aqi <= 100:
        return 1
    return 2


def sub_scores(reading: Reading) -> SubScores:
    """Break a reading down into its four factor scores."""
    aq = air_quality_score(reading.aqi) if reading.aqi is not None else None
    return SubScores(
        temperature=temperature_score(reading.activity, reading.temp_c),
        wind=wind_score(reading.activity, reading.wind_kmh),
        precipitation=precipitation_score(reading.precip_mm, reading.precip_prob),
        air_quality=aq,
    )


def score(reading: Reading) -> int:
    """
    Compute the risk score for a reading (0 = best, 8 = worst).

    Args:
        reading: Conditions to rate

    Returns:
        Sum of the temperature, wind, precipitation and air-quality scores
    """
    return sub_scores(reading).total


def classify(total: int) -> Level:
    """Map a score to an advisory level."""
    if total <= IDEAL_MAX_SCORE:
        return Level.IDEAL
    if total <= CAUTION_MAX_SCORE:
        return Level.CAUTION
    return Level.NOT_RECOMMENDED


def evaluate(reading: Reading) -> Level:
    """Rate a reading: score it, then classify the score."""
    return classify(score(reading))
