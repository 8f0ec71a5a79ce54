"""Open-Meteo forecast, geocoding and air quality providers."""
import logging
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Any, Dict, List, Optional

import requests

from weather_data import AirQualityData, CurrentConditions, ForecastPack, GeoLocation, HourPoint
from weather_provider import (
    AirQualityProviderBase,
    ForecastProviderBase,
    GeocoderBase,
    GeocodingError,
    WeatherProviderError,
)

FORECAST_HOURS = 12
# An hour that started up to this long ago still counts as "now"
CURRENT_HOUR_GRACE = timedelta(minutes=30)


def _get_json(url: str, params: Dict[str, Any], timeout: int) -> Dict[str, Any]:
    """
    GET a JSON document from an Open-Meteo endpoint.

    Raises:
        WeatherProviderError: On network errors, HTTP errors or non-JSON bodies
    """
    try:
        logging.info(f"Making Open-Meteo API request: {url}")
        logging.debug(f"Request parameters: {params}")

        response = requests.get(url, params=params, timeout=timeout)

        logging.info(f"API response status: {response.status_code}")
        if not response.ok:
            logging.error(f"API request failed with status {response.status_code}")
            _handle_error_response(response)

        data = response.json()
        logging.debug(f"API response (truncated): {str(data)[:500]}...")
        return data
    except requests.exceptions.RequestException as e:
        logging.error(f"Network error during API request: {e}")
        raise WeatherProviderError(f"Network error: {str(e)}")
    except ValueError as e:
        logging.error(f"Failed to decode API response: {e}")
        raise WeatherProviderError(f"Failed to parse response: {str(e)}")


def _handle_error_response(response: requests.Response) -> None:
    """Parse and raise error from an Open-Meteo error response."""
    try:
        error_data = response.json()
    except ValueError:
        # Not JSON, use HTTP status
        logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
        raise WeatherProviderError(f"HTTP {response.status_code}: {response.text[:200]}")

    logging.error(f"Open-Meteo API error response: {error_data}")
    reason = error_data.get("reason", "Unknown error") if isinstance(error_data, dict) else "Unknown error"
    raise WeatherProviderError(f"Open-Meteo API error {response.status_code}: {reason}")


def _parse_time(iso: str) -> datetime:
    # Open-Meteo returns local times without an offset when a timezone is requested
    parsed = datetime.fromisoformat(iso)
    return parsed.replace(tzinfo=None)


def select_next_hours(times: List[str], now: datetime, count: int = FORECAST_HOURS) -> List[int]:
    """
    Pick the indices of the forecast hours to show.

    Starts at the first hour no earlier than ``now`` minus the grace period
    (or at index 0 if every hour is older) and takes up to ``count`` hours.
    """
    cutoff = now - CURRENT_HOUR_GRACE
    start = 0
    for i, iso in enumerate(times):
        if _parse_time(iso) >= cutoff:
            start = i
            break
    return list(range(start, min(start + count, len(times))))


class OpenMeteoForecastProvider(ForecastProviderBase):
    """
    Forecast provider using the Open-Meteo Forecast API.

    Free and keyless: https://open-meteo.com/en/docs
    Values are requested in Celsius, mm and km/h (the API defaults).
    """

    BASE_URL = "https://api.open-meteo.com/v1/forecast"
    HOURLY_FIELDS = "temperature_2m,precipitation,precipitation_probability,windspeed_10m,weathercode"

    def __init__(self, timezone: str = "auto", timeout: int = 10):
        """
        Initialize Open-Meteo forecast provider.

        Args:
            timezone: IANA timezone for returned times, or "auto" for the location's own
            timeout: HTTP request timeout in seconds
        """
        self.timezone = timezone
        self.timeout = timeout

    def get_forecast(self, lat: float, lon: float, now: Optional[datetime] = None) -> ForecastPack:
        """
        Fetch current weather and the next 12 hours.

        Args:
            lat: Latitude
            lon: Longitude
            now: Local wall-clock time used to pick the first hour (defaults to now)

        Returns:
            ForecastPack: Current conditions and hourly points, without AQI

        Raises:
            WeatherProviderError: If the API request fails or the response is malformed
        """
        params = {
            "latitude": lat,
            "longitude": lon,
            "hourly": self.HOURLY_FIELDS,
            "current_weather": "true",
            "timezone": self.timezone,
        }
        data = _get_json(self.BASE_URL, params, self.timeout)

        try:
            hourly = data.get("hourly")
            if not hourly:
                logging.error("Response missing 'hourly' block")
                raise WeatherProviderError("Response missing 'hourly' block")

            times = hourly.get("time") or []
            temps = hourly.get("temperature_2m") or []
            precip = hourly.get("precipitation") or []
            precip_prob = hourly.get("precipitation_probability") or []
            wind = hourly.get("windspeed_10m") or []
            codes = hourly.get("weathercode") or []

            if now is None:
                now = self._local_now(data)

            next_12h = []
            for k in select_next_hours(times, now):
                if temps[k] is None or wind[k] is None:
                    # Open-Meteo pads the end of its horizon with nulls
                    logging.warning(f"Skipping forecast hour {times[k]} with missing temperature or wind")
                    continue
                prob = precip_prob[k] if k < len(precip_prob) else None
                next_12h.append(HourPoint(
                    time=times[k],
                    temp_c=temps[k],
                    precip_mm=precip[k] if precip[k] is not None else 0.0,
                    precip_prob=prob if prob is not None else 0.0,
                    wind_kmh=wind[k],
                    weather_code=codes[k],
                ))

            current = None
            current_weather = data.get("current_weather")
            if current_weather and current_weather.get("temperature") is not None \
                    and current_weather.get("windspeed") is not None:
                current = CurrentConditions(
                    temp_c=current_weather["temperature"],
                    wind_kmh=current_weather["windspeed"],
                    weather_code=current_weather["weathercode"],
                )
            else:
                logging.warning("Response has no usable 'current_weather' block")

            logging.info(f"Successfully parsed forecast: {len(next_12h)} hours, current={current}")
            return ForecastPack(current=current, next_12h=next_12h)

        except (KeyError, IndexError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

    @staticmethod
    def _local_now(data: Dict[str, Any]) -> datetime:
        # Hourly times are local to the location; shift UTC by the reported offset
        offset = data.get("utc_offset_seconds", 0) or 0
        return datetime.now(dt_timezone.utc).replace(tzinfo=None) + timedelta(seconds=offset)


class OpenMeteoGeocoder(GeocoderBase):
    """Place lookup using the Open-Meteo Geocoding API."""

    SEARCH_URL = "https://geocoding-api.open-meteo.com/v1/search"
    REVERSE_URL = "https://geocoding-api.open-meteo.com/v1/reverse"

    def __init__(self, language: str = "en", timeout: int = 10):
        self.language = language
        self.timeout = timeout

    def search(self, name: str) -> GeoLocation:
        params = {"name": name, "count": 1, "language": self.language, "format": "json"}
        try:
            data = _get_json(self.SEARCH_URL, params, self.timeout)
        except WeatherProviderError as e:
            raise WeatherProviderError(f"Geocoding failed: {e}")

        results = data.get("results") or []
        if not results:
            logging.warning(f"No geocoding results for '{name}'")
            raise GeocodingError("No results for that place")

        hit = results[0]
        try:
            location = GeoLocation(
                lat=float(hit["latitude"]),
                lon=float(hit["longitude"]),
                name=hit["name"],
                country=hit.get("country"),
            )
        except (KeyError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse geocoding result: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

        logging.info(f"Resolved '{name}' to {location.display_name} ({location.lat}, {location.lon})")
        return location

    def reverse(self, lat: float, lon: float) -> Optional[str]:
        params = {
            "latitude": lat,
            "longitude": lon,
            "count": 1,
            "language": self.language,
            "format": "json",
        }
        try:
            data = _get_json(self.REVERSE_URL, params, self.timeout)
        except WeatherProviderError as e:
            logging.warning(f"Reverse geocoding failed for ({lat}, {lon}): {e}")
            return None

        results = data.get("results") or []
        if not results or not results[0].get("name"):
            return None
        return results[0]["name"]


class OpenMeteoAirQualityProvider(AirQualityProviderBase):
    """Air quality provider using the Open-Meteo Air Quality API (US AQI)."""

    BASE_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"
    NOTE = "Using Open-Meteo Air Quality"

    def __init__(self, timezone: str = "auto", timeout: int = 10):
        self.timezone = timezone
        self.timeout = timeout

    def get_air_quality(self, lat: float, lon: float, now: Optional[datetime] = None) -> AirQualityData:
        params = {
            "latitude": lat,
            "longitude": lon,
            "hourly": "us_aqi",
            "timezone": self.timezone,
        }
        data = _get_json(self.BASE_URL, params, self.timeout)

        try:
            hourly = data.get("hourly") or {}
            times = hourly.get("time") or []
            values = hourly.get("us_aqi") or []

            per_hour = {}
            for t, aqi in zip(times, values):
                if isinstance(aqi, (int, float)) and not isinstance(aqi, bool):
                    per_hour[t] = aqi

            if now is None:
                offset = data.get("utc_offset_seconds", 0) or 0
                now = datetime.now(dt_timezone.utc).replace(tzinfo=None) + timedelta(seconds=offset)

            # Nearest hour to now, even if its value is missing
            current_aqi = None
            min_diff = None
            for i, t in enumerate(times):
                diff = abs((_parse_time(t) - now).total_seconds())
                if min_diff is None or diff < min_diff:
                    min_diff = diff
                    value = values[i] if i < len(values) else None
                    current_aqi = value if isinstance(value, (int, float)) and not isinstance(value, bool) else None
        except (KeyError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse air quality response: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

        logging.info(f"Air quality: current AQI={current_aqi}, {len(per_hour)} hourly values")
        return AirQualityData(current_aqi=current_aqi, per_hour=per_hour, note=self.NOTE)
