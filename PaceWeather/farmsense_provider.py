"""Farmsense-style air quality endpoint and the provider fallback chain."""
import logging
from typing import List

import requests

from weather_data import AirQualityData
from weather_provider import AirQualityProviderBase, WeatherProviderError


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class FarmsenseAirQualityProvider(AirQualityProviderBase):
    """
    Air quality from a user-supplied endpoint.

    The URL template must contain ``{lat}`` and ``{lon}`` placeholders, e.g.
    ``https://farmsense.example.com/air?lat={lat}&lon={lon}``. The endpoint
    is expected to answer with::

        {"aqi_us": 42, "hourly": [{"time": "2024-05-01T14:00", "aqi_us": 40}, ...]}

    ``aqi`` is accepted in place of ``aqi_us`` for the current value.
    """

    NOTE = "Using Farmsense endpoint"

    def __init__(self, url_template: str, timeout: int = 10):
        self.url_template = url_template
        self.timeout = timeout

    def build_url(self, lat: float, lon: float) -> str:
        return self.url_template.replace("{lat}", str(lat)).replace("{lon}", str(lon))

    def get_air_quality(self, lat: float, lon: float) -> AirQualityData:
        url = self.build_url(lat, lon)
        try:
            logging.info(f"Making Farmsense request: {url}")
            response = requests.get(url, timeout=self.timeout)
            logging.info(f"Farmsense response status: {response.status_code}")
            if not response.ok:
                raise WeatherProviderError(f"Farmsense fetch failed: HTTP {response.status_code}")
            data = response.json()
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during Farmsense request: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}")
        except ValueError as e:
            logging.error(f"Farmsense returned invalid JSON: {e}")
            raise WeatherProviderError(f"Failed to parse response: {str(e)}")

        if not isinstance(data, dict):
            raise WeatherProviderError("Farmsense response is not a JSON object")

        current_aqi = data.get("aqi_us")
        if current_aqi is None:
            current_aqi = data.get("aqi")
        if current_aqi is not None and not _is_number(current_aqi):
            logging.warning(f"Ignoring non-numeric Farmsense AQI: {current_aqi!r}")
            current_aqi = None

        per_hour = {}
        hourly = data.get("hourly")
        if isinstance(hourly, list):
            for entry in hourly:
                if not isinstance(entry, dict):
                    continue
                aqi = entry.get("aqi_us")
                if entry.get("time") and _is_number(aqi):
                    per_hour[entry["time"]] = aqi

        return AirQualityData(current_aqi=current_aqi, per_hour=per_hour, note=self.NOTE)


class AirQualityChain(AirQualityProviderBase):
    """
    Try air quality providers in order until one answers.

    Never raises: when every provider fails the result is empty, so that
    missing air quality leaves the rest of the dashboard intact.
    """

    UNAVAILABLE_NOTE = "Air quality unavailable"

    def __init__(self, providers: List[AirQualityProviderBase]):
        self.providers = providers

    def get_air_quality(self, lat: float, lon: float) -> AirQualityData:
        for provider in self.providers:
            try:
                return provider.get_air_quality(lat, lon)
            except WeatherProviderError as e:
                logging.warning(f"{type(provider).__name__} failed, trying next air quality source: {e}")

        logging.warning("No air quality source available")
        return AirQualityData(current_aqi=None, per_hour={}, note=self.UNAVAILABLE_NOTE)
