"""Weather service combining forecast and air quality, with caching."""
import logging
import time
from typing import Dict, Optional, Tuple

from weather_data import ForecastPack
from weather_provider import AirQualityProviderBase, ForecastProviderBase


class WeatherService:
    """
    Service that merges a forecast provider with an air quality provider.

    Results are cached per location so that redraws between refreshes do
    not hit the APIs (default: 10 minutes, the dashboard refresh period).
    """

    def __init__(
        self,
        forecast_provider: ForecastProviderBase,
        air_quality_provider: AirQualityProviderBase,
        cache_ttl_seconds: int = 600  # 10 minutes default
    ):
        """
        Initialize weather service.

        Args:
            forecast_provider: Source of current conditions and hourly forecast
            air_quality_provider: Source of US AQI; should not raise for missing data
            cache_ttl_seconds: How long to cache results before fetching new data
        """
        self.forecast_provider = forecast_provider
        self.air_quality_provider = air_quality_provider
        self.cache_ttl_seconds = cache_ttl_seconds

        self._cache: Dict[Tuple[float, float], Tuple[float, ForecastPack]] = {}

    def get_pack(self, lat: float, lon: float) -> ForecastPack:
        """
        Get the forecast for a location with AQI blended in, using cache if still fresh.

        Returns:
            ForecastPack: Current conditions plus next 12 hours (may be cached)

        Raises:
            WeatherProviderError: If the forecast cannot be fetched
        """
        key = (round(lat, 4), round(lon, 4))
        current_time = time.time()

        cached = self._cache.get(key)
        if cached is not None:
            cache_time, pack = cached
            cache_age = current_time - cache_time
            if cache_age < self.cache_ttl_seconds:
                logging.debug(f"Using cached forecast for {key} (age: {cache_age:.1f}s, TTL: {self.cache_ttl_seconds}s)")
                return pack
            logging.info(f"Cache expired (age: {cache_age:.1f}s > TTL: {self.cache_ttl_seconds}s), fetching new data")

        logging.info(f"Fetching forecast and air quality for {key}...")
        forecast = self.forecast_provider.get_forecast(lat, lon)
        air_quality = self.air_quality_provider.get_air_quality(lat, lon)
        pack = forecast.with_air_quality(air_quality)

        logging.info(
            f"Forecast ready: {len(pack.next_12h)} hours, "
            f"current AQI={pack.current.aqi if pack.current else None} ({pack.air_quality_note})"
        )
        self._cache[key] = (current_time, pack)
        return pack

    def invalidate(self, lat: Optional[float] = None, lon: Optional[float] = None) -> None:
        """Drop cached data for one location, or for all locations."""
        if lat is None or lon is None:
            self._cache.clear()
        else:
            self._cache.pop((round(lat, 4), round(lon, 4)), None)
