"""Weather provider abstractions - allow swapping forecast, geocoding and air quality APIs."""
from abc import ABC, abstractmethod
from typing import Optional

from weather_data import AirQualityData, ForecastPack, GeoLocation


class ForecastProviderBase(ABC):
    """Abstract base class for forecast providers."""

    @abstractmethod
    def get_forecast(self, lat: float, lon: float) -> ForecastPack:
        """
        Fetch current conditions and the next 12 hourly points.

        Args:
            lat: Latitude (-90 to 90)
            lon: Longitude (-180 to 180)

        Returns:
            ForecastPack: Forecast without air quality filled in

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class GeocoderBase(ABC):
    """Abstract base class for place-name lookup."""

    @abstractmethod
    def search(self, name: str) -> GeoLocation:
        """
        Resolve a place name to coordinates.

        Raises:
            GeocodingError: If nothing matches the name
            WeatherProviderError: If the lookup itself fails
        """
        pass

    @abstractmethod
    def reverse(self, lat: float, lon: float) -> Optional[str]:
        """Best-effort name for coordinates; None when unknown."""
        pass


class AirQualityProviderBase(ABC):
    """Abstract base class for air quality providers."""

    @abstractmethod
    def get_air_quality(self, lat: float, lon: float) -> AirQualityData:
        """
        Fetch current and hourly US AQI.

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
    pass


class GeocodingError(WeatherProviderError):
    """Exception raised when a place name cannot be resolved."""
    pass
