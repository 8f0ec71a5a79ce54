"""Tests for weather service."""
import time
from unittest.mock import patch

import pytest
from weather_data import AirQualityData, CurrentConditions, ForecastPack, HourPoint
from weather_provider import AirQualityProviderBase, ForecastProviderBase, WeatherProviderError
from weather_service import WeatherService


class MockForecastProvider(ForecastProviderBase):
    """Mock forecast provider for testing."""

    def __init__(self, return_data=None, raise_error=None):
        self.return_data = return_data
        self.raise_error = raise_error
        self.call_count = 0

    def get_forecast(self, lat, lon):
        self.call_count += 1
        if self.raise_error:
            raise self.raise_error
        return self.return_data


class MockAirProvider(AirQualityProviderBase):
    """Mock air quality provider for testing."""

    def __init__(self, return_data=None):
        self.return_data = return_data or AirQualityData()
        self.call_count = 0

    def get_air_quality(self, lat, lon):
        self.call_count += 1
        return self.return_data


@pytest.fixture
def sample_pack():
    """Forecast with two hours and no air quality."""
    return ForecastPack(
        current=CurrentConditions(temp_c=20.0, wind_kmh=5.0, weather_code=0),
        next_12h=[
            HourPoint("2024-05-01T10:00", 20.0, 0.0, 0.0, 5.0, 0),
            HourPoint("2024-05-01T11:00", 21.0, 0.0, 10.0, 6.0, 1),
        ],
    )


@pytest.fixture
def sample_air():
    return AirQualityData(current_aqi=48, per_hour={"2024-05-01T11:00": 65}, note="Using Open-Meteo Air Quality")


def test_get_pack_blends_air_quality(sample_pack, sample_air):
    service = WeatherService(MockForecastProvider(return_data=sample_pack), MockAirProvider(sample_air))

    pack = service.get_pack(40.71, -74.0)

    assert pack.current.aqi == 48
    assert pack.next_12h[0].aqi is None
    assert pack.next_12h[1].aqi == 65
    assert pack.air_quality_note == "Using Open-Meteo Air Quality"


def test_weather_service_caching(sample_pack):
    """Test that service caches results."""
    forecast = MockForecastProvider(return_data=sample_pack)
    air = MockAirProvider()
    service = WeatherService(forecast, air, cache_ttl_seconds=60)

    result1 = service.get_pack(40.71, -74.0)
    assert forecast.call_count == 1
    assert air.call_count == 1

    # Second call within TTL should use cache
    result2 = service.get_pack(40.71, -74.0)
    assert forecast.call_count == 1
    assert air.call_count == 1
    assert result2 is result1


def test_weather_service_cache_expiry(sample_pack):
    """Test that cache expires after TTL."""
    forecast = MockForecastProvider(return_data=sample_pack)
    service = WeatherService(forecast, MockAirProvider(), cache_ttl_seconds=600)

    with patch('weather_service.time.time', return_value=1000.0):
        service.get_pack(40.71, -74.0)
    with patch('weather_service.time.time', return_value=1599.0):
        service.get_pack(40.71, -74.0)
    assert forecast.call_count == 1

    with patch('weather_service.time.time', return_value=1601.0):
        service.get_pack(40.71, -74.0)
    assert forecast.call_count == 2


def test_weather_service_caches_per_location(sample_pack):
    forecast = MockForecastProvider(return_data=sample_pack)
    service = WeatherService(forecast, MockAirProvider())

    service.get_pack(40.71, -74.0)
    service.get_pack(42.36, -71.06)
    service.get_pack(40.71, -74.0)

    assert forecast.call_count == 2


def test_weather_service_invalidate(sample_pack):
    forecast = MockForecastProvider(return_data=sample_pack)
    service = WeatherService(forecast, MockAirProvider())

    service.get_pack(40.71, -74.0)
    service.get_pack(42.36, -71.06)
    service.invalidate(40.71, -74.0)
    service.get_pack(40.71, -74.0)
    service.get_pack(42.36, -71.06)
    assert forecast.call_count == 3

    service.invalidate()
    service.get_pack(42.36, -71.06)
    assert forecast.call_count == 4


def test_weather_service_forecast_error_propagates():
    """Forecast failures are not retried."""
    forecast = MockForecastProvider(raise_error=WeatherProviderError("Network error"))
    air = MockAirProvider()
    service = WeatherService(forecast, air)

    with pytest.raises(WeatherProviderError):
        service.get_pack(40.71, -74.0)

    assert forecast.call_count == 1
    assert air.call_count == 0


def test_weather_service_does_not_cache_failures(sample_pack):
    forecast = MockForecastProvider(raise_error=WeatherProviderError("Network error"))
    service = WeatherService(forecast, MockAirProvider())

    with pytest.raises(WeatherProviderError):
        service.get_pack(40.71, -74.0)

    forecast.raise_error = None
    forecast.return_data = sample_pack
    assert service.get_pack(40.71, -74.0).current.temp_c == 20.0


def test_cached_pack_age(sample_pack):
    service = WeatherService(MockForecastProvider(return_data=sample_pack), MockAirProvider())

    pack = service.get_pack(40.71, -74.0)

    assert time.time() - pack.fetched_at < 60
