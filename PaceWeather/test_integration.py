"""Integration tests - hit the real Open-Meteo APIs (disabled by default)."""
import os

import pytest
from farmsense_provider import AirQualityChain
from open_meteo_provider import OpenMeteoAirQualityProvider, OpenMeteoForecastProvider, OpenMeteoGeocoder
from safety import Activity, Level, evaluate
from weather_service import WeatherService

live = pytest.mark.skipif(
    not os.environ.get("PACEWEATHER_INTEGRATION"),
    reason="PACEWEATHER_INTEGRATION not set - skipping integration test"
)


@live
def test_open_meteo_forecast_integration():
    """
    Integration test that hits the real Open-Meteo forecast API.

    Set PACEWEATHER_INTEGRATION=1 to run this test.
    """
    pack = OpenMeteoForecastProvider().get_forecast(40.7128, -74.0060)

    assert pack.current is not None
    assert 1 <= len(pack.next_12h) <= 12


@live
def test_geocoder_integration():
    location = OpenMeteoGeocoder().search("Boston")

    assert location.name == "Boston"
    assert location.lat != 0


@live
def test_weather_service_integration():
    """Integration test for WeatherService with the real APIs."""
    service = WeatherService(
        OpenMeteoForecastProvider(),
        AirQualityChain([OpenMeteoAirQualityProvider()]),
        cache_ttl_seconds=60,
    )

    pack1 = service.get_pack(40.7128, -74.0060)
    reading = pack1.current_reading(Activity.RUNNING)
    assert evaluate(reading) in set(Level)

    # Second call should use cache
    pack2 = service.get_pack(40.7128, -74.0060)
    assert pack2 is pack1
