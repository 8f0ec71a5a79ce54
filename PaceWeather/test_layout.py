"""Tests for layout and rendering logic."""
import pytest
from dashboard_canvas import FakeCanvas
from layout import (
    FIRST_HOUR_ROW,
    LEVEL_STYLES,
    calculate_layout,
    explain_pack,
    explain_reading,
    get_temperature_color,
    layout_height,
    level_color,
    level_label,
    render_dashboard,
)
from preferences import Preferences
from safety import Activity, Level, Reading
from units import Units
from weather_data import CurrentConditions, ForecastPack, HourPoint


@pytest.fixture
def prefs():
    return Preferences(city="Boston, United States", lat=42.36, lon=-71.06)


@pytest.fixture
def sample_pack():
    """Current conditions plus three hours: ideal, caution and not recommended for running."""
    return ForecastPack(
        current=CurrentConditions(temp_c=12.0, wind_kmh=10.0, weather_code=0, aqi=30),
        next_12h=[
            HourPoint("2024-05-01T13:00", 12.0, 0.0, 0.0, 10.0, 0, aqi=30),
            HourPoint("2024-05-01T14:00", 30.0, 0.0, 0.0, 45.0, 3),
            HourPoint("2024-05-01T15:00", 35.0, 4.0, 100.0, 50.0, 95, aqi=150),
        ],
        air_quality_note="Using Open-Meteo Air Quality",
    )


def texts(ops):
    return [op.kwargs["text"] for op in ops if op.op_type == "text"]


def test_level_styles_are_fixed():
    assert level_label(Level.IDEAL) == "Ideal for outdoors"
    assert level_label(Level.CAUTION) == "Caution advised"
    assert level_label(Level.NOT_RECOMMENDED) == "Not recommended"
    assert len({level_color(level) for level in Level}) == 3
    assert set(LEVEL_STYLES) == set(Level)


def test_temperature_color_cold():
    assert get_temperature_color(-10.0) == (0, 0, 255)


def test_temperature_color_hot():
    color = get_temperature_color(40.0)
    assert color[0] == 255
    assert color[1] < 255
    assert color[2] == 0


def test_calculate_layout_header_and_current(prefs, sample_pack):
    ops = calculate_layout(sample_pack, prefs)
    shown = texts(ops)

    assert "Boston, United States" in shown
    assert "°C" in shown
    assert "12°C" in shown
    assert "Wind 10 km/h   AQI 30" in shown
    assert "[ Ideal for outdoors ]" in shown
    assert "Using Open-Meteo Air Quality" in shown


def test_calculate_layout_badge_color(prefs, sample_pack):
    ops = calculate_layout(sample_pack, prefs)

    badge = next(op for op in ops if op.kwargs["text"].startswith("[ "))
    assert (badge.kwargs["r"], badge.kwargs["g"], badge.kwargs["b"]) == level_color(Level.IDEAL)


def test_calculate_layout_hour_rows(prefs, sample_pack):
    ops = calculate_layout(sample_pack, prefs)

    levels = [op.kwargs["text"] for op in ops
              if op.kwargs["y"] >= FIRST_HOUR_ROW and op.kwargs["x"] == 46]
    assert levels == ["ideal", "caution", "not-recommended"]

    first_row = [op.kwargs["text"] for op in ops if op.kwargs["y"] == FIRST_HOUR_ROW]
    assert first_row[0] == "1PM"
    assert "12°C" in first_row
    assert "0% • 10 km/h" in first_row


def test_calculate_layout_activity_changes_rating(prefs):
    pack = ForecastPack(current=None, next_12h=[HourPoint("2024-05-01T13:00", 22.0, 0.0, 0.0, 30.0, 0)])

    prefs.activity = Activity.RUNNING
    running = texts(calculate_layout(pack, prefs))
    prefs.activity = Activity.CYCLING
    cycling = texts(calculate_layout(pack, prefs))

    # Running: temp 1 + wind 1 = 2, cycling: temp 0 + wind 1 = 1
    assert "ideal" in running and "ideal" in cycling
    assert "Running" in running
    assert "Cycling" in cycling


def test_calculate_layout_imperial(prefs, sample_pack):
    prefs.units = Units.IMPERIAL
    shown = texts(calculate_layout(sample_pack, prefs))

    assert "°F" in shown
    assert "54°F" in shown
    assert "Wind 6 mph   AQI 30" in shown


def test_calculate_layout_without_aqi(prefs, sample_pack):
    sample_pack.current.aqi = None
    shown = texts(calculate_layout(sample_pack, prefs))

    assert "Wind 10 km/h" in shown


def test_calculate_layout_loading(prefs):
    shown = texts(calculate_layout(None, prefs))

    assert "--" in shown
    assert "Loading..." in shown
    assert "Loading forecast..." in shown


def test_calculate_layout_condition_text_instead_of_symbols(prefs, sample_pack):
    shown = texts(calculate_layout(sample_pack, prefs, use_symbols=False))

    assert "Clear" in shown
    assert "Storm" in shown
    assert "☀️" not in shown


def test_calculate_layout_fits_width(prefs, sample_pack):
    for op in calculate_layout(sample_pack, prefs, width=64):
        assert op.kwargs["x"] + len(op.kwargs["text"]) <= 64


def test_layout_height(prefs, sample_pack):
    ops = calculate_layout(sample_pack, prefs)

    assert layout_height(ops) == FIRST_HOUR_ROW + 3
    assert layout_height([]) == 0


def test_render_dashboard(prefs, sample_pack):
    canvas = FakeCanvas()
    ops = calculate_layout(sample_pack, prefs)

    render_dashboard(canvas, ops)

    assert canvas.clear_count == 1
    assert len(canvas.texts) == len(ops)
    assert canvas.find("Ideal for outdoors") is not None


def test_explain_reading():
    reading = Reading(Activity.RUNNING, 30.0, 45.0, 0.0, 0.0, None)

    assert explain_reading("2PM", reading) == "2PM: temp=2 wind=2 precip=0 aqi=- -> score 4 (caution)"


def test_explain_pack(sample_pack):
    lines = explain_pack(sample_pack, Activity.CYCLING)

    assert len(lines) == 4
    assert lines[0].startswith("Now: ")
    assert lines[-1] == "3PM: temp=2 wind=2 precip=2 aqi=2 -> score 8 (not-recommended)"
