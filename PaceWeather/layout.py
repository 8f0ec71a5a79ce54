"""Layout and rendering logic for the dashboard - pure functions for testability."""
from typing import List, Optional, Tuple

from preferences import Preferences
from safety import Activity, Level, Reading, evaluate, score, sub_scores
from units import Units, condition_text, format_temp, format_wind, hour_label, weather_symbol
from weather_data import ForecastPack, HourPoint

GRAY = (150, 150, 150)
WHITE = (230, 230, 230)

# Fixed display associations for each advisory level
LEVEL_STYLES = {
    Level.IDEAL: ("Ideal for outdoors", (34, 197, 94)),
    Level.CAUTION: ("Caution advised", (234, 179, 8)),
    Level.NOT_RECOMMENDED: ("Not recommended", (220, 38, 38)),
}

NOW_ROW = 2
FORECAST_HEADER_ROW = 8
FIRST_HOUR_ROW = 9


class DrawOp:
    """Represents a drawing operation (for testing/layout calculation)."""
    def __init__(self, op_type: str, **kwargs):
        self.op_type = op_type
        self.kwargs = kwargs

    def __repr__(self) -> str:
        return f"DrawOp({self.op_type!r}, {self.kwargs!r})"


def _text(text: str, x: int, y: int, color: Tuple[int, int, int]) -> DrawOp:
    return DrawOp("text", text=text, x=x, y=y, r=color[0], g=color[1], b=color[2])


def level_label(level: Level) -> str:
    return LEVEL_STYLES[level][0]


def level_color(level: Level) -> Tuple[int, int, int]:
    return LEVEL_STYLES[level][1]


def get_temperature_color(temp_c: float) -> Tuple[int, int, int]:
    """
    Get RGB color for temperature using a simple gradient.

    Cold (< 0°C) = blue
    Cool (0-15°C) = cyan
    Mild (15-25°C) = green/yellow
    Warm (25-35°C) = yellow/orange
    Hot (> 35°C) = red
    """
    if temp_c < 0:
        return (0, 0, 255)
    elif temp_c < 15:
        ratio = temp_c / 15.0
        return (0, int(255 * ratio), 255)
    elif temp_c < 25:
        ratio = (temp_c - 15) / 10.0
        return (int(255 * ratio), 255, int(255 * (1 - ratio)))
    elif temp_c < 35:
        ratio = (temp_c - 25) / 10.0
        return (255, int(255 * (1 - ratio * 0.5)), 0)
    else:
        ratio = min((temp_c - 35) / 10.0, 1.0)
        return (255, int(255 * (1 - ratio)), 0)


def _condition(code: int, use_symbols: bool) -> str:
    return weather_symbol(code) if use_symbols else condition_text(code)


def _hour_row(hour: HourPoint, prefs: Preferences, row: int, use_symbols: bool) -> List[DrawOp]:
    level = evaluate(hour.to_reading(prefs.activity))
    color = level_color(level)
    summary = f"{round(hour.precip_prob)}% • {format_wind(hour.wind_kmh, prefs.units)}"
    return [
        _text(hour_label(hour.time), 0, row, GRAY),
        _text(format_temp(hour.temp_c, prefs.units), 6, row, get_temperature_color(hour.temp_c)),
        _text(_condition(hour.weather_code, use_symbols), 12, row, WHITE),
        _text(summary, 27, row, GRAY),
        _text("●", 44, row, color),
        _text(level.value, 46, row, color),
    ]


def calculate_layout(
    pack: Optional[ForecastPack],
    prefs: Preferences,
    location_name: Optional[str] = None,
    width: int = 64,
    use_symbols: bool = True,
) -> List[DrawOp]:
    """
    Calculate layout operations for the dashboard.

    This is a pure function that returns drawing operations on a character
    grid, making it easy to test without actual rendering.

    Args:
        pack: Forecast to display, or None while loading
        prefs: Units and activity to display for
        location_name: Header text (defaults to prefs.city)
        width: Grid width in columns
        use_symbols: Show weather emoji; otherwise short condition text

    Returns:
        List of DrawOp objects representing what to draw
    """
    ops = []
    units_text = "°F" if prefs.units == Units.IMPERIAL else "°C"

    # Header: location on the left, units on the right
    ops.append(_text(location_name or prefs.city, 0, 0, WHITE))
    ops.append(_text(units_text, max(0, width - len(units_text)), 0, GRAY))

    # Current conditions
    ops.append(_text("Now", 0, NOW_ROW, GRAY))
    current = pack.current if pack else None
    if current is None:
        ops.append(_text("--", 0, NOW_ROW + 1, WHITE))
        ops.append(_text("Wind --", 0, NOW_ROW + 2, GRAY))
        ops.append(_text("Loading...", 0, NOW_ROW + 3, GRAY))
    else:
        temp_text = format_temp(current.temp_c, prefs.units)
        ops.append(_text(temp_text, 0, NOW_ROW + 1, get_temperature_color(current.temp_c)))
        ops.append(_text(_condition(current.weather_code, use_symbols), len(temp_text) + 2, NOW_ROW + 1, WHITE))

        wind_text = f"Wind {format_wind(current.wind_kmh, prefs.units)}"
        if isinstance(current.aqi, (int, float)):
            wind_text += f"   AQI {round(current.aqi)}"
        ops.append(_text(wind_text, 0, NOW_ROW + 2, GRAY))

        level = evaluate(pack.current_reading(prefs.activity))
        ops.append(_text(f"[ {level_label(level)} ]", 0, NOW_ROW + 3, level_color(level)))

    if pack and pack.air_quality_note:
        ops.append(_text(pack.air_quality_note, 0, NOW_ROW + 4, GRAY))

    # 12-hour outlook
    activity_text = Activity(prefs.activity).value.capitalize()
    ops.append(_text("NEXT 12 HOURS", 0, FORECAST_HEADER_ROW, GRAY))
    ops.append(_text(activity_text, max(0, width - len(activity_text)), FORECAST_HEADER_ROW, WHITE))

    hours = pack.next_12h if pack else []
    if not hours:
        ops.append(_text("Loading forecast...", 0, FIRST_HOUR_ROW, GRAY))
    for i, hour in enumerate(hours):
        ops.extend(_hour_row(hour, prefs, FIRST_HOUR_ROW + i, use_symbols))

    return ops


def layout_height(ops: List[DrawOp]) -> int:
    """Number of rows needed to draw the operations."""
    return max((op.kwargs["y"] for op in ops), default=-1) + 1


def render_dashboard(canvas, ops: List[DrawOp]) -> None:
    """
    Render layout operations onto a canvas.

    Args:
        canvas: DashboardCanvas instance (text, fake or PIL)
        ops: Operations from calculate_layout()
    """
    canvas.clear()
    for op in ops:
        if op.op_type == "text":
            canvas.draw_text(
                op.kwargs["x"],
                op.kwargs["y"],
                op.kwargs["text"],
                op.kwargs["r"],
                op.kwargs["g"],
                op.kwargs["b"]
            )


def explain_reading(label: str, reading: Reading) -> str:
    """One-line breakdown of how a reading was rated, e.g. for --explain."""
    parts = sub_scores(reading)
    aqi_part = "-" if parts.air_quality is None else str(parts.air_quality)
    total = score(reading)
    return (
        f"{label}: temp={parts.temperature} wind={parts.wind} "
        f"precip={parts.precipitation} aqi={aqi_part} -> score {total} ({evaluate(reading).value})"
    )


def explain_pack(pack: ForecastPack, activity: Activity) -> List[str]:
    lines = []
    reading = pack.current_reading(activity)
    if reading is not None:
        lines.append(explain_reading("Now", reading))
    for hour in pack.next_12h:
        lines.append(explain_reading(hour_label(hour.time), hour.to_reading(activity)))
    return lines
