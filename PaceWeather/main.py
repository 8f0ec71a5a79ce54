"""Terminal weather dashboard for runners and cyclists."""
import argparse
import logging
import os
import signal
import sys
import time
from typing import List, NamedTuple, Optional

from dotenv import load_dotenv

from dashboard_canvas import PILCanvas, TextCanvas
from farmsense_provider import AirQualityChain, FarmsenseAirQualityProvider
from layout import calculate_layout, explain_pack, layout_height, render_dashboard
from open_meteo_provider import OpenMeteoAirQualityProvider, OpenMeteoForecastProvider, OpenMeteoGeocoder
from preferences import PreferenceStore, Preferences
from safety import Activity
from units import Units
from weather_data import ForecastPack
from weather_provider import GeocoderBase, WeatherProviderError
from weather_service import WeatherService

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "paceweather.log")
DASHBOARD_WIDTH = 64

CLEAR_SCREEN = "\x1b[2J\x1b[H"


class Config(NamedTuple):
    default_city: str
    default_lat: float
    default_lon: float
    farmsense_url: str
    timezone: str


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Weather dashboard for runners and cyclists")
    parser.add_argument("--city", help="Search for a place and remember it")
    parser.add_argument("--lat", type=float, help="Latitude (use with --lon)")
    parser.add_argument("--lon", type=float, help="Longitude (use with --lat)")
    parser.add_argument("--units", choices=[u.value for u in Units])
    parser.add_argument("--activity", choices=[a.value for a in Activity])
    parser.add_argument("--refresh", type=float, default=600.0, help="Seconds between refreshes")
    parser.add_argument("--once", action="store_true", help="Draw once and exit")
    parser.add_argument("--png", help="Also write the dashboard to this PNG file")
    parser.add_argument("--explain", action="store_true", help="Print the score breakdown per slot")
    parser.add_argument("--prefs", help="Preferences file (default ~/.paceweather/preferences.json)")
    parser.add_argument("--cache-ttl", type=int, default=600)
    parser.add_argument("--timeout", type=int, default=10, help="HTTP timeout in seconds")
    parser.add_argument("--no-color", action="store_true")
    parser.add_argument("--no-symbols", action="store_true", help="Show condition text instead of emoji")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be given together")
    return args


def setup_logging(log_file: str, verbose: bool) -> None:
    # Console output is the dashboard itself, so only warnings go to stderr
    log_level = logging.DEBUG if verbose else logging.INFO
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            console,
            logging.FileHandler(log_file)
        ]
    )


def load_config() -> Config:
    load_dotenv()
    city = os.getenv("PACEWEATHER_DEFAULT_CITY", "New York")
    lat = os.getenv("PACEWEATHER_DEFAULT_LAT", "40.7128")
    lon = os.getenv("PACEWEATHER_DEFAULT_LON", "-74.0060")
    farmsense_url = os.getenv("PACEWEATHER_FARMSENSE_URL", "")
    timezone = os.getenv("PACEWEATHER_TIMEZONE", "auto")

    try:
        lat_val = float(lat)
        lon_val = float(lon)
    except ValueError as exc:
        raise SystemExit(f"Invalid default coordinates: {exc}") from exc
    if not -90 <= lat_val <= 90 or not -180 <= lon_val <= 180:
        raise SystemExit(f"Default coordinates out of range: {lat_val}, {lon_val}")

    if farmsense_url and ("{lat}" not in farmsense_url or "{lon}" not in farmsense_url):
        logging.warning("PACEWEATHER_FARMSENSE_URL has no {lat}/{lon} placeholders")

    logging.info("Configuration loaded: city=%s lat=%s lon=%s tz=%s farmsense=%s",
                 city, lat_val, lon_val, timezone, bool(farmsense_url))
    return Config(city, lat_val, lon_val, farmsense_url, timezone)


def build_weather_service(config: Config, args: argparse.Namespace) -> WeatherService:
    air_sources = []
    if config.farmsense_url:
        air_sources.append(FarmsenseAirQualityProvider(config.farmsense_url, timeout=args.timeout))
    air_sources.append(OpenMeteoAirQualityProvider(timezone=config.timezone, timeout=args.timeout))

    service = WeatherService(
        forecast_provider=OpenMeteoForecastProvider(timezone=config.timezone, timeout=args.timeout),
        air_quality_provider=AirQualityChain(air_sources),
        cache_ttl_seconds=args.cache_ttl,
    )
    logging.info("Weather service ready (cache ttl=%ss, air sources=%s)", args.cache_ttl, len(air_sources))
    return service


def apply_args(prefs: Preferences, args: argparse.Namespace, geocoder: GeocoderBase) -> Optional[str]:
    """
    Update preferences from command-line choices.

    Returns:
        An error message to show, or None
    """
    if args.units:
        prefs.units = Units(args.units)
    if args.activity:
        prefs.activity = Activity(args.activity)

    if args.city and args.city.strip():
        try:
            location = geocoder.search(args.city.strip())
        except WeatherProviderError as err:
            logging.error("City search failed: %s", err)
            return str(err) or "Could not find that place"
        prefs.lat, prefs.lon = location.lat, location.lon
        prefs.city = location.display_name
    elif args.lat is not None and args.lon is not None:
        prefs.lat, prefs.lon = args.lat, args.lon
        name = geocoder.reverse(args.lat, args.lon)
        prefs.city = name or f"{args.lat:.3f}, {args.lon:.3f}"
    return None


def draw(pack: Optional[ForecastPack], prefs: Preferences, args: argparse.Namespace,
         status: Optional[str] = None) -> str:
    """Render the dashboard to text (and PNG when requested)."""
    use_symbols = not args.no_symbols and sys.stdout.isatty()
    ops = calculate_layout(pack, prefs, width=DASHBOARD_WIDTH, use_symbols=use_symbols)
    height = layout_height(ops) + (2 if status else 0)

    canvas = TextCanvas(width=DASHBOARD_WIDTH, height=height, color=not args.no_color)
    render_dashboard(canvas, ops)
    if status:
        canvas.draw_text(0, height - 1, status[:DASHBOARD_WIDTH], 252, 165, 165)

    if args.png:
        png = PILCanvas(width=DASHBOARD_WIDTH, height=height)
        render_dashboard(png, calculate_layout(pack, prefs, width=DASHBOARD_WIDTH, use_symbols=False))
        png.save(args.png)
        logging.info("Saved dashboard image to %s", args.png)

    return canvas.render()


def refresh_once(service: WeatherService, prefs: Preferences, args: argparse.Namespace,
                 status: Optional[str] = None) -> Optional[ForecastPack]:
    """Fetch and draw one frame; provider errors become a status line."""
    pack = None
    try:
        pack = service.get_pack(prefs.lat, prefs.lon)
    except WeatherProviderError as err:
        logging.error("Weather fetch failed: %s", err)
        status = f"Failed to load data: {err}"

    output = draw(pack, prefs, args, status)
    if not args.once:
        output = CLEAR_SCREEN + output
    print(output)

    if args.explain and pack is not None:
        for line in explain_pack(pack, prefs.activity):
            print(line)
    return pack


def dashboard_loop(service: WeatherService, prefs: Preferences, args: argparse.Namespace,
                   status: Optional[str] = None) -> None:
    frame = 0
    while True:
        frame += 1
        logging.info("Frame %s: refreshing %s", frame, prefs.city)
        try:
            refresh_once(service, prefs, args, status)
        except Exception as exc:
            logging.exception("Unexpected error: %s", exc)
            print(f"{CLEAR_SCREEN}FATAL ERROR: {exc}")
        status = None
        time.sleep(max(args.refresh, 1.0))


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    config = load_config()

    store = PreferenceStore(args.prefs)
    prefs = store.load(Preferences(city=config.default_city, lat=config.default_lat, lon=config.default_lon))

    geocoder = OpenMeteoGeocoder(timeout=args.timeout)
    status = apply_args(prefs, args, geocoder)
    store.save(prefs)

    service = build_weather_service(config, args)

    if args.once:
        try:
            pack = refresh_once(service, prefs, args, status)
        except Exception as exc:
            logging.exception("Unexpected error: %s", exc)
            print(f"FATAL ERROR: {exc}")
            return 1
        return 0 if pack is not None else 1

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        dashboard_loop(service, prefs, args, status)
    except KeyboardInterrupt:
        logging.info("Stopping dashboard")
    return 0


if __name__ == "__main__":
    sys.exit(main())
