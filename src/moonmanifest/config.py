"""Runtime settings read from the environment.

Entry points call ``load_dotenv()`` first, so a ``.env`` file in the working
directory is honoured. Every getter reads the environment on each call.

Env vars:
- NOMINATIM_URL            geocoder search endpoint
- MOONMANIFEST_USER_AGENT  User-Agent sent to Nominatim (required by its terms)
- GEOCODE_TIMEOUT          seconds per geocoding request
- MOONMANIFEST_DATA_DIR    directory holding the skyfield ephemeris kernel
- MOONMANIFEST_EPHEMERIS   kernel file name
- LOG_LEVEL                structlog filtering level
"""

import logging
import os
from pathlib import Path

_ROOT = Path(__file__).parent.parent.parent

_DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
_DEFAULT_USER_AGENT = "MoonManifest/1.0"
_DEFAULT_TIMEOUT = 10.0
_DEFAULT_EPHEMERIS = "de421.bsp"


def _get_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def nominatim_url() -> str:
    return os.getenv("NOMINATIM_URL") or _DEFAULT_NOMINATIM_URL


def user_agent() -> str:
    return os.getenv("MOONMANIFEST_USER_AGENT") or _DEFAULT_USER_AGENT


def geocode_timeout() -> float:
    """Return the per-request geocoding timeout in seconds (default 10)."""
    return _get_float("GEOCODE_TIMEOUT", _DEFAULT_TIMEOUT)


def data_dir() -> Path:
    """Return the directory skyfield downloads kernels into."""
    raw = os.getenv("MOONMANIFEST_DATA_DIR")
    return Path(raw) if raw else _ROOT / "resources"


def ephemeris_file() -> str:
    return os.getenv("MOONMANIFEST_EPHEMERIS") or _DEFAULT_EPHEMERIS


def log_level() -> int:
    """Return the numeric logging level named by LOG_LEVEL (default INFO)."""
    name = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
