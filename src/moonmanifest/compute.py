"""Sign computation layer — skyfield Moon position, sign bucketing, and the birth-query pipeline."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog
from skyfield.api import Loader, wgs84

from moonmanifest import config
from moonmanifest.errors import ComputationError, LookupFailedError, MoonManifestError
from moonmanifest.geo import localize_birth_time, parse_birth_date, parse_timestamp, validate_coordinate
from moonmanifest.geocoding import resolve_coordinates
from moonmanifest.models import BirthMoment, BirthQuery, GeoCoordinate, LocationQuery, SignProfile
from moonmanifest.zodiac import compute_sun_sign, sign_for_longitude

_log = structlog.get_logger(__name__)

Resolver = Callable[[LocationQuery], GeoCoordinate]


@runtime_checkable
class MoonEphemeris(Protocol):
    """Anything that can place the Moon: returns apparent RA of date in degrees."""

    def moon_right_ascension(self, when: datetime, coordinate: GeoCoordinate) -> float: ...


class SkyfieldEphemeris:
    """Moon positions from a JPL kernel via skyfield.

    The kernel is downloaded into ``data_dir`` on first use and kept open
    for the life of the object.
    """

    def __init__(self, data_dir: Path | str | None = None, filename: str | None = None):
        self._loader = Loader(str(data_dir or config.data_dir()))
        self._filename = filename or config.ephemeris_file()
        self._eph = None
        self._ts = None

    def load(self) -> None:
        """Open (downloading if needed) the kernel and timescale.

        Raises:
            LookupFailedError: If the kernel cannot be downloaded or read.
        """
        if self._eph is not None:
            return
        try:
            self._eph = self._loader(self._filename)
            self._ts = self._loader.timescale()
        except (OSError, ValueError) as exc:
            raise LookupFailedError(f"Cannot load ephemeris {self._filename}: {exc}") from exc
        _log.debug("ephemeris_loaded", filename=self._filename)

    def moon_right_ascension(self, when: datetime, coordinate: GeoCoordinate) -> float:
        """Apparent right ascension of the Moon, of date, in degrees.

        Args:
            when: Aware UTC datetime.
            coordinate: Observer position; elevation is sea level.
        """
        self.load()
        t = self._ts.from_datetime(when)
        observer = self._eph["earth"] + wgs84.latlon(
            latitude_degrees=coordinate.latitude,
            longitude_degrees=coordinate.longitude,
            elevation_m=0.0,
        )
        apparent = observer.at(t).observe(self._eph["moon"]).apparent()
        ra, _, _ = apparent.radec(epoch="date")
        return float(ra.hours) * 15.0


_default_ephemeris: SkyfieldEphemeris | None = None


def default_ephemeris() -> SkyfieldEphemeris:
    global _default_ephemeris
    if _default_ephemeris is None:
        _default_ephemeris = SkyfieldEphemeris()
    return _default_ephemeris


def compute_moon_sign(moment: BirthMoment, ephemeris: MoonEphemeris | None = None) -> str:
    """Compute the Moon sign for a birth moment.

    Right ascension of date stands in for ecliptic longitude, so results near
    a sign boundary can differ from a tropical-zodiac ephemeris.

    Args:
        moment: Birth instant and coordinate. Validated before any ephemeris call.
        ephemeris: Object with ``moon_right_ascension(when, coordinate)``.
            Defaults to the shared ``SkyfieldEphemeris``.

    Returns:
        One of ``zodiac.ZODIAC_SIGNS``.

    Raises:
        InvalidInputError: Unparseable date or out-of-range coordinate.
        LookupFailedError: The ephemeris kernel could not be loaded.
        ComputationError: The ephemeris failed or returned a non-finite angle.
    """
    when = parse_birth_date(moment.date)
    validate_coordinate(moment.location)
    eph = ephemeris if ephemeris is not None else default_ephemeris()
    try:
        ra_deg = eph.moon_right_ascension(when, moment.location)
    except MoonManifestError:
        raise
    except Exception as exc:
        _log.error("ephemeris_failed", when=when.isoformat(), error=repr(exc))
        raise ComputationError(f"Failed to calculate moon sign: {exc}") from exc

    try:
        sign = sign_for_longitude(float(ra_deg))
    except (TypeError, ValueError) as exc:
        raise ComputationError(f"Ephemeris returned a non-numeric angle: {ra_deg!r}") from exc
    _log.debug("moon_sign_computed", when=when.isoformat(), ra_deg=ra_deg, sign=sign)
    return sign


def birth_instant(query: BirthQuery, coordinate: GeoCoordinate) -> datetime:
    """UTC instant of birth: local time at the birth place, else midnight UTC of the date."""
    day = parse_timestamp(query.birth_date).date()
    if not query.birth_time:
        return parse_birth_date(day)
    local = parse_timestamp(f"{day.isoformat()}T{query.birth_time.strip()}")
    return localize_birth_time(local, coordinate)


def run(
    query: BirthQuery,
    ephemeris: MoonEphemeris | None = None,
    resolver: Resolver = resolve_coordinates,
) -> SignProfile:
    """Top-level entry point: takes a BirthQuery and returns a SignProfile.

    Args:
        query: Sign-up form input (date, optional local time, place names).
        ephemeris: Optional ephemeris override, see ``compute_moon_sign``.
        resolver: Place-to-coordinate function; ``resolve_coordinates`` by default.

    Returns:
        SignProfile with both signs and the resolved birth moment.
    """
    sun_sign = compute_sun_sign(query.birth_date)
    location = resolver(
        LocationQuery(city=query.city, region=query.region, country=query.country)
    )
    moment = BirthMoment(date=birth_instant(query, location), location=location)
    moon_sign = compute_moon_sign(moment, ephemeris=ephemeris)
    _log.info("signs_computed", sun_sign=sun_sign, moon_sign=moon_sign)
    return SignProfile(query=query, moment=moment, sun_sign=sun_sign, moon_sign=moon_sign)
