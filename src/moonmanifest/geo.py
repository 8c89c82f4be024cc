"""Coordinate and timestamp handling: validation, parsing, and local-time conversion."""

import math
import re
from datetime import date, datetime

from pytz import timezone, utc
from pytz.exceptions import AmbiguousTimeError, NonExistentTimeError
from timezonefinder import TimezoneFinder

from moonmanifest.errors import InvalidInputError, NotFoundError
from moonmanifest.models import GeoCoordinate

_tf = TimezoneFinder()

_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*([nsew])?\s*$", re.IGNORECASE)


def validate_coordinate(coordinate: GeoCoordinate) -> GeoCoordinate:
    """Reject non-finite or out-of-range coordinates.

    Raises:
        InvalidInputError: If latitude is outside [-90, 90] or longitude outside [-180, 180].
    """
    lat, lng = coordinate.latitude, coordinate.longitude
    try:
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Non-numeric coordinate: {coordinate!r}") from exc
    if not (math.isfinite(lat) and -90.0 <= lat <= 90.0):
        raise InvalidInputError(f"Latitude out of range: {lat}")
    if not (math.isfinite(lng) and -180.0 <= lng <= 180.0):
        raise InvalidInputError(f"Longitude out of range: {lng}")
    return coordinate


def convert_coordinates(latitude: str, longitude: str) -> GeoCoordinate:
    """Parse decimal-degree strings with optional hemisphere letters.

    ``"33.87 S"`` → -33.87, ``"151.2E"`` → 151.2. A sign and a hemisphere
    letter may be combined; the letter then flips the sign once.
    """

    def parse(text: str, negative: str) -> float:
        match = _NUMBER.match(text or "")
        if match is None:
            raise InvalidInputError(f"Unparseable coordinate: {text!r}")
        value = float(match.group(1))
        hemisphere = (match.group(2) or "").lower()
        return -value if hemisphere == negative else value

    return validate_coordinate(
        GeoCoordinate(latitude=parse(latitude, "s"), longitude=parse(longitude, "w"))
    )


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime string as written (offset kept, naive stays naive).

    Raises:
        InvalidInputError: If the string is empty or not ISO-8601.
    """
    text = (value or "").strip()
    if not text:
        raise InvalidInputError("Empty birth date")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidInputError(f"Unparseable birth date: {value!r}") from exc


def parse_birth_date(value: date | datetime | str) -> datetime:
    """Normalize a birth timestamp to an aware UTC datetime.

    Naive datetimes and bare dates are read as UTC, matching how a
    ``YYYY-MM-DD`` form value was interpreted on sign-up.

    Raises:
        InvalidInputError: If the value is not a date, datetime, or ISO-8601 string.
    """
    if isinstance(value, str):
        value = parse_timestamp(value)
    if isinstance(value, datetime):
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            return utc.localize(value)
        return value.astimezone(utc)
    if isinstance(value, date):
        return utc.localize(datetime(value.year, value.month, value.day))
    raise InvalidInputError(f"Unparseable birth date: {value!r}")


def localize_birth_time(local_dt: datetime, coordinate: GeoCoordinate) -> datetime:
    """Convert a naive local birth time at ``coordinate`` to UTC.

    Args:
        local_dt: Wall-clock time at the birth place, without tzinfo.
        coordinate: Birth place; its IANA zone is looked up with timezonefinder.

    Returns:
        Aware UTC datetime.

    Raises:
        InvalidInputError: If the local time is ambiguous or skipped by a DST change.
        NotFoundError: If no time zone covers the coordinate.
    """
    validate_coordinate(coordinate)
    tz_str = _tf.timezone_at(lat=coordinate.latitude, lng=coordinate.longitude)
    if tz_str is None:
        raise NotFoundError(
            f"Timezone not found: lat={coordinate.latitude}, lng={coordinate.longitude}"
        )
    local_tz = timezone(tz_str)
    try:
        return local_tz.localize(local_dt.replace(tzinfo=None), is_dst=None).astimezone(utc)
    except (AmbiguousTimeError, NonExistentTimeError) as exc:
        raise InvalidInputError(f"Local time {local_dt} is ambiguous or skipped in {tz_str}") from exc
