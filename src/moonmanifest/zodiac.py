"""Zodiac reference tables, longitude bucketing, and the Sun-sign date table."""

import math
from datetime import date, datetime

from moonmanifest.errors import ComputationError, InvalidInputError
from moonmanifest.geo import parse_timestamp

ZODIAC_SIGNS: tuple[str, ...] = (
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
)

_DEGREES_PER_SIGN = 30.0

# (sign, (start_month, start_day), (end_month, end_day)); both ends inclusive.
# Capricorn wraps across the year boundary.
SUN_SIGN_RANGES: tuple[tuple[str, tuple[int, int], tuple[int, int]], ...] = (
    ("Aries", (3, 21), (4, 19)),
    ("Taurus", (4, 20), (5, 20)),
    ("Gemini", (5, 21), (6, 20)),
    ("Cancer", (6, 21), (7, 22)),
    ("Leo", (7, 23), (8, 22)),
    ("Virgo", (8, 23), (9, 22)),
    ("Libra", (9, 23), (10, 22)),
    ("Scorpio", (10, 23), (11, 21)),
    ("Sagittarius", (11, 22), (12, 21)),
    ("Capricorn", (12, 22), (1, 19)),
    ("Aquarius", (1, 20), (2, 18)),
    ("Pisces", (2, 19), (3, 20)),
)


def normalize_degrees(degrees: float) -> float:
    """Fold any finite angle into [0, 360).

    Float modulo can return exactly 360.0 for tiny negative inputs
    (``-1e-20 % 360``), so that case is folded to 0.
    """
    if not math.isfinite(degrees):
        raise ComputationError(f"Non-finite longitude: {degrees!r}")
    folded = degrees % 360.0
    return 0.0 if folded >= 360.0 else folded


def sign_for_longitude(degrees: float) -> str:
    """Map a longitude in degrees to its sign.

    Each sign owns the closed-open interval [30k, 30k + 30).

    Raises:
        ComputationError: If ``degrees`` is NaN or infinite.
    """
    index = int(normalize_degrees(degrees) // _DEGREES_PER_SIGN) % len(ZODIAC_SIGNS)
    return ZODIAC_SIGNS[index]


def _in_range(month_day: tuple[int, int], start: tuple[int, int], end: tuple[int, int]) -> bool:
    if start <= end:
        return start <= month_day <= end
    return month_day >= start or month_day <= end


def compute_sun_sign(birth_date: date | datetime | str) -> str:
    """Return the Sun sign for a birth date using fixed season boundaries.

    The year is ignored; only (month, day) matters.

    Args:
        birth_date: A ``date``, ``datetime``, or ISO-8601 string.

    Returns:
        One of ``ZODIAC_SIGNS``.

    Raises:
        InvalidInputError: If the date cannot be parsed.
    """
    if isinstance(birth_date, str):
        parsed: date = parse_timestamp(birth_date)
    elif isinstance(birth_date, (date, datetime)):
        parsed = birth_date
    else:
        raise InvalidInputError(f"Unparseable birth date: {birth_date!r}")

    month_day = (parsed.month, parsed.day)
    for sign, start, end in SUN_SIGN_RANGES:
        if _in_range(month_day, start, end):
            return sign
    raise ComputationError(f"Date outside the sign table: {parsed!r}")
