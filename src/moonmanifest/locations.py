"""Country / region / city reference data.

Countries and regions come from ISO 3166 (pycountry); cities from the
GeoNames dump bundled with geonamescache. Tables are built once on first
use and never mutated.
"""

from functools import lru_cache

import geonamescache
import pycountry

from moonmanifest.errors import InvalidInputError
from moonmanifest.models import LocationData

POPULAR_COUNTRY_CODES: frozenset[str] = frozenset({"US", "GB", "CA", "AU", "NZ"})


def _by_name(entry: LocationData) -> tuple[str, str]:
    return entry.name.casefold(), entry.name


@lru_cache(maxsize=1)
def _ordered_countries() -> tuple[LocationData, ...]:
    countries = [LocationData(name=c.name, code=c.alpha_2) for c in pycountry.countries]
    popular = sorted((c for c in countries if c.code in POPULAR_COUNTRY_CODES), key=_by_name)
    others = sorted((c for c in countries if c.code not in POPULAR_COUNTRY_CODES), key=_by_name)
    return tuple(popular + others)


@lru_cache(maxsize=1)
def _cities_by_country() -> dict[str, tuple[tuple[str, str], ...]]:
    """Map country code → ((admin1 code, city name), ...) from the GeoNames dump."""
    grouped: dict[str, list[tuple[str, str]]] = {}
    for city in geonamescache.GeonamesCache().get_cities().values():
        grouped.setdefault(city["countrycode"], []).append(
            (str(city.get("admin1code") or ""), city["name"])
        )
    return {code: tuple(rows) for code, rows in grouped.items()}


def _require_country(country_code: str) -> str:
    code = (country_code or "").strip().upper()
    if not code or pycountry.countries.get(alpha_2=code) is None:
        raise InvalidInputError(f"Unknown country code: {country_code!r}")
    return code


def list_countries() -> tuple[LocationData, ...]:
    """Return all countries: the popular subset first, then the rest, each alphabetical."""
    return _ordered_countries()


@lru_cache(maxsize=None)
def list_regions(country_code: str) -> tuple[LocationData, ...]:
    """Return the top-level subdivisions of a country, sorted by name.

    Region codes are the ISO 3166-2 suffix ("US-CA" → "CA"). A country with
    no subdivisions yields an empty tuple.

    Raises:
        InvalidInputError: If the country code is unknown.
    """
    code = _require_country(country_code)
    subdivisions = pycountry.subdivisions.get(country_code=code) or []
    regions = [
        LocationData(name=sub.name, code=sub.code.split("-", 1)[1])
        for sub in subdivisions
        if getattr(sub, "parent_code", None) is None
    ]
    return tuple(sorted(regions, key=_by_name))


def list_cities(country_code: str, region_code: str) -> tuple[LocationData, ...]:
    """Return the cities of a region, sorted and de-duplicated by name.

    GeoNames keys cities by its own admin1 codes, which equal the ISO suffix
    for some countries (US, GB) but not for others (CA, AU). When the region
    code is empty or not one of the country's GeoNames admin1 codes, every
    city of the country is returned instead.

    Raises:
        InvalidInputError: If the country code is unknown.
    """
    code = _require_country(country_code)
    rows = _cities_by_country().get(code, ())
    region = (region_code or "").strip().upper()
    admin_codes = {admin for admin, _ in rows}
    if region and region in admin_codes:
        names = {name for admin, name in rows if admin == region}
    else:
        names = {name for _, name in rows}
    return tuple(sorted((LocationData(name=n, code=n) for n in names), key=_by_name))


def get_country_code_by_name(country_name: str) -> str | None:
    """First country in ``list_countries()`` order whose name matches exactly."""
    for country in list_countries():
        if country.name == country_name:
            return country.code
    return None


def get_country_name(country_code: str) -> str | None:
    country = pycountry.countries.get(alpha_2=(country_code or "").strip().upper())
    return country.name if country is not None else None


def get_region_code_by_name(region_name: str, country_code: str) -> str | None:
    for region in list_regions(country_code):
        if region.name == region_name:
            return region.code
    return None


def suggest(entries: tuple[LocationData, ...], text: str, limit: int = 10) -> list[str]:
    """Case-insensitive name matching for autocomplete: prefix hits before substring hits."""
    needle = (text or "").strip().casefold()
    if not needle:
        return []
    prefix: list[str] = []
    inner: list[str] = []
    for entry in entries:
        name = entry.name.casefold()
        if name.startswith(needle):
            prefix.append(entry.name)
        elif needle in name:
            inner.append(entry.name)
    return (prefix + inner)[:limit]
