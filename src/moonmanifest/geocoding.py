"""Location resolver — Nominatim (OpenStreetMap) lookup of a city/region/country triple."""

from functools import lru_cache

import httpx
import structlog

from moonmanifest import config
from moonmanifest.errors import InvalidInputError, LookupFailedError, NotFoundError
from moonmanifest.geo import validate_coordinate
from moonmanifest.models import GeoCoordinate, LocationQuery

_log = structlog.get_logger(__name__)


def _geocode_nominatim(address: str) -> GeoCoordinate | None:
    """Single Nominatim search. Returns None when the result list is empty."""
    params = {"q": address, "format": "json", "limit": 1}
    headers = {"User-Agent": config.user_agent()}
    try:
        resp = httpx.get(
            config.nominatim_url(),
            params=params,
            headers=headers,
            timeout=config.geocode_timeout(),
        )
        resp.raise_for_status()
        results = resp.json()
    except httpx.HTTPError as exc:
        _log.warning("geocode_failed", address=address, error=str(exc))
        raise LookupFailedError(f"Geocoding request failed: {exc}") from exc
    except ValueError as exc:
        raise LookupFailedError("Geocoder returned a non-JSON body") from exc

    if not isinstance(results, list):
        raise LookupFailedError(f"Unexpected geocoder payload: {type(results).__name__}")
    if not results:
        return None
    first = results[0]
    try:
        coordinate = GeoCoordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise LookupFailedError(f"Malformed geocoder result: {first!r}") from exc
    try:
        return validate_coordinate(coordinate)
    except InvalidInputError as exc:
        raise LookupFailedError(f"Geocoder returned an invalid coordinate: {coordinate}") from exc


def _check_query(query: LocationQuery) -> None:
    for field in ("city", "region", "country"):
        value = getattr(query, field)
        if not isinstance(value, str) or not value.strip():
            raise InvalidInputError(f"Location {field} must not be empty")


def resolve_coordinates(query: LocationQuery) -> GeoCoordinate:
    """Resolve a place triple to coordinates using the first Nominatim result.

    Every call queries the service; see ``resolve_coordinates_cached``.

    Args:
        query: City, region and country display names (not codes).

    Returns:
        The highest-ranked GeoCoordinate.

    Raises:
        InvalidInputError: If any field is empty. Raised before any network call.
        NotFoundError: If the geocoder returns no results.
        LookupFailedError: On transport, HTTP status, or payload errors.
    """
    _check_query(query)
    address = query.text()
    _log.debug("geocode_request", address=address)
    coordinate = _geocode_nominatim(address)
    if coordinate is None:
        raise NotFoundError("No results found for the given location")
    _log.info(
        "geocode_resolved",
        address=address,
        lat=coordinate.latitude,
        lng=coordinate.longitude,
    )
    return coordinate


@lru_cache(maxsize=512)
def _resolve_text(city: str, region: str, country: str) -> GeoCoordinate:
    return resolve_coordinates(LocationQuery(city=city, region=region, country=country))


def resolve_coordinates_cached(query: LocationQuery) -> GeoCoordinate:
    """Memoized ``resolve_coordinates``, keyed on the stripped query text.

    Only successful lookups are cached; failures propagate and are retried
    on the next call.
    """
    _check_query(query)
    return _resolve_text(query.city.strip(), query.region.strip(), query.country.strip())


def clear_cache() -> None:
    _resolve_text.cache_clear()
