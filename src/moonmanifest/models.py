"""Data model definitions — explicit boundaries between input, lookup, and compute layers."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class GeoCoordinate:
    """A point on the globe. Range-checked by ``geo.validate_coordinate``."""

    latitude: float  # Decimal degrees, positive north
    longitude: float  # Decimal degrees, positive east


@dataclass(frozen=True)
class BirthMoment:
    """Instant and place of birth. Input to sign computation."""

    date: datetime  # Naive values are read as UTC
    location: GeoCoordinate


@dataclass(frozen=True)
class LocationQuery:
    """Free-text place triple resolved by the geocoder."""

    city: str
    region: str
    country: str

    def text(self) -> str:
        return f"{self.city.strip()}, {self.region.strip()}, {self.country.strip()}"


@dataclass(frozen=True)
class LocationData:
    """One entry of the country/region/city reference dataset."""

    name: str  # Display name ("United States", "California", "San Diego")
    code: str  # ISO code for countries/regions; the name itself for cities


@dataclass(frozen=True)
class BirthQuery:
    """Raw sign-up form input. Not yet validated."""

    birth_date: str  # "YYYY-MM-DD"
    city: str
    region: str
    country: str
    birth_time: str | None = None  # Local "HH:MM", optional


@dataclass(frozen=True)
class SignProfile:
    """Result of the sign pipeline. Handed to the account store."""

    query: BirthQuery
    moment: BirthMoment  # UTC instant + resolved coordinate
    sun_sign: str
    moon_sign: str

    def to_record(self) -> dict[str, str | float | None]:
        """Flatten into the column names used by the account store."""
        return {
            "birth_date": self.query.birth_date,
            "birth_time": self.query.birth_time,
            "birth_city": self.query.city,
            "birth_region": self.query.region,
            "birth_country": self.query.country,
            "birth_latitude": self.moment.location.latitude,
            "birth_longitude": self.moment.location.longitude,
            "sun_sign": self.sun_sign,
            "moon_sign": self.moon_sign,
        }
