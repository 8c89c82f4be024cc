from datetime import datetime

import pytest
from pytz import utc
from skyfield.units import Angle

from moonmanifest.compute import (
    MoonEphemeris,
    SkyfieldEphemeris,
    birth_instant,
    compute_moon_sign,
    run,
)
from moonmanifest.errors import (
    ComputationError,
    InvalidInputError,
    LookupFailedError,
    NotFoundError,
)
from moonmanifest.models import BirthMoment, BirthQuery, GeoCoordinate, LocationQuery
from moonmanifest.zodiac import ZODIAC_SIGNS

NEW_YORK = GeoCoordinate(latitude=40.7128, longitude=-74.0060)


class FakeEphemeris:
    """Returns a fixed right ascension and records every call."""

    def __init__(self, ra_deg=0.0, error=None):
        self.ra_deg = ra_deg
        self.error = error
        self.calls = []

    def moon_right_ascension(self, when, coordinate):
        self.calls.append((when, coordinate))
        if self.error is not None:
            raise self.error
        return self.ra_deg


def _moment(date=datetime(2024, 3, 27, 12, tzinfo=utc), location=NEW_YORK):
    return BirthMoment(date=date, location=location)


@pytest.mark.parametrize("index", range(12))
def test_moon_sign_boundary_longitudes(index):
    eph = FakeEphemeris(ra_deg=30.0 * index)
    assert compute_moon_sign(_moment(), ephemeris=eph) == ZODIAC_SIGNS[index]


@pytest.mark.parametrize("ra", [5.0, 95.5, 200.0, 333.3])
def test_moon_sign_is_periodic(ra):
    base = compute_moon_sign(_moment(), ephemeris=FakeEphemeris(ra))
    assert compute_moon_sign(_moment(), ephemeris=FakeEphemeris(ra + 360.0)) == base
    assert compute_moon_sign(_moment(), ephemeris=FakeEphemeris(ra - 360.0)) == base


def test_moon_sign_passes_utc_instant_and_coordinate():
    eph = FakeEphemeris(ra_deg=100.0)
    compute_moon_sign(_moment(date=datetime(2024, 3, 27, 12)), ephemeris=eph)
    when, coordinate = eph.calls[0]
    assert when == datetime(2024, 3, 27, 12, tzinfo=utc)
    assert when.tzinfo is not None
    assert coordinate == NEW_YORK


def test_moon_sign_accepts_iso_string_date():
    eph = FakeEphemeris(ra_deg=100.0)
    assert compute_moon_sign(_moment(date="2024-03-27T12:00:00Z"), ephemeris=eph) == "Cancer"


def test_invalid_coordinate_never_reaches_ephemeris():
    eph = FakeEphemeris()
    bad = _moment(location=GeoCoordinate(latitude=91, longitude=181))
    with pytest.raises(InvalidInputError):
        compute_moon_sign(bad, ephemeris=eph)
    assert eph.calls == []


@pytest.mark.parametrize("bad", ["invalid", "", None])
def test_invalid_date_never_reaches_ephemeris(bad):
    eph = FakeEphemeris()
    with pytest.raises(InvalidInputError):
        compute_moon_sign(_moment(date=bad), ephemeris=eph)
    assert eph.calls == []


def test_ephemeris_failure_becomes_computation_error():
    eph = FakeEphemeris(error=RuntimeError("kernel exploded"))
    with pytest.raises(ComputationError) as info:
        compute_moon_sign(_moment(), ephemeris=eph)
    assert isinstance(info.value.__cause__, RuntimeError)


def test_ephemeris_load_failure_keeps_its_kind():
    eph = FakeEphemeris(error=LookupFailedError("offline"))
    with pytest.raises(LookupFailedError):
        compute_moon_sign(_moment(), ephemeris=eph)


@pytest.mark.parametrize("ra", [float("nan"), float("inf"), "north", None])
def test_non_numeric_angle_becomes_computation_error(ra):
    with pytest.raises(ComputationError):
        compute_moon_sign(_moment(), ephemeris=FakeEphemeris(ra_deg=ra))


class _Apparent:
    def __init__(self, sky):
        self.sky = sky

    def radec(self, epoch=None):
        self.sky.epochs.append(epoch)
        return Angle(hours=self.sky.ra_hours), Angle(degrees=-13.0), None


class _Astrometric:
    """Observed but not yet apparent: no ``radec`` until ``apparent()``."""

    def __init__(self, sky):
        self.sky = sky

    def apparent(self):
        return _Apparent(self.sky)


class _Observer:
    def __init__(self, sky, topos):
        self.sky = sky
        self.topos = topos

    def at(self, t):
        self.sky.times.append(t)
        return self

    def observe(self, body):
        self.sky.bodies.append(body)
        return _Astrometric(self.sky)


class _Earth:
    def __init__(self, sky):
        self.sky = sky

    def __add__(self, topos):
        self.sky.topos.append(topos)
        return _Observer(self.sky, topos)


class FakeSky:
    """Stands in for the loaded kernel and timescale of ``SkyfieldEphemeris``."""

    def __init__(self, ra_hours):
        self.ra_hours = ra_hours
        self.kernel = {"earth": _Earth(self), "moon": "moon"}
        self.epochs = []
        self.times = []
        self.bodies = []
        self.topos = []

    def from_datetime(self, when):
        return ("tt", when)


def _loaded_ephemeris(monkeypatch, tmp_path, sky):
    eph = SkyfieldEphemeris(data_dir=tmp_path)
    monkeypatch.setattr(eph, "_eph", sky.kernel)
    monkeypatch.setattr(eph, "_ts", sky)
    return eph


def test_skyfield_right_ascension_is_apparent_of_date_in_degrees(monkeypatch, tmp_path):
    sky = FakeSky(ra_hours=13.9)
    eph = _loaded_ephemeris(monkeypatch, tmp_path, sky)
    when = datetime(2024, 3, 27, 12, tzinfo=utc)

    ra = eph.moon_right_ascension(when, NEW_YORK)

    assert ra == pytest.approx(208.5)
    assert sky.epochs == ["date"]
    assert sky.times == [("tt", when)]
    assert sky.bodies == ["moon"]
    topos = sky.topos[0]
    assert topos.latitude.degrees == pytest.approx(40.7128)
    assert topos.longitude.degrees == pytest.approx(-74.0060)
    assert topos.elevation.m == pytest.approx(0.0)


def test_skyfield_ephemeris_feeds_moon_sign(monkeypatch, tmp_path):
    eph = _loaded_ephemeris(monkeypatch, tmp_path, FakeSky(ra_hours=13.9))
    assert compute_moon_sign(_moment(), ephemeris=eph) == "Libra"
    eph = _loaded_ephemeris(monkeypatch, tmp_path, FakeSky(ra_hours=14.1))
    assert compute_moon_sign(_moment(), ephemeris=eph) == "Scorpio"


def test_ephemerides_satisfy_the_protocol(tmp_path):
    assert isinstance(SkyfieldEphemeris(data_dir=tmp_path), MoonEphemeris)
    assert isinstance(FakeEphemeris(), MoonEphemeris)
    assert not isinstance(object(), MoonEphemeris)


def test_skyfield_ephemeris_accepts_path_or_str_data_dir(tmp_path):
    for data_dir in (tmp_path, str(tmp_path)):
        eph = SkyfieldEphemeris(data_dir=data_dir)
        assert eph._loader.directory == str(tmp_path)


def test_birth_instant_without_time_is_midnight_utc():
    query = BirthQuery(birth_date="1990-07-04", city="a", region="b", country="c")
    assert birth_instant(query, NEW_YORK) == datetime(1990, 7, 4, tzinfo=utc)


def test_birth_instant_with_time_uses_local_zone():
    query = BirthQuery(
        birth_date="1990-07-04", birth_time="06:30", city="a", region="b", country="c"
    )
    assert birth_instant(query, NEW_YORK) == datetime(1990, 7, 4, 10, 30, tzinfo=utc)


def test_birth_instant_rejects_bad_time():
    query = BirthQuery(
        birth_date="1990-07-04", birth_time="25:99", city="a", region="b", country="c"
    )
    with pytest.raises(InvalidInputError):
        birth_instant(query, NEW_YORK)


def test_run_builds_profile_and_record():
    seen = []

    def resolver(query: LocationQuery) -> GeoCoordinate:
        seen.append(query)
        return NEW_YORK

    query = BirthQuery(
        birth_date="1990-07-04",
        birth_time="06:30",
        city="New York",
        region="New York",
        country="United States",
    )
    profile = run(query, ephemeris=FakeEphemeris(ra_deg=200.0), resolver=resolver)

    assert seen == [LocationQuery(city="New York", region="New York", country="United States")]
    assert profile.sun_sign == "Cancer"
    assert profile.moon_sign == "Libra"
    assert profile.moment.date == datetime(1990, 7, 4, 10, 30, tzinfo=utc)
    assert profile.to_record() == {
        "birth_date": "1990-07-04",
        "birth_time": "06:30",
        "birth_city": "New York",
        "birth_region": "New York",
        "birth_country": "United States",
        "birth_latitude": 40.7128,
        "birth_longitude": -74.0060,
        "sun_sign": "Cancer",
        "moon_sign": "Libra",
    }


def test_run_propagates_resolver_errors():
    def resolver(query):
        raise NotFoundError("No results found for the given location")

    query = BirthQuery(birth_date="1990-07-04", city="x", region="y", country="z")
    eph = FakeEphemeris()
    with pytest.raises(NotFoundError):
        run(query, ephemeris=eph, resolver=resolver)
    assert eph.calls == []


def test_run_rejects_bad_date_before_geocoding():
    def resolver(query):
        raise AssertionError("resolver must not be called")

    query = BirthQuery(birth_date="1990-02-30", city="x", region="y", country="z")
    with pytest.raises(InvalidInputError):
        run(query, ephemeris=FakeEphemeris(), resolver=resolver)
