"""Tests for gravity models and time conversions."""

import dataclasses
from datetime import datetime, timezone

import pytest
from sgp4.api import WGS72 as SGP4_WGS72
from sgp4.api import Satrec
from sgp4.propagation import gstime as reference_gstime

from orbprop.utils.constants import (
    GRAVITY_MODELS,
    TWO_PI,
    WGS72,
    WGS72OLD,
    WGS84,
    XPDOTP,
    gravity_model,
)
from orbprop.utils.timescales import (
    datetime_to_julian,
    epoch_to_datetime,
    epoch_to_julian,
    full_year,
    gstime,
)

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182 -00100-2 -11606-4 0  2921"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"


class TestGravityModels:
    def test_wgs72_values(self) -> None:
        assert WGS72.mu == 398600.8
        assert WGS72.radius_earth_km == 6378.135
        assert WGS72.j2 == 0.001082616
        assert WGS72.j3 == -0.00000253881
        assert WGS72.j4 == -0.00000165597
        assert WGS72.xke == pytest.approx(0.07436691613317, rel=1e-12)

    def test_xke_consistent_with_mu(self) -> None:
        for model in (WGS72, WGS84):
            expected = 60.0 / (model.radius_earth_km ** 3 / model.mu) ** 0.5
            assert model.xke == pytest.approx(expected, rel=1e-10)
            assert model.tumin == pytest.approx(1.0 / model.xke, rel=1e-10)

    def test_j3oj2(self) -> None:
        assert WGS72.j3oj2 == pytest.approx(WGS72.j3 / WGS72.j2)
        assert WGS72.j3oj2 < 0

    def test_lookup(self) -> None:
        assert gravity_model("wgs72") is WGS72
        assert gravity_model("WGS-84") is WGS84
        assert gravity_model(" wgs72old ") is WGS72OLD
        assert set(GRAVITY_MODELS) == {"wgs72old", "wgs72", "wgs84"}

    def test_unknown_model(self) -> None:
        with pytest.raises(ValueError, match="Unknown gravity model"):
            gravity_model("egm96")

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            WGS72.mu = 1.0  # type: ignore[misc]

    def test_xpdotp(self) -> None:
        assert XPDOTP == pytest.approx(229.1831180523293, rel=1e-13)


class TestTimescales:
    def test_full_year(self) -> None:
        assert full_year(57) == 1957
        assert full_year(99) == 1999
        assert full_year(0) == 2000
        assert full_year(56) == 2056

    def test_epoch_to_datetime(self) -> None:
        dt = epoch_to_datetime(2008, 1.5)
        assert dt == datetime(2008, 1, 1, 12, tzinfo=timezone.utc)

    def test_epoch_to_julian_matches_sgp4(self) -> None:
        sat = Satrec.twoline2rv(ISS_LINE1, ISS_LINE2, SGP4_WGS72)
        jd, fraction = epoch_to_julian(2008, 264.51782528)
        assert jd % 1.0 == pytest.approx(0.5)
        assert 0.0 <= fraction < 1.0
        assert jd + fraction == pytest.approx(sat.jdsatepoch + sat.jdsatepochF, abs=1e-8)

    def test_j2000(self) -> None:
        jd, fraction = datetime_to_julian(datetime(2000, 1, 1, 12, tzinfo=timezone.utc))
        assert jd + fraction == pytest.approx(2451545.0)

    def test_naive_datetime_is_utc(self) -> None:
        naive = datetime_to_julian(datetime(2020, 6, 1, 3, 30))
        aware = datetime_to_julian(datetime(2020, 6, 1, 3, 30, tzinfo=timezone.utc))
        assert sum(naive) == pytest.approx(sum(aware))

    @pytest.mark.parametrize("jd", [2433281.5, 2451545.0, 2454730.01782528, 2460000.25])
    def test_gstime_matches_sgp4(self, jd: float) -> None:
        value = gstime(jd)
        assert 0.0 <= value < TWO_PI
        assert value == pytest.approx(reference_gstime(jd), abs=1e-9)
