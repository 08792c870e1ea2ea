"""Tests for SGP4 initialization against the reference sgp4 library."""

from __future__ import annotations

import dataclasses
import math

import pytest
# The pure-Python model exposes the intermediate terms (no_unkozai, isimp)
# that the compiled sgp4.api.Satrec keeps private.
from sgp4.model import WGS72 as SGP4_WGS72
from sgp4.model import Satrec

from orbprop.core.deep_space import DeepSpaceState
from orbprop.core.errors import DecayedOrbitError
from orbprop.core.propagation import propagate
from orbprop.core.sgp4_init import NearEarthState, Sgp4InitState, initialize
from orbprop.core.tle import OrbitalElements
from orbprop.utils.constants import JD_1950, WGS72, WGS84, XPDOTP

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182 -00100-2 -11606-4 0  2921"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

VANGUARD_LINE1 = "1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753"
VANGUARD_LINE2 = "2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667"

MOLNIYA_LINE1 = "1 08195U 75081A   06176.33215444  .00000099  00000-0  11873-3 0   813"
MOLNIYA_LINE2 = "2 08195  64.1586 279.0717 6877146 264.7651  20.2257  2.00491383225656"

REFERENCE_SETS = [
    (ISS_LINE1, ISS_LINE2),
    (VANGUARD_LINE1, VANGUARD_LINE2),
    (MOLNIYA_LINE1, MOLNIYA_LINE2),
]


@pytest.fixture
def iss() -> OrbitalElements:
    return OrbitalElements.from_lines(ISS_LINE1, ISS_LINE2)


def _reference(elements: OrbitalElements) -> Satrec:
    """Build a reference Satrec from the same elements via sgp4init."""
    jd, fraction = elements.epoch_julian
    sat = Satrec()
    sat.sgp4init(
        SGP4_WGS72,
        "i",
        elements.satellite_number,
        (jd - JD_1950) + fraction,
        elements.bstar,
        0.0,
        0.0,
        elements.eccentricity,
        elements.argument_of_perigee,
        elements.inclination,
        elements.mean_anomaly,
        elements.mean_motion / XPDOTP,
        elements.raan,
    )
    return sat


@pytest.mark.parametrize("line1, line2", REFERENCE_SETS)
def test_brouwer_recovery_matches_sgp4(line1: str, line2: str) -> None:
    state = initialize(OrbitalElements.from_lines(line1, line2), WGS72)
    sat = Satrec.twoline2rv(line1, line2, SGP4_WGS72)
    assert state.n0 == pytest.approx(sat.no_unkozai, rel=1e-11)
    assert state.a0 == pytest.approx(sat.a, rel=1e-11)


@pytest.mark.parametrize("line1, line2", REFERENCE_SETS)
def test_secular_rates_match_sgp4(line1: str, line2: str) -> None:
    state = initialize(OrbitalElements.from_lines(line1, line2), WGS72)
    sat = Satrec.twoline2rv(line1, line2, SGP4_WGS72)
    assert state.mdot == pytest.approx(sat.mdot, rel=1e-11)
    assert state.argpdot == pytest.approx(sat.argpdot, rel=1e-10)
    assert state.nodedot == pytest.approx(sat.nodedot, rel=1e-10)


@pytest.mark.parametrize("line1, line2", REFERENCE_SETS)
def test_regime_matches_sgp4(line1: str, line2: str) -> None:
    state = initialize(OrbitalElements.from_lines(line1, line2), WGS72)
    sat = Satrec.twoline2rv(line1, line2, SGP4_WGS72)
    assert state.deep_space == (sat.method == "d")
    if not state.deep_space:
        assert state.simplified == bool(sat.isimp)


def test_iss_is_full_near_earth(iss: OrbitalElements) -> None:
    state = initialize(iss, WGS72)
    assert isinstance(state, Sgp4InitState)
    assert isinstance(state.regime, NearEarthState)
    assert not state.deep_space
    assert not state.simplified
    assert state.d2 != 0.0
    assert state.period_minutes < 225.0
    assert 6600.0 < state.semi_major_axis_km < 6800.0


def test_deep_space_selected_by_period() -> None:
    state = initialize(OrbitalElements.from_lines(MOLNIYA_LINE1, MOLNIYA_LINE2), WGS72)
    assert isinstance(state.regime, DeepSpaceState)
    assert state.deep_space
    assert state.simplified
    assert state.period_minutes >= 225.0
    assert state.d2 == 0.0


def test_default_density_parameter(iss: OrbitalElements) -> None:
    state = initialize(iss, WGS72)
    assert state.perigee_height_km >= 156.0
    assert state.s == pytest.approx(1.0 + 78.0 / WGS72.radius_earth_km)


def test_low_perigee_density_parameter(iss: OrbitalElements) -> None:
    elements = dataclasses.replace(iss, mean_motion=16.547, eccentricity=0.0001)
    state = initialize(elements, WGS72)
    assert 98.0 <= state.perigee_height_km < 156.0
    expected = 1.0 + (state.perigee_height_km - 78.0) / WGS72.radius_earth_km
    assert state.s == pytest.approx(expected, rel=1e-11)
    assert state.simplified


def test_very_low_perigee_density_parameter(iss: OrbitalElements) -> None:
    elements = dataclasses.replace(iss, mean_motion=16.728, eccentricity=0.0001)
    state = initialize(elements, WGS72)
    assert 0.0 < state.perigee_height_km < 98.0
    assert state.s == pytest.approx(1.0 + 20.0 / WGS72.radius_earth_km, rel=1e-11)
    assert state.simplified


@pytest.mark.parametrize("mean_motion", [16.547, 16.728, 15.2])
def test_synthetic_elements_match_sgp4init(iss: OrbitalElements, mean_motion: float) -> None:
    elements = dataclasses.replace(iss, mean_motion=mean_motion, eccentricity=0.0001)
    state = initialize(elements, WGS72)
    sat = _reference(elements)
    assert state.n0 == pytest.approx(sat.no_unkozai, rel=1e-11)
    assert state.simplified == bool(sat.isimp)


def test_perigee_below_surface_decays_at_epoch(iss: OrbitalElements) -> None:
    elements = dataclasses.replace(iss, eccentricity=0.5)
    state = initialize(elements, WGS72)
    assert state.perigee_height_km < 0.0
    with pytest.raises(DecayedOrbitError, match="below the surface") as excinfo:
        propagate(state, 0.0)
    assert excinfo.value.code == 6
    assert excinfo.value.minutes_since_epoch == 0.0


def test_gravity_model_changes_state(iss: OrbitalElements) -> None:
    wgs72 = initialize(iss, WGS72)
    wgs84 = initialize(iss, WGS84)
    assert wgs72.a0 != wgs84.a0
    assert wgs84.constants is WGS84
    assert math.isclose(wgs72.n0, wgs84.n0, rel_tol=1e-4)


def test_state_is_immutable(iss: OrbitalElements) -> None:
    state = initialize(iss, WGS72)
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.n0 = 0.0  # type: ignore[misc]
