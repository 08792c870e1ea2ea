"""Integration test: parse → initialize → propagate end-to-end."""
from __future__ import annotations

from datetime import timedelta

import numpy as np
import pytest

import orbprop
from orbprop import OrbitalElements, initialize, parse_tle, propagate, propagate_batch

# Hardcoded real TLEs (no network calls)
CATALOG_TEXT = """\
ISS (ZARYA)
1 25544U 98067A   08264.51782528 -.00002182 -00100-2 -11606-4 0  2921
2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537
VANGUARD 1
1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753
2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667
MOLNIYA 1-29
1 08195U 75081A   06176.33215444  .00000099  00000-0  11873-3 0   813
2 08195  64.1586 279.0717 6877146 264.7651  20.2257  2.00491383225656
ITALSAT 2
1 24208U 96044A   06177.04061740 -.00000094  00000-0  10000-3 0  1600
2 24208   3.8536  80.0121 0026640 311.0977  48.3000  1.00778054 36119
"""


@pytest.fixture
def catalog() -> list[OrbitalElements]:
    tles = parse_tle(CATALOG_TEXT)
    assert len(tles) == 4
    return tles


def test_full_pipeline(catalog: list[OrbitalElements]) -> None:
    """Every object in a mixed catalog propagates a day without error."""
    for tle in catalog:
        state = initialize(tle, orbprop.WGS72)
        for minutes in np.linspace(0.0, 1440.0, 25):
            result = propagate(state, float(minutes))
            radius = np.linalg.norm(result.position_km)
            assert np.all(np.isfinite(result.position_km))
            assert radius > orbprop.WGS72.radius_earth_km


def test_iss_stays_in_leo(catalog: list[OrbitalElements]) -> None:
    iss = catalog[0]
    assert iss.name == "ISS (ZARYA)"
    state = initialize(iss, orbprop.WGS72)
    for minutes in range(0, 1441, 10):
        altitude = np.linalg.norm(propagate(state, float(minutes)).position_km) - 6378.135
        assert 300.0 < altitude < 420.0


def test_regimes_in_catalog(catalog: list[OrbitalElements]) -> None:
    states = [initialize(tle, orbprop.WGS72) for tle in catalog]
    assert [s.deep_space for s in states] == [False, False, True, True]
    assert states[2].regime.resonance_kind is orbprop.Resonance.HALF_DAY
    assert states[3].regime.resonance_kind is orbprop.Resonance.SYNCHRONOUS


def test_batch_over_catalog(catalog: list[OrbitalElements]) -> None:
    deep = catalog[2:]
    states = [initialize(tle, orbprop.gravity_model("wgs72")) for tle in deep]
    when = deep[1].epoch + timedelta(hours=6)
    vectors, valid = propagate_batch(states, when)
    assert vectors.shape == (2, 6)
    assert np.all(valid)
    assert np.all(np.isfinite(vectors))


def test_public_api_exports() -> None:
    for name in orbprop.__all__:
        assert hasattr(orbprop, name)
    assert issubclass(orbprop.DecayedOrbitError, orbprop.Sgp4Error)
    assert issubclass(orbprop.MalformedTleError, ValueError)
