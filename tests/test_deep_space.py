"""Tests for deep-space (SDP4) propagation."""

from __future__ import annotations

import math

import numpy as np
import pytest
from sgp4.api import WGS72 as SGP4_WGS72
from sgp4.api import Satrec

from orbprop.core.deep_space import (
    DeepSpaceState,
    HalfDayResonance,
    Resonance,
    SynchronousResonance,
)
from orbprop.core.errors import DecayedOrbitError, PropagationError
from orbprop.core.propagation import propagate
from orbprop.core.sgp4_init import Sgp4InitState, initialize
from orbprop.core.tle import OrbitalElements
from orbprop.utils.constants import WGS72

# Geosynchronous, low inclination (ITALSAT 2)
GEO_LINE1 = "1 24208U 96044A   06177.04061740 -.00000094  00000-0  10000-3 0  1600"
GEO_LINE2 = "2 24208   3.8536  80.0121 0026640 311.0977  48.3000  1.00778054 36119"

# Molniya, 12-hour resonance
MOLNIYA_LINE1 = "1 08195U 75081A   06176.33215444  .00000099  00000-0  11873-3 0   813"
MOLNIYA_LINE2 = "2 08195  64.1586 279.0717 6877146 264.7651  20.2257  2.00491383225656"

MOLNIYA2_LINE1 = "1 09880U 77021A   06176.56157475  .00000421  00000-0  10000-3 0   837"
MOLNIYA2_LINE2 = "2 09880  64.5968 349.3786 7069051 270.0229  16.3320  2.00813614112380"

# Deep space, no resonance
ELLIPTIC_LINE1 = "1 04965U 69046F   06175.83186726  .00000094  00000-0  10000-3 0  4711"
ELLIPTIC_LINE2 = "2 04965  32.9048 138.7680 6088834 148.5862 269.3268  2.47283741134637"

DEEP_SPACE_SETS = [
    (GEO_LINE1, GEO_LINE2),
    (MOLNIYA_LINE1, MOLNIYA_LINE2),
    (MOLNIYA2_LINE1, MOLNIYA2_LINE2),
    (ELLIPTIC_LINE1, ELLIPTIC_LINE2),
]
TIMES = [0.0, 360.0, 1440.0, 10000.0, -720.0]


def _state(line1: str, line2: str) -> Sgp4InitState:
    return initialize(OrbitalElements.from_lines(line1, line2), WGS72)


def _regime(state: Sgp4InitState) -> DeepSpaceState:
    assert isinstance(state.regime, DeepSpaceState)
    return state.regime


class TestResonanceClassification:
    def test_geosynchronous(self) -> None:
        regime = _regime(_state(GEO_LINE1, GEO_LINE2))
        assert isinstance(regime.resonance, SynchronousResonance)
        assert regime.resonance_kind is Resonance.SYNCHRONOUS

    def test_half_day(self) -> None:
        regime = _regime(_state(MOLNIYA_LINE1, MOLNIYA_LINE2))
        assert isinstance(regime.resonance, HalfDayResonance)
        assert regime.resonance_kind is Resonance.HALF_DAY

    def test_non_resonant(self) -> None:
        regime = _regime(_state(ELLIPTIC_LINE1, ELLIPTIC_LINE2))
        assert regime.resonance is None
        assert regime.resonance_kind is Resonance.NONE

    def test_gsto_matches_sgp4(self) -> None:
        regime = _regime(_state(GEO_LINE1, GEO_LINE2))
        sat = Satrec.twoline2rv(GEO_LINE1, GEO_LINE2, SGP4_WGS72)
        assert regime.gsto == pytest.approx(sat.gsto, abs=1e-9)


@pytest.mark.parametrize("line1, line2", DEEP_SPACE_SETS)
def test_matches_sgp4(line1: str, line2: str) -> None:
    state = _state(line1, line2)
    sat = Satrec.twoline2rv(line1, line2, SGP4_WGS72)
    for t in TIMES:
        error, r_ref, v_ref = sat.sgp4_tsince(t)
        assert error == 0
        result = propagate(state, t)
        np.testing.assert_allclose(result.position_km, r_ref, atol=1e-3)
        np.testing.assert_allclose(result.velocity_km_s, v_ref, atol=1e-6)


@pytest.mark.parametrize("line1, line2", DEEP_SPACE_SETS[:3])
def test_resonance_independent_of_call_order(line1: str, line2: str) -> None:
    state = _state(line1, line2)
    forward = [propagate(state, t) for t in (720.0, 5000.0, 20000.0)]
    backward = [propagate(state, t) for t in (20000.0, 5000.0, 720.0)][::-1]
    for a, b in zip(forward, backward):
        assert np.array_equal(a.position_km, b.position_km)
        assert np.array_equal(a.velocity_km_s, b.velocity_km_s)


def test_geosynchronous_radius_stays_near_geo() -> None:
    state = _state(GEO_LINE1, GEO_LINE2)
    for t in np.linspace(0.0, 30 * 1440.0, 31):
        radius = np.linalg.norm(propagate(state, float(t)).position_km)
        assert 41800.0 < radius < 42600.0


def test_molniya_apogee_and_perigee() -> None:
    state = _state(MOLNIYA_LINE1, MOLNIYA_LINE2)
    radii = [
        np.linalg.norm(propagate(state, float(t)).position_km)
        for t in np.linspace(0.0, 720.0, 241)
    ]
    assert min(radii) < 10000.0
    assert max(radii) > 40000.0


@pytest.mark.parametrize("minutes", [math.inf, -math.inf, math.nan])
def test_non_finite_time_rejected(minutes: float) -> None:
    state = _state(GEO_LINE1, GEO_LINE2)
    with pytest.raises(PropagationError, match="not finite") as excinfo:
        propagate(state, minutes)
    assert not isinstance(excinfo.value, DecayedOrbitError)


def test_large_finite_time_returns() -> None:
    # About two years of 720-minute resonance steps
    result = propagate(_state(GEO_LINE1, GEO_LINE2), 1.0e6)
    assert np.all(np.isfinite(result.position_km))
