"""Gravity models and fixed constants for SGP4/SDP4.

Distances are in km (or Earth radii where noted), times in minutes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class WgsConstants:
    """Geopotential constants of one World Geodetic System realization.

    Attributes:
        name: Preset name, e.g. ``"wgs72"``.
        mu: Earth gravitational parameter in km³/s².
        radius_earth_km: Equatorial radius in km.
        j2: Second zonal harmonic (un-normalized).
        j3: Third zonal harmonic.
        j4: Fourth zonal harmonic.
        xke: sqrt(mu) in Earth radii^1.5 per minute.
        tumin: Minutes per canonical time unit (1 / xke).
    """

    name: str
    mu: float
    radius_earth_km: float
    j2: float
    j3: float
    j4: float
    xke: float
    tumin: float

    @property
    def j3oj2(self) -> float:
        """Ratio j3 / j2 used by the long-period periodics."""
        return self.j3 / self.j2


WGS72OLD = WgsConstants(
    name="wgs72old",
    mu=398600.79964,
    radius_earth_km=6378.135,
    j2=0.001082616,
    j3=-0.00000253881,
    j4=-0.00000165597,
    xke=0.0743669161,
    tumin=1.0 / 0.0743669161,
)
"""Legacy AFSPC constants, kept for reproducing old element sets."""

WGS72 = WgsConstants(
    name="wgs72",
    mu=398600.8,
    radius_earth_km=6378.135,
    j2=0.001082616,
    j3=-0.00000253881,
    j4=-0.00000165597,
    xke=0.07436691613317,
    tumin=13.44683969695931,
)
"""WGS-72, the model NORAD element sets are fitted with."""

WGS84 = WgsConstants(
    name="wgs84",
    mu=398600.5,
    radius_earth_km=6378.137,
    j2=0.00108262998905,
    j3=-0.00000253215306,
    j4=-0.00000161098761,
    xke=0.07436685316871,
    tumin=13.44685108204498,
)
"""WGS-84 as used by SGP4 (mu consistent with xke)."""

GRAVITY_MODELS: dict[str, WgsConstants] = {
    model.name: model for model in (WGS72OLD, WGS72, WGS84)
}
"""Presets by name."""


def gravity_model(name: str) -> WgsConstants:
    """Look up a gravity model preset by name (case-insensitive).

    Raises:
        ValueError: If ``name`` is not a known preset.
    """
    try:
        return GRAVITY_MODELS[name.strip().lower().replace("-", "")]
    except KeyError:
        known = ", ".join(sorted(GRAVITY_MODELS))
        raise ValueError(f"Unknown gravity model {name!r} (expected one of {known})") from None


# --- Time and angle ---
TWO_PI: float = 2.0 * math.pi
"""Full revolution in radians."""

MINUTES_PER_DAY: float = 1440.0
"""Minutes in a day."""

XPDOTP: float = MINUTES_PER_DAY / TWO_PI
"""Divisor converting rev/day to rad/min (229.1831180523293)."""

EARTH_ROTATION_RAD_MIN: float = 4.37526908801129966e-3
"""Earth rotation rate relative to the mean equinox in rad/min (rptim)."""

# --- Epochs ---
JD_1950: float = 2433281.5
"""Julian date of 1949 Dec 31 00:00 UT (day 0.0 of 1950)."""

LUNAR_SOLAR_EPOCH_JD: float = 2415020.0
"""Julian date of 1899 Dec 31 12:00 UT, origin of the lunar/solar theory."""

# --- Regime boundaries ---
DEEP_SPACE_PERIOD_MIN: float = 225.0
"""Orbital period in minutes at or above which deep-space terms apply."""

SIMPLIFIED_DRAG_PERIGEE_KM: float = 220.0
"""Perigee height in km below which the truncated drag model is used."""

DENSITY_S_PARAM_KM: float = 78.0
"""Default height of the density function parameter s above the surface in km."""

DENSITY_Q0_KM: float = 120.0
"""Reference height q0 of the atmospheric density function in km."""
