"""Orbital propagation via SGP4/SDP4."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

from orbprop.core.deep_space import DeepSpaceState, apply_periodics, apply_secular
from orbprop.core.errors import DecayedOrbitError, PropagationError
from orbprop.core.kepler import solve_kepler_equinoctial
from orbprop.core.sgp4_init import TEMP4, X2O3, NearEarthState, Sgp4InitState
from orbprop.utils.constants import MINUTES_PER_DAY, TWO_PI
from orbprop.utils.timescales import datetime_to_julian

logger = logging.getLogger(__name__)

MIN_MEAN_ECCENTRICITY = -0.001
"""Most negative drag-corrected eccentricity still treated as round-off."""
ECCENTRICITY_FLOOR = 1.0e-6


class MeanElements(NamedTuple):
    """Singly-averaged elements at the query time.

    Attributes:
        semi_major_axis_km: Mean semi-major axis in km.
        eccentricity: Mean eccentricity.
        inclination: Mean inclination in radians.
        raan: Mean RAAN in radians.
        argument_of_perigee: Mean argument of perigee in radians.
        mean_anomaly: Mean anomaly in radians, in [0, 2*pi).
        mean_motion: Mean motion in rad/min.
    """

    semi_major_axis_km: float
    eccentricity: float
    inclination: float
    raan: float
    argument_of_perigee: float
    mean_anomaly: float
    mean_motion: float


@dataclass(frozen=True)
class PropagationResult:
    """Output of one SGP4 evaluation.

    Attributes:
        position_km: [x, y, z] TEME position in km.
        velocity_km_s: [vx, vy, vz] TEME velocity in km/s.
        minutes_since_epoch: Query time.
        mean_elements: Mean elements the state was computed from.
        kepler_converged: False if Kepler's equation hit its iteration
            cap; the state is still returned from the last estimate.
    """

    position_km: NDArray[np.float64]  # shape (3,)
    velocity_km_s: NDArray[np.float64]  # shape (3,)
    minutes_since_epoch: float
    mean_elements: MeanElements
    kepler_converged: bool = True


@dataclass
class StateVector:
    """Position and velocity in TEME frame.

    Attributes:
        position_km: [x, y, z] position in km.
        velocity_km_s: [vx, vy, vz] velocity in km/s.
        epoch: Time of this state vector.
    """

    position_km: NDArray[np.float64]  # shape (3,)
    velocity_km_s: NDArray[np.float64]  # shape (3,)
    epoch: datetime


def propagate(state: Sgp4InitState, minutes_since_epoch: float) -> PropagationResult:
    """Evaluate SGP4 at a time offset from the element epoch.

    Pure function of its arguments; safe to call concurrently on a
    shared state.

    Args:
        state: Initialized model from :func:`orbprop.core.sgp4_init.initialize`.
        minutes_since_epoch: Time since epoch in minutes, may be negative.

    Returns:
        TEME position and velocity with the mean elements used.

    Raises:
        PropagationError: If the time offset is not a finite number.
        DecayedOrbitError: If the drag-corrected orbit is no longer a
            valid ellipse above the Earth's surface at that time.
    """
    t = float(minutes_since_epoch)
    if not math.isfinite(t):
        raise PropagationError(
            f"NORAD {state.elements.satellite_number}: time offset {t!r} min is not finite"
        )
    elements = state.elements
    constants = state.constants
    regime = state.regime
    xke = constants.xke
    bstar = elements.bstar

    # --- Secular gravity and atmospheric drag ---
    xmdf = elements.mean_anomaly + state.mdot * t
    argpdf = elements.argument_of_perigee + state.argpdot * t
    nodedf = elements.raan + state.nodedot * t
    argpm = argpdf
    mm = xmdf
    t2 = t * t
    nodem = nodedf + state.nodecf * t2
    tempa = 1.0 - state.c1 * t
    tempe = bstar * state.c4 * t
    templ = state.t2cof * t2

    if isinstance(regime, NearEarthState) and not regime.simplified:
        delomg = regime.omgcof * t
        delmtemp = 1.0 + state.eta * math.cos(xmdf)
        delm = regime.xmcof * (delmtemp * delmtemp * delmtemp - regime.delmo)
        temp = delomg + delm
        mm = xmdf + temp
        argpm = argpdf - temp
        t3 = t2 * t
        t4 = t3 * t
        tempa = tempa - regime.d2 * t2 - regime.d3 * t3 - regime.d4 * t4
        tempe = tempe + bstar * state.c5 * (math.sin(mm) - regime.sinmao)
        templ = templ + regime.t3cof * t3 + t4 * (regime.t4cof + t * regime.t5cof)

    nm = state.n0
    em = elements.eccentricity
    inclm = elements.inclination
    if isinstance(regime, DeepSpaceState):
        em, argpm, inclm, mm, nodem, nm = apply_secular(
            regime, t, em, argpm, inclm, mm, nodem, nm
        )

    if nm <= 0.0:
        raise _decayed(state, t, 2, f"mean motion {nm!r} rad/min not positive")
    if tempa <= 0.0:
        raise _decayed(state, t, 1, "drag polynomial collapsed the semi-major axis")

    am = (xke / nm) ** X2O3 * tempa * tempa
    nm = xke / am ** 1.5
    em = em - tempe
    if em >= 1.0 or em < MIN_MEAN_ECCENTRICITY:
        raise _decayed(state, t, 1, f"mean eccentricity {em!r} out of range")
    if em < ECCENTRICITY_FLOOR:
        em = ECCENTRICITY_FLOOR
    if am * (1.0 - em) < 1.0:
        perigee_km = am * (1.0 - em) * constants.radius_earth_km
        raise _decayed(state, t, 6, f"mean perigee {perigee_km:.1f} km below the surface")

    mm = mm + state.n0 * templ
    xlm = mm + argpm + nodem
    nodem = nodem % TWO_PI if nodem >= 0.0 else -(-nodem % TWO_PI)
    argpm = argpm % TWO_PI
    xlm = xlm % TWO_PI
    mm = (xlm - argpm - nodem) % TWO_PI

    mean_elements = MeanElements(
        semi_major_axis_km=am * constants.radius_earth_km,
        eccentricity=em,
        inclination=inclm,
        raan=nodem,
        argument_of_perigee=argpm,
        mean_anomaly=mm,
        mean_motion=nm,
    )

    # --- Lunar/solar periodics ---
    ep = em
    xincp = inclm
    argpp = argpm
    nodep = nodem
    mp = mm
    aycof = state.aycof
    xlcof = state.xlcof
    con41 = state.con41
    x1mth2 = state.x1mth2
    x7thm1 = state.x7thm1
    if isinstance(regime, DeepSpaceState):
        ep, xincp, nodep, argpp, mp = apply_periodics(regime, t, ep, xincp, nodep, argpp, mp)
        if xincp < 0.0:
            xincp = -xincp
            nodep = nodep + math.pi
            argpp = argpp - math.pi
        if ep < 0.0 or ep > 1.0:
            raise _decayed(state, t, 3, f"perturbed eccentricity {ep!r} out of range")

    sinip = math.sin(xincp)
    cosip = math.cos(xincp)
    if isinstance(regime, DeepSpaceState):
        j3oj2 = constants.j3oj2
        aycof = -0.5 * j3oj2 * sinip
        if abs(cosip + 1.0) > TEMP4:
            xlcof = -0.25 * j3oj2 * sinip * (3.0 + 5.0 * cosip) / (1.0 + cosip)
        else:
            xlcof = -0.25 * j3oj2 * sinip * (3.0 + 5.0 * cosip) / TEMP4
        cosisq = cosip * cosip
        con41 = 3.0 * cosisq - 1.0
        x1mth2 = 1.0 - cosisq
        x7thm1 = 7.0 * cosisq - 1.0

    # --- Long-period periodics ---
    axnl = ep * math.cos(argpp)
    temp = 1.0 / (am * (1.0 - ep * ep))
    aynl = ep * math.sin(argpp) + temp * aycof
    xl = mp + argpp + nodep + temp * xlcof * axnl

    # --- Kepler's equation ---
    u = (xl - nodep) % TWO_PI
    eo1, converged = solve_kepler_equinoctial(u, axnl, aynl)
    if not converged:
        logger.warning(
            "Kepler's equation did not converge for NORAD %d at %.3f min",
            elements.satellite_number,
            t,
        )
    sineo1 = math.sin(eo1)
    coseo1 = math.cos(eo1)

    # --- Short-period preliminaries ---
    ecose = axnl * coseo1 + aynl * sineo1
    esine = axnl * sineo1 - aynl * coseo1
    el2 = axnl * axnl + aynl * aynl
    pl = am * (1.0 - el2)
    if pl < 0.0:
        raise _decayed(state, t, 4, f"semi-latus rectum {pl!r} negative")

    rl = am * (1.0 - ecose)
    rdotl = math.sqrt(am) * esine / rl
    rvdotl = math.sqrt(pl) / rl
    betal = math.sqrt(1.0 - el2)
    temp = esine / (1.0 + betal)
    sinu = am / rl * (sineo1 - aynl - axnl * temp)
    cosu = am / rl * (coseo1 - axnl + aynl * temp)
    su = math.atan2(sinu, cosu)
    sin2u = (cosu + cosu) * sinu
    cos2u = 1.0 - 2.0 * sinu * sinu
    temp = 1.0 / pl
    temp1 = 0.5 * constants.j2 * temp
    temp2 = temp1 * temp

    # --- Short-period periodics ---
    mrt = rl * (1.0 - 1.5 * temp2 * betal * con41) + 0.5 * temp1 * x1mth2 * cos2u
    su = su - 0.25 * temp2 * x7thm1 * sin2u
    xnode = nodep + 1.5 * temp2 * cosip * sin2u
    xinc = xincp + 1.5 * temp2 * cosip * sinip * cos2u
    mvt = rdotl - nm * temp1 * x1mth2 * sin2u / xke
    rvdot = rvdotl + nm * temp1 * (x1mth2 * cos2u + 1.5 * con41) / xke

    if mrt < 1.0:
        radius_km = mrt * constants.radius_earth_km
        raise _decayed(state, t, 6, f"radius {radius_km:.1f} km below the surface")

    # --- Orientation vectors ---
    sinsu = math.sin(su)
    cossu = math.cos(su)
    snod = math.sin(xnode)
    cnod = math.cos(xnode)
    sini = math.sin(xinc)
    cosi = math.cos(xinc)
    xmx = -snod * cosi
    xmy = cnod * cosi
    ux = xmx * sinsu + cnod * cossu
    uy = xmy * sinsu + snod * cossu
    uz = sini * sinsu
    vx = xmx * cossu - cnod * sinsu
    vy = xmy * cossu - snod * sinsu
    vz = sini * cossu

    mr = mrt * constants.radius_earth_km
    vkmpersec = constants.radius_earth_km * xke / 60.0
    return PropagationResult(
        position_km=np.array([mr * ux, mr * uy, mr * uz], dtype=np.float64),
        velocity_km_s=np.array(
            [
                (mvt * ux + rvdot * vx) * vkmpersec,
                (mvt * uy + rvdot * vy) * vkmpersec,
                (mvt * uz + rvdot * vz) * vkmpersec,
            ],
            dtype=np.float64,
        ),
        minutes_since_epoch=t,
        mean_elements=mean_elements,
        kepler_converged=converged,
    )


def minutes_since_epoch(state: Sgp4InitState, time: datetime) -> float:
    """Minutes from the element epoch to a UTC datetime."""
    jd, fr = datetime_to_julian(time)
    return (jd - state.jd_epoch) * MINUTES_PER_DAY + (
        fr - state.jd_epoch_fraction
    ) * MINUTES_PER_DAY


def propagate_to_times(state: Sgp4InitState, times: list[datetime]) -> list[StateVector]:
    """Propagate a single satellite to multiple times.

    Args:
        state: Initialized SGP4 model.
        times: List of UTC datetimes to propagate to.

    Returns:
        List of StateVector objects, one per requested time.

    Raises:
        DecayedOrbitError: If propagation fails at any of the times.
    """
    norad_id = state.elements.satellite_number
    result = []

    for t in times:
        try:
            propagated = propagate(state, minutes_since_epoch(state, t))
        except PropagationError as exc:
            logger.warning("SGP4 propagation failed for NORAD %d at %s: %s", norad_id, t, exc)
            raise

        result.append(
            StateVector(
                position_km=propagated.position_km,
                velocity_km_s=propagated.velocity_km_s,
                epoch=t,
            )
        )

    logger.debug("Propagated NORAD %d to %d times", norad_id, len(times))
    return result


def propagate_batch(
    states: list[Sgp4InitState], time: datetime
) -> tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """Propagate many satellites to a single time.

    Failed propagations (decayed orbits) do not abort the batch; their rows
    are NaN and flagged in the mask.

    Args:
        states: Initialized SGP4 models.
        time: Single UTC datetime to propagate all objects to.

    Returns:
        Tuple of:
            - positions_velocities: Array of shape (n, 6) with [x,y,z,vx,vy,vz] in km, km/s
            - valid_mask: Boolean array of shape (n,) indicating which propagations succeeded
    """
    n = len(states)
    result = np.full((n, 6), np.nan, dtype=np.float64)
    valid_mask = np.zeros(n, dtype=np.bool_)

    for i, state in enumerate(states):
        try:
            propagated = propagate(state, minutes_since_epoch(state, time))
        except PropagationError as exc:
            logger.debug("Dropping NORAD %d from batch: %s", state.elements.satellite_number, exc)
            continue
        result[i, 0:3] = propagated.position_km
        result[i, 3:6] = propagated.velocity_km_s
        valid_mask[i] = True

    logger.debug("Batch propagated %d/%d objects to %s", int(valid_mask.sum()), n, time)
    return result, valid_mask


def _decayed(state: Sgp4InitState, t: float, code: int, reason: str) -> DecayedOrbitError:
    return DecayedOrbitError(
        f"NORAD {state.elements.satellite_number} decayed at {t:.3f} min: {reason}",
        code=code,
        minutes_since_epoch=t,
    )
