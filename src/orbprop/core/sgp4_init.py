"""SGP4 initialization: everything that depends only on the element set.

:func:`initialize` recovers the Brouwer mean motion from the TLE's Kozai
value, picks the atmospheric density parameter, computes the drag and
secular-rate coefficients and, for periods of 225 minutes or more, the
deep-space terms. The result is an immutable :class:`Sgp4InitState` that
any number of threads may propagate from.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Union

from orbprop.core.deep_space import DeepSpaceState, SecularRates, init_deep_space
from orbprop.core.errors import InvalidElementsError
from orbprop.core.tle import OrbitalElements
from orbprop.utils.constants import (
    DEEP_SPACE_PERIOD_MIN,
    DENSITY_Q0_KM,
    DENSITY_S_PARAM_KM,
    SIMPLIFIED_DRAG_PERIGEE_KM,
    TWO_PI,
    XPDOTP,
    WgsConstants,
)
from orbprop.utils.timescales import gstime

logger = logging.getLogger(__name__)

X2O3 = 2.0 / 3.0
TEMP4 = 1.5e-12
"""Floor for 1 + cos(i) in the long-period coefficient (i near 180 degrees)."""

HIGH_PERIGEE_KM = 156.0
LOW_PERIGEE_KM = 98.0
LOW_PERIGEE_S_KM = 20.0
MIN_ECCENTRICITY_FOR_DRAG_TERMS = 1.0e-4


@dataclass(frozen=True)
class NearEarthState:
    """Higher-order drag terms for orbits below 225 minutes.

    When ``simplified`` is set (perigee under 220 km) the drag polynomial
    is truncated after the ``c1`` term and every coefficient here is zero.
    """

    simplified: bool
    d2: float = 0.0
    d3: float = 0.0
    d4: float = 0.0
    t3cof: float = 0.0
    t4cof: float = 0.0
    t5cof: float = 0.0
    omgcof: float = 0.0
    xmcof: float = 0.0
    delmo: float = 0.0
    sinmao: float = 0.0


Regime = Union[NearEarthState, DeepSpaceState]


@dataclass(frozen=True)
class Sgp4InitState:
    """Initialized SGP4 model of one satellite.

    Distances are in Earth radii and times in minutes unless noted.

    Attributes:
        elements: Element set this state was built from.
        constants: Gravity model used throughout.
        jd_epoch: Julian date of the epoch at midnight.
        jd_epoch_fraction: Fraction of day of the epoch.
        n0: Brouwer mean motion in rad/min.
        a0: Brouwer semi-major axis in Earth radii.
        theta: cos(inclination).
        beta0: sqrt(1 - e²).
        eta: a0 * e / (a0 - s).
        s: Density function parameter in Earth radii (1 + height / Re).
        perigee_height_km: Perigee height above the equatorial radius.
        c1, c2, c3, c4, c5: Drag coefficients.
        mdot: Secular mean anomaly rate in rad/min.
        argpdot: Secular argument of perigee rate in rad/min.
        nodedot: Secular RAAN rate in rad/min.
        nodecf: Quadratic drag coefficient of the RAAN.
        t2cof: Quadratic drag coefficient of the mean longitude.
        con41: 3cos²i - 1.
        x1mth2: 1 - cos²i.
        x7thm1: 7cos²i - 1.
        xlcof: Long-period mean longitude coefficient (J3).
        aycof: Long-period e*sin(ω) coefficient (J3).
        regime: Near-earth drag terms or deep-space terms.
    """

    elements: OrbitalElements
    constants: WgsConstants
    jd_epoch: float
    jd_epoch_fraction: float
    n0: float
    a0: float
    theta: float
    beta0: float
    eta: float
    s: float
    perigee_height_km: float
    c1: float
    c2: float
    c3: float
    c4: float
    c5: float
    mdot: float
    argpdot: float
    nodedot: float
    nodecf: float
    t2cof: float
    con41: float
    x1mth2: float
    x7thm1: float
    xlcof: float
    aycof: float
    regime: Regime

    @property
    def deep_space(self) -> bool:
        return isinstance(self.regime, DeepSpaceState)

    @property
    def simplified(self) -> bool:
        """True when the truncated drag model applies (always for deep space)."""
        return self.deep_space or self.regime.simplified

    @property
    def d2(self) -> float:
        return self.regime.d2 if isinstance(self.regime, NearEarthState) else 0.0

    @property
    def d3(self) -> float:
        return self.regime.d3 if isinstance(self.regime, NearEarthState) else 0.0

    @property
    def d4(self) -> float:
        return self.regime.d4 if isinstance(self.regime, NearEarthState) else 0.0

    @property
    def period_minutes(self) -> float:
        """Anomalistic period from the Brouwer mean motion."""
        return TWO_PI / self.n0

    @property
    def semi_major_axis_km(self) -> float:
        return self.a0 * self.constants.radius_earth_km


def initialize(elements: OrbitalElements, constants: WgsConstants) -> Sgp4InitState:
    """Initialize SGP4 from an element set.

    Args:
        elements: Decoded orbital elements.
        constants: Gravity model, e.g. :data:`orbprop.utils.constants.WGS72`.

    Returns:
        The immutable propagation state.

    Raises:
        InvalidElementsError: If the eccentricity is outside [0, 1) or the
            Brouwer recovery degenerates. A perigee inside the Earth is
            accepted here and reported by the propagator as a decayed orbit.
    """
    ecco = elements.eccentricity
    inclo = elements.inclination
    argpo = elements.argument_of_perigee
    mo = elements.mean_anomaly
    bstar = elements.bstar
    re = constants.radius_earth_km
    xke = constants.xke
    j2 = constants.j2

    if not 0.0 <= ecco < 1.0:
        raise InvalidElementsError(f"Eccentricity {ecco!r} outside [0, 1)")

    # --- Recover Brouwer mean motion from the Kozai value ---
    no_kozai = elements.mean_motion / XPDOTP
    eccsq = ecco * ecco
    omeosq = 1.0 - eccsq
    rteosq = math.sqrt(omeosq)
    cosio = math.cos(inclo)
    cosio2 = cosio * cosio

    ak = (xke / no_kozai) ** X2O3
    d1 = 0.75 * j2 * (3.0 * cosio2 - 1.0) / (rteosq * omeosq)
    delta = d1 / (ak * ak)
    adel = ak * (1.0 - delta * delta - delta * (1.0 / 3.0 + 134.0 * delta * delta / 81.0))
    delta = d1 / (adel * adel)
    no = no_kozai / (1.0 + delta)
    if not (math.isfinite(no) and no > 0.0):
        raise InvalidElementsError(
            f"Brouwer mean motion {no!r} not positive for satellite {elements.satellite_number}"
        )
    ao = (xke / no) ** X2O3
    if not (math.isfinite(ao) and ao > 0.0):
        raise InvalidElementsError(
            f"Semi-major axis {ao!r} not positive for satellite {elements.satellite_number}"
        )

    sinio = math.sin(inclo)
    po = ao * omeosq
    con42 = 1.0 - 5.0 * cosio2
    con41 = -con42 - cosio2 - cosio2
    posq = po * po
    rp = ao * (1.0 - ecco)

    jd_epoch, jd_fraction = elements.epoch_julian
    gsto = gstime(jd_epoch + jd_fraction)

    # --- Atmospheric density parameter ---
    perigee_km = (rp - 1.0) * re
    s_height = DENSITY_S_PARAM_KM
    if perigee_km < HIGH_PERIGEE_KM:
        s_height = perigee_km - DENSITY_S_PARAM_KM
        if perigee_km < LOW_PERIGEE_KM:
            s_height = LOW_PERIGEE_S_KM
    qzms24 = ((DENSITY_Q0_KM - s_height) / re) ** 4
    sfour = s_height / re + 1.0

    # --- Drag coefficients ---
    pinvsq = 1.0 / posq
    tsi = 1.0 / (ao - sfour)
    eta = ao * ecco * tsi
    etasq = eta * eta
    eeta = ecco * eta
    psisq = abs(1.0 - etasq)
    coef = qzms24 * tsi ** 4
    coef1 = coef / psisq ** 3.5
    cc2 = coef1 * no * (
        ao * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
        + 0.375 * j2 * tsi / psisq * con41 * (8.0 + 3.0 * etasq * (8.0 + etasq))
    )
    cc1 = bstar * cc2
    cc3 = 0.0
    if ecco > MIN_ECCENTRICITY_FOR_DRAG_TERMS:
        cc3 = -2.0 * coef * tsi * constants.j3oj2 * no * sinio / ecco
    x1mth2 = 1.0 - cosio2
    cc4 = 2.0 * no * coef1 * ao * omeosq * (
        eta * (2.0 + 0.5 * etasq)
        + ecco * (0.5 + 2.0 * etasq)
        - j2 * tsi / (ao * psisq) * (
            -3.0 * con41 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
            + 0.75 * x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq)) * math.cos(2.0 * argpo)
        )
    )
    cc5 = 2.0 * coef1 * ao * omeosq * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)

    # --- Secular rates from J2 and J4 ---
    cosio4 = cosio2 * cosio2
    temp1 = 1.5 * j2 * pinvsq * no
    temp2 = 0.5 * temp1 * j2 * pinvsq
    temp3 = -0.46875 * constants.j4 * pinvsq * pinvsq * no
    mdot = (
        no
        + 0.5 * temp1 * rteosq * con41
        + 0.0625 * temp2 * rteosq * (13.0 - 78.0 * cosio2 + 137.0 * cosio4)
    )
    argpdot = (
        -0.5 * temp1 * con42
        + 0.0625 * temp2 * (7.0 - 114.0 * cosio2 + 395.0 * cosio4)
        + temp3 * (3.0 - 36.0 * cosio2 + 49.0 * cosio4)
    )
    xhdot1 = -temp1 * cosio
    nodedot = xhdot1 + (
        0.5 * temp2 * (4.0 - 19.0 * cosio2) + 2.0 * temp3 * (3.0 - 7.0 * cosio2)
    ) * cosio
    nodecf = 3.5 * omeosq * xhdot1 * cc1
    t2cof = 1.5 * cc1

    # --- Long-period (J3) coefficients ---
    if abs(cosio + 1.0) > TEMP4:
        xlcof = -0.25 * constants.j3oj2 * sinio * (3.0 + 5.0 * cosio) / (1.0 + cosio)
    else:
        xlcof = -0.25 * constants.j3oj2 * sinio * (3.0 + 5.0 * cosio) / TEMP4
    aycof = -0.5 * constants.j3oj2 * sinio
    x7thm1 = 7.0 * cosio2 - 1.0

    regime: Regime
    if TWO_PI / no >= DEEP_SPACE_PERIOD_MIN:
        rates = SecularRates(
            jd_epoch=jd_epoch + jd_fraction,
            gsto=gsto,
            n0=no,
            mdot=mdot,
            argpdot=argpdot,
            nodedot=nodedot,
        )
        regime = init_deep_space(elements, rates, constants)
    elif rp < SIMPLIFIED_DRAG_PERIGEE_KM / re + 1.0:
        regime = NearEarthState(simplified=True)
    else:
        cc1sq = cc1 * cc1
        d2 = 4.0 * ao * tsi * cc1sq
        temp = d2 * tsi * cc1 / 3.0
        d3 = (17.0 * ao + sfour) * temp
        d4 = 0.5 * temp * ao * tsi * (221.0 * ao + 31.0 * sfour) * cc1
        xmcof = 0.0
        if ecco > MIN_ECCENTRICITY_FOR_DRAG_TERMS:
            xmcof = -X2O3 * coef * bstar / eeta
        delmotemp = 1.0 + eta * math.cos(mo)
        delmo = delmotemp * delmotemp * delmotemp
        regime = NearEarthState(
            simplified=False,
            d2=d2,
            d3=d3,
            d4=d4,
            t3cof=d2 + 2.0 * cc1sq,
            t4cof=0.25 * (3.0 * d3 + cc1 * (12.0 * d2 + 10.0 * cc1sq)),
            t5cof=0.2 * (
                3.0 * d4 + 12.0 * cc1 * d3 + 6.0 * d2 * d2 + 15.0 * cc1sq * (2.0 * d2 + cc1sq)
            ),
            omgcof=bstar * cc3 * math.cos(argpo),
            xmcof=xmcof,
            delmo=delmo,
            sinmao=math.sin(mo),
        )

    state = Sgp4InitState(
        elements=elements,
        constants=constants,
        jd_epoch=jd_epoch,
        jd_epoch_fraction=jd_fraction,
        n0=no,
        a0=ao,
        theta=cosio,
        beta0=rteosq,
        eta=eta,
        s=sfour,
        perigee_height_km=perigee_km,
        c1=cc1,
        c2=cc2,
        c3=cc3,
        c4=cc4,
        c5=cc5,
        mdot=mdot,
        argpdot=argpdot,
        nodedot=nodedot,
        nodecf=nodecf,
        t2cof=t2cof,
        con41=con41,
        x1mth2=x1mth2,
        x7thm1=x7thm1,
        xlcof=xlcof,
        aycof=aycof,
        regime=regime,
    )
    logger.debug(
        "Initialized NORAD %d: %s, period %.1f min, perigee %.1f km",
        elements.satellite_number,
        "deep space" if state.deep_space else "near earth",
        state.period_minutes,
        perigee_km,
    )
    return state
