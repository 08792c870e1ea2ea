"""Deep-space (SDP4) lunar/solar and resonance perturbations.

Orbits with a period of 225 minutes or more pick up three extra effects:

* secular drift of e, i, Ω, ω and M from the Sun and the Moon;
* long-period lunar/solar periodics, evaluated from the bodies' mean
  anomalies at the query time;
* for 24-hour (synchronous) and 12-hour eccentric (Molniya-type) orbits,
  resonance with the Earth's tesseral harmonics, integrated numerically
  in 720-minute steps.

The resonance integrator always restarts from the epoch, so every query
is a pure function of the initial state and the elapsed time.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Union

from orbprop.core.tle import OrbitalElements
from orbprop.utils.constants import (
    EARTH_ROTATION_RAD_MIN,
    LUNAR_SOLAR_EPOCH_JD,
    TWO_PI,
    WgsConstants,
)

logger = logging.getLogger(__name__)

# --- Solar and lunar theory ---
ZNS = 1.19459e-5
"""Solar mean motion in rad/min."""
ZES = 0.01675
"""Solar eccentricity."""
C1SS = 2.9864797e-6
ZNL = 1.5835218e-4
"""Lunar mean motion in rad/min."""
ZEL = 0.05490
"""Lunar eccentricity."""
C1L = 4.7968065e-7

ZSINIS = 0.39785416
ZCOSIS = 0.91744867
ZCOSGS = 0.1945905
ZSINGS = -0.98088458

# Below ~3 degrees from the equator the node rate terms are dropped
NODE_RATE_INCLINATION_LIMIT = 5.2359877e-2

# Inclination (rad) below which periodics use the Lyddane formulation
LYDDANE_INCLINATION = 0.2

# --- Resonance ---
SYNCHRONOUS_MOTION_RANGE = (0.0034906585, 0.0052359877)
"""Open interval of Brouwer mean motion (rad/min) for 24-hour resonance."""
HALF_DAY_MOTION_RANGE = (8.26e-3, 9.24e-3)
"""Closed interval of Brouwer mean motion (rad/min) for 12-hour resonance."""
HALF_DAY_MIN_ECCENTRICITY = 0.5

STEP = 720.0
"""Resonance integrator step in minutes."""
STEP2 = STEP * STEP / 2.0

Q22 = 1.7891679e-6
Q31 = 2.1460748e-6
Q33 = 2.2123015e-7
ROOT22 = 1.7891679e-6
ROOT32 = 3.7393792e-7
ROOT44 = 7.3636953e-9
ROOT52 = 1.1428639e-7
ROOT54 = 2.1765803e-9

FASX2 = 0.13130908
FASX4 = 2.8843198
FASX6 = 0.37448087
G22 = 5.7686396
G32 = 0.95240898
G44 = 1.8014998
G52 = 1.0508330
G54 = 4.4108898


class Resonance(Enum):
    """Earth-resonance class of a deep-space orbit."""

    NONE = "none"
    SYNCHRONOUS = "synchronous"
    HALF_DAY = "half_day"


@dataclass(frozen=True)
class SecularRates:
    """Epoch quantities the deep-space setup needs from the initializer.

    Attributes:
        jd_epoch: Julian date of the element epoch.
        gsto: Greenwich sidereal time at epoch in radians.
        n0: Brouwer mean motion in rad/min.
        mdot: Secular mean anomaly rate in rad/min.
        argpdot: Secular argument of perigee rate in rad/min.
        nodedot: Secular RAAN rate in rad/min.
    """

    jd_epoch: float
    gsto: float
    n0: float
    mdot: float
    argpdot: float
    nodedot: float


@dataclass(frozen=True)
class LunarSolarTerms:
    """Long-period periodic coefficients from one perturbing body.

    Attributes:
        e2, e3: Eccentricity coefficients.
        i2, i3: Inclination coefficients.
        l2, l3, l4: Mean longitude coefficients.
        gh2, gh3, gh4: Argument of perigee coefficients.
        h2, h3: Node coefficients.
        zmo: Mean anomaly of the body at the element epoch.
        zn: Mean motion of the body in rad/min.
        ze: Eccentricity of the body's orbit.
    """

    e2: float
    e3: float
    i2: float
    i3: float
    l2: float
    l3: float
    l4: float
    gh2: float
    gh3: float
    gh4: float
    h2: float
    h3: float
    zmo: float
    zn: float
    ze: float

    def periodics(self, t: float) -> tuple[float, float, float, float, float]:
        """Periodic corrections (e, i, l, gh, h) at ``t`` minutes from epoch."""
        zm = self.zmo + self.zn * t
        zf = zm + 2.0 * self.ze * math.sin(zm)
        sinzf = math.sin(zf)
        f2 = 0.5 * sinzf * sinzf - 0.25
        f3 = -0.5 * sinzf * math.cos(zf)
        return (
            self.e2 * f2 + self.e3 * f3,
            self.i2 * f2 + self.i3 * f3,
            self.l2 * f2 + self.l3 * f3 + self.l4 * sinzf,
            self.gh2 * f2 + self.gh3 * f3 + self.gh4 * sinzf,
            self.h2 * f2 + self.h3 * f3,
        )


@dataclass(frozen=True)
class SynchronousResonance:
    """24-hour resonance terms and integrator seed.

    Attributes:
        del1, del2, del3: Resonance strength coefficients.
        xfact: Rate offset of the resonant angle.
        xlamo: Resonant angle at epoch.
        n0: Brouwer mean motion at epoch (integrator seed).
    """

    del1: float
    del2: float
    del3: float
    xfact: float
    xlamo: float
    n0: float

    kind = Resonance.SYNCHRONOUS

    def derivatives(self, xli: float, xni: float, atime: float) -> tuple[float, float, float]:
        xndt = (
            self.del1 * math.sin(xli - FASX2)
            + self.del2 * math.sin(2.0 * (xli - FASX4))
            + self.del3 * math.sin(3.0 * (xli - FASX6))
        )
        xldot = xni + self.xfact
        xnddt = (
            self.del1 * math.cos(xli - FASX2)
            + 2.0 * self.del2 * math.cos(2.0 * (xli - FASX4))
            + 3.0 * self.del3 * math.cos(3.0 * (xli - FASX6))
        ) * xldot
        return xndt, xldot, xnddt

    def mean_anomaly(self, xl: float, nodem: float, argpm: float, theta: float) -> float:
        return xl - nodem - argpm + theta


@dataclass(frozen=True)
class HalfDayResonance:
    """12-hour eccentric-orbit resonance terms and integrator seed.

    ``argpo`` and ``argpdot`` are carried because the resonant terms
    depend on the secularly advancing argument of perigee.
    """

    d2201: float
    d2211: float
    d3210: float
    d3222: float
    d4410: float
    d4422: float
    d5220: float
    d5232: float
    d5421: float
    d5433: float
    xfact: float
    xlamo: float
    n0: float
    argpo: float
    argpdot: float

    kind = Resonance.HALF_DAY

    def derivatives(self, xli: float, xni: float, atime: float) -> tuple[float, float, float]:
        xomi = self.argpo + self.argpdot * atime
        x2omi = xomi + xomi
        x2li = xli + xli
        xndt = (
            self.d2201 * math.sin(x2omi + xli - G22)
            + self.d2211 * math.sin(xli - G22)
            + self.d3210 * math.sin(xomi + xli - G32)
            + self.d3222 * math.sin(-xomi + xli - G32)
            + self.d4410 * math.sin(x2omi + x2li - G44)
            + self.d4422 * math.sin(x2li - G44)
            + self.d5220 * math.sin(xomi + xli - G52)
            + self.d5232 * math.sin(-xomi + xli - G52)
            + self.d5421 * math.sin(xomi + x2li - G54)
            + self.d5433 * math.sin(-xomi + x2li - G54)
        )
        xldot = xni + self.xfact
        xnddt = (
            self.d2201 * math.cos(x2omi + xli - G22)
            + self.d2211 * math.cos(xli - G22)
            + self.d3210 * math.cos(xomi + xli - G32)
            + self.d3222 * math.cos(-xomi + xli - G32)
            + self.d5220 * math.cos(xomi + xli - G52)
            + self.d5232 * math.cos(-xomi + xli - G52)
            + 2.0
            * (
                self.d4410 * math.cos(x2omi + x2li - G44)
                + self.d4422 * math.cos(x2li - G44)
                + self.d5421 * math.cos(xomi + x2li - G54)
                + self.d5433 * math.cos(-xomi + x2li - G54)
            )
        ) * xldot
        return xndt, xldot, xnddt

    def mean_anomaly(self, xl: float, nodem: float, argpm: float, theta: float) -> float:
        return xl - 2.0 * nodem + 2.0 * theta


ResonanceTerms = Union[SynchronousResonance, HalfDayResonance]


@dataclass(frozen=True)
class DeepSpaceState:
    """Deep-space terms fixed at initialization.

    Attributes:
        sun: Solar periodic coefficients.
        moon: Lunar periodic coefficients.
        dedt: Lunar/solar eccentricity rate per minute.
        didt: Inclination rate in rad/min.
        dmdt: Mean anomaly rate in rad/min.
        dnodt: RAAN rate in rad/min.
        domdt: Argument of perigee rate in rad/min.
        gsto: Greenwich sidereal time at epoch in radians.
        resonance: Resonance terms, or None for a non-resonant orbit.
    """

    sun: LunarSolarTerms
    moon: LunarSolarTerms
    dedt: float
    didt: float
    dmdt: float
    dnodt: float
    domdt: float
    gsto: float
    resonance: Optional[ResonanceTerms] = None

    @property
    def resonance_kind(self) -> Resonance:
        return Resonance.NONE if self.resonance is None else self.resonance.kind


class _Geometry(NamedTuple):
    sinim: float
    cosim: float
    sinomm: float
    cosomm: float
    em: float
    emsq: float
    betasq: float
    rtemsq: float
    xnoi: float


class _Expansion(NamedTuple):
    s1: float
    s2: float
    s3: float
    s4: float
    s5: float
    s6: float
    s7: float
    z1: float
    z2: float
    z3: float
    z11: float
    z12: float
    z13: float
    z21: float
    z22: float
    z23: float
    z31: float
    z32: float
    z33: float


def init_deep_space(
    elements: OrbitalElements,
    rates: SecularRates,
    constants: WgsConstants,
) -> DeepSpaceState:
    """Compute lunar/solar coefficients and resonance terms at epoch.

    Args:
        elements: Element set being initialized.
        rates: Epoch time, sidereal time and secular rates from the
            near-earth part of the initialization.
        constants: Gravity model.

    Returns:
        The deep-space state for the propagator.
    """
    inclination = elements.inclination
    eccentricity = elements.eccentricity
    sinim = math.sin(inclination)
    cosim = math.cos(inclination)
    emsq = eccentricity * eccentricity
    betasq = 1.0 - emsq
    geometry = _Geometry(
        sinim=sinim,
        cosim=cosim,
        sinomm=math.sin(elements.argument_of_perigee),
        cosomm=math.cos(elements.argument_of_perigee),
        em=eccentricity,
        emsq=emsq,
        betasq=betasq,
        rtemsq=math.sqrt(betasq),
        xnoi=1.0 / rates.n0,
    )
    snodm = math.sin(elements.raan)
    cnodm = math.cos(elements.raan)

    # Days since 1899 Dec 31 12:00 UT
    day = rates.jd_epoch - LUNAR_SOLAR_EPOCH_JD

    # Lunar node and perigee at epoch
    xnodce = (4.5236020 - 9.2422029e-4 * day) % TWO_PI
    stem = math.sin(xnodce)
    ctem = math.cos(xnodce)
    zcosil = 0.91375164 - 0.03568096 * ctem
    zsinil = math.sqrt(1.0 - zcosil * zcosil)
    zsinhl = 0.089683511 * stem / zsinil
    zcoshl = math.sqrt(1.0 - zsinhl * zsinhl)
    gam = 5.8351514 + 0.0019443680 * day
    zx = math.atan2(0.39785416 * stem / zsinil, zcoshl * ctem + 0.91744867 * zsinhl * stem)
    zx = gam + zx - xnodce

    solar = _expand(geometry, ZCOSGS, ZSINGS, ZCOSIS, ZSINIS, cnodm, snodm, C1SS)
    lunar = _expand(
        geometry,
        math.cos(zx),
        math.sin(zx),
        zcosil,
        zsinil,
        zcoshl * cnodm + zsinhl * snodm,
        snodm * zcoshl - cnodm * zsinhl,
        C1L,
    )

    zmol = (4.7199672 + 0.22997150 * day - gam) % TWO_PI
    zmos = (6.2565837 + 0.017201977 * day) % TWO_PI
    sun = _periodic_terms(solar, emsq, zmos, ZNS, ZES)
    moon = _periodic_terms(lunar, emsq, zmol, ZNL, ZEL)

    ses, sis, sls, sghs, shs = _secular_terms(solar, emsq, ZNS, inclination)
    sel, sil, sll, sghl, shll = _secular_terms(lunar, emsq, ZNL, inclination)
    if sinim != 0.0:
        shs = shs / sinim
    sgs = sghs - cosim * shs

    dedt = ses + sel
    didt = sis + sil
    dmdt = sls + sll
    domdt = sgs + sghl
    dnodt = shs
    if sinim != 0.0:
        domdt = domdt - cosim / sinim * shll
        dnodt = dnodt + shll / sinim

    resonance = _init_resonance(
        elements, rates, constants, geometry, dmdt=dmdt, domdt=domdt, dnodt=dnodt
    )

    state = DeepSpaceState(
        sun=sun,
        moon=moon,
        dedt=dedt,
        didt=didt,
        dmdt=dmdt,
        dnodt=dnodt,
        domdt=domdt,
        gsto=rates.gsto,
        resonance=resonance,
    )
    logger.debug(
        "Deep-space terms for NORAD %d: resonance %s",
        elements.satellite_number,
        state.resonance_kind.value,
    )
    return state


def apply_secular(
    state: DeepSpaceState,
    t: float,
    em: float,
    argpm: float,
    inclm: float,
    mm: float,
    nodem: float,
    nm: float,
) -> tuple[float, float, float, float, float, float]:
    """Add lunar/solar secular drift and resonance effects at time ``t``.

    The resonance integrator is restarted from epoch on every call.

    Args:
        state: Deep-space state from :func:`init_deep_space`.
        t: Minutes since epoch.
        em, argpm, inclm, mm, nodem: Mean elements after the
            near-earth secular update.
        nm: Brouwer mean motion in rad/min.

    Returns:
        Updated (em, argpm, inclm, mm, nodem, nm).
    """
    em = em + state.dedt * t
    inclm = inclm + state.didt * t
    argpm = argpm + state.domdt * t
    nodem = nodem + state.dnodt * t
    mm = mm + state.dmdt * t

    resonance = state.resonance
    if resonance is None:
        return em, argpm, inclm, mm, nodem, nm

    theta = (state.gsto + t * EARTH_ROTATION_RAD_MIN) % TWO_PI
    nm, xl = _integrate(resonance, t)
    mm = resonance.mean_anomaly(xl, nodem, argpm, theta)
    return em, argpm, inclm, mm, nodem, nm


def apply_periodics(
    state: DeepSpaceState,
    t: float,
    ep: float,
    inclp: float,
    nodep: float,
    argpp: float,
    mp: float,
) -> tuple[float, float, float, float, float]:
    """Add lunar/solar long-period periodics at time ``t``.

    Returns:
        Perturbed (ep, inclp, nodep, argpp, mp). The inclination may come
        out negative; the caller folds it back.
    """
    ses, sis, sls, sghs, shs = state.sun.periodics(t)
    sel, sil, sll, sghl, shll = state.moon.periodics(t)
    pe = ses + sel
    pinc = sis + sil
    pl = sls + sll
    pgh = sghs + sghl
    ph = shs + shll

    inclp = inclp + pinc
    ep = ep + pe
    sinip = math.sin(inclp)
    cosip = math.cos(inclp)

    if inclp >= LYDDANE_INCLINATION:
        ph = ph / sinip
        pgh = pgh - cosip * ph
        argpp = argpp + pgh
        nodep = nodep + ph
        mp = mp + pl
        return ep, inclp, nodep, argpp, mp

    # Lyddane: apply the node and perigee corrections in non-singular form
    sinop = math.sin(nodep)
    cosop = math.cos(nodep)
    alfdp = sinip * sinop + (ph * cosop + pinc * cosip * sinop)
    betdp = sinip * cosop + (-ph * sinop + pinc * cosip * cosop)
    nodep = math.fmod(nodep, TWO_PI)
    xls = mp + argpp + cosip * nodep
    dls = pl + pgh - pinc * nodep * sinip
    xls = xls + dls
    xnoh = nodep
    nodep = math.atan2(alfdp, betdp)
    if abs(xnoh - nodep) > math.pi:
        if nodep < xnoh:
            nodep = nodep + TWO_PI
        else:
            nodep = nodep - TWO_PI
    mp = mp + pl
    argpp = xls - mp - cosip * nodep
    return ep, inclp, nodep, argpp, mp


def _integrate(resonance: ResonanceTerms, t: float) -> tuple[float, float]:
    """Step the resonance equations from epoch to ``t``; returns (n, xl)."""
    delt = STEP if t > 0.0 else -STEP
    atime = 0.0
    xni = resonance.n0
    xli = resonance.xlamo
    while True:
        xndt, xldot, xnddt = resonance.derivatives(xli, xni, atime)
        if abs(t - atime) < STEP:
            break
        xli = xli + xldot * delt + xndt * STEP2
        xni = xni + xndt * delt + xnddt * STEP2
        atime = atime + delt

    ft = t - atime
    nm = xni + xndt * ft + xnddt * ft * ft * 0.5
    xl = xli + xldot * ft + xndt * ft * ft * 0.5
    return nm, xl


def _expand(
    g: _Geometry,
    zcosg: float,
    zsing: float,
    zcosi: float,
    zsini: float,
    zcosh: float,
    zsinh: float,
    cc: float,
) -> _Expansion:
    """Expansion coefficients of one body's disturbing function."""
    a1 = zcosg * zcosh + zsing * zcosi * zsinh
    a3 = -zsing * zcosh + zcosg * zcosi * zsinh
    a7 = -zcosg * zsinh + zsing * zcosi * zcosh
    a8 = zsing * zsini
    a9 = zsing * zsinh + zcosg * zcosi * zcosh
    a10 = zcosg * zsini
    a2 = g.cosim * a7 + g.sinim * a8
    a4 = g.cosim * a9 + g.sinim * a10
    a5 = -g.sinim * a7 + g.cosim * a8
    a6 = -g.sinim * a9 + g.cosim * a10

    x1 = a1 * g.cosomm + a2 * g.sinomm
    x2 = a3 * g.cosomm + a4 * g.sinomm
    x3 = -a1 * g.sinomm + a2 * g.cosomm
    x4 = -a3 * g.sinomm + a4 * g.cosomm
    x5 = a5 * g.sinomm
    x6 = a6 * g.sinomm
    x7 = a5 * g.cosomm
    x8 = a6 * g.cosomm

    emsq = g.emsq
    z31 = 12.0 * x1 * x1 - 3.0 * x3 * x3
    z32 = 24.0 * x1 * x2 - 6.0 * x3 * x4
    z33 = 12.0 * x2 * x2 - 3.0 * x4 * x4
    z1 = 3.0 * (a1 * a1 + a2 * a2) + z31 * emsq
    z2 = 6.0 * (a1 * a3 + a2 * a4) + z32 * emsq
    z3 = 3.0 * (a3 * a3 + a4 * a4) + z33 * emsq
    z11 = -6.0 * a1 * a5 + emsq * (-24.0 * x1 * x7 - 6.0 * x3 * x5)
    z12 = -6.0 * (a1 * a6 + a3 * a5) + emsq * (
        -24.0 * (x2 * x7 + x1 * x8) - 6.0 * (x3 * x6 + x4 * x5)
    )
    z13 = -6.0 * a3 * a6 + emsq * (-24.0 * x2 * x8 - 6.0 * x4 * x6)
    z21 = 6.0 * a2 * a5 + emsq * (24.0 * x1 * x5 - 6.0 * x3 * x7)
    z22 = 6.0 * (a4 * a5 + a2 * a6) + emsq * (
        24.0 * (x2 * x5 + x1 * x6) - 6.0 * (x4 * x7 + x3 * x8)
    )
    z23 = 6.0 * a4 * a6 + emsq * (24.0 * x2 * x6 - 6.0 * x4 * x8)
    z1 = z1 + z1 + g.betasq * z31
    z2 = z2 + z2 + g.betasq * z32
    z3 = z3 + z3 + g.betasq * z33

    s3 = cc * g.xnoi
    s2 = -0.5 * s3 / g.rtemsq
    s4 = s3 * g.rtemsq
    s1 = -15.0 * g.em * s4
    s5 = x1 * x3 + x2 * x4
    s6 = x2 * x3 + x1 * x4
    s7 = x2 * x4 - x1 * x3
    return _Expansion(
        s1, s2, s3, s4, s5, s6, s7,
        z1, z2, z3, z11, z12, z13, z21, z22, z23, z31, z32, z33,
    )


def _periodic_terms(
    x: _Expansion, emsq: float, zmo: float, zn: float, ze: float
) -> LunarSolarTerms:
    return LunarSolarTerms(
        e2=2.0 * x.s1 * x.s6,
        e3=2.0 * x.s1 * x.s7,
        i2=2.0 * x.s2 * x.z12,
        i3=2.0 * x.s2 * (x.z13 - x.z11),
        l2=-2.0 * x.s3 * x.z2,
        l3=-2.0 * x.s3 * (x.z3 - x.z1),
        l4=-2.0 * x.s3 * (-21.0 - 9.0 * emsq) * ze,
        gh2=2.0 * x.s4 * x.z32,
        gh3=2.0 * x.s4 * (x.z33 - x.z31),
        gh4=-18.0 * x.s4 * ze,
        h2=-2.0 * x.s2 * x.z22,
        h3=-2.0 * x.s2 * (x.z23 - x.z21),
        zmo=zmo,
        zn=zn,
        ze=ze,
    )


def _secular_terms(
    x: _Expansion, emsq: float, zn: float, inclination: float
) -> tuple[float, float, float, float, float]:
    """Secular rates (e, i, M, ω, Ω·sin i) contributed by one body."""
    dedt = x.s1 * zn * x.s5
    didt = x.s2 * zn * (x.z11 + x.z13)
    dmdt = -zn * x.s3 * (x.z1 + x.z3 - 14.0 - 6.0 * emsq)
    dgdt = x.s4 * zn * (x.z31 + x.z33 - 6.0)
    dhdt = -zn * x.s2 * (x.z21 + x.z23)
    if (
        inclination < NODE_RATE_INCLINATION_LIMIT
        or inclination > math.pi - NODE_RATE_INCLINATION_LIMIT
    ):
        dhdt = 0.0
    return dedt, didt, dmdt, dgdt, dhdt


def _init_resonance(
    elements: OrbitalElements,
    rates: SecularRates,
    constants: WgsConstants,
    g: _Geometry,
    *,
    dmdt: float,
    domdt: float,
    dnodt: float,
) -> Optional[ResonanceTerms]:
    nm = rates.n0
    em = elements.eccentricity
    low, high = SYNCHRONOUS_MOTION_RANGE
    synchronous = low < nm < high
    low, high = HALF_DAY_MOTION_RANGE
    half_day = low <= nm <= high and em >= HALF_DAY_MIN_ECCENTRICITY
    if not (synchronous or half_day):
        return None

    theta = rates.gsto % TWO_PI
    aonv = (nm / constants.xke) ** (2.0 / 3.0)
    sinim = g.sinim
    cosim = g.cosim

    if half_day:
        return _half_day_resonance(
            elements, rates, g, aonv, theta, dmdt=dmdt, dnodt=dnodt
        )

    emsq = g.emsq
    g200 = 1.0 + emsq * (-2.5 + 0.8125 * emsq)
    g310 = 1.0 + 2.0 * emsq
    g300 = 1.0 + emsq * (-6.0 + 6.60937 * emsq)
    f220 = 0.75 * (1.0 + cosim) * (1.0 + cosim)
    f311 = 0.9375 * sinim * sinim * (1.0 + 3.0 * cosim) - 0.75 * (1.0 + cosim)
    f330 = 1.0 + cosim
    f330 = 1.875 * f330 * f330 * f330
    del1 = 3.0 * nm * nm * aonv * aonv
    del2 = 2.0 * del1 * f220 * g200 * Q22
    del3 = 3.0 * del1 * f330 * g300 * Q33 * aonv
    del1 = del1 * f311 * g310 * Q31 * aonv
    xpidot = rates.argpdot + rates.nodedot
    return SynchronousResonance(
        del1=del1,
        del2=del2,
        del3=del3,
        xfact=rates.mdot + xpidot - EARTH_ROTATION_RAD_MIN + dmdt + domdt + dnodt - nm,
        xlamo=(elements.mean_anomaly + elements.raan + elements.argument_of_perigee - theta)
        % TWO_PI,
        n0=nm,
    )


def _half_day_resonance(
    elements: OrbitalElements,
    rates: SecularRates,
    g: _Geometry,
    aonv: float,
    theta: float,
    *,
    dmdt: float,
    dnodt: float,
) -> HalfDayResonance:
    nm = rates.n0
    em = g.em
    emsq = g.emsq
    sinim = g.sinim
    cosim = g.cosim
    cosisq = cosim * cosim
    eoc = em * emsq

    g201 = -0.306 - (em - 0.64) * 0.440
    if em <= 0.65:
        g211 = 3.616 - 13.2470 * em + 16.2900 * emsq
        g310 = -19.302 + 117.3900 * em - 228.4190 * emsq + 156.5910 * eoc
        g322 = -18.9068 + 109.7927 * em - 214.6334 * emsq + 146.5816 * eoc
        g410 = -41.122 + 242.6940 * em - 471.0940 * emsq + 313.9530 * eoc
        g422 = -146.407 + 841.8800 * em - 1629.014 * emsq + 1083.4350 * eoc
        g520 = -532.114 + 3017.977 * em - 5740.032 * emsq + 3708.2760 * eoc
    else:
        g211 = -72.099 + 331.819 * em - 508.738 * emsq + 266.724 * eoc
        g310 = -346.844 + 1582.851 * em - 2415.925 * emsq + 1246.113 * eoc
        g322 = -342.585 + 1554.908 * em - 2366.899 * emsq + 1215.972 * eoc
        g410 = -1052.797 + 4758.686 * em - 7193.992 * emsq + 3651.957 * eoc
        g422 = -3581.690 + 16178.110 * em - 24462.770 * emsq + 12422.520 * eoc
        if em > 0.715:
            g520 = -5149.66 + 29936.92 * em - 54087.36 * emsq + 31324.56 * eoc
        else:
            g520 = 1464.74 - 4664.75 * em + 3763.64 * emsq

    if em < 0.7:
        g533 = -919.22770 + 4988.6100 * em - 9064.7700 * emsq + 5542.21 * eoc
        g521 = -822.71072 + 4568.6173 * em - 8491.4146 * emsq + 5337.524 * eoc
        g532 = -853.66600 + 4690.2500 * em - 8624.7700 * emsq + 5341.4 * eoc
    else:
        g533 = -37995.780 + 161616.52 * em - 229838.20 * emsq + 109377.94 * eoc
        g521 = -51752.104 + 218913.95 * em - 309468.16 * emsq + 146349.42 * eoc
        g532 = -40023.880 + 170470.89 * em - 242699.48 * emsq + 115605.82 * eoc

    sini2 = sinim * sinim
    f220 = 0.75 * (1.0 + 2.0 * cosim + cosisq)
    f221 = 1.5 * sini2
    f321 = 1.875 * sinim * (1.0 - 2.0 * cosim - 3.0 * cosisq)
    f322 = -1.875 * sinim * (1.0 + 2.0 * cosim - 3.0 * cosisq)
    f441 = 35.0 * sini2 * f220
    f442 = 39.3750 * sini2 * sini2
    f522 = 9.84375 * sinim * (
        sini2 * (1.0 - 2.0 * cosim - 5.0 * cosisq)
        + 0.33333333 * (-2.0 + 4.0 * cosim + 6.0 * cosisq)
    )
    f523 = sinim * (
        4.92187512 * sini2 * (-2.0 - 4.0 * cosim + 10.0 * cosisq)
        + 6.56250012 * (1.0 + 2.0 * cosim - 3.0 * cosisq)
    )
    f542 = 29.53125 * sinim * (
        2.0 - 8.0 * cosim + cosisq * (-12.0 + 8.0 * cosim + 10.0 * cosisq)
    )
    f543 = 29.53125 * sinim * (
        -2.0 - 8.0 * cosim + cosisq * (12.0 + 8.0 * cosim - 10.0 * cosisq)
    )

    xno2 = nm * nm
    ainv2 = aonv * aonv
    temp1 = 3.0 * xno2 * ainv2
    temp = temp1 * ROOT22
    d2201 = temp * f220 * g201
    d2211 = temp * f221 * g211
    temp1 = temp1 * aonv
    temp = temp1 * ROOT32
    d3210 = temp * f321 * g310
    d3222 = temp * f322 * g322
    temp1 = temp1 * aonv
    temp = 2.0 * temp1 * ROOT44
    d4410 = temp * f441 * g410
    d4422 = temp * f442 * g422
    temp1 = temp1 * aonv
    temp = temp1 * ROOT52
    d5220 = temp * f522 * g520
    d5232 = temp * f523 * g532
    temp = 2.0 * temp1 * ROOT54
    d5421 = temp * f542 * g521
    d5433 = temp * f543 * g533

    return HalfDayResonance(
        d2201=d2201,
        d2211=d2211,
        d3210=d3210,
        d3222=d3222,
        d4410=d4410,
        d4422=d4422,
        d5220=d5220,
        d5232=d5232,
        d5421=d5421,
        d5433=d5433,
        xfact=rates.mdot + dmdt + 2.0 * (rates.nodedot + dnodt - EARTH_ROTATION_RAD_MIN) - nm,
        xlamo=(elements.mean_anomaly + elements.raan + elements.raan - theta - theta) % TWO_PI,
        n0=nm,
        argpo=elements.argument_of_perigee,
        argpdot=rates.argpdot,
    )
