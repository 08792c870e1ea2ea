"""Newton-Raphson solutions of Kepler's equation.

Two entry points share one iteration:

* :func:`solve_eccentric_anomaly` for the classical form
  ``E - e*sin(E) = M``;
* :func:`solve_kepler_equinoctial` for the form SGP4 uses after the
  long-period corrections, ``E - axN*sin(E) + ayN*cos(E) = U`` where
  ``E`` is the eccentric longitude.

Hitting the iteration cap is not an error: the last estimate is returned
with ``converged=False`` and the caller decides what to do with it.
"""

from __future__ import annotations

import math
from typing import NamedTuple

DEFAULT_TOLERANCE = 1e-12
DEFAULT_MAX_ITERATIONS = 10
MAX_STEP = 0.95
"""Largest Newton correction (radians) applied in one iteration."""

HIGH_ECCENTRICITY = 0.8
"""Eccentricity from which the classical solver starts off E = M."""


class KeplerSolution(NamedTuple):
    """Result of a Kepler solve.

    Attributes:
        eccentric_anomaly: Final estimate of E (or of the eccentric
            longitude for the equinoctial form), in radians.
        converged: Whether the last correction fell below the tolerance.
    """

    eccentric_anomaly: float
    converged: bool


def solve_eccentric_anomaly(
    mean_anomaly: float,
    eccentricity: float,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> KeplerSolution:
    """Solve ``E - e*sin(E) = M`` for the eccentric anomaly.

    Args:
        mean_anomaly: Mean anomaly M in radians.
        eccentricity: Eccentricity e, 0 <= e < 1.
        tolerance: Stop once ``|E_{k+1} - E_k|`` drops below this.
        max_iterations: Iteration cap.

    Returns:
        The eccentric anomaly and a convergence flag.
    """
    guess = mean_anomaly
    sin_m = math.sin(mean_anomaly)
    if eccentricity >= HIGH_ECCENTRICITY and sin_m != 0.0:
        # Danby's starter, the root lies on the side of M given by sin(M).
        # At sin(M) == 0 the root is M itself.
        guess = mean_anomaly + math.copysign(0.85 * eccentricity, sin_m)
    return _newton(mean_anomaly, eccentricity, 0.0, guess, tolerance, max_iterations)


def solve_kepler_equinoctial(
    u: float,
    axnl: float,
    aynl: float,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> KeplerSolution:
    """Solve ``E - axN*sin(E) + ayN*cos(E) = U`` for the eccentric longitude.

    Args:
        u: Mean longitude minus the node, wrapped to [0, 2*pi).
        axnl: e*cos(omega) after long-period corrections.
        aynl: e*sin(omega) after long-period corrections.
        tolerance: Stop once the correction drops below this.
        max_iterations: Iteration cap.
    """
    return _newton(u, axnl, aynl, u, tolerance, max_iterations)


def _newton(
    u: float,
    axnl: float,
    aynl: float,
    guess: float,
    tolerance: float,
    max_iterations: int,
) -> KeplerSolution:
    estimate = guess
    for _ in range(max_iterations):
        sin_e = math.sin(estimate)
        cos_e = math.cos(estimate)
        step = (u - aynl * cos_e + axnl * sin_e - estimate) / (1.0 - cos_e * axnl - sin_e * aynl)
        if abs(step) >= MAX_STEP:
            step = math.copysign(MAX_STEP, step)
        estimate += step
        if abs(step) < tolerance:
            return KeplerSolution(estimate, True)
    return KeplerSolution(estimate, False)
