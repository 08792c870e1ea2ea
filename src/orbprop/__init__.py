"""
orbprop — SGP4/SDP4 orbit propagation for Python.

Decodes NORAD two-line element sets and propagates them with the
SGP4 near-earth and SDP4 deep-space theories, producing TEME state
vectors. Deterministic and thread-safe: initialized states are
immutable and every propagation is a pure function of time.
"""

from __future__ import annotations

__version__ = "0.1.0"

from orbprop.core.errors import (
    DecayedOrbitError,
    InvalidElementsError,
    MalformedTleError,
    PropagationError,
    Sgp4Error,
)
from orbprop.core.tle import OrbitalElements, compute_checksum, load_tle, parse_tle, verify_checksum
from orbprop.core.kepler import KeplerSolution, solve_eccentric_anomaly
from orbprop.core.sgp4_init import Sgp4InitState, initialize
from orbprop.core.deep_space import DeepSpaceState, Resonance
from orbprop.core.propagation import (
    PropagationResult,
    StateVector,
    propagate,
    propagate_batch,
    propagate_to_times,
)
from orbprop.utils.constants import WGS72, WGS72OLD, WGS84, WgsConstants, gravity_model

__all__ = [
    "__version__",
    "Sgp4Error",
    "MalformedTleError",
    "InvalidElementsError",
    "PropagationError",
    "DecayedOrbitError",
    "OrbitalElements",
    "parse_tle",
    "load_tle",
    "compute_checksum",
    "verify_checksum",
    "KeplerSolution",
    "solve_eccentric_anomaly",
    "Sgp4InitState",
    "initialize",
    "DeepSpaceState",
    "Resonance",
    "PropagationResult",
    "StateVector",
    "propagate",
    "propagate_batch",
    "propagate_to_times",
    "WgsConstants",
    "WGS72",
    "WGS72OLD",
    "WGS84",
    "gravity_model",
]
