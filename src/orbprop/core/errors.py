"""Exception types raised by the decoder, initializer and propagator."""

from __future__ import annotations


class Sgp4Error(ValueError):
    """Base class for all orbprop errors."""


class MalformedTleError(Sgp4Error):
    """A TLE record could not be decoded (layout, checksum or numeric field)."""


class InvalidElementsError(Sgp4Error):
    """Orbital elements are outside the range SGP4 can initialize from."""


class PropagationError(Sgp4Error):
    """A single propagation call failed."""


class DecayedOrbitError(PropagationError):
    """The orbit has decayed or become hyperbolic at the requested time.

    Attributes:
        code: Classic SGP4 error number:
            1 mean eccentricity out of range or semi-major axis collapsed
            by drag,
            2 mean motion not positive,
            3 perturbed eccentricity out of range,
            4 semi-latus rectum negative,
            6 mean perigee or instantaneous radius below the Earth's
            surface.
        minutes_since_epoch: Time of the failed query.
    """

    def __init__(self, message: str, code: int, minutes_since_epoch: float) -> None:
        super().__init__(message)
        self.code = code
        self.minutes_since_epoch = minutes_since_epoch
