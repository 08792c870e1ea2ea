"""TLE (Two-Line Element) decoding and validation.

This module turns the fixed-width NORAD text format into validated
:class:`OrbitalElements` in canonical units (radians, rev/day). Decoding
either yields a fully populated record or raises :class:`MalformedTleError`.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, TypeVar, Union

from orbprop.core.errors import InvalidElementsError, MalformedTleError
from orbprop.utils.constants import MINUTES_PER_DAY
from orbprop.utils.timescales import epoch_to_datetime, epoch_to_julian, full_year

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69
MAX_NAME_LENGTH = 24

_T = TypeVar("_T")


@dataclass(frozen=True)
class OrbitalElements:
    """Mean orbital elements decoded from a TLE.

    Attributes:
        satellite_number: NORAD catalog number.
        classification: Security classification character ('U', 'C', 'S').
        international_designator: Launch year, number and piece, e.g. "98067A".
        epoch_year: Two-digit epoch year as printed in the TLE.
        epoch_day: Fractional day of year of the epoch (1.0 = Jan 1 00:00 UT).
        mean_motion: Kozai mean motion in rev/day.
        eccentricity: Eccentricity, 0 <= e < 1.
        inclination: Inclination in radians, within [0, pi].
        raan: Right ascension of the ascending node in radians.
        argument_of_perigee: Argument of perigee in radians.
        mean_anomaly: Mean anomaly in radians.
        bstar: BSTAR drag term in 1/Earth radii.
        first_deriv_mean_motion: First derivative of mean motion in rev/day².
        second_deriv_mean_motion: Second derivative of mean motion in rev/day³.
        ephemeris_type: Ephemeris type digit (0 for distributed element sets).
        element_set_number: Element set number.
        revolution_number: Revolution number at epoch.
        name: Satellite name from line 0, if any.
        line1: Raw TLE line 1, if decoded from text.
        line2: Raw TLE line 2, if decoded from text.
    """

    satellite_number: int
    classification: str
    international_designator: str
    epoch_year: int
    epoch_day: float
    mean_motion: float
    eccentricity: float
    inclination: float
    raan: float
    argument_of_perigee: float
    mean_anomaly: float
    bstar: float
    first_deriv_mean_motion: float = 0.0
    second_deriv_mean_motion: float = 0.0
    ephemeris_type: int = 0
    element_set_number: int = 0
    revolution_number: int = 0
    name: str = ""
    line1: str = field(default="", repr=False, compare=False)
    line2: str = field(default="", repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.eccentricity < 1.0:
            raise InvalidElementsError(
                f"Eccentricity {self.eccentricity!r} outside [0, 1) "
                f"for satellite {self.satellite_number}"
            )
        if not self.mean_motion > 0.0:
            raise InvalidElementsError(
                f"Mean motion {self.mean_motion!r} rev/day is not positive "
                f"for satellite {self.satellite_number}"
            )
        if not 0.0 <= self.inclination <= math.pi:
            raise InvalidElementsError(
                f"Inclination {self.inclination!r} rad outside [0, pi] "
                f"for satellite {self.satellite_number}"
            )

    @classmethod
    def from_lines(cls, line1: str, line2: str, name: str = "") -> OrbitalElements:
        """Decode a TLE from its two data lines.

        Args:
            line1: TLE line 1 (69 characters).
            line2: TLE line 2 (69 characters).
            name: Optional satellite name (line 0), with or without
                the leading ``"0 "``.

        Returns:
            The decoded elements.

        Raises:
            MalformedTleError: If a line has the wrong length or line
                number, a checksum does not match, the catalog numbers
                differ, a numeric field cannot be parsed, or the name is
                longer than 24 characters.
            InvalidElementsError: If the decoded values are physically
                out of range.
        """
        line1 = line1.strip()
        line2 = line2.strip()
        name = _clean_name(name)

        _check_line(line1, "1")
        _check_line(line2, "2")

        satellite_number = _field(line1, 2, 7, "satellite number", int)
        if _field(line2, 2, 7, "satellite number", int) != satellite_number:
            logger.error("Satellite number mismatch between TLE lines: %r / %r", line1, line2)
            raise MalformedTleError(
                f"Satellite number mismatch between lines: {line1[2:7]!r} != {line2[2:7]!r}"
            )

        elements = cls(
            satellite_number=satellite_number,
            classification=line1[7],
            international_designator=line1[9:17].strip(),
            epoch_year=_field(line1, 18, 20, "epoch year", int),
            epoch_day=_field(line1, 20, 32, "epoch day", float),
            first_deriv_mean_motion=_field(line1, 33, 43, "first derivative", float) * 2.0,
            second_deriv_mean_motion=_implied_decimal(line1, 44, 52, "second derivative") * 6.0,
            bstar=_implied_decimal(line1, 53, 61, "bstar"),
            ephemeris_type=_optional_int(line1, 62, 63, "ephemeris type"),
            element_set_number=_optional_int(line1, 64, 68, "element set number"),
            inclination=math.radians(_field(line2, 8, 16, "inclination", float)),
            raan=math.radians(_field(line2, 17, 25, "RAAN", float)),
            eccentricity=_eccentricity(line2),
            argument_of_perigee=math.radians(_field(line2, 34, 42, "argument of perigee", float)),
            mean_anomaly=math.radians(_field(line2, 43, 51, "mean anomaly", float)),
            mean_motion=_field(line2, 52, 63, "mean motion", float),
            revolution_number=_optional_int(line2, 63, 68, "revolution number"),
            name=name,
            line1=line1,
            line2=line2,
        )

        logger.debug(
            "Parsed TLE for NORAD %d (epoch %s)", satellite_number, elements.epoch.isoformat()
        )
        return elements

    @property
    def full_epoch_year(self) -> int:
        """Four-digit epoch year."""
        return full_year(self.epoch_year)

    @property
    def epoch(self) -> datetime:
        """Epoch as a UTC datetime."""
        return epoch_to_datetime(self.full_epoch_year, self.epoch_day)

    @property
    def epoch_julian(self) -> tuple[float, float]:
        """Epoch as a split Julian date (midnight, fraction of day)."""
        return epoch_to_julian(self.full_epoch_year, self.epoch_day)

    @property
    def period_minutes(self) -> float:
        """Orbital period from the Kozai mean motion, in minutes."""
        return MINUTES_PER_DAY / self.mean_motion

    @property
    def inclination_deg(self) -> float:
        return math.degrees(self.inclination)

    @property
    def raan_deg(self) -> float:
        return math.degrees(self.raan)

    @property
    def argument_of_perigee_deg(self) -> float:
        return math.degrees(self.argument_of_perigee)

    @property
    def mean_anomaly_deg(self) -> float:
        return math.degrees(self.mean_anomaly)

    def __str__(self) -> str:
        header = f"0 {self.name}\n" if self.name else ""
        return f"{header}{self.line1}\n{self.line2}"


def compute_checksum(line: str) -> int:
    """Compute the modulo-10 checksum of a TLE line.

    Digits count at face value, '-' counts as 1, everything else as 0.
    Only the first 68 columns take part.
    """
    total = 0
    for char in line[:TLE_LINE_LENGTH - 1]:
        if char.isdigit():
            total += int(char)
        elif char == "-":
            total += 1
    return total % 10


def verify_checksum(line: str) -> bool:
    """Check that column 69 of a TLE line matches its computed checksum."""
    line = line.strip()
    if len(line) != TLE_LINE_LENGTH or not line[-1].isdigit():
        return False
    return compute_checksum(line) == int(line[-1])


def parse_tle(text: str, *, skip_invalid: bool = False) -> list[OrbitalElements]:
    """Parse one or more TLEs from text.

    Handles both 2-line and 3-line (with name) formats.

    Args:
        text: Raw TLE text, one or more TLE sets separated by newlines.
        skip_invalid: Log and skip malformed records instead of raising.

    Returns:
        A list of decoded element sets, in input order.

    Raises:
        MalformedTleError: If a record is malformed and ``skip_invalid``
            is false.
        InvalidElementsError: If a record decodes to out-of-range values
            and ``skip_invalid`` is false.
    """
    lines = [l.rstrip() for l in text.strip().splitlines() if l.strip()]
    tles: list[OrbitalElements] = []
    i = 0

    while i < len(lines):
        if lines[i].startswith("1 ") and i + 1 < len(lines) and lines[i + 1].startswith("2 "):
            record = (lines[i], lines[i + 1], "")
            i += 2
        elif (
            not lines[i].startswith("1 ")
            and not lines[i].startswith("2 ")
            and i + 2 < len(lines)
            and lines[i + 1].startswith("1 ")
            and lines[i + 2].startswith("2 ")
        ):
            record = (lines[i + 1], lines[i + 2], lines[i])
            i += 3
        elif lines[i].startswith(("1 ", "2 ")):
            _reject(f"Orphan TLE line: {lines[i]!r}", skip_invalid)
            i += 1
            continue
        else:
            logger.debug("Skipping unrecognized line %r", lines[i])
            i += 1
            continue

        try:
            tles.append(OrbitalElements.from_lines(*record))
        except (MalformedTleError, InvalidElementsError) as exc:
            if not skip_invalid:
                raise
            logger.warning("Skipping invalid TLE record: %s", exc)

    logger.debug("Parsed %d TLEs from text", len(tles))
    return tles


def load_tle(path: Union[str, os.PathLike], *, skip_invalid: bool = False) -> list[OrbitalElements]:
    """Read and parse a TLE file (2-line or 3-line format).

    Raises:
        OSError: If the file cannot be read.
        MalformedTleError: See :func:`parse_tle`.
    """
    text = Path(path).read_text(encoding="utf-8")
    tles = parse_tle(text, skip_invalid=skip_invalid)
    logger.debug("Loaded %d TLEs from %s", len(tles), path)
    return tles


def _reject(message: str, skip_invalid: bool) -> None:
    if not skip_invalid:
        logger.error(message)
        raise MalformedTleError(message)
    logger.warning("%s (skipped)", message)


def _clean_name(name: str) -> str:
    name = name.strip()
    if name.startswith("0 "):
        name = name[2:].strip()
    if len(name) > MAX_NAME_LENGTH:
        logger.error("Invalid TLE name line: %r", name)
        raise MalformedTleError(f"TLE name longer than {MAX_NAME_LENGTH} characters: {name!r}")
    return name


def _check_line(line: str, number: str) -> None:
    if len(line) != TLE_LINE_LENGTH or not line.startswith(number + " "):
        logger.error("Invalid TLE line %s: %r", number, line)
        raise MalformedTleError(f"Invalid TLE line {number}: {line!r}")
    if not verify_checksum(line):
        logger.error("Checksum mismatch in TLE line %s: %r", number, line)
        raise MalformedTleError(
            f"Checksum mismatch in TLE line {number}: expected "
            f"{compute_checksum(line)}, found {line[-1]!r}"
        )


def _field(line: str, start: int, stop: int, label: str, convert: Callable[[str], _T]) -> _T:
    text = line[start:stop].strip()
    try:
        return convert(text)
    except ValueError:
        logger.error("Unparsable %s %r in TLE line %r", label, text, line)
        raise MalformedTleError(f"Unparsable {label}: {text!r}") from None


def _optional_int(line: str, start: int, stop: int, label: str) -> int:
    # Some producers leave these counters blank
    if not line[start:stop].strip():
        return 0
    return _field(line, start, stop, label, int)


def _eccentricity(line: str) -> float:
    digits = line[26:33]
    if not digits.isdigit():
        logger.error("Unparsable eccentricity %r in TLE line %r", digits, line)
        raise MalformedTleError(f"Unparsable eccentricity: {digits!r}")
    return float("0." + digits)


def _implied_decimal(line: str, start: int, stop: int, label: str) -> float:
    """Decode an assumed-decimal field such as ``-11606-4`` (-0.11606e-4)."""
    text = line[start:stop].strip()
    mantissa, exponent = text[:-2], text[-2:]
    sign = ""
    if mantissa and mantissa[0] in "+-":
        sign, mantissa = mantissa[0], mantissa[1:]
    try:
        if not mantissa.isdigit():
            raise ValueError(mantissa)
        return float(f"{sign}0.{mantissa}e{int(exponent)}")
    except ValueError:
        logger.error("Unparsable %s %r in TLE line %r", label, text, line)
        raise MalformedTleError(f"Unparsable {label}: {text!r}") from None
