"""Epoch and sidereal-time conversions."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from sgp4.api import jday

from orbprop.utils.constants import TWO_PI


def full_year(two_digit_year: int) -> int:
    """Expand a TLE two-digit epoch year (57-99 -> 19xx, 00-56 -> 20xx)."""
    return two_digit_year + 2000 if two_digit_year < 57 else two_digit_year + 1900


def epoch_to_datetime(year: int, day_of_year: float) -> datetime:
    """Convert a TLE epoch (four-digit year, fractional day) to a UTC datetime."""
    return datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(days=day_of_year - 1)


def epoch_to_julian(year: int, day_of_year: float) -> tuple[float, float]:
    """Convert a TLE epoch to a split Julian date.

    Args:
        year: Four-digit year.
        day_of_year: Fractional day of year, 1.0 being Jan 1 00:00 UT.

    Returns:
        Tuple of (whole Julian date at midnight, fraction of day).
    """
    jd_jan1, _ = jday(year, 1, 1, 0, 0, 0.0)
    whole_days = math.floor(day_of_year)
    return jd_jan1 + whole_days - 1, day_of_year - whole_days


def datetime_to_julian(dt: datetime) -> tuple[float, float]:
    """Convert a datetime to a split Julian date (naive datetimes are taken as UTC)."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return jday(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second + dt.microsecond / 1e6)


def gstime(jd_ut1: float) -> float:
    """Greenwich mean sidereal time (IAU-82) in radians, in [0, 2π).

    Args:
        jd_ut1: Julian date on the UT1 scale.
    """
    tut1 = (jd_ut1 - 2451545.0) / 36525.0
    seconds = (
        -6.2e-6 * tut1 * tut1 * tut1
        + 0.093104 * tut1 * tut1
        + (876600.0 * 3600 + 8640184.812866) * tut1
        + 67310.54841
    )
    # 240 seconds of time per degree
    return (math.radians(seconds) / 240.0) % TWO_PI
