"""Solar geometry in degrees.

Declination and equation of time follow the NOAA solar calculator
(Meeus, Astronomical Algorithms), evaluated at a Julian day.
All angles in degrees unless otherwise noted.
"""

import math
from datetime import datetime as DateTime

UNIX_EPOCH_JD = 2440587.5
J2000_JD = 2451545.0
DAYS_PER_CENTURY = 36525.0
DEGREES_PER_HOUR = 15.0
HORIZON_ELEVATION = -5.0 / 6.0


def deg_to_rad(deg: float) -> float:
    """Convert degrees to radians."""
    return deg * (math.pi / 180.0)


def rad_to_deg(rad: float) -> float:
    """Convert radians to degrees."""
    return rad * (180.0 / math.pi)


def normalize_angle(angle: float) -> float:
    """Normalize angle to 0-360 degree range."""
    return angle % 360.0


def signed_angle(angle: float) -> float:
    """Normalize angle to the -180..180 degree range."""
    return (angle + 180.0) % 360.0 - 180.0


def sin(deg: float) -> float:
    return math.sin(deg_to_rad(deg))


def cos(deg: float) -> float:
    return math.cos(deg_to_rad(deg))


def tan(deg: float) -> float:
    return math.tan(deg_to_rad(deg))


def acot(value: float) -> float:
    """Inverse cotangent in degrees, in the -90..90 range."""
    return rad_to_deg(math.atan(1.0 / value))


def leap_year(year: int) -> bool:
    """Returns True if year is a leap year."""
    return (year % 400 == 0) or (year % 4 == 0 and year % 100 != 0)


def days_in_year(year: int) -> int:
    return 366 if leap_year(year) else 365


def julian_day(dt: DateTime) -> float:
    """Julian day of a timezone-aware datetime."""
    if dt.tzinfo is None:
        raise ValueError("dt must be timezone-aware")
    return dt.timestamp() / 86400.0 + UNIX_EPOCH_JD


def julian_century(jd: float) -> float:
    """Julian centuries since J2000.0."""
    return (jd - J2000_JD) / DAYS_PER_CENTURY


def _mean_longitude(t: float) -> float:
    return normalize_angle(280.46646 + t * (36000.76983 + 0.0003032 * t))


def _mean_anomaly(t: float) -> float:
    return 357.52911 + t * (35999.05029 - 0.0001537 * t)


def _orbit_eccentricity(t: float) -> float:
    return 0.016708634 - t * (0.000042037 + 0.0000001267 * t)


def _omega(t: float) -> float:
    return 125.04 - 1934.136 * t


def _obliquity(t: float) -> float:
    """Obliquity of the ecliptic corrected for nutation."""
    seconds = 21.448 - t * (46.815 + t * (0.00059 - t * 0.001813))
    mean = 23.0 + (26.0 + seconds / 60.0) / 60.0
    return mean + 0.00256 * cos(_omega(t))


def _apparent_longitude(t: float) -> float:
    m = _mean_anomaly(t)
    center = (
        sin(m) * (1.914602 - t * (0.004817 + 0.000014 * t))
        + sin(2 * m) * (0.019993 - 0.000101 * t)
        + sin(3 * m) * 0.000289
    )
    return _mean_longitude(t) + center - 0.00569 - 0.00478 * sin(_omega(t))


def solar_declination(jd: float) -> float:
    """Apparent solar declination in degrees.

    Ranges from about -23.44 (December solstice) to +23.44 (June solstice).
    """
    t = julian_century(jd)
    return rad_to_deg(math.asin(sin(_obliquity(t)) * sin(_apparent_longitude(t))))


def equation_of_time(jd: float) -> float:
    """Equation of time in minutes (apparent minus mean solar time)."""
    t = julian_century(jd)
    l0 = _mean_longitude(t)
    e = _orbit_eccentricity(t)
    m = _mean_anomaly(t)
    y = tan(_obliquity(t) / 2.0) ** 2
    eot = (
        y * sin(2 * l0)
        - 2 * e * sin(m)
        + 4 * e * y * sin(m) * cos(2 * l0)
        - 0.5 * y * y * sin(4 * l0)
        - 1.25 * e * e * sin(2 * m)
    )
    return 4.0 * rad_to_deg(eot)


def hour_angle(longitude: float, dt: DateTime) -> float:
    """Local hour angle of the sun at dt, in -180..180 degrees.

    At solar noon: h = 0 degrees.
    Morning: h < 0 (sun is east).
    Afternoon: h > 0 (sun is west).
    """
    jd = julian_day(dt)
    utc_hours = ((jd - UNIX_EPOCH_JD) % 1.0) * 24.0
    solar_time = utc_hours + longitude / DEGREES_PER_HOUR + equation_of_time(jd) / 60.0
    return signed_angle(DEGREES_PER_HOUR * (solar_time - 12.0))


def crossing_hour_angle(
    latitude: float, declination: float, elevation: float
) -> float | None:
    """Hour angle (0-180 degrees) at which the sun crosses elevation.

    Returns None when the sun stays entirely above or below that elevation.
    """
    denominator = cos(latitude) * cos(declination)
    if denominator == 0:
        return None
    cos_h = (sin(elevation) - sin(latitude) * sin(declination)) / denominator
    if cos_h < -1.0 or cos_h > 1.0:
        return None
    return rad_to_deg(math.acos(cos_h))


def horizon_elevation(elevation_m: float) -> float:
    """Apparent sunrise/sunset elevation for an observer elevation in meters.

    Accounts for refraction, the solar semi-diameter and the dip of the horizon.
    """
    return HORIZON_ELEVATION - 0.0347 * math.sqrt(max(elevation_m, 0.0))


def asr_elevation(coefficient: int, declination: float, latitude: float) -> float:
    """Sun elevation where an object's shadow equals coefficient times its
    length plus its noon shadow."""
    return acot(coefficient + tan(abs(declination - latitude)))
