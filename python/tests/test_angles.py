"""Solar geometry tests."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from prayer_schedule.angles import (
    acot,
    asr_elevation,
    crossing_hour_angle,
    days_in_year,
    deg_to_rad,
    equation_of_time,
    horizon_elevation,
    hour_angle,
    julian_century,
    julian_day,
    leap_year,
    normalize_angle,
    rad_to_deg,
    signed_angle,
    solar_declination,
)

UTC = timezone.utc


def jd(year, month, day, hour=12):
    return julian_day(datetime(year, month, day, hour, tzinfo=UTC))


class TestLeapYear:
    def test_common_years(self):
        assert not leap_year(2023)
        assert days_in_year(2023) == 365

    def test_leap_years(self):
        assert leap_year(2024)
        assert days_in_year(2024) == 366

    def test_century_leap_year_rules(self):
        assert leap_year(2000)  # divisible by 400
        assert not leap_year(1900)  # not leap (div by 100 not 400)


class TestNormalizeAngle:
    @pytest.mark.parametrize(
        "input_angle, expected",
        [
            (0.0, 0.0),
            (45.0, 45.0),
            (360.0, 0.0),
            (361.0, 1.0),
            (-1.0, 359.0),
            (-90.0, 270.0),
            (720.0, 0.0),
            (-450.0, 270.0),
        ],
    )
    def test_basic(self, input_angle, expected):
        assert normalize_angle(input_angle) == pytest.approx(expected, abs=1e-9)

    @pytest.mark.parametrize(
        "input_angle, expected",
        [
            (0.0, 0.0),
            (179.0, 179.0),
            (181.0, -179.0),
            (190.0, -170.0),
            (-190.0, 170.0),
            (360.0, 0.0),
            (540.0, -180.0),
        ],
    )
    def test_signed(self, input_angle, expected):
        assert signed_angle(input_angle) == pytest.approx(expected, abs=1e-9)


class TestConversions:
    def test_round_trip(self):
        for deg in (0.0, 45.0, 90.0, 180.0, -30.0):
            assert rad_to_deg(deg_to_rad(deg)) == pytest.approx(deg)

    def test_deg_to_rad(self):
        assert deg_to_rad(180.0) == pytest.approx(math.pi)

    def test_acot(self):
        assert acot(1.0) == pytest.approx(45.0)
        assert acot(2.0) == pytest.approx(26.5651, abs=1e-4)


class TestJulianDay:
    def test_j2000(self):
        assert jd(2000, 1, 1) == pytest.approx(2451545.0)
        assert julian_century(jd(2000, 1, 1)) == pytest.approx(0.0)

    def test_unix_epoch(self):
        assert julian_day(datetime(1970, 1, 1, tzinfo=UTC)) == pytest.approx(2440587.5)

    def test_offset_aware_input(self):
        local = datetime(2000, 1, 1, 19, tzinfo=timezone(timedelta(hours=7)))
        assert julian_day(local) == pytest.approx(2451545.0)

    def test_naive_rejected(self):
        with pytest.raises(ValueError):
            julian_day(datetime(2000, 1, 1, 12))


class TestSolarDeclination:
    def test_june_solstice(self):
        assert solar_declination(jd(2024, 6, 20, 21)) == pytest.approx(23.44, abs=0.05)

    def test_december_solstice(self):
        assert solar_declination(jd(2024, 12, 21, 9)) == pytest.approx(-23.44, abs=0.05)

    def test_march_equinox(self):
        assert solar_declination(jd(2024, 3, 20, 3)) == pytest.approx(0.0, abs=0.05)

    def test_bounded_all_year(self):
        start = jd(2024, 1, 1)
        for n in range(366):
            decl = solar_declination(start + n)
            assert -23.45 <= decl <= 23.45, f"Day {n}: {decl}"


class TestEquationOfTime:
    def test_february_minimum(self):
        assert equation_of_time(jd(2024, 2, 11)) == pytest.approx(-14.2, abs=0.3)

    def test_november_maximum(self):
        assert equation_of_time(jd(2024, 11, 3)) == pytest.approx(16.4, abs=0.3)

    def test_near_zero_mid_april(self):
        assert equation_of_time(jd(2024, 4, 15)) == pytest.approx(0.0, abs=0.5)


class TestHourAngle:
    def test_greenwich_noon_equinox(self):
        # equation of time is about -7.5 minutes, so the sun is still east
        h = hour_angle(0.0, datetime(2024, 3, 20, 12, tzinfo=UTC))
        assert h == pytest.approx(-1.85, abs=0.2)

    def test_longitude_shifts_by_fifteen_per_hour(self):
        t = datetime(2024, 3, 20, 12, tzinfo=UTC)
        assert hour_angle(15.0, t) - hour_angle(0.0, t) == pytest.approx(15.0)

    def test_wraps_to_signed_range(self):
        h = hour_angle(0.0, datetime(2024, 3, 20, 0, 5, tzinfo=UTC))
        assert -180.0 <= h <= 180.0
        assert abs(h) == pytest.approx(180.0, abs=3.0)


class TestCrossingHourAngle:
    def test_equator_equinox_horizon(self):
        assert crossing_hour_angle(0.0, 0.0, 0.0) == pytest.approx(90.0)

    def test_midnight_sun(self):
        assert crossing_hour_angle(70.0, 23.44, -0.8333) is None

    def test_polar_night(self):
        assert crossing_hour_angle(70.0, -23.44, -0.8333) is None

    def test_twilight_below_horizon_is_wider(self):
        horizon = crossing_hour_angle(45.0, 10.0, -0.8333)
        dawn = crossing_hour_angle(45.0, 10.0, -18.0)
        assert dawn > horizon

    def test_pole(self):
        assert crossing_hour_angle(90.0, 10.0, -0.8333) is None


class TestElevations:
    def test_sea_level_horizon(self):
        assert horizon_elevation(0.0) == pytest.approx(-0.8333, abs=1e-4)

    def test_elevated_observer_sees_lower(self):
        assert horizon_elevation(100.0) == pytest.approx(-0.8333 - 0.347, abs=1e-3)

    def test_negative_elevation_treated_as_sea_level(self):
        assert horizon_elevation(-10.0) == horizon_elevation(0.0)

    @pytest.mark.parametrize(
        "coefficient, expected",
        [(1, 45.0), (2, 26.5651)],
    )
    def test_asr_with_sun_overhead(self, coefficient, expected):
        assert asr_elevation(coefficient, 0.0, 0.0) == pytest.approx(expected, abs=1e-4)

    def test_hanafi_is_lower_than_shafii(self):
        assert asr_elevation(2, 10.0, 50.0) < asr_elevation(1, 10.0, 50.0)
