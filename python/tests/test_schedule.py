from datetime import date, timedelta, timezone

import pytest

from prayer_schedule._types import AsrConvention, Config, TwilightConvention
from prayer_schedule.conventions import twilight_convention
from prayer_schedule.schedule import MARKERS, build_year, custom_events, is_complete

WIB = timezone(timedelta(hours=7))
CET = timezone(timedelta(hours=1))

JAKARTA = Config(
    latitude=-6.175,
    longitude=106.825,
    timezone=WIB,
    twilight=twilight_convention("mwl"),
)

TROMSO = Config(
    latitude=69.6827,
    longitude=18.9427,
    timezone=CET,
    twilight=twilight_convention("mwl"),
)


def present(schedule):
    return [t for t in (getattr(schedule, name) for name in MARKERS) if t is not None]


def by_date(schedules, day):
    return next(s for s in schedules if s.date == day)


class TestCustomEvents:
    def test_requested_events(self):
        names = [e.name for e in custom_events(JAKARTA)]
        assert names == ["fajr", "isha", "asr", "astronomical_dawn", "astronomical_dusk"]

    def test_twilight_elevations(self):
        events = {e.name: e for e in custom_events(JAKARTA)}
        assert events["fajr"].elevation(0.0) == -18.0
        assert events["isha"].elevation(0.0) == -17.0
        assert events["astronomical_dusk"].elevation(0.0) == -18.0
        assert events["fajr"].before_transit
        assert not events["isha"].before_transit


class TestJakartaYear:
    @pytest.fixture(scope="class")
    def year(self):
        return build_year(JAKARTA, 2024)

    def test_one_schedule_per_day(self, year):
        schedules, _ = year
        assert len(schedules) == 366
        assert schedules[0].date == date(2024, 1, 1)
        assert schedules[-1].date == date(2024, 12, 31)

    def test_no_abnormal_days(self, year):
        schedules, abnormal = year
        assert abnormal == 0
        assert all(s.is_normal for s in schedules)
        assert all(is_complete(s) for s in schedules)

    def test_markers_in_order(self, year):
        schedules, _ = year
        for s in schedules:
            assert s.fajr < s.sunrise < s.zuhr < s.asr < s.maghrib < s.isha, s.date

    def test_markers_on_their_own_date(self, year):
        schedules, _ = year
        for s in schedules:
            assert all(t.date() == s.date for t in present(s)), s.date

    def test_local_time_zone(self, year):
        schedules, _ = year
        assert schedules[0].zuhr.utcoffset() == timedelta(hours=7)

    def test_zuhr_near_noon(self, year):
        schedules, _ = year
        for s in schedules:
            minutes = s.zuhr.hour * 60 + s.zuhr.minute
            assert 11 * 60 + 35 <= minutes <= 12 * 60 + 10, s.date


class TestConventions:
    def test_hanafi_asr_is_later(self):
        hanafi = Config(
            latitude=JAKARTA.latitude,
            longitude=JAKARTA.longitude,
            timezone=WIB,
            asr_convention=AsrConvention.HANAFI,
        )
        shafii_year, _ = build_year(JAKARTA, 2024)
        hanafi_year, _ = build_year(hanafi, 2024)
        for s, h in zip(shafii_year[:30], hanafi_year[:30]):
            assert h.asr > s.asr

    def test_fixed_isha_delay(self):
        config = Config(
            latitude=21.4225,
            longitude=39.8262,
            timezone=timezone(timedelta(hours=3)),
            twilight=twilight_convention("umm_al_qura"),
        )
        schedules, _ = build_year(config, 2023)
        for s in schedules:
            assert s.isha - s.maghrib == timedelta(minutes=90)


class TestTromsoYear:
    @pytest.fixture(scope="class")
    def year(self):
        return build_year(TROMSO, 2024)

    def test_has_abnormal_days(self, year):
        _, abnormal = year
        assert abnormal > 100

    def test_midnight_sun(self, year):
        schedules, _ = year
        s = by_date(schedules, date(2024, 6, 21))
        assert not s.is_normal
        assert s.sunrise is None
        assert s.maghrib is None
        assert s.zuhr is not None

    def test_polar_night(self, year):
        schedules, _ = year
        s = by_date(schedules, date(2024, 12, 21))
        assert not s.is_normal
        assert s.sunrise is None
        assert s.maghrib is None

    def test_equinox_is_normal(self, year):
        schedules, _ = year
        s = by_date(schedules, date(2024, 3, 1))
        assert s.is_normal
        assert s.sunrise is not None

    def test_present_markers_in_order(self, year):
        schedules, _ = year
        for s in schedules:
            times = present(s)
            assert times == sorted(times), s.date

    def test_abnormal_count_matches_incomplete_days(self, year):
        schedules, abnormal = year
        assert abnormal == sum(1 for s in schedules if not is_complete(s))


class TestDateChaining:
    # Ten hours behind solar time: transit falls near 02:00, so the morning
    # events happen on the previous calendar evening.
    @pytest.fixture(scope="class")
    def year(self):
        config = Config(
            latitude=0.0,
            longitude=0.0,
            timezone=timezone(timedelta(hours=-10)),
            twilight=TwilightConvention(18.0, 18.0),
        )
        return build_year(config, 2023)

    def test_complete(self, year):
        schedules, abnormal = year
        assert abnormal == 0

    def test_morning_events_belong_to_next_day(self, year):
        schedules, _ = year
        for s in schedules:
            assert s.sunrise.date() == s.date - timedelta(days=1), s.date
            assert s.fajr < s.sunrise < s.zuhr, s.date

    def test_first_day_uses_padding(self, year):
        schedules, _ = year
        assert schedules[0].sunrise.date() == date(2022, 12, 31)

    def test_evening_events_stay(self, year):
        schedules, _ = year
        for s in schedules:
            assert s.zuhr < s.asr < s.maghrib < s.isha, s.date
