"""Print a week of prayer times for Jakarta and for Tromsø around midsummer."""

from datetime import date, timedelta, timezone

from prayer_schedule._types import Config, HighLatitudePolicy
from prayer_schedule.calculator import calculate
from prayer_schedule.conventions import twilight_convention


def show(title, config, year, start, days=7):
    schedules = calculate(config, year)
    first = (start - date(year, 1, 1)).days

    print(f"=== {title} ===")
    print(f"Location: ({config.latitude:.3f}, {config.longitude:.3f})")
    print(f"Policy: {config.high_latitude_policy}")
    print()
    print("Date        Fajr   Sunrise Zuhr   Asr    Maghrib Isha")
    for s in schedules[first : first + days]:
        cells = [
            t.strftime("%H:%M") if t is not None else "--:--"
            for t in (s.fajr, s.sunrise, s.zuhr, s.asr, s.maghrib, s.isha)
        ]
        print(f"{s.date}  {cells[0]}  {cells[1]}   {cells[2]}  {cells[3]}  {cells[4]}   {cells[5]}")
    print()


def main():
    year = 2024

    jakarta = Config(
        latitude=-6.175,
        longitude=106.825,
        timezone=timezone(timedelta(hours=7)),
        twilight=twilight_convention("kemenag"),
    )
    show("Jakarta (Kemenag)", jakarta, year, date(year, 3, 11))

    tromso = Config(
        latitude=69.6827,
        longitude=18.9427,
        timezone=timezone(timedelta(hours=2)),
        twilight=twilight_convention("mwl"),
        high_latitude_policy=HighLatitudePolicy.NEAREST_LATITUDE,
    )
    show("Tromsø (MWL, nearest latitude)", tromso, year, date(year, 6, 18))


if __name__ == "__main__":
    main()
