"""Errors raised by the prayer schedule calculator."""


class PrayerScheduleError(Exception):
    """Base class for all library errors."""


class ConfigurationError(PrayerScheduleError, ValueError):
    """Configuration rejected before any per-day computation."""
