"""Maintenance window parsing and next-occurrence resolution.

RDS and ElastiCache report their preferred maintenance window as a weekly
recurring range in UTC, formatted ``ddd:hh24:mi-ddd:hh24:mi``
(for example ``sat:23:30-sun:01:00``).
"""

import re
from datetime import datetime, timedelta
from typing import Union

import pytz

from .error_handler import MaintenanceWindowFormatError, UnsupportedMaintenanceWindowError
from .models import MaintenanceWindow, ResolvedOccurrence


WEEKDAY_SHORTNAMES = {
    'mon': 0,
    'tue': 1,
    'wed': 2,
    'thu': 3,
    'fri': 4,
    'sat': 5,
    'sun': 6,
}

WINDOW_PATTERN = re.compile(
    r'^(?P<sw>[a-z]{3}):(?P<sh>\d{2}):(?P<sm>\d{2})-(?P<ew>[a-z]{3}):(?P<eh>\d{2}):(?P<em>\d{2})$'
)


def weekday_from_shortname(shortname: str) -> int:
    """Convert a 3-letter weekday abbreviation to ``datetime.weekday()`` numbering.

    Raises:
        MaintenanceWindowFormatError: If the abbreviation is unknown
    """
    try:
        return WEEKDAY_SHORTNAMES[shortname.lower()]
    except (KeyError, AttributeError):
        raise MaintenanceWindowFormatError(str(shortname), "unknown weekday")


def parse_maintenance_window(text: str) -> MaintenanceWindow:
    """Parse a ``ddd:hh24:mi-ddd:hh24:mi`` maintenance window string.

    Args:
        text: Maintenance window string as returned by RDS or ElastiCache

    Returns:
        Parsed MaintenanceWindow

    Raises:
        MaintenanceWindowFormatError: If the string is malformed
        UnsupportedMaintenanceWindowError: If the window lasts more than a day
    """
    if not isinstance(text, str):
        raise MaintenanceWindowFormatError(str(text), "not a string")

    match = WINDOW_PATTERN.match(text.strip().lower())
    if not match:
        raise MaintenanceWindowFormatError(text, "expected ddd:hh24:mi-ddd:hh24:mi")

    window = MaintenanceWindow(
        start_weekday=weekday_from_shortname(match.group('sw')),
        start_hour=int(match.group('sh')),
        start_minute=int(match.group('sm')),
        end_weekday=weekday_from_shortname(match.group('ew')),
        end_hour=int(match.group('eh')),
        end_minute=int(match.group('em')),
    )

    for hour, minute in ((window.start_hour, window.start_minute),
                         (window.end_hour, window.end_minute)):
        if hour > 23 or minute > 59:
            raise MaintenanceWindowFormatError(text, f"time out of range: {hour:02d}:{minute:02d}")

    # Only same-day windows and windows ending on the following weekday are representable.
    day_span = (window.end_weekday - window.start_weekday) % 7
    if day_span > 1:
        raise UnsupportedMaintenanceWindowError(text)
    if day_span == 0 and (window.end_hour, window.end_minute) < (window.start_hour, window.start_minute):
        raise UnsupportedMaintenanceWindowError(text)

    return window


def _to_utc(reference: datetime) -> datetime:
    if reference.tzinfo is None:
        return pytz.utc.localize(reference)
    return reference.astimezone(pytz.utc)


def _window_already_started(window: MaintenanceWindow, reference: datetime,
                            legacy_same_day_check: bool) -> bool:
    if legacy_same_day_check:
        # Historical rounding: both hour and minute had to be earlier.
        return window.start_hour < reference.hour and window.start_minute < reference.minute
    return (window.start_hour, window.start_minute) < (reference.hour, reference.minute)


def next_maintenance_window(reference: datetime, window: MaintenanceWindow,
                            legacy_same_day_check: bool = False) -> ResolvedOccurrence:
    """Compute the next occurrence of a weekly maintenance window.

    The occurrence starts on the first day on or after ``reference`` whose
    weekday matches the window start. When that day is the reference day
    itself and the window start time of day is already behind the reference
    time of day, the following week is used instead.

    Args:
        reference: Reference timestamp, normally the health event start time
        window: Parsed maintenance window
        legacy_same_day_check: Reproduce the historical same-day comparison
            that required both hour and minute to be earlier

    Returns:
        ResolvedOccurrence in UTC
    """
    reference = _to_utc(reference)

    days_ahead = (window.start_weekday - reference.weekday()) % 7
    if days_ahead == 0 and _window_already_started(window, reference, legacy_same_day_check):
        days_ahead = 7

    start_date = reference.date() + timedelta(days=days_ahead)
    start = pytz.utc.localize(datetime(start_date.year, start_date.month, start_date.day,
                                       window.start_hour, window.start_minute))

    end_date = start_date + timedelta(days=1) if window.crosses_midnight else start_date
    end = pytz.utc.localize(datetime(end_date.year, end_date.month, end_date.day,
                                     window.end_hour, window.end_minute))

    return ResolvedOccurrence(start=start, end=end)


def maintenance_time(reference: datetime, window: Union[str, MaintenanceWindow],
                     legacy_same_day_check: bool = False) -> ResolvedOccurrence:
    """Resolve a maintenance window string relative to a reference timestamp."""
    if not isinstance(window, MaintenanceWindow):
        window = parse_maintenance_window(window)
    return next_maintenance_window(reference, window, legacy_same_day_check)
