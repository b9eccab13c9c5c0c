"""ICS file generation module.

- One VEVENT per calendar entry (UID, DTSTAMP, SUMMARY, DESCRIPTION,
  LOCATION, URL, DTSTART, DTEND)
- UTF-8 output, overwriting any existing file
"""

from icalendar import Calendar, Event
from datetime import datetime, timezone
from typing import Iterable
import logging

import pytz

from .models import CalendarEntry
from .security import SecureFileHandler, validate_file_path_input
from .error_handler import BaseApplicationError, ErrorCategory, ErrorSeverity, ValidationError


class ICSGenerationError(BaseApplicationError):
    """ICS generation error"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.FILE_SYSTEM,
            **kwargs
        )


class ICSGenerator:
    """Generate ICS files from maintenance calendar entries."""

    PRODID = '-//aws-health-calendar//Scheduled Maintenance 1.0//EN'

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.calendar = None
        self.create_calendar()

    def create_calendar(self) -> None:
        """Create an empty calendar with the required properties."""
        self.calendar = Calendar()
        self.calendar.add('prodid', self.PRODID)
        self.calendar.add('version', '2.0')
        self.calendar.add('X-WR-CALNAME', 'AWS Scheduled Maintenance')
        self.calendar.add('X-WR-TIMEZONE', 'UTC')

    def _as_utc(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return pytz.utc.localize(value)
        return value.astimezone(pytz.utc)

    def generate_entry_event(self, entry: CalendarEntry) -> Event:
        """Build a VEVENT for one calendar entry.

        Args:
            entry: Calendar entry

        Returns:
            icalendar Event
        """
        event = Event()
        event.add('uid', entry.uid)
        event.add('dtstamp', datetime.now(timezone.utc))
        event.add('summary', entry.summary)
        event.add('description', entry.description)
        event.add('location', entry.location)
        event.add('url', entry.url)
        event.add('dtstart', self._as_utc(entry.start))
        if entry.end is not None:
            event.add('dtend', self._as_utc(entry.end))
        return event

    def add_entries(self, entries: Iterable[CalendarEntry]) -> int:
        """Add entries to the calendar.

        Returns:
            Number of entries added
        """
        count = 0
        for entry in entries:
            self.calendar.add_component(self.generate_entry_event(entry))
            count += 1

        self.logger.info(f"Added {count} events to calendar")
        return count

    def generate_ics_content(self) -> str:
        """Serialize the calendar.

        Returns:
            ICS text

        Raises:
            ICSGenerationError: If serialization fails
        """
        try:
            return self.calendar.to_ical().decode('utf-8')
        except (UnicodeDecodeError, ValueError) as e:
            raise ICSGenerationError(f"Failed to serialize calendar: {e}", cause=e)

    def save_to_file(self, filepath: str) -> None:
        """Write the calendar to a file, replacing any existing file.

        Args:
            filepath: Output file path

        Raises:
            ICSGenerationError: File write error
            ValidationError: Invalid file path
        """
        validated_path = validate_file_path_input(filepath, allow_create=True)
        ics_content = self.generate_ics_content()

        try:
            SecureFileHandler.write_secure_file(
                validated_path,
                ics_content,
                permissions=SecureFileHandler.READABLE_FILE_PERMISSIONS
            )
        except ValidationError as e:
            raise ICSGenerationError(f"Failed to save calendar to {validated_path}: {e}",
                                     operation="save_calendar", cause=e)

        self.logger.info(f"Saved calendar to {validated_path}")
