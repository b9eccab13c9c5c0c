"""Calendar entry building module.

Turns health events into one CalendarEntry per affected resource. RDS and
ElastiCache entries are placed in the resource's own maintenance window;
the event start time only serves as the reference point for finding the
next occurrence of that window.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from .config import DEFAULT_DASHBOARD_URL
from .error_handler import BaseApplicationError, ErrorHandler, ErrorSeverity, get_error_handler
from .maintenance_window import maintenance_time
from .models import CalendarEntry, HealthEvent, ServiceKind
from .resource_enricher import ResourceEnricher


EVENT_TYPE_LABELS = {
    'AWS_EC2_INSTANCE_REBOOT_MAINTENANCE_SCHEDULED': 'REBOOT',
    'AWS_EC2_INSTANCE_POWER_MAINTENANCE_SCHEDULED': 'REBOOT',
    'AWS_EC2_SYSTEM_REBOOT_MAINTENANCE_SCHEDULED': 'REBOOT',
    'AWS_EC2_INSTANCE_RETIREMENT_SCHEDULED': 'RETIREMENT',
    'AWS_EC2_INSTANCE_NETWORK_MAINTENANCE_SCHEDULED': 'NET MAINT',
    'AWS_RDS_MAINTENANCE_SCHEDULED': 'MAINT SCHEDULED',
}


def event_type_label(event_type_code: str) -> str:
    """Short display label for a Health event type code; unknown codes pass through."""
    return EVENT_TYPE_LABELS.get(event_type_code, event_type_code)


class CalendarBuilder:
    """Build calendar entries from health events."""

    def __init__(self, enricher: ResourceEnricher,
                 dashboard_url: str = DEFAULT_DASHBOARD_URL,
                 legacy_same_day_check: bool = False,
                 error_handler: Optional[ErrorHandler] = None):
        """Initialize the builder.

        Args:
            enricher: Resource metadata lookup
            dashboard_url: URL attached to every entry
            legacy_same_day_check: Use the historical same-day window comparison
            error_handler: Error handler for unusable maintenance windows
        """
        self.enricher = enricher
        self.dashboard_url = dashboard_url
        self.legacy_same_day_check = legacy_same_day_check
        self.error_handler = error_handler or get_error_handler()
        self.logger = logging.getLogger(__name__)

    def build_entries(self, events: Iterable[HealthEvent]) -> List[CalendarEntry]:
        entries = []
        for event in events:
            entries.extend(self.build_event_entries(event))
        self.logger.info(f"Built {len(entries)} calendar entries")
        return entries

    def build_event_entries(self, event: HealthEvent) -> List[CalendarEntry]:
        """Build one entry per resource affected by the event."""
        label = event_type_label(event.event_type_code)
        entries = []

        for resource_id in event.affected_resource_ids:
            start, end = self._entry_times(event, resource_id)
            entries.append(CalendarEntry(
                uid=f"{event.arn}_{resource_id}",
                summary=self._summary(event, label, resource_id),
                description=event.description,
                location=event.region,
                url=self.dashboard_url,
                start=start,
                end=end
            ))

        return entries

    def _summary(self, event: HealthEvent, label: str, resource_id: str) -> str:
        if event.service is ServiceKind.COMPUTE:
            name = self.enricher.ec2_instance_name(resource_id, event.region)
            return f"{label} {name} {resource_id}"
        return f"{event.service_name} {resource_id} {label}"

    def _entry_times(self, event: HealthEvent, resource_id: str) -> Tuple:
        if event.service is ServiceKind.DATABASE:
            window = self.enricher.rds_maintenance_window(resource_id, event.region)
        elif event.service is ServiceKind.CACHE:
            window = self.enricher.elasticache_maintenance_window(resource_id, event.region)
        else:
            return event.start_time, event.end_time

        if not window:
            self.logger.warning(
                f"No maintenance window for {resource_id}, using event times of {event.arn}"
            )
            return event.start_time, event.end_time

        try:
            occurrence = maintenance_time(event.start_time, window, self.legacy_same_day_check)
        except BaseApplicationError as e:
            e.severity = ErrorSeverity.MEDIUM
            self.error_handler.handle_error(e, {"resource_id": resource_id, "event_arn": event.arn})
            return event.start_time, event.end_time

        return occurrence.start, occurrence.end
