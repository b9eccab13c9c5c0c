"""Data model for health events, maintenance windows and calendar entries."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


class ServiceKind(Enum):
    """AWS services the calendar knows how to enrich"""
    COMPUTE = "EC2"
    DATABASE = "RDS"
    CACHE = "ELASTICACHE"
    OTHER = "OTHER"

    @classmethod
    def from_service_name(cls, service_name: Optional[str]) -> 'ServiceKind':
        """Map a Health API service string (e.g. 'EC2') to a ServiceKind."""
        normalized = (service_name or '').strip().upper()
        for kind in cls:
            if kind is not cls.OTHER and kind.value == normalized:
                return kind
        return cls.OTHER


@dataclass(frozen=True)
class HealthEvent:
    """A scheduled-change event reported by AWS Health."""
    arn: str
    service: ServiceKind
    service_name: str
    region: str
    event_type_code: str
    start_time: datetime
    end_time: Optional[datetime]
    description: str
    affected_resource_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MaintenanceWindow:
    """Weekly recurring maintenance window in UTC.

    Weekdays use ``datetime.weekday()`` numbering (Monday is 0).
    """
    start_weekday: int
    start_hour: int
    start_minute: int
    end_weekday: int
    end_hour: int
    end_minute: int

    @property
    def crosses_midnight(self) -> bool:
        return self.start_weekday != self.end_weekday


@dataclass(frozen=True)
class ResolvedOccurrence:
    """Concrete start/end of the next occurrence of a maintenance window."""
    start: datetime
    end: datetime


@dataclass(frozen=True)
class CalendarEntry:
    """One calendar event per (health event, affected resource) pair."""
    uid: str
    summary: str
    description: str
    location: str
    url: str
    start: datetime
    end: Optional[datetime]


@dataclass(frozen=True)
class EventFetchFailure:
    """A health event that was skipped because it could not be read."""
    event_arn: str
    reason: str


@dataclass
class FetchResult:
    """Events read from AWS Health together with the events that were skipped."""
    events: List[HealthEvent] = field(default_factory=list)
    failures: List[EventFetchFailure] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)
