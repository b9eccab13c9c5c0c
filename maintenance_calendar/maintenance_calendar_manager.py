"""Scheduled maintenance calendar generation module."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .aws_client import AWSClientRegistry
from .calendar_builder import CalendarBuilder
from .config import Config, DEFAULT_DASHBOARD_URL
from .error_handler import ErrorHandler, IncompleteFetchError, get_error_handler
from .event_fetcher import HealthEventFetcher
from .ics_generator import ICSGenerator
from .logging_config import LoggingManager, get_logging_manager, log_function_call
from .models import CalendarEntry, EventFetchFailure
from .resource_enricher import ResourceEnricher


@dataclass
class GenerationSummary:
    """Outcome of one calendar generation run."""
    output_path: str
    event_count: int
    entry_count: int
    failures: List[EventFetchFailure] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)


class MaintenanceCalendarManager:
    """Fetch scheduled changes from AWS Health and write them as an ICS calendar."""

    def __init__(self, registry: AWSClientRegistry,
                 page_size: int = 100,
                 dashboard_url: str = DEFAULT_DASHBOARD_URL,
                 legacy_same_day_check: bool = False,
                 error_handler: Optional[ErrorHandler] = None,
                 logging_manager: Optional[LoggingManager] = None):
        """Initialize the manager.

        Args:
            registry: AWS client registry shared by every component
            page_size: Health API page size
            dashboard_url: URL attached to every calendar entry
            legacy_same_day_check: Use the historical same-day window comparison
            error_handler: Error handler (defaults to the global one)
            logging_manager: Logging manager used for operation monitoring
        """
        self.registry = registry
        self.error_handler = error_handler or get_error_handler()
        self.logging_manager = logging_manager or get_logging_manager()
        self.fetcher = HealthEventFetcher(registry, page_size=page_size,
                                          error_handler=self.error_handler)
        self.enricher = ResourceEnricher(registry, error_handler=self.error_handler)
        self.builder = CalendarBuilder(self.enricher,
                                       dashboard_url=dashboard_url,
                                       legacy_same_day_check=legacy_same_day_check,
                                       error_handler=self.error_handler)
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> 'MaintenanceCalendarManager':
        """Build a manager and its client registry from configuration."""
        aws_config = config.get_aws_config()
        calendar_config = config.get_calendar_config()

        registry = AWSClientRegistry(
            region_name=aws_config.get('region', 'us-east-1'),
            profile_name=aws_config.get('profile'),
            connect_timeout=aws_config.get('connect_timeout', 10),
            read_timeout=aws_config.get('read_timeout', 30),
            max_attempts=aws_config.get('max_attempts', 5)
        )
        return cls(
            registry,
            page_size=config.get('health.page_size', 100),
            dashboard_url=calendar_config.get('dashboard_url', DEFAULT_DASHBOARD_URL),
            legacy_same_day_check=calendar_config.get('legacy_same_day_check', False),
            **kwargs
        )

    @log_function_call(log_args=True)
    def generate(self, output_path: str, allow_partial: bool = True) -> GenerationSummary:
        """Run the whole pipeline and write the calendar file.

        Args:
            output_path: ICS file to create or overwrite
            allow_partial: Write the calendar even when some events were skipped

        Returns:
            GenerationSummary with counts and skipped events

        Raises:
            AWSError: If listing the health events fails
            IncompleteFetchError: If events were skipped and allow_partial is False
            ICSGenerationError: If the file cannot be written
        """
        with self.logging_manager.monitor_operation("fetch_health_events"):
            fetch_result = self.fetcher.fetch()

        if fetch_result.is_partial and not allow_partial:
            raise IncompleteFetchError([failure.event_arn for failure in fetch_result.failures])

        with self.logging_manager.monitor_operation("build_calendar_entries",
                                                    {"events": len(fetch_result.events)}):
            entries: List[CalendarEntry] = self.builder.build_entries(fetch_result.events)

        with self.logging_manager.monitor_operation("save_calendar", {"output": output_path}):
            generator = ICSGenerator()
            generator.add_entries(entries)
            generator.save_to_file(output_path)

        return GenerationSummary(
            output_path=output_path,
            event_count=len(fetch_result.events),
            entry_count=len(entries),
            failures=list(fetch_result.failures)
        )
