"""AWS Health scheduled-change event fetching module."""

import logging
from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .aws_client import AWSClientRegistry
from .error_handler import (
    BaseApplicationError, EventDetailError, ErrorHandler, get_error_handler, translate_aws_error
)
from .models import EventFetchFailure, FetchResult, HealthEvent, ServiceKind


class HealthEventFetcher:
    """Read open and upcoming scheduled changes from AWS Health."""

    EVENT_FILTER = {
        'eventTypeCategories': ['scheduledChange'],
        'eventStatusCodes': ['open', 'upcoming'],
    }

    def __init__(self, registry: AWSClientRegistry, page_size: int = 100,
                 error_handler: Optional[ErrorHandler] = None):
        """Initialize the fetcher.

        Args:
            registry: AWS client registry
            page_size: Number of records requested per Health API page
            error_handler: Error handler for skipped events (defaults to the global one)
        """
        self.registry = registry
        self.page_size = page_size
        self.error_handler = error_handler or get_error_handler()
        self.logger = logging.getLogger(__name__)

    def list_events(self) -> List[Dict[str, Any]]:
        """List all open/upcoming scheduled-change events, following every page.

        Returns:
            Raw event records from describe_events

        Raises:
            AWSError: If the listing fails
        """
        self.logger.info("Getting health events...")
        try:
            paginator = self.registry.health().get_paginator('describe_events')
            events = []
            for page in paginator.paginate(filter=self.EVENT_FILTER,
                                           PaginationConfig={'PageSize': self.page_size}):
                events.extend(page.get('events', []))
        except (ClientError, BotoCoreError) as e:
            raise translate_aws_error(e, 'health', 'DescribeEvents')

        self.logger.info(f"Found {len(events)} scheduled change events")
        return events

    def affected_resource_ids(self, event_arn: str) -> List[str]:
        """Get the ids of every resource affected by an event.

        Args:
            event_arn: Health event ARN

        Returns:
            Entity values (instance ids, DB identifiers, cache node ids, ...)
        """
        try:
            paginator = self.registry.health().get_paginator('describe_affected_entities')
            resource_ids = []
            for page in paginator.paginate(filter={'eventArns': [event_arn]},
                                           PaginationConfig={'PageSize': self.page_size}):
                for entity in page.get('entities', []):
                    if entity.get('entityValue'):
                        resource_ids.append(entity['entityValue'])
            return resource_ids
        except (ClientError, BotoCoreError) as e:
            raise EventDetailError(event_arn, f"DescribeAffectedEntities failed: {e}", cause=e)

    def event_detail(self, event_arn: str) -> Dict[str, Any]:
        """Get the first successful detail record of an event.

        Args:
            event_arn: Health event ARN

        Returns:
            successfulSet entry with 'event' and 'eventDescription' keys

        Raises:
            EventDetailError: If the API call fails or returns no detail
        """
        try:
            response = self.registry.health().describe_event_details(eventArns=[event_arn])
        except (ClientError, BotoCoreError) as e:
            raise EventDetailError(event_arn, f"DescribeEventDetails failed: {e}", cause=e)

        successful = response.get('successfulSet', [])
        if not successful:
            failed = response.get('failedSet', [])
            reason = "no event detail returned"
            if failed:
                reason = f"{failed[0].get('errorName', 'Error')}: {failed[0].get('errorMessage', '')}"
            raise EventDetailError(event_arn, reason)

        return successful[0]

    def fetch_event(self, summary: Dict[str, Any]) -> HealthEvent:
        """Build a HealthEvent from a describe_events record.

        Raises:
            EventDetailError: If the event cannot be read completely
        """
        event_arn = summary['arn']
        resource_ids = self.affected_resource_ids(event_arn)
        detail = self.event_detail(event_arn)

        event = detail.get('event', {})
        start_time = event.get('startTime') or summary.get('startTime')
        if start_time is None:
            raise EventDetailError(event_arn, "event has no start time")

        service_name = event.get('service') or summary.get('service', '')

        return HealthEvent(
            arn=event_arn,
            service=ServiceKind.from_service_name(service_name),
            service_name=service_name,
            region=summary.get('region') or event.get('region', ''),
            event_type_code=event.get('eventTypeCode') or summary.get('eventTypeCode', ''),
            start_time=start_time,
            end_time=event.get('endTime') or summary.get('endTime'),
            description=detail.get('eventDescription', {}).get('latestDescription', ''),
            affected_resource_ids=tuple(resource_ids)
        )

    def fetch(self) -> FetchResult:
        """Fetch every event, skipping and recording the ones that cannot be read.

        Returns:
            FetchResult with the events read and the events skipped

        Raises:
            AWSError: If the primary event listing fails
        """
        result = FetchResult()

        for summary in self.list_events():
            event_arn = summary.get('arn', '')
            try:
                result.events.append(self.fetch_event(summary))
            except BaseApplicationError as e:
                self.error_handler.handle_error(e, {"event_arn": event_arn})
                result.failures.append(EventFetchFailure(event_arn=event_arn, reason=str(e)))

        self.logger.info(
            f"Fetched {len(result.events)} events, skipped {len(result.failures)}"
        )
        return result
