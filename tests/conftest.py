"""
Pytest configuration and shared fixtures for the test suite.
"""

import logging
import pytest
import tempfile
import shutil
from pathlib import Path
from datetime import datetime
from unittest.mock import Mock

import pytz
from botocore.exceptions import ClientError

from maintenance_calendar.aws_client import AWSClientRegistry
from maintenance_calendar.error_handler import ErrorHandler


EVENT_ARN_EC2 = "arn:aws:health:us-east-1::event/EC2/AWS_EC2_INSTANCE_RETIREMENT_SCHEDULED/AWS_EC2_INSTANCE_RETIREMENT_SCHEDULED_abc"
EVENT_ARN_RDS = "arn:aws:health:us-east-1::event/RDS/AWS_RDS_MAINTENANCE_SCHEDULED/AWS_RDS_MAINTENANCE_SCHEDULED_def"

# 2024-01-03 is a Wednesday
EVENT_START = pytz.utc.localize(datetime(2024, 1, 3, 10, 0))
EVENT_END = pytz.utc.localize(datetime(2024, 1, 3, 12, 0))


def client_error(code: str, operation: str = 'Operation', message: str = 'error') -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError({'Error': {'Code': code, 'Message': message}}, operation)


def event_summary(arn: str, service: str, event_type_code: str, region: str = 'us-east-1') -> dict:
    """describe_events record"""
    return {
        'arn': arn,
        'service': service,
        'eventTypeCode': event_type_code,
        'eventTypeCategory': 'scheduledChange',
        'region': region,
        'startTime': EVENT_START,
        'endTime': EVENT_END,
        'statusCode': 'upcoming',
    }


def event_detail(summary: dict, description: str = 'Scheduled maintenance') -> dict:
    """describe_event_details response for one event"""
    return {
        'successfulSet': [{
            'event': dict(summary),
            'eventDescription': {'latestDescription': description},
        }],
        'failedSet': [],
    }


def make_health_client(summaries, entities, details):
    """Mock AWS Health client.

    Args:
        summaries: Pages of describe_events records (list of lists)
        entities: Mapping of event ARN to entity values, a list of pages of
            entity values, or an exception
        details: Mapping of event ARN to describe_event_details response or exception
    """
    health = Mock()

    def get_paginator(name):
        paginator = Mock()
        if name == 'describe_events':
            paginator.paginate.return_value = [{'events': page} for page in summaries]
        elif name == 'describe_affected_entities':
            def paginate(filter, PaginationConfig=None):
                arn = filter['eventArns'][0]
                value = entities.get(arn, [])
                if isinstance(value, Exception):
                    raise value
                pages = value if value and isinstance(value[0], list) else [value]
                return [{'entities': [{'entityValue': v} for v in page]} for page in pages]
            paginator.paginate.side_effect = paginate
        return paginator

    def describe_event_details(eventArns):
        value = details[eventArns[0]]
        if isinstance(value, Exception):
            raise value
        return value

    health.get_paginator.side_effect = get_paginator
    health.describe_event_details.side_effect = describe_event_details
    return health


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def error_handler():
    """Fresh error handler so tests can inspect handled errors."""
    return ErrorHandler()


@pytest.fixture
def mock_registry():
    """Mock AWSClientRegistry with separate mocked service clients."""
    registry = Mock(spec=AWSClientRegistry)
    registry.region_name = 'us-east-1'
    registry.ec2_client = Mock()
    registry.rds_client = Mock()
    registry.elasticache_client = Mock()
    registry.ec2.return_value = registry.ec2_client
    registry.rds.return_value = registry.rds_client
    registry.elasticache.return_value = registry.elasticache_client
    return registry


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, temp_dir):
    """Setup test environment with temporary directories."""
    monkeypatch.setenv("HOME", str(temp_dir))
    monkeypatch.chdir(temp_dir)

    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("AWS_REGION", raising=False)
    monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)

    return temp_dir


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The CLI reconfigures the root logger; put the original handlers back."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
