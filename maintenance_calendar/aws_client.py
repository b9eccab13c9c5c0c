"""AWS client registry module."""

import logging
from typing import Dict, Optional, Tuple

import boto3
import botocore.config
from botocore.exceptions import BotoCoreError

from .security import validate_region_input
from .error_handler import AWSError, ValidationError


class AWSClientRegistry:
    """Lazily created boto3 clients, one per (service, region).

    A single registry is built per run and handed to every component that
    talks to AWS, so the connection cache is explicit rather than global.
    """

    def __init__(self, region_name: str = 'us-east-1', profile_name: Optional[str] = None,
                 connect_timeout: float = 10, read_timeout: float = 30, max_attempts: int = 5,
                 session: Optional[boto3.Session] = None):
        """Initialize the registry.

        Args:
            region_name: Default AWS region (used for the Health API)
            profile_name: AWS profile name (optional)
            connect_timeout: Connect timeout in seconds for every remote call
            read_timeout: Read timeout in seconds for every remote call
            max_attempts: Total attempts per call with botocore standard retries
            session: Pre-built boto3 session (optional)
        """
        self.region_name = validate_region_input(region_name)
        self.profile_name = profile_name

        if max_attempts < 1:
            raise ValidationError("max_attempts must be at least 1", field="max_attempts", value=max_attempts)

        try:
            self.session = session or boto3.Session(profile_name=profile_name)
        except BotoCoreError as e:
            raise AWSError(f"Failed to create AWS session: {e}", operation="create_session", cause=e)

        self.client_config = botocore.config.Config(
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={'max_attempts': max_attempts, 'mode': 'standard'}
        )
        self._clients: Dict[Tuple[str, str], object] = {}
        self.logger = logging.getLogger(__name__)

    def client(self, service_name: str, region_name: Optional[str] = None):
        """Get (and cache) a boto3 client.

        Args:
            service_name: boto3 service name (e.g. 'ec2')
            region_name: Region, defaults to the registry region

        Returns:
            boto3 client for the service and region
        """
        region = validate_region_input(region_name) if region_name else self.region_name
        key = (service_name, region)

        if key not in self._clients:
            self.logger.debug(f"Creating {service_name} client for {region}")
            self._clients[key] = self.session.client(
                service_name,
                region_name=region,
                config=self.client_config
            )

        return self._clients[key]

    def health(self):
        return self.client('health')

    def ec2(self, region_name: str):
        return self.client('ec2', region_name)

    def rds(self, region_name: str):
        return self.client('rds', region_name)

    def elasticache(self, region_name: str):
        return self.client('elasticache', region_name)
