"""Resource metadata lookup module.

Looks up the display name of EC2 instances and the preferred maintenance
window of RDS and ElastiCache resources named by health events. Lookup
failures never abort the run: they are logged and an empty value is returned.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from .aws_client import AWSClientRegistry
from .error_handler import (
    AWSError, BaseApplicationError, ErrorHandler, ErrorSeverity, ResourceIdentifierError,
    get_error_handler, translate_aws_error
)


@dataclass(frozen=True)
class CacheResourceId:
    """ElastiCache node id as reported by AWS Health.

    Health reports cache nodes as ``<group>_<shard>/<group>-<shard>-<member>``
    style composites. The replication group is everything before the last two
    ``_``/``/`` delimited segments and the member is the 1-based number after
    the last ``-``.
    """
    raw: str
    replication_group_id: str
    member_index: int

    GROUP_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9-]*$')

    @classmethod
    def parse(cls, resource_id: str) -> 'CacheResourceId':
        """Parse and validate a cache resource id.

        Raises:
            ResourceIdentifierError: If the id does not have the expected structure
        """
        if not resource_id or not isinstance(resource_id, str):
            raise ResourceIdentifierError(str(resource_id), "empty resource id")

        segments = resource_id.replace('/', '_').split('_')
        if len(segments) < 3:
            raise ResourceIdentifierError(
                resource_id, "expected at least three '_' or '/' separated segments"
            )

        group_id = '_'.join(segments[:-2])
        if not cls.GROUP_PATTERN.match(group_id):
            raise ResourceIdentifierError(resource_id, f"invalid replication group name '{group_id}'")

        member = resource_id.rsplit('-', 1)[-1]
        if '-' not in resource_id or not member.isdigit() or int(member) < 1:
            raise ResourceIdentifierError(
                resource_id, f"member suffix '{member}' is not a positive number"
            )

        return cls(raw=resource_id, replication_group_id=group_id, member_index=int(member))


class ResourceEnricher:
    """Look up instance names and maintenance windows for affected resources."""

    NAME_TAG = 'Name'

    def __init__(self, registry: AWSClientRegistry, error_handler: Optional[ErrorHandler] = None):
        """Initialize the enricher.

        Args:
            registry: AWS client registry
            error_handler: Error handler for soft failures (defaults to the global one)
        """
        self.registry = registry
        self.error_handler = error_handler or get_error_handler()
        self.logger = logging.getLogger(__name__)

    def _soft_fail(self, error: BaseApplicationError, resource_id: str, region: str) -> str:
        # Enrichment is optional, the entry falls back to the raw event times
        error.severity = ErrorSeverity.MEDIUM
        self.error_handler.handle_error(error, {"resource_id": resource_id, "region": region})
        return ''

    def ec2_instance_name(self, instance_id: str, region: str) -> str:
        """Get the Name tag of an EC2 instance.

        Returns:
            Tag value, or an empty string when untagged or on lookup failure
        """
        try:
            response = self.registry.ec2(region).describe_instances(
                Filters=[{'Name': 'instance-id', 'Values': [instance_id]}]
            )
        except (ClientError, BotoCoreError) as e:
            return self._soft_fail(translate_aws_error(e, 'ec2', 'DescribeInstances', instance_id),
                                   instance_id, region)
        except BaseApplicationError as e:
            return self._soft_fail(e, instance_id, region)

        name = ''
        for reservation in response.get('Reservations', []):
            for instance in reservation.get('Instances', []):
                for tag in instance.get('Tags', []):
                    if tag.get('Key') == self.NAME_TAG:
                        name = tag.get('Value', '')
        return name

    def rds_maintenance_window(self, identifier: str, region: str) -> str:
        """Get the preferred maintenance window of an RDS cluster or instance.

        The cluster is checked first; instances are only looked up when no
        cluster with that identifier has a window.

        Returns:
            Window string, or an empty string on lookup failure
        """
        try:
            rds = self.registry.rds(region)
        except BaseApplicationError as e:
            return self._soft_fail(e, identifier, region)

        window = ''
        try:
            clusters = rds.describe_db_clusters(DBClusterIdentifier=identifier)
            for cluster in clusters.get('DBClusters', []):
                window = cluster.get('PreferredMaintenanceWindow', '') or window
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') != 'DBClusterNotFoundFault':
                return self._soft_fail(translate_aws_error(e, 'rds', 'DescribeDBClusters', identifier),
                                       identifier, region)
        except BotoCoreError as e:
            return self._soft_fail(translate_aws_error(e, 'rds', 'DescribeDBClusters', identifier),
                                   identifier, region)

        if window:
            return window

        try:
            instances = rds.describe_db_instances(DBInstanceIdentifier=identifier)
        except (ClientError, BotoCoreError) as e:
            return self._soft_fail(translate_aws_error(e, 'rds', 'DescribeDBInstances', identifier),
                                   identifier, region)

        for instance in instances.get('DBInstances', []):
            window = instance.get('PreferredMaintenanceWindow', '') or window
        return window

    def elasticache_maintenance_window(self, resource_id: str, region: str) -> str:
        """Get the preferred maintenance window of an ElastiCache node.

        Returns:
            Window string, or an empty string on malformed ids or lookup failure
        """
        try:
            cache_id = CacheResourceId.parse(resource_id)
            elasticache = self.registry.elasticache(region)
            cluster_id = self._member_cluster_id(elasticache, cache_id)
        except BaseApplicationError as e:
            return self._soft_fail(e, resource_id, region)

        try:
            response = elasticache.describe_cache_clusters(CacheClusterId=cluster_id)
        except (ClientError, BotoCoreError) as e:
            return self._soft_fail(translate_aws_error(e, 'elasticache', 'DescribeCacheClusters', cluster_id),
                                   resource_id, region)

        window = ''
        for cluster in response.get('CacheClusters', []):
            window = cluster.get('PreferredMaintenanceWindow', '') or window
        return window

    def _member_cluster_id(self, elasticache, cache_id: CacheResourceId) -> str:
        try:
            response = elasticache.describe_replication_groups(
                ReplicationGroupId=cache_id.replication_group_id
            )
        except (ClientError, BotoCoreError) as e:
            raise translate_aws_error(e, 'elasticache', 'DescribeReplicationGroups',
                                      cache_id.replication_group_id)

        groups = response.get('ReplicationGroups', [])
        if not groups:
            raise AWSError(f"Replication group not found: {cache_id.replication_group_id}",
                           service='elasticache', operation='DescribeReplicationGroups')

        members = groups[-1].get('MemberClusters', [])
        if cache_id.member_index > len(members):
            raise ResourceIdentifierError(
                cache_id.raw,
                f"member {cache_id.member_index} does not exist in replication group "
                f"{cache_id.replication_group_id} ({len(members)} members)"
            )
        return members[cache_id.member_index - 1]
